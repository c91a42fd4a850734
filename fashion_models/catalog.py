"""
Fashion model catalog: reads for selection, telemetry writes from the
try-on pipeline.

Counter increments use F() expressions; the derived fields (success rate,
average processing time, recent usage) are last-write-wins, which is
acceptable for selection analytics.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from .exceptions import FashionModelNotFound
from .models import FashionModel, FashionModelEvent
from .selection import ScoringWeights, rank_models

logger = logging.getLogger(__name__)


def _selection_config():
    return getattr(settings, 'FASHION_MODEL_SELECTION', {})


class FashionModelCatalog:

    def __init__(self, recent_window_days=None):
        if recent_window_days is None:
            recent_window_days = _selection_config().get('recent_usage_window_days', 7)
        self.recent_window = timedelta(days=recent_window_days)

    # ── Reads ───────────────────────────────────────────────

    def list_active(self):
        return list(FashionModel.objects.filter(is_active=True).order_by('sort_order', '-created_at'))

    def get(self, model_id, active_only=False):
        queryset = FashionModel.objects.all()
        if active_only:
            queryset = queryset.filter(is_active=True)
        try:
            return queryset.get(pk=model_id)
        except (FashionModel.DoesNotExist, ValidationError, ValueError):
            raise FashionModelNotFound(model_id, active_only=active_only)

    def search(self, gender=None, body_type=None, ethnicity=None, category=None,
               skin_tone=None, tags=None, is_active=None, is_featured=None):
        """Exact-match attribute search; ``tags`` matches models having any of them."""
        queryset = FashionModel.objects.all()
        for field, value in (('gender', gender), ('body_type', body_type), ('ethnicity', ethnicity),
                             ('category', category), ('skin_tone', skin_tone)):
            if value:
                queryset = queryset.filter(**{field: value.lower()})
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        if is_featured is not None:
            queryset = queryset.filter(is_featured=is_featured)

        models = list(queryset.order_by('sort_order', '-created_at'))
        if tags:
            wanted = {t.strip().lower() for t in tags if t and t.strip()}
            models = [m for m in models if wanted & {str(t).lower() for t in (m.tags or [])}]
        return models

    def recommend(self, garment_type, gender, limit=3, rng=None):
        weights = ScoringWeights.from_config(_selection_config().get('weights'))
        ranked = rank_models(self.list_active(), gender, garment_type, weights, rng)
        return [model for model, _ in ranked[:limit]]

    # ── Telemetry writes ────────────────────────────────────

    def record_usage(self, model_id):
        """Count one use of a model outside of a try-on attempt."""
        updated = FashionModel.objects.filter(pk=model_id).update(
            usage=F('usage') + 1,
            last_used_at=timezone.now(),
        )
        if not updated:
            raise FashionModelNotFound(model_id)
        logger.debug("Recorded usage for fashion model %s", model_id)

    def track_event(self, model_id, event_type, context=None):
        """Store an analytics event and bump the interaction counter."""
        updated = FashionModel.objects.filter(pk=model_id).update(
            total_interactions=F('total_interactions') + 1
        )
        if not updated:
            raise FashionModelNotFound(model_id)
        FashionModelEvent.objects.create(
            fashion_model_id=model_id,
            event_type=event_type,
            context=context or {},
        )
        logger.debug("Tracked %s event for fashion model %s", event_type, model_id)

    def record_outcome(self, model_id, succeeded, processing_time_ms):
        """
        Record one finished try-on attempt: usage, success tally, processing
        time sample and the recent-usage window.
        """
        processing_time_ms = max(0, int(processing_time_ms))
        now = timezone.now()
        updated = FashionModel.objects.filter(pk=model_id).update(
            usage=F('usage') + 1,
            tryon_attempts=F('tryon_attempts') + 1,
            tryon_successes=F('tryon_successes') + (1 if succeeded else 0),
            last_used_at=now,
        )
        if not updated:
            raise FashionModelNotFound(model_id)

        FashionModelEvent.objects.create(
            fashion_model_id=model_id,
            event_type='tryon_success' if succeeded else 'tryon_failure',
            processing_time_ms=processing_time_ms,
        )

        model = FashionModel.objects.get(pk=model_id)
        attempts = model.tryon_attempts
        model.success_rate = round(model.tryon_successes * 100 / attempts, 2) if attempts else 0
        previous_samples = attempts - 1
        model.average_processing_ms = int(
            (model.average_processing_ms * previous_samples + processing_time_ms) / attempts
        ) if attempts else processing_time_ms
        model.recent_usage = self._recent_tryon_count(model_id, now)
        model.save(update_fields=['success_rate', 'average_processing_ms', 'recent_usage', 'updated_at'])

        logger.info(
            "Updated fashion model %s metrics: success=%s time=%sms rate=%s%% attempts=%s",
            model_id, succeeded, processing_time_ms, model.success_rate, attempts
        )
        return model

    def refresh_recent_usage(self, model_id=None):
        """Recompute the recent-usage window; returns the number of models changed."""
        now = timezone.now()
        queryset = FashionModel.objects.all()
        if model_id is not None:
            queryset = queryset.filter(pk=model_id)

        changed = 0
        for model in queryset.only('id', 'recent_usage'):
            recent = self._recent_tryon_count(model.pk, now)
            if recent != model.recent_usage:
                FashionModel.objects.filter(pk=model.pk).update(recent_usage=recent)
                changed += 1
        logger.info("Refreshed recent usage window, %d models changed", changed)
        return changed

    def _recent_tryon_count(self, model_id, now):
        return FashionModelEvent.objects.filter(
            fashion_model_id=model_id,
            event_type__in=FashionModelEvent.TRYON_EVENTS,
            created_at__gte=now - self.recent_window,
        ).count()
