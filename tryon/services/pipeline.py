"""
End-to-end virtual try-on flow.

    garment ref -> [background removal] -> model selection (or pinned)
                -> image transfer -> orchestrator -> outcome recorder

Every provider-side problem ends in an outcome; only invalid caller input
(InvalidEncoding, an unknown pinned model) raises.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

from fashion_models.exceptions import FashionModelNotFound
from fashion_models.selection import DEFAULT_WEIGHTS, normalize_gender, select_model
from tryon.exceptions import BackgroundRemovalError, InvalidEncoding, StorageUploadError
from tryon.services.fashn_client import map_garment_to_provider_category
from tryon.services.orchestrator import FAILED, TryOnJob
from tryon.services.outcome import (
    Skipped,
    no_models_message,
    not_configured_message,
    outcome_to_response,
)

logger = logging.getLogger(__name__)

ORIGINAL_LABEL = 'original image'
BACKGROUND_REMOVED_LABEL = 'background-removed image'


@dataclass
class TryOnRequest:
    garment_image: str
    garment_category: str = ''
    gender: str = 'unisex'
    model_id: Optional[str] = None
    remove_background: bool = False


class TryOnPipeline:

    def __init__(self, catalog, image_transfer, orchestrator, recorder,
                 background_remover=None, provider_configured=True,
                 default_model_images=None, weights=DEFAULT_WEIGHTS,
                 rng: Optional[random.Random] = None, clock=time.monotonic):
        self.catalog = catalog
        self.image_transfer = image_transfer
        self.orchestrator = orchestrator
        self.recorder = recorder
        self.background_remover = background_remover
        self.provider_configured = provider_configured
        self.default_model_images = default_model_images or {}
        self.weights = weights
        self.rng = rng
        self.clock = clock

    def run(self, request: TryOnRequest, cancel_token=None):
        try:
            garment_url = self.image_transfer.ensure_url(request.garment_image, namespace='tryon/garments', prefix='garment')
        except StorageUploadError as e:
            logger.error("Could not host garment image: %s", e)
            return Skipped(
                url=request.garment_image,
                reason='storage_error',
                message=f"Virtual try-on skipped: {e}. Using {ORIGINAL_LABEL}.",
            )

        pre_tryon_url, label = self._pre_tryon_image(garment_url, request.remove_background)

        if not self.provider_configured:
            logger.warning("Try-on provider API key not configured, returning %s", label)
            return Skipped(url=pre_tryon_url, reason='not_configured', message=not_configured_message(label))

        model = select_model(
            self.catalog.list_active() if not request.model_id else [],
            request.gender,
            request.garment_category,
            pinned_model_id=request.model_id,
            catalog=self.catalog,
            weights=self.weights,
            rng=self.rng,
        )

        if model is None:
            model_image = self._default_model_image(request.gender)
            if not model_image:
                logger.warning("No active fashion models available, skipping virtual try-on")
                return Skipped(url=pre_tryon_url, reason='no_models', message=no_models_message(label))
            logger.info("No active fashion models, using default stock image %s", model_image)
        else:
            model_image = model.image_url
            logger.info("Selected fashion model: %s (%s, %s)", model.name, model.gender, model.category)
            self._track_ai_process(model, request)

        started = self.clock()
        try:
            model_url = self.image_transfer.ensure_url(model_image, namespace='tryon/models', prefix='model')
        except (StorageUploadError, InvalidEncoding) as e:
            logger.error("Could not host fashion model image: %s", e)
            job = TryOnJob(status=FAILED, error=str(e))
        else:
            job = self.orchestrator.run(
                pre_tryon_url,
                model_url,
                map_garment_to_provider_category(request.garment_category),
                cancel_token=cancel_token,
            )
        processing_time_ms = int((self.clock() - started) * 1000)

        return self.recorder.settle(job, model, pre_tryon_url, processing_time_ms, label)

    def _pre_tryon_image(self, garment_url, remove_background):
        if not remove_background:
            return garment_url, ORIGINAL_LABEL
        if self.background_remover is None or not self.background_remover.is_configured():
            logger.info("Background removal requested but not configured, using original image")
            return garment_url, ORIGINAL_LABEL

        try:
            image_bytes = self.background_remover.remove_background(garment_url)
            url, _ = self.image_transfer.upload_bytes(
                image_bytes, namespace='tryon/background-removed', prefix='bg_removed'
            )
        except (BackgroundRemovalError, StorageUploadError, InvalidEncoding) as e:
            logger.warning("Background removal failed, using original image: %s", e)
            return garment_url, ORIGINAL_LABEL
        return url, BACKGROUND_REMOVED_LABEL

    def _default_model_image(self, gender):
        target = normalize_gender(gender)
        return self.default_model_images.get(target) or self.default_model_images.get('unisex')

    def _track_ai_process(self, model, request):
        try:
            self.catalog.track_event(model.pk, 'ai_process', {
                'garment_category': request.garment_category,
                'gender': request.gender,
                'pinned': bool(request.model_id),
            })
        except FashionModelNotFound:
            logger.warning("Fashion model %s vanished before tracking", model.pk)


def run_try_on(garment_ref, garment_category, gender, model_id=None,
               remove_background=False, pipeline=None, cancel_token=None) -> dict:
    """Run one try-on synchronously and return the API payload."""
    if pipeline is None:
        from tryon.services.container import get_services
        pipeline = get_services().pipeline
    outcome = pipeline.run(
        TryOnRequest(
            garment_image=garment_ref,
            garment_category=garment_category,
            gender=gender,
            model_id=model_id,
            remove_background=remove_background,
        ),
        cancel_token=cancel_token,
    )
    return outcome_to_response(outcome)
