"""
Fallback tiers and try-on metrics.

A finished try-on settles into exactly one of three outcomes:

- ``Completed``: the provider produced an image.
- ``Degraded``: the attempt failed or timed out; the pre-try-on image
  (background-removed or original) is returned instead.
- ``Skipped``: no attempt was made (provider not configured, no fashion
  model, cancelled); the pre-try-on image is returned.

``outcome_to_response`` is the only place outcomes become API payloads.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from django.db import DatabaseError

from fashion_models.exceptions import FashionModelNotFound
from tryon.services.orchestrator import CANCELLED, COMPLETED, FAILED, TIMED_OUT

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = 'Virtual try-on completed successfully'


@dataclass(frozen=True)
class Completed:
    url: str
    message: str = SUCCESS_MESSAGE
    model_id: Optional[str] = None
    job_id: Optional[str] = None


@dataclass(frozen=True)
class Degraded:
    url: str
    reason: str
    message: str
    model_id: Optional[str] = None
    job_id: Optional[str] = None


@dataclass(frozen=True)
class Skipped:
    url: str
    reason: str
    message: str
    model_id: Optional[str] = None
    job_id: Optional[str] = None


TryOnOutcome = Union[Completed, Degraded, Skipped]


def failure_message(error: Optional[str], fallback_label: str) -> str:
    return f"Virtual try-on failed: {error or 'Unknown error'}. Using {fallback_label}."


def timeout_message(fallback_label: str) -> str:
    return f"Virtual try-on took too long. Using {fallback_label}."


def not_configured_message(fallback_label: str) -> str:
    return (
        f"Try-on provider API key not configured. Using {fallback_label} - "
        "configure FASHN_AI_API_KEY to enable virtual try-on."
    )


def no_models_message(fallback_label: str) -> str:
    return f"No active fashion models available; virtual try-on skipped. Using {fallback_label}."


def cancelled_message(fallback_label: str) -> str:
    return f"Virtual try-on was cancelled; virtual try-on skipped. Using {fallback_label}."


class OutcomeRecorder:
    """Turns a terminal TryOnJob into an outcome and records the model's metrics."""

    def __init__(self, catalog):
        self.catalog = catalog

    def settle(self, job, model, fallback_url: str, processing_time_ms: int,
               fallback_label: str = 'original image') -> TryOnOutcome:
        attempt = {
            'model_id': str(model.pk) if model is not None else None,
            'job_id': job.job_id,
        }

        if job.status == COMPLETED:
            self._record(model, True, processing_time_ms)
            return Completed(url=job.output_url, **attempt)

        if job.status == CANCELLED:
            return Skipped(url=fallback_url, reason='cancelled', message=cancelled_message(fallback_label), **attempt)

        if job.status == TIMED_OUT:
            logger.warning("Virtual try-on timed out after %sms, falling back to %s", processing_time_ms, fallback_label)
            self._record(model, False, processing_time_ms)
            return Degraded(url=fallback_url, reason='timed_out', message=timeout_message(fallback_label), **attempt)

        if job.status == FAILED:
            logger.error("Virtual try-on failed: %s", job.error)
            self._record(model, False, processing_time_ms)
            return Degraded(
                url=fallback_url, reason='failed', message=failure_message(job.error, fallback_label), **attempt
            )

        raise ValueError(f"Cannot settle a try-on job in state {job.status!r}")

    def _record(self, model, succeeded, processing_time_ms):
        if model is None:
            logger.info("No fashion model selected, skipping metrics")
            return
        try:
            self.catalog.record_outcome(model.pk, succeeded, processing_time_ms)
        except (FashionModelNotFound, DatabaseError) as e:
            logger.error("Failed to record try-on metrics for fashion model %s: %s", model.pk, e, exc_info=True)


def outcome_to_response(outcome: TryOnOutcome) -> dict:
    if isinstance(outcome, Completed):
        kind, reason = 'completed', None
    elif isinstance(outcome, Degraded):
        kind, reason = 'degraded', outcome.reason
    elif isinstance(outcome, Skipped):
        kind, reason = 'skipped', outcome.reason
    else:
        raise TypeError(f"Unknown try-on outcome: {outcome!r}")

    return {
        'success': True,
        'processedImageUrl': outcome.url,
        'message': outcome.message,
        'outcome': kind,
        'reason': reason,
    }
