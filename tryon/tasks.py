"""
Celery tasks for try-on operations
"""
import logging
import time

from celery import shared_task

from fashion_models.exceptions import FashionModelNotFound
from thrift_studio.websocket_utils import send_tryon_status_update

from .exceptions import InvalidEncoding
from .models import TryonRequest
from .services.container import get_services
from .services.outcome import Completed, Skipped, outcome_to_response
from .services.pipeline import TryOnRequest

logger = logging.getLogger(__name__)


class RecordCancelToken:
    """Cancelled once the TryonRequest record is marked 'cancelled'."""

    def __init__(self, tryon_request_id):
        self.tryon_request_id = tryon_request_id

    def is_cancelled(self):
        return TryonRequest.objects.filter(pk=self.tryon_request_id, status='cancelled').exists()


def _outcome_status(outcome):
    if isinstance(outcome, Completed):
        return 'completed'
    if isinstance(outcome, Skipped):
        return 'cancelled' if outcome.reason == 'cancelled' else 'skipped'
    return 'degraded'


def _mark_failed(tryon_request, error_msg):
    tryon_request.status = 'failed'
    tryon_request.error_message = error_msg[:500]
    tryon_request.save(update_fields=['status', 'error_message', 'updated_at'])
    send_tryon_status_update(
        user_id=tryon_request.user_id,
        tryon_request_id=tryon_request.id,
        status='failed',
        task_id=tryon_request.task_id,
        message=tryon_request.error_message,
    )


@shared_task(bind=True)
def run_tryon_async(self, tryon_request_id):
    """
    Run the try-on pipeline for a queued TryonRequest.

    Args:
        tryon_request_id: ID of TryonRequest

    Returns:
        dict with status, tryon_request_id and the try-on payload
    """
    logger.info("[CELERY] Starting try-on for request %s (task_id=%s)", tryon_request_id, self.request.id)

    try:
        tryon_request = TryonRequest.objects.get(id=tryon_request_id)
    except TryonRequest.DoesNotExist:
        logger.error("[CELERY] TryonRequest %s not found", tryon_request_id)
        raise

    if tryon_request.status == 'cancelled':
        logger.info("[CELERY] Request %s was cancelled before processing", tryon_request_id)
        return {'status': 'cancelled', 'tryon_request_id': tryon_request_id}

    tryon_request.status = 'processing'
    if not tryon_request.task_id and self.request.id:
        tryon_request.task_id = self.request.id
    tryon_request.save(update_fields=['status', 'task_id', 'updated_at'])
    send_tryon_status_update(
        user_id=tryon_request.user_id,
        tryon_request_id=tryon_request.id,
        status='processing',
        task_id=tryon_request.task_id,
    )
    logger.info("[CELERY] Updated request %s status to 'processing'", tryon_request_id)

    started = time.monotonic()
    try:
        outcome = get_services().pipeline.run(
            TryOnRequest(
                garment_image=tryon_request.garment_image_url,
                garment_category=tryon_request.garment_category,
                gender=tryon_request.gender,
                model_id=str(tryon_request.pinned_model_id) if tryon_request.pinned_model_id else None,
                remove_background=tryon_request.remove_background,
            ),
            cancel_token=RecordCancelToken(tryon_request.id),
        )
    except (FashionModelNotFound, InvalidEncoding) as e:
        logger.error("[CELERY] Try-on request %s rejected: %s", tryon_request_id, e)
        _mark_failed(tryon_request, str(e))
        return {'status': 'failed', 'tryon_request_id': tryon_request_id, 'error': str(e)}
    except Exception as e:
        logger.exception("[CELERY] Try-on failed for request %s: %s", tryon_request_id, e)
        _mark_failed(tryon_request, str(e))
        raise

    payload = outcome_to_response(outcome)
    tryon_request.status = _outcome_status(outcome)
    tryon_request.reason = payload['reason']
    tryon_request.processed_image_url = payload['processedImageUrl']
    tryon_request.message = payload['message']
    tryon_request.selected_model_id = outcome.model_id
    tryon_request.provider_job_id = outcome.job_id
    tryon_request.processing_time_ms = int((time.monotonic() - started) * 1000)
    tryon_request.save()

    logger.info(
        "[CELERY] Try-on request %s finished: status=%s reason=%s",
        tryon_request_id, tryon_request.status, tryon_request.reason
    )
    send_tryon_status_update(
        user_id=tryon_request.user_id,
        tryon_request_id=tryon_request.id,
        status=tryon_request.status,
        task_id=tryon_request.task_id,
        processed_image_url=tryon_request.processed_image_url,
        message=tryon_request.message,
    )

    return {
        'status': tryon_request.status,
        'tryon_request_id': tryon_request_id,
        **payload,
    }
