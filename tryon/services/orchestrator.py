"""
Try-On Job Orchestrator.

Submits a job to the provider and polls it to a terminal state:

    Submitted -> Polling -> Completed | Failed | TimedOut | Cancelled

Polling sleeps ``poll_interval`` before every status check, for at most
``max_attempts`` checks and ``timeout_seconds`` of wall-clock time. No
check starts once the deadline has passed and each one is given at most the
time left before it as its request timeout. A status check that fails at
the transport level consumes an attempt and the loop continues.
Provider-side failures never raise out of ``run``.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from tryon.exceptions import ProviderTransportError, SubmissionError

logger = logging.getLogger(__name__)

PENDING = 'pending'
COMPLETED = 'completed'
FAILED = 'failed'
TIMED_OUT = 'timed_out'
CANCELLED = 'cancelled'


@dataclass
class TryOnJob:
    job_id: Optional[str] = None
    status: str = PENDING
    output_url: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0


class CancelToken:
    """Cooperative cancellation flag checked before every poll."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()


def describe_provider_error(error) -> str:
    """The provider reports errors as a string or as a JSON object."""
    if not error:
        return 'Unknown error'
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        name = error.get('name')
        message = error.get('message')
        if message:
            return f"{name}: {message}" if name else str(message)
    return json.dumps(error, default=str)


def first_output(output) -> Optional[str]:
    if isinstance(output, str):
        return output or None
    if isinstance(output, (list, tuple)) and output:
        return output[0] or None
    return None


class TryOnOrchestrator:

    def __init__(self, client, poll_interval: float = 4, max_attempts: int = 15,
                 timeout_seconds: float = 60,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout_seconds = timeout_seconds
        self.sleep = sleep
        self.clock = clock

    def run(self, garment_url: str, model_url: str, category: str = 'auto',
            cancel_token=None) -> TryOnJob:
        job = TryOnJob()

        try:
            job.job_id = self.client.submit(model_url, garment_url, category)
        except SubmissionError as e:
            logger.error("Try-on submission failed: %s", e)
            job.status = FAILED
            job.error = str(e)
            return job

        deadline = self.clock() + self.timeout_seconds

        while job.attempts < self.max_attempts:
            if cancel_token is not None and cancel_token.is_cancelled():
                logger.info("Try-on job %s cancelled after %d polls", job.job_id, job.attempts)
                job.status = CANCELLED
                return job

            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            self.sleep(min(self.poll_interval, remaining))

            if cancel_token is not None and cancel_token.is_cancelled():
                logger.info("Try-on job %s cancelled after %d polls", job.job_id, job.attempts)
                job.status = CANCELLED
                return job

            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            job.attempts += 1

            try:
                result = self.client.status(job.job_id, timeout=remaining)
            except ProviderTransportError as e:
                logger.warning(
                    "Status check %d/%d for job %s failed: %s",
                    job.attempts, self.max_attempts, job.job_id, e
                )
                continue

            provider_status = result.get('status')
            logger.info(
                "Try-on job %s status (attempt %d/%d): %s",
                job.job_id, job.attempts, self.max_attempts, provider_status
            )

            if provider_status == 'completed':
                output_url = first_output(result.get('output'))
                if output_url:
                    job.status = COMPLETED
                    job.output_url = output_url
                    logger.info("Try-on job %s completed: %s", job.job_id, output_url)
                    return job
                logger.warning("Try-on job %s reported completed without output", job.job_id)
            elif provider_status == 'failed':
                job.status = FAILED
                job.error = describe_provider_error(result.get('error'))
                logger.error("Try-on job %s failed: %s", job.job_id, job.error)
                return job

        job.status = TIMED_OUT
        job.error = 'Try-on timed out'
        logger.warning(
            "Try-on job %s timed out after %d polls (%ss limit)",
            job.job_id, job.attempts, self.timeout_seconds
        )
        return job
