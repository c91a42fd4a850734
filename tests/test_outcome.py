from types import SimpleNamespace

import pytest

from fashion_models.exceptions import FashionModelNotFound
from tryon.services.orchestrator import CANCELLED, COMPLETED, FAILED, PENDING, TIMED_OUT, TryOnJob
from tryon.services.outcome import (
    Completed,
    Degraded,
    OutcomeRecorder,
    Skipped,
    outcome_to_response,
)


class RecordingCatalog:

    def __init__(self, error=None):
        self.outcomes = []
        self.error = error

    def record_outcome(self, model_id, succeeded, processing_time_ms):
        if self.error:
            raise self.error
        self.outcomes.append((model_id, succeeded, processing_time_ms))


MODEL = SimpleNamespace(pk='m1')
FALLBACK = 'https://cdn.example.com/garment.png'


def test_completed_records_success():
    catalog = RecordingCatalog()
    job = TryOnJob(job_id='job-1', status=COMPLETED, output_url='https://cdn/x.jpg')

    outcome = OutcomeRecorder(catalog).settle(job, MODEL, FALLBACK, 1200)

    assert outcome == Completed(url='https://cdn/x.jpg', model_id='m1', job_id='job-1')
    assert catalog.outcomes == [('m1', True, 1200)]


def test_failed_records_failure_and_returns_fallback():
    catalog = RecordingCatalog()
    job = TryOnJob(job_id='job-1', status=FAILED, error='bad input')

    outcome = OutcomeRecorder(catalog).settle(job, MODEL, FALLBACK, 900, 'background-removed image')

    assert isinstance(outcome, Degraded)
    assert outcome.url == FALLBACK
    assert outcome.reason == 'failed'
    assert outcome.message == 'Virtual try-on failed: bad input. Using background-removed image.'
    assert catalog.outcomes == [('m1', False, 900)]


def test_timed_out_is_logged_distinctly_and_counts_as_failure(caplog):
    catalog = RecordingCatalog()
    job = TryOnJob(job_id='job-1', status=TIMED_OUT, error='Try-on timed out')

    outcome = OutcomeRecorder(catalog).settle(job, MODEL, FALLBACK, 60000)

    assert outcome.reason == 'timed_out'
    assert outcome.message == 'Virtual try-on took too long. Using original image.'
    assert catalog.outcomes == [('m1', False, 60000)]
    assert 'timed out' in caplog.text


def test_cancelled_records_nothing():
    catalog = RecordingCatalog()
    job = TryOnJob(job_id='job-1', status=CANCELLED)

    outcome = OutcomeRecorder(catalog).settle(job, MODEL, FALLBACK, 100)

    assert isinstance(outcome, Skipped)
    assert outcome.reason == 'cancelled'
    assert catalog.outcomes == []


def test_no_model_means_no_metrics():
    catalog = RecordingCatalog()
    job = TryOnJob(job_id='job-1', status=FAILED, error='boom')

    outcome = OutcomeRecorder(catalog).settle(job, None, FALLBACK, 100)

    assert outcome.model_id is None
    assert catalog.outcomes == []


def test_metrics_errors_do_not_escape():
    catalog = RecordingCatalog(error=FashionModelNotFound('m1'))
    job = TryOnJob(job_id='job-1', status=COMPLETED, output_url='https://cdn/x.jpg')

    outcome = OutcomeRecorder(catalog).settle(job, MODEL, FALLBACK, 100)

    assert isinstance(outcome, Completed)


def test_pending_job_cannot_be_settled():
    with pytest.raises(ValueError):
        OutcomeRecorder(RecordingCatalog()).settle(TryOnJob(status=PENDING), MODEL, FALLBACK, 0)


@pytest.mark.parametrize('outcome, kind, reason', [
    (Completed(url='https://cdn/x.jpg'), 'completed', None),
    (Degraded(url=FALLBACK, reason='timed_out', message='slow'), 'degraded', 'timed_out'),
    (Skipped(url=FALLBACK, reason='no_models', message='skipped'), 'skipped', 'no_models'),
])
def test_outcome_to_response(outcome, kind, reason):
    response = outcome_to_response(outcome)

    assert response == {
        'success': True,
        'processedImageUrl': outcome.url,
        'message': outcome.message,
        'outcome': kind,
        'reason': reason,
    }


def test_outcome_to_response_rejects_unknown_types():
    with pytest.raises(TypeError):
        outcome_to_response(SimpleNamespace(url='x', message='y'))
