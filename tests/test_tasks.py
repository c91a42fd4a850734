import pytest

from fashion_models.tasks import refresh_recent_usage_async
from tryon import tasks
from tryon.models import TryonRequest
from tryon.tasks import RecordCancelToken, run_tryon_async

from .conftest import FakeHttpSession

pytestmark = pytest.mark.django_db

GARMENT = 'https://cdn.example.com/garments/blazer.png'


@pytest.fixture
def ws_updates(monkeypatch):
    sent = []
    monkeypatch.setattr(tasks, 'send_tryon_status_update', lambda **kwargs: sent.append(kwargs))
    return sent


@pytest.fixture
def make_request(user):
    def factory(**overrides):
        fields = {'user': user, 'garment_image_url': GARMENT, 'garment_category': 'Wool Blazer', 'gender': 'men'}
        fields.update(overrides)
        return TryonRequest.objects.create(**fields)
    return factory


def test_completed_try_on_is_persisted(services, make_model, make_request, ws_updates):
    model = make_model(gender='men', category='formal')
    tryon_request = make_request()

    result = run_tryon_async.apply(args=(tryon_request.id,)).get()

    tryon_request.refresh_from_db()
    assert result['status'] == 'completed'
    assert result['processedImageUrl'] == 'https://cdn/x.jpg'
    assert tryon_request.status == 'completed'
    assert tryon_request.processed_image_url == 'https://cdn/x.jpg'
    assert tryon_request.message == 'Virtual try-on completed successfully'
    assert tryon_request.selected_model_id == model.pk
    assert tryon_request.provider_job_id == 'job-1'
    assert tryon_request.processing_time_ms is not None
    assert [u['status'] for u in ws_updates] == ['processing', 'completed']


def test_degraded_try_on_keeps_the_garment(http_session, services, make_model, make_request, ws_updates):
    http_session.statuses = [{'status': 'failed', 'error': 'bad input'}]
    make_model(gender='men')
    tryon_request = make_request()

    run_tryon_async.apply(args=(tryon_request.id,))

    tryon_request.refresh_from_db()
    assert tryon_request.status == 'degraded'
    assert tryon_request.reason == 'failed'
    assert tryon_request.processed_image_url == GARMENT


def test_no_models_marks_request_skipped(services, make_request, ws_updates):
    tryon_request = make_request()

    run_tryon_async.apply(args=(tryon_request.id,))

    tryon_request.refresh_from_db()
    assert tryon_request.status == 'skipped'
    assert tryon_request.reason == 'no_models'
    assert tryon_request.selected_model_id is None


def test_pinned_model_is_passed_to_the_pipeline(services, make_model, make_request, ws_updates):
    pinned = make_model(gender='women', category='casual')
    make_model(gender='men', category='formal')
    tryon_request = make_request(pinned_model=pinned)

    run_tryon_async.apply(args=(tryon_request.id,))

    tryon_request.refresh_from_db()
    assert tryon_request.selected_model_id == pinned.pk


def test_pinned_model_deactivated_after_queueing_fails_request(services, make_model, make_request, ws_updates):
    pinned = make_model(is_active=False)
    tryon_request = make_request(pinned_model=pinned)

    result = run_tryon_async.apply(args=(tryon_request.id,)).get()

    tryon_request.refresh_from_db()
    assert result['status'] == 'failed'
    assert tryon_request.status == 'failed'
    assert 'fashion model' in tryon_request.error_message
    assert ws_updates[-1]['status'] == 'failed'


def test_cancelled_request_is_not_processed(services, http_session, make_model, make_request, ws_updates):
    make_model(gender='men')
    tryon_request = make_request(status='cancelled')

    result = run_tryon_async.apply(args=(tryon_request.id,)).get()

    assert result['status'] == 'cancelled'
    assert http_session.posts == []
    assert ws_updates == []


def test_cancellation_during_polling_stops_the_job(services, http_session, make_model, make_request, ws_updates):
    http_session.statuses = [{'status': 'processing'}]
    model = make_model(gender='men')
    tryon_request = make_request()

    def cancel_on_second_sleep(seconds):
        if len(http_session.gets) == 1:
            TryonRequest.objects.filter(pk=tryon_request.pk).update(status='cancelled')

    services.orchestrator.sleep = cancel_on_second_sleep

    run_tryon_async.apply(args=(tryon_request.id,))

    tryon_request.refresh_from_db()
    model.refresh_from_db()
    assert tryon_request.status == 'cancelled'
    assert tryon_request.reason == 'cancelled'
    assert len(http_session.gets) == 1
    assert model.tryon_attempts == 0


def test_unexpected_errors_mark_request_failed(services, make_request, ws_updates, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError('database went away')

    monkeypatch.setattr(services.pipeline, 'run', explode)
    tryon_request = make_request()

    result = run_tryon_async.apply(args=(tryon_request.id,))

    tryon_request.refresh_from_db()
    assert result.failed()
    assert tryon_request.status == 'failed'
    assert tryon_request.error_message == 'database went away'


def test_record_cancel_token(make_request):
    tryon_request = make_request()
    token = RecordCancelToken(tryon_request.id)

    assert not token.is_cancelled()
    TryonRequest.objects.filter(pk=tryon_request.pk).update(status='cancelled')
    assert token.is_cancelled()


def test_refresh_recent_usage_task(make_model):
    model = make_model()
    type(model).objects.filter(pk=model.pk).update(recent_usage=4)

    result = refresh_recent_usage_async.apply().get()

    assert result == {'changed': 1}
    model.refresh_from_db()
    assert model.recent_usage == 0


def test_not_configured_provider(settings, make_model, make_request, ws_updates):
    from tryon.services.container import build_services, install_services

    settings.FASHN_AI_API_KEY = ''
    previous = install_services(build_services(session=FakeHttpSession()))
    try:
        make_model(gender='men')
        tryon_request = make_request()
        run_tryon_async.apply(args=(tryon_request.id,))
    finally:
        install_services(previous)

    tryon_request.refresh_from_db()
    assert tryon_request.status == 'skipped'
    assert tryon_request.reason == 'not_configured'
