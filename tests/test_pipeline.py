import pytest

from fashion_models.exceptions import FashionModelNotFound
from fashion_models.models import FashionModel, FashionModelEvent
from tryon.exceptions import InvalidEncoding
from tryon.services.container import build_services
from tryon.services.outcome import Completed, Degraded, Skipped
from tryon.services.pipeline import TryOnRequest, run_try_on

from .conftest import FakeHttpSession, FakeResponse, make_png_bytes, to_data_url

pytestmark = pytest.mark.django_db

GARMENT = 'https://cdn.example.com/garments/gown.png'


def test_scenario_completed_on_first_poll(services, make_model):
    model = make_model(gender='women', category='evening')

    response = run_try_on(GARMENT, 'Evening Gown', 'female')

    assert response['success'] is True
    assert response['processedImageUrl'] == 'https://cdn/x.jpg'
    assert response['message'] == 'Virtual try-on completed successfully'
    model.refresh_from_db()
    assert model.usage == 1
    assert model.tryon_successes == 1
    assert model.tryon_attempts == 1
    assert float(model.success_rate) == 100.0


def test_scenario_provider_failure_falls_back(make_model):
    session = FakeHttpSession(statuses=[{'status': 'failed', 'error': 'bad input'}])
    pipeline = build_services(session=session).pipeline
    model = make_model()

    response = run_try_on(GARMENT, 'Blouse', 'women', pipeline=pipeline)

    assert response['success'] is True
    assert response['processedImageUrl'] == GARMENT
    assert 'failed' in response['message']
    assert 'bad input' in response['message']
    model.refresh_from_db()
    assert model.usage == 1
    assert model.tryon_successes == 0
    assert float(model.success_rate) == 0.0


def test_scenario_no_active_models_skips_without_catalog_writes(services, http_session, make_model):
    retired = make_model(is_active=False)

    response = run_try_on(GARMENT, 'Blouse', 'women')

    assert response['success'] is True
    assert response['processedImageUrl'] == GARMENT
    assert 'skipped' in response['message']
    assert response['reason'] == 'no_models'
    assert http_session.posts == []
    retired.refresh_from_db()
    assert retired.usage == 0
    assert retired.total_interactions == 0
    assert not FashionModelEvent.objects.exists()


def test_scenario_pinned_model_bypasses_selection(services, http_session, make_model):
    pinned = make_model(gender='men', category='formal', sort_order=20)
    better = make_model(gender='women', category='evening', is_featured=True, sort_order=0)

    response = run_try_on(GARMENT, 'Evening Gown', 'women', model_id=str(pinned.pk))

    assert response['outcome'] == 'completed'
    assert http_session.submissions[0]['json']['inputs']['model_image'] == pinned.image_url
    pinned.refresh_from_db()
    better.refresh_from_db()
    assert pinned.usage == 1
    assert pinned.tryon_successes == 1
    assert better.usage == 0
    assert better.total_interactions == 0


def test_only_the_chosen_model_is_updated(services, make_model):
    chosen = make_model(gender='women', category='evening')
    others = [make_model(gender='men', category='athletic'), make_model(gender='men', category='casual')]

    run_try_on(GARMENT, 'Evening Gown', 'women')

    chosen.refresh_from_db()
    assert chosen.usage == 1
    assert chosen.total_interactions == 1
    for other in others:
        other.refresh_from_db()
        assert (other.usage, other.tryon_attempts, other.total_interactions) == (0, 0, 0)


def test_ai_process_event_is_tracked(services, make_model):
    model = make_model()

    run_try_on(GARMENT, 'Blouse', 'women')

    event_types = list(model.events.values_list('event_type', flat=True).order_by('id'))
    assert event_types == ['ai_process', 'tryon_success']


def test_inactive_pinned_model_raises(services, make_model):
    pinned = make_model(is_active=False)

    with pytest.raises(FashionModelNotFound):
        run_try_on(GARMENT, 'Blouse', 'women', model_id=str(pinned.pk))


def test_provider_not_configured_skips(settings, make_model):
    settings.FASHN_AI_API_KEY = ''
    session = FakeHttpSession()
    model = make_model()

    outcome = build_services(session=session).pipeline.run(TryOnRequest(garment_image=GARMENT))

    assert isinstance(outcome, Skipped)
    assert outcome.reason == 'not_configured'
    assert 'FASHN_AI_API_KEY' in outcome.message
    assert outcome.url == GARMENT
    assert session.posts == []
    model.refresh_from_db()
    assert model.usage == 0


def test_timed_out_try_on_records_failure(make_model, fake_clock):
    session = FakeHttpSession(statuses=[{'status': 'processing'}])
    services = build_services(session=session)
    services.orchestrator.sleep = fake_clock.sleep
    services.orchestrator.clock = fake_clock
    model = make_model()

    outcome = services.pipeline.run(TryOnRequest(garment_image=GARMENT, garment_category='Shirt'))

    assert isinstance(outcome, Degraded)
    assert outcome.reason == 'timed_out'
    assert outcome.message == 'Virtual try-on took too long. Using original image.'
    assert len(session.gets) == 15
    model.refresh_from_db()
    assert model.tryon_attempts == 1
    assert model.tryon_successes == 0


def test_inline_garment_is_uploaded_before_submission(services, http_session, make_model):
    make_model()
    garment = make_png_bytes()
    data_url = to_data_url(garment)

    outcome = services.pipeline.run(TryOnRequest(garment_image=data_url, garment_category='T-Shirt'))

    assert isinstance(outcome, Completed)
    submitted = http_session.submissions[0]['json']['inputs']
    assert http_session.fetch(submitted['garment_image']) == garment
    assert submitted['category'] == 'tops'


def test_invalid_inline_garment_raises(services):
    with pytest.raises(InvalidEncoding):
        services.pipeline.run(TryOnRequest(garment_image='data:image/png;base64,@@@'))


def test_default_stock_image_used_when_catalog_is_empty(settings, db):
    settings.TRYON_CONFIG = {
        **settings.TRYON_CONFIG,
        'default_model_images': {'women': 'https://cdn.example.com/stock/women.jpg', 'men': '', 'unisex': ''},
    }
    session = FakeHttpSession()

    response = run_try_on(GARMENT, 'Blouse', 'female', pipeline=build_services(session=session).pipeline)

    assert response['outcome'] == 'completed'
    assert session.submissions[0]['json']['inputs']['model_image'] == 'https://cdn.example.com/stock/women.jpg'
    assert not FashionModel.objects.exists()
    assert not FashionModelEvent.objects.exists()


def test_background_removed_image_is_the_fallback_tier(settings, make_model):
    settings.REMOVE_BG_API_KEY = 'bg-key'
    session = FakeHttpSession(
        statuses=[{'status': 'failed', 'error': 'bad input'}],
        remove_bg_response=FakeResponse(200, content=make_png_bytes(color=(0, 0, 0))),
    )
    make_model()

    outcome = build_services(session=session).pipeline.run(
        TryOnRequest(garment_image=GARMENT, remove_background=True)
    )

    assert isinstance(outcome, Degraded)
    assert outcome.url.startswith('https://thrift-test.b-cdn.net/tryon/background-removed/')
    assert outcome.message.endswith('Using background-removed image.')
    submitted = session.submissions[0]['json']['inputs']
    assert submitted['garment_image'] == outcome.url


def test_background_removal_failure_uses_original_image(settings, make_model):
    settings.REMOVE_BG_API_KEY = 'bg-key'
    session = FakeHttpSession(remove_bg_response=FakeResponse(500, text='error'))
    make_model()

    outcome = build_services(session=session).pipeline.run(
        TryOnRequest(garment_image=GARMENT, remove_background=True)
    )

    assert isinstance(outcome, Completed)
    assert session.submissions[0]['json']['inputs']['garment_image'] == GARMENT
