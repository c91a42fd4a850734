import pytest
import requests

from tryon.exceptions import BackgroundRemovalError, ProviderTransportError, SubmissionError
from tryon.services.background_removal import RemoveBgClient
from tryon.services.fashn_client import FashnClient, map_garment_to_provider_category
from tryon.services.orchestrator import (
    CANCELLED,
    COMPLETED,
    FAILED,
    TIMED_OUT,
    CancelToken,
    TryOnOrchestrator,
)

from .conftest import FakeClock, FakeHttpSession, FakeResponse

PROCESSING = {'status': 'processing'}


def make_orchestrator(session, clock=None, **kwargs):
    clock = clock or FakeClock()
    client = FashnClient('test-key', session=session)
    return TryOnOrchestrator(client, sleep=clock.sleep, clock=clock, **kwargs), clock


def test_completed_on_first_poll():
    session = FakeHttpSession(statuses=[{'status': 'completed', 'output': ['https://cdn/x.jpg']}])
    orchestrator, clock = make_orchestrator(session)

    job = orchestrator.run('https://g/garment.png', 'https://m/model.jpg', 'tops')

    assert job.status == COMPLETED
    assert job.output_url == 'https://cdn/x.jpg'
    assert job.job_id == 'job-1'
    assert job.attempts == 1
    assert clock.sleeps == [4]


def test_submission_payload_matches_provider_schema():
    session = FakeHttpSession()
    orchestrator, _ = make_orchestrator(session)

    orchestrator.run('https://g/garment.png', 'https://m/model.jpg', 'one-pieces')

    submission = session.submissions[0]
    assert submission['url'] == 'https://api.fashn.ai/v1/run'
    assert submission['json'] == {
        'model_name': 'tryon-v1.6',
        'inputs': {
            'model_image': 'https://m/model.jpg',
            'garment_image': 'https://g/garment.png',
            'category': 'one-pieces',
        },
    }
    assert submission['headers']['Authorization'] == 'Bearer test-key'
    assert session.gets == ['https://api.fashn.ai/v1/status/job-1']


def test_never_terminal_times_out_without_raising():
    session = FakeHttpSession(statuses=[PROCESSING])
    orchestrator, clock = make_orchestrator(session)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == TIMED_OUT
    # The fifteenth sleep ends on the deadline, so no check follows it.
    assert job.attempts == 14
    assert len(session.gets) == 14
    assert clock.now == 60


def test_wall_clock_ceiling_stops_polling_early():
    session = FakeHttpSession(statuses=[PROCESSING])
    orchestrator, clock = make_orchestrator(session, timeout_seconds=10)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == TIMED_OUT
    assert clock.sleeps == [4, 4, 2]
    assert job.attempts == 2
    assert clock.now == 10


def test_slow_status_checks_do_not_overrun_the_deadline():
    clock = FakeClock()

    class SlowSession(FakeHttpSession):
        def get(self, url, headers=None, timeout=None):
            clock.now += 10
            return super().get(url, headers=headers, timeout=timeout)

    session = SlowSession(statuses=[PROCESSING])
    orchestrator, _ = make_orchestrator(session, clock=clock)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == TIMED_OUT
    assert clock.now <= 60
    assert job.attempts == 4
    assert session.get_timeouts == [30, 30, 28, 14]


def test_status_request_timeout_is_capped_by_time_left():
    session = FakeHttpSession(statuses=[PROCESSING])
    orchestrator, _ = make_orchestrator(session, timeout_seconds=10)

    orchestrator.run('https://g', 'https://m')

    assert session.get_timeouts == [6, 2]


def test_transport_errors_consume_attempts_and_polling_continues():
    session = FakeHttpSession(statuses=[
        requests.ConnectionError('reset'),
        FakeResponse(502, text='bad gateway'),
        {'status': 'completed', 'output': ['https://cdn/y.jpg']},
    ])
    orchestrator, _ = make_orchestrator(session)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == COMPLETED
    assert job.attempts == 3


def test_transport_errors_until_attempts_run_out_time_out():
    session = FakeHttpSession(statuses=[FakeResponse(500)])
    orchestrator, _ = make_orchestrator(session, max_attempts=5)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == TIMED_OUT
    assert job.attempts == 5


def test_failed_with_string_error():
    session = FakeHttpSession(statuses=[PROCESSING, {'status': 'failed', 'error': 'bad input'}])
    orchestrator, _ = make_orchestrator(session)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == FAILED
    assert job.error == 'bad input'
    assert job.attempts == 2


def test_failed_with_structured_error():
    session = FakeHttpSession(statuses=[
        {'status': 'failed', 'error': {'name': 'ImageLoadError', 'message': 'could not fetch garment'}},
    ])
    orchestrator, _ = make_orchestrator(session)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == FAILED
    assert job.error == 'ImageLoadError: could not fetch garment'


def test_completed_without_output_keeps_polling():
    session = FakeHttpSession(statuses=[
        {'status': 'completed', 'output': []},
        {'status': 'completed', 'output': ['https://cdn/z.jpg']},
    ])
    orchestrator, _ = make_orchestrator(session)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == COMPLETED
    assert job.output_url == 'https://cdn/z.jpg'
    assert job.attempts == 2


@pytest.mark.parametrize('response', [
    FakeResponse(200, {'status': 'starting'}),
    FakeResponse(401, text='unauthorized'),
    FakeResponse(200, None),
])
def test_submission_errors_become_failed_without_polling(response):
    session = FakeHttpSession(submit_response=response)
    orchestrator, clock = make_orchestrator(session)

    job = orchestrator.run('https://g', 'https://m')

    assert job.status == FAILED
    assert job.job_id is None
    assert session.gets == []
    assert clock.sleeps == []


def test_cancel_token_stops_polling():
    session = FakeHttpSession(statuses=[PROCESSING])
    token = CancelToken()

    class CancellingClock(FakeClock):
        def sleep(self, seconds):
            super().sleep(seconds)
            if len(self.sleeps) == 2:
                token.cancel()

    orchestrator, _ = make_orchestrator(session, clock=CancellingClock())

    job = orchestrator.run('https://g', 'https://m', cancel_token=token)

    assert job.status == CANCELLED
    assert job.attempts == 1
    assert len(session.gets) == 1


def test_client_submit_raises_submission_error_without_id():
    client = FashnClient('k', session=FakeHttpSession(submit_response=FakeResponse(200, {})))
    with pytest.raises(SubmissionError):
        client.submit('https://m', 'https://g', 'auto')


def test_client_status_raises_transport_error_on_non_2xx():
    client = FashnClient('k', session=FakeHttpSession(statuses=[FakeResponse(503)]))
    with pytest.raises(ProviderTransportError) as excinfo:
        client.status('job-1')
    assert excinfo.value.status_code == 503


@pytest.mark.parametrize('label, expected', [
    ('Denim Jacket', 'tops'),
    ('T-Shirt', 'tops'),
    ('Slim Jeans', 'bottoms'),
    ('Pleated Skirt', 'bottoms'),
    ('Evening Gown Dress', 'one-pieces'),
    ('Jumpsuit', 'one-pieces'),
    ('Scarf', 'auto'),
    (None, 'auto'),
])
def test_map_garment_to_provider_category(label, expected):
    assert map_garment_to_provider_category(label) == expected


def test_remove_bg_posts_image_url_with_api_key():
    session = FakeHttpSession(remove_bg_response=FakeResponse(200, content=b'png-bytes'))
    client = RemoveBgClient('bg-key', session=session)

    assert client.remove_background('https://g/garment.png') == b'png-bytes'
    call = session.posts[0]
    assert call['url'] == 'https://api.remove.bg/v1.0/removebg'
    assert call['headers'] == {'X-Api-Key': 'bg-key'}
    assert call['data']['image_url'] == 'https://g/garment.png'


def test_remove_bg_failure_raises():
    client = RemoveBgClient('bg-key', session=FakeHttpSession(remove_bg_response=FakeResponse(402, text='credits')))
    with pytest.raises(BackgroundRemovalError):
        client.remove_background('https://g/garment.png')


def test_remove_bg_without_key_raises():
    with pytest.raises(BackgroundRemovalError):
        RemoveBgClient('', session=FakeHttpSession()).remove_background('https://g')


def test_remove_bg_sends_uploaded_file():
    session = FakeHttpSession(remove_bg_response=FakeResponse(200, content=b'png-bytes'))
    client = RemoveBgClient('bg-key', session=session)

    assert client.remove_background_from_file(b'raw', 'shirt.jpg', 'image/jpeg') == b'png-bytes'
    call = session.posts[0]
    assert call['files'] == {'image_file': ('shirt.jpg', b'raw', 'image/jpeg')}
    assert 'image_url' not in call['data']
