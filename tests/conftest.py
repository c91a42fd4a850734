import base64
from io import BytesIO

import pytest
from django.contrib.auth import get_user_model
from PIL import Image
from rest_framework.test import APIClient

from fashion_models.models import FashionModel
from tryon.services.container import build_services, install_services
from tryon.services.storage import STORAGE_API_BASE

PULL_ZONE_PREFIX = 'https://thrift-test.b-cdn.net/'
COMPLETED_STATUS = {'status': 'completed', 'output': ['https://cdn/x.jpg']}


class FakeResponse:

    def __init__(self, status_code=200, json_data=None, content=b'', text=''):
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeHttpSession:
    """
    Stands in for requests.Session across storage, try-on and
    background-removal calls.

    ``statuses`` is consumed one per status poll; the last entry repeats.
    Entries may be a status dict, a FakeResponse or an exception instance.
    """

    def __init__(self, statuses=None, submit_response=None, storage_status=201, remove_bg_response=None):
        self.statuses = list(statuses or [COMPLETED_STATUS])
        self.submit_response = submit_response or FakeResponse(200, {'id': 'job-1'})
        self.storage_status = storage_status
        self.remove_bg_response = remove_bg_response
        self.uploads = {}
        self.posts = []
        self.gets = []
        self.get_timeouts = []

    def put(self, url, data=None, headers=None, timeout=None):
        if self.storage_status in (200, 201):
            self.uploads[url] = data
        return FakeResponse(self.storage_status, text='storage response')

    def post(self, url, json=None, data=None, files=None, headers=None, timeout=None):
        self.posts.append({'url': url, 'json': json, 'data': data, 'files': files, 'headers': headers})
        if 'removebg' in url:
            return self.remove_bg_response or FakeResponse(500, text='no remove.bg response configured')
        return self.submit_response

    def get(self, url, headers=None, timeout=None):
        self.gets.append(url)
        self.get_timeouts.append(timeout)
        item = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, FakeResponse):
            return item
        return FakeResponse(200, item)

    def fetch(self, public_url):
        """Dereference a public URL produced by the storage client."""
        assert public_url.startswith(PULL_ZONE_PREFIX)
        remote_path = public_url[len(PULL_ZONE_PREFIX):]
        return self.uploads[f'{STORAGE_API_BASE}/thrift-test/{remote_path}']

    @property
    def submissions(self):
        return [p for p in self.posts if p['url'].endswith('/run')]


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def make_png_bytes(color=(200, 30, 30), size=(8, 8), image_format='PNG'):
    buffer = BytesIO()
    Image.new('RGB', size, color).save(buffer, format=image_format)
    return buffer.getvalue()


def to_data_url(raw, subtype='png'):
    return f"data:image/{subtype};base64,{base64.b64encode(raw).decode('ascii')}"


@pytest.fixture
def png_bytes():
    return make_png_bytes()


@pytest.fixture
def png_data_url(png_bytes):
    return to_data_url(png_bytes)


@pytest.fixture
def http_session():
    return FakeHttpSession()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def services(http_session, fake_clock):
    """Installs a services container wired to the fake HTTP session."""
    built = build_services(session=http_session)
    built.orchestrator.sleep = fake_clock.sleep
    built.orchestrator.clock = fake_clock
    previous = install_services(built)
    yield built
    install_services(previous)


@pytest.fixture
def make_model(db):
    counter = {'n': 0}

    def factory(**overrides):
        counter['n'] += 1
        fields = {
            'name': f"Model {counter['n']}",
            'gender': 'women',
            'category': 'general',
            'image_url': f"https://cdn.example.com/models/model_{counter['n']}.jpg",
            'sort_order': counter['n'],
        }
        fields.update(overrides)
        return FashionModel.objects.create(**fields)

    return factory


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username='shopper', email='shopper@example.com', password='pw')


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username='other', email='other@example.com', password='pw')


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_superuser(username='admin', email='admin@example.com', password='pw')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
