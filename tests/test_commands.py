from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from fashion_models.models import FashionModel

pytestmark = pytest.mark.django_db


def test_seed_creates_stock_models():
    out = StringIO()

    call_command('seed_fashion_models', '--image-base-url', 'https://cdn.example.com/models', stdout=out)

    assert FashionModel.objects.count() == 7
    assert set(FashionModel.objects.values_list('gender', flat=True)) == {'women', 'men', 'unisex'}
    elena = FashionModel.objects.get(name__startswith='Elena')
    assert elena.image_url == 'https://cdn.example.com/models/elena_front.jpg'
    assert 'Created 7' in out.getvalue()


def test_seed_is_a_no_op_on_a_populated_catalog(make_model):
    make_model()

    call_command('seed_fashion_models', stdout=StringIO())

    assert FashionModel.objects.count() == 1


def test_forced_seed_does_not_duplicate():
    call_command('seed_fashion_models', stdout=StringIO())
    call_command('seed_fashion_models', '--force', stdout=StringIO())

    assert FashionModel.objects.count() == 7


def test_refresh_recent_usage(make_model):
    model = make_model()
    FashionModel.objects.filter(pk=model.pk).update(recent_usage=5)
    out = StringIO()

    call_command('refresh_recent_usage', stdout=out)

    model.refresh_from_db()
    assert model.recent_usage == 0
    assert '1 model(s) changed' in out.getvalue()


def test_refresh_recent_usage_unknown_model():
    with pytest.raises(CommandError):
        call_command('refresh_recent_usage', '00000000-0000-0000-0000-000000000000', stdout=StringIO())
