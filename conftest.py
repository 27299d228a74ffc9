import pytest
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def memory_store():
    from catalog.store import MemoryDocumentStore

    return MemoryDocumentStore()


@pytest.fixture
def aggregator(memory_store, monkeypatch):
    """A fresh aggregator on an empty store, installed as the site catalog."""
    from django.apps import apps
    from catalog.aggregator import CatalogAggregator

    agg = CatalogAggregator(memory_store)
    monkeypatch.setattr(apps.get_app_config('catalog'), 'aggregator', agg)
    return agg


@pytest.fixture
def snapshot(aggregator):
    return aggregator.snapshot()


@pytest.fixture
def staff_user(db):
    from django.contrib.auth.models import User

    return User.objects.create_user(
        username='operator',
        password='testpass123',
        is_staff=True,
    )


@pytest.fixture
def regular_user(db):
    from django.contrib.auth.models import User

    return User.objects.create_user(username='visitor', password='testpass123')


@pytest.fixture
def staff_client(client, staff_user, aggregator):
    client.force_login(staff_user)
    return client


@pytest.fixture
def tomorrow():
    return timezone.localdate() + timedelta(days=1)


@pytest.fixture
def valid_booking_data(tomorrow):
    """Valid booking form payload"""
    return {
        'name': 'Priya Kumar',
        'phone': '9876543210',
        'email': '',
        'service': 'birthday',
        'package': '',
        'date': tomorrow.isoformat(),
        'time': '',
        'address': 'MG Road, Varanasi',
        'guests': '20',
        'message': '',
    }
