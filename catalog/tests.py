import logging
import pytest
from unittest.mock import MagicMock, patch
from django.core.management import call_command
from django.core.management.base import CommandError
from django.urls import reverse
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError
from rest_framework import status

from catalog import seed
from catalog.aggregator import CatalogAggregator
from catalog.entities import (
    CatalogSnapshot, CapturedMoment, ProductItem,
    avatar_placeholder, discount_percent, discount_text,
)
from catalog.exceptions import DocumentNotFound, StoreError, StorePermissionDenied
from catalog.normalizers import (
    normalize_moment, normalize_product, normalize_service, normalize_testimonial,
)
from catalog.queries import (
    distinct_tags, filter_products, moment_types, moments_of_type, packages_for_service,
)
from catalog.store import MemoryDocumentStore, MongoDocumentStore, build_store


# ============================================
# ENTITY HELPERS
# ============================================

class TestDiscount:
    """Discount percentage and badge text"""

    def test_discount_from_old_price(self):
        assert discount_percent(1000, 1250) == 20

    def test_discount_rounds_half_up(self):
        assert discount_percent(995, 1000) == 1
        assert discount_percent(1, 3) == 67

    def test_no_discount_when_old_price_missing_or_lower(self):
        assert discount_percent(100, 0) == 0
        assert discount_percent(100, 100) == 0
        assert discount_percent(100, 80) == 0

    def test_discount_text(self):
        assert discount_text(20) == '20% OFF'
        assert discount_text(0) == ''

    def test_avatar_placeholder_is_keyed_by_name(self):
        assert avatar_placeholder('Priya Singh') == (
            'https://ui-avatars.com/api/?name=Priya%20Singh&background=random'
        )


# ============================================
# NORMALIZER TESTS
# ============================================

class TestNormalizers:
    """Stored documents with drifting field names map onto canonical entities"""

    def test_service_title_from_service_field(self):
        service = normalize_service('birthday', {'service': 'Birthday Bash', 'priceStart': 1999})
        assert service.id == 'birthday'
        assert service.title == 'Birthday Bash'
        assert service.price_start == 1999

    def test_service_features_from_tags_string(self):
        service = normalize_service('wedding', {'title': 'Wedding', 'tags': 'Flowers, Lights ,'})
        assert service.features == ('Flowers', 'Lights')

    def test_empty_service_document_gets_defaults(self):
        service = normalize_service('farewell', {})
        assert service.title == 'farewell'
        assert service.description == ''
        assert service.price_start == 0
        assert service.features == ()

    def test_product_discount_is_rederived(self):
        product = normalize_product('birthday', 'doc1', {
            'id': 'birthday-gold',
            'name': 'Gold Setup',
            'price': 4000,
            'oldPrice': 5000,
            'discountPercent': 99,
            'discountText': 'stale',
        })
        assert product.id == 'birthday-gold'
        assert product.service_id == 'birthday'
        assert product.discount_percent == 20
        assert product.discount_text == '20% OFF'

    def test_product_bad_numbers_fall_back(self):
        product = normalize_product('birthday', 'doc1', {'price': 'abc', 'oldPrice': -5, 'stockQty': None})
        assert product.price == 0
        assert product.old_price == 0
        assert product.stock_qty == 0
        assert product.discount_percent == 0

    def test_product_defaults(self, settings):
        product = normalize_product('birthday', 'doc1', {'name': 'Plain'})
        assert product.id == 'doc1'
        assert product.rating == 5
        assert product.reviews_count == 0
        assert product.availability == 'available'
        assert product.currency == settings.CATALOG_CURRENCY
        assert product.delivery_time_estimate == settings.CATALOG_DELIVERY_ESTIMATE

    def test_product_alternate_field_names(self):
        product = normalize_product('birthday', 'doc1', {
            'title': 'Alt',
            'images': ['a.jpg', 'b.jpg'],
            'reviews': 12,
        })
        assert product.name == 'Alt'
        assert product.image == 'a.jpg'
        assert product.images == ('a.jpg', 'b.jpg')
        assert product.reviews_count == 12

    def test_zero_rating_is_kept(self):
        product = normalize_product('birthday', 'doc1', {'rating': 0})
        assert product.rating == 0

    def test_testimonial_comment_from_message(self):
        testimonial = normalize_testimonial('t1', {'name': 'Neha', 'message': 'Lovely!'})
        assert testimonial.comment == 'Lovely!'
        assert testimonial.image == avatar_placeholder('Neha')

    def test_moment_image_from_image_field(self):
        moment = normalize_moment('m1', {'name': 'Stage', 'image': 'stage.jpg'})
        assert moment.image_url == 'stage.jpg'
        assert moment.type == 'General'


# ============================================
# DOCUMENT STORE TESTS
# ============================================

class TestMemoryDocumentStore:
    """Process-local backend"""

    def test_upsert_merges_and_stamps(self):
        store = MemoryDocumentStore()
        store.upsert_document('services', 'birthday', {'service': 'Birthday', 'priceStart': 1999})
        first = store.get_document('services', 'birthday')

        store.upsert_document('services', 'birthday', {'priceStart': 2499})
        second = store.get_document('services', 'birthday')

        assert second['service'] == 'Birthday'
        assert second['priceStart'] == 2499
        assert second['createdAt'] == first['createdAt']
        assert second['updatedAt'] >= first['updatedAt']

    def test_add_document_generates_id(self):
        store = MemoryDocumentStore()
        doc_id = store.add_document('captured_moments', {'name': 'Stage'}, timestamp_field='timestamp')

        [(key, fields)] = store.list_documents('captured_moments')
        assert key == doc_id
        assert 'timestamp' in fields
        assert 'createdAt' not in fields

    def test_list_group_reports_parent(self):
        store = MemoryDocumentStore()
        store.upsert_document('services/birthday/items', 'birthday-gold', {'name': 'Gold'})
        store.upsert_document('services/wedding/items', 'wedding-royal', {'name': 'Royal'})

        group = sorted((parent, key) for parent, key, _ in store.list_group('items'))
        assert group == [('birthday', 'birthday-gold'), ('wedding', 'wedding-royal')]

    def test_delete_missing_document(self):
        store = MemoryDocumentStore()
        with pytest.raises(DocumentNotFound):
            store.delete_document('testimonials', 'nope')

    def test_build_store_from_setting(self):
        store = build_store({'BACKEND': 'catalog.store.MemoryDocumentStore', 'OPTIONS': {}})
        assert isinstance(store, MemoryDocumentStore)


class TestMongoDocumentStore:
    """MongoDB backend against a mocked client"""

    def make_store(self):
        store = MongoDocumentStore('mongodb://example', 'catalog', client=MagicMock())
        store.db = MagicMock()
        return store

    def test_collection_name_uses_dots(self):
        assert MongoDocumentStore.collection_name('services/birthday/items') == 'services.birthday.items'

    def test_upsert_sets_timestamps(self):
        store = self.make_store()
        store.upsert_document('services', 'birthday', {'service': 'Birthday'})

        collection = store.db.__getitem__.return_value
        args, kwargs = collection.update_one.call_args
        assert args[0] == {'_id': 'birthday'}
        assert 'updatedAt' in args[1]['$set']
        assert 'createdAt' in args[1]['$setOnInsert']
        assert kwargs['upsert'] is True

    def test_unauthorized_maps_to_permission_denied(self):
        store = self.make_store()
        store.db.__getitem__.return_value.find.side_effect = OperationFailure('not authorized', code=13)

        with pytest.raises(StorePermissionDenied):
            store.list_documents('services')

    def test_other_errors_map_to_store_error(self):
        store = self.make_store()
        store.db.__getitem__.return_value.find.side_effect = ServerSelectionTimeoutError('down')

        with pytest.raises(StoreError) as excinfo:
            store.list_documents('services')
        assert not isinstance(excinfo.value, StorePermissionDenied)

    def test_delete_reports_missing(self):
        store = self.make_store()
        store.db.__getitem__.return_value.delete_one.return_value.deleted_count = 0

        with pytest.raises(DocumentNotFound):
            store.delete_document('testimonials', 'abc')


# ============================================
# AGGREGATOR TESTS
# ============================================

class TestCatalogAggregator:
    """Remote data with the static seed as fallback"""

    def test_starts_with_seed(self, memory_store):
        snapshot = CatalogAggregator(memory_store).snapshot()
        assert snapshot.services == seed.SERVICES
        assert len(snapshot.products) == len(seed.SERVICES) * 3
        assert snapshot.testimonials == seed.TESTIMONIALS
        assert snapshot.moments == ()

    def test_empty_store_keeps_seed(self, memory_store):
        aggregator = CatalogAggregator(memory_store)
        before = aggregator.snapshot()

        after = aggregator.refresh()
        assert after == before

    def test_remote_services_replace_seed(self, memory_store):
        memory_store.upsert_document('services', 'birthday', {'service': 'Birthday Bash', 'priceStart': 999})
        aggregator = CatalogAggregator(memory_store)

        snapshot = aggregator.refresh()
        assert [s.title for s in snapshot.services] == ['Birthday Bash']
        # Other collections were empty, so they keep the seed
        assert snapshot.testimonials == seed.TESTIMONIALS
        assert len(snapshot.products) == len(seed.SERVICES) * 3

    def test_permission_denied_keeps_fallback(self, caplog):
        store = MagicMock()
        store.list_documents.side_effect = StorePermissionDenied('denied')
        store.list_group.side_effect = StorePermissionDenied('denied')
        aggregator = CatalogAggregator(store)

        with caplog.at_level(logging.WARNING, logger='catalog.aggregator'):
            snapshot = aggregator.refresh()

        assert snapshot.services == seed.SERVICES
        assert any(r.levelno == logging.WARNING for r in caplog.records)
        assert not any(r.levelno >= logging.ERROR for r in caplog.records)

    def test_store_error_is_logged_not_raised(self, caplog):
        store = MagicMock()
        store.list_documents.side_effect = StoreError('boom')
        store.list_group.side_effect = StoreError('boom')
        aggregator = CatalogAggregator(store)

        with caplog.at_level(logging.ERROR, logger='catalog.aggregator'):
            snapshot = aggregator.refresh()

        assert snapshot.services == seed.SERVICES
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_failures_are_per_collection(self, memory_store):
        memory_store.add_document('testimonials', {'name': 'Neha', 'comment': 'Great', 'rating': 5})
        memory_store.list_group = MagicMock(side_effect=StoreError('items down'))
        aggregator = CatalogAggregator(memory_store)

        snapshot = aggregator.refresh()
        assert [t.name for t in snapshot.testimonials] == ['Neha']
        assert len(snapshot.products) == len(seed.SERVICES) * 3

    def test_refresh_is_idempotent(self, memory_store):
        memory_store.upsert_document('services', 'wedding', {'service': 'Wedding'})
        aggregator = CatalogAggregator(memory_store)

        assert aggregator.refresh() == aggregator.refresh()

    def test_loading_flag_during_refresh(self):
        seen = []
        store = MagicMock()
        aggregator = CatalogAggregator(store)

        def list_documents(path):
            seen.append(aggregator.loading)
            return []

        store.list_documents.side_effect = list_documents
        store.list_group.return_value = []
        aggregator.refresh()

        assert seen and all(seen)
        assert aggregator.loading is False

    def test_stale_result_is_discarded(self, memory_store):
        aggregator = CatalogAggregator(memory_store)
        newer = (CapturedMoment(id='new', name='Newer'),)
        older = (CapturedMoment(id='old', name='Older'),)

        aggregator._apply('moments', newer, token=2)
        aggregator._apply('moments', older, token=1)

        assert aggregator.snapshot().moments == newer

    def test_snapshot_is_immutable(self, memory_store):
        snapshot = CatalogAggregator(memory_store).snapshot()
        assert isinstance(snapshot.services, tuple)
        with pytest.raises(AttributeError):
            snapshot.services = ()


# ============================================
# QUERY TESTS
# ============================================

class TestQueries:
    """Filtering, search and sort over a snapshot"""

    def test_packages_list_products_then_static(self, snapshot):
        options = packages_for_service(snapshot, 'birthday')
        ids = [option_id for option_id, _ in options]
        assert ids == ['birthday-classic', 'birthday-premium', 'birthday-luxury', 'bday-basic', 'bday-premium']

    def test_package_shadowed_by_product(self):
        product = ProductItem(id='bday-basic', service_id='birthday', name='Remote Basic', price=2100)
        snapshot = CatalogSnapshot(services=seed.SERVICES, products=(product,))

        options = packages_for_service(snapshot, 'birthday')
        assert options == [
            ('bday-basic', 'Remote Basic - ₹2,100'),
            ('bday-premium', 'Premium Theme Setup - ₹4,999'),
        ]

    def test_filter_by_tag(self, snapshot):
        products = [p for p in snapshot.products if p.service_id == 'birthday']
        assert [p.id for p in filter_products(products, tag='new')] == ['birthday-luxury']

    def test_search_matches_name(self, snapshot):
        products = [p for p in snapshot.products if p.service_id == 'birthday']
        assert [p.id for p in filter_products(products, search='PREMIUM')] == ['birthday-premium']

    def test_sort_by_price(self, snapshot):
        products = [p for p in snapshot.products if p.service_id == 'wedding']
        ascending = [p.price for p in filter_products(products, sort='price-asc')]
        descending = [p.price for p in filter_products(products, sort='price-desc')]
        assert ascending == sorted(ascending)
        assert descending == sorted(descending, reverse=True)

    def test_sort_newest_puts_new_first(self, snapshot):
        products = [p for p in snapshot.products if p.service_id == 'wedding']
        assert 'new' in filter_products(products, sort='newest')[0].tags

    def test_distinct_tags_keep_first_seen_order(self, snapshot):
        products = [p for p in snapshot.products if p.service_id == 'birthday']
        assert distinct_tags(products) == ['budget', 'bestseller', 'new']

    def test_moment_types(self):
        moments = (
            CapturedMoment(id='1', name='a', type='Wedding Decorations'),
            CapturedMoment(id='2', name='b', type='General'),
            CapturedMoment(id='3', name='c', type='Wedding Decorations'),
        )
        assert moment_types(moments) == ['All', 'Wedding Decorations', 'General']
        assert [m.id for m in moments_of_type(moments, 'Wedding Decorations')] == ['1', '3']
        assert len(moments_of_type(moments, 'All')) == 3


# ============================================
# API TESTS
# ============================================

@pytest.mark.django_db
class TestCatalogAPI:
    """Read-only JSON API"""

    def test_snapshot_endpoint(self, api_client, aggregator):
        response = api_client.get(reverse('catalog:snapshot'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['services']) == 6
        assert response.data['loading'] is False

    def test_service_items_sorted(self, api_client, aggregator):
        url = reverse('catalog:service-items', args=['birthday'])
        response = api_client.get(url, {'sort': 'price-desc'})

        assert response.status_code == status.HTTP_200_OK
        prices = [item['price'] for item in response.data]
        assert prices == sorted(prices, reverse=True)

    def test_unknown_service_returns_404(self, api_client, aggregator):
        url = reverse('catalog:service-items', args=['nope'])
        response = api_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['success'] is False
        assert response.data['error']['message'] == 'Not Found'

    def test_health_check(self, api_client, aggregator):
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'healthy'
        assert response.data['catalog']['services'] == 6


# ============================================
# MANAGEMENT COMMAND TESTS
# ============================================

@pytest.mark.django_db
class TestSeedCatalogCommand:
    """seed_catalog management command"""

    def test_seeds_empty_store(self, aggregator, memory_store):
        call_command('seed_catalog')

        assert len(memory_store.list_documents('services')) == 6
        assert len(memory_store.list_group('items')) == 18
        assert [s.id for s in aggregator.snapshot().services] == [s.id for s in seed.SERVICES]

    def test_does_not_overwrite_without_force(self, aggregator, memory_store, capsys):
        memory_store.upsert_document('services', 'birthday', {'service': 'Custom'})

        call_command('seed_catalog')

        assert memory_store.get_document('services', 'birthday')['service'] == 'Custom'
        assert 'use --force' in capsys.readouterr().out

    def test_force_overwrites(self, aggregator, memory_store):
        memory_store.upsert_document('services', 'birthday', {'service': 'Custom'})

        call_command('seed_catalog', '--force')

        assert memory_store.get_document('services', 'birthday')['service'] == 'Birthday Celebrations'

    def test_seeded_items_read_back_like_the_seed(self, aggregator):
        call_command('seed_catalog')

        stored = {p.id: p for p in aggregator.snapshot().products}
        for item in seed.generate_products():
            read_back = stored[item.id]
            assert read_back.service_id == item.service_id
            assert (read_back.price, read_back.old_price) == (item.price, item.old_price)
            assert read_back.discount_text == item.discount_text
            assert read_back.full_description == item.full_description
            assert read_back.images == item.images
            assert read_back.rating == item.rating

    def test_store_error_fails_command(self, aggregator, memory_store):
        memory_store.list_documents = MagicMock(side_effect=StoreError('down'))

        with pytest.raises(CommandError):
            call_command('seed_catalog')


@pytest.mark.django_db
class TestAPIErrorHandling:
    """Store failures surface as 503 through the API error handler"""

    def test_store_error_becomes_503(self, api_client, aggregator):
        with patch('catalog.views.CatalogSnapshotSerializer', side_effect=StoreError('down')):
            response = api_client.get(reverse('catalog:snapshot'))

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error']['message'] == 'Catalog Unavailable'
