import logging
import pytest
from unittest.mock import MagicMock, patch
from django.contrib.messages import get_messages
from django.core.files.storage import InMemoryStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from catalog.exceptions import StoreError
from catalog.records import (
    build_item_record, build_moment_record, build_service_record, build_testimonial_record,
)
from dashboard.forms import MomentForm, ProductItemForm, ServiceForm
from dashboard.services import CatalogEditor
from dashboard.uploads import UploadProgress, upload_and_wait, upload_image


def messages_of(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


# ============================================
# AUTH TESTS
# ============================================

@pytest.mark.django_db
class TestLogin:
    """Operator login"""

    def test_login_page_loads(self, client):
        response = client.get(reverse('dashboard:login'))
        assert response.status_code == 200

    def test_staff_login_redirects_to_editor(self, client, staff_user, aggregator):
        response = client.post(reverse('dashboard:login'), {
            'username': 'operator',
            'password': 'testpass123',
        })

        assert response.status_code == 302
        assert response.url == reverse('dashboard:home')

    def test_wrong_password_shows_reason(self, client, staff_user):
        response = client.post(reverse('dashboard:login'), {
            'username': 'operator',
            'password': 'wrong',
        })

        assert response.status_code == 200
        assert any(m.startswith('Login failed: ') for m in messages_of(response))
        assert '_auth_user_id' not in client.session

    def test_non_staff_cannot_login(self, client, regular_user):
        response = client.post(reverse('dashboard:login'), {
            'username': 'visitor',
            'password': 'testpass123',
        })

        assert response.status_code == 200
        assert 'Login failed: This account cannot edit the catalog.' in messages_of(response)

    def test_login_refreshes_catalog(self, client, staff_user, aggregator):
        with patch.object(aggregator, 'refresh') as refresh:
            client.post(reverse('dashboard:login'), {
                'username': 'operator',
                'password': 'testpass123',
            })
        refresh.assert_called_once()

    def test_logout_redirects_to_login(self, staff_client):
        response = staff_client.get(reverse('dashboard:logout'))

        assert response.status_code == 302
        assert response.url == reverse('dashboard:login')
        assert '_auth_user_id' not in staff_client.session


@pytest.mark.django_db
class TestStaffGate:
    """Editor pages need a staff session"""

    def test_unauthenticated_redirects_to_login(self, client, aggregator):
        response = client.get(reverse('dashboard:home'))

        assert response.status_code == 302
        assert response.url.startswith(reverse('dashboard:login'))
        assert 'next=' in response.url

    def test_non_staff_is_turned_away(self, client, regular_user, aggregator):
        client.force_login(regular_user)
        response = client.get(reverse('dashboard:home'))

        assert response.status_code == 302
        assert response.url == reverse('dashboard:login')

    def test_staff_sees_editor(self, staff_client):
        response = staff_client.get(reverse('dashboard:home'))

        assert response.status_code == 200
        assert len(response.context['service_rows']) == 6


# ============================================
# FORM & RECORD TESTS
# ============================================

class TestEditorForms:

    def test_slug_is_fixed_when_editing(self):
        assert ServiceForm(editing=True).fields['slug'].disabled
        assert not ServiceForm().fields['slug'].disabled
        assert ProductItemForm(editing=True).fields['slug'].disabled

    def test_disabled_slug_ignores_posted_value(self):
        form = ServiceForm(
            data={'slug': 'hacked', 'title': 'Birthday', 'price_start': '1999'},
            initial={'slug': 'birthday'},
            editing=True,
        )
        assert form.is_valid(), form.errors
        assert form.cleaned_data['slug'] == 'birthday'

    def test_negative_price_rejected(self):
        form = ProductItemForm(data={'slug': 'x', 'name': 'X', 'price': '-1', 'stock_qty': '1'})
        assert not form.is_valid()
        assert 'price' in form.errors

    def test_moment_needs_an_image(self, snapshot):
        form = MomentForm(data={'name': 'Stage', 'type': 'General'}, catalog=snapshot)
        assert not form.is_valid()

    def test_moment_types_from_service_titles(self, snapshot):
        form = MomentForm(catalog=snapshot)
        choices = [value for value, _ in form.fields['type'].choices]
        assert choices[0] == 'Birthday Celebrations'
        assert choices[-1] == 'General'


class TestRecordBuilders:
    """Documents written to the store"""

    def test_item_record_defaults(self, settings):
        record = build_item_record({
            'slug': 'birthday-gold',
            'name': 'Gold',
            'price': 4000,
            'old_price': 5000,
            'tags': ['new'],
            'stock_qty': 3,
            'rating': None,
            'reviews_count': None,
        })

        assert record['id'] == 'birthday-gold'
        assert record['discountPercent'] == 20
        assert record['discountText'] == '20% OFF'
        assert record['rating'] == 5
        assert record['reviewsCount'] == 0
        assert record['currency'] == settings.CATALOG_CURRENCY
        assert record['availability'] == 'available'
        assert record['deliveryTimeEstimate'] == settings.CATALOG_DELIVERY_ESTIMATE
        assert 'heroImage' not in record

    def test_item_record_with_image(self):
        record = build_item_record({'slug': 's', 'name': 'n', 'price': 1}, image='https://cdn/x.jpg')
        assert record['heroImage'] == 'https://cdn/x.jpg'
        assert record['images'] == ['https://cdn/x.jpg']

    def test_service_record(self):
        record = build_service_record({
            'slug': 'birthday',
            'title': 'Birthday Bash',
            'features': ['Balloons'],
            'price_start': 1999,
        })
        assert record['service'] == 'Birthday Bash'
        assert record['tags'] == ['Balloons']
        assert 'image' not in record
        assert 'discountPercent' not in record

    def test_testimonial_placeholder_avatar(self):
        record = build_testimonial_record({'name': 'Neha Rai', 'rating': 4.5, 'comment': 'Great'})
        assert record['image'] == 'https://ui-avatars.com/api/?name=Neha%20Rai&background=random'

    def test_moment_record(self):
        record = build_moment_record({'name': 'Stage', 'type': 'General'}, image='https://cdn/m.jpg')
        assert record == {'name': 'Stage', 'type': 'General', 'imageUrl': 'https://cdn/m.jpg'}


# ============================================
# UPLOAD TESTS
# ============================================

class TestUploadImage:
    """Upload generator"""

    def test_progress_ends_with_url(self):
        storage = InMemoryStorage(base_url='/media/')
        image = SimpleUploadedFile('cake.jpg', b'x' * 1000, content_type='image/jpeg')

        events = list(upload_image(storage, 'testimonials/1_cake.jpg', image, chunk_size=250))

        assert events[0] == UploadProgress(0)
        assert [e.percent for e in events] == sorted(e.percent for e in events)
        assert events[-1].percent == 100
        assert events[-1].url == '/media/testimonials/1_cake.jpg'
        assert storage.exists('testimonials/1_cake.jpg')

    def test_closing_early_writes_nothing(self):
        storage = InMemoryStorage(base_url='/media/')
        image = SimpleUploadedFile('cake.jpg', b'x' * 1000, content_type='image/jpeg')

        upload = upload_image(storage, 'testimonials/1_cake.jpg', image, chunk_size=250)
        next(upload)
        next(upload)
        upload.close()

        assert not storage.exists('testimonials/1_cake.jpg')

    def test_upload_and_wait_logs_progress(self, caplog):
        caplog.set_level(logging.DEBUG, logger='dashboard.uploads')
        storage = InMemoryStorage(base_url='/media/')
        image = SimpleUploadedFile('cake.jpg', b'x' * 1000, content_type='image/jpeg')

        url = upload_and_wait(storage, 'testimonials/1_cake.jpg', image)

        progress = [r.getMessage() for r in caplog.records if r.getMessage().startswith('Uploading')]
        assert url == '/media/testimonials/1_cake.jpg'
        assert progress[0] == 'Uploading testimonials/1_cake.jpg: 0%'
        assert progress[-1] == 'Uploading testimonials/1_cake.jpg: 100%'


# ============================================
# EDITOR TESTS
# ============================================

class TestCatalogEditor:
    """Single write path for operators"""

    def make_editor(self, memory_store):
        aggregator = MagicMock()
        return CatalogEditor(memory_store, InMemoryStorage(base_url='/media/'), aggregator), aggregator

    def test_save_service_refreshes(self, memory_store):
        editor, aggregator = self.make_editor(memory_store)
        editor.save_service({'slug': 'birthday', 'title': 'Birthday', 'price_start': 1999})

        assert memory_store.get_document('services', 'birthday')['title'] == 'Birthday'
        aggregator.refresh.assert_called_once()

    def test_image_uploaded_before_write(self, memory_store):
        editor, _ = self.make_editor(memory_store)
        image = SimpleUploadedFile('hero.jpg', b'img', content_type='image/jpeg')

        editor.save_service({'slug': 'birthday', 'title': 'Birthday', 'price_start': 1999}, image)

        stored = memory_store.get_document('services', 'birthday')
        assert stored['image'].startswith('/media/services/birthday/hero_')

    def test_edit_without_image_keeps_old_one(self, memory_store):
        memory_store.upsert_document('services/birthday/items', 'birthday-gold', {'heroImage': 'old.jpg'})
        editor, _ = self.make_editor(memory_store)

        editor.save_item('birthday', {'slug': 'birthday-gold', 'name': 'Gold', 'price': 10})

        stored = memory_store.get_document('services/birthday/items', 'birthday-gold')
        assert stored['heroImage'] == 'old.jpg'
        assert stored['name'] == 'Gold'

    def test_failed_upload_writes_nothing(self, memory_store):
        editor, aggregator = self.make_editor(memory_store)
        editor.storage = MagicMock()
        editor.storage.save.side_effect = OSError('bucket unavailable')
        image = SimpleUploadedFile('hero.jpg', b'img', content_type='image/jpeg')

        with pytest.raises(StoreError):
            editor.save_service({'slug': 'birthday', 'title': 'Birthday', 'price_start': 1}, image)

        assert memory_store.list_documents('services') == []
        aggregator.refresh.assert_not_called()

    def test_moment_uses_timestamp_field(self, memory_store):
        editor, _ = self.make_editor(memory_store)
        doc_id = editor.add_moment({'name': 'Stage', 'type': 'General', 'image_url': 'https://cdn/m.jpg'})

        stored = memory_store.get_document('captured_moments', doc_id)
        assert 'timestamp' in stored


# ============================================
# EDITOR VIEW TESTS
# ============================================

@pytest.mark.django_db
class TestServiceViews:

    def test_create_service(self, staff_client, memory_store):
        response = staff_client.post(reverse('dashboard:service_create'), {
            'slug': 'haldi',
            'title': 'Haldi Ceremony',
            'description': 'Marigold everything',
            'features': 'Marigold, Swing',
            'price_start': '3000',
        })

        assert response.status_code == 302
        assert 'Service Saved!' in messages_of(response)
        assert memory_store.get_document('services', 'haldi')['tags'] == ['Marigold', 'Swing']

    def test_edit_service_keeps_slug(self, staff_client, memory_store):
        response = staff_client.post(reverse('dashboard:service_edit', args=['birthday']), {
            'slug': 'renamed',
            'title': 'Birthday Parties',
            'price_start': '2100',
        })

        assert response.status_code == 302
        assert memory_store.get_document('services', 'birthday')['title'] == 'Birthday Parties'
        assert memory_store.list_documents('services')[0][0] == 'birthday'

    def test_store_failure_shows_error(self, staff_client, memory_store):
        memory_store.upsert_document = MagicMock(side_effect=StoreError('denied'))

        response = staff_client.post(reverse('dashboard:service_create'), {
            'slug': 'haldi',
            'title': 'Haldi Ceremony',
            'price_start': '3000',
        })

        assert response.status_code == 200
        assert 'Error saving service' in messages_of(response)

    def test_edit_unknown_service_is_404(self, staff_client):
        response = staff_client.get(reverse('dashboard:service_edit', args=['space-party']))
        assert response.status_code == 404


@pytest.mark.django_db
class TestItemViews:

    def test_item_list(self, staff_client):
        response = staff_client.get(reverse('dashboard:item_list', args=['birthday']))

        assert response.status_code == 200
        assert len(response.context['products']) == 3

    def test_create_item_shows_on_site(self, staff_client, aggregator):
        response = staff_client.post(reverse('dashboard:item_create', args=['birthday']), {
            'slug': 'birthday-gold',
            'name': 'Gold Birthday',
            'price': '4000',
            'old_price': '5000',
            'stock_qty': '5',
        })

        assert response.status_code == 302
        assert 'Item Saved!' in messages_of(response)
        [product] = aggregator.snapshot().products
        assert product.id == 'birthday-gold'
        assert product.discount_text == '20% OFF'

    def test_edit_item_form_prefilled(self, staff_client):
        response = staff_client.get(reverse('dashboard:item_edit', args=['birthday', 'birthday-classic']))

        assert response.status_code == 200
        assert response.context['form'].initial['name'] == 'Classic Birthday Celebrations'
        assert response.context['form'].fields['slug'].disabled


@pytest.mark.django_db
class TestTestimonialViews:

    def test_add_testimonial(self, staff_client, aggregator):
        response = staff_client.post(reverse('dashboard:testimonial_create'), {
            'name': 'Neha Rai',
            'rating': '4.5',
            'comment': 'Beautiful work',
        })

        assert response.status_code == 302
        assert 'Testimonial added successfully!' in messages_of(response)
        [testimonial] = aggregator.snapshot().testimonials
        assert testimonial.rating == 4.5
        assert testimonial.image.startswith('https://ui-avatars.com/')

    def test_add_testimonial_failure(self, staff_client, memory_store):
        memory_store.add_document = MagicMock(side_effect=StoreError('denied'))

        response = staff_client.post(reverse('dashboard:testimonial_create'), {
            'name': 'Neha Rai',
            'rating': '5.0',
            'comment': 'Beautiful work',
        })

        assert 'Failed to save testimonial.' in messages_of(response)

    def test_delete_asks_for_confirmation(self, staff_client, memory_store, aggregator):
        doc_id = memory_store.add_document('testimonials', {'name': 'Neha', 'comment': 'Great'})
        aggregator.refresh()

        response = staff_client.get(reverse('dashboard:testimonial_delete', args=[doc_id]))

        assert response.status_code == 200
        assert memory_store.get_document('testimonials', doc_id)

    def test_confirmed_delete(self, staff_client, memory_store, aggregator):
        keep = memory_store.add_document('testimonials', {'name': 'Amit', 'comment': 'Nice'})
        doc_id = memory_store.add_document('testimonials', {'name': 'Neha', 'comment': 'Great'})
        aggregator.refresh()

        response = staff_client.post(reverse('dashboard:testimonial_delete', args=[doc_id]))

        assert response.status_code == 302
        assert [t.id for t in aggregator.snapshot().testimonials] == [keep]

    def test_failed_delete_keeps_record(self, staff_client):
        # Seed testimonials live only in memory, the store has nothing to delete
        response = staff_client.post(reverse('dashboard:testimonial_delete', args=['1']))

        assert 'Failed to delete.' in messages_of(response)


@pytest.mark.django_db
class TestMomentViews:

    def test_capture_moment_with_upload(self, staff_client, aggregator):
        image = SimpleUploadedFile('stage.gif', (
            b'GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!'
            b'\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;'
        ), content_type='image/gif')

        response = staff_client.post(reverse('dashboard:moment_create'), {
            'name': 'Mandap',
            'type': 'Wedding Decorations',
            'image': image,
        })

        assert response.status_code == 302
        assert 'Moment captured successfully!' in messages_of(response)
        [moment] = aggregator.snapshot().moments
        assert moment.type == 'Wedding Decorations'
        assert '/captured_moments/' in moment.image_url
        assert moment.image_url.endswith('_stage.gif')

    def test_moment_failure(self, staff_client, memory_store):
        memory_store.add_document = MagicMock(side_effect=StoreError('denied'))

        response = staff_client.post(reverse('dashboard:moment_create'), {
            'name': 'Mandap',
            'type': 'General',
            'image_url': 'https://cdn.example.com/m.jpg',
        })

        assert 'Failed to save moment.' in messages_of(response)

    def test_delete_moment(self, staff_client, memory_store, aggregator):
        doc_id = memory_store.add_document(
            'captured_moments', {'name': 'Arch', 'imageUrl': 'a.jpg'}, timestamp_field='timestamp'
        )
        memory_store.add_document(
            'captured_moments', {'name': 'Stage', 'imageUrl': 'b.jpg'}, timestamp_field='timestamp'
        )
        aggregator.refresh()

        response = staff_client.post(reverse('dashboard:moment_delete', args=[doc_id]))

        assert response.status_code == 302
        assert [m.name for m in aggregator.snapshot().moments] == ['Stage']
