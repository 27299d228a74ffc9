import json
import pytest
from datetime import timedelta
from urllib.parse import unquote
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from booking.composer import (
    BookingComposer, ComposerState, LocationFix,
    compose_inquiry_message, format_price, location_line, resolve_item, whatsapp_url,
)
from booking.forms import (
    ADDRESS_ERROR, DATE_ERROR, EMAIL_ERROR, GUESTS_ERROR, MESSAGE_ERROR, NAME_ERROR, PHONE_ERROR,
    BookingForm, InquiryForm,
)
from catalog import seed
from catalog.entities import CatalogSnapshot, ProductItem


@pytest.fixture
def seed_snapshot():
    return CatalogSnapshot(
        services=seed.SERVICES,
        products=seed.generate_products(),
        testimonials=seed.TESTIMONIALS,
    )


# ============================================
# FORM VALIDATION TESTS
# ============================================

class TestBookingForm:
    """Field rules of the booking form"""

    def make_form(self, snapshot, data, **changes):
        return BookingForm(data={**data, **changes}, catalog=snapshot)

    def test_valid_booking(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data)
        assert form.is_valid(), form.errors

    def test_short_name_rejected(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, name=' Jo ')
        assert not form.is_valid()
        assert form.errors['name'] == [NAME_ERROR]

    @pytest.mark.parametrize('phone', ['598765432', '5876543210', 'abcdefghij'])
    def test_bad_phone_rejected(self, seed_snapshot, valid_booking_data, phone):
        form = self.make_form(seed_snapshot, valid_booking_data, phone=phone)
        assert not form.is_valid()
        assert form.errors['phone'] == [PHONE_ERROR]

    def test_email_is_optional_but_checked(self, seed_snapshot, valid_booking_data):
        assert self.make_form(seed_snapshot, valid_booking_data, email='').is_valid()

        form = self.make_form(seed_snapshot, valid_booking_data, email='priya@example')
        assert not form.is_valid()
        assert form.errors['email'] == [EMAIL_ERROR]

    def test_today_is_accepted(self, seed_snapshot, valid_booking_data):
        today = timezone.localdate().isoformat()
        assert self.make_form(seed_snapshot, valid_booking_data, date=today).is_valid()

    def test_past_date_rejected(self, seed_snapshot, valid_booking_data):
        yesterday = (timezone.localdate() - timedelta(days=1)).isoformat()
        form = self.make_form(seed_snapshot, valid_booking_data, date=yesterday)
        assert not form.is_valid()
        assert form.errors['date'] == [DATE_ERROR]

    def test_blank_address_rejected(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, address='   ')
        assert not form.is_valid()
        assert form.errors['address'] == [ADDRESS_ERROR]

    def test_guest_minimum(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, guests='4')
        assert not form.is_valid()
        assert form.errors['guests'] == [GUESTS_ERROR]

        assert self.make_form(seed_snapshot, valid_booking_data, guests='5').is_valid()

    def test_unknown_service_rejected(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, service='space-party')
        assert not form.is_valid()
        assert 'service' in form.errors

    def test_package_of_other_service_is_cleared(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, package='wed-royal')
        assert form.is_valid()
        assert form.cleaned_data['package'] == ''

    def test_package_choices_follow_service(self, seed_snapshot):
        form = BookingForm(initial={'service': 'wedding'}, catalog=seed_snapshot)
        ids = [option_id for option_id, _ in form.package_options]
        assert 'wed-royal' in ids
        assert 'bday-basic' not in ids

    def test_half_coordinates_are_dropped(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, latitude='25.3176', longitude='')
        assert form.is_valid()
        assert form.cleaned_data['latitude'] is None

    def test_unreadable_coordinates_are_dropped(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, latitude='NaN-ish', longitude='82.9739')
        assert form.is_valid(), form.errors
        assert form.cleaned_data['latitude'] is None
        assert form.cleaned_data['longitude'] is None

    def test_out_of_range_coordinates_are_dropped(self, seed_snapshot, valid_booking_data):
        form = self.make_form(seed_snapshot, valid_booking_data, latitude='125', longitude='82.9739')
        assert form.is_valid(), form.errors
        assert form.cleaned_data['latitude'] is None


class TestInquiryForm:
    """Contact page form"""

    def test_valid_inquiry(self, seed_snapshot):
        form = InquiryForm(data={
            'name': 'Rohit',
            'phone': '9123456780',
            'service': 'Wedding Decorations',
            'message': 'Need a quote for December.',
        }, catalog=seed_snapshot)
        assert form.is_valid(), form.errors

    def test_short_message_rejected(self, seed_snapshot):
        form = InquiryForm(data={
            'name': 'Rohit',
            'phone': '9123456780',
            'service': 'General Inquiry',
            'message': 'Hi',
        }, catalog=seed_snapshot)
        assert not form.is_valid()
        assert form.errors['message'] == [MESSAGE_ERROR]


# ============================================
# COMPOSER TESTS
# ============================================

class TestResolveItem:
    """Product, then static package, then the service itself"""

    def test_product_wins_over_package_with_same_id(self):
        product = ProductItem(id='bday-premium', service_id='birthday', name='Remote Premium', price=5500)
        snapshot = CatalogSnapshot(services=seed.SERVICES, products=(product,))

        item = resolve_item(snapshot, 'birthday', 'bday-premium')
        assert item.kind == 'product'
        assert item.name == 'Remote Premium'
        assert item.price == 5500

    def test_static_package(self, seed_snapshot):
        item = resolve_item(seed_snapshot, 'wedding', 'wed-royal')
        assert item.kind == 'package'
        assert item.name == 'Royal Floral Stage'
        assert item.price == 25000

    def test_service_fallback(self, seed_snapshot):
        item = resolve_item(seed_snapshot, 'farewell', '')
        assert item.kind == 'service'
        assert item.name == 'Farewell Party'
        assert item.price is None
        assert format_price(item.price) == 'Contact for pricing'


class TestMessageParts:

    def test_location_line(self):
        assert location_line(None) == 'Not shared by user'
        assert location_line(LocationFix(25.3176, 82.9739)) == 'https://www.google.com/maps?q=25.3176,82.9739'

    def test_format_price(self):
        assert format_price(25000) == '₹25,000'
        assert format_price(1999.5) == '₹1,999.50'

    def test_whatsapp_url_encodes_message(self, settings):
        url = whatsapp_url('Hello there\nName: Priya')
        assert url.startswith(f'https://wa.me/{settings.BUSINESS_PHONE_NUMBER}?text=')
        assert 'Hello%20there%0AName%3A%20Priya' in url

    def test_inquiry_message(self):
        message = compose_inquiry_message({
            'name': 'Rohit',
            'phone': '9123456780',
            'service': 'General Inquiry',
            'message': 'Need a quote for December.',
        })
        assert message.splitlines() == [
            'New Inquiry from Website:',
            'Name: Rohit',
            'Phone: 9123456780',
            'Interested In: General Inquiry',
            'Message: Need a quote for December.',
        ]


class TestBookingComposer:
    """State machine from edits to the handoff"""

    def test_valid_submission_reaches_done(self, seed_snapshot, valid_booking_data):
        composer = BookingComposer(seed_snapshot, initial=valid_booking_data)
        handoff = composer.submit()

        assert composer.state == ComposerState.DONE
        assert handoff.url.startswith('https://wa.me/')
        lines = handoff.message.splitlines()
        assert 'Name: Priya Kumar' in lines
        assert 'Phone: 9876543210' in lines
        assert 'Item: Birthday Celebrations' in lines
        assert 'Price: Contact for pricing' in lines
        assert 'Email: N/A' in lines
        assert 'Time: Flexible' in lines
        assert 'Location: Not shared by user' in lines
        assert 'Note: None' in lines
        assert lines[-1] == 'Source: Website'

    def test_invalid_submission_returns_to_editing(self, seed_snapshot, valid_booking_data):
        composer = BookingComposer(seed_snapshot, initial={**valid_booking_data, 'guests': '4'})

        assert composer.submit() is None
        assert composer.state == ComposerState.EDITING
        assert composer.errors['guests'] == [GUESTS_ERROR]
        assert composer.handoff is None

    def test_service_change_clears_package(self, seed_snapshot, valid_booking_data):
        composer = BookingComposer(seed_snapshot, initial={**valid_booking_data, 'package': 'bday-basic'})
        composer.update(service='wedding')
        assert composer.data['package'] == ''

        composer.update(package='wed-royal')
        handoff = composer.submit()
        assert 'Item: Royal Floral Stage' in handoff.message
        assert 'Price: ₹25,000' in handoff.message

    def test_no_edits_after_done(self, seed_snapshot, valid_booking_data):
        composer = BookingComposer(seed_snapshot, initial=valid_booking_data)
        composer.submit()

        with pytest.raises(RuntimeError):
            composer.update(name='Someone Else')

        composer.reset()
        assert composer.state == ComposerState.EDITING
        assert composer.data == {}

    def test_posted_coordinates_become_map_link(self, seed_snapshot, valid_booking_data):
        data = {**valid_booking_data, 'latitude': '25.3176', 'longitude': '82.9739'}
        handoff = BookingComposer(seed_snapshot, initial=data).submit()
        assert 'Location: https://www.google.com/maps?q=25.3176,82.9739' in handoff.message

    def test_explicit_location(self, seed_snapshot, valid_booking_data):
        composer = BookingComposer(seed_snapshot, initial=valid_booking_data)
        handoff = composer.submit(location=LocationFix(25.0, 83.0))
        assert 'Location: https://www.google.com/maps?q=25.0,83.0' in handoff.message

    def test_locator_failure_never_blocks(self, seed_snapshot, valid_booking_data):
        def broken_locator(cleaned):
            raise TimeoutError('no fix within 8s')

        composer = BookingComposer(seed_snapshot, initial=valid_booking_data, locator=broken_locator)
        handoff = composer.submit()
        assert 'Location: Not shared by user' in handoff.message

    def test_without_location_step(self, seed_snapshot, valid_booking_data):
        composer = BookingComposer(seed_snapshot, initial=valid_booking_data, request_location=False)
        handoff = composer.submit()
        assert 'Location:' not in handoff.message


# ============================================
# VIEW TESTS
# ============================================

@pytest.mark.django_db
class TestBookingViews:
    """Booking page and JSON endpoints"""

    def test_booking_page_prefilled(self, client, aggregator):
        response = client.get(reverse('booking:booking'), {'service': 'wedding', 'package': 'wed-royal'})

        assert response.status_code == 200
        form = response.context['form']
        assert form['service'].value() == 'wedding'
        assert form['package'].value() == 'wed-royal'
        assert response.context['geolocation'] == {'timeout': 8000, 'enableHighAccuracy': True}

    def test_unknown_service_defaults_to_first(self, client, aggregator):
        response = client.get(reverse('booking:booking'), {'service': 'space-party'})
        assert response.context['form']['service'].value() == 'birthday'

    def test_invalid_post_shows_errors(self, client, aggregator, valid_booking_data):
        response = client.post(reverse('booking:booking'), {**valid_booking_data, 'phone': '12345'})

        assert response.status_code == 400
        assert PHONE_ERROR in response.content.decode()

    def test_valid_post_renders_handoff(self, client, aggregator, valid_booking_data):
        response = client.post(reverse('booking:booking'), valid_booking_data)

        assert response.status_code == 200
        assert 'booking/handoff.html' in [t.name for t in response.templates]
        assert response.context['whatsapp_url'].startswith('https://wa.me/')
        assert 'Name: Priya Kumar' in response.context['booking_message']

    def test_json_post(self, client, aggregator, valid_booking_data):
        response = client.post(
            reverse('booking:booking'), valid_booking_data, HTTP_ACCEPT='application/json'
        )

        data = json.loads(response.content)
        assert data['success'] is True
        assert 'Phone: 9876543210' in unquote(data['whatsapp_url'])

    def test_compose_api(self, api_client, aggregator, valid_booking_data):
        response = api_client.post(
            reverse('booking_api:compose'), {**valid_booking_data, 'guests': 20}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert 'Guests: 20' in response.data['message']

    def test_compose_api_rejects_invalid(self, api_client, aggregator, valid_booking_data):
        response = api_client.post(
            reverse('booking_api:compose'), {**valid_booking_data, 'name': 'Jo'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['message'] == 'Invalid Booking Details'
        assert response.data['error']['details']['name'] == [NAME_ERROR]

    def test_bad_hidden_location_still_books(self, client, aggregator, valid_booking_data):
        response = client.post(reverse('booking:booking'), {**valid_booking_data, 'latitude': 'NaN-ish'})

        assert response.status_code == 200
        assert 'Location: Not shared by user' in response.context['booking_message']

    def test_page_carries_every_service_package(self, client, aggregator):
        response = client.get(reverse('booking:booking'), {'service': 'birthday'})

        options = response.context['package_options']
        assert [s.id for s in aggregator.snapshot().services] == list(options)
        assert 'wed-royal' in [option_id for option_id, _ in options['wedding']]
        assert 'id="package-options"' in response.content.decode()

    def test_compose_api_rejects_non_object_body(self, api_client, aggregator):
        response = api_client.post(reverse('booking_api:compose'), [1, 2], format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert 'non_field_errors' in response.data['error']['details']
