# tests/integration/test_booking_flow.py
"""
Integration tests for the Booking Flow:
- Visitor browses a service
- Picks a design and opens the booking page
- Submits the booking
- Gets handed off to WhatsApp
"""

import pytest
from urllib.parse import unquote
from django.urls import reverse

from catalog.entities import ProductItem


@pytest.mark.django_db
class TestVisitorBookingFlow:
    """Test visitor booking journey"""

    def test_browse_then_book_a_design(self, client, aggregator, tomorrow):
        """Visitor goes from a design card straight to a prefilled booking"""
        detail = client.get(reverse('landing:service_detail', args=['wedding']))
        product = detail.context['products'][0]

        page = client.get(reverse('booking:booking'), {'service': 'wedding', 'package': product.id})
        assert page.context['form']['package'].value() == product.id

        response = client.post(reverse('booking:booking'), {
            'name': 'Anjali Mishra',
            'phone': '8765432109',
            'email': 'anjali@example.com',
            'service': 'wedding',
            'package': product.id,
            'date': tomorrow.isoformat(),
            'time': '18:30',
            'address': 'Assi Ghat, Varanasi',
            'guests': '300',
            'message': 'Red and gold theme',
        })

        message = response.context['booking_message']
        assert 'Service: Wedding Decorations' in message
        assert f'Item: {product.name}' in message
        assert f'Price: ₹{product.price:,}' in message
        assert 'Time: 18:30' in message
        assert 'Note: Red and gold theme' in message

    def test_priya_kumar_books_without_package(self, client, aggregator, valid_booking_data):
        """Minimal valid booking produces the expected WhatsApp message"""
        response = client.post(reverse('booking:booking'), valid_booking_data)

        assert response.status_code == 200
        message = response.context['booking_message']
        lines = message.splitlines()
        assert 'Name: Priya Kumar' in lines
        assert 'Phone: 9876543210' in lines
        assert 'Guests: 20' in lines
        assert 'Address: MG Road, Varanasi' in lines
        assert 'Location: Not shared by user' in lines

        url = response.context['whatsapp_url']
        assert url.startswith('https://wa.me/')
        assert unquote(url.split('?text=', 1)[1]) == message
        assert 'window.open' in response.content.decode()

    def test_shared_location_becomes_map_link(self, client, aggregator, valid_booking_data):
        """Coordinates from the browser end up as a maps link"""
        response = client.post(reverse('booking:booking'), {
            **valid_booking_data,
            'latitude': '25.3176',
            'longitude': '82.9739',
        })

        assert 'Location: https://www.google.com/maps?q=25.3176,82.9739' in response.context['booking_message']

    def test_denied_location_still_books(self, client, aggregator, valid_booking_data):
        """A geolocation error never blocks the booking"""
        response = client.post(reverse('booking:booking'), {
            **valid_booking_data,
            'location_error': 'User denied Geolocation',
        })

        assert response.status_code == 200
        assert 'Location: Not shared by user' in response.context['booking_message']

    def test_invalid_booking_never_hands_off(self, client, aggregator, valid_booking_data):
        """Invalid input keeps the visitor on the form"""
        response = client.post(reverse('booking:booking'), {**valid_booking_data, 'guests': '4'})

        assert response.status_code == 400
        assert 'whatsapp_url' not in response.context
        assert 'Minimum 5 guests required' in response.content.decode()

    def test_remote_product_shadows_static_package(self, client, aggregator, memory_store, valid_booking_data):
        """A stored product with a static package's id wins in the message"""
        memory_store.upsert_document('services/birthday/items', 'bday-premium', {
            'id': 'bday-premium',
            'name': 'Premium Theme Setup 2.0',
            'price': 5999,
        })
        aggregator.refresh()

        response = client.post(reverse('booking:booking'), {**valid_booking_data, 'package': 'bday-premium'})

        message = response.context['booking_message']
        assert 'Item: Premium Theme Setup 2.0' in message
        assert 'Price: ₹5,999' in message
        assert isinstance(aggregator.snapshot().products[0], ProductItem)
