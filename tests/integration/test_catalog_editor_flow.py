# tests/integration/test_catalog_editor_flow.py
"""
Integration tests for the Catalog Editor:
- Operator logs in
- Edits a service and adds an item
- Changes show up on the public pages and in the booking flow
"""

import pytest
from django.urls import reverse


@pytest.mark.django_db
class TestOperatorEditingFlow:
    """Test operator editing journey"""

    def test_new_item_reaches_booking(self, client, staff_user, aggregator, valid_booking_data):
        """An item saved in the editor is bookable right away"""
        client.post(reverse('dashboard:login'), {'username': 'operator', 'password': 'testpass123'})

        client.post(reverse('dashboard:service_edit', args=['birthday']), {
            'title': 'Birthday Celebrations',
            'description': 'Balloons and more',
            'price_start': '1999',
        })
        client.post(reverse('dashboard:item_create', args=['birthday']), {
            'slug': 'birthday-unicorn',
            'name': 'Unicorn Theme',
            'price': '3499',
            'old_price': '3999',
            'tags': 'new, kids',
            'stock_qty': '4',
        })
        client.get(reverse('dashboard:logout'))

        detail = client.get(reverse('landing:service_detail', args=['birthday']), {'tag': 'kids'})
        assert [p.id for p in detail.context['products']] == ['birthday-unicorn']
        assert detail.context['products'][0].discount_text == '13% OFF'

        response = client.post(reverse('booking:booking'), {**valid_booking_data, 'package': 'birthday-unicorn'})
        assert 'Item: Unicorn Theme' in response.context['booking_message']
        assert 'Price: ₹3,499' in response.context['booking_message']

    def test_store_outage_keeps_site_up(self, client, aggregator, memory_store):
        """A failing store leaves the last catalog in place"""
        memory_store.upsert_document('services', 'birthday', {'service': 'Birthday Bash'})
        aggregator.refresh()

        def down(*args, **kwargs):
            from catalog.exceptions import StoreError
            raise StoreError('connection refused')

        memory_store.list_documents = down
        memory_store.list_group = down
        aggregator.refresh()

        response = client.get(reverse('landing:services'))
        assert response.status_code == 200
        assert [s.title for s in response.context['services']] == ['Birthday Bash']

    def test_gallery_moment_round_trip(self, client, staff_user, aggregator):
        """A captured moment appears in the gallery and can be removed"""
        client.force_login(staff_user)
        client.post(reverse('dashboard:moment_create'), {
            'name': 'Haldi Swing',
            'type': 'Wedding Decorations',
            'image_url': 'https://cdn.example.com/haldi.jpg',
        })

        gallery = client.get(reverse('landing:gallery'), {'type': 'Wedding Decorations'})
        [moment] = gallery.context['moments']
        assert moment.name == 'Haldi Swing'

        client.get(reverse('dashboard:moment_delete', args=[moment.id]))
        assert client.get(reverse('landing:gallery')).context['moments'] == [moment]

        client.post(reverse('dashboard:moment_delete', args=[moment.id]))
        assert aggregator.store.list_documents('captured_moments') == []
