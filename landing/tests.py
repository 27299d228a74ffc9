import pytest
from django.urls import reverse

from catalog.entities import CapturedMoment


@pytest.mark.django_db
class TestPublicPages:
    """Public catalog pages render from the site catalog"""

    def test_home_page_loads(self, client, aggregator):
        response = client.get(reverse('landing:home'))

        assert response.status_code == 200
        assert len(response.context['services']) == 6
        assert 'Priya Singh' in response.content.decode()

    def test_business_details_in_every_page(self, client, aggregator, settings):
        response = client.get(reverse('landing:services'))

        assert response.context['business']['name'] == settings.BUSINESS_NAME
        assert settings.BUSINESS_PHONE_DISPLAY in response.content.decode()

    def test_services_page_links_to_booking(self, client, aggregator):
        response = client.get(reverse('landing:services'))

        assert response.status_code == 200
        assert f"{reverse('booking:booking')}?service=wedding" in response.content.decode()

    def test_unknown_service_is_404(self, client, aggregator):
        response = client.get(reverse('landing:service_detail', args=['space-party']))
        assert response.status_code == 404


@pytest.mark.django_db
class TestServiceDetail:
    """Tag filter, search and sort on one service"""

    def url(self):
        return reverse('landing:service_detail', args=['birthday'])

    def test_lists_service_products(self, client, aggregator):
        response = client.get(self.url())

        assert response.status_code == 200
        assert [p.id for p in response.context['products']] == [
            'birthday-luxury', 'birthday-premium', 'birthday-classic',
        ]
        assert response.context['tags'] == ['budget', 'bestseller', 'new']

    def test_filter_by_tag(self, client, aggregator):
        response = client.get(self.url(), {'tag': 'budget'})
        assert [p.id for p in response.context['products']] == ['birthday-classic']

    def test_search(self, client, aggregator):
        response = client.get(self.url(), {'q': 'luxury'})
        assert [p.id for p in response.context['products']] == ['birthday-luxury']

    def test_sort_price_ascending(self, client, aggregator):
        response = client.get(self.url(), {'sort': 'price-asc'})
        prices = [p.price for p in response.context['products']]
        assert prices == sorted(prices)

    def test_unknown_sort_falls_back_to_popular(self, client, aggregator):
        response = client.get(self.url(), {'sort': 'cheapest'})
        assert response.context['sort'] == 'popular'

    def test_product_links_carry_package(self, client, aggregator):
        response = client.get(self.url())
        assert 'service=birthday&package=birthday-classic' in response.content.decode()

    def test_product_cards_link_to_detail(self, client, aggregator):
        response = client.get(self.url())
        detail = reverse('landing:product_detail', args=['birthday', 'birthday-classic'])
        assert detail in response.content.decode()


@pytest.mark.django_db
class TestProductDetail:
    """One design with its full description and photos"""

    @pytest.fixture
    def gold(self, aggregator, memory_store):
        memory_store.upsert_document('services/birthday/items', 'birthday-gold', {
            'id': 'birthday-gold',
            'name': 'Golden Jubilee Arch',
            'heroImage': 'https://cdn.example/gold-1.jpg',
            'images': ['https://cdn.example/gold-1.jpg', 'https://cdn.example/gold-2.jpg'],
            'price': 4000,
            'oldPrice': 5000,
            'shortDescription': 'Gold arch',
            'fullDescription': 'Balloon arch in gold and white.\nSetup takes two hours.',
            'tags': ['new'],
            'stockQty': 2,
            'availability': 'available',
            'deliveryTimeEstimate': '2-3 days',
        })
        aggregator.refresh()

    def test_shows_full_description_and_photos(self, client, gold):
        response = client.get(reverse('landing:product_detail', args=['birthday', 'birthday-gold']))

        content = response.content.decode()
        assert response.status_code == 200
        assert 'Balloon arch in gold and white.<br>Setup takes two hours.' in content
        assert response.context['gallery'] == ['https://cdn.example/gold-2.jpg']
        assert 'https://cdn.example/gold-2.jpg' in content
        assert 'Delivery in 2-3 days' in content
        assert 'Save 20% OFF' in content
        assert response.context['highlight'] == 'new'

    def test_book_button_carries_package(self, client, gold):
        response = client.get(reverse('landing:product_detail', args=['birthday', 'birthday-gold']))
        assert 'service=birthday&package=birthday-gold' in response.content.decode()

    def test_item_under_wrong_service_is_404(self, client, gold):
        response = client.get(reverse('landing:product_detail', args=['wedding', 'birthday-gold']))
        assert response.status_code == 404

    def test_unknown_item_is_404(self, client, aggregator):
        response = client.get(reverse('landing:product_detail', args=['birthday', 'nope']))
        assert response.status_code == 404


@pytest.mark.django_db
class TestGallery:
    """Captured moments filtered by type"""

    @pytest.fixture
    def moments(self, aggregator):
        moments = (
            CapturedMoment(id='1', name='Stage', type='Wedding Decorations', image_url='a.jpg'),
            CapturedMoment(id='2', name='Arch', type='Birthday Celebrations', image_url='b.jpg'),
        )
        aggregator._apply('moments', moments, token=1)
        return moments

    def test_gallery_types(self, client, moments):
        response = client.get(reverse('landing:gallery'))

        assert response.context['types'] == ['All', 'Wedding Decorations', 'Birthday Celebrations']
        assert len(response.context['moments']) == 2

    def test_gallery_filter(self, client, moments):
        response = client.get(reverse('landing:gallery'), {'type': 'Birthday Celebrations'})
        assert [m.name for m in response.context['moments']] == ['Arch']

    def test_empty_gallery(self, client, aggregator):
        response = client.get(reverse('landing:gallery'))

        assert response.status_code == 200
        assert response.context['types'] == ['All']


@pytest.mark.django_db
class TestContactPage:
    """Inquiry form hands off to WhatsApp"""

    def test_contact_page_loads(self, client, aggregator):
        response = client.get(reverse('landing:contact'))

        assert response.status_code == 200
        choices = [value for value, _ in response.context['form'].fields['service'].choices]
        assert choices[0] == 'General Inquiry'
        assert 'Wedding Decorations' in choices

    def test_valid_inquiry_hands_off(self, client, aggregator):
        response = client.post(reverse('landing:contact'), {
            'name': 'Rohit Sharma',
            'phone': '9123456780',
            'service': 'Wedding Decorations',
            'message': 'Need a quote for a December wedding.',
        })

        assert response.status_code == 200
        assert response.context['whatsapp_url'].startswith('https://wa.me/')
        assert 'Interested In: Wedding Decorations' in response.context['booking_message']

    def test_invalid_inquiry_shows_errors(self, client, aggregator):
        response = client.post(reverse('landing:contact'), {
            'name': 'Ro',
            'phone': '123',
            'service': 'General Inquiry',
            'message': 'Hi',
        })

        assert response.status_code == 200
        assert set(response.context['form'].errors) == {'name', 'phone', 'message'}
