"""
Static catalog seed.

This is what the site shows before the document store answers, and
what it keeps showing when the store is empty or unreachable.
"""
from django.conf import settings

from .entities import (
    Service, ProductItem, Package, Testimonial,
    discount_percent, discount_text,
)


SERVICES = (
    Service(
        id='birthday',
        title='Birthday Celebrations',
        description='Magical setups for your special day. From balloon arches to themed parties.',
        image='https://picsum.photos/id/104/800/600',
        price_start=1999,
        features=('Balloon Arches', 'Themed Backdrops', 'Cake Table Decor'),
    ),
    Service(
        id='wedding',
        title='Wedding Decorations',
        description='Elegant floral arrangements and grand stage designs for your big day.',
        image='https://picsum.photos/id/250/800/600',
        price_start=15000,
        features=('Floral Mandap', 'Entrance Gate', 'Stage Lighting'),
    ),
    Service(
        id='anniversary',
        title='Anniversary Parties',
        description='Romantic ambiance with candles, flowers, and elegant dining setups.',
        image='https://picsum.photos/id/360/800/600',
        price_start=2500,
        features=('Candlelight Dinner', 'Room Decor', 'Rose Petal Pathway'),
    ),
    Service(
        id='baby-shower',
        title='Baby Showers',
        description='Cute and cozy decorations to welcome the newest family member.',
        image='https://picsum.photos/id/998/800/600',
        price_start=3500,
        features=('Gender Reveal Props', 'Soft Pastels', 'Photo Booth'),
    ),
    Service(
        id='farewell',
        title='Farewell Party',
        description='Memorable send-offs with classy decor and photo corners.',
        image='https://picsum.photos/id/435/800/600',
        price_start=2000,
        features=('Signature Wall', 'Stage Setup', 'Memory Lane'),
    ),
    Service(
        id='inauguration',
        title='Inauguration Party',
        description='Professional and grand setups for shop or office openings.',
        image='https://picsum.photos/id/106/800/600',
        price_start=5000,
        features=('Ribbon Cutting Area', 'Flower Garlands', 'Entrance Carpet'),
    ),
)

PACKAGES = (
    Package(
        id='bday-basic',
        service_id='birthday',
        name='Basic Balloon Bliss',
        price=1999,
        image='https://picsum.photos/id/158/400/300',
        includes=('200 Balloons', 'Happy Birthday Foil', 'Ribbons'),
    ),
    Package(
        id='bday-premium',
        service_id='birthday',
        name='Premium Theme Setup',
        price=4999,
        image='https://picsum.photos/id/327/400/300',
        includes=('Arch Setup', 'Backdrop', 'LED Lights', 'Name Cutout'),
    ),
    Package(
        id='wed-royal',
        service_id='wedding',
        name='Royal Floral Stage',
        price=25000,
        image='https://picsum.photos/id/514/400/300',
        includes=('Fresh Flowers', 'Sofa Set', 'Stage Carpet', 'Backdrop Drapes'),
    ),
)

TESTIMONIALS = (
    Testimonial(
        id='1',
        name='Priya Singh',
        comment="Absolutely stunning decoration for my son's 1st birthday! The team was punctual and creative.",
        rating=5,
        image='https://picsum.photos/id/64/100/100',
    ),
    Testimonial(
        id='2',
        name='Rahul Verma',
        comment="Used their service for my sister's wedding haldi. Very professional and budget-friendly.",
        rating=5,
        image='https://picsum.photos/id/91/100/100',
    ),
    Testimonial(
        id='3',
        name='Amit Gupta',
        comment='The surprise room decor for my wife was perfect. She loved it! Highly recommended.',
        rating=4,
        image='https://picsum.photos/id/177/100/100',
    ),
)

# (slug suffix, display prefix, price multiplier, markup on the old price, tags, rating, reviews)
_TIERS = (
    ('classic', 'Classic', 1, 1.25, ('budget', 'bestseller'), 4.6, 128),
    ('premium', 'Premium', 2.5, 1.2, ('bestseller',), 4.8, 86),
    ('luxury', 'Luxury', 5, 1.15, ('new',), 4.9, 31),
)


def generate_products(services=SERVICES):
    """Three priced tiers per service, derived from its starting price."""
    products = []
    for index, service in enumerate(services):
        for slug, prefix, multiplier, markup, tags, rating, reviews in _TIERS:
            price = round(service.price_start * multiplier)
            old_price = round(price * markup)
            percent = discount_percent(price, old_price)
            image = f'https://picsum.photos/seed/{service.id}-{slug}/600/450'
            products.append(ProductItem(
                id=f'{service.id}-{slug}',
                service_id=service.id,
                name=f'{prefix} {service.title}',
                image=image,
                images=(image,),
                price=price,
                old_price=old_price,
                discount_percent=percent,
                discount_text=discount_text(percent),
                short_description=f'{prefix} setup: ' + ', '.join(service.features).lower() + '.',
                full_description=(
                    f'{service.description} The {prefix.lower()} package includes '
                    + ', '.join(service.features) + '.'
                ),
                tags=tags,
                rating=rating,
                reviews_count=reviews + index * 7,
                stock_qty=10,
                availability='available',
                delivery_time_estimate=settings.CATALOG_DELIVERY_ESTIMATE,
                currency=settings.CATALOG_CURRENCY,
            ))
    return tuple(products)
