"""
Document shapes written to the store. The catalog editor and the
``seed_catalog`` command both build their records here, so what the
normalizers read back is the same whichever path wrote it.
"""
from decimal import Decimal

from django.conf import settings

from .entities import avatar_placeholder, discount_percent, discount_text

SERVICES = 'services'
TESTIMONIALS = 'testimonials'
MOMENTS = 'captured_moments'


def items_path(service_id):
    return f'{SERVICES}/{service_id}/items'


def _plain_number(value, default=0):
    """Decimals from forms become int or float so every store can hold them."""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


# ============================================
# RECORD BUILDERS
# ============================================

def build_service_record(data, image=None):
    record = {
        'service': data['title'],
        'title': data['title'],
        'slug': data['slug'],
        'description': data.get('description', ''),
        'tags': list(data.get('features') or []),
        'priceStart': _plain_number(data.get('price_start')),
    }
    image = image or data.get('image_url')
    if image:
        record['image'] = image
    return record


def build_item_record(data, image=None):
    price = _plain_number(data.get('price'))
    old_price = _plain_number(data.get('old_price'))
    percent = discount_percent(price, old_price)
    record = {
        'id': data['slug'],
        'name': data['name'],
        'price': price,
        'oldPrice': old_price,
        'discountPercent': percent,
        'discountText': discount_text(percent),
        'shortDescription': data.get('short_description', ''),
        'fullDescription': data.get('full_description', ''),
        'tags': list(data.get('tags') or []),
        'stockQty': data.get('stock_qty') or 0,
        'rating': _plain_number(data.get('rating'), default=5),
        'reviewsCount': data.get('reviews_count') or 0,
        'currency': settings.CATALOG_CURRENCY,
        'availability': 'available',
        'deliveryTimeEstimate': settings.CATALOG_DELIVERY_ESTIMATE,
    }
    image = image or data.get('image_url')
    if image:
        record['heroImage'] = image
        record['images'] = [image]
    return record


def build_testimonial_record(data, image=None):
    return {
        'name': data['name'],
        'rating': _plain_number(data.get('rating'), default=5),
        'comment': data['comment'],
        'image': image or data.get('image_url') or avatar_placeholder(data['name']),
    }


def build_moment_record(data, image=None):
    return {
        'name': data['name'],
        'type': data.get('type') or 'General',
        'imageUrl': image or data.get('image_url', ''),
    }
