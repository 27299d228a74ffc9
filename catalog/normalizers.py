"""
Raw document -> canonical entity.

Stored documents were written by more than one version of the admin
forms, so field names drift (``service`` vs ``title``, ``tags`` vs
``features``, ``reviews`` vs ``reviewsCount``). Each function here is
total: any mapping, however sparse, produces a usable entity.
"""
from datetime import datetime

from django.conf import settings

from .entities import (
    Service, ProductItem, Testimonial, CapturedMoment,
    avatar_placeholder, discount_percent, discount_text,
)


def _first(raw, *keys, default=None):
    for key in keys:
        value = raw.get(key)
        if value not in (None, '', [], ()):
            return value
    return default


def _number(value, default=0):
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number or number < 0:  # NaN or negative
        return default
    return int(number) if number.is_integer() else number


def _strings(value):
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(',') if part.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(part) for part in value if part not in (None, ''))
    return ()


def _timestamp(value):
    return value if isinstance(value, datetime) else None


def normalize_service(doc_id, raw):
    raw = raw or {}
    return Service(
        id=str(doc_id),
        title=str(_first(raw, 'service', 'title', default=doc_id)),
        description=str(_first(raw, 'description', default='')),
        image=str(_first(raw, 'image', 'heroImage', default='')),
        price_start=_number(raw.get('priceStart')),
        features=_strings(_first(raw, 'tags', 'features', default=())),
        created_at=_timestamp(raw.get('createdAt')),
        updated_at=_timestamp(raw.get('updatedAt')),
    )


def normalize_product(service_id, doc_id, raw):
    """``service_id`` comes from where the document is stored, never from its fields."""
    raw = raw or {}
    images = _strings(raw.get('images'))
    image = str(_first(raw, 'heroImage', 'image', default=images[0] if images else ''))
    price = _number(raw.get('price'))
    old_price = _number(raw.get('oldPrice'))
    percent = discount_percent(price, old_price)
    return ProductItem(
        id=str(_first(raw, 'id', default=doc_id)),
        service_id=service_id,
        name=str(_first(raw, 'name', 'title', default=doc_id)),
        image=image,
        images=images or ((image,) if image else ()),
        price=price,
        old_price=old_price,
        discount_percent=percent,
        discount_text=discount_text(percent),
        short_description=str(_first(raw, 'shortDescription', 'shortDesc', default='')),
        full_description=str(_first(raw, 'fullDescription', 'fullDesc', 'description', default='')),
        tags=_strings(raw.get('tags')),
        rating=_number(raw.get('rating'), default=5),
        reviews_count=int(_number(_first(raw, 'reviewsCount', 'reviews', default=0))),
        stock_qty=int(_number(_first(raw, 'stockQty', 'stock', default=0))),
        availability=str(_first(raw, 'availability', default='available')),
        delivery_time_estimate=str(_first(
            raw, 'deliveryTimeEstimate', default=settings.CATALOG_DELIVERY_ESTIMATE
        )),
        currency=str(_first(raw, 'currency', default=settings.CATALOG_CURRENCY)),
        created_at=_timestamp(raw.get('createdAt')),
        updated_at=_timestamp(raw.get('updatedAt')),
    )


def normalize_testimonial(doc_id, raw):
    raw = raw or {}
    name = str(_first(raw, 'name', default='Happy Client'))
    return Testimonial(
        id=str(doc_id),
        name=name,
        rating=_number(raw.get('rating'), default=5),
        comment=str(_first(raw, 'comment', 'message', default='')),
        image=str(_first(raw, 'image', 'imageUrl', default=avatar_placeholder(name))),
        created_at=_timestamp(raw.get('createdAt')),
    )


def normalize_moment(doc_id, raw):
    raw = raw or {}
    return CapturedMoment(
        id=str(doc_id),
        name=str(_first(raw, 'name', default='')),
        type=str(_first(raw, 'type', default='General')),
        image_url=str(_first(raw, 'imageUrl', 'image', default='')),
        timestamp=_timestamp(_first(raw, 'timestamp', 'createdAt')),
    )
