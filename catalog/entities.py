"""
Canonical catalog types.

Every record read from the document store is normalized into one of
these before the rest of the site sees it. They are frozen so a
snapshot handed to a view can never be edited in place.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import quote


@dataclass(frozen=True)
class Service:
    id: str
    title: str
    description: str = ''
    image: str = ''
    price_start: float = 0
    features: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ProductItem:
    id: str
    service_id: str
    name: str
    image: str = ''
    images: tuple[str, ...] = ()
    price: float = 0
    old_price: float = 0
    discount_percent: int = 0
    discount_text: str = ''
    short_description: str = ''
    full_description: str = ''
    tags: tuple[str, ...] = ()
    rating: float = 5
    reviews_count: int = 0
    stock_qty: int = 0
    availability: str = 'available'
    delivery_time_estimate: str = ''
    currency: str = 'INR'
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def in_stock(self):
        return self.availability == 'available' and self.stock_qty > 0


@dataclass(frozen=True)
class Package:
    """Hand-written package from the static seed, never stored remotely."""
    id: str
    service_id: str
    name: str
    price: float
    image: str = ''
    includes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Testimonial:
    id: str
    name: str
    rating: float = 5
    comment: str = ''
    image: str = ''
    created_at: datetime | None = None


@dataclass(frozen=True)
class CapturedMoment:
    id: str
    name: str
    type: str = 'General'
    image_url: str = ''
    timestamp: datetime | None = None


@dataclass(frozen=True)
class CatalogSnapshot:
    services: tuple[Service, ...] = ()
    products: tuple[ProductItem, ...] = ()
    testimonials: tuple[Testimonial, ...] = ()
    moments: tuple[CapturedMoment, ...] = ()
    loading: bool = field(default=False, compare=False)


def discount_percent(price, old_price):
    """100 * (old - price) / old rounded half up when old > price, otherwise 0."""
    if old_price and old_price > price:
        return math.floor(100 * (old_price - price) / old_price + 0.5)
    return 0


def discount_text(percent):
    return f'{percent}% OFF' if percent > 0 else ''


def avatar_placeholder(name):
    return f'https://ui-avatars.com/api/?name={quote(name or "Guest")}&background=random'
