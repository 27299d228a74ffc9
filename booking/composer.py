"""
Booking composer.

Turns a visitor's selections and contact details into the plain-text
message the business receives on WhatsApp, and the ``wa.me`` link that
carries it. ``BookingComposer`` walks one submission through

    editing -> validating -> (editing | locating -> composing -> handoff -> done)

Nothing here is persisted. A composer that never reaches ``handoff``
leaves no trace.
"""
import enum
import logging
from dataclasses import dataclass
from urllib.parse import quote

from django.conf import settings

from catalog import seed
from catalog.queries import get_service
from .forms import BookingForm

logger = logging.getLogger(__name__)

CONTACT_FOR_PRICING = 'Contact for pricing'
LOCATION_NOT_SHARED = 'Not shared by user'
MAP_URL = 'https://www.google.com/maps?q={latitude},{longitude}'
DIVIDER = '--------------------------------'


class ComposerState(str, enum.Enum):
    EDITING = 'editing'
    VALIDATING = 'validating'
    LOCATING = 'locating'
    COMPOSING = 'composing'
    HANDOFF = 'handoff'
    DONE = 'done'


@dataclass(frozen=True)
class ResolvedItem:
    kind: str  # 'product', 'package' or 'service'
    name: str
    price: float | None
    service: object = None


@dataclass(frozen=True)
class LocationFix:
    latitude: float
    longitude: float

    @property
    def map_url(self):
        return MAP_URL.format(latitude=self.latitude, longitude=self.longitude)


@dataclass(frozen=True)
class Handoff:
    message: str
    url: str


def format_price(price):
    if price is None:
        return CONTACT_FOR_PRICING
    if float(price).is_integer():
        return f'₹{int(price):,}'
    return f'₹{price:,.2f}'


def resolve_item(snapshot, service_id, package_id):
    """
    What is being booked: a product with the selected id, else a static
    package with that id, else the service itself as a general inquiry.
    """
    service = get_service(snapshot, service_id)

    if package_id:
        products = [p for p in snapshot.products if p.id == package_id]
        if products:
            product = next((p for p in products if p.service_id == service_id), products[0])
            return ResolvedItem('product', product.name, product.price, service)

        for package in seed.PACKAGES:
            if package.id == package_id:
                return ResolvedItem('package', package.name, package.price, service)

    title = service.title if service else 'General Inquiry'
    return ResolvedItem('service', title, None, service)


def location_line(fix):
    return fix.map_url if fix is not None else LOCATION_NOT_SHARED


def locate_from_form(cleaned_data):
    """Coordinates the booking page's geolocation script posted, if any."""
    latitude = cleaned_data.get('latitude')
    longitude = cleaned_data.get('longitude')
    if latitude is None or longitude is None:
        if cleaned_data.get('location_error'):
            logger.debug('Location not shared: %s', cleaned_data['location_error'])
        return None
    return LocationFix(latitude, longitude)


def compose_booking_message(data, item, location=None, include_location=True):
    """
    ``data`` is a cleaned ``BookingForm``. ``location`` is the line to
    print after "Location:" and is ignored when ``include_location`` is off.
    """
    service_title = item.service.title if item.service else 'General Inquiry'
    event_time = data.get('time')
    lines = [
        f'New Booking Request - {settings.BUSINESS_NAME}',
        DIVIDER,
        f'Service: {service_title}',
        f'Item: {item.name}',
        f'Price: {format_price(item.price)}',
        DIVIDER,
        f"Name: {data['name']}",
        f"Phone: {data['phone']}",
        f"Email: {data.get('email') or 'N/A'}",
        f"Date: {data['date'].isoformat()}",
        f"Time: {event_time.strftime('%H:%M') if event_time else 'Flexible'}",
        f"Address: {data['address']}",
        f"Guests: {data['guests']}",
    ]
    if include_location:
        lines.append(f'Location: {location or LOCATION_NOT_SHARED}')
    lines += [
        f"Note: {data.get('message') or 'None'}",
        DIVIDER,
        'Source: Website',
    ]
    return '\n'.join(lines)


def compose_inquiry_message(data):
    return '\n'.join([
        'New Inquiry from Website:',
        f"Name: {data['name']}",
        f"Phone: {data['phone']}",
        f"Interested In: {data['service']}",
        f"Message: {data['message']}",
    ])


def whatsapp_url(message, phone=None):
    return settings.WHATSAPP_URL_TEMPLATE.format(
        phone=phone or settings.BUSINESS_PHONE_NUMBER,
        text=quote(message, safe="-_.!~*'()"),
    )


class BookingComposer:
    """One booking submission, from form edits to the WhatsApp handoff."""

    def __init__(self, snapshot, initial=None, request_location=True, locator=locate_from_form):
        self.snapshot = snapshot
        self.request_location = request_location
        self.locator = locator
        self.reset(initial)

    def update(self, **fields):
        if self.state != ComposerState.EDITING:
            raise RuntimeError(f'Cannot edit a booking in state {self.state.value}')
        if 'service' in fields and fields['service'] != self.data.get('service'):
            self.data['package'] = ''
        self.data.update(fields)

    def submit(self, location=None):
        """
        Validate and, if valid, return the ``Handoff``. Returns None on invalid
        input. ``location`` is a ``LocationFix`` the caller already holds; when
        absent the locator reads it from the submitted fields.
        """
        if self.state != ComposerState.EDITING:
            raise RuntimeError(f'Cannot submit a booking in state {self.state.value}')

        self.state = ComposerState.VALIDATING
        self.form = BookingForm(data=self.data, catalog=self.snapshot)
        if not self.form.is_valid():
            self.errors = {field: list(errors) for field, errors in self.form.errors.items()}
            self.state = ComposerState.EDITING
            return None
        self.errors = {}
        cleaned = self.form.cleaned_data

        if not self.request_location:
            location = None
        else:
            self.state = ComposerState.LOCATING
            location = location_line(location or self._locate(cleaned))

        self.state = ComposerState.COMPOSING
        item = resolve_item(self.snapshot, cleaned['service'], cleaned.get('package'))
        message = compose_booking_message(
            cleaned, item, location=location, include_location=self.request_location
        )

        self.state = ComposerState.HANDOFF
        self.handoff = Handoff(message=message, url=whatsapp_url(message))
        logger.info('Booking handoff for %s (%s)', cleaned['service'], item.kind)

        self.state = ComposerState.DONE
        return self.handoff

    def reset(self, initial=None):
        """Start a fresh submission."""
        self.state = ComposerState.EDITING
        self.data = dict(initial or {})
        self.form = None
        self.errors = {}
        self.handoff = None

    def _locate(self, cleaned):
        try:
            return self.locator(cleaned)
        except Exception:
            # Never blocks the booking
            logger.debug('Location lookup failed', exc_info=True)
            return None
