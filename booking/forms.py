# booking/forms.py
import logging

from django import forms
from django.core.validators import RegexValidator
from django.utils import timezone

from catalog.queries import packages_for_service

PHONE_PATTERN = r'^[6-9]\d{9}$'
EMAIL_PATTERN = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
GENERAL_INQUIRY = 'General Inquiry'

NAME_ERROR = 'Name must be at least 3 characters'
PHONE_ERROR = 'Please enter a valid 10-digit Indian number'
EMAIL_ERROR = 'Please enter a valid email address'
DATE_ERROR = 'Event date cannot be in the past'
ADDRESS_ERROR = 'Venue address is required'
GUESTS_ERROR = 'Minimum 5 guests required'
MESSAGE_ERROR = 'Message must be at least 10 characters'

phone_validator = RegexValidator(PHONE_PATTERN, PHONE_ERROR)
email_validator = RegexValidator(EMAIL_PATTERN, EMAIL_ERROR)

LOCATION_FIELDS = ('latitude', 'longitude', 'location_error')

logger = logging.getLogger(__name__)


def _clean_name(value):
    value = (value or '').strip()
    if len(value) < 3:
        raise forms.ValidationError(NAME_ERROR)
    return value


class BookingForm(forms.Form):
    """Booking request for one service, optionally a specific package"""

    name = forms.CharField(
        max_length=100,
        error_messages={'required': NAME_ERROR},
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'John Doe'}),
    )
    phone = forms.CharField(
        max_length=10,
        validators=[phone_validator],
        error_messages={'required': PHONE_ERROR, 'max_length': PHONE_ERROR},
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'type': 'tel',
            'pattern': '[6-9][0-9]{9}',
            'placeholder': '9936169852',
        }),
    )
    email = forms.CharField(
        required=False,
        max_length=254,
        validators=[email_validator],
        widget=forms.EmailInput(attrs={'class': 'form-control', 'placeholder': 'you@example.com'}),
    )
    service = forms.ChoiceField(
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    package = forms.CharField(
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    date = forms.DateField(
        error_messages={'required': 'Event date is required', 'invalid': 'Enter a valid date'},
        widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
    )
    time = forms.TimeField(
        required=False,
        widget=forms.TimeInput(attrs={'class': 'form-control', 'type': 'time'}),
    )
    address = forms.CharField(
        max_length=300,
        error_messages={'required': ADDRESS_ERROR},
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Area, Street, City'}),
    )
    guests = forms.IntegerField(
        min_value=5,
        initial=50,
        error_messages={
            'required': GUESTS_ERROR,
            'invalid': 'Guest count must be a number',
            'min_value': GUESTS_ERROR,
        },
        widget=forms.NumberInput(attrs={'class': 'form-control', 'min': '5'}),
    )
    message = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={
            'class': 'form-control',
            'rows': 3,
            'placeholder': 'Specific theme colors, timing constraints, etc.'
        }),
    )

    # Filled in by the page script from the browser's geolocation API
    latitude = forms.FloatField(required=False, min_value=-90, max_value=90, widget=forms.HiddenInput)
    longitude = forms.FloatField(required=False, min_value=-180, max_value=180, widget=forms.HiddenInput)
    location_error = forms.CharField(required=False, widget=forms.HiddenInput)

    def __init__(self, *args, catalog=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.catalog = catalog
        services = catalog.services if catalog is not None else ()
        self.fields['service'].choices = [(s.id, s.title) for s in services]

        service_id = self.data.get('service') or self.initial.get('service')
        self.package_options = packages_for_service(catalog, service_id) if catalog is not None else []
        self.fields['package'].widget.choices = [('', 'Select a package')] + self.package_options

    def clean_name(self):
        return _clean_name(self.cleaned_data.get('name'))

    def clean_date(self):
        event_date = self.cleaned_data.get('date')
        if event_date and event_date < timezone.localdate():
            raise forms.ValidationError(DATE_ERROR)
        return event_date

    def clean(self):
        cleaned_data = super().clean()
        package = cleaned_data.get('package')
        # A package only counts for the service it belongs to
        if package and package not in dict(self.package_options):
            cleaned_data['package'] = ''

        # The location is optional: a garbled fix means no fix, never a form error
        for name in LOCATION_FIELDS:
            if self._errors.pop(name, None) is not None:
                logger.debug('Discarded unreadable %s: %r', name, self.data.get(name))

        # Half a coordinate pair is no location at all
        if cleaned_data.get('latitude') is None or cleaned_data.get('longitude') is None:
            cleaned_data['latitude'] = None
            cleaned_data['longitude'] = None
        return cleaned_data


class InquiryForm(forms.Form):
    """Contact page inquiry"""

    name = forms.CharField(
        max_length=100,
        error_messages={'required': NAME_ERROR},
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Your name'}),
    )
    phone = forms.CharField(
        max_length=10,
        validators=[phone_validator],
        error_messages={'required': PHONE_ERROR, 'max_length': PHONE_ERROR},
        widget=forms.TextInput(attrs={'class': 'form-control', 'type': 'tel'}),
    )
    service = forms.ChoiceField(
        initial=GENERAL_INQUIRY,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    message = forms.CharField(
        error_messages={'required': MESSAGE_ERROR},
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 4}),
    )

    def __init__(self, *args, catalog=None, **kwargs):
        super().__init__(*args, **kwargs)
        titles = [s.title for s in catalog.services] if catalog is not None else []
        self.fields['service'].choices = [(GENERAL_INQUIRY, GENERAL_INQUIRY)] + [(t, t) for t in titles]

    def clean_name(self):
        return _clean_name(self.cleaned_data.get('name'))

    def clean_message(self):
        message = (self.cleaned_data.get('message') or '').strip()
        if len(message) < 10:
            raise forms.ValidationError(MESSAGE_ERROR)
        return message
