# booking/views.py
from collections.abc import Mapping

from django.conf import settings
from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import render
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.queries import get_service, packages_for_service
from .composer import BookingComposer
from .forms import BookingForm


def _wants_json(request):
    return (
        'application/json' in request.headers.get('Accept', '')
        or request.headers.get('X-Requested-With') == 'XMLHttpRequest'
    )


def _booking_context(form, snapshot):
    service = get_service(snapshot, form['service'].value())
    package_id = form['package'].value()
    return {
        'page_title': f'Book Now - {settings.BUSINESS_NAME}',
        'form': form,
        'service': service,
        'package_id': package_id,
        # service id -> (id, label) pairs for the page script
        'package_options': {
            s.id: packages_for_service(snapshot, s.id) for s in snapshot.services
        },
        'geolocation': {
            'timeout': settings.GEOLOCATION_TIMEOUT_MS,
            'enableHighAccuracy': settings.GEOLOCATION_HIGH_ACCURACY,
        },
    }


def booking(request):
    """Booking page, prefilled from ?service=&package="""
    snapshot = request.catalog.snapshot()

    if request.method == 'POST':
        composer = BookingComposer(snapshot)
        composer.update(**request.POST.dict())
        handoff = composer.submit()

        if handoff is None:
            if _wants_json(request):
                return JsonResponse({'success': False, 'errors': composer.errors}, status=400)
            return render(request, 'booking/booking.html', _booking_context(composer.form, snapshot), status=400)

        if _wants_json(request):
            return JsonResponse({
                'success': True,
                'message': handoff.message,
                'whatsapp_url': handoff.url,
            })

        messages.success(request, 'Booking Initiated! We are redirecting you to WhatsApp.')
        return render(request, 'booking/handoff.html', {
            'page_title': f'Booking Initiated - {settings.BUSINESS_NAME}',
            'whatsapp_url': handoff.url,
            'booking_message': handoff.message,
        })

    service_id = request.GET.get('service')
    if get_service(snapshot, service_id) is None:
        service_id = snapshot.services[0].id if snapshot.services else ''
    form = BookingForm(
        initial={'service': service_id, 'package': request.GET.get('package', ''), 'guests': 50},
        catalog=snapshot,
    )
    return render(request, 'booking/booking.html', _booking_context(form, snapshot))


class ComposeBookingAPIView(APIView):
    """Validate a booking and return the WhatsApp message and link."""
    permission_classes = [AllowAny]

    def post(self, request):
        if not isinstance(request.data, Mapping):
            raise ValidationError({'non_field_errors': ['Expected an object of booking fields.']})

        composer = BookingComposer(
            request.catalog.snapshot(),
            request_location=request.data.get('share_location', True) not in (False, 'false', '0'),
        )
        composer.update(**{key: request.data.get(key) for key in request.data})
        handoff = composer.submit()
        if handoff is None:
            raise ValidationError(composer.errors)
        return Response({
            'success': True,
            'message': handoff.message,
            'whatsapp_url': handoff.url,
        })
