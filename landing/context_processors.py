from django.conf import settings


def business(request):
    """Business contact details for every template."""
    return {
        'business': {
            'name': settings.BUSINESS_NAME,
            'phone': settings.BUSINESS_PHONE_NUMBER,
            'phone_display': settings.BUSINESS_PHONE_DISPLAY,
            'email': settings.BUSINESS_EMAIL,
            'address': settings.BUSINESS_ADDRESS,
            'whatsapp_url': settings.WHATSAPP_URL_TEMPLATE.format(
                phone=settings.BUSINESS_PHONE_NUMBER, text=''
            ),
        },
    }
