# landing/views.py
from django.conf import settings
from django.contrib import messages
from django.http import Http404
from django.shortcuts import render

from booking.composer import compose_inquiry_message, whatsapp_url
from booking.forms import InquiryForm
from catalog import queries


def home(request):
    """Home/Landing page"""
    snapshot = request.catalog.snapshot()

    context = {
        'page_title': f'{settings.BUSINESS_NAME} - Event Decoration',
        'services': snapshot.services,
        'testimonials': snapshot.testimonials[:6],
        'moments': snapshot.moments[:8],
        'loading': snapshot.loading,
    }
    return render(request, 'landing/home.html', context)


def services(request):
    """Services listing page"""
    snapshot = request.catalog.snapshot()
    context = {
        'page_title': f'Our Services - {settings.BUSINESS_NAME}',
        'services': snapshot.services,
    }
    return render(request, 'landing/services.html', context)


def service_detail(request, service_id):
    """Products of one service, with tag filter, search and sort"""
    snapshot = request.catalog.snapshot()
    service = queries.get_service(snapshot, service_id)
    if service is None:
        raise Http404('Service not found')

    products = queries.products_for_service(snapshot, service_id)
    tag = request.GET.get('tag', 'all')
    search = request.GET.get('q', '').strip()
    sort = request.GET.get('sort', 'popular')
    if sort not in dict(queries.SORT_OPTIONS):
        sort = 'popular'

    context = {
        'page_title': f'{service.title} - {settings.BUSINESS_NAME}',
        'service': service,
        'products': queries.filter_products(products, tag=tag, search=search, sort=sort),
        'tags': queries.distinct_tags(products),
        'packages': queries.packages_for_service(snapshot, service_id),
        'sort_options': queries.SORT_OPTIONS,
        'active_tag': tag,
        'search': search,
        'sort': sort,
    }
    return render(request, 'landing/service_detail.html', context)


def product_detail(request, service_id, item_id):
    """One design in full, with a link to book it"""
    snapshot = request.catalog.snapshot()
    service = queries.get_service(snapshot, service_id)
    product = queries.get_product(snapshot, service_id, item_id)
    if service is None or product is None:
        raise Http404('Design not found')

    context = {
        'page_title': f'{product.name} - {settings.BUSINESS_NAME}',
        'service': service,
        'product': product,
        'gallery': [image for image in product.images if image != product.image],
        'highlight': product.tags[0] if product.tags else 'Featured',
    }
    return render(request, 'landing/product_detail.html', context)


def gallery(request):
    """Captured moments, filterable by type"""
    snapshot = request.catalog.snapshot()
    active_type = request.GET.get('type', 'All')
    context = {
        'page_title': f'Gallery - {settings.BUSINESS_NAME}',
        'types': queries.moment_types(snapshot.moments),
        'active_type': active_type,
        'moments': queries.moments_of_type(snapshot.moments, active_type),
    }
    return render(request, 'landing/gallery.html', context)


def contact(request):
    """Contact page"""
    snapshot = request.catalog.snapshot()

    if request.method == 'POST':
        form = InquiryForm(request.POST, catalog=snapshot)
        if form.is_valid():
            message = compose_inquiry_message(form.cleaned_data)
            messages.success(request, 'Thanks! Continue the conversation on WhatsApp.')
            return render(request, 'booking/handoff.html', {
                'page_title': f'Inquiry Sent - {settings.BUSINESS_NAME}',
                'whatsapp_url': whatsapp_url(message),
                'booking_message': message,
            })
        messages.error(request, 'Please correct the errors below.')
    else:
        form = InquiryForm(catalog=snapshot)

    context = {
        'page_title': f'Contact Us - {settings.BUSINESS_NAME}',
        'form': form,
    }
    return render(request, 'landing/contact.html', context)
