# dashboard/views.py
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.forms import AuthenticationForm
from django.core.files.storage import default_storage
from django.http import Http404
from django.shortcuts import render, redirect
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.csrf import ensure_csrf_cookie

from catalog import queries
from catalog.exceptions import StoreError
from .decorators import redirect_authenticated_staff, staff_required
from .forms import MomentForm, ProductItemForm, ServiceForm, TestimonialForm
from .services import CatalogEditor

logger = logging.getLogger(__name__)


# ============================================
# HELPER FUNCTIONS
# ============================================

def get_editor(request):
    """The editor writes through the same aggregator the site reads from."""
    return CatalogEditor(request.catalog.store, default_storage, request.catalog)


def _get_service_or_404(snapshot, service_id):
    service = queries.get_service(snapshot, service_id)
    if service is None:
        raise Http404('Service not found')
    return service


def _login_reason(form):
    errors = form.non_field_errors() or [e for errs in form.errors.values() for e in errs]
    return errors[0] if errors else 'Invalid credentials'


# ============== AUTH VIEWS ==============

@redirect_authenticated_staff
@ensure_csrf_cookie
def login_page(request):
    """Operator login against the configured auth backends."""
    next_url = request.POST.get('next') or request.GET.get('next') or ''

    if request.method == 'POST':
        form = AuthenticationForm(request, data=request.POST)
        if form.is_valid():
            user = form.get_user()
            if user.is_staff:
                login(request, user)
                logger.info('Catalog editor login: %s', user.get_username())
                if not url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                    next_url = ''
                return redirect(next_url or 'dashboard:home')
            messages.error(request, 'Login failed: This account cannot edit the catalog.')
        else:
            messages.error(request, f'Login failed: {_login_reason(form)}')
    else:
        form = AuthenticationForm(request)

    context = {
        'page_title': f'Admin Login - {settings.BUSINESS_NAME}',
        'form': form,
        'next': next_url,
    }
    return render(request, 'dashboard/login.html', context)


def logout_page(request):
    logout(request)
    messages.success(request, 'You have been logged out.')
    return redirect('dashboard:login')


# ============== EDITOR HOME ==============

@staff_required
def home(request):
    snapshot = request.catalog.snapshot()
    context = {
        'page_title': 'Catalog Editor',
        'service_rows': [
            (s, len(queries.products_for_service(snapshot, s.id))) for s in snapshot.services
        ],
        'testimonial_count': len(snapshot.testimonials),
        'moment_count': len(snapshot.moments),
        'loading': snapshot.loading,
    }
    return render(request, 'dashboard/home.html', context)


# ============== SERVICES ==============

@staff_required
def service_create(request):
    return _service_form(request, None)


@staff_required
def service_edit(request, service_id):
    service = _get_service_or_404(request.catalog.snapshot(), service_id)
    return _service_form(request, service)


def _service_form(request, service):
    editing = service is not None
    initial = {}
    if editing:
        initial = {
            'slug': service.id,
            'title': service.title,
            'description': service.description,
            'features': ', '.join(service.features),
            'price_start': service.price_start,
            'image_url': service.image,
        }

    if request.method == 'POST':
        form = ServiceForm(request.POST, request.FILES, initial=initial, editing=editing)
        if form.is_valid():
            try:
                get_editor(request).save_service(form.cleaned_data, request.FILES.get('image'))
            except StoreError:
                logger.exception('Saving service %s failed', form.cleaned_data['slug'])
                messages.error(request, 'Error saving service')
            else:
                messages.success(request, 'Service Saved!')
                return redirect('dashboard:home')
    else:
        form = ServiceForm(initial=initial, editing=editing)

    context = {
        'page_title': f'Edit {service.title}' if editing else 'New Service',
        'form': form,
        'service': service,
        'editing': editing,
    }
    return render(request, 'dashboard/service_form.html', context)


# ============== PRODUCT ITEMS ==============

@staff_required
def item_list(request, service_id):
    snapshot = request.catalog.snapshot()
    service = _get_service_or_404(snapshot, service_id)
    context = {
        'page_title': f'{service.title} Items',
        'service': service,
        'products': queries.products_for_service(snapshot, service_id),
    }
    return render(request, 'dashboard/item_list.html', context)


@staff_required
def item_create(request, service_id):
    service = _get_service_or_404(request.catalog.snapshot(), service_id)
    return _item_form(request, service, None)


@staff_required
def item_edit(request, service_id, item_id):
    snapshot = request.catalog.snapshot()
    service = _get_service_or_404(snapshot, service_id)
    product = next(
        (p for p in queries.products_for_service(snapshot, service_id) if p.id == item_id), None
    )
    if product is None:
        raise Http404('Item not found')
    return _item_form(request, service, product)


def _item_form(request, service, product):
    editing = product is not None
    initial = {'slug': f'{service.id}-', 'stock_qty': 10}
    if editing:
        initial = {
            'slug': product.id,
            'name': product.name,
            'price': product.price,
            'old_price': product.old_price,
            'short_description': product.short_description,
            'full_description': product.full_description,
            'tags': ', '.join(product.tags),
            'stock_qty': product.stock_qty,
            'rating': product.rating,
            'reviews_count': product.reviews_count,
            'image_url': product.image,
        }

    if request.method == 'POST':
        form = ProductItemForm(request.POST, request.FILES, initial=initial, editing=editing)
        if form.is_valid():
            try:
                get_editor(request).save_item(service.id, form.cleaned_data, request.FILES.get('image'))
            except StoreError:
                logger.exception('Saving item %s/%s failed', service.id, form.cleaned_data['slug'])
                messages.error(request, 'Error saving item')
            else:
                messages.success(request, 'Item Saved!')
                return redirect('dashboard:item_list', service_id=service.id)
    else:
        form = ProductItemForm(initial=initial, editing=editing)

    context = {
        'page_title': f'Edit {product.name}' if editing else f'New {service.title} Item',
        'form': form,
        'service': service,
        'product': product,
        'editing': editing,
    }
    return render(request, 'dashboard/item_form.html', context)


# ============== TESTIMONIALS ==============

@staff_required
def testimonial_list(request):
    context = {
        'page_title': 'Testimonials',
        'testimonials': request.catalog.snapshot().testimonials,
    }
    return render(request, 'dashboard/testimonial_list.html', context)


@staff_required
def testimonial_create(request):
    if request.method == 'POST':
        form = TestimonialForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                get_editor(request).add_testimonial(form.cleaned_data, request.FILES.get('image'))
            except StoreError:
                logger.exception('Saving testimonial failed')
                messages.error(request, 'Failed to save testimonial.')
            else:
                messages.success(request, 'Testimonial added successfully!')
                return redirect('dashboard:testimonial_list')
    else:
        form = TestimonialForm()

    return render(request, 'dashboard/testimonial_form.html', {
        'page_title': 'New Testimonial',
        'form': form,
    })


@staff_required
def testimonial_delete(request, doc_id):
    """GET asks for confirmation, POST deletes."""
    testimonial = next((t for t in request.catalog.snapshot().testimonials if t.id == doc_id), None)
    if testimonial is None:
        raise Http404('Testimonial not found')

    if request.method == 'POST':
        try:
            get_editor(request).delete_testimonial(doc_id)
        except StoreError:
            logger.exception('Deleting testimonial %s failed', doc_id)
            messages.error(request, 'Failed to delete.')
        else:
            messages.success(request, 'Testimonial deleted.')
        return redirect('dashboard:testimonial_list')

    return render(request, 'dashboard/confirm_delete.html', {
        'page_title': 'Delete Testimonial',
        'object_label': f'the testimonial from {testimonial.name}',
        'cancel_url': 'dashboard:testimonial_list',
    })


# ============== CAPTURED MOMENTS ==============

@staff_required
def moment_list(request):
    context = {
        'page_title': 'Captured Moments',
        'moments': request.catalog.snapshot().moments,
    }
    return render(request, 'dashboard/moment_list.html', context)


@staff_required
def moment_create(request):
    snapshot = request.catalog.snapshot()
    if request.method == 'POST':
        form = MomentForm(request.POST, request.FILES, catalog=snapshot)
        if form.is_valid():
            try:
                get_editor(request).add_moment(form.cleaned_data, request.FILES.get('image'))
            except StoreError:
                logger.exception('Saving moment failed')
                messages.error(request, 'Failed to save moment.')
            else:
                messages.success(request, 'Moment captured successfully!')
                return redirect('dashboard:moment_list')
    else:
        form = MomentForm(catalog=snapshot)

    return render(request, 'dashboard/moment_form.html', {
        'page_title': 'New Moment',
        'form': form,
    })


@staff_required
def moment_delete(request, doc_id):
    """GET asks for confirmation, POST deletes."""
    moment = next((m for m in request.catalog.snapshot().moments if m.id == doc_id), None)
    if moment is None:
        raise Http404('Moment not found')

    if request.method == 'POST':
        try:
            get_editor(request).delete_moment(doc_id)
        except StoreError:
            logger.exception('Deleting moment %s failed', doc_id)
            messages.error(request, 'Failed to delete.')
        else:
            messages.success(request, 'Moment deleted.')
        return redirect('dashboard:moment_list')

    return render(request, 'dashboard/confirm_delete.html', {
        'page_title': 'Delete Moment',
        'object_label': f'"{moment.name}"',
        'cancel_url': 'dashboard:moment_list',
    })
