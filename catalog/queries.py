"""Read helpers over a catalog snapshot, shared by the public pages and the booking flow."""
from . import seed

SORT_OPTIONS = (
    ('popular', 'Most Popular'),
    ('price-asc', 'Price: Low to High'),
    ('price-desc', 'Price: High to Low'),
    ('newest', 'Newest First'),
)


def get_service(snapshot, service_id):
    for service in snapshot.services:
        if service.id == service_id:
            return service
    return None


def products_for_service(snapshot, service_id):
    return [p for p in snapshot.products if p.service_id == service_id]


def get_product(snapshot, service_id, product_id):
    for product in products_for_service(snapshot, service_id):
        if product.id == product_id:
            return product
    return None


def packages_for_service(snapshot, service_id):
    """
    Bookable options for a service as ``(id, label)`` pairs: products
    first, then static packages whose id no product already uses.
    """
    options = []
    seen = set()
    for product in products_for_service(snapshot, service_id):
        options.append((product.id, f'{product.name} - ₹{product.price:,}'))
        seen.add(product.id)
    for package in seed.PACKAGES:
        if package.service_id == service_id and package.id not in seen:
            options.append((package.id, f'{package.name} - ₹{package.price:,}'))
    return options


def distinct_tags(products):
    tags = []
    for product in products:
        for tag in product.tags:
            if tag not in tags:
                tags.append(tag)
    return tags


def filter_products(products, tag='all', search='', sort='popular'):
    result = list(products)

    if tag and tag != 'all':
        result = [p for p in result if tag in p.tags]

    if search:
        q = search.lower()
        result = [
            p for p in result
            if q in p.name.lower() or q in p.short_description.lower()
        ]

    if sort == 'price-asc':
        result.sort(key=lambda p: p.price)
    elif sort == 'price-desc':
        result.sort(key=lambda p: p.price, reverse=True)
    elif sort == 'newest':
        result = [p for p in result if 'new' in p.tags] + [p for p in result if 'new' not in p.tags]
    else:
        result.sort(key=lambda p: p.rating, reverse=True)

    return result


def moment_types(moments):
    types = ['All']
    for moment in moments:
        if moment.type not in types:
            types.append(moment.type)
    return types


def moments_of_type(moments, moment_type='All'):
    if not moment_type or moment_type == 'All':
        return list(moments)
    return [m for m in moments if m.type == moment_type]
