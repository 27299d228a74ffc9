"""
Catalog aggregator.

Holds the site's view of services, products, testimonials and gallery
moments. ``refresh()`` pulls each collection from the document store
independently; a collection only replaces what is in memory when the
store returned at least one record for it. An empty collection or a
failed read keeps the previous list, which on first load is the
static seed, so the site always has something to render.
"""
import itertools
import logging
import threading

from . import seed
from .entities import CatalogSnapshot
from .exceptions import StorePermissionDenied
from .normalizers import (
    normalize_service, normalize_product, normalize_testimonial, normalize_moment,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ('services', 'products', 'testimonials', 'moments')


class CatalogAggregator:

    def __init__(self, store, initial=None):
        self.store = store
        if initial is None:
            initial = CatalogSnapshot(
                services=seed.SERVICES,
                products=seed.generate_products(),
                testimonials=seed.TESTIMONIALS,
                moments=(),
            )
        self._lists = {
            'services': initial.services,
            'products': initial.products,
            'testimonials': initial.testimonials,
            'moments': initial.moments,
        }
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        # Token of the newest refresh that wrote each collection
        self._applied = dict.fromkeys(COLLECTIONS, 0)
        self._in_flight = 0

    @property
    def loading(self):
        return self._in_flight > 0

    def snapshot(self):
        with self._lock:
            return CatalogSnapshot(
                services=self._lists['services'],
                products=self._lists['products'],
                testimonials=self._lists['testimonials'],
                moments=self._lists['moments'],
                loading=self._in_flight > 0,
            )

    def refresh(self):
        """Re-read every collection. Never raises."""
        with self._lock:
            token = next(self._tokens)
            self._in_flight += 1
        try:
            for name, loader in (
                ('services', self._load_services),
                ('products', self._load_products),
                ('testimonials', self._load_testimonials),
                ('moments', self._load_moments),
            ):
                records = self._fetch(name, loader)
                if records:
                    self._apply(name, records, token)
        finally:
            with self._lock:
                self._in_flight -= 1
        return self.snapshot()

    def _fetch(self, name, loader):
        try:
            return loader()
        except StorePermissionDenied:
            logger.warning(
                'Document store denied read access to %s, keeping current data. '
                'Check that the store allows public reads.', name
            )
        except Exception:
            logger.exception('Error fetching %s, keeping current data', name)
        return None

    def _apply(self, name, records, token):
        with self._lock:
            if token < self._applied[name]:
                logger.debug('Discarding stale %s result from refresh %s', name, token)
                return
            self._lists[name] = tuple(records)
            self._applied[name] = token

    def _load_services(self):
        return [normalize_service(doc_id, raw) for doc_id, raw in self.store.list_documents('services')]

    def _load_products(self):
        return [
            normalize_product(service_id, doc_id, raw)
            for service_id, doc_id, raw in self.store.list_group('items')
        ]

    def _load_testimonials(self):
        return [normalize_testimonial(doc_id, raw) for doc_id, raw in self.store.list_documents('testimonials')]

    def _load_moments(self):
        return [normalize_moment(doc_id, raw) for doc_id, raw in self.store.list_documents('captured_moments')]
