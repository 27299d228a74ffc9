"""
Write path for the catalog editor.

Every change an operator makes goes through ``CatalogEditor``: a new
image is uploaded first, then the record is merged into the document
store, then the site catalog is refreshed. Saves are last-write-wins;
two operators editing the same service overwrite each other's fields.
"""
import logging

from catalog.exceptions import StoreError
from catalog.records import (
    MOMENTS, SERVICES, TESTIMONIALS, build_item_record, build_moment_record,
    build_service_record, build_testimonial_record, items_path,
)
from . import uploads

logger = logging.getLogger(__name__)


# ============================================
# EDITOR
# ============================================

class CatalogEditor:
    """Uploads images, writes records, refreshes the catalog."""

    def __init__(self, store, storage, aggregator):
        self.store = store
        self.storage = storage
        self.aggregator = aggregator

    def save_service(self, data, image_file=None):
        slug = data['slug']
        image = self._upload(uploads.service_hero_path(slug), image_file)
        self.store.upsert_document(SERVICES, slug, build_service_record(data, image))
        self._refresh()
        return slug

    def save_item(self, service_id, data, image_file=None):
        item_slug = data['slug']
        image = self._upload(uploads.item_image_path(service_id, item_slug), image_file)
        self.store.upsert_document(items_path(service_id), item_slug, build_item_record(data, image))
        self._refresh()
        return item_slug

    def add_testimonial(self, data, image_file=None):
        image = None
        if image_file is not None:
            image = self._upload(uploads.testimonial_image_path(image_file.name), image_file)
        doc_id = self.store.add_document(TESTIMONIALS, build_testimonial_record(data, image))
        self._refresh()
        return doc_id

    def add_moment(self, data, image_file=None):
        image = None
        if image_file is not None:
            image = self._upload(uploads.moment_image_path(image_file.name), image_file)
        doc_id = self.store.add_document(
            MOMENTS, build_moment_record(data, image), timestamp_field='timestamp'
        )
        self._refresh()
        return doc_id

    def delete_testimonial(self, doc_id):
        self.store.delete_document(TESTIMONIALS, doc_id)
        self._refresh()

    def delete_moment(self, doc_id):
        self.store.delete_document(MOMENTS, doc_id)
        self._refresh()

    def _upload(self, name, image_file):
        if image_file is None:
            return None
        try:
            return uploads.upload_and_wait(self.storage, name, image_file)
        except Exception as exc:
            raise StoreError(f'Image upload failed for {name}') from exc

    def _refresh(self):
        if self.aggregator is not None:
            self.aggregator.refresh()
