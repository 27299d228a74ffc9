"""
Image uploads for the catalog editor.

``upload_image`` is a generator so the caller sees progress as the file
is read. Nothing reaches storage until the last chunk has been read;
closing the generator early leaves storage untouched.
"""
import logging
import time
from dataclasses import dataclass

from django.conf import settings
from django.core.files.base import ContentFile
from django.utils.text import get_valid_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadProgress:
    percent: int
    url: str | None = None

    @property
    def done(self):
        return self.url is not None


def _millis():
    return int(time.time() * 1000)


def service_hero_path(slug):
    return f'services/{slug}/hero_{_millis()}'


def item_image_path(slug, item_slug):
    return f'services/{slug}/items/{item_slug}_{_millis()}'


def moment_image_path(filename):
    return f'captured_moments/{_millis()}_{get_valid_filename(filename)}'


def testimonial_image_path(filename):
    return f'testimonials/{_millis()}_{get_valid_filename(filename)}'


def upload_image(storage, name, file, chunk_size=None):
    """
    Store ``file`` under ``name``; yields ``UploadProgress`` from 0 to 100.
    The final event carries the public URL.
    """
    chunk_size = chunk_size or settings.CATALOG_UPLOAD_CHUNK_SIZE
    total = getattr(file, 'size', None) or 0
    buffer = bytearray()

    yield UploadProgress(0)
    for chunk in file.chunks(chunk_size):
        buffer.extend(chunk)
        if total:
            # 100 is held back for the stored file
            yield UploadProgress(min(99, len(buffer) * 100 // total))

    stored_name = storage.save(name, ContentFile(bytes(buffer)))
    url = storage.url(stored_name)
    logger.info('Uploaded %s (%d bytes)', stored_name, len(buffer))
    yield UploadProgress(100, url)


def upload_and_wait(storage, name, file):
    """Run an upload to completion and return its URL. Progress goes to the debug log."""
    url = None
    for progress in upload_image(storage, name, file):
        logger.debug('Uploading %s: %d%%', name, progress.percent)
        url = progress.url
    return url
