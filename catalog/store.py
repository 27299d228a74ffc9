"""
Document store backends.

Collections are addressed by slash paths the way the catalog is laid
out: ``services``, ``services/<slug>/items``, ``testimonials`` and
``captured_moments``. Writes merge into the addressed document and the
store stamps ``updatedAt`` on every upsert and ``createdAt`` only when
the document is first created.
"""
import copy
import logging
import threading
import uuid

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.errors import OperationFailure, PyMongoError
from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

from .exceptions import StoreError, StorePermissionDenied, DocumentNotFound

logger = logging.getLogger(__name__)

# MongoDB "Unauthorized"
MONGO_UNAUTHORIZED = 13


class DocumentStore:
    """Interface shared by every backend."""

    def list_documents(self, path):
        """Return ``[(doc_id, fields), ...]`` for one collection."""
        raise NotImplementedError

    def list_group(self, name):
        """
        Return ``[(parent_id, doc_id, fields), ...]`` for every nested
        collection called ``name`` (``services/*/<name>``).
        """
        raise NotImplementedError

    def get_document(self, path, key):
        raise NotImplementedError

    def upsert_document(self, path, key, fields):
        raise NotImplementedError

    def add_document(self, path, fields, timestamp_field='createdAt'):
        """Create a document with a generated id and return the id."""
        raise NotImplementedError

    def delete_document(self, path, key):
        raise NotImplementedError


class MemoryDocumentStore(DocumentStore):
    """Process-local store, used when no remote store is configured."""

    def __init__(self, **options):
        self._collections = {}
        self._lock = threading.Lock()

    def list_documents(self, path):
        with self._lock:
            docs = self._collections.get(path, {})
            return [(key, copy.deepcopy(fields)) for key, fields in docs.items()]

    def list_group(self, name):
        results = []
        with self._lock:
            for path, docs in self._collections.items():
                parts = path.split('/')
                if len(parts) == 3 and parts[0] == 'services' and parts[2] == name:
                    for key, fields in docs.items():
                        results.append((parts[1], key, copy.deepcopy(fields)))
        return results

    def get_document(self, path, key):
        with self._lock:
            try:
                return copy.deepcopy(self._collections[path][key])
            except KeyError:
                raise DocumentNotFound(f'{path}/{key}')

    def upsert_document(self, path, key, fields):
        now = timezone.now()
        with self._lock:
            docs = self._collections.setdefault(path, {})
            doc = docs.setdefault(key, {'createdAt': now})
            doc.update(copy.deepcopy(fields))
            doc['updatedAt'] = now
        return key

    def add_document(self, path, fields, timestamp_field='createdAt'):
        key = uuid.uuid4().hex
        doc = copy.deepcopy(fields)
        doc[timestamp_field] = timezone.now()
        with self._lock:
            self._collections.setdefault(path, {})[key] = doc
        return key

    def delete_document(self, path, key):
        with self._lock:
            try:
                del self._collections[path][key]
            except KeyError:
                raise DocumentNotFound(f'{path}/{key}')


class MongoDocumentStore(DocumentStore):
    """
    MongoDB backend. A slash path maps onto a dotted collection name, so
    ``services/birthday/items`` lives in ``services.birthday.items``.
    """

    def __init__(self, url, database, timeout_ms=5000, client=None):
        self.client = client or MongoClient(url, serverSelectionTimeoutMS=timeout_ms)
        self.db = self.client[database]

    @staticmethod
    def collection_name(path):
        return path.strip('/').replace('/', '.')

    def _translate(self, exc):
        if isinstance(exc, OperationFailure) and exc.code == MONGO_UNAUTHORIZED:
            return StorePermissionDenied(str(exc))
        return StoreError(str(exc))

    @staticmethod
    def _fields(doc):
        fields = dict(doc)
        doc_id = str(fields.pop('_id'))
        return doc_id, fields

    def list_documents(self, path):
        try:
            cursor = self.db[self.collection_name(path)].find({})
            return [self._fields(doc) for doc in cursor]
        except PyMongoError as exc:
            raise self._translate(exc) from exc

    def list_group(self, name):
        try:
            names = self.db.list_collection_names(
                filter={'name': {'$regex': rf'^services\.[^.]+\.{name}$'}}
            )
            results = []
            for collection in sorted(names):
                parent_id = collection.split('.')[1]
                for doc in self.db[collection].find({}):
                    doc_id, fields = self._fields(doc)
                    results.append((parent_id, doc_id, fields))
            return results
        except PyMongoError as exc:
            raise self._translate(exc) from exc

    def get_document(self, path, key):
        try:
            doc = self.db[self.collection_name(path)].find_one({'_id': key})
        except PyMongoError as exc:
            raise self._translate(exc) from exc
        if doc is None:
            raise DocumentNotFound(f'{path}/{key}')
        return self._fields(doc)[1]

    def upsert_document(self, path, key, fields):
        now = timezone.now()
        update = {
            '$set': {**fields, 'updatedAt': now},
            '$setOnInsert': {'createdAt': now},
        }
        update['$set'].pop('createdAt', None)
        try:
            self.db[self.collection_name(path)].update_one({'_id': key}, update, upsert=True)
        except PyMongoError as exc:
            raise self._translate(exc) from exc
        return key

    def add_document(self, path, fields, timestamp_field='createdAt'):
        doc = {**fields, timestamp_field: timezone.now()}
        try:
            result = self.db[self.collection_name(path)].insert_one(doc)
        except PyMongoError as exc:
            raise self._translate(exc) from exc
        return str(result.inserted_id)

    def delete_document(self, path, key):
        # Generated ids are ObjectIds, slugs are plain strings
        try:
            lookup = {'_id': ObjectId(key)}
        except (InvalidId, TypeError):
            lookup = {'_id': key}
        try:
            result = self.db[self.collection_name(path)].delete_one(lookup)
        except PyMongoError as exc:
            raise self._translate(exc) from exc
        if result.deleted_count == 0:
            raise DocumentNotFound(f'{path}/{key}')


def build_store(config=None):
    """Instantiate the backend named by the ``CATALOG_STORE`` setting."""
    config = config or settings.CATALOG_STORE
    backend = import_string(config['BACKEND'])
    logger.info('Catalog store backend: %s', config['BACKEND'])
    return backend(**config.get('OPTIONS', {}))
