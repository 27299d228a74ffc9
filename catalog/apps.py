from django.apps import AppConfig
from django.conf import settings


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'catalog'

    aggregator = None

    def ready(self):
        from .aggregator import CatalogAggregator
        from .store import build_store
        from . import signals  # noqa: F401

        self.aggregator = CatalogAggregator(build_store())
        if settings.CATALOG_REFRESH_ON_STARTUP:
            self.aggregator.refresh()


def get_aggregator():
    from django.apps import apps

    return apps.get_app_config('catalog').aggregator
