from .apps import get_aggregator


class CatalogMiddleware:
    """Hands every request the catalog aggregator as ``request.catalog``."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.catalog = get_aggregator()
        return self.get_response(request)
