from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny

from .queries import get_service, products_for_service, filter_products
from .serializers import CatalogSnapshotSerializer, ProductItemSerializer


class CatalogAPIView(APIView):
    """Everything the catalog currently shows."""
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = CatalogSnapshotSerializer(request.catalog.snapshot())
        return Response(serializer.data)


class ServiceItemsAPIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, service_id):
        snapshot = request.catalog.snapshot()
        if get_service(snapshot, service_id) is None:
            raise NotFound(f'Service {service_id} not found')

        items = filter_products(
            products_for_service(snapshot, service_id),
            tag=request.query_params.get('tag', 'all'),
            search=request.query_params.get('q', ''),
            sort=request.query_params.get('sort', 'popular'),
        )
        serializer = ProductItemSerializer(items, many=True)
        return Response(serializer.data)
