# config/urls.py
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    snapshot = request.catalog.snapshot()
    return Response({
        'status': 'healthy',
        'message': f'{settings.BUSINESS_NAME} is running',
        'catalog': {
            'services': len(snapshot.services),
            'products': len(snapshot.products),
            'loading': snapshot.loading,
        },
    })


urlpatterns = [
    # Account management for operators
    path('django-admin/', admin.site.urls),

    # Catalog editor (protected area)
    path('admin/', include('dashboard.urls')),

    # API Routes
    path('api/catalog/', include('catalog.urls')),
    path('api/booking/', include('booking.api_urls')),

    # Health check
    path('health/', health_check, name='health-check'),

    path('booking/', include('booking.urls')),

    # Landing pages - catch-all, keep last
    path('', include('landing.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
