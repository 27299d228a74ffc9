from django.urls import path
from .views import CatalogAPIView, ServiceItemsAPIView

app_name = 'catalog'

urlpatterns = [
    path('', CatalogAPIView.as_view(), name='snapshot'),
    path('services/<slug:service_id>/items/', ServiceItemsAPIView.as_view(), name='service-items'),
]
