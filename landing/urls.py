# landing/urls.py
from django.urls import path
from . import views

app_name = 'landing'

urlpatterns = [
    path('', views.home, name='home'),
    path('services/', views.services, name='services'),
    path('services/<slug:service_id>/', views.service_detail, name='service_detail'),
    path('services/<slug:service_id>/<slug:item_id>/', views.product_detail, name='product_detail'),
    path('gallery/', views.gallery, name='gallery'),
    path('contact/', views.contact, name='contact'),
]
