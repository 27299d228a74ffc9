# dashboard/urls.py

from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    # AUTH URLS (Public)
    path('login/', views.login_page, name='login'),
    path('logout/', views.logout_page, name='logout'),

    path('', views.home, name='home'),

    # Services
    path('services/new/', views.service_create, name='service_create'),
    path('services/<slug:service_id>/', views.service_edit, name='service_edit'),

    # Product items
    path('services/<slug:service_id>/items/', views.item_list, name='item_list'),
    path('services/<slug:service_id>/items/new/', views.item_create, name='item_create'),
    path('services/<slug:service_id>/items/<slug:item_id>/', views.item_edit, name='item_edit'),

    # Testimonials
    path('testimonials/', views.testimonial_list, name='testimonial_list'),
    path('testimonials/new/', views.testimonial_create, name='testimonial_create'),
    path('testimonials/<str:doc_id>/delete/', views.testimonial_delete, name='testimonial_delete'),

    # Gallery
    path('moments/', views.moment_list, name='moment_list'),
    path('moments/new/', views.moment_create, name='moment_create'),
    path('moments/<str:doc_id>/delete/', views.moment_delete, name='moment_delete'),
]
