from django.urls import path
from .views import ComposeBookingAPIView

app_name = 'booking_api'

urlpatterns = [
    path('compose/', ComposeBookingAPIView.as_view(), name='compose'),
]
