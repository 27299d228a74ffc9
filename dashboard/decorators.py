# dashboard/decorators.py

from functools import wraps
from django.contrib import messages
from django.contrib.auth.views import redirect_to_login
from django.shortcuts import redirect
from django.urls import reverse


def redirect_authenticated_staff(view_func):
    """Send a signed-in operator straight to the editor instead of the login page."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if request.user.is_authenticated and request.user.is_staff:
            return redirect('dashboard:home')
        return view_func(request, *args, **kwargs)
    return wrapper


def staff_required(view_func):
    """Ensure user is a signed-in staff member."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect_to_login(request.get_full_path(), reverse('dashboard:login'))
        if not request.user.is_staff:
            messages.error(request, 'Access denied. Staff only.')
            return redirect('dashboard:login')
        return view_func(request, *args, **kwargs)
    return wrapper
