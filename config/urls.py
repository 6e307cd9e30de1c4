"""
URL configuration for the Responsagility reflection backend.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('practice/', include('reflections.urls')),
    path('accounts/', include('accounts.urls')),
    path('health/', include('health_check.urls')),
]
