"""URL configuration for the travel inventory service.

The `urlpatterns` list routes URLs to views. It includes the Django admin
and the application‑level routers provided by Django Rest Framework.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/catalog/', include('apps.catalog.urls')),
    path('api/v1/availability/', include('apps.availability.urls')),
]
