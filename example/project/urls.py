"""
URL configuration for Priceman example project.
"""

from django.urls import include, path

urlpatterns = [
    path("api/", include("priceman.api.urls")),
]
