from __future__ import annotations

from django.http import JsonResponse
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ProductViewSet


def health_check(request):
    """
    Healthcheck endpoint para monitoramento.

    Returns:
        200 OK com {"status": "healthy", "version": "X.X.X"}
    """
    from priceman import __version__

    return JsonResponse({
        "status": "healthy",
        "version": __version__,
    })


router = DefaultRouter(trailing_slash=False)
router.register("products", ProductViewSet, basename="products")

urlpatterns = [
    path("health", health_check, name="health-check"),
    path("", include(router.urls)),
]
