"""URL routes for offers (mounted under /api/)."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import OfferViewSet, project_offers

router = DefaultRouter()
router.register(r'offers', OfferViewSet, basename='offer')

urlpatterns = [
    path('projects/<int:project_id>/offers/', project_offers, name='project_offers'),
    path('', include(router.urls)),
]
