"""URL routes for site content (mounted under /api/)."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r'contact-messages', views.ContactMessageViewSet, basename='contact-message')
router.register(r'admin/featured-clients', views.FeaturedClientAdminViewSet, basename='admin-featured-client')
router.register(r'premium-clients', views.PremiumClientViewSet, basename='premium-client')

urlpatterns = [
    path('site-settings/', views.site_settings, name='site_settings'),
    path('site-settings/<str:key>', views.site_setting_detail, name='site_setting_detail'),
    path('featured-clients/', views.featured_clients, name='featured_clients'),
    path('testimonials/', views.TestimonialListCreateView.as_view(), name='testimonials'),
    path('', include(router.urls)),
]
