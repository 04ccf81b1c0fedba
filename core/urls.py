"""
URL configuration for core project.

Every app mounts its routes under /api/; see each app's urls.py.
"""
from django.contrib import admin
from django.urls import path, include
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from django.conf import settings
from django.conf.urls.static import static


schema_view = get_schema_view(
   openapi.Info(title="LinkTech API", default_version='v1'),
   public=True,
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('accounts.urls')),
    path('api/', include('projects.urls')),
    path('api/', include('offers.urls')),
    path('api/', include('finance.urls')),
    path('api/', include('invoices.urls')),
    path('api/', include('messaging.urls')),
    path('api/', include('ndas.urls')),
    path('api/', include('blog.urls')),
    path('api/', include('cms.urls')),
    # Swagger Documentation
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0)),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    # ده الرابط اللي هتفتحه في المتصفح
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    # رابط بديل بشكل منظّم أكتر (Redoc)
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
