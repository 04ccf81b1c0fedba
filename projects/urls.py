"""URL routes for projects and recommendations (mounted under /api/)."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ProjectViewSet,
    recommended_companies_for_project,
    recommended_projects_for_company,
    similar_projects,
    trending_projects,
)

router = DefaultRouter()
router.register(r'projects', ProjectViewSet, basename='project')

urlpatterns = [
    path('recommendations/companies/<int:company_id>/projects', recommended_projects_for_company, name='recommended_projects'),
    path('recommendations/projects/<int:project_id>/companies', recommended_companies_for_project, name='recommended_companies'),
    path('recommendations/projects/<int:project_id>/similar', similar_projects, name='similar_projects'),
    path('recommendations/trending-projects', trending_projects, name='trending_projects'),
    path('', include(router.urls)),
]
