"""Projects API views.

Includes CRUD for project postings and the public recommendation endpoints.
Filtering/search/ordering/pagination are provided for the list endpoint.
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.serializers import CompanyProfileSerializer

from . import recommendations
from .models import Project
from .permissions import IsEntrepreneurOrReadOnly
from .serializers import ProjectSerializer


# 1. تعريف كلاس التحكم في العدد (Pagination)
class StandardResultsSetPagination(PageNumberPagination):
    """Default pagination used by list endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# 2. المشاريع
class ProjectViewSet(viewsets.ModelViewSet):
    """Projects CRUD.

    - Public users: can read every project.
    - Entrepreneurs: can create projects and edit/delete only their own.
    """

    queryset = Project.objects.select_related('owner')
    serializer_class = ProjectSerializer
    pagination_class = StandardResultsSetPagination

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'owner', 'highlight_status']
    search_fields = ['title', 'description']
    ordering_fields = ['created_at']

    permission_classes = [IsEntrepreneurOrReadOnly]

    def perform_create(self, serializer):
        # ربط المشروع بصاحب الحساب الحالي تلقائياً
        serializer.save(owner=self.request.user)


# 3. التوصيات
def _limit(request, default):
    try:
        value = int(request.query_params.get('limit', default))
    except (TypeError, ValueError):
        return default
    return max(1, min(value, 50))


@api_view(['GET'])
@permission_classes([AllowAny])
def recommended_projects_for_company(request, company_id):
    results = recommendations.recommended_projects_for_company(company_id, _limit(request, 5))
    return Response([
        {'project': ProjectSerializer(item['project']).data, 'matchScore': item['matchScore']}
        for item in results
    ])


@api_view(['GET'])
@permission_classes([AllowAny])
def recommended_companies_for_project(request, project_id):
    results = recommendations.recommended_companies_for_project(project_id, _limit(request, 5))
    return Response([
        {'company': CompanyProfileSerializer(item['company']).data, 'matchScore': item['matchScore']}
        for item in results
    ])


@api_view(['GET'])
@permission_classes([AllowAny])
def similar_projects(request, project_id):
    results = recommendations.similar_projects(project_id, _limit(request, 3))
    return Response([
        {'project': ProjectSerializer(item['project']).data, 'similarityScore': item['similarityScore']}
        for item in results
    ])


@api_view(['GET'])
@permission_classes([AllowAny])
def trending_projects(request):
    projects = recommendations.trending_projects(_limit(request, 5))
    return Response(ProjectSerializer(projects, many=True).data)
