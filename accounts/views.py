"""Accounts app views.

Contains:
- Auth endpoints (register, JWT login/logout, current user)
- Authenticated profile management (`/api/profile/me/`)
- Public user cards and the admin user list
- Company profiles, admin verification and CR verification via Wathq
"""

import logging

from django.contrib.auth import get_user_model, login, logout
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from projects.models import Project
from projects.serializers import ProjectSerializer
from projects.views import StandardResultsSetPagination

from .models import CompanyProfile
from .permissions import IsAdminRole, IsProfileOwnerOrAdmin, is_admin
from .serializers import CompanyProfileSerializer, RegisterSerializer, UserProfileSerializer, UserSerializer
from .wathq import WathqClient

logger = logging.getLogger(__name__)

User = get_user_model()


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {'refresh': str(refresh), 'access': str(refresh.access_token)}


# 1. التسجيل مع تسجيل الدخول التلقائي
class RegisterView(generics.CreateAPIView):
    """Public registration endpoint; answers with the user and a JWT pair."""
    queryset = User.objects.all()
    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer

    def create(self, request, *args, **kwargs):
        username = str(request.data.get('username') or '').strip()
        email = str(request.data.get('email') or '').strip()
        if username and User.objects.filter(username__iexact=username).exists():
            return Response({'message': 'Username already exists'}, status=status.HTTP_400_BAD_REQUEST)
        if email and User.objects.filter(email__iexact=email).exists():
            return Response({'message': 'Email already exists'}, status=status.HTTP_400_BAD_REQUEST)

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info('Registered %s user %s', user.role, user.username)

        return Response(
            {'user': UserSerializer(user).data, **_tokens_for(user)},
            status=status.HTTP_201_CREATED,
        )


# 2. تسجيل الدخول (JWT + جلسة Django)
class LoginView(TokenObtainPairView):
    """JWT login that also establishes a Django session and returns the user."""

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as exc:
            return Response({'message': str(exc)}, status=status.HTTP_401_UNAUTHORIZED)

        user = getattr(serializer, 'user', None)
        if user is not None and getattr(user, 'is_active', True):
            # DRF wraps the underlying Django HttpRequest at request._request.
            login(request._request, user)

        data = dict(serializer.validated_data)
        data['user'] = UserSerializer(user).data if user is not None else None
        return Response(data, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    """Blacklist the supplied refresh token and end the session."""
    refresh = request.data.get('refresh')
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError:
            return Response({'message': 'Invalid or expired refresh token'}, status=status.HTTP_400_BAD_REQUEST)
    logout(request._request)
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([AllowAny])
def current_user(request):
    if not request.user.is_authenticated:
        return Response({'message': 'Not authenticated'}, status=status.HTTP_401_UNAUTHORIZED)
    return Response({'user': UserSerializer(request.user).data})


# 3. إدارة الملف الشخصي
class UserProfileViewSet(viewsets.GenericViewSet):
    """Authenticated profile management."""
    permission_classes = [IsAuthenticated]
    serializer_class = UserProfileSerializer

    @action(detail=False, methods=['get', 'put', 'patch'])
    def me(self, request):
        """Get or update the authenticated user's profile."""
        user = request.user
        if request.method == 'GET':
            return Response(self.get_serializer(user).data)

        serializer = self.get_serializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        user.refresh_from_db()
        return Response(self.get_serializer(user).data)


# 4. المستخدمون
@api_view(['GET'])
@permission_classes([IsAdminRole])
def users_all(request):
    users = User.objects.order_by('id')
    return Response(UserSerializer(users, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def user_detail(request, pk):
    user = User.objects.filter(pk=pk).first()
    if not user:
        return Response({'message': 'User not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(UserSerializer(user).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def user_projects(request, pk):
    projects = Project.objects.filter(owner_id=pk).select_related('owner').order_by('-created_at')
    return Response(ProjectSerializer(projects, many=True).data)


# 5. بروفايلات الشركات
class CompanyProfileViewSet(viewsets.ModelViewSet):
    """Company profiles.

    - Public: list/retrieve, joined with the owner's username, name and email.
    - Company users: create their single profile.
    - Owner or admin: update; admin: verify.
    """

    queryset = CompanyProfile.objects.select_related('user').order_by('-created_at')
    serializer_class = CompanyProfileSerializer
    pagination_class = StandardResultsSetPagination
    permission_classes = [IsAuthenticatedOrReadOnly, IsProfileOwnerOrAdmin]
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['verified']
    search_fields = ['description', 'location', 'user__name', 'user__username']
    ordering_fields = ['created_at', 'rating']

    def create(self, request, *args, **kwargs):
        user = request.user
        if user.role != User.ROLE_COMPANY:
            return Response({'message': 'Only company accounts can create profiles'}, status=status.HTTP_403_FORBIDDEN)
        if CompanyProfile.objects.filter(user=user).exists():
            return Response({'message': 'Profile already exists'}, status=status.HTTP_400_BAD_REQUEST)
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def destroy(self, request, *args, **kwargs):
        if not is_admin(request.user):
            return Response({'message': 'هذه العملية متاحة للمسؤولين فقط'}, status=status.HTTP_403_FORBIDDEN)
        return super().destroy(request, *args, **kwargs)

    @action(detail=True, methods=['patch'], permission_classes=[IsAdminRole])
    def verify(self, request, pk=None):
        """Admin-only: mark a company as verified (or not)."""
        profile = get_object_or_404(CompanyProfile, pk=pk)
        profile.verified = request.data.get('verified') is True
        profile.save(update_fields=['verified'])
        logger.info('Company %s verified=%s by %s', profile.pk, profile.verified, request.user.username)
        return Response(self.get_serializer(profile).data)

    @action(detail=True, methods=['post'], url_path='verify-cr')
    def verify_cr(self, request, pk=None):
        """Check the CR number on Wathq and record it when the names match."""
        profile = self.get_object()

        cr_number = str(request.data.get('crNumber') or '').strip()
        if not cr_number:
            return Response({'message': 'رقم السجل التجاري مطلوب'}, status=status.HTTP_400_BAD_REQUEST)

        company_name = request.data.get('companyName') or profile.user.name
        result = WathqClient().verify_company_name(cr_number, company_name)
        if not result.get('success'):
            return Response({'message': result.get('error')}, status=status.HTTP_400_BAD_REQUEST)
        if not result.get('isMatch'):
            return Response(
                {
                    'message': 'اسم الشركة لا يطابق الاسم المسجل في السجل التجاري',
                    'registeredName': result.get('registeredName'),
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        profile.cr_number = ''.join(ch for ch in cr_number if ch.isdigit())
        profile.cr_verified_at = timezone.now()
        profile.save(update_fields=['cr_number', 'cr_verified_at'])
        return Response(self.get_serializer(profile).data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def wathq_test(request):
    """Admin diagnostic: run a raw Wathq lookup (and name check when given)."""
    cr_number = request.data.get('crNumber')
    if not cr_number:
        return Response({'message': 'رقم السجل التجاري مطلوب'}, status=status.HTTP_400_BAD_REQUEST)

    client = WathqClient()
    company_name = request.data.get('companyName')
    if company_name:
        return Response(client.verify_company_name(cr_number, company_name))
    return Response(client.verify_commercial_registry(cr_number))
