"""URL routes for auth, profile, user and company APIs (mounted under /api/)."""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    CompanyProfileViewSet,
    LoginView,
    RegisterView,
    UserProfileViewSet,
    current_user,
    logout_view,
    user_detail,
    user_projects,
    users_all,
    wathq_test,
)

router = DefaultRouter()
router.register(r'profile', UserProfileViewSet, basename='user-profile')
router.register(r'companies', CompanyProfileViewSet, basename='company')

urlpatterns = [
    # 1. نظام التسجيل والدخول
    path('auth/register', RegisterView.as_view(), name='auth_register'),
    path('auth/login', LoginView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/logout', logout_view, name='auth_logout'),
    path('auth/user', current_user, name='auth_user'),

    # 2. المستخدمون
    path('users/all', users_all, name='users_all'),
    path('users/<int:pk>', user_detail, name='user_detail'),
    path('users/<int:pk>/projects', user_projects, name='user_projects'),

    # 3. وثيق (تشخيص للمسؤول)
    path('test/wathq', wathq_test, name='wathq_test'),

    # 4. روابط الـ ViewSet
    path('', include(router.urls)),
]
