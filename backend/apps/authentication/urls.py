"""
Authentication URL configuration.
"""

from django.urls import path
from .views import (
    RegisterView,
    LoginView,
    RefreshTokenView,
    LogoutView,
    CurrentUserView,
)

app_name = 'authentication'

urlpatterns = [
    # POST /api/auth/register
    path('register', RegisterView.as_view(), name='register'),

    # POST /api/auth/login
    path('login', LoginView.as_view(), name='login'),

    # POST /api/auth/refresh
    # Rotate a refresh token
    path('refresh', RefreshTokenView.as_view(), name='refresh'),

    # POST /api/auth/logout
    # Revoke a refresh token
    path('logout', LogoutView.as_view(), name='logout'),

    # GET /api/auth/me
    path('me', CurrentUserView.as_view(), name='current_user'),
]
