from django.urls import path

from .views import (
    RegisterView,
    LoginView,
    RefreshTokenView,
    ForgotPasswordView,
    ProfileView,
)

app_name = 'accounts'

urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', LoginView.as_view(), name='login'),
    path('refresh/', RefreshTokenView.as_view(), name='token-refresh'),
    path('forgot-password/', ForgotPasswordView.as_view(), name='forgot-password'),
    path('profile/', ProfileView.as_view(), name='profile'),
]
