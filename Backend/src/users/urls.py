from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    RoleTokenObtainPairView,
    RegisterView,
    LoginView,
    LogoutView,
    MeView,
    ChangePasswordView,
    UserListView,
    UserRoleView,
)

urlpatterns = [
    # Auth JWT (login / refresh)
    path("token/", RoleTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),

    # Session (cookie)
    path("login/", LoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),

    # Inscription
    path("register/", RegisterView.as_view(), name="register"),

    # Profil courant
    path("me/", MeView.as_view(), name="me"),

    # Changer le mot de passe
    path("change-password/", ChangePasswordView.as_view(), name="change_password"),

    # Gestion des rôles (super admin)
    path("users/", UserListView.as_view(), name="users_list"),
    path("users/<int:pk>/role/", UserRoleView.as_view(), name="users_role"),
]
