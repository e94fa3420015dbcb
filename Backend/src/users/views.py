import logging

from django.contrib.auth import get_user_model, login, logout
from django.db.models import Q
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.generics import CreateAPIView
from rest_framework_simplejwt.views import TokenObtainPairView

from common.audit import log_admin_action
from common.exceptions import UserFacingAPIException
from common.throttling import LoginRateThrottle
from common.utils import envelope
from .permissions import IsSuperAdminRole
from .serializers import (
    UserSerializer,
    RegisterSerializer,
    ChangePasswordSerializer,
    LoginSerializer,
    RoleTokenObtainPairSerializer,
    RoleUpdateSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class RoleTokenObtainPairView(TokenObtainPairView):
    """POST /api/auth/token/ -> {access, refresh, role} (verrouillage + limitation)."""

    serializer_class = RoleTokenObtainPairSerializer
    throttle_classes = [LoginRateThrottle]


class RegisterView(CreateAPIView):
    """Inscription ouverte: crée un membre et renvoie son profil."""

    serializer_class = RegisterSerializer
    permission_classes = [permissions.AllowAny]


class LoginView(APIView):
    """Connexion par cookie de session (HTTP-only, signé par Django)."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        login(request._request, user)
        logger.info(f"[auth] connexion session user:{user.pk}")
        return Response(envelope(UserSerializer(user).data, "Connexion réussie"))


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        logout(request._request)
        return Response(envelope(message="Déconnexion réussie"))


class MeView(APIView):
    """Retourne le profil de l'utilisateur courant."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = UserSerializer(instance=request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class ChangePasswordView(APIView):
    """Permet à l'utilisateur connecté de changer son mot de passe."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({"detail": "Mot de passe modifié avec succès."}, status=status.HTTP_200_OK)


class UserListView(generics.ListAPIView):
    """GET /api/auth/users/?search=&role= (super administrateurs)."""

    serializer_class = UserSerializer
    permission_classes = [IsSuperAdminRole]

    def get_queryset(self):
        qs = User.objects.all()
        role = self.request.query_params.get("role")
        if role:
            qs = qs.filter(role=role)
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )
        return qs


class UserRoleView(APIView):
    """PATCH /api/auth/users/<id>/role/ {"role": "ADMIN"}"""

    permission_classes = [IsSuperAdminRole]

    def patch(self, request, pk: int):
        user = generics.get_object_or_404(User, pk=pk)
        if user.pk == request.user.pk:
            raise UserFacingAPIException("Vous ne pouvez pas modifier votre propre rôle")

        serializer = RoleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        previous = user.role
        user.role = serializer.validated_data["role"]
        user.save()

        log_admin_action(request.user, "role:updated", "user", user.pk, {"from": previous, "to": user.role})
        return Response(envelope(UserSerializer(user).data, "Rôle mis à jour"))
