from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from common.serializers import CamelModelSerializer, CamelSerializer
from .models import Role
from .services import authenticate_with_lockout

User = get_user_model()


class UserSerializer(CamelModelSerializer):
    """Serializer de lecture pour le profil utilisateur (sans mot de passe)."""

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "role", "is_staff", "date_joined"]
        read_only_fields = ["id", "role", "is_staff", "date_joined"]


class RegisterSerializer(CamelModelSerializer):
    """Serializer d'inscription: crée un MEMBER avec password hashé."""

    password = serializers.CharField(write_only=True, required=True, trim_whitespace=False)

    class Meta:
        model = User
        fields = ["id", "username", "email", "password", "first_name", "last_name", "role"]
        read_only_fields = ["id", "role"]

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate(self, attrs):
        candidate = User(username=attrs.get("username"), email=attrs.get("email"))
        validate_password(attrs["password"], candidate)
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data, role=Role.MEMBER)
        user.set_password(password)
        user.save()
        return user


class ChangePasswordSerializer(CamelSerializer):
    """Serializer pour changer le mot de passe de l'utilisateur connecté."""

    old_password = serializers.CharField(write_only=True, required=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, required=True, trim_whitespace=False)

    def validate(self, attrs):
        user = self.context["request"].user
        if not user.check_password(attrs["old_password"]):
            raise serializers.ValidationError({"old_password": "Ancien mot de passe incorrect."})
        validate_password(attrs["new_password"], user)
        return attrs

    def save(self, **kwargs):
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save()
        return user


class LoginSerializer(CamelSerializer):
    """Connexion par session: ``username`` accepte aussi l'adresse e-mail."""

    username = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        attrs["user"] = authenticate_with_lockout(
            self.context.get("request"), attrs["username"], attrs["password"]
        )
        return attrs


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT avec le role dans les claims, soumis au verrouillage de compte."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token

    def validate(self, attrs):
        user = authenticate_with_lockout(
            self.context.get("request"), attrs[self.username_field], attrs["password"]
        )
        refresh = self.get_token(user)
        return {"refresh": str(refresh), "access": str(refresh.access_token), "role": user.role}


class RoleUpdateSerializer(CamelSerializer):
    role = serializers.ChoiceField(choices=Role.choices)
