import re

from rest_framework import serializers

from common.exceptions import ensure_unique
from common.serializers import CamelModelSerializer
from .models import Partner, Antenne, ExecutiveMember

_PHONE_RE = re.compile(r"^[0-9+()\s.-]*$")


def _validate_phone(value: str) -> str:
    value = (value or "").strip()
    if not _PHONE_RE.match(value):
        raise serializers.ValidationError("Numéro de téléphone invalide.")
    return value


class PartnerSerializer(CamelModelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    class Meta:
        model = Partner
        fields = ["id", "name", "logo", "website", "type", "description", "order", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        ensure_unique(Partner.objects.filter(name__iexact=value), self.instance,
                      "Un partenaire avec ce nom existe déjà")
        return value


class AntenneSerializer(CamelModelSerializer):
    city = serializers.CharField(min_length=2, max_length=100)
    responsable = serializers.CharField(min_length=2, max_length=100)
    address = serializers.CharField(max_length=500, required=False, allow_blank=True)

    class Meta:
        model = Antenne
        fields = ["id", "city", "name", "responsable", "email", "phone", "address", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_city(self, value: str) -> str:
        value = value.strip()
        ensure_unique(Antenne.objects.filter(city__iexact=value), self.instance,
                      "Une antenne existe déjà pour cette ville")
        return value

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate_phone(self, value: str) -> str:
        return _validate_phone(value)

    def create(self, validated_data):
        validated_data.setdefault("name", f"Antenne de {validated_data['city']}")
        return super().create(validated_data)


class ExecutiveMemberSerializer(CamelModelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)
    position = serializers.CharField(min_length=2, max_length=100)

    class Meta:
        model = ExecutiveMember
        fields = ["id", "name", "position", "email", "phone", "photo", "bio", "order", "is_active",
                  "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_phone(self, value: str) -> str:
        return _validate_phone(value)
