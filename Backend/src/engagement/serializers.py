import re

from rest_framework import serializers

from common.serializers import CamelModelSerializer, CamelSerializer
from .models import NewsletterSubscriber, ContactMessage

_NAME_RE = re.compile(r"^[^\W\d_]+(?:[\s'.-][^\W\d_]+)*$")
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)


class NewsletterSubscriberSerializer(CamelModelSerializer):
    class Meta:
        model = NewsletterSubscriber
        fields = ["id", "email", "is_active", "unsubscribed_at", "created_at", "updated_at"]
        read_only_fields = fields


class NewsletterEmailSerializer(CamelSerializer):
    email = serializers.EmailField(max_length=255)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class NewsletterStatusSerializer(NewsletterEmailSerializer):
    is_active = serializers.BooleanField()


class ContactSerializer(CamelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField(max_length=255)
    subject = serializers.CharField(min_length=5, max_length=200, required=False, allow_blank=True)
    message = serializers.CharField(min_length=10, max_length=2000)
    # champ invisible du formulaire: rempli uniquement par les robots
    company = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not _NAME_RE.match(value):
            raise serializers.ValidationError("Le nom ne doit contenir que des lettres.")
        return value

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate_message(self, value: str) -> str:
        value = _SCRIPT_RE.sub("", value).strip()
        if len(value) < 10:
            raise serializers.ValidationError("Le message doit contenir au moins 10 caractères.")
        return value


class ContactMessageSerializer(CamelModelSerializer):
    class Meta:
        model = ContactMessage
        fields = ["id", "name", "email", "subject", "message", "status", "spam_score",
                  "ip_address", "user_agent", "created_at", "updated_at"]
        read_only_fields = ["id", "name", "email", "subject", "message", "spam_score",
                            "ip_address", "user_agent", "created_at", "updated_at"]
