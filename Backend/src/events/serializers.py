from django.utils import timezone
from rest_framework import serializers

from common.serializers import CamelModelSerializer, CamelSerializer
from common.utils import unique_slug
from organization.models import Antenne
from .models import Event, EventRegistration


class PublishMode:
    DRAFT = "DRAFT"
    NOW = "NOW"
    SCHEDULED = "SCHEDULED"
    choices = [DRAFT, NOW, SCHEDULED]


def _registrations_count(obj: Event) -> int:
    count = getattr(obj, "registrations_count", None)
    return count if count is not None else obj.registrations.count()


class EventSerializer(CamelModelSerializer):
    """
    Serializer d'administration.

    A la creation, ``publishMode`` decide du statut initial:
    DRAFT (defaut), NOW (publie immediatement), SCHEDULED (``publishedAt`` futur requis).
    Ensuite le statut ne change que via /status/.
    """

    title = serializers.CharField(min_length=5, max_length=200)
    description = serializers.CharField(min_length=10, max_length=5000)
    location = serializers.CharField(max_length=200, required=False, allow_blank=True)
    antenne = serializers.PrimaryKeyRelatedField(queryset=Antenne.objects.all(), required=False, allow_null=True)
    publish_mode = serializers.ChoiceField(choices=PublishMode.choices, write_only=True, required=False)
    published_at = serializers.DateTimeField(required=False, allow_null=True)
    registrations_count = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id", "title", "slug", "description", "location", "category", "status",
            "start_date", "end_date", "max_attendees", "image_url", "published_at",
            "antenne", "publish_mode", "registrations_count", "created_by",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "slug", "status", "created_by", "created_at", "updated_at"]

    def get_registrations_count(self, obj) -> int:
        return _registrations_count(obj)

    def validate_start_date(self, value):
        unchanged = self.instance is not None and self.instance.start_date == value
        if not unchanged and value <= timezone.now():
            raise serializers.ValidationError("La date de début doit être dans le futur.")
        return value

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "La date de fin doit être postérieure au début."})

        if self.instance is None:
            mode = attrs.get("publish_mode", PublishMode.DRAFT)
            published_at = attrs.get("published_at")
            if mode == PublishMode.SCHEDULED and (published_at is None or published_at <= timezone.now()):
                raise serializers.ValidationError(
                    {"published_at": "Une date de publication future est requise en mode programmé."}
                )
        return attrs

    def create(self, validated_data):
        mode = validated_data.pop("publish_mode", PublishMode.DRAFT)
        published_at = validated_data.pop("published_at", None)
        if mode == PublishMode.NOW:
            validated_data.update(status=Event.Status.PUBLISHED, published_at=timezone.now())
        elif mode == PublishMode.SCHEDULED:
            validated_data.update(status=Event.Status.SCHEDULED, published_at=published_at)
        else:
            validated_data.update(status=Event.Status.DRAFT, published_at=None)
        validated_data["slug"] = unique_slug(Event, validated_data["title"])
        return super().create(validated_data)

    def update(self, instance, validated_data):
        # le statut et la date de publication passent par /status/
        validated_data.pop("publish_mode", None)
        validated_data.pop("published_at", None)
        return super().update(instance, validated_data)


class EventStatusSerializer(CamelSerializer):
    status = serializers.ChoiceField(choices=Event.Status.choices)
    published_at = serializers.DateTimeField(required=False, allow_null=True)


class PublicEventSerializer(CamelModelSerializer):
    registrations_count = serializers.SerializerMethodField()
    spots_left = serializers.SerializerMethodField()
    antenne = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id", "title", "slug", "description", "location", "category", "status",
            "start_date", "end_date", "max_attendees", "image_url", "published_at",
            "antenne", "registrations_count", "spots_left", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_registrations_count(self, obj) -> int:
        return _registrations_count(obj)

    def get_spots_left(self, obj):
        if obj.max_attendees is None:
            return None
        return max(0, obj.max_attendees - _registrations_count(obj))

    def get_antenne(self, obj):
        if obj.antenne_id is None:
            return None
        return {"id": obj.antenne_id, "city": obj.antenne.city}


class EventRegistrationSerializer(CamelModelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField(max_length=255)

    class Meta:
        model = EventRegistration
        fields = ["id", "event", "name", "email", "phone", "city", "establishment", "created_at"]
        read_only_fields = ["id", "event", "created_at"]

    def validate_email(self, value: str) -> str:
        return value.strip().lower()
