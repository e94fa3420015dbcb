from django.utils import timezone
from rest_framework import serializers

from common.exceptions import ensure_unique
from common.serializers import CamelModelSerializer
from common.utils import unique_slug
from .models import Project


class ProjectSerializer(CamelModelSerializer):
    title = serializers.CharField(min_length=5, max_length=200)
    description = serializers.CharField(min_length=20, max_length=10000)
    short_desc = serializers.CharField(max_length=300, required=False, allow_blank=True)
    progress = serializers.IntegerField(min_value=0, max_value=100, required=False)

    class Meta:
        model = Project
        fields = [
            "id", "title", "slug", "description", "short_desc", "category", "status", "progress",
            "image_url", "city", "start_date", "end_date", "is_featured", "is_published",
            "published_at", "created_by", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "slug", "published_at", "created_by", "created_at", "updated_at"]

    def validate_title(self, value: str) -> str:
        value = value.strip()
        ensure_unique(Project.objects.filter(title__iexact=value), self.instance,
                      "Un projet avec ce titre existe déjà")
        return value

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "La date de fin doit être postérieure au début."})
        return attrs

    def create(self, validated_data):
        validated_data["slug"] = unique_slug(Project, validated_data["title"])
        if validated_data.get("is_published"):
            validated_data["published_at"] = timezone.now()
        return super().create(validated_data)

    def update(self, instance, validated_data):
        published = validated_data.get("is_published")
        if published is True and not instance.is_published:
            validated_data["published_at"] = timezone.now()
        elif published is False:
            validated_data["published_at"] = None
        return super().update(instance, validated_data)
