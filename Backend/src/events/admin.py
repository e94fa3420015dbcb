from django.contrib import admin

from .models import Event, EventRegistration


class EventRegistrationInline(admin.TabularInline):
    model = EventRegistration
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Le statut se modifie de preference via l'API (transitions controlees)."""

    list_display = ("id", "title", "status", "category", "start_date", "published_at", "antenne")
    list_filter = ("status", "category", "antenne")
    search_fields = ("title", "description", "location")
    prepopulated_fields = {"slug": ("title",)}
    inlines = [EventRegistrationInline]


@admin.register(EventRegistration)
class EventRegistrationAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "name", "email", "created_at")
    search_fields = ("name", "email")
