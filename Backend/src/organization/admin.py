from django.contrib import admin

from .models import Partner, Antenne, ExecutiveMember


@admin.register(Partner)
class PartnerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "type", "order", "updated_at")
    list_filter = ("type",)
    search_fields = ("name",)


@admin.register(Antenne)
class AntenneAdmin(admin.ModelAdmin):
    list_display = ("id", "city", "name", "responsable", "email")
    search_fields = ("city", "name", "responsable")


@admin.register(ExecutiveMember)
class ExecutiveMemberAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "position", "order", "is_active")
    list_filter = ("is_active",)
    list_editable = ("order", "is_active")
