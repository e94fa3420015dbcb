from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """Admin pour le modèle utilisateur (rôle + verrouillage)."""

    list_display = ("id", "username", "email", "role", "is_active", "lockout_until", "date_joined")
    list_filter = ("role", "is_active")
    search_fields = ("username", "email", "first_name", "last_name")
    ordering = ("id",)
    readonly_fields = ("last_login", "date_joined", "is_staff")

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        ("Infos personnelles", {"fields": ("first_name", "last_name", "email")}),
        ("Rôle", {"fields": ("role", "is_active", "is_staff", "is_superuser")}),
        ("Sécurité", {"fields": ("failed_login_attempts", "lockout_until")}),
        ("Importants", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("username", "email", "role", "password1", "password2"),
            },
        ),
    )
