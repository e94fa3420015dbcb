from django.contrib import admin

from .models import NewsletterSubscriber, ContactMessage


@admin.register(NewsletterSubscriber)
class NewsletterSubscriberAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "is_active", "created_at", "unsubscribed_at")
    list_filter = ("is_active",)
    search_fields = ("email",)


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "subject", "status", "spam_score", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "email", "subject", "message")
    readonly_fields = ("spam_score", "ip_address", "user_agent", "created_at")
