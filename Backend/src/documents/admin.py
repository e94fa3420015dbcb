from django.contrib import admin

from .models import Document, DocumentTag, DocumentVersion


class DocumentTagInline(admin.TabularInline):
    model = DocumentTag
    extra = 0


class DocumentVersionInline(admin.TabularInline):
    model = DocumentVersion
    extra = 0
    readonly_fields = ("version", "file_url", "file_name", "created_at")


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "visibility", "version", "downloads", "is_published")
    list_filter = ("category", "visibility", "is_published")
    search_fields = ("title", "description")
    readonly_fields = ("version", "downloads")
    inlines = [DocumentTagInline, DocumentVersionInline]
