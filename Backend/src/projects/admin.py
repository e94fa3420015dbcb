from django.contrib import admin

from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "status", "progress", "is_featured", "is_published")
    list_filter = ("category", "status", "is_featured", "is_published")
    search_fields = ("title", "description", "city")
    prepopulated_fields = {"slug": ("title",)}
