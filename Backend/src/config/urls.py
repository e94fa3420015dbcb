from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),

    # APIs
    path("api/", include("common.urls")),
    path("api/auth/", include("users.urls")),
    path("api/", include("organization.urls")),
    path("api/", include("events.urls")),
    path("api/", include("documents.urls")),
    path("api/", include("projects.urls")),
    path("api/", include("engagement.urls")),
    path("api/", include("analytics.urls")),
    path("api/", include("integrations.urls")),
]
