from django.urls import path
from . import views

urlpatterns = [
    # Public
    path("documents/", views.DocumentListView.as_view(), name="documents_list"),
    path("documents/<slug:slug>/", views.DocumentDetailView.as_view(), name="documents_detail"),
    path("documents/<slug:slug>/download/", views.DocumentDownloadView.as_view(), name="documents_download"),

    # Administration
    path("admin/documents/", views.AdminDocumentListView.as_view(), name="admin_documents_list"),
    path("admin/documents/<int:pk>/", views.AdminDocumentDetailView.as_view(), name="admin_documents_detail"),
    path("admin/documents/<int:pk>/publish/", views.AdminDocumentPublishView.as_view(),
         name="admin_documents_publish"),
    path("admin/documents/<int:pk>/new-version/", views.AdminDocumentNewVersionView.as_view(),
         name="admin_documents_new_version"),
]
