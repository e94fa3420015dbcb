from django.urls import path
from . import views

urlpatterns = [
    path("projects/", views.ProjectListView.as_view(), name="projects_list"),
    path("projects/<str:slug>/", views.ProjectDetailView.as_view(), name="projects_detail"),

    path("admin/projects/", views.AdminProjectListView.as_view(), name="admin_projects_list"),
    path("admin/projects/<int:pk>/", views.AdminProjectDetailView.as_view(), name="admin_projects_detail"),
]
