from django.urls import path
from .views import UploadView

urlpatterns = [
    path("admin/upload/", UploadView.as_view(), name="admin_upload"),
]
