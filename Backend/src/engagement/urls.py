from django.urls import path
from . import views

urlpatterns = [
    path("newsletter/", views.NewsletterView.as_view(), name="newsletter"),
    path("contact/", views.ContactView.as_view(), name="contact"),

    path("admin/contact-messages/", views.AdminContactMessageListView.as_view(),
         name="admin_contact_messages_list"),
    path("admin/contact-messages/<int:pk>/", views.AdminContactMessageDetailView.as_view(),
         name="admin_contact_messages_detail"),
]
