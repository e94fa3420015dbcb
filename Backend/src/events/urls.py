from django.urls import path
from . import views

urlpatterns = [
    # Public
    path("events/", views.EventListView.as_view(), name="events_list"),
    path("events/<int:pk>/register/", views.EventRegistrationView.as_view(), name="events_register"),
    path("events/<str:slug>/", views.EventDetailView.as_view(), name="events_detail"),

    # Administration
    path("admin/events/", views.AdminEventListView.as_view(), name="admin_events_list"),
    path("admin/events/publish-scheduled/", views.PublishScheduledView.as_view(),
         name="admin_events_publish_scheduled"),
    path("admin/events/<int:pk>/", views.AdminEventDetailView.as_view(), name="admin_events_detail"),
    path("admin/events/<int:pk>/status/", views.AdminEventStatusView.as_view(), name="admin_events_status"),
    path("admin/events/<int:pk>/registrations/", views.AdminEventRegistrationsView.as_view(),
         name="admin_events_registrations"),
]
