from django.urls import path
from . import views

urlpatterns = [
    # Public
    path("partners/", views.PartnerListView.as_view(), name="partners_list"),
    path("antennes/", views.AntenneListView.as_view(), name="antennes_list"),
    path("antennes/search/", views.AntenneSearchView.as_view(), name="antennes_search"),
    path("antennes/<str:city>/stats/", views.AntenneStatsView.as_view(), name="antennes_stats"),
    path("executive-members/", views.ExecutiveMemberListView.as_view(), name="executive_members_list"),

    # Administration
    path("admin/partners/", views.AdminPartnerListView.as_view(), name="admin_partners_list"),
    path("admin/partners/<int:pk>/", views.AdminPartnerDetailView.as_view(), name="admin_partners_detail"),
    path("admin/antennes/", views.AdminAntenneListView.as_view(), name="admin_antennes_list"),
    path("admin/antennes/<int:pk>/", views.AdminAntenneDetailView.as_view(), name="admin_antennes_detail"),
    path("admin/executive-members/", views.AdminExecutiveMemberListView.as_view(),
         name="admin_executive_members_list"),
    path("admin/executive-members/<int:pk>/", views.AdminExecutiveMemberDetailView.as_view(),
         name="admin_executive_members_detail"),
]
