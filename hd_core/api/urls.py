# backend/hd_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from hd_core.facilities.api.views import DepartmentViewSet, FacilityViewSet
from hd_core.iam.api.auth import LoginView, LogoutView, RefreshView, RegisterView
from hd_core.iam.api.me import MeView
from hd_core.iam.api.views import UserViewSet
from hd_core.reports.api.views import HealthReportViewSet

router = DefaultRouter()

router.register(r"facilities", FacilityViewSet, basename="facilities")
router.register(r"departments", DepartmentViewSet, basename="departments")
router.register(r"users", UserViewSet, basename="users")
router.register(r"reports", HealthReportViewSet, basename="reports")
# legacy path used by existing dashboard clients
router.register(r"health-data", HealthReportViewSet, basename="health-data")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
