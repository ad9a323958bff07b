from django.contrib import admin
from django.shortcuts import redirect
from django.urls import path

urlpatterns = [
    # Redirect root URL to Django admin
    path("", lambda request: redirect("admin:index")),

    path("admin/", admin.site.urls),  # Admin Panel
]
