"""
URL Configuration per l'app Core.
"""

from django.urls import path
from .views import GlobalSearchView, serve_qr_code

app_name = "core"

urlpatterns = [
    path("search/", GlobalSearchView.as_view(), name="global_search"),
    path("qrcode/", serve_qr_code, name="serve_qr_code"),
]
