"""
URL Configuration per l'app Users
"""

from django.urls import path
from . import views

app_name = "users"

urlpatterns = [
    path("", views.login_view, name="login"),
    path("login/", views.login_view, name="login_alias"),
    path("logout/", views.logout_view, name="logout"),
]
