"""
Admin configuration per l'app users.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = [
        "username",
        "get_full_name",
        "email",
        "telefono",
        "ruolo",
        "is_staff",
        "is_active",
    ]
    list_filter = ["ruolo", "is_staff", "is_superuser", "is_active"]
    search_fields = ["username", "first_name", "last_name", "email", "telefono"]
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Comitato", {"fields": ("telefono", "ruolo")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Comitato", {"fields": ("telefono", "ruolo")}),
    )
