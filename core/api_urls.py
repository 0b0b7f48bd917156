"""
API bozze form: /api/drafts/<tipo>/ e /api/drafts/<tipo>/<id>/
"""

from django.urls import path
from .views import draft_api

app_name = "core_api"

urlpatterns = [
    path("<str:tipo>/", draft_api, name="draft"),
    path("<str:tipo>/<str:entita_id>/", draft_api, name="draft_edit"),
]
