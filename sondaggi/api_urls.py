"""
API URL per app sondaggi: /api/surveys/
"""

from django.urls import path
from . import views

app_name = 'sondaggi_api'

urlpatterns = [
    path('skills/', views.risposte_api, name='skills'),
    path('skills/export/', views.risposte_export_api, name='skills_export'),
    path('skills/<uuid:pk>/', views.risposta_api_detail, name='skill_detail'),
]
