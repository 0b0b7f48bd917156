"""
API URL per app comunicazioni: /api/urgent-messages/, /api/settings/, /api/groups/
"""

from django.urls import path
from . import views

app_name = 'comunicazioni_api'

urlpatterns = [
    path('urgent-messages/', views.messaggi_api, name='urgent_messages'),
    path('urgent-messages/save/', views.messaggi_salva_api, name='urgent_messages_save'),
    path('urgent-messages/<uuid:pk>/share/', views.messaggio_condivisione_api, name='urgent_message_share'),
    path('settings/', views.impostazioni_api, name='settings'),
    path('groups/', views.gruppi_api, name='groups'),
    path('groups/<int:pk>/', views.gruppo_api_detail, name='group_detail'),
]
