"""
API URL per app protocolli: /api/protocols/
"""

from django.urls import path
from . import views

app_name = 'protocolli_api'

urlpatterns = [
    path('', views.protocolli_api, name='list'),
    path('<uuid:pk>/', views.protocollo_api_detail, name='detail'),
    path('<uuid:pk>/approve/', views.protocollo_approva_api, name='approve'),
    path('<uuid:pk>/tasks/', views.protocollo_attivita_api, name='tasks'),
]
