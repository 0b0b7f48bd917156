"""
API JSON prom (/api/prom/).
"""

from django.urls import path
from . import views

app_name = 'prom_api'

urlpatterns = [
    path('', views.prom_api, name='list'),
    path('<uuid:pk>/', views.prom_api_detail, name='detail'),
    path('<uuid:pk>/budget/', views.prom_budget_api, name='budget'),
    path('<uuid:pk>/quotes/', views.prom_preventivi_api, name='quotes'),
    path('<uuid:pk>/quotes/<uuid:quote_id>/', views.prom_preventivo_api, name='quote_detail'),
    path('<uuid:pk>/votes/', views.prom_voti_api, name='votes'),
]
