"""
API JSON spese (/api/expenses/).
"""

from django.urls import path
from . import views

app_name = 'spese_api'

urlpatterns = [
    path('', views.spese_api, name='list'),
    path('categories/', views.spese_categorie_api, name='categories'),
    path('<uuid:pk>/', views.spesa_api_detail, name='detail'),
    path('<uuid:pk>/approve/', views.spesa_approva_api, name='approve'),
]
