"""
API JSON eventi (/api/events/).
"""

from django.urls import path
from . import views

app_name = 'eventi_api'

urlpatterns = [
    path('', views.eventi_api, name='list'),
    path('my-events/', views.miei_eventi_api, name='my_events'),
    path('token/<str:token>/', views.evento_token_api, name='token'),
    path('<uuid:pk>/', views.evento_api_detail, name='detail'),
    path('<uuid:pk>/register/', views.evento_registrazioni_api, name='register'),
]
