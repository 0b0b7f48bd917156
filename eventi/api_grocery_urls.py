"""
API JSON liste spesa (/api/grocery/).
"""

from django.urls import path
from . import views

app_name = 'grocery_api'

urlpatterns = [
    path('my-grocery/', views.mia_spesa_api, name='my_grocery'),
    path('<str:token>/', views.lista_spesa_api, name='detail'),
    path('<str:token>/items/', views.articoli_spesa_api, name='items'),
    path('<str:token>/items/<uuid:item_id>/', views.articolo_spesa_api, name='item'),
    path('<str:token>/claim/<uuid:item_id>/', views.prenota_articolo_api, name='claim'),
]
