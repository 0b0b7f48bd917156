"""
URLs per app eventi.
"""

from django.urls import path
from . import views

app_name = 'eventi'

urlpatterns = [
    # Eventi (comitato)
    path('', views.EventoListView.as_view(), name='evento_list'),
    path('nuovo/', views.EventoCreateView.as_view(), name='evento_create'),
    path('<uuid:pk>/', views.EventoDetailView.as_view(), name='evento_detail'),
    path('<uuid:pk>/modifica/', views.EventoUpdateView.as_view(), name='evento_update'),
    path('<uuid:pk>/elimina/', views.EventoDeleteView.as_view(), name='evento_delete'),
    path('<uuid:pk>/archivia/', views.evento_archivia, name='evento_archivia'),
    path('<uuid:pk>/qrcode/', views.evento_qr_code, name='evento_qr_code'),

    # Pagine pubbliche
    path('<uuid:pk>/registrazione/', views.evento_registrazione, name='evento_registrazione'),
    path('edit/<str:token>/', views.evento_modifica_token, name='evento_modifica_token'),
    path('miei-eventi/', views.miei_eventi, name='miei_eventi'),

    # Liste spesa
    path('liste-spesa/', views.ListaSpesaListView.as_view(), name='lista_spesa_list'),
    path('liste-spesa/nuova/', views.ListaSpesaCreateView.as_view(), name='lista_spesa_create'),
    path('liste-spesa/<uuid:pk>/modifica/', views.ListaSpesaUpdateView.as_view(), name='lista_spesa_update'),
    path('grocery/<str:token>/', views.lista_spesa_pubblica, name='lista_spesa_pubblica'),
]
