"""
URL configuration per app comunicazioni.
"""

from django.urls import path
from . import views

app_name = 'comunicazioni'

urlpatterns = [
    path('', views.messaggi_attivi, name='messaggi_attivi'),
    path('messaggi/', views.messaggi_editor, name='messaggi_editor'),
    path('impostazioni/', views.impostazioni, name='impostazioni'),

    # Gruppi classe
    path('gruppi/', views.gruppi_classe, name='gruppi_classe'),
    path('gruppi/gestione/', views.GruppoClasseListView.as_view(), name='gruppo_list'),
    path('gruppi/nuovo/', views.GruppoClasseCreateView.as_view(), name='gruppo_create'),
    path('gruppi/<int:pk>/modifica/', views.GruppoClasseUpdateView.as_view(), name='gruppo_update'),
    path('gruppi/<int:pk>/elimina/', views.GruppoClasseDeleteView.as_view(), name='gruppo_delete'),
]
