"""
URL configuration per app idee.
"""

from django.urls import path
from . import views

app_name = 'idee'

urlpatterns = [
    # Idee
    path('', views.IdeaListView.as_view(), name='idea_list'),
    path('invia/', views.idea_invio, name='idea_invio'),
    path('<uuid:pk>/', views.IdeaDetailView.as_view(), name='idea_detail'),
    path('<uuid:pk>/stato/', views.idea_aggiorna_stato, name='idea_aggiorna_stato'),
    path('<uuid:pk>/elimina/', views.IdeaDeleteView.as_view(), name='idea_delete'),

    # Riunioni
    path('riunioni/', views.RiunioneListView.as_view(), name='riunione_list'),
    path('riunioni/nuova/', views.RiunioneCreateView.as_view(), name='riunione_create'),
    path('riunioni/<uuid:pk>/', views.RiunioneDetailView.as_view(), name='riunione_detail'),
    path('riunioni/<uuid:pk>/modifica/', views.RiunioneUpdateView.as_view(), name='riunione_update'),
    path('riunioni/<uuid:pk>/elimina/', views.RiunioneDeleteView.as_view(), name='riunione_delete'),
    path('riunioni/<uuid:pk>/apri-chiudi/', views.riunione_apri_chiudi, name='riunione_apri_chiudi'),
    path('riunioni/<uuid:pk>/bacheca/', views.riunione_bacheca, name='riunione_bacheca'),
]
