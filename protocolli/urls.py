"""
URL configuration per app protocolli.
"""

from django.urls import path
from . import views

app_name = 'protocolli'

urlpatterns = [
    path('', views.ProtocolloListView.as_view(), name='protocollo_list'),
    path('nuovo/', views.ProtocolloCreateView.as_view(), name='protocollo_create'),
    path('<uuid:pk>/', views.ProtocolloDetailView.as_view(), name='protocollo_detail'),
    path('<uuid:pk>/modifica/', views.ProtocolloUpdateView.as_view(), name='protocollo_update'),
    path('<uuid:pk>/elimina/', views.ProtocolloDeleteView.as_view(), name='protocollo_delete'),
    path('<uuid:pk>/approva/', views.protocollo_approva, name='protocollo_approva'),
    path('<uuid:pk>/pdf/', views.protocollo_pdf, name='protocollo_pdf'),
    path('<uuid:pk>/crea-attivita/', views.protocollo_crea_attivita, name='protocollo_crea_attivita'),
]
