"""
URL configuration per app sondaggi.
"""

from django.urls import path
from . import views

app_name = 'sondaggi'

urlpatterns = [
    path('competenze/', views.sondaggio_competenze, name='sondaggio_competenze'),
    path('risposte/', views.RispostaListView.as_view(), name='risposta_list'),
    path('risposte/<uuid:pk>/', views.RispostaDetailView.as_view(), name='risposta_detail'),
    path('risposte/<uuid:pk>/elimina/', views.RispostaDeleteView.as_view(), name='risposta_delete'),
    path('risposte/export/<str:formato>/', views.risposte_export, name='risposte_export'),
]
