"""
URLs per app spese.
"""

from django.urls import path
from . import views

app_name = 'spese'

urlpatterns = [
    path('', views.SpesaListView.as_view(), name='spesa_list'),
    path('nuova/', views.SpesaCreateView.as_view(), name='spesa_create'),
    path('<uuid:pk>/modifica/', views.SpesaUpdateView.as_view(), name='spesa_update'),
    path('<uuid:pk>/elimina/', views.SpesaDeleteView.as_view(), name='spesa_delete'),
    path('<uuid:pk>/approva/', views.spesa_approva, name='spesa_approva'),
    path('export/<str:formato>/', views.spese_export, name='spese_export'),
]
