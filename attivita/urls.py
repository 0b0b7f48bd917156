"""
URL configuration per app attivita.
"""

from django.urls import path
from . import views

app_name = 'attivita'

urlpatterns = [
    path('', views.AttivitaListView.as_view(), name='attivita_list'),
    path('nuova/', views.AttivitaCreateView.as_view(), name='attivita_create'),
    path('<uuid:pk>/', views.AttivitaDetailView.as_view(), name='attivita_detail'),
    path('<uuid:pk>/modifica/', views.AttivitaUpdateView.as_view(), name='attivita_update'),
    path('<uuid:pk>/elimina/', views.AttivitaDeleteView.as_view(), name='attivita_delete'),
    path('<uuid:pk>/stato/', views.attivita_cambia_stato, name='attivita_cambia_stato'),

    # Tag
    path('tag/', views.TagListView.as_view(), name='tag_list'),
    path('tag/nuova/', views.TagCreateView.as_view(), name='tag_create'),
    path('tag/<uuid:pk>/modifica/', views.TagUpdateView.as_view(), name='tag_update'),
    path('tag/<uuid:pk>/elimina/', views.tag_elimina, name='tag_elimina'),
]
