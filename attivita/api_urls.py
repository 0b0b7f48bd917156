"""
API URL per app attivita: /api/tasks/ e /api/tags/
"""

from django.urls import path
from . import views

app_name = 'attivita_api'

urlpatterns = [
    path('tasks/', views.attivita_api, name='task_list'),
    path('tasks/bulk/tags/', views.attivita_tag_blocco_api, name='task_bulk_tags'),
    path('tasks/<uuid:pk>/', views.attivita_api_detail, name='task_detail'),
    path('tasks/<uuid:pk>/tags/', views.attivita_tag_api, name='task_tags'),
    path('tags/', views.tag_api, name='tag_list'),
    path('tags/<uuid:pk>/', views.tag_api_detail, name='tag_detail'),
]
