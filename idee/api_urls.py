"""
API URL per app idee: /api/ideas/, /api/meetings/
"""

from django.urls import path
from . import views

app_name = 'idee_api'

urlpatterns = [
    path('ideas/', views.idee_api, name='ideas'),
    path('ideas/<uuid:pk>/status/', views.idea_stato_api, name='idea_status'),
    path('meetings/', views.riunioni_api, name='meetings'),
    path('meetings/<uuid:pk>/', views.riunione_api_detail, name='meeting_detail'),
    path('meetings/<uuid:pk>/ideas/', views.riunione_idee_api, name='meeting_ideas'),
]
