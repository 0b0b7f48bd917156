"""
URLs per app prom.
"""

from django.urls import path
from . import views

app_name = 'prom'

urlpatterns = [
    path('', views.PromDashboardView.as_view(), name='dashboard'),
    path('nuovo/', views.PromCreateView.as_view(), name='prom_create'),
    path('<uuid:pk>/', views.PromDetailView.as_view(), name='prom_detail'),
    path('<uuid:pk>/modifica/', views.PromUpdateView.as_view(), name='prom_update'),
    path('<uuid:pk>/elimina/', views.PromDeleteView.as_view(), name='prom_delete'),
    path('<uuid:pk>/budget/', views.prom_budget, name='prom_budget'),
    path('<uuid:pk>/votazione/stato/', views.prom_votazione_stato, name='prom_votazione_stato'),

    # Preventivi
    path('<uuid:pk>/preventivi/', views.prom_preventivi, name='prom_preventivi'),
    path('<uuid:prom_pk>/preventivi/nuovo/', views.PreventivoCreateView.as_view(), name='preventivo_create'),
    path('preventivi/<uuid:pk>/modifica/', views.PreventivoUpdateView.as_view(), name='preventivo_update'),
    path('preventivi/<uuid:pk>/elimina/', views.PreventivoDeleteView.as_view(), name='preventivo_delete'),
    path('preventivi/<uuid:pk>/seleziona/', views.preventivo_seleziona, name='preventivo_seleziona'),

    # Pubblico
    path('<uuid:pk>/vota/', views.prom_votazione, name='prom_votazione'),
    path('<uuid:pk>/qrcode/', views.prom_qr_code, name='prom_qr_code'),
]
