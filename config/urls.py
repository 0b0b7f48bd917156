"""
URL configuration per il Portale Comitato.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from users.views import dashboard_view

urlpatterns = [
    # Root - Login
    path("", include("users.urls")),
    # Dashboard centrale
    path("dashboard/", dashboard_view, name="dashboard"),
    # Admin
    path("admin/", admin.site.urls),
    path("select2/", include("django_select2.urls")),
    # Core (ricerca, bozze, QR)
    path("core/", include("core.urls")),
    # Pagine
    path("events/", include("eventi.urls")),
    path("expenses/", include("spese.urls")),
    path("prom/", include("prom.urls")),
    path("protocols/", include("protocolli.urls")),
    path("tasks/", include("attivita.urls")),
    path("ideas/", include("idee.urls")),
    path("surveys/", include("sondaggi.urls")),
    path("communications/", include("comunicazioni.urls")),
    # API JSON
    path("api/drafts/", include("core.api_urls")),
    path("api/events/", include("eventi.api_urls")),
    path("api/grocery/", include("eventi.api_grocery_urls")),
    path("api/expenses/", include("spese.api_urls")),
    path("api/prom/", include("prom.api_urls")),
    path("api/protocols/", include("protocolli.api_urls")),
    path("api/", include("attivita.api_urls")),
    path("api/", include("idee.api_urls")),
    path("api/surveys/", include("sondaggi.api_urls")),
    path("api/", include("comunicazioni.api_urls")),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
