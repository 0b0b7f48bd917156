"""
Views del core: ricerca globale, QR code on-the-fly e API bozze form.
"""

import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponse
from django.views import View

from .api import ApiError, api_view, json_success, parse_json_body, require_login
from .drafts import DraftStore
from .mixins.view_mixins import JSONResponseMixin
from .qr_code_generator import qr_code_response
from .search import SearchRegistry

logger = logging.getLogger(__name__)


# ============================================================================
# RICERCA GLOBALE
# ============================================================================


class GlobalSearchView(LoginRequiredMixin, JSONResponseMixin, View):
    """
    Ricerca globale in tutti i model registrati nel SearchRegistry.

    GET parameters:
        - q: query di ricerca (minimo 2 caratteri)
    """

    def get(self, request):
        query = request.GET.get("q", "").strip()

        if len(query) < 2:
            return self.render_to_json_error("Query troppo corta (minimo 2 caratteri)")

        results = SearchRegistry.search_all(query, max_results_per_model=5)
        logger.debug(f"Ricerca globale '{query}': {len(results)} categorie")

        return self.render_to_json_response(
            {
                "query": query,
                "results": results,
                "total_categories": len(results),
                "total_results": sum(len(cat["items"]) for cat in results),
            }
        )

# ============================================================================
# QR CODE
# ============================================================================


def serve_qr_code(request):
    """
    QR Code PNG generato on-the-fly.

    Esempio: /core/qrcode/?data=https://beeri.online/he&size=10
    """
    data = request.GET.get("data")
    if not data:
        return HttpResponse("Parametro 'data' mancante", status=400)

    try:
        box_size = int(request.GET.get("size", 10))
        border = int(request.GET.get("border", 4))
    except ValueError:
        return HttpResponse("Parametri size o border non validi", status=400)

    return qr_code_response(data, box_size=box_size, border=border)


# ============================================================================
# API BOZZE (AUTOSAVE)
# ============================================================================


@api_view(["GET", "POST", "DELETE"])
def draft_api(request, tipo, entita_id=None):
    """
    GET: bozza corrente (data = null se assente)
    POST: salva {formData, force}
    DELETE: elimina la bozza
    """
    require_login(request)

    try:
        store = DraftStore(request.session, tipo, entita_id=entita_id)
    except ValueError as e:
        raise ApiError(str(e), status=400)

    if request.method == "GET":
        return json_success(store.get(), has_draft=store.has_draft)

    if request.method == "DELETE":
        store.clear()
        return json_success()

    body = parse_json_body(request)
    form_data = body.get("formData")
    if not isinstance(form_data, dict):
        raise ApiError("formData mancante", status=400)

    saved = store.save(form_data, force=bool(body.get("force")))
    return json_success(
        {"saved": saved, "timestamp": store.draft_timestamp},
    )
