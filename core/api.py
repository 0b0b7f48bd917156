"""
Helpers per gli endpoint JSON sotto /api/.

Tutte le risposte hanno la forma:
    {"success": true, "data": ..., ["count": n]}
    {"success": false, "error": "...", ["details": {...}]}
"""

import json
import logging
from decimal import Decimal
from functools import wraps

from django.core.exceptions import PermissionDenied, ValidationError
from django.forms.models import model_to_dict
from django.http import Http404, JsonResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Errore applicativo con status HTTP esplicito."""

    def __init__(self, message, status=400, details=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


def json_success(data=None, count=None, status=200, **extra):
    payload = {"success": True}
    if data is not None:
        payload["data"] = data
    if count is not None:
        payload["count"] = count
    payload.update(extra)
    return JsonResponse(payload, status=status)


def json_error(error, status=400, details=None):
    payload = {"success": False, "error": error}
    if details:
        payload["details"] = details
    return JsonResponse(payload, status=status)


def parse_json_body(request):
    """
    Decodifica il body JSON della richiesta.

    Raises:
        ValidationError: se il body non è un oggetto JSON valido
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError("Body JSON non valido")
    if not isinstance(data, dict):
        raise ValidationError("Il body deve essere un oggetto JSON")
    return data


def form_errors(form):
    """Solleva ApiError 400 con gli errori del form in details."""
    raise ApiError("Dati non validi", status=400, details=form.errors.get_json_data())


def require_login(request):
    if not request.user.is_authenticated:
        raise ApiError("Autenticazione richiesta", status=401)


def require_portal_admin(request):
    require_login(request)
    if not request.user.is_portal_admin:
        raise ApiError("Solo gli amministratori possono eseguire questa operazione", status=403)


def is_portal_admin(request):
    return request.user.is_authenticated and request.user.is_portal_admin


def to_number(value):
    """Decimal -> float per la serializzazione JSON."""
    if isinstance(value, Decimal):
        return float(value)
    return value


def api_view(methods):
    """
    Decoratore per gli endpoint JSON.

    - Rifiuta i metodi non ammessi (405)
    - ValidationError -> 400, Http404 -> 404, PermissionDenied -> 403
    - Eccezioni inattese -> 500 con log
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if request.method not in methods:
                return json_error("Metodo non consentito", status=405)
            try:
                return view_func(request, *args, **kwargs)
            except ApiError as e:
                return json_error(e.message, status=e.status, details=e.details)
            except ValidationError as e:
                if hasattr(e, "error_dict"):
                    return json_error("Dati non validi", status=400, details=e.message_dict)
                return json_error("; ".join(e.messages), status=400)
            except Http404 as e:
                return json_error(str(e) or "Risorsa non trovata", status=404)
            except PermissionDenied as e:
                return json_error(str(e) or "Permessi insufficienti", status=403)
            except Exception:
                logger.exception(f"Errore inatteso in {view_func.__name__} ({request.method} {request.path})")
                return json_error("Errore interno del server", status=500)

        return _wrapped

    return decorator


def dati_parziali(instance, form_class, body):
    """
    Dati per un ModelForm alimentato da JSON.

    Con un'istanza esistente (PUT/PATCH) i campi assenti nel body mantengono
    il valore attuale; con un'istanza nuova prendono i default del model.
    """
    dati = model_to_dict(instance, fields=form_class._meta.fields)
    dati.update(body)
    return dati
