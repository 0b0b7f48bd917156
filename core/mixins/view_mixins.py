"""
View Mixins del Portale Comitato

Mixins riutilizzabili per Class-Based Views.
"""

from django.contrib import messages
from django.contrib.auth.mixins import (
    LoginRequiredMixin,
    PermissionRequiredMixin as DjangoPermissionMixin,
)
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.http import JsonResponse
from django.urls import reverse


# ============================================================================
# PERMISSION MIXINS
# ============================================================================


class PermissionRequiredMixin(DjangoPermissionMixin):
    """
    PermissionRequiredMixin che risponde 403 agli utenti autenticati
    invece di rimandarli al login.

    Usage:
        class SpesaListView(PermissionRequiredMixin, ListView):
            permission_required = 'spese.view_spesa'
    """

    def handle_no_permission(self):
        if self.raise_exception or self.request.user.is_authenticated:
            raise PermissionDenied(
                f"Non hai i permessi necessari per accedere a questa risorsa. "
                f"Permessi richiesti: {self.get_permission_required()}"
            )
        return super().handle_no_permission()


class PortalAdminRequiredMixin(LoginRequiredMixin):
    """
    Limita la view agli amministratori del portale (ruolo admin o superuser).
    """

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        if not getattr(request.user, "is_portal_admin", False):
            raise PermissionDenied("Solo gli amministratori del portale possono accedere")
        return super().dispatch(request, *args, **kwargs)


# ============================================================================
# JSON MIXINS
# ============================================================================


class JSONResponseMixin:
    """
    Mixin per restituire risposte JSON nel formato {success, data | error}.

    Usage:
        class MiaView(JSONResponseMixin, View):
            def get(self, request):
                return self.render_to_json_response({'data': [...]})
    """

    def render_to_json_response(self, context, **response_kwargs):
        payload = {"success": True}
        payload.update(context)
        return JsonResponse(payload, **response_kwargs)

    def render_to_json_error(self, error_message, status=400, details=None):
        payload = {"success": False, "error": error_message}
        if details:
            payload["details"] = details
        return JsonResponse(payload, status=status)


# ============================================================================
# FORM MIXINS
# ============================================================================


class FormValidMessageMixin:
    """
    Aggiunge un success message dopo form valid.

    Usage:
        class EventoCreateView(FormValidMessageMixin, CreateView):
            success_message = "Evento creato con successo!"
    """

    success_message = ""

    def form_valid(self, form):
        response = super().form_valid(form)
        if self.success_message:
            messages.success(self.request, self.success_message)
        return response


class FormInvalidMessageMixin:
    """
    Aggiunge un error message dopo form invalid.
    """

    error_message = "Errore nel salvataggio. Controlla i campi."

    def form_invalid(self, form):
        messages.error(self.request, self.error_message)
        return super().form_invalid(form)


class SetCreatedByMixin:
    """
    Imposta created_by (in creazione) e updated_by sul form.instance.
    """

    def form_valid(self, form):
        if self.request.user.is_authenticated:
            if form.instance._state.adding and hasattr(form.instance, "created_by"):
                form.instance.created_by = self.request.user
            if hasattr(form.instance, "updated_by"):
                form.instance.updated_by = self.request.user
        return super().form_valid(form)


class DraftAutosaveMixin:
    """
    Autosave bozze per i form di creazione/modifica.

    - get_initial: con ?bozza=ripristina carica i dati salvati in sessione
    - context: 'bozza' (DraftStore) e 'draft_api_url' per lo script di autosave
    - form_valid: cancella la bozza dopo il salvataggio

    Usage:
        class ProtocolloCreateView(DraftAutosaveMixin, CreateView):
            draft_tipo = 'protocol'
    """

    draft_tipo = None

    def get_draft_store(self):
        from core.drafts import DraftStore

        oggetto = getattr(self, "object", None)
        return DraftStore(self.request.session, self.draft_tipo, entita_id=getattr(oggetto, "pk", None))

    def get_initial(self):
        initial = super().get_initial()
        if self.request.GET.get("bozza") == "ripristina":
            dati = self.get_draft_store().restore()
            if dati:
                initial.update(dati)
        return initial

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        store = self.get_draft_store()
        context["bozza"] = store
        if store.entita_id:
            context["draft_api_url"] = reverse("core_api:draft_edit", args=[self.draft_tipo, store.entita_id])
        else:
            context["draft_api_url"] = reverse("core_api:draft", args=[self.draft_tipo])
        return context

    def form_valid(self, form):
        store = self.get_draft_store()
        response = super().form_valid(form)
        store.clear()
        return response


# ============================================================================
# PAGINATION MIXINS
# ============================================================================


class CustomPaginationMixin:
    """
    Pagination con page size variabile da querystring (?page_size=50).
    """

    default_page_size = 20
    max_page_size = 100
    page_size_query_param = "page_size"

    def get_paginate_by(self, queryset):
        page_size = self.request.GET.get(self.page_size_query_param)

        if page_size:
            try:
                return min(int(page_size), self.max_page_size)
            except ValueError:
                pass

        return self.default_page_size


# ============================================================================
# FILTER MIXINS
# ============================================================================


class FilterMixin:
    """
    Filtra il queryset dai GET parameters.

    Usage:
        class SpesaListView(FilterMixin, ListView):
            filter_fields = {'type': 'tipo', 'category': 'categoria'}

        # URL: ?type=expense&category=events
    """

    filter_fields = {}

    def get_queryset(self):
        queryset = super().get_queryset()

        for param, field in self.filter_fields.items():
            value = self.request.GET.get(param)
            if value and value != "all":
                queryset = queryset.filter(**{field: value})

        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["filtri_attivi"] = {
            param: self.request.GET.get(param, "") for param in self.filter_fields
        }
        return context


class SearchMixin:
    """
    Ricerca testuale (?q=...) sui search_fields.
    """

    search_fields = []
    search_query_param = "q"

    def get_queryset(self):
        queryset = super().get_queryset()
        query = self.request.GET.get(self.search_query_param, "").strip()

        if query and self.search_fields:
            q_objects = Q()
            for field in self.search_fields:
                q_objects |= Q(**{f"{field}__icontains": query})
            queryset = queryset.filter(q_objects)

        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["search_query"] = self.request.GET.get(self.search_query_param, "")
        return context


# ============================================================================
# BREADCRUMB MIXIN
# ============================================================================


class BreadcrumbMixin:
    """
    Breadcrumb navigation.

    Usage:
        class PromDetailView(BreadcrumbMixin, DetailView):
            breadcrumbs = [
                ('Dashboard', reverse_lazy('dashboard')),
                ('Prom', reverse_lazy('prom:dashboard')),
                ('Dettaglio', None),
            ]
    """

    breadcrumbs = []

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["breadcrumbs"] = self.get_breadcrumbs()
        return context

    def get_breadcrumbs(self):
        return self.breadcrumbs
