"""
Views per app protocolli.

STRUTTURA:
- Elenco con filtri (tipo, approvato, anno) e ricerca
- Dettaglio con testi di condivisione, PDF, approvazione
- Editor con autosave bozze
- Creazione attività dalle azioni del verbale
- API JSON: /api/protocols/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404, redirect
from django.urls import reverse, reverse_lazy
from django.views.decorators.http import require_POST
from django.views.generic import CreateView, DeleteView, DetailView, ListView, UpdateView

from core.api import (
    ApiError,
    api_view,
    dati_parziali,
    form_errors,
    is_portal_admin,
    json_success,
    parse_json_body,
    require_login,
    require_portal_admin,
)
from core.mixins.view_mixins import (
    BreadcrumbMixin,
    CustomPaginationMixin,
    DraftAutosaveMixin,
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PermissionRequiredMixin,
    PortalAdminRequiredMixin,
    SearchMixin,
    SetCreatedByMixin,
)
from core.pdf_generator import pdf_response
from core.share_formatters import formatta_protocollo

from .forms import ProtocolloForm
from .models import Protocollo
from .services import crea_attivita_da_azioni, filtra_protocolli, genera_pdf_protocollo, nome_file_pdf

logger = logging.getLogger(__name__)


class ProtocolloListView(PermissionRequiredMixin, SearchMixin, CustomPaginationMixin, ListView):
    model = Protocollo
    template_name = 'protocolli/protocollo_list.html'
    context_object_name = 'protocolli'
    permission_required = 'protocolli.view_protocollo'
    search_fields = ['codice', 'numero_protocollo', 'titolo', 'decisioni']

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True)
        return filtra_protocolli(qs, self.request.GET)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['tipo_choices'] = Protocollo.TIPO_CHOICES
        context['anni'] = [
            d.year for d in Protocollo.objects.filter(is_active=True).dates('data_protocollo', 'year', order='DESC')
        ]
        context['filtri_attivi'] = {
            param: self.request.GET.get(param, '') for param in ('type', 'approved', 'year')
        }
        return context


class ProtocolloDetailView(PermissionRequiredMixin, BreadcrumbMixin, DetailView):
    model = Protocollo
    template_name = 'protocolli/protocollo_detail.html'
    context_object_name = 'protocollo'
    permission_required = 'protocolli.view_protocollo'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_breadcrumbs(self):
        return [
            ('Dashboard', reverse('dashboard')),
            ('Protocolli', reverse('protocolli:protocollo_list')),
            (self.object.codice, None),
        ]

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['condivisione'] = {
            locale: formatta_protocollo(self.object, locale) for locale in ('he', 'ru')
        }
        context['attivita_collegate'] = self.object.attivita.filter(is_active=True)
        return context


# ============================================================================
# EDITOR
# ============================================================================

class ProtocolloCreateView(
    PermissionRequiredMixin,
    DraftAutosaveMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = Protocollo
    form_class = ProtocolloForm
    template_name = 'protocolli/protocollo_form.html'
    permission_required = 'protocolli.add_protocollo'
    draft_tipo = 'protocol'
    success_message = "Protocollo salvato"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuovo protocollo'}
        return context

    def form_valid(self, form):
        response = super().form_valid(form)
        logger.info(f"Protocollo creato: {self.object.codice} da {self.request.user}")
        return response

    def get_success_url(self):
        return self.object.get_absolute_url()


class ProtocolloUpdateView(
    PermissionRequiredMixin,
    DraftAutosaveMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = Protocollo
    form_class = ProtocolloForm
    template_name = 'protocolli/protocollo_form.html'
    permission_required = 'protocolli.change_protocollo'
    draft_tipo = 'protocol'
    success_message = "Protocollo aggiornato"

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica: {self.object.titolo}', 'subtitle': self.object.codice}
        return context

    def get_success_url(self):
        return self.object.get_absolute_url()


class ProtocolloDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = Protocollo
    template_name = 'protocolli/protocollo_confirm_delete.html'
    success_url = reverse_lazy('protocolli:protocollo_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Protocollo '{self.object.titolo}' eliminato.")
        return redirect(self.get_success_url())


# ============================================================================
# AZIONI
# ============================================================================

@login_required
@require_POST
def protocollo_approva(request, pk):
    protocollo = get_object_or_404(Protocollo, pk=pk, is_active=True)

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono approvare un protocollo")
        return redirect(protocollo.get_absolute_url())

    try:
        protocollo.approva(request.user)
        messages.success(request, "Protocollo approvato")
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))

    return redirect(protocollo.get_absolute_url())


@login_required
def protocollo_pdf(request, pk):
    protocollo = get_object_or_404(Protocollo, pk=pk, is_active=True)
    logger.info(f"PDF protocollo {protocollo.codice} richiesto da {request.user}")
    return pdf_response(genera_pdf_protocollo(protocollo), nome_file_pdf(protocollo))


@login_required
@require_POST
def protocollo_crea_attivita(request, pk):
    protocollo = get_object_or_404(Protocollo, pk=pk, is_active=True)

    if not request.user.has_perm('attivita.add_attivita'):
        messages.error(request, "Non hai i permessi per creare attività")
        return redirect(protocollo.get_absolute_url())

    create = crea_attivita_da_azioni(protocollo, user=request.user)
    if create:
        messages.success(request, f"{len(create)} attività create dalle azioni del protocollo")
    else:
        messages.info(request, "Nessuna nuova attività da creare")
    return redirect(protocollo.get_absolute_url())


# ============================================================================
# API
# ============================================================================

def _protocollo_visibile(request, pk):
    protocollo = get_object_or_404(Protocollo, pk=pk, is_active=True)
    if not protocollo.pubblico and not request.user.is_authenticated:
        raise ApiError("Protocollo non trovato", status=404)
    return protocollo


@api_view(["GET", "POST"])
def protocolli_api(request):
    """
    GET  /api/protocols/?type=&approved=&year=&limit=
    POST /api/protocols/ (solo admin)
    """
    if request.method == 'POST':
        require_portal_admin(request)
        form = ProtocolloForm(dati_parziali(Protocollo(), ProtocolloForm, parse_json_body(request)))
        if not form.is_valid():
            form_errors(form)
        protocollo = form.save(commit=False)
        protocollo.created_by = request.user
        protocollo.updated_by = request.user
        protocollo.save()
        logger.info(f"Protocollo creato via API: {protocollo.codice}")
        return json_success(protocollo.to_dict(), status=201)

    try:
        limite = min(int(request.GET.get('limit', 50)), 100)
    except ValueError:
        raise ApiError("Parametro limit non valido")

    qs = filtra_protocolli(
        Protocollo.objects.filter(is_active=True),
        request.GET,
        solo_pubblici=not is_portal_admin(request),
    )
    data = [p.to_dict() for p in qs[:limite]]
    return json_success(data, count=len(data))


@api_view(["GET", "PUT", "DELETE"])
def protocollo_api_detail(request, pk):
    protocollo = _protocollo_visibile(request, pk)

    if request.method == 'GET':
        return json_success(protocollo.to_dict())

    require_portal_admin(request)

    if request.method == 'DELETE':
        protocollo.soft_delete(user=request.user)
        logger.info(f"Protocollo {protocollo.codice} eliminato via API da {request.user}")
        return json_success()

    form = ProtocolloForm(
        dati_parziali(protocollo, ProtocolloForm, parse_json_body(request)),
        instance=protocollo,
    )
    if not form.is_valid():
        form_errors(form)
    protocollo = form.save(commit=False)
    protocollo.updated_by = request.user
    protocollo.save()
    return json_success(protocollo.to_dict())


@api_view(["POST"])
def protocollo_approva_api(request, pk):
    require_portal_admin(request)
    protocollo = get_object_or_404(Protocollo, pk=pk, is_active=True)
    protocollo.approva(request.user)
    return json_success(protocollo.to_dict())


@api_view(["POST"])
def protocollo_attivita_api(request, pk):
    """POST /api/protocols/<id>/tasks/ -> attività create dalle azioni"""
    require_login(request)
    protocollo = get_object_or_404(Protocollo, pk=pk, is_active=True)
    create = crea_attivita_da_azioni(protocollo, user=request.user)
    data = [a.to_dict() for a in create]
    return json_success(data, count=len(data), status=201 if create else 200)
