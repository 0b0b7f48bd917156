"""
Views per app spese.

STRUTTURA:
- Libro cassa con filtri, totali e ripartizione per categoria
- CRUD movimenti, approvazione (solo admin)
- Export CSV / Excel
- API JSON /api/expenses/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404, redirect
from django.urls import reverse_lazy
from django.views.decorators.http import require_POST
from django.views.generic import CreateView, DeleteView, ListView, UpdateView

from core.api import (
    ApiError,
    api_view,
    dati_parziali,
    form_errors,
    json_success,
    parse_json_body,
    require_login,
    require_portal_admin,
    to_number,
)
from core.mixins.view_mixins import (
    CustomPaginationMixin,
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PermissionRequiredMixin,
    PortalAdminRequiredMixin,
    SearchMixin,
    SetCreatedByMixin,
)

from .forms import SpesaForm
from .models import Spesa
from .services import export_csv, export_excel, filtra_spese

logger = logging.getLogger(__name__)


# ============================================================================
# LIBRO CASSA
# ============================================================================

class SpesaListView(PermissionRequiredMixin, SearchMixin, CustomPaginationMixin, ListView):
    """
    Libro cassa: filtri, totali del periodo filtrato e ripartizione per categoria.
    """
    model = Spesa
    template_name = 'spese/spesa_list.html'
    context_object_name = 'spese'
    permission_required = 'spese.view_spesa'
    search_fields = ['titolo', 'descrizione', 'fornitore']
    default_page_size = 50

    def get_queryset(self):
        qs = super().get_queryset().attive().select_related('evento', 'approvata_da')
        try:
            return filtra_spese(qs, self.request.GET)
        except ValidationError as e:
            messages.error(self.request, ' '.join(e.messages))
            return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        qs = self.object_list
        context['totali'] = Spesa.totali(qs)
        context['per_categoria'] = Spesa.per_categoria(qs)
        context['tipo_choices'] = Spesa.TIPO_CHOICES
        context['categoria_choices'] = Spesa.CATEGORIA_CHOICES
        context['filtri'] = self.request.GET.dict()
        context['querystring'] = self.request.GET.urlencode()
        return context


class SpesaCreateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = Spesa
    form_class = SpesaForm
    template_name = 'spese/spesa_form.html'
    permission_required = 'spese.add_spesa'
    success_message = "Movimento registrato"
    success_url = reverse_lazy('spese:spesa_list')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuovo movimento'}
        return context


class SpesaUpdateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = Spesa
    form_class = SpesaForm
    template_name = 'spese/spesa_form.html'
    permission_required = 'spese.change_spesa'
    success_message = "Movimento aggiornato"
    success_url = reverse_lazy('spese:spesa_list')

    def get_queryset(self):
        return Spesa.objects.attive()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica: {self.object.titolo}'}
        return context


class SpesaDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = Spesa
    template_name = 'spese/spesa_confirm_delete.html'
    success_url = reverse_lazy('spese:spesa_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Movimento '{self.object.titolo}' eliminato.")
        return redirect(self.get_success_url())


@login_required
@require_POST
def spesa_approva(request, pk):
    """Approva o revoca (campo POST 'revoca') l'approvazione. Solo admin."""
    spesa = get_object_or_404(Spesa.objects.attive(), pk=pk)

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono approvare le spese")
        return redirect('spese:spesa_list')

    try:
        if request.POST.get('revoca'):
            spesa.revoca_approvazione(request.user)
            messages.info(request, f"Approvazione di '{spesa.titolo}' revocata")
        else:
            spesa.approva(request.user)
            messages.success(request, f"Spesa '{spesa.titolo}' approvata")
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))

    return redirect('spese:spesa_list')


# ============================================================================
# EXPORT
# ============================================================================

@login_required
def spese_export(request, formato):
    """
    Export del libro cassa filtrato (?month=YYYY-MM e gli altri filtri).

    formato: 'csv' o 'excel'
    """
    if not request.user.has_perm('spese.view_spesa'):
        messages.error(request, "Non hai i permessi per esportare le spese")
        return redirect('dashboard')

    try:
        qs = filtra_spese(Spesa.objects.attive(), request.GET)
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
        return redirect('spese:spesa_list')

    mese = request.GET.get('month')
    logger.info(f"Export spese ({formato}, mese={mese or 'all'}) da {request.user}")

    if formato == 'excel':
        return export_excel(qs, mese)
    return export_csv(qs, mese)


# ============================================================================
# API
# ============================================================================

def _totali_json(qs):
    return {chiave: to_number(valore) for chiave, valore in Spesa.totali(qs).items()}


@api_view(["GET", "POST"])
def spese_api(request):
    """
    GET  /api/expenses/?type=&category=&approved=&start_date=&end_date=&event_id=&month=&limit=
         -> {data, count, totals}
    POST /api/expenses/
    """
    require_login(request)

    if request.method == 'POST':
        body = parse_json_body(request)
        form = SpesaForm(dati_parziali(Spesa(), SpesaForm, body))
        if not form.is_valid():
            form_errors(form)
        spesa = form.save(commit=False)
        spesa.created_by = request.user
        spesa.updated_by = request.user
        spesa.save()
        if body.get('approvata') and request.user.is_portal_admin:
            spesa.approva(request.user)
        logger.info(f"Spesa creata via API: {spesa.titolo} ({spesa.pk})")
        return json_success(spesa.to_dict(), status=201)

    qs = filtra_spese(Spesa.objects.attive().select_related('approvata_da'), request.GET)

    try:
        limite = min(int(request.GET.get('limit', 100)), 200)
    except ValueError:
        raise ApiError("Parametro limit non valido")

    righe = qs.order_by('-data_spesa', '-created_at')[:limite]
    data = [spesa.to_dict() for spesa in righe]
    return json_success(data, count=len(data), totals=_totali_json(qs))


@api_view(["GET", "PUT", "DELETE"])
def spesa_api_detail(request, pk):
    require_login(request)
    spesa = get_object_or_404(Spesa.objects.attive(), pk=pk)

    if request.method == 'GET':
        return json_success(spesa.to_dict())

    if request.method == 'DELETE':
        require_portal_admin(request)
        spesa.soft_delete(user=request.user)
        return json_success()

    form = SpesaForm(dati_parziali(spesa, SpesaForm, parse_json_body(request)), instance=spesa)
    if not form.is_valid():
        form_errors(form)
    spesa = form.save(commit=False)
    spesa.updated_by = request.user
    spesa.save()
    return json_success(spesa.to_dict())


@api_view(["POST", "DELETE"])
def spesa_approva_api(request, pk):
    """POST approva, DELETE revoca. Solo admin."""
    require_portal_admin(request)
    spesa = get_object_or_404(Spesa.objects.attive(), pk=pk)

    if request.method == 'DELETE':
        spesa.revoca_approvazione(request.user)
    else:
        spesa.approva(request.user)
    return json_success(spesa.to_dict())


@api_view(["GET"])
def spese_categorie_api(request):
    """Ripartizione per categoria con gli stessi filtri della lista."""
    require_login(request)
    qs = filtra_spese(Spesa.objects.attive(), request.GET)
    data = [
        {chiave: to_number(valore) for chiave, valore in riga.items()}
        for riga in Spesa.per_categoria(qs)
    ]
    return json_success(data, count=len(data), totals=_totali_json(qs))
