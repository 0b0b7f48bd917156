"""
Views per app sondaggi.

STRUTTURA:
- Sondaggio competenze pubblico (pagina e JSON)
- Lista admin con filtri, statistiche ed export CSV/Excel
- API JSON: /api/surveys/skills/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse, reverse_lazy
from django.views.decorators.http import require_http_methods
from django.views.generic import DeleteView, DetailView, ListView

from core.api import api_view, dati_parziali, form_errors, json_success, parse_json_body, require_portal_admin
from core.mixins.view_mixins import BreadcrumbMixin, CustomPaginationMixin, PortalAdminRequiredMixin

from .forms import RispostaCompetenzeForm
from .models import COMPETENZE_CHOICES, RispostaCompetenze
from .services import (
    competenze_ordinate,
    export_csv,
    export_excel,
    filtra_risposte,
    statistiche_risposte,
)

logger = logging.getLogger(__name__)

PARAMETRI_FILTRO = ('skill', 'contact_preference', 'search', 'date_from', 'date_to')


def _salva_risposta(form, request):
    risposta = form.save(commit=False)
    if request.user.is_authenticated:
        risposta.created_by = request.user
    risposta.save()
    logger.info(f"Nuova risposta sondaggio competenze: {risposta.pk} ({len(risposta.competenze)} competenze)")
    return risposta


@require_http_methods(["GET", "POST"])
def sondaggio_competenze(request):
    """Sondaggio pubblico, senza login."""
    if request.method == 'POST':
        form = RispostaCompetenzeForm(request.POST)
        if form.is_valid():
            _salva_risposta(form, request)
            messages.success(request, "Grazie! Le tue risposte sono state salvate")
            return redirect('sondaggi:sondaggio_competenze')
    else:
        form = RispostaCompetenzeForm(initial={'lingua_invio': request.GET.get('lang', 'he')})

    return render(request, 'sondaggi/sondaggio_competenze.html', {'form': form})


class RispostaListView(PortalAdminRequiredMixin, CustomPaginationMixin, ListView):
    model = RispostaCompetenze
    template_name = 'sondaggi/risposta_list.html'
    context_object_name = 'risposte'

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True)
        try:
            return filtra_risposte(qs, self.request.GET)
        except ValidationError as e:
            messages.error(self.request, ' '.join(e.messages))
            return qs.order_by('-created_at')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        stats = statistiche_risposte(self.object_list)
        context['statistiche'] = stats
        context['competenze_ordinate'] = competenze_ordinate(stats)
        context['competenza_choices'] = COMPETENZE_CHOICES
        context['contatto_choices'] = RispostaCompetenze.CONTATTO_CHOICES
        context['filtri_attivi'] = {param: self.request.GET.get(param, '') for param in PARAMETRI_FILTRO}
        return context


class RispostaDetailView(PortalAdminRequiredMixin, BreadcrumbMixin, DetailView):
    model = RispostaCompetenze
    template_name = 'sondaggi/risposta_detail.html'
    context_object_name = 'risposta'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_breadcrumbs(self):
        return [
            ('Dashboard', reverse('dashboard')),
            ('Sondaggio competenze', reverse('sondaggi:risposta_list')),
            (str(self.object), None),
        ]


class RispostaDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = RispostaCompetenze
    template_name = 'sondaggi/risposta_confirm_delete.html'
    success_url = reverse_lazy('sondaggi:risposta_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, "Risposta eliminata.")
        return redirect(self.get_success_url())


@login_required
def risposte_export(request, formato):
    """
    Export delle risposte (filtri della lista applicati).

    formato: 'csv' o 'excel'
    """
    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono esportare le risposte")
        return redirect('dashboard')

    try:
        qs = filtra_risposte(RispostaCompetenze.objects.filter(is_active=True), request.GET)
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
        return redirect('sondaggi:risposta_list')

    logger.info(f"Export sondaggio competenze ({formato}) da {request.user}")

    if formato == 'excel':
        return export_excel(qs)
    return export_csv(qs)


# ============================================================================
# API
# ============================================================================

@api_view(["GET", "POST"])
def risposte_api(request):
    """
    GET  /api/surveys/skills/?skill=&contact_preference=&search=&date_from=&date_to= (solo admin)
    POST /api/surveys/skills/ (pubblico)
    """
    if request.method == 'POST':
        form = RispostaCompetenzeForm(
            dati_parziali(RispostaCompetenze(), RispostaCompetenzeForm, parse_json_body(request))
        )
        if not form.is_valid():
            form_errors(form)
        risposta = _salva_risposta(form, request)
        return json_success({'id': str(risposta.pk)}, status=201)

    require_portal_admin(request)
    qs = filtra_risposte(RispostaCompetenze.objects.filter(is_active=True), request.GET)
    risposte = list(qs)
    return json_success(
        [r.to_dict() for r in risposte],
        count=len(risposte),
        stats=statistiche_risposte(risposte),
    )


@api_view(["DELETE"])
def risposta_api_detail(request, pk):
    require_portal_admin(request)
    risposta = get_object_or_404(RispostaCompetenze, pk=pk, is_active=True)
    risposta.soft_delete(user=request.user)
    return json_success()


@api_view(["GET"])
def risposte_export_api(request):
    require_portal_admin(request)
    return export_csv(filtra_risposte(RispostaCompetenze.objects.filter(is_active=True), request.GET))
