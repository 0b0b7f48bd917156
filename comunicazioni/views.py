"""
Views per app comunicazioni.

STRUTTURA:
- Messaggi urgenti: banner pubblico, editor admin con testi di condivisione
- Impostazioni del portale (admin)
- Gruppi WhatsApp per classe: pagina pubblica e CRUD admin
- API JSON: /api/urgent-messages/, /api/settings/, /api/groups/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse_lazy
from django.views.decorators.http import require_http_methods
from django.views.generic import CreateView, DeleteView, ListView, UpdateView

from core.api import (
    ApiError,
    api_view,
    dati_parziali,
    form_errors,
    is_portal_admin,
    json_success,
    parse_json_body,
    require_portal_admin,
)
from core.mixins.view_mixins import (
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PortalAdminRequiredMixin,
)

from .forms import GruppoClasseForm, ImpostazioniForm, MessaggioUrgenteFormSet
from .models import GruppoClasse, ImpostazioniApp, MessaggioUrgente
from .services import condivisione_gruppi, condivisione_messaggio, salva_messaggi

logger = logging.getLogger(__name__)


# ============================================================================
# MESSAGGI URGENTI
# ============================================================================

def messaggi_attivi(request):
    """Banner pubblico con i messaggi urgenti di oggi."""
    impostazioni = ImpostazioniApp.carica()
    messaggi_oggi = MessaggioUrgente.objects.attivi_oggi() if impostazioni.banner_attivo else []
    return render(request, 'comunicazioni/messaggi_attivi.html', {
        'messaggi_urgenti': [
            (messaggio, condivisione_messaggio(messaggio)) for messaggio in messaggi_oggi
        ],
        'impostazioni': impostazioni,
    })


@login_required
@require_http_methods(["GET", "POST"])
def messaggi_editor(request):
    """
    Editor dei banner: tutti i messaggi in un unico formset.

    Le righe spuntate come da eliminare vengono cancellate davvero.
    """
    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono modificare i messaggi urgenti")
        return redirect('comunicazioni:messaggi_attivi')

    queryset = MessaggioUrgente.objects.filter(is_active=True).order_by('-created_at')

    if request.method == 'POST':
        formset = MessaggioUrgenteFormSet(request.POST, queryset=queryset)
        if formset.is_valid():
            with transaction.atomic():
                salvati = formset.save(commit=False)
                for messaggio in salvati:
                    if messaggio._state.adding:
                        messaggio.created_by = request.user
                    messaggio.updated_by = request.user
                    messaggio.save()
                for messaggio in formset.deleted_objects:
                    messaggio.delete()
            logger.info(
                f"Messaggi urgenti aggiornati da {request.user}: "
                f"{len(salvati)} salvati, {len(formset.deleted_objects)} eliminati"
            )
            messages.success(request, "Messaggi urgenti salvati")
            return redirect('comunicazioni:messaggi_editor')
        messages.error(request, "Correggi gli errori evidenziati")
    else:
        formset = MessaggioUrgenteFormSet(queryset=queryset)

    return render(request, 'comunicazioni/messaggi_editor.html', {
        'formset': formset,
        'condivisioni': [
            (form.instance, condivisione_messaggio(form.instance))
            for form in formset.forms if not form.instance._state.adding
        ],
    })


# ============================================================================
# IMPOSTAZIONI
# ============================================================================

@login_required
@require_http_methods(["GET", "POST"])
def impostazioni(request):
    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono modificare le impostazioni")
        return redirect('dashboard')

    istanza = ImpostazioniApp.carica()
    if request.method == 'POST':
        form = ImpostazioniForm(request.POST, instance=istanza)
        if form.is_valid():
            form.save()
            logger.info(f"Impostazioni aggiornate da {request.user}")
            messages.success(request, "Impostazioni salvate")
            return redirect('comunicazioni:impostazioni')
    else:
        form = ImpostazioniForm(instance=istanza)

    return render(request, 'comunicazioni/impostazioni.html', {
        'form': form,
        'form_config': {'title': 'Impostazioni del portale'},
    })


# ============================================================================
# GRUPPI CLASSE
# ============================================================================

def gruppi_classe(request):
    """Pagina pubblica con i link ai gruppi WhatsApp."""
    gruppi = list(GruppoClasse.objects.all())
    return render(request, 'comunicazioni/gruppi_classe.html', {
        'gruppi': gruppi,
        'condivisione': condivisione_gruppi(gruppi),
    })


class GruppoClasseListView(PortalAdminRequiredMixin, ListView):
    model = GruppoClasse
    template_name = 'comunicazioni/gruppo_list.html'
    context_object_name = 'gruppi'


class GruppoClasseCreateView(PortalAdminRequiredMixin, FormValidMessageMixin, FormInvalidMessageMixin, CreateView):
    model = GruppoClasse
    form_class = GruppoClasseForm
    template_name = 'comunicazioni/gruppo_form.html'
    success_url = reverse_lazy('comunicazioni:gruppo_list')
    success_message = "Gruppo creato"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuovo gruppo classe'}
        return context


class GruppoClasseUpdateView(PortalAdminRequiredMixin, FormValidMessageMixin, FormInvalidMessageMixin, UpdateView):
    model = GruppoClasse
    form_class = GruppoClasseForm
    template_name = 'comunicazioni/gruppo_form.html'
    success_url = reverse_lazy('comunicazioni:gruppo_list')
    success_message = "Gruppo aggiornato"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica gruppo {self.object.classe}'}
        return context


class GruppoClasseDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = GruppoClasse
    template_name = 'comunicazioni/gruppo_confirm_delete.html'
    success_url = reverse_lazy('comunicazioni:gruppo_list')

    def form_valid(self, form):
        self.object.delete()
        messages.success(self.request, f"Gruppo {self.object.classe} eliminato.")
        return redirect(self.get_success_url())


# ============================================================================
# API
# ============================================================================

@api_view(["GET"])
def messaggi_api(request):
    """
    GET /api/urgent-messages/ -> messaggi attivi oggi
    GET /api/urgent-messages/?all=true -> tutti (solo admin)
    """
    if request.GET.get('all') == 'true':
        require_portal_admin(request)
        qs = MessaggioUrgente.objects.filter(is_active=True).order_by('-created_at')
    else:
        qs = MessaggioUrgente.objects.attivi_oggi()

    data = [m.to_dict() for m in qs]
    response = json_success(data, count=len(data))
    response['Cache-Control'] = 'no-store'
    return response


@api_view(["POST"])
def messaggi_salva_api(request):
    """POST /api/urgent-messages/save/ {messages: [...]} (solo admin)"""
    require_portal_admin(request)
    body = parse_json_body(request)
    risultato = salva_messaggi(body.get('messages'), user=request.user)
    return json_success(risultato, count=len(body['messages']))


@api_view(["GET"])
def messaggio_condivisione_api(request, pk):
    messaggio = get_object_or_404(MessaggioUrgente, pk=pk, is_active=True)
    if not messaggio.attivo and not is_portal_admin(request):
        raise ApiError("Messaggio non trovato", status=404)
    return json_success({
        locale: dati.as_dict() for locale, dati in condivisione_messaggio(messaggio).items()
    })


@api_view(["GET", "PUT"])
def impostazioni_api(request):
    istanza = ImpostazioniApp.carica()

    if request.method == 'PUT':
        require_portal_admin(request)
        form = ImpostazioniForm(dati_parziali(istanza, ImpostazioniForm, parse_json_body(request)), instance=istanza)
        if not form.is_valid():
            form_errors(form)
        istanza = form.save()
        logger.info(f"Impostazioni aggiornate via API da {request.user}")

    return json_success(istanza.to_dict())


@api_view(["GET", "POST"])
def gruppi_api(request):
    if request.method == 'POST':
        require_portal_admin(request)
        form = GruppoClasseForm(dati_parziali(GruppoClasse(), GruppoClasseForm, parse_json_body(request)))
        if not form.is_valid():
            form_errors(form)
        gruppo = form.save()
        return json_success(gruppo.to_dict(), status=201)

    gruppi = list(GruppoClasse.objects.all())
    return json_success(
        [g.to_dict() for g in gruppi],
        count=len(gruppi),
        share={locale: dati.as_dict() for locale, dati in condivisione_gruppi(gruppi).items()},
    )


@api_view(["PUT", "DELETE"])
def gruppo_api_detail(request, pk):
    require_portal_admin(request)
    gruppo = get_object_or_404(GruppoClasse, pk=pk)

    if request.method == 'DELETE':
        gruppo.delete()
        return json_success()

    form = GruppoClasseForm(dati_parziali(gruppo, GruppoClasseForm, parse_json_body(request)), instance=gruppo)
    if not form.is_valid():
        form_errors(form)
    return json_success(form.save().to_dict())
