"""
Views per app prom.

STRUTTURA:
- Dashboard prom, dettaglio con budget, CRUD evento e voci di budget
- Confronto preventivi (filtro categoria, export CSV), selezione vincitore
- Pagina pubblica di votazione con QR code
- API JSON: /api/prom/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse, reverse_lazy
from django.views.decorators.http import require_http_methods, require_POST
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
    to_number,
)
from core.i18n import normalizza_locale
from core.mixins.view_mixins import (
    BreadcrumbMixin,
    FilterMixin,
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PermissionRequiredMixin,
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
)
from core.qr_code_generator import qr_code_response

from .forms import EventoPromForm, PreventivoFornitoreForm, VoceBudgetFormSet, VotoForm
from .models import CATEGORIA_CHOICES, EventoProm, PreventivoFornitore
from .services import (
    aggiorna_voci_budget,
    confronta_preventivi,
    csv_confronto,
    riepilogo_budget,
    sanifica_preventivo,
    seleziona_preventivo,
    statistiche_voti,
)

logger = logging.getLogger(__name__)


def _riepilogo_json(riepilogo):
    return {chiave: to_number(valore) for chiave, valore in riepilogo.items()}


# ============================================================================
# DASHBOARD / DETTAGLIO
# ============================================================================

class PromDashboardView(PermissionRequiredMixin, FilterMixin, ListView):
    """
    Elenco dei prom con il riepilogo budget di ciascuno.
    """
    model = EventoProm
    template_name = 'prom/dashboard.html'
    context_object_name = 'proms'
    permission_required = 'prom.view_eventoprom'
    filter_fields = {'stato': 'stato'}

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['righe'] = [
            {'prom': prom, 'riepilogo': riepilogo_budget(prom)}
            for prom in context['proms']
        ]
        context['stato_choices'] = EventoProm.STATO_CHOICES
        return context


class PromDetailView(PermissionRequiredMixin, BreadcrumbMixin, DetailView):
    model = EventoProm
    template_name = 'prom/prom_detail.html'
    context_object_name = 'prom'
    permission_required = 'prom.view_eventoprom'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_breadcrumbs(self):
        return [
            ('Dashboard', reverse('dashboard')),
            ('Prom', reverse('prom:dashboard')),
            (self.object.titolo, None),
        ]

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        prom = self.object
        context['riepilogo'] = riepilogo_budget(prom)
        context['voci_budget'] = prom.voci_budget.filter(is_active=True)
        context['preventivi_selezionati'] = prom.preventivi.filter(is_active=True, selezionato=True)
        context['numero_preventivi'] = prom.preventivi.filter(is_active=True).count()
        context['statistiche_voti'] = statistiche_voti(prom)
        context['link_votazione'] = self.request.build_absolute_uri(prom.get_voting_url())
        return context


# ============================================================================
# CRUD EVENTO PROM
# ============================================================================

class PromCreateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = EventoProm
    form_class = EventoPromForm
    template_name = 'prom/prom_form.html'
    permission_required = 'prom.add_eventoprom'
    success_message = "Prom creato"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuovo Prom'}
        return context

    def get_success_url(self):
        return self.object.get_absolute_url()


class PromUpdateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = EventoProm
    form_class = EventoPromForm
    template_name = 'prom/prom_form.html'
    permission_required = 'prom.change_eventoprom'
    success_message = "Prom aggiornato"

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica: {self.object.titolo}'}
        return context

    def get_success_url(self):
        return self.object.get_absolute_url()


class PromDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = EventoProm
    template_name = 'prom/prom_confirm_delete.html'
    success_url = reverse_lazy('prom:dashboard')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Prom '{self.object.titolo}' eliminato.")
        return redirect(self.get_success_url())


@login_required
@require_http_methods(["GET", "POST"])
def prom_budget(request, pk):
    """Modifica in blocco delle voci di budget (formset)."""
    prom = get_object_or_404(EventoProm, pk=pk, is_active=True)

    if not request.user.has_perm('prom.change_eventoprom'):
        messages.error(request, "Non hai i permessi per modificare il budget")
        return redirect(prom.get_absolute_url())

    if request.method == 'POST':
        formset = VoceBudgetFormSet(request.POST, instance=prom)
        if formset.is_valid():
            with transaction.atomic():
                voci = formset.save(commit=False)
                for voce in voci:
                    if not voce.pk:
                        voce.created_by = request.user
                    voce.updated_by = request.user
                    voce.save()
                for voce in formset.deleted_objects:
                    voce.delete()
            logger.info(f"Budget prom {prom.pk} aggiornato da {request.user}")
            messages.success(request, "Budget aggiornato")
            return redirect(prom.get_absolute_url())
        messages.error(request, "Errore nel salvataggio del budget. Controlla le categorie e gli importi.")
    else:
        formset = VoceBudgetFormSet(instance=prom, queryset=prom.voci_budget.filter(is_active=True))

    return render(request, 'prom/prom_budget.html', {
        'prom': prom,
        'formset': formset,
        'riepilogo': riepilogo_budget(prom),
    })


@login_required
@require_POST
def prom_votazione_stato(request, pk):
    """Apre o chiude (campo POST 'chiudi') la votazione."""
    prom = get_object_or_404(EventoProm, pk=pk, is_active=True)

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono gestire la votazione")
        return redirect(prom.get_absolute_url())

    try:
        if request.POST.get('chiudi'):
            prom.chiudi_votazione(request.user)
            messages.info(request, "Votazione chiusa")
        else:
            prom.apri_votazione(request.user)
            messages.success(request, "Votazione aperta")
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))

    return redirect(prom.get_absolute_url())


# ============================================================================
# PREVENTIVI
# ============================================================================

@login_required
def prom_preventivi(request, pk):
    """
    Tabella di confronto preventivi.

    GET params: category (codice o 'all'), export=csv, lang (he/ru per il CSV)
    """
    prom = get_object_or_404(EventoProm, pk=pk, is_active=True)

    if not request.user.has_perm('prom.view_preventivofornitore'):
        messages.error(request, "Non hai i permessi per vedere i preventivi")
        return redirect('dashboard')

    categoria = request.GET.get('category', 'all')
    confronto = confronta_preventivi(prom.preventivi.filter(is_active=True), categoria)

    if request.GET.get('export') == 'csv':
        logger.info(f"Export confronto preventivi prom {prom.pk} da {request.user}")
        return csv_confronto(confronto['preventivi'], normalizza_locale(request.GET.get('lang')))

    for p in confronto['preventivi']:
        stats = confronto['statistiche'][p.categoria]
        p.piu_economico = stats['piu_economico_id'] == p.pk
        p.meglio_valutato = stats['meglio_valutato_id'] == p.pk
        p.miglior_rapporto = stats['miglior_rapporto_id'] == p.pk

    etichette = dict(CATEGORIA_CHOICES)
    statistiche = [
        dict(stats, categoria=codice, etichetta=etichette.get(codice, codice))
        for codice, stats in confronto['statistiche'].items()
    ]
    conteggi = {}
    for p in prom.preventivi.filter(is_active=True).values_list('categoria', flat=True):
        conteggi[p] = conteggi.get(p, 0) + 1

    return render(request, 'prom/preventivi_confronto.html', {
        'prom': prom,
        'preventivi': confronto['preventivi'],
        'statistiche': statistiche,
        'statistiche_per_categoria': confronto['statistiche'],
        'categoria': categoria,
        'categorie': [(codice, etichetta, conteggi.get(codice, 0)) for codice, etichetta in CATEGORIA_CHOICES],
    })


class PreventivoCreateView(
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = PreventivoFornitore
    form_class = PreventivoFornitoreForm
    template_name = 'prom/preventivo_form.html'
    success_message = "Preventivo aggiunto"

    def dispatch(self, request, *args, **kwargs):
        self.prom = get_object_or_404(EventoProm, pk=kwargs['prom_pk'], is_active=True)
        return super().dispatch(request, *args, **kwargs)

    def form_valid(self, form):
        form.instance.prom = self.prom
        response = super().form_valid(form)
        if self.object.selezionato:
            seleziona_preventivo(self.object, self.request.user)
        return response

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuovo preventivo', 'subtitle': self.prom.titolo}
        return context

    def get_success_url(self):
        return reverse('prom:prom_preventivi', kwargs={'pk': self.prom.pk})


class PreventivoUpdateView(
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = PreventivoFornitore
    form_class = PreventivoFornitoreForm
    template_name = 'prom/preventivo_form.html'
    success_message = "Preventivo aggiornato"

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True).select_related('prom')

    def form_valid(self, form):
        era_selezionato = form.initial.get('selezionato')
        response = super().form_valid(form)
        if self.object.selezionato and not era_selezionato:
            seleziona_preventivo(self.object, self.request.user)
        return response

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {
            'title': f'Modifica: {self.object.nome_fornitore}',
            'subtitle': self.object.prom.titolo,
        }
        return context

    def get_success_url(self):
        return reverse('prom:prom_preventivi', kwargs={'pk': self.object.prom_id})


class PreventivoDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = PreventivoFornitore
    template_name = 'prom/preventivo_confirm_delete.html'

    def get_success_url(self):
        return reverse('prom:prom_preventivi', kwargs={'pk': self.object.prom_id})

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Preventivo '{self.object.nome_fornitore}' eliminato.")
        return redirect(self.get_success_url())


@login_required
@require_POST
def preventivo_seleziona(request, pk):
    preventivo = get_object_or_404(PreventivoFornitore, pk=pk, is_active=True)
    destinazione = reverse('prom:prom_preventivi', kwargs={'pk': preventivo.prom_id})

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono selezionare un preventivo")
        return redirect(destinazione)

    seleziona_preventivo(preventivo, request.user)
    messages.success(
        request,
        f"'{preventivo.nome_fornitore}' selezionato per {preventivo.get_categoria_display()}",
    )
    return redirect(destinazione)


# ============================================================================
# VOTAZIONE PUBBLICA
# ============================================================================

@require_http_methods(["GET", "POST"])
def prom_votazione(request, pk):
    """
    Pagina pubblica: i finalisti per categoria, con un form di voto ciascuno.
    """
    prom = get_object_or_404(EventoProm, pk=pk, is_active=True)
    finalisti = prom.preventivi.filter(is_active=True, finalista=True)

    if request.method == 'POST':
        form = VotoForm(request.POST, prom=prom)
        if form.is_valid():
            try:
                _voto, creato = prom.registra_voto(
                    preventivo=form.cleaned_data['preventivo'],
                    identificativo=form.cleaned_data['identificativo'],
                    tipo_voto=form.cleaned_data['tipo_voto'],
                    nome=form.cleaned_data['nome'],
                    commento=form.cleaned_data['commento'],
                )
                messages.success(request, "Grazie, voto registrato!" if creato else "Il tuo voto è stato aggiornato")
            except ValidationError as e:
                messages.error(request, ' '.join(e.messages))
        else:
            messages.error(request, "Voto non valido. Controlla i campi.")
        return redirect('prom:prom_votazione', pk=prom.pk)

    stats = statistiche_voti(prom)['per_preventivo']
    righe = [
        {
            'preventivo': p,
            'form': VotoForm(prom=prom, initial={'preventivo': p.pk}),
            'voti': stats.get(str(p.pk), {'prefer': 0, 'neutral': 0, 'oppose': 0, 'totale': 0}),
        }
        for p in sorted(finalisti, key=lambda p: (p.categoria, p.prezzo_totale))
    ]

    return render(request, 'prom/prom_votazione.html', {
        'prom': prom,
        'righe': righe,
        'votazione_aperta': prom.votazione_aperta,
    })


def prom_qr_code(request, pk):
    """QR code PNG del link di votazione."""
    prom = get_object_or_404(EventoProm, pk=pk, is_active=True)
    return qr_code_response(request.build_absolute_uri(prom.get_voting_url()), box_size=8)


# ============================================================================
# API
# ============================================================================

def _prom(pk):
    return get_object_or_404(EventoProm, pk=pk, is_active=True)


@api_view(["GET", "POST"])
def prom_api(request):
    """
    GET  /api/prom/?status=&limit=
    POST /api/prom/ (login)
    """
    if request.method == 'POST':
        require_login(request)
        form = EventoPromForm(dati_parziali(EventoProm(), EventoPromForm, parse_json_body(request)))
        if not form.is_valid():
            form_errors(form)
        prom = form.save(commit=False)
        prom.created_by = request.user
        prom.updated_by = request.user
        prom.save()
        logger.info(f"Prom creato via API: {prom.titolo} ({prom.pk})")
        return json_success(prom.to_dict(), status=201)

    qs = EventoProm.objects.filter(is_active=True)
    stato = request.GET.get('status')
    if stato and stato != 'all':
        qs = qs.filter(stato=stato)

    try:
        limite = min(int(request.GET.get('limit', 100)), 100)
    except ValueError:
        raise ApiError("Parametro limit non valido")

    data = [prom.to_dict() for prom in qs.order_by('-data_evento', '-created_at')[:limite]]
    return json_success(data, count=len(data))


@api_view(["GET", "PUT", "DELETE"])
def prom_api_detail(request, pk):
    prom = _prom(pk)

    if request.method == 'GET':
        return json_success(prom.to_dict())

    if request.method == 'DELETE':
        require_portal_admin(request)
        prom.soft_delete(user=request.user)
        logger.info(f"Prom {prom.pk} eliminato via API da {request.user}")
        return json_success()

    require_login(request)
    form = EventoPromForm(dati_parziali(prom, EventoPromForm, parse_json_body(request)), instance=prom)
    if not form.is_valid():
        form_errors(form)
    prom = form.save(commit=False)
    prom.updated_by = request.user
    prom.save()
    return json_success(prom.to_dict())


@api_view(["GET", "POST", "PUT"])
def prom_budget_api(request, pk):
    """
    GET  /api/prom/<id>/budget/ -> {items, summary}
    POST /api/prom/<id>/budget/ singola voce (upsert per categoria)
    PUT  /api/prom/<id>/budget/ {items: [...]} upsert in blocco
    """
    prom = _prom(pk)

    if request.method != 'GET':
        require_login(request)
        body = parse_json_body(request)
        voci = body.get('items') if request.method == 'PUT' else [body]
        if not isinstance(voci, list) or not voci:
            raise ApiError("Nessuna voce di budget da salvare")
        salvate = aggiorna_voci_budget(prom, voci, user=request.user)
        data = [voce.to_dict() for voce in salvate]
        if request.method == 'POST':
            return json_success(data[0])
        return json_success(data, count=len(data))

    voci = prom.voci_budget.filter(is_active=True).order_by('categoria')
    return json_success({
        'items': [voce.to_dict() for voce in voci],
        'summary': _riepilogo_json(riepilogo_budget(prom)),
    })


@api_view(["GET", "POST"])
def prom_preventivi_api(request, pk):
    """
    GET  /api/prom/<id>/quotes/?category=&finalists=true
    POST /api/prom/<id>/quotes/ (solo admin)
    """
    prom = _prom(pk)

    if request.method == 'POST':
        require_portal_admin(request)
        form = PreventivoFornitoreForm(
            dati_parziali(PreventivoFornitore(), PreventivoFornitoreForm, parse_json_body(request))
        )
        if not form.is_valid():
            form_errors(form)
        preventivo = form.save(commit=False)
        preventivo.prom = prom
        preventivo.created_by = request.user
        preventivo.updated_by = request.user
        preventivo.save()
        if preventivo.selezionato:
            seleziona_preventivo(preventivo, request.user)
        logger.info(f"Preventivo creato: {preventivo.nome_fornitore} (prom {prom.pk})")
        return json_success(preventivo.to_dict(), status=201)

    qs = prom.preventivi.filter(is_active=True)
    categoria = request.GET.get('category')
    if categoria and categoria != 'all':
        qs = qs.filter(categoria=categoria)
    if request.GET.get('finalists') == 'true':
        qs = qs.filter(finalista=True)

    admin = is_portal_admin(request)
    data = [sanifica_preventivo(p, admin) for p in qs.order_by('ordine_visualizzazione', 'created_at')]
    return json_success(data, count=len(data))


@api_view(["GET", "PUT", "DELETE"])
def prom_preventivo_api(request, pk, quote_id):
    """
    GET    /api/prom/<id>/quotes/<qid>/ (i non admin vedono solo i finalisti)
    PUT    aggiornamento parziale (solo admin)
    DELETE soft delete (solo admin)
    """
    prom = _prom(pk)
    preventivo = get_object_or_404(prom.preventivi.filter(is_active=True), pk=quote_id)
    admin = is_portal_admin(request)

    if request.method == 'GET':
        if not admin and not preventivo.finalista:
            raise ApiError("Preventivo non trovato", status=404)
        return json_success(sanifica_preventivo(preventivo, admin))

    require_portal_admin(request)

    if request.method == 'DELETE':
        preventivo.soft_delete(user=request.user)
        logger.info(f"Preventivo {preventivo.pk} eliminato da {request.user}")
        return json_success()

    era_selezionato = preventivo.selezionato
    form = PreventivoFornitoreForm(
        dati_parziali(preventivo, PreventivoFornitoreForm, parse_json_body(request)),
        instance=preventivo,
    )
    if not form.is_valid():
        form_errors(form)
    preventivo = form.save(commit=False)
    preventivo.updated_by = request.user
    preventivo.save()
    if preventivo.selezionato and not era_selezionato:
        seleziona_preventivo(preventivo, request.user)
    return json_success(preventivo.to_dict())


@api_view(["GET", "POST"])
def prom_voti_api(request, pk):
    """
    GET  /api/prom/<id>/votes/?quote_id= -> statistiche (+ voti per gli admin)
    POST /api/prom/<id>/votes/ {preventivo_id, identificativo, nome, tipo_voto, commento}
    """
    prom = _prom(pk)

    if request.method == 'POST':
        body = parse_json_body(request)
        form = VotoForm({
            'preventivo': body.get('preventivo_id'),
            'identificativo': body.get('identificativo'),
            'nome': body.get('nome') or '',
            'tipo_voto': body.get('tipo_voto'),
            'commento': body.get('commento') or '',
        }, prom=prom)
        if not form.is_valid():
            form_errors(form)
        voto, creato = prom.registra_voto(
            preventivo=form.cleaned_data['preventivo'],
            identificativo=form.cleaned_data['identificativo'],
            tipo_voto=form.cleaned_data['tipo_voto'],
            nome=form.cleaned_data['nome'],
            commento=form.cleaned_data['commento'],
        )
        return json_success(voto.to_dict(), status=201 if creato else 200, creato=creato)

    preventivo_id = request.GET.get('quote_id')
    stats = statistiche_voti(prom, preventivo_id=preventivo_id)
    data = {
        'stats': stats['per_preventivo'],
        'totale_votanti': stats['totale_votanti'],
    }
    if is_portal_admin(request):
        voti = prom.voti.filter(is_active=True)
        if preventivo_id:
            voti = voti.filter(preventivo_id=preventivo_id)
        data['votes'] = [voto.to_dict() for voto in voti]
    return json_success(data)
