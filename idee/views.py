"""
Views per app idee.

STRUTTURA:
- Invio pubblico di idee (pagina e JSON)
- Lista admin con filtri e statistiche per stato, risposta alle idee
- Riunioni: CRUD admin, apertura/chiusura, bacheca pubblica delle idee
- API JSON: /api/ideas/, /api/meetings/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse, reverse_lazy
from django.views.decorators.http import require_http_methods, require_POST
from django.views.generic import CreateView, DeleteView, DetailView, ListView, UpdateView

from core.api import (
    ApiError,
    api_view,
    dati_parziali,
    form_errors,
    json_success,
    parse_json_body,
    require_portal_admin,
)
from core.mixins.view_mixins import (
    BreadcrumbMixin,
    CustomPaginationMixin,
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PortalAdminRequiredMixin,
    SearchMixin,
    SetCreatedByMixin,
)
from core.share_formatters import formatta_idee

from .forms import IdeaForm, IdeaRiunioneForm, IdeaStatoForm, RiunioneForm
from .models import Idea, Riunione
from .services import filtra_idee, statistiche_idee

logger = logging.getLogger(__name__)


def _limite(request):
    try:
        return min(int(request.GET.get('limit', 50)), 100)
    except ValueError:
        raise ApiError("Parametro limit non valido")


# ============================================================================
# IDEE
# ============================================================================

@require_http_methods(["GET", "POST"])
def idea_invio(request):
    """Invio pubblico di un'idea, anche senza login."""
    if request.method == 'POST':
        form = IdeaForm(request.POST)
        if form.is_valid():
            idea = form.save(commit=False)
            if request.user.is_authenticated:
                idea.created_by = request.user
            idea.save()
            logger.info(f"Nuova idea ricevuta: {idea.pk} ({idea.categoria})")
            messages.success(request, "Grazie! La tua idea è stata inviata")
            return redirect('idee:idea_invio')
    else:
        form = IdeaForm()

    return render(request, 'idee/idea_invio.html', {
        'form': form,
        'condivisione': {locale: formatta_idee(locale) for locale in ('he', 'ru')},
    })


class IdeaListView(PortalAdminRequiredMixin, SearchMixin, CustomPaginationMixin, ListView):
    model = Idea
    template_name = 'idee/idea_list.html'
    context_object_name = 'idee'
    search_fields = ['titolo', 'descrizione', 'nome_proponente']

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True)
        return filtra_idee(qs, self.request.GET)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        statistiche = statistiche_idee()
        context['totale_idee'] = statistiche['totale']
        context['conteggi_stato'] = [
            (label, statistiche['per_stato'][value]) for value, label in Idea.STATO_CHOICES
        ]
        context['stato_choices'] = Idea.STATO_CHOICES
        context['categoria_choices'] = Idea.CATEGORIA_CHOICES
        context['filtri_attivi'] = {
            param: self.request.GET.get(param, '') for param in ('status', 'category')
        }
        return context


class IdeaDetailView(PortalAdminRequiredMixin, BreadcrumbMixin, DetailView):
    model = Idea
    template_name = 'idee/idea_detail.html'
    context_object_name = 'idea'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_breadcrumbs(self):
        return [
            ('Dashboard', reverse('dashboard')),
            ('Idee', reverse('idee:idea_list')),
            (self.object.titolo, None),
        ]

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stato_form'] = IdeaStatoForm(initial={
            'stato': self.object.stato,
            'risposta': self.object.risposta,
            'note_admin': self.object.note_admin,
        })
        return context


@login_required
@require_POST
def idea_aggiorna_stato(request, pk):
    idea = get_object_or_404(Idea, pk=pk, is_active=True)

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono aggiornare le idee")
        return redirect('idee:idea_invio')

    form = IdeaStatoForm(request.POST)
    if form.is_valid():
        idea.aggiorna_stato(
            form.cleaned_data['stato'],
            risposta=form.cleaned_data['risposta'],
            note_admin=form.cleaned_data['note_admin'],
            user=request.user,
        )
        messages.success(request, f"Idea aggiornata: {idea.get_stato_display()}")
    else:
        messages.error(request, "Dati non validi")

    return redirect(idea.get_absolute_url())


class IdeaDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = Idea
    template_name = 'idee/idea_confirm_delete.html'
    success_url = reverse_lazy('idee:idea_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Idea '{self.object.titolo}' eliminata.")
        return redirect(self.get_success_url())


# ============================================================================
# RIUNIONI
# ============================================================================

class RiunioneListView(PortalAdminRequiredMixin, CustomPaginationMixin, ListView):
    model = Riunione
    template_name = 'idee/riunione_list.html'
    context_object_name = 'riunioni'

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True)
        stato = self.request.GET.get('status')
        if stato and stato != 'all':
            qs = qs.filter(stato=stato)
        return qs.order_by('-data_riunione')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stato_choices'] = Riunione.STATO_CHOICES
        context['stato_attivo'] = self.request.GET.get('status', '')
        return context


class RiunioneDetailView(PortalAdminRequiredMixin, BreadcrumbMixin, DetailView):
    model = Riunione
    template_name = 'idee/riunione_detail.html'
    context_object_name = 'riunione'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_breadcrumbs(self):
        return [
            ('Dashboard', reverse('dashboard')),
            ('Riunioni', reverse('idee:riunione_list')),
            (self.object.titolo, None),
        ]

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['idee_bacheca'] = self.object.bacheca()
        context['link_bacheca'] = self.request.build_absolute_uri(self.object.get_board_url())
        return context


class RiunioneCreateView(
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = Riunione
    form_class = RiunioneForm
    template_name = 'idee/riunione_form.html'
    success_message = "Riunione creata"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuova riunione'}
        return context

    def get_success_url(self):
        return self.object.get_absolute_url()


class RiunioneUpdateView(
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = Riunione
    form_class = RiunioneForm
    template_name = 'idee/riunione_form.html'
    success_message = "Riunione aggiornata"

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica: {self.object.titolo}'}
        return context

    def get_success_url(self):
        return self.object.get_absolute_url()


class RiunioneDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = Riunione
    template_name = 'idee/riunione_confirm_delete.html'
    success_url = reverse_lazy('idee:riunione_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Riunione '{self.object.titolo}' eliminata.")
        return redirect(self.get_success_url())


@login_required
@require_POST
def riunione_apri_chiudi(request, pk):
    riunione = get_object_or_404(Riunione, pk=pk, is_active=True)

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono aprire o chiudere una riunione")
        return redirect(riunione.get_board_url())

    if riunione.accetta_idee:
        riunione.chiudi(request.user)
        messages.success(request, "Bacheca chiusa")
    else:
        riunione.apri(request.user)
        messages.success(request, "Bacheca aperta alle idee")
    return redirect(riunione.get_absolute_url())


@require_http_methods(["GET", "POST"])
def riunione_bacheca(request, pk):
    """
    Bacheca pubblica di una riunione: elenco delle idee e form per
    aggiungerne una finché la riunione è aperta.
    """
    riunione = get_object_or_404(Riunione, pk=pk, is_active=True)

    if request.method == 'POST':
        form = IdeaRiunioneForm(request.POST)
        if form.is_valid():
            try:
                riunione.aggiungi_idea(
                    titolo=form.cleaned_data['titolo'],
                    descrizione=form.cleaned_data['descrizione'],
                    nome_proponente=form.cleaned_data['nome_proponente'],
                    anonima=form.cleaned_data['anonima'],
                    lingua_invio=form.cleaned_data['lingua_invio'] or 'he',
                )
            except ValidationError as e:
                messages.error(request, ' '.join(e.messages))
            else:
                messages.success(request, "Idea aggiunta alla bacheca")
                return redirect(riunione.get_board_url())
    else:
        form = IdeaRiunioneForm()

    return render(request, 'idee/riunione_bacheca.html', {
        'riunione': riunione,
        'idee_bacheca': riunione.bacheca(),
        'form': form,
    })


# ============================================================================
# API
# ============================================================================

@api_view(["GET", "POST"])
def idee_api(request):
    """
    GET  /api/ideas/?status=&category=&limit= (solo admin)
    POST /api/ideas/ (pubblico)
    """
    if request.method == 'POST':
        body = parse_json_body(request)
        form = IdeaForm(dati_parziali(Idea(), IdeaForm, body))
        if not form.is_valid():
            form_errors(form)
        idea = form.save(commit=False)
        if request.user.is_authenticated:
            idea.created_by = request.user
        idea.save()
        logger.info(f"Nuova idea via API: {idea.pk}")
        return json_success({
            'id': str(idea.pk),
            'created_at': idea.created_at.isoformat(),
        }, status=201)

    require_portal_admin(request)
    qs = filtra_idee(Idea.objects.filter(is_active=True), request.GET)
    data = [i.to_dict() for i in qs[:_limite(request)]]
    return json_success(data, count=len(data), stats=statistiche_idee())


@api_view(["PUT", "PATCH"])
def idea_stato_api(request, pk):
    """PUT /api/ideas/<id>/status/ {status, response, admin_notes}"""
    require_portal_admin(request)
    idea = get_object_or_404(Idea, pk=pk, is_active=True)
    body = parse_json_body(request)

    if not body.get('status'):
        raise ApiError("Il campo status è obbligatorio")

    idea.aggiorna_stato(
        body['status'],
        risposta=body.get('response'),
        note_admin=body.get('admin_notes'),
        user=request.user,
    )
    return json_success(idea.to_dict())


@api_view(["GET", "POST"])
def riunioni_api(request):
    """
    GET  /api/meetings/?status= (solo admin)
    POST /api/meetings/ (solo admin)
    """
    require_portal_admin(request)

    if request.method == 'POST':
        body = parse_json_body(request)
        form = RiunioneForm(dati_parziali(Riunione(), RiunioneForm, body))
        if not form.is_valid():
            form_errors(form)
        riunione = form.save(commit=False)
        riunione.created_by = request.user
        riunione.updated_by = request.user
        riunione.save()
        logger.info(f"Riunione creata via API: {riunione.pk}")
        return json_success(riunione.to_dict(), status=201)

    qs = Riunione.objects.filter(is_active=True)
    stato = request.GET.get('status')
    if stato and stato != 'all':
        qs = qs.filter(stato=stato)
    data = [r.to_dict() for r in qs.order_by('-data_riunione')]
    return json_success(data, count=len(data))


@api_view(["GET", "PATCH", "DELETE"])
def riunione_api_detail(request, pk):
    require_portal_admin(request)
    riunione = get_object_or_404(Riunione, pk=pk, is_active=True)

    if request.method == 'GET':
        return json_success(riunione.to_dict())

    if request.method == 'DELETE':
        riunione.soft_delete(user=request.user)
        return json_success()

    body = parse_json_body(request)
    # Chiudere la bacheca porta sempre la riunione in stato closed
    if body.get('aperta') is False or body.get('stato') == 'closed':
        body['aperta'] = False
        body['stato'] = 'closed'

    form = RiunioneForm(dati_parziali(riunione, RiunioneForm, body), instance=riunione)
    if not form.is_valid():
        form_errors(form)
    riunione = form.save(commit=False)
    riunione.updated_by = request.user
    riunione.save()
    return json_success(riunione.to_dict())


@api_view(["GET", "POST"])
def riunione_idee_api(request, pk):
    """
    GET  /api/meetings/<id>/ideas/ -> {meeting, ideas} dalla più recente
    POST /api/meetings/<id>/ideas/ (pubblico, solo con riunione aperta)
    """
    riunione = get_object_or_404(Riunione, pk=pk, is_active=True)

    if request.method == 'POST':
        body = parse_json_body(request)
        form = IdeaRiunioneForm(body)
        if not form.is_valid():
            form_errors(form)
        idea = riunione.aggiungi_idea(
            titolo=form.cleaned_data['titolo'],
            descrizione=form.cleaned_data['descrizione'],
            nome_proponente=form.cleaned_data['nome_proponente'],
            anonima=body.get('anonima', True) is not False,
            lingua_invio=form.cleaned_data['lingua_invio'] or 'he',
        )
        return json_success(idea.to_dict(), status=201)

    return json_success({
        'meeting': riunione.to_dict(),
        'ideas': [i.to_dict() for i in riunione.bacheca()],
    })
