"""
Views per app attivita.

STRUTTURA:
- Elenco attività con filtri (stato, priorità, responsabile, tag, in ritardo)
- Dettaglio con tag, testi di condivisione e link promemoria
- Editor con Select2 per le tag e autosave bozze
- Gestione tag (solo admin)
- API JSON: /api/tasks/, /api/tags/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404, redirect
from django.urls import reverse, reverse_lazy
from django.views.decorators.http import require_POST
from django.views.generic import CreateView, DeleteView, DetailView, ListView, UpdateView

from core.api import (
    ApiError,
    api_view,
    dati_parziali,
    form_errors,
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
from core.share_formatters import formatta_attivita

from .forms import AttivitaForm, TagForm
from .models import Attivita, Tag
from .services import (
    aggiungi_tag,
    elenco_tag,
    elimina_tag,
    filtra_attivita,
    imposta_tag,
    link_promemoria,
    rimuovi_tag,
    tag_in_blocco,
    verifica_modifica_tag,
)

logger = logging.getLogger(__name__)


# ============================================================================
# ATTIVITA
# ============================================================================

class AttivitaListView(PermissionRequiredMixin, SearchMixin, CustomPaginationMixin, ListView):
    model = Attivita
    template_name = 'attivita/attivita_list.html'
    context_object_name = 'attivita_list'
    permission_required = 'attivita.view_attivita'
    search_fields = ['titolo', 'descrizione']

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True).prefetch_related('tags')
        return filtra_attivita(qs, self.request.GET)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stato_choices'] = Attivita.STATO_CHOICES
        context['priorita_choices'] = Attivita.PRIORITA_CHOICES
        context['tags'] = Tag.objects.filter(is_active=True)
        context['filtri_attivi'] = {
            param: self.request.GET.get(param, '')
            for param in ('status', 'priority', 'owner', 'tag', 'overdue')
        }
        context['numero_in_ritardo'] = Attivita.objects.filter(is_active=True).in_ritardo().count()
        return context


class AttivitaDetailView(PermissionRequiredMixin, BreadcrumbMixin, DetailView):
    model = Attivita
    template_name = 'attivita/attivita_detail.html'
    context_object_name = 'attivita'
    permission_required = 'attivita.view_attivita'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True).select_related('evento', 'protocollo', 'attivita_padre')

    def get_breadcrumbs(self):
        return [
            ('Dashboard', reverse('dashboard')),
            ('Attività', reverse('attivita:attivita_list')),
            (self.object.titolo, None),
        ]

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        attivita = self.object
        context['tags'] = attivita.tag_attivi()
        context['sotto_attivita'] = attivita.sotto_attivita.filter(is_active=True)
        context['condivisione'] = {
            locale: formatta_attivita(attivita, locale) for locale in ('he', 'ru')
        }
        context['link_promemoria'] = link_promemoria(attivita)
        context['stato_choices'] = Attivita.STATO_CHOICES
        return context


class AttivitaFormMixin:
    """Salva le tag scelte nel Select2 dopo il salvataggio dell'attività."""

    def form_valid(self, form):
        response = super().form_valid(form)
        imposta_tag(self.object, form.cleaned_data.get('tags') or [])
        return response

    def get_success_url(self):
        return self.object.get_absolute_url()


class AttivitaCreateView(
    PermissionRequiredMixin,
    DraftAutosaveMixin,
    AttivitaFormMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = Attivita
    form_class = AttivitaForm
    template_name = 'attivita/attivita_form.html'
    permission_required = 'attivita.add_attivita'
    draft_tipo = 'task'
    success_message = "Attività creata"

    def get_initial(self):
        initial = super().get_initial()
        evento = self.request.GET.get('evento')
        if evento:
            initial.setdefault('evento', evento)
        return initial

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuova attività'}
        return context


class AttivitaUpdateView(
    PermissionRequiredMixin,
    DraftAutosaveMixin,
    AttivitaFormMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = Attivita
    form_class = AttivitaForm
    template_name = 'attivita/attivita_form.html'
    permission_required = 'attivita.change_attivita'
    draft_tipo = 'task'
    success_message = "Attività aggiornata"

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica: {self.object.titolo}'}
        return context


class AttivitaDeleteView(PortalAdminRequiredMixin, DeleteView):
    model = Attivita
    template_name = 'attivita/attivita_confirm_delete.html'
    success_url = reverse_lazy('attivita:attivita_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Attività '{self.object.titolo}' eliminata.")
        return redirect(self.get_success_url())


@login_required
@require_POST
def attivita_cambia_stato(request, pk):
    attivita = get_object_or_404(Attivita, pk=pk, is_active=True)

    if not request.user.has_perm('attivita.change_attivita'):
        messages.error(request, "Non hai i permessi per modificare l'attività")
        return redirect(attivita.get_absolute_url())

    stato = request.POST.get('stato')
    if stato not in dict(Attivita.STATO_CHOICES):
        messages.error(request, "Stato non valido")
        return redirect(attivita.get_absolute_url())

    attivita.stato = stato
    attivita.updated_by = request.user
    attivita.save()
    logger.info(f"Attività {attivita.pk} -> {stato} da {request.user}")
    messages.success(request, f"Stato aggiornato: {attivita.get_stato_display()}")
    return redirect(attivita.get_absolute_url())


# ============================================================================
# TAG
# ============================================================================

class TagListView(PortalAdminRequiredMixin, ListView):
    model = Tag
    template_name = 'attivita/tag_list.html'
    context_object_name = 'tags'

    def get_queryset(self):
        return elenco_tag(self.request.GET)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['ordinamento'] = self.request.GET.get('sort', 'order')
        context['includi_inattive'] = self.request.GET.get('active') == 'false'
        return context


class TagCreateView(
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = Tag
    form_class = TagForm
    template_name = 'attivita/tag_form.html'
    success_url = reverse_lazy('attivita:tag_list')
    success_message = "Tag creata"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': 'Nuova tag'}
        return context


class TagUpdateView(
    PortalAdminRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = Tag
    form_class = TagForm
    template_name = 'attivita/tag_form.html'
    success_url = reverse_lazy('attivita:tag_list')
    success_message = "Tag aggiornata"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {'title': f'Modifica tag: {self.object}'}
        return context


@login_required
@require_POST
def tag_elimina(request, pk):
    tag = get_object_or_404(Tag, pk=pk)

    if not request.user.is_portal_admin:
        messages.error(request, "Solo gli amministratori possono eliminare le tag")
        return redirect('attivita:tag_list')

    try:
        esito = elimina_tag(tag, user=request.user)
    except PermissionDenied as e:
        messages.error(request, str(e))
    else:
        if esito == 'disattivata':
            messages.info(request, f"La tag '{tag.nome_he}' è in uso ed è stata disattivata")
        else:
            messages.success(request, f"Tag '{tag.nome_he}' eliminata")

    return redirect('attivita:tag_list')


# ============================================================================
# API ATTIVITA
# ============================================================================

def _salva_attivita(request, form, body):
    attivita = form.save(commit=False)
    if attivita._state.adding:
        attivita.created_by = request.user
    attivita.updated_by = request.user
    attivita.save()
    if 'tags' in body:
        imposta_tag(attivita, form.cleaned_data.get('tags') or [])
    return attivita


@api_view(["GET", "POST"])
def attivita_api(request):
    """
    GET  /api/tasks/?status=&priority=&owner=&tag=&overdue=true&limit=
    POST /api/tasks/ (login)
    """
    if request.method == 'POST':
        require_login(request)
        body = parse_json_body(request)
        form = AttivitaForm(dati_parziali(Attivita(), AttivitaForm, body))
        if not form.is_valid():
            form_errors(form)
        attivita = _salva_attivita(request, form, body)
        logger.info(f"Attività creata via API: {attivita.titolo} ({attivita.pk})")
        return json_success(attivita.to_dict(), status=201)

    try:
        limite = min(int(request.GET.get('limit', 50)), 100)
    except ValueError:
        raise ApiError("Parametro limit non valido")

    qs = filtra_attivita(Attivita.objects.filter(is_active=True), request.GET)
    data = [a.to_dict() for a in qs.prefetch_related('tags')[:limite]]
    return json_success(data, count=len(data))


@api_view(["GET", "PUT", "DELETE"])
def attivita_api_detail(request, pk):
    attivita = get_object_or_404(Attivita, pk=pk, is_active=True)

    if request.method == 'GET':
        return json_success(attivita.to_dict())

    require_login(request)

    if request.method == 'DELETE':
        attivita.soft_delete(user=request.user)
        logger.info(f"Attività {attivita.pk} eliminata via API da {request.user}")
        return json_success()

    body = parse_json_body(request)
    form = AttivitaForm(dati_parziali(attivita, AttivitaForm, body), instance=attivita)
    if not form.is_valid():
        form_errors(form)
    attivita = _salva_attivita(request, form, body)
    return json_success(attivita.to_dict())


@api_view(["GET", "POST", "DELETE"])
def attivita_tag_api(request, pk):
    """
    GET    /api/tasks/<id>/tags/
    POST   {tag_ids: [...]} aggiunge (ignora quelle già presenti)
    DELETE {tag_id} rimuove
    """
    attivita = get_object_or_404(Attivita, pk=pk, is_active=True)

    if request.method == 'GET':
        data = [tag.to_dict() for tag in attivita.tag_attivi()]
        return json_success(data, count=len(data))

    require_login(request)
    body = parse_json_body(request)

    if request.method == 'POST':
        aggiunte = aggiungi_tag(attivita, body.get('tag_ids'))
        return json_success(attivita.to_dict()['tags'], added_count=aggiunte)

    tag_id = body.get('tag_id') or request.GET.get('tag_id')
    if not tag_id:
        raise ApiError("tag_id mancante")
    if not rimuovi_tag(attivita, tag_id):
        raise ApiError("Tag non assegnata all'attività", status=404)
    return json_success()


@api_view(["POST"])
def attivita_tag_blocco_api(request):
    """POST /api/tasks/bulk/tags/ {task_ids, tag_ids, action: add|remove}"""
    require_login(request)
    body = parse_json_body(request)
    numero = tag_in_blocco(body.get('task_ids'), body.get('tag_ids'), body.get('action'))
    return json_success({'affected': numero, 'action': body.get('action')})


# ============================================================================
# API TAG
# ============================================================================

def _dati_tag(body):
    dati = dict(body)
    if 'attivo' in dati:
        dati['is_active'] = dati.pop('attivo')
    return dati


@api_view(["GET", "POST"])
def tag_api(request):
    """
    GET  /api/tags/?active=&system=&sort=name|usage|order
    POST /api/tags/ (solo admin)
    """
    if request.method == 'POST':
        require_portal_admin(request)
        form = TagForm(dati_parziali(Tag(), TagForm, _dati_tag(parse_json_body(request))))
        if not form.is_valid():
            form_errors(form)
        tag = form.save(commit=False)
        tag.created_by = request.user
        tag.save()
        logger.info(f"Tag creata: {tag.nome}")
        return json_success(tag.to_dict(), status=201)

    data = []
    for tag in elenco_tag(request.GET):
        dati = tag.to_dict()
        dati['numero_attivita'] = tag.conteggio_attivita
        data.append(dati)
    return json_success(data, count=len(data))


@api_view(["GET", "PUT", "PATCH", "DELETE"])
def tag_api_detail(request, pk):
    tag = get_object_or_404(Tag, pk=pk)

    if request.method == 'GET':
        return json_success(tag.to_dict())

    require_portal_admin(request)

    if request.method == 'DELETE':
        esito = elimina_tag(tag, user=request.user)
        return json_success({'esito': esito})

    dati = _dati_tag(parse_json_body(request))
    verifica_modifica_tag(tag, dati)
    form = TagForm(dati_parziali(tag, TagForm, dati), instance=tag)
    if not form.is_valid():
        form_errors(form)
    tag = form.save(commit=False)
    tag.updated_by = request.user
    tag.save()
    return json_success(tag.to_dict())
