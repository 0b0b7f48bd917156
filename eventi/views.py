"""
Views per app eventi.

STRUTTURA:
- Pannello comitato: CRUD eventi, registrazioni, liste spesa
- Pagine pubbliche: registrazione, modifica tramite token,
  'I miei eventi / La mia spesa', lista spesa condivisa
- API JSON: /api/events/ e /api/grocery/
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse, reverse_lazy
from django.utils import timezone
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
)
from core.mixins.view_mixins import (
    CustomPaginationMixin,
    FilterMixin,
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PermissionRequiredMixin,
    SearchMixin,
    SetCreatedByMixin,
)
from core.qr_code_generator import qr_code_response
from core.share_formatters import formatta_evento

from .forms import (
    ArticoloSpesaFormSet,
    EventoForm,
    EventoPubblicoForm,
    ListaSpesaForm,
    PrenotazioneArticoloForm,
    RegistrazioneForm,
    RicercaTelefonoForm,
)
from .models import ArticoloSpesa, Evento, ListaSpesa
from .services import LIMITE_RISULTATI, eventi_per_telefono, liste_per_telefono

logger = logging.getLogger(__name__)


# ============================================================================
# LISTA EVENTI
# ============================================================================

class EventoListView(PermissionRequiredMixin, FilterMixin, SearchMixin, CustomPaginationMixin, ListView):
    """
    Lista eventi con filtri (stato, tipo, visibilità) e ricerca.
    """
    model = Evento
    template_name = 'eventi/evento_list.html'
    context_object_name = 'eventi'
    permission_required = 'eventi.view_evento'

    filter_fields = {
        'stato': 'stato',
        'tipo': 'tipo',
        'visibilita': 'visibilita',
    }
    search_fields = ['titolo', 'titolo_ru', 'luogo', 'descrizione']

    def get_queryset(self):
        qs = super().get_queryset().filter(is_active=True)

        if self.request.GET.get('archiviati') != '1':
            qs = qs.filter(archiviato_at__isnull=True)

        if self.request.GET.get('prossimi') == '1':
            qs = qs.filter(data_inizio__gte=timezone.now()).order_by('data_inizio')

        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stato_choices'] = Evento.STATO_CHOICES
        context['tipo_choices'] = Evento.TIPO_CHOICES
        context['filtro_archiviati'] = self.request.GET.get('archiviati', '')
        return context


# ============================================================================
# DETTAGLIO EVENTO
# ============================================================================

class EventoDetailView(PermissionRequiredMixin, DetailView):
    """
    Dettaglio evento con registrazioni, statistiche e testi di condivisione.
    """
    model = Evento
    template_name = 'eventi/evento_detail.html'
    context_object_name = 'evento'
    permission_required = 'eventi.view_evento'

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True).select_related('created_by')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        evento = self.object

        registrazioni = evento.registrazioni.filter(is_active=True)
        context['registrazioni'] = registrazioni
        context['statistiche_registrazioni'] = statistiche_registrazioni(registrazioni)
        context['liste_spesa'] = evento.liste_spesa.filter(is_active=True)

        context['condivisione'] = {
            locale: formatta_evento(evento, locale) for locale in ('he', 'ru')
        }
        context['link_registrazione'] = self.request.build_absolute_uri(
            reverse('eventi:evento_registrazione', kwargs={'pk': evento.pk})
        )
        context['link_modifica'] = self.request.build_absolute_uri(evento.get_edit_url() + '/')
        return context


def statistiche_registrazioni(registrazioni):
    """Totali registrazioni: righe, confermate, annullate e persone attese."""
    stats = registrazioni.aggregate(
        totale=Count('id'),
        confermate=Count('id', filter=Q(stato='confirmed')),
        annullate=Count('id', filter=Q(stato='cancelled')),
        partecipanti=Sum('numero_partecipanti', filter=Q(stato='confirmed')),
    )
    stats['partecipanti'] = stats['partecipanti'] or 0
    return stats


# ============================================================================
# CREAZIONE / MODIFICA / ELIMINAZIONE
# ============================================================================

class EventoCreateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView
):
    model = Evento
    form_class = EventoForm
    template_name = 'eventi/evento_form.html'
    permission_required = 'eventi.add_evento'
    success_message = "Evento creato con successo!"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {
            'title': 'Nuovo Evento',
            'submit_text': 'Crea Evento',
            'cancel_url': 'eventi:evento_list',
        }
        return context

    def form_valid(self, form):
        response = super().form_valid(form)
        logger.info(f"Evento creato: {self.object.titolo} ({self.object.pk}) da {self.request.user}")
        return response

    def get_success_url(self):
        return self.object.get_absolute_url()


class EventoUpdateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView
):
    model = Evento
    form_class = EventoForm
    template_name = 'eventi/evento_form.html'
    permission_required = 'eventi.change_evento'
    success_message = "Evento aggiornato con successo!"

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form_config'] = {
            'title': f'Modifica Evento: {self.object.titolo}',
            'submit_text': 'Salva Modifiche',
            'cancel_url': 'eventi:evento_detail',
            'cancel_url_kwargs': {'pk': self.object.pk},
        }
        return context

    def get_success_url(self):
        return self.object.get_absolute_url()


class EventoDeleteView(PermissionRequiredMixin, DeleteView):
    """
    Soft delete dell'evento.
    """
    model = Evento
    template_name = 'eventi/evento_confirm_delete.html'
    permission_required = 'eventi.delete_evento'
    success_url = reverse_lazy('eventi:evento_list')

    def form_valid(self, form):
        self.object.soft_delete(user=self.request.user)
        messages.success(self.request, f"Evento '{self.object.titolo}' eliminato.")
        return redirect(self.get_success_url())


@login_required
@require_POST
def evento_archivia(request, pk):
    evento = get_object_or_404(Evento, pk=pk, is_active=True)

    if not request.user.has_perm('eventi.change_evento'):
        messages.error(request, "Non hai i permessi per archiviare eventi")
        return redirect(evento.get_absolute_url())

    evento.archivia(request.user)
    logger.info(f"Evento {evento.pk} archiviato da {request.user}")
    messages.success(request, f"Evento '{evento.titolo}' archiviato.")
    return redirect('eventi:evento_list')


@login_required
def evento_qr_code(request, pk):
    """QR code PNG del link di registrazione pubblico."""
    evento = get_object_or_404(Evento, pk=pk, is_active=True)
    link = request.build_absolute_uri(
        reverse('eventi:evento_registrazione', kwargs={'pk': evento.pk})
    )
    return qr_code_response(link, box_size=8)


# ============================================================================
# PAGINE PUBBLICHE
# ============================================================================

@require_http_methods(["GET", "POST"])
def evento_registrazione(request, pk):
    """
    Registrazione pubblica di un genitore a un evento.

    Gli errori di Evento.registra() (chiusa, scaduta, posti, duplicato)
    vengono mostrati come messaggio sul form.
    """
    evento = get_object_or_404(
        Evento, pk=pk, is_active=True, archiviato_at__isnull=True, visibilita='public'
    )

    if request.method == 'POST':
        form = RegistrazioneForm(request.POST)
        if form.is_valid():
            try:
                evento.registra(
                    nome=form.cleaned_data['nome'],
                    telefono=form.cleaned_data['telefono'],
                    numero_partecipanti=form.cleaned_data['numero_partecipanti'],
                    email=form.cleaned_data.get('email', ''),
                    messaggio=form.cleaned_data.get('messaggio', ''),
                )
            except ValidationError as e:
                messages.error(request, ' '.join(e.messages))
            else:
                messages.success(request, "Registrazione completata, grazie!")
                return redirect('eventi:evento_registrazione', pk=evento.pk)
    else:
        form = RegistrazioneForm()

    return render(request, 'eventi/evento_registrazione.html', {
        'evento': evento,
        'form': form,
    })


@require_http_methods(["GET", "POST"])
def evento_modifica_token(request, token):
    """
    Modifica di un evento tramite il link segreto (nessun login).
    """
    evento = get_object_or_404(Evento, edit_token=token, is_active=True, archiviato_at__isnull=True)

    if request.method == 'POST':
        form = EventoPubblicoForm(request.POST, instance=evento)
        if form.is_valid():
            form.save()
            logger.info(f"Evento {evento.pk} modificato tramite token")
            messages.success(request, "L'evento è stato aggiornato")
            return redirect('eventi:evento_modifica_token', token=token)
        messages.error(request, "Errore nel salvataggio. Controlla i campi.")
    else:
        form = EventoPubblicoForm(instance=evento)

    return render(request, 'eventi/evento_modifica_token.html', {
        'evento': evento,
        'form': form,
    })


def miei_eventi(request):
    """
    'I miei eventi / La mia spesa': ricerca per numero di telefono.
    """
    form = RicercaTelefonoForm(request.GET or None)
    eventi = liste = None

    if form.is_bound and form.is_valid():
        telefono = form.cleaned_data['phone']
        eventi = eventi_per_telefono(telefono)
        liste = liste_per_telefono(telefono)

    return render(request, 'eventi/miei_eventi.html', {
        'form': form,
        'eventi': eventi,
        'liste': liste,
    })


# ============================================================================
# LISTE SPESA (COMITATO)
# ============================================================================

class ListaSpesaListView(PermissionRequiredMixin, FilterMixin, SearchMixin, ListView):
    model = ListaSpesa
    template_name = 'eventi/lista_spesa_list.html'
    context_object_name = 'liste'
    permission_required = 'eventi.view_listaspesa'
    filter_fields = {'stato': 'stato'}
    search_fields = ['nome_evento', 'nome_classe', 'nome_organizzatore']
    paginate_by = 30

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True).annotate(
            totale_articoli=Count('articoli'),
            totale_prenotati=Count('articoli', filter=~Q(articoli__nome_assegnatario='')),
        )


class ListaSpesaFormMixin:
    """Salvataggio lista + formset articoli in un'unica transazione."""

    model = ListaSpesa
    form_class = ListaSpesaForm
    template_name = 'eventi/lista_spesa_form.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        if 'formset' not in context:
            context['formset'] = ArticoloSpesaFormSet(instance=getattr(self, 'object', None))
        return context

    def post(self, request, *args, **kwargs):
        self.object = self.get_object() if kwargs.get('pk') else None
        form = self.get_form()
        formset = ArticoloSpesaFormSet(request.POST, instance=self.object)

        if form.is_valid() and formset.is_valid():
            with transaction.atomic():
                if form.instance._state.adding:
                    form.instance.created_by = request.user
                form.instance.updated_by = request.user
                self.object = form.save()
                formset.instance = self.object
                formset.save()
            messages.success(request, f"Lista spesa '{self.object.nome_evento}' salvata")
            return redirect('eventi:lista_spesa_list')

        messages.error(request, "Errore nel salvataggio. Controlla i campi.")
        return self.render_to_response(self.get_context_data(form=form, formset=formset))


class ListaSpesaCreateView(PermissionRequiredMixin, ListaSpesaFormMixin, CreateView):
    permission_required = 'eventi.add_listaspesa'


class ListaSpesaUpdateView(PermissionRequiredMixin, ListaSpesaFormMixin, UpdateView):
    permission_required = 'eventi.change_listaspesa'

    def get_queryset(self):
        return ListaSpesa.objects.filter(is_active=True)


# ============================================================================
# LISTA SPESA PUBBLICA
# ============================================================================

@require_http_methods(["GET", "POST"])
def lista_spesa_pubblica(request, token):
    """
    Lista spesa condivisa: ogni genitore prenota un articolo col proprio nome.

    POST con 'articolo_id' prenota; con 'annulla' libera l'articolo.
    """
    lista = get_object_or_404(ListaSpesa, share_token=token, is_active=True)

    if request.method == 'POST':
        articolo = get_object_or_404(ArticoloSpesa, pk=request.POST.get('articolo_id'), lista=lista)
        try:
            if request.POST.get('annulla'):
                articolo.annulla_prenotazione()
                messages.info(request, f"Prenotazione di '{articolo.nome}' annullata")
            else:
                form = PrenotazioneArticoloForm(request.POST)
                if not form.is_valid():
                    raise ValidationError("Il nome deve contenere almeno 2 caratteri")
                articolo.prenota(form.cleaned_data['nome_assegnatario'])
                messages.success(request, f"Grazie! Porterai: {articolo.nome}")
        except ValidationError as e:
            messages.error(request, ' '.join(e.messages))
        return redirect('eventi:lista_spesa_pubblica', token=token)

    return render(request, 'eventi/lista_spesa_pubblica.html', {
        'lista': lista,
        'articoli': lista.articoli.all(),
        'form': PrenotazioneArticoloForm(),
    })


# ============================================================================
# API EVENTI
# ============================================================================

def _eventi_visibili(request):
    qs = Evento.objects.filter(is_active=True, archiviato_at__isnull=True)
    if is_portal_admin(request):
        return qs
    if request.user.is_authenticated:
        return qs.exclude(visibilita='admin_only')
    return qs.filter(visibilita='public')


@api_view(["GET", "POST"])
def eventi_api(request):
    """
    GET /api/events/?status=&type=&upcoming=true&limit=
        Senza filtro status il pubblico vede solo gli eventi pubblicati.
    POST /api/events/ (login richiesto)
    """
    if request.method == 'POST':
        require_login(request)
        form = EventoForm(dati_parziali(Evento(), EventoForm, parse_json_body(request)))
        if not form.is_valid():
            form_errors(form)
        evento = form.save(commit=False)
        evento.created_by = request.user
        evento.updated_by = request.user
        evento.save()
        logger.info(f"Evento creato via API: {evento.titolo} ({evento.pk})")
        data = evento.to_dict()
        data['edit_url'] = evento.get_edit_url()
        return json_success(data, status=201)

    qs = _eventi_visibili(request)

    stato = request.GET.get('status')
    if stato and stato != 'all':
        qs = qs.filter(stato=stato)
    elif not stato and not request.user.is_authenticated:
        qs = qs.filter(stato='published')

    tipo = request.GET.get('type')
    if tipo and tipo != 'all':
        qs = qs.filter(tipo=tipo)

    if request.GET.get('upcoming') == 'true':
        qs = qs.filter(data_inizio__gte=timezone.now()).order_by('data_inizio')
    else:
        qs = qs.order_by('-created_at')

    try:
        limite = min(int(request.GET.get('limit', LIMITE_RISULTATI)), 200)
    except ValueError:
        raise ApiError("Parametro limit non valido")

    data = [evento.to_dict() for evento in qs[:limite]]
    return json_success(data, count=len(data))


@api_view(["GET", "PUT", "DELETE"])
def evento_api_detail(request, pk):
    """
    GET    /api/events/<id>/
    PUT    /api/events/<id>/ (login, aggiornamento parziale)
    DELETE /api/events/<id>/ (solo admin, soft delete)
    """
    evento = get_object_or_404(_eventi_visibili(request), pk=pk)

    if request.method == 'GET':
        data = evento.to_dict()
        data['posti_disponibili'] = evento.posti_disponibili
        data['registrazione_aperta'] = evento.registrazione_aperta
        return json_success(data)

    if request.method == 'DELETE':
        require_portal_admin(request)
        evento.soft_delete(user=request.user)
        logger.info(f"Evento {evento.pk} eliminato via API da {request.user}")
        return json_success()

    require_login(request)
    form = EventoForm(dati_parziali(evento, EventoForm, parse_json_body(request)), instance=evento)
    if not form.is_valid():
        form_errors(form)
    evento = form.save(commit=False)
    evento.updated_by = request.user
    evento.save()
    return json_success(evento.to_dict())


@api_view(["GET", "POST"])
def evento_registrazioni_api(request, pk):
    """
    POST /api/events/<id>/register/ (pubblico)
        {nome, telefono, numero_partecipanti, email, messaggio}
    GET  /api/events/<id>/register/ (solo admin) registrazioni + statistiche
    """
    evento = get_object_or_404(Evento, pk=pk, is_active=True)

    if request.method == 'GET':
        require_portal_admin(request)
        registrazioni = evento.registrazioni.filter(is_active=True)
        return json_success(
            [r.to_dict() for r in registrazioni],
            count=registrazioni.count(),
            stats=statistiche_registrazioni(registrazioni),
        )

    if evento.archiviato_at or (evento.visibilita != 'public' and not request.user.is_authenticated):
        raise ApiError("Evento non trovato", status=404)

    form = RegistrazioneForm(parse_json_body(request))
    if not form.is_valid():
        form_errors(form)

    registrazione = evento.registra(
        nome=form.cleaned_data['nome'],
        telefono=form.cleaned_data['telefono'],
        numero_partecipanti=form.cleaned_data['numero_partecipanti'],
        email=form.cleaned_data.get('email', ''),
        messaggio=form.cleaned_data.get('messaggio', ''),
    )
    return json_success(registrazione.to_dict(), status=201, posti_disponibili=evento.posti_disponibili)


@api_view(["GET"])
def miei_eventi_api(request):
    """GET /api/events/my-events/?phone=05XXXXXXXX"""
    telefono = request.GET.get('phone', '')
    if not telefono:
        raise ApiError("Numero di telefono mancante")
    data = eventi_per_telefono(telefono)
    return json_success(data, count=len(data))


@api_view(["GET", "PATCH"])
def evento_token_api(request, token):
    """
    GET   /api/events/token/<token>/
    PATCH /api/events/token/<token>/ (il token vale come autorizzazione)
    """
    evento = Evento.objects.filter(edit_token=token, is_active=True, archiviato_at__isnull=True).first()
    if evento is None:
        raise ApiError("Evento non trovato", status=404)

    if request.method == 'PATCH':
        form = EventoPubblicoForm(
            dati_parziali(evento, EventoPubblicoForm, parse_json_body(request)), instance=evento
        )
        if not form.is_valid():
            form_errors(form)
        evento = form.save()
        logger.info(f"Evento {evento.pk} aggiornato via token")

    data = evento.to_dict()
    if evento.max_partecipanti:
        data['percentuale_presenze'] = round(evento.partecipanti_attuali / evento.max_partecipanti * 100)
    return json_success(data, edit_url=evento.get_edit_url())


# ============================================================================
# API LISTE SPESA
# ============================================================================

def _lista_da_token(token):
    lista = ListaSpesa.objects.filter(share_token=token, is_active=True).first()
    if lista is None:
        raise ApiError("Lista spesa non trovata", status=404)
    return lista


def _articolo(lista, item_id):
    articolo = lista.articoli.filter(pk=item_id).first()
    if articolo is None:
        raise ApiError("Articolo non trovato", status=404)
    return articolo


@api_view(["GET"])
def mia_spesa_api(request):
    """GET /api/grocery/my-grocery/?phone=05XXXXXXXX"""
    telefono = request.GET.get('phone', '')
    if not telefono:
        raise ApiError("Numero di telefono mancante")
    data = liste_per_telefono(telefono)
    return json_success(data, count=len(data))


@api_view(["GET"])
def lista_spesa_api(request, token):
    lista = _lista_da_token(token)
    data = lista.to_dict(con_articoli=True)
    data['share_url'] = request.build_absolute_uri(lista.get_absolute_url())
    return json_success(data)


@api_view(["POST"])
def articoli_spesa_api(request, token):
    """
    POST /api/grocery/<token>/items/  {items: [{nome, quantita, note}, ...]}
    """
    lista = _lista_da_token(token)
    if lista.stato != 'active':
        raise ApiError("La lista spesa è già chiusa")

    voci = parse_json_body(request).get('items')
    if not isinstance(voci, list) or not voci:
        raise ApiError("Indicare almeno un articolo")

    ultimo = lista.articoli.count()
    nuovi = []
    for indice, voce in enumerate(voci):
        nome = str(voce.get('nome', '')).strip() if isinstance(voce, dict) else ''
        if not nome:
            raise ApiError("Ogni articolo deve avere un nome", details={'indice': indice})
        try:
            quantita = int(voce.get('quantita') or 1)
        except (TypeError, ValueError):
            raise ApiError("Quantità non valida", details={'indice': indice})
        if quantita < 1:
            raise ApiError("La quantità deve essere almeno 1", details={'indice': indice})
        nuovi.append(ArticoloSpesa(
            lista=lista,
            nome=nome,
            quantita=quantita,
            note=str(voce.get('note') or '').strip(),
            ordine_visualizzazione=ultimo + indice,
        ))

    ArticoloSpesa.objects.bulk_create(nuovi)
    return json_success([a.to_dict() for a in nuovi], count=len(nuovi), status=201)


@api_view(["DELETE"])
def articolo_spesa_api(request, token, item_id):
    """Elimina un articolo non ancora prenotato."""
    lista = _lista_da_token(token)
    articolo = _articolo(lista, item_id)
    if articolo.prenotato:
        raise ApiError("Non è possibile eliminare un articolo già prenotato")
    articolo.delete()
    return json_success()


@api_view(["POST", "DELETE"])
def prenota_articolo_api(request, token, item_id):
    """
    POST   /api/grocery/<token>/claim/<item_id>/  {nome}
    DELETE /api/grocery/<token>/claim/<item_id>/  annulla la prenotazione
    """
    lista = _lista_da_token(token)
    if lista.stato != 'active':
        raise ApiError("La lista spesa è già chiusa")
    articolo = _articolo(lista, item_id)

    if request.method == 'DELETE':
        articolo.annulla_prenotazione()
        return json_success(articolo.to_dict())

    articolo.prenota(parse_json_body(request).get('nome', ''))
    return json_success(articolo.to_dict())
