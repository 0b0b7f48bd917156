"""
Models per app prom (festa di fine anno).

ARCHITETTURA:
- EventoProm: il progetto festa, con budget complessivo e finestra di votazione
- VoceBudget: allocato/speso per categoria (una voce per categoria)
- PreventivoFornitore: offerta di un fornitore, confrontabile per categoria
- Voto: preferenza espressa da un genitore su un preventivo finalista

I votanti sono identificati solo dallo sha256 del loro identificativo
(telefono o email), mai in chiaro.
"""

import logging

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel, SearchableMixin
from core.validators import hash_identificativo

logger = logging.getLogger(__name__)


CATEGORIA_CHOICES = [
    ('venue', 'Location'),
    ('catering', 'Catering'),
    ('dj', 'DJ / Musica'),
    ('photography', 'Fotografia'),
    ('decorations', 'Decorazioni'),
    ('transportation', 'Trasporti'),
    ('entertainment', 'Intrattenimento'),
    ('shirts', 'Magliette'),
    ('sound_lighting', 'Audio e luci'),
    ('yearbook', 'Annuario'),
    ('recording', 'Registrazione'),
    ('scenery', 'Scenografia'),
    ('flowers', 'Fiori'),
    ('security', 'Sicurezza'),
    ('electrician', 'Elettricista'),
    ('moving', 'Traslochi'),
    ('video_editing', 'Montaggio video'),
    ('drums', 'Percussioni'),
    ('choreography', 'Coreografia'),
    ('other', 'Altro'),
]


def _iso(valore):
    return valore.isoformat() if valore else None


# ============================================================================
# EVENTO PROM
# ============================================================================

class EventoProm(SearchableMixin, BaseModel):
    """
    Festa di fine anno: budget, preventivi fornitori e votazione dei genitori.
    """

    STATO_CHOICES = [
        ('planning', 'In pianificazione'),
        ('voting', 'Votazione'),
        ('confirmed', 'Confermato'),
        ('completed', 'Concluso'),
        ('cancelled', 'Annullato'),
    ]

    titolo = models.CharField("Titolo", max_length=200, validators=[MinLengthValidator(2)])
    titolo_ru = models.CharField("Titolo (RU)", max_length=200, blank=True)
    descrizione = models.TextField("Descrizione", blank=True)
    descrizione_ru = models.TextField("Descrizione (RU)", blank=True)

    data_evento = models.DateField("Data evento", null=True, blank=True)
    ora_evento = models.TimeField("Ora", null=True, blank=True)
    nome_location = models.CharField("Location", max_length=200, blank=True)
    indirizzo_location = models.CharField("Indirizzo location", max_length=300, blank=True)

    budget_totale = models.DecimalField(
        "Budget totale", max_digits=12, decimal_places=2, default=0,
        validators=[MinValueValidator(0)]
    )
    numero_studenti = models.PositiveIntegerField("Numero studenti", default=0)

    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='planning')

    # ========== VOTAZIONE ==========
    votazione_attiva = models.BooleanField("Votazione attiva", default=False)
    inizio_votazione = models.DateTimeField("Inizio votazione", null=True, blank=True)
    fine_votazione = models.DateTimeField("Fine votazione", null=True, blank=True)

    class Meta:
        verbose_name = "Evento Prom"
        verbose_name_plural = "Eventi Prom"
        ordering = ['-data_evento', '-created_at']

    def __str__(self):
        return self.titolo

    def get_absolute_url(self):
        return reverse('prom:prom_detail', kwargs={'pk': self.pk})

    def get_voting_url(self):
        return reverse('prom:prom_votazione', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['titolo', 'titolo_ru', 'nome_location']

    @property
    def stato_badge_color(self):
        colors = {
            'planning': 'secondary',
            'voting': 'info',
            'confirmed': 'primary',
            'completed': 'success',
            'cancelled': 'danger',
        }
        return colors.get(self.stato, 'secondary')

    def clean(self):
        if self.inizio_votazione and self.fine_votazione and self.fine_votazione < self.inizio_votazione:
            raise ValidationError({'fine_votazione': "La fine votazione deve seguire l'inizio"})

    # ========== VOTAZIONE ==========

    @property
    def votazione_aperta(self):
        if not self.votazione_attiva:
            return False
        now = timezone.now()
        if self.inizio_votazione and self.inizio_votazione > now:
            return False
        if self.fine_votazione and self.fine_votazione < now:
            return False
        return True

    def apri_votazione(self, user=None):
        if self.stato in ('completed', 'cancelled'):
            raise ValidationError("Non è possibile aprire la votazione per un evento chiuso")
        if self.votazione_attiva:
            raise ValidationError("La votazione è già aperta")
        if not self.preventivi.filter(is_active=True, finalista=True).exists():
            raise ValidationError("Segnare almeno un preventivo come finalista prima di aprire la votazione")

        self.votazione_attiva = True
        self.stato = 'voting'
        if user:
            self.updated_by = user
        self.save(update_fields=['votazione_attiva', 'stato', 'updated_by', 'updated_at'])
        logger.info(f"Votazione aperta per prom {self.pk}")

    def chiudi_votazione(self, user=None):
        if not self.votazione_attiva:
            raise ValidationError("La votazione non è aperta")

        self.votazione_attiva = False
        if self.stato == 'voting':
            self.stato = 'planning'
        if user:
            self.updated_by = user
        self.save(update_fields=['votazione_attiva', 'stato', 'updated_by', 'updated_at'])
        logger.info(f"Votazione chiusa per prom {self.pk}")

    def registra_voto(self, preventivo, identificativo, tipo_voto, nome="", commento=""):
        """
        Registra (o aggiorna) il voto di un genitore su un preventivo finalista.

        Returns:
            tuple: (voto, creato)

        Raises:
            ValidationError: votazione chiusa o fuori finestra, preventivo
                             non finalista, identificativo mancante
        """
        if not self.votazione_attiva:
            raise ValidationError("La votazione non è attiva")

        now = timezone.now()
        if self.inizio_votazione and self.inizio_votazione > now:
            raise ValidationError("La votazione non è ancora iniziata")
        if self.fine_votazione and self.fine_votazione < now:
            raise ValidationError("La votazione è terminata")

        if preventivo.prom_id != self.pk or not preventivo.finalista or not preventivo.is_active:
            raise ValidationError("Non è possibile votare questa opzione")

        if not (identificativo or "").strip():
            raise ValidationError("Identificativo del votante obbligatorio")

        if tipo_voto not in dict(Voto.TIPO_CHOICES):
            raise ValidationError("Tipo di voto non valido")

        voto, creato = Voto.objects.update_or_create(
            preventivo=preventivo,
            identificativo_votante=hash_identificativo(identificativo),
            defaults={
                'prom': self,
                'tipo_voto': tipo_voto,
                'nome_votante': (nome or "").strip(),
                'commento': (commento or "").strip(),
            },
        )
        logger.info(f"Voto {'registrato' if creato else 'aggiornato'} su preventivo {preventivo.pk}")
        return voto, creato

    def to_dict(self):
        return {
            'id': str(self.pk),
            'titolo': self.titolo,
            'titolo_ru': self.titolo_ru,
            'descrizione': self.descrizione,
            'descrizione_ru': self.descrizione_ru,
            'data_evento': _iso(self.data_evento),
            'ora_evento': self.ora_evento.strftime('%H:%M') if self.ora_evento else None,
            'nome_location': self.nome_location,
            'indirizzo_location': self.indirizzo_location,
            'budget_totale': float(self.budget_totale or 0),
            'numero_studenti': self.numero_studenti,
            'stato': self.stato,
            'votazione_attiva': self.votazione_attiva,
            'inizio_votazione': _iso(self.inizio_votazione),
            'fine_votazione': _iso(self.fine_votazione),
            'created_at': _iso(self.created_at),
        }


# ============================================================================
# BUDGET
# ============================================================================

class VoceBudget(BaseModel):

    prom = models.ForeignKey(
        EventoProm,
        on_delete=models.CASCADE,
        related_name='voci_budget',
        verbose_name="Prom"
    )
    categoria = models.CharField("Categoria", max_length=30, choices=CATEGORIA_CHOICES)
    importo_allocato = models.DecimalField(
        "Allocato", max_digits=12, decimal_places=2, default=0,
        validators=[MinValueValidator(0)]
    )
    importo_speso = models.DecimalField(
        "Speso", max_digits=12, decimal_places=2, default=0,
        validators=[MinValueValidator(0)]
    )
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Voce di budget"
        verbose_name_plural = "Voci di budget"
        ordering = ['categoria']
        constraints = [
            models.UniqueConstraint(fields=['prom', 'categoria'], name='voce_budget_unica_per_categoria'),
        ]

    def __str__(self):
        return f"{self.prom} - {self.get_categoria_display()}"

    def to_dict(self):
        return {
            'id': str(self.pk),
            'prom_id': str(self.prom_id),
            'categoria': self.categoria,
            'etichetta_categoria': self.get_categoria_display(),
            'importo_allocato': float(self.importo_allocato or 0),
            'importo_speso': float(self.importo_speso or 0),
            'note': self.note,
        }


# ============================================================================
# PREVENTIVI
# ============================================================================

class PreventivoFornitore(SearchableMixin, BaseModel):
    """
    Preventivo di un fornitore per una categoria del prom.

    I finalisti sono mostrati ai genitori nella pagina di votazione;
    telefono, email e note admin restano riservati agli amministratori.
    """

    DISPONIBILITA_CHOICES = [
        ('available', 'Disponibile'),
        ('unavailable', 'Non disponibile'),
        ('pending', 'In attesa'),
        ('unknown', 'Sconosciuta'),
    ]

    prom = models.ForeignKey(
        EventoProm,
        on_delete=models.CASCADE,
        related_name='preventivi',
        verbose_name="Prom"
    )
    categoria = models.CharField("Categoria", max_length=30, choices=CATEGORIA_CHOICES)

    # ========== FORNITORE ==========
    nome_fornitore = models.CharField("Fornitore", max_length=200, validators=[MinLengthValidator(2)])
    contatto = models.CharField("Referente", max_length=200, blank=True)
    telefono = models.CharField("Telefono", max_length=20, blank=True)
    email = models.EmailField("Email", blank=True)

    # ========== PREZZO ==========
    prezzo_totale = models.DecimalField(
        "Prezzo totale", max_digits=12, decimal_places=2, default=0,
        validators=[MinValueValidator(0)]
    )
    prezzo_per_studente = models.DecimalField(
        "Prezzo per studente", max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )
    note_prezzo = models.TextField("Note sul prezzo", blank=True)
    servizi_inclusi = models.JSONField("Servizi inclusi", default=list, blank=True)

    # ========== DISPONIBILITA ==========
    data_disponibilita = models.DateField("Data disponibilità", null=True, blank=True)
    stato_disponibilita = models.CharField(
        "Disponibilità", max_length=20, choices=DISPONIBILITA_CHOICES, default='unknown'
    )
    note_disponibilita = models.TextField("Note disponibilità", blank=True)

    # ========== VALUTAZIONE ==========
    pro = models.TextField("Pro", blank=True)
    contro = models.TextField("Contro", blank=True)
    valutazione = models.PositiveSmallIntegerField(
        "Valutazione", null=True, blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    note_admin = models.TextField("Note admin", blank=True)
    allegati_url = models.JSONField("Allegati", default=list, blank=True)

    # ========== VISUALIZZAZIONE ==========
    selezionato = models.BooleanField("Selezionato", default=False)
    finalista = models.BooleanField("Finalista", default=False)
    ordine_visualizzazione = models.IntegerField("Ordine", default=0)
    etichetta = models.CharField("Etichetta", max_length=100, blank=True)

    class Meta:
        verbose_name = "Preventivo fornitore"
        verbose_name_plural = "Preventivi fornitori"
        ordering = ['ordine_visualizzazione', 'created_at']
        indexes = [
            models.Index(fields=['prom', 'categoria']),
        ]

    def __str__(self):
        return f"{self.nome_fornitore} ({self.get_categoria_display()})"

    def get_absolute_url(self):
        return reverse('prom:preventivo_update', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['nome_fornitore', 'contatto', 'note_prezzo']

    @property
    def stato_badge_color(self):
        colors = {
            'available': 'success',
            'unavailable': 'danger',
            'pending': 'warning',
            'unknown': 'secondary',
        }
        return colors.get(self.stato_disponibilita, 'secondary')

    def to_dict(self):
        return {
            'id': str(self.pk),
            'prom_id': str(self.prom_id),
            'categoria': self.categoria,
            'etichetta_categoria': self.get_categoria_display(),
            'nome_fornitore': self.nome_fornitore,
            'contatto': self.contatto,
            'telefono': self.telefono,
            'email': self.email,
            'prezzo_totale': float(self.prezzo_totale or 0),
            'prezzo_per_studente': (
                float(self.prezzo_per_studente) if self.prezzo_per_studente is not None else None
            ),
            'note_prezzo': self.note_prezzo,
            'servizi_inclusi': self.servizi_inclusi or [],
            'data_disponibilita': _iso(self.data_disponibilita),
            'stato_disponibilita': self.stato_disponibilita,
            'note_disponibilita': self.note_disponibilita,
            'pro': self.pro,
            'contro': self.contro,
            'valutazione': self.valutazione,
            'note_admin': self.note_admin,
            'allegati_url': self.allegati_url or [],
            'selezionato': self.selezionato,
            'finalista': self.finalista,
            'ordine_visualizzazione': self.ordine_visualizzazione,
            'etichetta': self.etichetta,
            'created_at': _iso(self.created_at),
        }


# ============================================================================
# VOTI
# ============================================================================

class Voto(BaseModel):
    """
    Voto di un genitore su un preventivo finalista.

    Un votante ha un solo voto per preventivo: un nuovo voto sostituisce
    il precedente.
    """

    TIPO_CHOICES = [
        ('prefer', 'Preferisco'),
        ('neutral', 'Neutrale'),
        ('oppose', 'Contrario'),
    ]

    prom = models.ForeignKey(
        EventoProm,
        on_delete=models.CASCADE,
        related_name='voti',
        verbose_name="Prom"
    )
    preventivo = models.ForeignKey(
        PreventivoFornitore,
        on_delete=models.CASCADE,
        related_name='voti',
        verbose_name="Preventivo"
    )
    identificativo_votante = models.CharField("Identificativo votante (sha256)", max_length=64)
    nome_votante = models.CharField("Nome", max_length=100, blank=True)
    tipo_voto = models.CharField("Voto", max_length=10, choices=TIPO_CHOICES)
    commento = models.TextField("Commento", blank=True)

    class Meta:
        verbose_name = "Voto"
        verbose_name_plural = "Voti"
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['preventivo', 'identificativo_votante'], name='voto_unico_per_votante'
            ),
        ]

    def __str__(self):
        return f"{self.get_tipo_voto_display()} - {self.preventivo}"

    def to_dict(self):
        return {
            'id': str(self.pk),
            'prom_id': str(self.prom_id),
            'preventivo_id': str(self.preventivo_id),
            'identificativo_votante': self.identificativo_votante,
            'nome_votante': self.nome_votante,
            'tipo_voto': self.tipo_voto,
            'commento': self.commento,
            'created_at': _iso(self.created_at),
        }
