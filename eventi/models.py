"""
Models per app eventi.

ARCHITETTURA:
- Evento: evento del comitato (riunione, raccolta fondi, gita...)
- Registrazione: iscrizione pubblica di un genitore a un evento
- ListaSpesa: lista condivisa di cose da portare (per classe/evento)
- ArticoloSpesa: singola voce della lista, prenotabile da un genitore

Gli eventi creati dal sito pubblico sono modificabili senza login
tramite edit_token; le liste tramite share_token.
"""

import logging
import secrets

from django.db import models, transaction
from django.db.models import F
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator, MinValueValidator
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel, SearchableMixin
from core.validators import normalizza_telefono, valida_telefono_israeliano

logger = logging.getLogger(__name__)


def genera_token():
    return secrets.token_urlsafe(24)


# ============================================================================
# EVENTO
# ============================================================================

class Evento(SearchableMixin, BaseModel):
    """
    Evento del comitato genitori.

    Contenuti bilingui: titolo/descrizione/luogo in ebraico,
    con variante *_ru opzionale per il russo.
    """

    # ========== CONTENUTI ==========
    titolo = models.CharField(
        "Titolo", max_length=200, validators=[MinLengthValidator(2)]
    )
    titolo_ru = models.CharField("Titolo (RU)", max_length=200, blank=True)
    descrizione = models.TextField("Descrizione", blank=True)
    descrizione_ru = models.TextField("Descrizione (RU)", blank=True)
    luogo = models.CharField("Luogo", max_length=300, blank=True)
    luogo_ru = models.CharField("Luogo (RU)", max_length=300, blank=True)

    # ========== DATE ==========
    data_inizio = models.DateTimeField("Inizio")
    data_fine = models.DateTimeField("Fine", null=True, blank=True)

    # ========== CLASSIFICAZIONE ==========
    TIPO_CHOICES = [
        ('general', 'Generale'),
        ('meeting', 'Riunione'),
        ('fundraiser', 'Raccolta fondi'),
        ('trip', 'Gita'),
        ('workshop', 'Laboratorio'),
    ]
    tipo = models.CharField("Tipo", max_length=20, choices=TIPO_CHOICES, default='general')

    STATO_CHOICES = [
        ('draft', 'Bozza'),
        ('published', 'Pubblicato'),
        ('ongoing', 'In corso'),
        ('completed', 'Completato'),
        ('cancelled', 'Annullato'),
    ]
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='draft')

    PRIORITA_CHOICES = [
        ('low', 'Bassa'),
        ('normal', 'Normale'),
        ('high', 'Alta'),
        ('urgent', 'Urgente'),
    ]
    priorita = models.CharField("Priorità", max_length=10, choices=PRIORITA_CHOICES, default='normal')

    VISIBILITA_CHOICES = [
        ('public', 'Pubblico'),
        ('committee_only', 'Solo comitato'),
        ('admin_only', 'Solo amministratori'),
    ]
    visibilita = models.CharField(
        "Visibilità", max_length=20, choices=VISIBILITA_CHOICES, default='public'
    )

    # ========== REGISTRAZIONI ==========
    registrazione_attiva = models.BooleanField("Registrazione attiva", default=False)
    scadenza_registrazione = models.DateTimeField("Scadenza registrazione", null=True, blank=True)
    max_partecipanti = models.PositiveIntegerField("Max partecipanti", null=True, blank=True)
    partecipanti_attuali = models.PositiveIntegerField("Partecipanti attuali", default=0)

    # ========== PAGAMENTO E BUDGET ==========
    richiede_pagamento = models.BooleanField("Richiede pagamento", default=False)
    importo_pagamento = models.DecimalField(
        "Importo pagamento", max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )
    budget_allocato = models.DecimalField(
        "Budget allocato", max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )
    budget_speso = models.DecimalField(
        "Budget speso", max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )

    # ========== CREATORE PUBBLICO ==========
    telefono_creatore = models.CharField(
        "Telefono creatore", max_length=15, blank=True, db_index=True,
        help_text="Permette di ritrovare i propri eventi da 'I miei eventi'"
    )
    edit_token = models.CharField(
        "Token modifica", max_length=64, unique=True, default=genera_token, editable=False
    )
    archiviato_at = models.DateTimeField("Archiviato il", null=True, blank=True)

    class Meta:
        verbose_name = "Evento"
        verbose_name_plural = "Eventi"
        ordering = ['-data_inizio']
        indexes = [
            models.Index(fields=['stato']),
            models.Index(fields=['data_inizio']),
        ]

    def __str__(self):
        return self.titolo

    def get_absolute_url(self):
        return reverse('eventi:evento_detail', kwargs={'pk': self.pk})

    def get_edit_url(self):
        return f"/events/edit/{self.edit_token}"

    @classmethod
    def get_search_fields(cls):
        return ['titolo', 'titolo_ru', 'descrizione', 'luogo']

    def get_search_result_display(self):
        return f"{self.titolo} ({timezone.localtime(self.data_inizio).strftime('%d/%m/%Y')})"

    def clean(self):
        if self.data_fine and self.data_inizio and self.data_fine < self.data_inizio:
            raise ValidationError({'data_fine': "La fine non può precedere l'inizio"})
        if self.telefono_creatore:
            self.telefono_creatore = normalizza_telefono(self.telefono_creatore)
            try:
                valida_telefono_israeliano(self.telefono_creatore)
            except ValidationError as e:
                raise ValidationError({'telefono_creatore': e.messages})

    # ========== PROPERTIES ==========

    @property
    def stato_badge_color(self):
        colori = {
            'draft': 'secondary',
            'published': 'primary',
            'ongoing': 'warning',
            'completed': 'success',
            'cancelled': 'dark',
        }
        return colori.get(self.stato, 'secondary')

    @property
    def posti_disponibili(self):
        if not self.max_partecipanti:
            return None
        return max(self.max_partecipanti - self.partecipanti_attuali, 0)

    @property
    def registrazione_aperta(self):
        if not self.registrazione_attiva:
            return False
        if self.scadenza_registrazione and self.scadenza_registrazione < timezone.now():
            return False
        return self.posti_disponibili != 0

    # ========== METODI ==========

    def registra(self, nome, telefono, numero_partecipanti=1, email="", messaggio=""):
        """
        Registra un genitore all'evento.

        Raises:
            ValidationError: registrazione chiusa, scaduta, posti esauriti
                             o telefono già registrato
        """
        if not self.registrazione_attiva:
            raise ValidationError("La registrazione a questo evento è chiusa")

        if self.scadenza_registrazione and self.scadenza_registrazione < timezone.now():
            raise ValidationError("Il termine per la registrazione è scaduto")

        if numero_partecipanti < 1:
            raise ValidationError("Il numero di partecipanti deve essere almeno 1")

        if self.max_partecipanti and self.partecipanti_attuali + numero_partecipanti > self.max_partecipanti:
            logger.warning(f"Evento {self.pk}: posti insufficienti per {numero_partecipanti} partecipanti")
            raise ValidationError("Non ci sono abbastanza posti disponibili")

        telefono = normalizza_telefono(telefono)
        valida_telefono_israeliano(telefono)

        if self.registrazioni.filter(telefono=telefono).exists():
            logger.warning(f"Evento {self.pk}: telefono già registrato")
            raise ValidationError("Questo numero è già registrato all'evento")

        with transaction.atomic():
            registrazione = Registrazione.objects.create(
                evento=self,
                nome=nome.strip(),
                telefono=telefono,
                email=email or "",
                numero_partecipanti=numero_partecipanti,
                messaggio=messaggio or "",
            )
            Evento.objects.filter(pk=self.pk).update(
                partecipanti_attuali=F('partecipanti_attuali') + numero_partecipanti
            )

        self.refresh_from_db(fields=['partecipanti_attuali'])
        logger.info(f"Nuova registrazione {registrazione.pk} all'evento {self.titolo}")
        return registrazione

    def archivia(self, user=None):
        self.archiviato_at = timezone.now()
        if user:
            self.updated_by = user
        self.save(update_fields=['archiviato_at', 'updated_by', 'updated_at'])

    def to_dict(self):
        return {
            'id': str(self.pk),
            'titolo': self.titolo,
            'titolo_ru': self.titolo_ru,
            'descrizione': self.descrizione,
            'descrizione_ru': self.descrizione_ru,
            'luogo': self.luogo,
            'luogo_ru': self.luogo_ru,
            'data_inizio': self.data_inizio.isoformat() if self.data_inizio else None,
            'data_fine': self.data_fine.isoformat() if self.data_fine else None,
            'tipo': self.tipo,
            'stato': self.stato,
            'priorita': self.priorita,
            'visibilita': self.visibilita,
            'registrazione_attiva': self.registrazione_attiva,
            'scadenza_registrazione': (
                self.scadenza_registrazione.isoformat() if self.scadenza_registrazione else None
            ),
            'max_partecipanti': self.max_partecipanti,
            'partecipanti_attuali': self.partecipanti_attuali,
            'richiede_pagamento': self.richiede_pagamento,
            'importo_pagamento': float(self.importo_pagamento) if self.importo_pagamento is not None else None,
            'budget_allocato': float(self.budget_allocato) if self.budget_allocato is not None else None,
            'budget_speso': float(self.budget_speso) if self.budget_speso is not None else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Registrazione(BaseModel):
    """
    Iscrizione di un genitore a un evento (un telefono per evento).
    """

    evento = models.ForeignKey(
        Evento,
        on_delete=models.CASCADE,
        related_name='registrazioni',
        verbose_name="Evento"
    )
    nome = models.CharField("Nome", max_length=100, validators=[MinLengthValidator(2)])
    telefono = models.CharField("Telefono", max_length=15)
    email = models.EmailField("Email", blank=True)
    numero_partecipanti = models.PositiveIntegerField(
        "Numero partecipanti", default=1, validators=[MinValueValidator(1)]
    )
    messaggio = models.TextField("Messaggio", blank=True)

    STATO_CHOICES = [
        ('confirmed', 'Confermata'),
        ('cancelled', 'Annullata'),
    ]
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='confirmed')

    class Meta:
        verbose_name = "Registrazione"
        verbose_name_plural = "Registrazioni"
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['evento', 'telefono'], name='registrazione_unica_per_telefono'),
        ]

    def __str__(self):
        return f"{self.nome} - {self.evento}"

    def to_dict(self):
        return {
            'id': str(self.pk),
            'evento_id': str(self.evento_id),
            'nome': self.nome,
            'telefono': self.telefono,
            'email': self.email,
            'numero_partecipanti': self.numero_partecipanti,
            'messaggio': self.messaggio,
            'stato': self.stato,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


# ============================================================================
# LISTE SPESA
# ============================================================================

class ListaSpesa(SearchableMixin, BaseModel):
    """
    Lista condivisa delle cose da portare a un evento di classe.

    Accessibile pubblicamente via share_token; il creatore la ritrova
    da 'La mia spesa' con il proprio telefono.
    """

    evento = models.ForeignKey(
        Evento,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='liste_spesa',
        verbose_name="Evento collegato"
    )
    nome_classe = models.CharField("Classe", max_length=50, validators=[MinLengthValidator(2)])
    nome_evento = models.CharField("Nome evento", max_length=200, validators=[MinLengthValidator(2)])
    data_evento = models.DateField("Data evento", null=True, blank=True)
    ora_evento = models.TimeField("Ora evento", null=True, blank=True)
    indirizzo = models.CharField("Indirizzo", max_length=300, blank=True)
    nome_organizzatore = models.CharField("Organizzatore", max_length=100, blank=True)
    telefono_creatore = models.CharField("Telefono creatore", max_length=15, blank=True, db_index=True)
    share_token = models.CharField(
        "Token condivisione", max_length=64, unique=True, default=genera_token, editable=False
    )

    STATO_CHOICES = [
        ('active', 'Attiva'),
        ('completed', 'Completata'),
        ('archived', 'Archiviata'),
    ]
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='active')

    class Meta:
        verbose_name = "Lista spesa"
        verbose_name_plural = "Liste spesa"
        ordering = ['-data_evento', '-created_at']

    def __str__(self):
        return f"{self.nome_evento} ({self.nome_classe})"

    def get_absolute_url(self):
        return reverse('eventi:lista_spesa_pubblica', kwargs={'token': self.share_token})

    @classmethod
    def get_search_fields(cls):
        return ['nome_evento', 'nome_classe', 'nome_organizzatore']

    @property
    def articoli_prenotati(self):
        return self.articoli.exclude(nome_assegnatario='').count()

    def to_dict(self, con_articoli=False):
        data = {
            'id': str(self.pk),
            'nome_classe': self.nome_classe,
            'nome_evento': self.nome_evento,
            'data_evento': self.data_evento.isoformat() if self.data_evento else None,
            'ora_evento': self.ora_evento.strftime('%H:%M') if self.ora_evento else None,
            'indirizzo': self.indirizzo,
            'nome_organizzatore': self.nome_organizzatore,
            'share_token': self.share_token,
            'stato': self.stato,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if con_articoli:
            data['articoli'] = [a.to_dict() for a in self.articoli.all()]
        return data


class ArticoloSpesa(BaseModel):
    """
    Voce della lista spesa; un genitore la prenota scrivendo il proprio nome.
    """

    lista = models.ForeignKey(
        ListaSpesa,
        on_delete=models.CASCADE,
        related_name='articoli',
        verbose_name="Lista"
    )
    nome = models.CharField("Articolo", max_length=200)
    quantita = models.PositiveIntegerField("Quantità", default=1)
    note = models.CharField("Note", max_length=300, blank=True)
    nome_assegnatario = models.CharField("Portato da", max_length=100, blank=True)
    assegnato_at = models.DateTimeField("Prenotato il", null=True, blank=True)
    ordine_visualizzazione = models.PositiveIntegerField("Ordine", default=0)

    class Meta:
        verbose_name = "Articolo spesa"
        verbose_name_plural = "Articoli spesa"
        ordering = ['ordine_visualizzazione', 'created_at']

    def __str__(self):
        return f"{self.nome} x{self.quantita}"

    @property
    def prenotato(self):
        return bool(self.nome_assegnatario)

    def prenota(self, nome):
        """
        Prenota l'articolo a nome di un genitore.

        L'update è condizionato a nome_assegnatario vuoto: due prenotazioni
        simultanee non possono andare entrambe a buon fine.
        """
        nome = (nome or "").strip()
        if len(nome) < 2:
            raise ValidationError("Il nome deve contenere almeno 2 caratteri")
        if self.lista.stato != 'active':
            raise ValidationError("La lista spesa è già chiusa")

        now = timezone.now()
        aggiornati = ArticoloSpesa.objects.filter(pk=self.pk, nome_assegnatario='').update(
            nome_assegnatario=nome, assegnato_at=now, updated_at=now
        )
        if not aggiornati:
            raise ValidationError("L'articolo è già stato preso da qualcun altro")

        self.refresh_from_db(fields=['nome_assegnatario', 'assegnato_at', 'updated_at'])
        logger.info(f"Articolo {self.pk} prenotato da {nome}")
        return self

    def annulla_prenotazione(self):
        if self.lista.stato != 'active':
            raise ValidationError("La lista spesa è già chiusa")
        self.nome_assegnatario = ''
        self.assegnato_at = None
        self.save(update_fields=['nome_assegnatario', 'assegnato_at', 'updated_at'])

    def to_dict(self):
        return {
            'id': str(self.pk),
            'nome': self.nome,
            'quantita': self.quantita,
            'note': self.note,
            'nome_assegnatario': self.nome_assegnatario or None,
            'assegnato_at': self.assegnato_at.isoformat() if self.assegnato_at else None,
            'ordine_visualizzazione': self.ordine_visualizzazione,
        }
