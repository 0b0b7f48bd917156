"""
Forms per app prom.
"""

from django import forms
from django.forms import inlineformset_factory
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit, HTML
from crispy_forms.bootstrap import TabHolder, Tab

from core.forms import ListaRigheField

from .models import EventoProm, VoceBudget, PreventivoFornitore, Voto


# ============================================================================
# EVENTO PROM
# ============================================================================

class EventoPromForm(forms.ModelForm):

    class Meta:
        model = EventoProm
        fields = [
            'titolo',
            'titolo_ru',
            'descrizione',
            'descrizione_ru',
            'data_evento',
            'ora_evento',
            'nome_location',
            'indirizzo_location',
            'budget_totale',
            'numero_studenti',
            'stato',
            'votazione_attiva',
            'inizio_votazione',
            'fine_votazione',
        ]
        widgets = {
            'data_evento': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'ora_evento': forms.TimeInput(attrs={'type': 'time'}, format='%H:%M'),
            'inizio_votazione': forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'fine_votazione': forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'descrizione': forms.Textarea(attrs={'rows': 3}),
            'descrizione_ru': forms.Textarea(attrs={'rows': 3, 'dir': 'ltr'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            TabHolder(
                Tab(
                    'Evento',
                    Row(
                        Column('titolo', css_class='col-md-6'),
                        Column('titolo_ru', css_class='col-md-6'),
                    ),
                    Row(
                        Column('descrizione', css_class='col-md-6'),
                        Column('descrizione_ru', css_class='col-md-6'),
                    ),
                    Row(
                        Column('data_evento', css_class='col-md-4'),
                        Column('ora_evento', css_class='col-md-4'),
                        Column('stato', css_class='col-md-4'),
                    ),
                    Row(
                        Column('nome_location', css_class='col-md-6'),
                        Column('indirizzo_location', css_class='col-md-6'),
                    ),
                ),
                Tab(
                    'Budget',
                    Row(
                        Column('budget_totale', css_class='col-md-6'),
                        Column('numero_studenti', css_class='col-md-6'),
                    ),
                ),
                Tab(
                    'Votazione',
                    'votazione_attiva',
                    Row(
                        Column('inizio_votazione', css_class='col-md-6'),
                        Column('fine_votazione', css_class='col-md-6'),
                    ),
                ),
            ),
            HTML('<hr>'),
            Submit('submit', 'Salva', css_class='btn btn-primary'),
        )


class VoceBudgetForm(forms.ModelForm):

    class Meta:
        model = VoceBudget
        fields = ['categoria', 'importo_allocato', 'importo_speso', 'note']


# ============================================================================
# PREVENTIVI
# ============================================================================

class PreventivoFornitoreForm(forms.ModelForm):
    """
    Preventivo fornitore (solo admin).
    """

    servizi_inclusi = ListaRigheField(
        label="Servizi inclusi", required=False,
        widget=forms.Textarea(attrs={'rows': 3, 'placeholder': 'Un servizio per riga'}),
    )
    allegati_url = ListaRigheField(
        label="Allegati (URL)", required=False,
        widget=forms.Textarea(attrs={'rows': 2, 'placeholder': 'Un link per riga'}),
    )

    class Meta:
        model = PreventivoFornitore
        fields = [
            'categoria',
            'nome_fornitore',
            'contatto',
            'telefono',
            'email',
            'prezzo_totale',
            'prezzo_per_studente',
            'note_prezzo',
            'servizi_inclusi',
            'data_disponibilita',
            'stato_disponibilita',
            'note_disponibilita',
            'pro',
            'contro',
            'valutazione',
            'note_admin',
            'allegati_url',
            'selezionato',
            'finalista',
            'ordine_visualizzazione',
            'etichetta',
        ]
        widgets = {
            'data_disponibilita': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'note_prezzo': forms.Textarea(attrs={'rows': 2}),
            'note_disponibilita': forms.Textarea(attrs={'rows': 2}),
            'pro': forms.Textarea(attrs={'rows': 3}),
            'contro': forms.Textarea(attrs={'rows': 3}),
            'note_admin': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                'Fornitore',
                Row(
                    Column('nome_fornitore', css_class='col-md-6'),
                    Column('categoria', css_class='col-md-6'),
                ),
                Row(
                    Column('contatto', css_class='col-md-4'),
                    Column('telefono', css_class='col-md-4'),
                    Column('email', css_class='col-md-4'),
                ),
            ),
            Fieldset(
                'Prezzo',
                Row(
                    Column('prezzo_totale', css_class='col-md-6'),
                    Column('prezzo_per_studente', css_class='col-md-6'),
                ),
                'note_prezzo',
                'servizi_inclusi',
            ),
            Fieldset(
                'Disponibilità',
                Row(
                    Column('data_disponibilita', css_class='col-md-6'),
                    Column('stato_disponibilita', css_class='col-md-6'),
                ),
                'note_disponibilita',
            ),
            Fieldset(
                'Valutazione',
                Row(
                    Column('pro', css_class='col-md-6'),
                    Column('contro', css_class='col-md-6'),
                ),
                Row(
                    Column('valutazione', css_class='col-md-4'),
                    Column('etichetta', css_class='col-md-4'),
                    Column('ordine_visualizzazione', css_class='col-md-4'),
                ),
                Row(
                    Column('finalista', css_class='col-md-6'),
                    Column('selezionato', css_class='col-md-6'),
                ),
                'note_admin',
                'allegati_url',
            ),
            Submit('submit', 'Salva preventivo', css_class='btn btn-primary'),
        )


# ============================================================================
# VOTAZIONE
# ============================================================================

class VotoForm(forms.Form):
    """Voto pubblico su un preventivo finalista."""

    preventivo = forms.ModelChoiceField(
        queryset=PreventivoFornitore.objects.none(),
        widget=forms.HiddenInput,
    )
    identificativo = forms.CharField(
        label="Telefono o email",
        max_length=200,
        help_text="Serve solo a evitare voti doppi, non viene salvato in chiaro",
    )
    nome = forms.CharField(label="Nome (facoltativo)", max_length=100, required=False)
    tipo_voto = forms.ChoiceField(label="Voto", choices=Voto.TIPO_CHOICES, widget=forms.RadioSelect)
    commento = forms.CharField(label="Commento", required=False, widget=forms.Textarea(attrs={'rows': 2}))

    def __init__(self, *args, prom=None, **kwargs):
        super().__init__(*args, **kwargs)
        if prom is not None:
            self.fields['preventivo'].queryset = prom.preventivi.filter(is_active=True, finalista=True)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            'preventivo',
            Row(
                Column('identificativo', css_class='col-md-6'),
                Column('nome', css_class='col-md-6'),
            ),
            'tipo_voto',
            'commento',
            Submit('submit', 'Vota', css_class='btn btn-success'),
        )


VoceBudgetFormSet = inlineformset_factory(
    EventoProm,
    VoceBudget,
    form=VoceBudgetForm,
    extra=2,
    can_delete=True,
)
