"""
Forms per app eventi.
"""

from django import forms
from django.forms import inlineformset_factory
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit, HTML
from crispy_forms.bootstrap import TabHolder, Tab

from core.validators import normalizza_telefono, valida_telefono_israeliano

from .models import Evento, Registrazione, ListaSpesa, ArticoloSpesa


def _pulisci_telefono(valore, obbligatorio=True):
    valore = normalizza_telefono(valore)
    if not valore and not obbligatorio:
        return ""
    valida_telefono_israeliano(valore)
    return valore


# ============================================================================
# EVENTO FORMS
# ============================================================================

class EventoForm(forms.ModelForm):
    """
    Form completo evento (pannello amministrazione).
    """

    class Meta:
        model = Evento
        fields = [
            # Contenuti
            'titolo',
            'titolo_ru',
            'descrizione',
            'descrizione_ru',
            'luogo',
            'luogo_ru',

            # Date
            'data_inizio',
            'data_fine',

            # Classificazione
            'tipo',
            'stato',
            'priorita',
            'visibilita',

            # Registrazioni
            'registrazione_attiva',
            'scadenza_registrazione',
            'max_partecipanti',

            # Pagamento e budget
            'richiede_pagamento',
            'importo_pagamento',
            'budget_allocato',
            'budget_speso',

            'telefono_creatore',
        ]

        widgets = {
            'data_inizio': forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'data_fine': forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'scadenza_registrazione': forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'descrizione': forms.Textarea(attrs={'rows': 4}),
            'descrizione_ru': forms.Textarea(attrs={'rows': 4, 'dir': 'ltr'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            TabHolder(
                Tab(
                    'Contenuti',
                    Row(
                        Column('titolo', css_class='col-md-6'),
                        Column('titolo_ru', css_class='col-md-6'),
                    ),
                    Row(
                        Column('descrizione', css_class='col-md-6'),
                        Column('descrizione_ru', css_class='col-md-6'),
                    ),
                    Row(
                        Column('luogo', css_class='col-md-6'),
                        Column('luogo_ru', css_class='col-md-6'),
                    ),
                ),
                Tab(
                    'Date e Stato',
                    Row(
                        Column('data_inizio', css_class='col-md-6'),
                        Column('data_fine', css_class='col-md-6'),
                    ),
                    Row(
                        Column('tipo', css_class='col-md-3'),
                        Column('stato', css_class='col-md-3'),
                        Column('priorita', css_class='col-md-3'),
                        Column('visibilita', css_class='col-md-3'),
                    ),
                ),
                Tab(
                    'Registrazioni',
                    'registrazione_attiva',
                    Row(
                        Column('scadenza_registrazione', css_class='col-md-6'),
                        Column('max_partecipanti', css_class='col-md-6'),
                    ),
                    'telefono_creatore',
                ),
                Tab(
                    'Pagamento e Budget',
                    Row(
                        Column('richiede_pagamento', css_class='col-md-6'),
                        Column('importo_pagamento', css_class='col-md-6'),
                    ),
                    Row(
                        Column('budget_allocato', css_class='col-md-6'),
                        Column('budget_speso', css_class='col-md-6'),
                    ),
                ),
            ),
            HTML('<hr>'),
            Submit('submit', 'Salva Evento', css_class='btn btn-primary'),
        )

    def clean_telefono_creatore(self):
        return _pulisci_telefono(self.cleaned_data.get('telefono_creatore'), obbligatorio=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('richiede_pagamento') and not cleaned_data.get('importo_pagamento'):
            self.add_error('importo_pagamento', "Indicare l'importo se l'evento richiede un pagamento")
        return cleaned_data


class EventoPubblicoForm(EventoForm):
    """
    Form per la modifica tramite link (edit_token), senza login:
    niente visibilità, budget o telefono creatore.
    """

    class Meta(EventoForm.Meta):
        fields = [
            'titolo',
            'titolo_ru',
            'descrizione',
            'descrizione_ru',
            'luogo',
            'luogo_ru',
            'data_inizio',
            'data_fine',
            'tipo',
            'registrazione_attiva',
            'scadenza_registrazione',
            'max_partecipanti',
        ]

    def __init__(self, *args, **kwargs):
        forms.ModelForm.__init__(self, *args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                'Evento',
                Row(
                    Column('titolo', css_class='col-md-6'),
                    Column('titolo_ru', css_class='col-md-6'),
                ),
                'descrizione',
                'descrizione_ru',
                Row(
                    Column('luogo', css_class='col-md-6'),
                    Column('luogo_ru', css_class='col-md-6'),
                ),
                Row(
                    Column('data_inizio', css_class='col-md-6'),
                    Column('data_fine', css_class='col-md-6'),
                ),
                'tipo',
            ),
            Fieldset(
                'Registrazioni',
                'registrazione_attiva',
                Row(
                    Column('scadenza_registrazione', css_class='col-md-6'),
                    Column('max_partecipanti', css_class='col-md-6'),
                ),
            ),
            Submit('submit', 'Salva modifiche', css_class='btn btn-primary'),
        )

    def clean(self):
        return forms.ModelForm.clean(self)


class RegistrazioneForm(forms.ModelForm):
    """Registrazione pubblica a un evento."""

    class Meta:
        model = Registrazione
        fields = ['nome', 'telefono', 'email', 'numero_partecipanti', 'messaggio']
        widgets = {
            'messaggio': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['numero_partecipanti'].required = False

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Row(
                Column('nome', css_class='col-md-6'),
                Column('telefono', css_class='col-md-6'),
            ),
            Row(
                Column('email', css_class='col-md-8'),
                Column('numero_partecipanti', css_class='col-md-4'),
            ),
            'messaggio',
            Submit('submit', 'Registrati', css_class='btn btn-success'),
        )

    def clean_nome(self):
        nome = self.cleaned_data.get('nome', '').strip()
        if len(nome) < 2:
            raise forms.ValidationError("Il nome deve contenere almeno 2 caratteri")
        return nome

    def clean_telefono(self):
        return _pulisci_telefono(self.cleaned_data.get('telefono'))

    def clean_numero_partecipanti(self):
        return self.cleaned_data.get('numero_partecipanti') or 1


class RicercaTelefonoForm(forms.Form):
    """Form 'I miei eventi' / 'La mia spesa'."""

    phone = forms.CharField(
        label="Telefono",
        max_length=20,
        widget=forms.TextInput(attrs={'placeholder': '05X-XXXXXXX', 'inputmode': 'tel'}),
    )

    def clean_phone(self):
        return _pulisci_telefono(self.cleaned_data.get('phone'))


# ============================================================================
# LISTA SPESA FORMS
# ============================================================================

class ListaSpesaForm(forms.ModelForm):

    class Meta:
        model = ListaSpesa
        fields = [
            'evento',
            'nome_classe',
            'nome_evento',
            'data_evento',
            'ora_evento',
            'indirizzo',
            'nome_organizzatore',
            'telefono_creatore',
            'stato',
        ]
        widgets = {
            'data_evento': forms.DateInput(attrs={'type': 'date'}),
            'ora_evento': forms.TimeInput(attrs={'type': 'time'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['evento'].queryset = Evento.objects.filter(is_active=True)

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Row(
                Column('nome_evento', css_class='col-md-6'),
                Column('nome_classe', css_class='col-md-6'),
            ),
            Row(
                Column('data_evento', css_class='col-md-4'),
                Column('ora_evento', css_class='col-md-4'),
                Column('stato', css_class='col-md-4'),
            ),
            'indirizzo',
            Row(
                Column('nome_organizzatore', css_class='col-md-6'),
                Column('telefono_creatore', css_class='col-md-6'),
            ),
            'evento',
        )

    def clean_telefono_creatore(self):
        return _pulisci_telefono(self.cleaned_data.get('telefono_creatore'), obbligatorio=False)


ArticoloSpesaFormSet = inlineformset_factory(
    ListaSpesa,
    ArticoloSpesa,
    fields=['nome', 'quantita', 'note', 'ordine_visualizzazione'],
    extra=3,
    can_delete=True,
)


class PrenotazioneArticoloForm(forms.Form):
    nome_assegnatario = forms.CharField(label="Il tuo nome", min_length=2, max_length=100)
