"""
Forms per app comunicazioni.
"""

from django import forms
from django.forms import modelformset_factory
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit, HTML

from .models import GruppoClasse, ImpostazioniApp, MessaggioUrgente


class MessaggioUrgenteForm(forms.ModelForm):

    class Meta:
        model = MessaggioUrgente
        fields = [
            'tipo',
            'titolo_he',
            'titolo_ru',
            'descrizione_he',
            'descrizione_ru',
            'testo_condivisione_he',
            'testo_condivisione_ru',
            'icona',
            'colore',
            'attivo',
            'data_inizio',
            'data_fine',
        ]
        widgets = {
            'titolo_he': forms.TextInput(attrs={'dir': 'rtl'}),
            'descrizione_he': forms.Textarea(attrs={'rows': 2, 'dir': 'rtl'}),
            'descrizione_ru': forms.Textarea(attrs={'rows': 2}),
            'testo_condivisione_he': forms.Textarea(attrs={'rows': 2, 'dir': 'rtl'}),
            'testo_condivisione_ru': forms.Textarea(attrs={'rows': 2}),
            'colore': forms.TextInput(attrs={'type': 'color'}),
            'data_inizio': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'data_fine': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        }


MessaggioUrgenteFormSet = modelformset_factory(
    MessaggioUrgente,
    form=MessaggioUrgenteForm,
    extra=1,
    can_delete=True,
)


class ImpostazioniForm(forms.ModelForm):

    class Meta:
        model = ImpostazioniApp
        fields = [
            'nome_comitato',
            'anno_scolastico',
            'email_contatto',
            'telefono_contatto',
            'url_whatsapp',
            'banner_attivo',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                'Comitato',
                Row(
                    Column('nome_comitato', css_class='col-md-8'),
                    Column('anno_scolastico', css_class='col-md-4'),
                ),
            ),
            Fieldset(
                'Contatti',
                Row(
                    Column('email_contatto', css_class='col-md-6'),
                    Column('telefono_contatto', css_class='col-md-6'),
                ),
                'url_whatsapp',
            ),
            'banner_attivo',
            HTML('<hr>'),
            Submit('submit', 'Salva impostazioni', css_class='btn btn-primary'),
        )


class GruppoClasseForm(forms.ModelForm):

    class Meta:
        model = GruppoClasse
        fields = ['classe', 'emoji', 'url_whatsapp', 'colore', 'ordine_visualizzazione']
        widgets = {
            'colore': forms.TextInput(attrs={'type': 'color'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Row(
                Column('classe', css_class='col-md-3'),
                Column('emoji', css_class='col-md-3'),
                Column('colore', css_class='col-md-3'),
                Column('ordine_visualizzazione', css_class='col-md-3'),
            ),
            'url_whatsapp',
            Submit('submit', 'Salva gruppo', css_class='btn btn-primary'),
        )
