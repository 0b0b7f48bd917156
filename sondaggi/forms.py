"""
Forms per app sondaggi.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit

from .models import COMPETENZE_CHOICES, RispostaCompetenze


class RispostaCompetenzeForm(forms.ModelForm):
    """
    Sondaggio pubblico. Tutti i dati di contatto sono facoltativi,
    serve almeno una competenza.
    """

    competenze = forms.MultipleChoiceField(
        label="In cosa puoi aiutare?",
        choices=COMPETENZE_CHOICES,
        widget=forms.CheckboxSelectMultiple,
        error_messages={'required': "Seleziona almeno una competenza"},
    )

    class Meta:
        model = RispostaCompetenze
        fields = [
            'nome_genitore',
            'telefono',
            'email',
            'competenze',
            'altra_specialita',
            'preferenza_contatto',
            'classe_studente',
            'note',
            'lingua_invio',
        ]
        widgets = {
            'note': forms.Textarea(attrs={'rows': 3}),
            'lingua_invio': forms.HiddenInput,
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['lingua_invio'].required = False

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                'Contatti (facoltativi)',
                Row(
                    Column('nome_genitore', css_class='col-md-4'),
                    Column('telefono', css_class='col-md-4'),
                    Column('email', css_class='col-md-4'),
                ),
                Row(
                    Column('preferenza_contatto', css_class='col-md-6'),
                    Column('classe_studente', css_class='col-md-6'),
                ),
            ),
            Fieldset(
                'Competenze',
                'competenze',
                'altra_specialita',
            ),
            'note',
            'lingua_invio',
            Submit('submit', 'Invia', css_class='btn btn-primary'),
        )

    def clean_lingua_invio(self):
        return self.cleaned_data.get('lingua_invio') or 'he'
