"""
Forms per app protocolli.
"""

from django import forms
from django.utils import timezone
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit, HTML

from core.forms import AzioniField, ListaRigheField

from .models import Protocollo


class ProtocolloForm(forms.ModelForm):
    """
    Editor del verbale. Partecipanti e allegati uno per riga,
    azioni come `azione | responsabile | scadenza`.
    """

    partecipanti = ListaRigheField(
        label="Partecipanti",
        widget=forms.Textarea(attrs={'rows': 4, 'placeholder': 'Un partecipante per riga'}),
    )
    azioni = AzioniField(
        label="Azioni", required=False,
        widget=forms.Textarea(attrs={'rows': 4, 'placeholder': 'Azione | Responsabile | 2025-06-30'}),
    )
    allegati_url = ListaRigheField(
        label="Allegati (URL)", required=False,
        widget=forms.Textarea(attrs={'rows': 2, 'placeholder': 'Un link per riga'}),
    )

    class Meta:
        model = Protocollo
        fields = [
            'numero_protocollo',
            'titolo',
            'data_protocollo',
            'tipo',
            'partecipanti',
            'ordine_del_giorno',
            'decisioni',
            'azioni',
            'documento_url',
            'allegati_url',
            'pubblico',
            'approvato',
        ]
        widgets = {
            'data_protocollo': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'ordine_del_giorno': forms.Textarea(attrs={'rows': 4}),
            'decisioni': forms.Textarea(attrs={'rows': 5}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.form_id = 'protocollo-form'
        self.helper.layout = Layout(
            Fieldset(
                'Riunione',
                Row(
                    Column('titolo', css_class='col-md-6'),
                    Column('numero_protocollo', css_class='col-md-2'),
                    Column('data_protocollo', css_class='col-md-2'),
                    Column('tipo', css_class='col-md-2'),
                ),
                'partecipanti',
            ),
            Fieldset(
                'Contenuto',
                'ordine_del_giorno',
                'decisioni',
                'azioni',
            ),
            Fieldset(
                'Documenti',
                'documento_url',
                'allegati_url',
            ),
            Row(
                Column('pubblico', css_class='col-md-6'),
                Column('approvato', css_class='col-md-6'),
            ),
            HTML('<hr>'),
            Submit('submit', 'Salva protocollo', css_class='btn btn-primary'),
        )

    def save(self, commit=True):
        protocollo = super().save(commit=False)
        if protocollo.approvato and not protocollo.approvato_at:
            protocollo.approvato_at = timezone.now()
        elif not protocollo.approvato:
            protocollo.approvato_at = None
        if commit:
            protocollo.save()
        return protocollo
