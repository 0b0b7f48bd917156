"""
Forms per app spese.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit

from eventi.models import Evento

from .models import Spesa


class SpesaForm(forms.ModelForm):

    class Meta:
        model = Spesa
        fields = [
            'titolo',
            'descrizione',
            'importo',
            'tipo',
            'categoria',
            'data_spesa',
            'metodo_pagamento',
            'fornitore',
            'ricevuta_url',
            'evento',
            'note',
        ]
        widgets = {
            'data_spesa': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'descrizione': forms.Textarea(attrs={'rows': 3}),
            'note': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['evento'].queryset = Evento.objects.filter(is_active=True, archiviato_at__isnull=True)
        self.fields['evento'].required = False

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                'Movimento',
                Row(
                    Column('tipo', css_class='col-md-4'),
                    Column('importo', css_class='col-md-4'),
                    Column('data_spesa', css_class='col-md-4'),
                ),
                'titolo',
                'descrizione',
                Row(
                    Column('categoria', css_class='col-md-6'),
                    Column('metodo_pagamento', css_class='col-md-6'),
                ),
            ),
            Fieldset(
                'Dettagli',
                Row(
                    Column('fornitore', css_class='col-md-6'),
                    Column('evento', css_class='col-md-6'),
                ),
                'ricevuta_url',
                'note',
            ),
            Submit('submit', 'Salva', css_class='btn btn-primary'),
        )
