"""
Forms per app attivita.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit, HTML
from django_select2.forms import Select2MultipleWidget, Select2Widget

from core.forms import ListaRigheField
from eventi.models import Evento

from .models import Attivita, Tag


class AttivitaForm(forms.ModelForm):
    """
    Form attività con selezione tag (Select2) e allegati uno per riga.
    """

    tags = forms.ModelMultipleChoiceField(
        label="Tag",
        queryset=Tag.objects.filter(is_active=True).order_by('ordine_visualizzazione', 'nome_he'),
        widget=Select2MultipleWidget(attrs={
            'data-placeholder': 'Seleziona tag...',
            'class': 'form-control'
        }),
        required=False,
    )
    allegati_url = ListaRigheField(
        label="Allegati (URL)", required=False,
        widget=forms.Textarea(attrs={'rows': 2, 'placeholder': 'Un link per riga'}),
    )

    class Meta:
        model = Attivita
        fields = [
            'titolo',
            'descrizione',
            'responsabile_nome',
            'responsabile_telefono',
            'scadenza',
            'data_promemoria',
            'priorita',
            'stato',
            'evento',
            'attivita_padre',
            'promemoria_automatico',
            'allegati_url',
        ]
        widgets = {
            'scadenza': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'data_promemoria': forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
            'descrizione': forms.Textarea(attrs={'rows': 3}),
            'evento': Select2Widget(attrs={'class': 'form-select'}),
            'attivita_padre': Select2Widget(attrs={'class': 'form-select'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.fields['scadenza'].required = True
        self.fields['evento'].queryset = Evento.objects.filter(is_active=True).order_by('-data_inizio')
        padri = Attivita.objects.filter(is_active=True).exclude(stato__in=['completed', 'cancelled'])
        if self.instance.pk:
            padri = padri.exclude(pk=self.instance.pk)
            self.fields['tags'].initial = list(self.instance.tags.filter(is_active=True))
        self.fields['attivita_padre'].queryset = padri

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.form_id = 'attivita-form'
        self.helper.layout = Layout(
            Fieldset(
                'Attività',
                'titolo',
                'descrizione',
                Row(
                    Column('priorita', css_class='col-md-4'),
                    Column('stato', css_class='col-md-4'),
                    Column('scadenza', css_class='col-md-4'),
                ),
                'tags',
            ),
            Fieldset(
                'Responsabile',
                Row(
                    Column('responsabile_nome', css_class='col-md-6'),
                    Column('responsabile_telefono', css_class='col-md-6'),
                ),
                Row(
                    Column('promemoria_automatico', css_class='col-md-6'),
                    Column('data_promemoria', css_class='col-md-6'),
                ),
            ),
            Fieldset(
                'Collegamenti',
                Row(
                    Column('evento', css_class='col-md-6'),
                    Column('attivita_padre', css_class='col-md-6'),
                ),
                'allegati_url',
            ),
            HTML('<hr>'),
            Submit('submit', 'Salva attività', css_class='btn btn-primary'),
        )


class TagForm(forms.ModelForm):

    class Meta:
        model = Tag
        fields = [
            'nome',
            'nome_he',
            'emoji',
            'colore',
            'descrizione',
            'ordine_visualizzazione',
            'is_active',
        ]
        labels = {'is_active': 'Attiva'}
        widgets = {
            'colore': forms.TextInput(attrs={'type': 'color'}),
            'descrizione': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        if not self.instance._state.adding and self.instance.di_sistema:
            self.fields['nome'].disabled = True
            self.fields['is_active'].disabled = True

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Row(
                Column('nome', css_class='col-md-4'),
                Column('nome_he', css_class='col-md-4'),
                Column('emoji', css_class='col-md-2'),
                Column('colore', css_class='col-md-2'),
            ),
            'descrizione',
            Row(
                Column('ordine_visualizzazione', css_class='col-md-6'),
                Column('is_active', css_class='col-md-6'),
            ),
            Submit('submit', 'Salva tag', css_class='btn btn-primary'),
        )
