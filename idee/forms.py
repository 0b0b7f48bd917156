"""
Forms per app idee.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column, Submit, HTML

from .models import Idea, IdeaRiunione, LINGUA_CHOICES, Riunione


class IdeaForm(forms.ModelForm):
    """Invio pubblico di un'idea. Nome e contatto servono solo se non anonima."""

    class Meta:
        model = Idea
        fields = ['categoria', 'titolo', 'descrizione', 'anonima', 'nome_proponente', 'email_contatto']
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 5}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Row(
                Column('categoria', css_class='col-md-4'),
                Column('titolo', css_class='col-md-8'),
            ),
            'descrizione',
            'anonima',
            Row(
                Column('nome_proponente', css_class='col-md-6'),
                Column('email_contatto', css_class='col-md-6'),
            ),
            Submit('submit', 'Invia idea', css_class='btn btn-primary'),
        )


class IdeaStatoForm(forms.Form):
    stato = forms.ChoiceField(label="Stato", choices=Idea.STATO_CHOICES)
    risposta = forms.CharField(label="Risposta", required=False, widget=forms.Textarea(attrs={'rows': 3}))
    note_admin = forms.CharField(label="Note admin", required=False, widget=forms.Textarea(attrs={'rows': 2}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            'stato',
            'risposta',
            'note_admin',
            Submit('submit', 'Aggiorna', css_class='btn btn-primary'),
        )


class RiunioneForm(forms.ModelForm):

    class Meta:
        model = Riunione
        fields = ['titolo', 'data_riunione', 'descrizione', 'stato', 'aperta']
        widgets = {
            'data_riunione': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'descrizione': forms.Textarea(attrs={'rows': 4}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            Fieldset(
                'Riunione',
                Row(
                    Column('titolo', css_class='col-md-8'),
                    Column('data_riunione', css_class='col-md-4'),
                ),
                'descrizione',
                Row(
                    Column('stato', css_class='col-md-6'),
                    Column('aperta', css_class='col-md-6'),
                ),
            ),
            HTML('<hr>'),
            Submit('submit', 'Salva riunione', css_class='btn btn-primary'),
        )


class IdeaRiunioneForm(forms.ModelForm):

    lingua_invio = forms.ChoiceField(choices=LINGUA_CHOICES, initial='he', required=False, widget=forms.HiddenInput)

    class Meta:
        model = IdeaRiunione
        fields = ['titolo', 'descrizione', 'anonima', 'nome_proponente', 'lingua_invio']
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.layout = Layout(
            'titolo',
            'descrizione',
            Row(
                Column('anonima', css_class='col-md-4'),
                Column('nome_proponente', css_class='col-md-8'),
            ),
            'lingua_invio',
            Submit('submit', 'Aggiungi alla bacheca', css_class='btn btn-success'),
        )
