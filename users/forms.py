"""
Forms per l'app users.
"""

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Field, Hidden, Layout, Submit
from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import AuthenticationForm


class LoginForm(AuthenticationForm):
    """
    Accesso dei membri del comitato con username oppure email.

    "Ricordami" mantiene la sessione per 30 giorni (vedi login_view).
    """

    username = forms.CharField(
        label="Username o email",
        max_length=254,
        widget=forms.TextInput(attrs={"autofocus": True, "autocomplete": "username"}),
    )
    password = forms.CharField(
        label="Password",
        strip=False,
        widget=forms.PasswordInput(attrs={"autocomplete": "current-password"}),
    )
    remember_me = forms.BooleanField(label="Ricordami (30 giorni)", required=False)

    error_messages = {
        "invalid_login": "Credenziali non valide per il portale del comitato.",
        "inactive": "Questo account del comitato è stato disattivato.",
    }

    def __init__(self, request=None, *args, **kwargs):
        super().__init__(request, *args, **kwargs)

        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Field("username"),
            Field("password"),
            Field("remember_me"),
            Hidden("next", request.GET.get("next", "") if request else ""),
            Submit("submit", "Accedi", css_class="btn btn-primary w-100"),
        )

    def clean_username(self):
        """Un indirizzo email viene risolto nello username corrispondente."""
        valore = (self.cleaned_data.get("username") or "").strip()
        if "@" in valore:
            utente = get_user_model().objects.filter(email__iexact=valore).only("username").first()
            if utente:
                return utente.username
        return valore
