"""
Campi form condivisi per i valori JSON (liste) dei models.

I form sono usati sia dalle pagine HTML (textarea, una voce per riga)
sia dalle API JSON (liste native nel body).
"""

from django import forms
from django.core.exceptions import ValidationError


class ListaRigheField(forms.CharField):
    """
    Lista di stringhe: accetta una lista (JSON) oppure un testo
    con una voce per riga (textarea).
    """

    widget = forms.Textarea

    def prepare_value(self, value):
        if isinstance(value, (list, tuple)):
            return "\n".join(str(v) for v in value)
        return value

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, (list, tuple)):
            righe = value
        else:
            righe = str(value).splitlines()
        return [str(r).strip() for r in righe if str(r).strip()]


class AzioniField(forms.CharField):
    """
    Azioni di un verbale come lista di {task, owner, due}.

    In textarea ogni riga è `azione | responsabile | scadenza`
    (responsabile e scadenza facoltativi, scadenza in formato YYYY-MM-DD).
    """

    widget = forms.Textarea
    SEPARATORE = "|"

    def prepare_value(self, value):
        if isinstance(value, (list, tuple)):
            righe = []
            for azione in value:
                if isinstance(azione, dict):
                    parti = [azione.get("task") or "", azione.get("owner") or "", azione.get("due") or ""]
                    righe.append(f" {self.SEPARATORE} ".join(parti).rstrip(f" {self.SEPARATORE}"))
            return "\n".join(righe)
        return value

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, (list, tuple)):
            azioni = []
            for azione in value:
                if not isinstance(azione, dict):
                    raise ValidationError("Ogni azione deve essere un oggetto {task, owner, due}")
                azioni.append({
                    "task": str(azione.get("task") or "").strip(),
                    "owner": str(azione.get("owner") or "").strip(),
                    "due": str(azione.get("due") or "").strip(),
                })
            return azioni

        azioni = []
        for riga in str(value).splitlines():
            if not riga.strip():
                continue
            parti = [p.strip() for p in riga.split(self.SEPARATORE)]
            parti += [""] * (3 - len(parti))
            azioni.append({"task": parti[0], "owner": parti[1], "due": parti[2]})
        return azioni
