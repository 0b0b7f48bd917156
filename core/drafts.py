"""
Bozze dei form (autosave).

Le bozze dei form protocollo e attività vengono salvate nella sessione
dell'utente con chiave `draft_<tipo>_new` oppure `draft_<tipo>_edit_<id>`.
Il salvataggio automatico è limitato da un intervallo di debounce.
"""

import logging
from datetime import datetime

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

TIPI_BOZZA = ("protocol", "task")


def chiave_bozza(tipo, entita_id=None):
    if entita_id:
        return f"draft_{tipo}_edit_{entita_id}"
    return f"draft_{tipo}_new"


class DraftStore:
    """
    Bozza di un singolo form nella sessione.

    Usage:
        store = DraftStore(request.session, "protocol", entita_id=protocollo.pk)
        store.save(request.POST.dict())
        dati = store.restore()
    """

    def __init__(self, session, tipo, entita_id=None, debounce=None):
        if tipo not in TIPI_BOZZA:
            raise ValueError(f"Tipo bozza non valido: {tipo}")
        self.session = session
        self.tipo = tipo
        self.entita_id = str(entita_id) if entita_id else None
        self.debounce = (
            settings.DRAFT_AUTOSAVE_DEBOUNCE_SECONDS if debounce is None else debounce
        )

    @property
    def chiave(self):
        return chiave_bozza(self.tipo, self.entita_id)

    @property
    def azione(self):
        return "edit" if self.entita_id else "new"

    def get(self):
        """Bozza completa {formData, metadata} oppure None."""
        draft = self.session.get(self.chiave)
        if not isinstance(draft, dict) or "formData" not in draft:
            return None
        return draft

    def restore(self):
        draft = self.get()
        return draft["formData"] if draft else None

    @property
    def has_draft(self):
        return self.get() is not None

    @property
    def draft_timestamp(self):
        draft = self.get()
        return draft["metadata"]["timestamp"] if draft else None

    def save(self, form_data, force=False):
        """
        Salva la bozza.

        Returns:
            bool: False se il salvataggio è stato saltato per debounce
        """
        now = timezone.now()

        if not force and self.debounce:
            ultimo = self.draft_timestamp
            if ultimo:
                trascorsi = (now - datetime.fromisoformat(ultimo)).total_seconds()
                if trascorsi < self.debounce:
                    return False

        self.session[self.chiave] = {
            "formData": form_data,
            "metadata": {
                "timestamp": now.isoformat(),
                "formType": self.tipo,
                "action": self.azione,
                "entityId": self.entita_id,
            },
        }
        self.session.modified = True
        logger.debug(f"Bozza salvata: {self.chiave}")
        return True

    def clear(self):
        if self.chiave in self.session:
            del self.session[self.chiave]
            self.session.modified = True
