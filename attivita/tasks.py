"""
Celery tasks per app attivita.
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

from .models import Attivita
from .services import link_promemoria

logger = logging.getLogger(__name__)

INTERVALLO_SOLLECITI = timedelta(days=1)


@shared_task
def invia_promemoria_attivita():
    """
    Sollecita le attività con promemoria automatico scaduto e non concluse.

    Per ogni attività incrementa numero_solleciti, salva il link WhatsApp
    del sollecito e sposta il promemoria successivo di un giorno.
    """
    now = timezone.now()

    da_sollecitare = Attivita.objects.filter(
        is_active=True,
        promemoria_automatico=True,
        data_promemoria__lte=now,
    ).exclude(stato__in=['completed', 'cancelled'])

    inviati = 0
    for attivita in da_sollecitare:
        attivita.numero_solleciti += 1
        attivita.ultimo_promemoria = link_promemoria(attivita)
        attivita.data_promemoria = now + INTERVALLO_SOLLECITI
        attivita.save(update_fields=['numero_solleciti', 'ultimo_promemoria', 'data_promemoria', 'updated_at'])
        logger.info(
            f"Promemoria attività '{attivita.titolo}' per {attivita.responsabile_nome} "
            f"(sollecito n. {attivita.numero_solleciti})"
        )
        inviati += 1

    return {'promemoria': inviati}
