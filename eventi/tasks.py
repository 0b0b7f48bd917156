"""
Celery tasks per app eventi.
"""

import logging

from celery import shared_task
from django.db.models import Q
from django.utils import timezone

from .models import Evento

logger = logging.getLogger(__name__)


@shared_task
def aggiorna_stato_eventi():
    """
    Segna come completati gli eventi pubblicati o in corso già terminati.

    Un evento è terminato quando data_fine è passata; senza data_fine
    si usa data_inizio.
    """
    now = timezone.now()

    terminati = Evento.objects.filter(
        is_active=True,
        stato__in=['published', 'ongoing'],
    ).filter(
        Q(data_fine__lt=now) | Q(data_fine__isnull=True, data_inizio__lt=now)
    )

    aggiornati = terminati.update(stato='completed', updated_at=now)

    if aggiornati:
        logger.info(f"Eventi segnati come completati: {aggiornati}")

    return {'completati': aggiornati}
