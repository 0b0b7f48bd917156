"""
Task Celery per app comunicazioni.
"""

import logging

from celery import shared_task

from .services import disattiva_scaduti

logger = logging.getLogger(__name__)


@shared_task
def disattiva_messaggi_scaduti():
    """Ogni notte: spegne i banner con data di fine passata."""
    numero = disattiva_scaduti()
    if numero:
        logger.info(f"Disattivati {numero} messaggi urgenti scaduti")
    return {'disattivati': numero}
