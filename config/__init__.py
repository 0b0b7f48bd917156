"""
Progetto Django del Portale Comitato Genitori.

Carica l'app Celery all'avvio di Django così che @shared_task la usi.
"""

from .celery import app as celery_app

__all__ = ("celery_app",)
