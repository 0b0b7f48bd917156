"""
Celery Configuration - Portale Comitato

Configurazione Celery per tasks asincroni e scheduling.
"""

import os
from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('comitato')

app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

# Celery Beat Schedule - Tasks periodici
app.conf.beat_schedule = {
    'promemoria-attivita-ogni-ora': {
        'task': 'attivita.tasks.invia_promemoria_attivita',
        'schedule': crontab(minute=0),
        'options': {
            'expires': 1800,
        }
    },
    'disattiva-messaggi-scaduti-ogni-notte': {
        'task': 'comunicazioni.tasks.disattiva_messaggi_scaduti',
        'schedule': crontab(hour=0, minute=5),
    },
    'aggiorna-stato-eventi-ogni-notte': {
        'task': 'eventi.tasks.aggiorna_stato_eventi',
        'schedule': crontab(hour=0, minute=15),
    },
}

# Timezone
app.conf.timezone = 'Asia/Jerusalem'
