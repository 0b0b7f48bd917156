"""
Tests per app comunicazioni.
"""

import json
import uuid
from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from core.api import ApiError

from .models import GruppoClasse, ImpostazioniApp, MessaggioUrgente
from .services import condivisione_gruppi, condivisione_messaggio, salva_messaggi
from .tasks import disattiva_messaggi_scaduti

User = get_user_model()


def crea_messaggio(**kwargs):
    dati = {
        'tipo': 'urgent',
        'titolo_he': 'הודעה דחופה',
        'titolo_ru': 'Срочное сообщение',
        'icona': '🚨',
    }
    dati.update(kwargs)
    return MessaggioUrgente.objects.create(**dati)


class MessaggioUrgenteTestCase(TestCase):

    def test_attivi_oggi(self):
        oggi = timezone.localdate()
        sempre = crea_messaggio()
        in_corso = crea_messaggio(data_inizio=oggi - timedelta(days=1), data_fine=oggi + timedelta(days=1))
        crea_messaggio(data_fine=oggi - timedelta(days=1))
        crea_messaggio(data_inizio=oggi + timedelta(days=1))
        crea_messaggio(attivo=False)

        self.assertEqual(set(MessaggioUrgente.objects.attivi_oggi()), {sempre, in_corso})

    def test_date_invertite(self):
        messaggio = MessaggioUrgente(titolo_he='בדיקה', data_inizio=date(2025, 5, 10), data_fine=date(2025, 5, 1))
        with self.assertRaises(ValidationError):
            messaggio.full_clean()

    def test_disattiva_scaduti(self):
        scaduto = crea_messaggio(data_fine=timezone.localdate() - timedelta(days=2))
        crea_messaggio()
        self.assertEqual(disattiva_messaggi_scaduti(), {'disattivati': 1})
        scaduto.refresh_from_db()
        self.assertFalse(scaduto.attivo)


class SalvaMessaggiTestCase(TestCase):

    def setUp(self):
        self.primo = crea_messaggio(titolo_he='ראשון')
        self.secondo = crea_messaggio(titolo_he='שני')

    def test_aggiorna_ed_elimina_assenti(self):
        risultato = salva_messaggi([
            {'id': str(self.primo.pk), 'titolo_he': 'ראשון מעודכן'},
            {'id': '1718000000000', 'tipo': 'info', 'titolo_he': 'חדש'},
        ])
        self.assertEqual(risultato, {'creati': 1, 'aggiornati': 1, 'eliminati': 1})
        self.primo.refresh_from_db()
        self.assertEqual(self.primo.titolo_he, 'ראשון מעודכן')
        self.assertEqual(self.primo.titolo_ru, 'Срочное сообщение')
        self.assertFalse(MessaggioUrgente.objects.filter(pk=self.secondo.pk).exists())

    def test_solo_nuovi_non_elimina(self):
        risultato = salva_messaggi([{'id': '42', 'titolo_he': 'חדש'}])
        self.assertEqual(risultato['eliminati'], 0)
        self.assertEqual(MessaggioUrgente.objects.count(), 3)

    def test_id_uuid_sconosciuto_conta_come_reale(self):
        risultato = salva_messaggi([{'id': str(uuid.uuid4()), 'tipo': 'info', 'titolo_he': 'חדש'}])
        self.assertEqual(risultato, {'creati': 1, 'aggiornati': 0, 'eliminati': 2})
        self.assertEqual(MessaggioUrgente.objects.count(), 1)

    def test_lista_vuota_elimina_tutto(self):
        salva_messaggi([])
        self.assertEqual(MessaggioUrgente.objects.count(), 0)

    def test_messaggio_non_valido_annulla_tutto(self):
        with self.assertRaises(ApiError) as ctx:
            salva_messaggi([
                {'id': str(self.primo.pk), 'titolo_he': 'תקין'},
                {'titolo_he': 'X'},
            ])
        self.assertEqual(ctx.exception.status, 400)
        self.primo.refresh_from_db()
        self.assertEqual(self.primo.titolo_he, 'ראשון')
        self.assertEqual(MessaggioUrgente.objects.count(), 2)

    def test_non_lista(self):
        with self.assertRaises(ApiError):
            salva_messaggi({'titolo_he': 'חדש'})


class CondivisioneTestCase(TestCase):

    def test_testo_generato(self):
        messaggio = crea_messaggio(descrizione_ru='Занятия отменены')
        condivisione = condivisione_messaggio(messaggio)
        self.assertTrue(condivisione['he'].text.startswith('🚨 הודעה דחופה'))
        self.assertIn('Занятия отменены', condivisione['ru'].text)

    def test_testo_personalizzato(self):
        messaggio = crea_messaggio(testo_condivisione_he='טקסט מותאם')
        self.assertEqual(condivisione_messaggio(messaggio)['he'].text, 'טקסט מותאם')

    def test_maglietta_bianca(self):
        messaggio = crea_messaggio(tipo='white_shirt')
        venerdi = date(2025, 5, 16)
        condivisione = condivisione_messaggio(messaggio, oggi=venerdi)
        self.assertIn('היום - חולצה לבנה!', condivisione['he'].text)

    def test_gruppi(self):
        GruppoClasse.objects.create(classe='א', emoji='📘', url_whatsapp='https://chat.whatsapp.com/abc')
        condivisione = condivisione_gruppi()
        self.assertIn('שכבת א', condivisione['he'].text)
        self.assertIn('https://chat.whatsapp.com/abc', condivisione['ru'].text)


class ComunicazioniApiTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='x', ruolo='admin')

    def test_messaggi_pubblici(self):
        crea_messaggio()
        crea_messaggio(attivo=False)
        response = self.client.get(reverse('comunicazioni_api:urgent_messages'))
        self.assertEqual(response.json()['count'], 1)

        self.assertEqual(self.client.get(reverse('comunicazioni_api:urgent_messages'), {'all': 'true'}).status_code, 401)
        self.client.force_login(self.admin)
        response = self.client.get(reverse('comunicazioni_api:urgent_messages'), {'all': 'true'})
        self.assertEqual(response.json()['count'], 2)

    def test_salva_solo_admin(self):
        url = reverse('comunicazioni_api:urgent_messages_save')
        corpo = json.dumps({'messages': [{'id': '1', 'titolo_he': 'חדש'}]})
        self.assertEqual(self.client.post(url, data=corpo, content_type='application/json').status_code, 401)

        self.client.force_login(self.admin)
        response = self.client.post(url, data=corpo, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['creati'], 1)

    def test_impostazioni(self):
        response = self.client.get(reverse('comunicazioni_api:settings'))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['data']['banner_attivo'])

        url = reverse('comunicazioni_api:settings')
        corpo = json.dumps({'anno_scolastico': '2025-2026'})
        self.assertEqual(self.client.put(url, data=corpo, content_type='application/json').status_code, 401)

        self.client.force_login(self.admin)
        response = self.client.put(url, data=corpo, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(ImpostazioniApp.carica().anno_scolastico, '2025-2026')
        self.assertEqual(ImpostazioniApp.objects.count(), 1)

    def test_gruppi(self):
        self.client.force_login(self.admin)
        response = self.client.post(
            reverse('comunicazioni_api:groups'),
            data=json.dumps({'classe': 'ב', 'url_whatsapp': 'https://chat.whatsapp.com/xyz'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)

        response = self.client.get(reverse('comunicazioni_api:groups'))
        self.assertEqual(response.json()['count'], 1)
        self.assertIn('שכבת ב', response.json()['share']['he']['text'])


class ComunicazioniPagineTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='x', ruolo='admin')

    def test_banner_pubblico(self):
        crea_messaggio()
        response = self.client.get(reverse('comunicazioni:messaggi_attivi'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context['messaggi_urgenti']), 1)

    def test_banner_spento(self):
        crea_messaggio()
        impostazioni = ImpostazioniApp.carica()
        impostazioni.banner_attivo = False
        impostazioni.save()
        response = self.client.get(reverse('comunicazioni:messaggi_attivi'))
        self.assertEqual(len(response.context['messaggi_urgenti']), 0)

    def test_editor(self):
        messaggio = crea_messaggio()
        self.client.force_login(self.admin)
        response = self.client.get(reverse('comunicazioni:messaggi_editor'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context['condivisioni']), 1)
        self.assertEqual(response.context['condivisioni'][0][0], messaggio)
        self.assertContains(response, 'name="form-0-DELETE"')
        self.assertNotContains(response, 'name="form-1-DELETE"')

        dati = {
            'form-TOTAL_FORMS': '1',
            'form-INITIAL_FORMS': '1',
            'form-MIN_NUM_FORMS': '0',
            'form-MAX_NUM_FORMS': '1000',
            'form-0-id': str(messaggio.pk),
            'form-0-tipo': 'warning',
            'form-0-titolo_he': 'עדכון',
            'form-0-colore': '#FF8200',
            'form-0-attivo': 'on',
        }
        response = self.client.post(reverse('comunicazioni:messaggi_editor'), dati)
        self.assertRedirects(response, reverse('comunicazioni:messaggi_editor'))
        messaggio.refresh_from_db()
        self.assertEqual(messaggio.tipo, 'warning')

    def test_gruppi_pubblici(self):
        GruppoClasse.objects.create(classe='ג', url_whatsapp='https://chat.whatsapp.com/c')
        response = self.client.get(reverse('comunicazioni:gruppi_classe'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('he', response.context['condivisione'])
