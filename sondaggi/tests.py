"""
Tests per app sondaggi.
"""

import json
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from .models import RispostaCompetenze
from .services import filtra_risposte, nome_file_export, statistiche_risposte

User = get_user_model()


def crea_risposta(**kwargs):
    dati = {
        'competenze': ['photography'],
        'preferenza_contatto': 'whatsapp',
    }
    dati.update(kwargs)
    return RispostaCompetenze.objects.create(**dati)


class RispostaModelTestCase(TestCase):

    def test_anonima_senza_contatti(self):
        self.assertTrue(crea_risposta().anonima)
        self.assertFalse(crea_risposta(email='olga@example.com').anonima)

    def test_almeno_una_competenza(self):
        risposta = RispostaCompetenze(competenze=[])
        with self.assertRaises(ValidationError) as ctx:
            risposta.full_clean()
        self.assertIn('competenze', ctx.exception.message_dict)

    def test_competenza_sconosciuta(self):
        risposta = RispostaCompetenze(competenze=['astrologia'])
        with self.assertRaises(ValidationError):
            risposta.full_clean()

    def test_altro_richiede_specialita(self):
        risposta = RispostaCompetenze(competenze=['other'])
        with self.assertRaises(ValidationError) as ctx:
            risposta.full_clean()
        self.assertIn('altra_specialita', ctx.exception.message_dict)

    def test_telefono_normalizzato(self):
        risposta = RispostaCompetenze(competenze=['music'], telefono='050-123 4567')
        risposta.full_clean()
        self.assertEqual(risposta.telefono, '0501234567')

    def test_etichette_ebraiche(self):
        risposta = crea_risposta(competenze=['legal', 'music'])
        self.assertEqual(risposta.competenze_he(), ['משפטי', 'מוזיקה'])


class RispostaServiziTestCase(TestCase):

    def setUp(self):
        self.dana = crea_risposta(nome_genitore='Dana', competenze=['photography', 'music'], preferenza_contatto='phone')
        self.olga = crea_risposta(nome_genitore='Olga', email='olga@example.com', competenze=['music'])
        self.anonima = crea_risposta(competenze=['legal'])
        RispostaCompetenze.objects.filter(pk=self.anonima.pk).update(created_at=timezone.now() - timedelta(days=30))

    def test_filtro_competenza(self):
        qs = filtra_risposte(RispostaCompetenze.objects.all(), {'skill': 'music'})
        self.assertEqual(set(qs), {self.dana, self.olga})

    def test_filtro_competenza_non_valida(self):
        with self.assertRaises(ValidationError):
            filtra_risposte(RispostaCompetenze.objects.all(), {'skill': 'astrologia'})

    def test_filtro_contatto_e_ricerca(self):
        qs = RispostaCompetenze.objects.all()
        self.assertEqual(list(filtra_risposte(qs, {'contact_preference': 'phone'})), [self.dana])
        self.assertEqual(list(filtra_risposte(qs, {'search': 'olga@'})), [self.olga])

    def test_filtro_date(self):
        qs = RispostaCompetenze.objects.all()
        dal = (timezone.localdate() - timedelta(days=7)).isoformat()
        self.assertEqual(filtra_risposte(qs, {'date_from': dal}).count(), 2)
        with self.assertRaises(ValidationError):
            filtra_risposte(qs, {'date_to': 'ieri'})

    def test_statistiche(self):
        stats = statistiche_risposte(RispostaCompetenze.objects.all())
        self.assertEqual(stats['totale'], 3)
        self.assertEqual(stats['per_competenza'], {'photography': 1, 'music': 2, 'legal': 1})
        self.assertEqual(stats['per_contatto'], {'phone': 1, 'whatsapp': 2})
        self.assertEqual(stats['anonime'], 1)
        self.assertEqual(stats['recenti'], 2)

    def test_nome_file(self):
        self.assertTrue(nome_file_export().startswith('parent-skills-'))


class SondaggioApiTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='x', ruolo='admin')

    def _post(self, dati):
        return self.client.post(reverse('sondaggi_api:skills'), data=json.dumps(dati), content_type='application/json')

    def test_invio_pubblico(self):
        response = self._post({'competenze': ['cooking_catering'], 'preferenza_contatto': 'any', 'classe_studente': 'יא'})
        self.assertEqual(response.status_code, 201)
        risposta = RispostaCompetenze.objects.get()
        self.assertEqual(risposta.classe_studente, 'יא')
        self.assertEqual(risposta.lingua_invio, 'he')

    def test_invio_senza_competenze(self):
        response = self._post({'competenze': [], 'preferenza_contatto': 'any'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('competenze', response.json()['details'])

    def test_lista_solo_admin(self):
        crea_risposta()
        self.assertEqual(self.client.get(reverse('sondaggi_api:skills')).status_code, 401)

        self.client.force_login(self.admin)
        response = self.client.get(reverse('sondaggi_api:skills'), {'skill': 'photography'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['stats']['anonime'], 1)

    def test_export_csv(self):
        crea_risposta(competenze=['photography', 'music'])
        crea_risposta(nome_genitore='Dana', competenze=['legal'])
        self.client.force_login(self.admin)

        response = self.client.get(reverse('sondaggi_api:skills_export'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('parent-skills-', response['Content-Disposition'])
        contenuto = response.content.decode('utf-8')
        self.assertTrue(contenuto.startswith('\ufeff'))
        self.assertIn('שם הורה', contenuto)
        self.assertIn('אנונימי', contenuto)
        self.assertIn('צילום, מוזיקה', contenuto)
        self.assertIn('Dana', contenuto)


class SondaggioPagineTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='x', ruolo='admin')

    def test_sondaggio_pubblico(self):
        response = self.client.post(reverse('sondaggi:sondaggio_competenze'), {
            'nome_genitore': 'Olga',
            'competenze': ['music', 'arts'],
            'preferenza_contatto': 'email',
            'email': 'olga@example.com',
            'lingua_invio': 'ru',
        })
        self.assertRedirects(response, reverse('sondaggi:sondaggio_competenze'))
        risposta = RispostaCompetenze.objects.get()
        self.assertEqual(risposta.competenze, ['music', 'arts'])
        self.assertEqual(risposta.lingua_invio, 'ru')

    def test_lista_admin(self):
        crea_risposta()
        self.client.force_login(self.admin)
        response = self.client.get(reverse('sondaggi:risposta_list'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['statistiche']['totale'], 1)

    def test_export_excel(self):
        crea_risposta()
        self.client.force_login(self.admin)
        response = self.client.get(reverse('sondaggi:risposte_export', kwargs={'formato': 'excel'}))
        self.assertEqual(response.status_code, 200)
        self.assertIn('.xlsx', response['Content-Disposition'])
