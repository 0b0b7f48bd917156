"""
Tests per app idee.
"""

import json
from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from .models import Idea, IdeaRiunione, Riunione
from .services import filtra_idee, statistiche_idee

User = get_user_model()


def crea_idea(**kwargs):
    dati = {
        'categoria': 'improvement',
        'titolo': 'Bacheca annunci',
        'descrizione': 'Una bacheca per gli annunci della scuola',
    }
    dati.update(kwargs)
    return Idea.objects.create(**dati)


def crea_riunione(**kwargs):
    dati = {
        'titolo': 'Riunione di marzo',
        'data_riunione': date(2025, 3, 20),
    }
    dati.update(kwargs)
    return Riunione.objects.create(**dati)


class IdeaModelTestCase(TestCase):

    def test_anonima_non_conserva_contatti(self):
        idea = crea_idea(anonima=True, nome_proponente='Dana', email_contatto='dana@example.com')
        idea.refresh_from_db()
        self.assertEqual(idea.nome_proponente, '')
        self.assertEqual(idea.email_contatto, '')

    def test_firmata_conserva_contatti_puliti(self):
        idea = crea_idea(anonima=False, nome_proponente='  Dana  ', email_contatto=' dana@example.com ')
        idea.refresh_from_db()
        self.assertEqual(idea.nome_proponente, 'Dana')
        self.assertEqual(idea.email_contatto, 'dana@example.com')

    def test_descrizione_troppo_corta(self):
        idea = Idea(categoria='other', titolo='Corta', descrizione='breve')
        with self.assertRaises(ValidationError) as ctx:
            idea.full_clean()
        self.assertIn('descrizione', ctx.exception.message_dict)

    def test_aggiorna_stato_con_risposta(self):
        idea = crea_idea()
        idea.aggiorna_stato('approved', risposta='La realizzeremo', note_admin='Priorità media')
        idea.refresh_from_db()
        self.assertEqual(idea.stato, 'approved')
        self.assertEqual(idea.note_admin, 'Priorità media')
        self.assertIsNotNone(idea.risposta_at)

    def test_aggiorna_stato_senza_risposta(self):
        idea = crea_idea()
        idea.aggiorna_stato('reviewed', risposta='')
        self.assertIsNone(idea.risposta_at)

    def test_stato_non_valido(self):
        with self.assertRaises(ValidationError):
            crea_idea().aggiorna_stato('boh')


class IdeaServiziTestCase(TestCase):

    def setUp(self):
        crea_idea(titolo='Prima', categoria='feature')
        crea_idea(titolo='Seconda', categoria='process', stato='approved')
        crea_idea(titolo='Terza', categoria='feature', stato='approved')

    def test_filtri(self):
        qs = Idea.objects.all()
        self.assertEqual(filtra_idee(qs, {'status': 'approved'}).count(), 2)
        self.assertEqual(filtra_idee(qs, {'category': 'feature'}).count(), 2)
        self.assertEqual(filtra_idee(qs, {'status': 'all', 'category': 'all'}).count(), 3)

    def test_statistiche_per_stato(self):
        stats = statistiche_idee()
        self.assertEqual(stats['totale'], 3)
        self.assertEqual(stats['per_stato']['approved'], 2)
        self.assertEqual(stats['per_stato']['new'], 1)
        self.assertEqual(stats['per_stato']['rejected'], 0)


class RiunioneTestCase(TestCase):

    def test_aggiungi_idea_a_riunione_aperta(self):
        riunione = crea_riunione()
        idea = riunione.aggiungi_idea('Più parcheggi', anonima=False, nome_proponente=' Olga ', lingua_invio='ru')
        self.assertEqual(idea.nome_proponente, 'Olga')
        self.assertEqual(idea.lingua_invio, 'ru')

    def test_riunione_chiusa_rifiuta_idee(self):
        riunione = crea_riunione()
        riunione.chiudi()
        self.assertEqual(riunione.stato, 'closed')
        with self.assertRaises(ValidationError):
            riunione.aggiungi_idea('Troppo tardi')

    def test_bozza_rifiuta_idee(self):
        riunione = crea_riunione(stato='draft')
        with self.assertRaises(ValidationError):
            riunione.aggiungi_idea('Troppo presto')

    def test_riapertura(self):
        riunione = crea_riunione(aperta=False, stato='closed')
        riunione.apri()
        riunione.refresh_from_db()
        self.assertTrue(riunione.accetta_idee)

    def test_bacheca_dalla_piu_recente(self):
        riunione = crea_riunione()
        vecchia = riunione.aggiungi_idea('Vecchia')
        nuova = riunione.aggiungi_idea('Nuova')
        IdeaRiunione.objects.filter(pk=vecchia.pk).update(created_at=timezone.now() - timedelta(hours=1))
        self.assertEqual([i.pk for i in riunione.bacheca()], [nuova.pk, vecchia.pk])


class IdeeApiTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='x', ruolo='admin')
        self.genitore = User.objects.create_user(username='genitore', password='x')

    def _post(self, url, dati):
        return self.client.post(url, data=json.dumps(dati), content_type='application/json')

    def test_invio_pubblico(self):
        response = self._post(reverse('idee_api:ideas'), {
            'categoria': 'feature',
            'titolo': 'Calendario condiviso',
            'descrizione': 'Un calendario con tutti gli eventi della classe',
        })
        self.assertEqual(response.status_code, 201)
        idea = Idea.objects.get()
        self.assertTrue(idea.anonima)
        self.assertEqual(response.json()['data']['id'], str(idea.pk))

    def test_invio_non_valido(self):
        response = self._post(reverse('idee_api:ideas'), {'categoria': 'feature', 'titolo': 'X', 'descrizione': 'corta'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('titolo', response.json()['details'])

    def test_lista_solo_admin(self):
        crea_idea()
        self.assertEqual(self.client.get(reverse('idee_api:ideas')).status_code, 401)

        self.client.force_login(self.genitore)
        self.assertEqual(self.client.get(reverse('idee_api:ideas')).status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.get(reverse('idee_api:ideas'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['stats']['totale'], 1)

    def test_aggiorna_stato(self):
        idea = crea_idea()
        self.client.force_login(self.admin)
        response = self.client.put(
            reverse('idee_api:idea_status', args=[idea.pk]),
            data=json.dumps({'status': 'implemented', 'response': 'Fatto!'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['stato'], 'implemented')
        self.assertIsNotNone(response.json()['data']['risposta_at'])

    def test_dettaglio_riunione_solo_admin(self):
        riunione = crea_riunione()
        url = reverse('idee_api:meeting_detail', args=[riunione.pk])
        self.assertEqual(self.client.get(url).status_code, 401)

        self.client.force_login(self.genitore)
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['id'], str(riunione.pk))

    def test_chiusura_riunione_via_patch(self):
        riunione = crea_riunione()
        self.client.force_login(self.admin)
        response = self.client.patch(
            reverse('idee_api:meeting_detail', args=[riunione.pk]),
            data=json.dumps({'aperta': False}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        riunione.refresh_from_db()
        self.assertFalse(riunione.aperta)
        self.assertEqual(riunione.stato, 'closed')

    def test_idee_riunione(self):
        riunione = crea_riunione()
        url = reverse('idee_api:meeting_ideas', args=[riunione.pk])

        response = self._post(url, {'titolo': 'Gita di fine anno', 'lingua_invio': 'ru'})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['data']['anonima'])

        response = self.client.get(url)
        self.assertEqual(len(response.json()['data']['ideas']), 1)

        riunione.chiudi()
        response = self._post(url, {'titolo': 'Troppo tardi'})
        self.assertEqual(response.status_code, 400)


class IdeePagineTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='x', ruolo='admin')

    def test_pagina_invio(self):
        response = self.client.get(reverse('idee:idea_invio'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('he', response.context['condivisione'])

        response = self.client.post(reverse('idee:idea_invio'), {
            'categoria': 'process',
            'titolo': 'Turni di pulizia',
            'descrizione': 'Organizzare i turni con un foglio condiviso',
            'anonima': 'on',
        })
        self.assertRedirects(response, reverse('idee:idea_invio'))
        self.assertEqual(Idea.objects.count(), 1)

    def test_lista_admin(self):
        crea_idea()
        self.client.force_login(self.admin)
        response = self.client.get(reverse('idee:idea_list'), {'status': 'new'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['totale_idee'], 1)

    def test_bacheca_pubblica(self):
        riunione = crea_riunione()
        response = self.client.post(riunione.get_board_url(), {'titolo': 'Torneo di calcio', 'anonima': 'on', 'lingua_invio': 'he'})
        self.assertRedirects(response, riunione.get_board_url())
        self.assertEqual(riunione.idee.count(), 1)

    def test_apri_chiudi(self):
        riunione = crea_riunione()
        self.client.force_login(self.admin)
        self.client.post(reverse('idee:riunione_apri_chiudi', args=[riunione.pk]))
        riunione.refresh_from_db()
        self.assertFalse(riunione.accetta_idee)
