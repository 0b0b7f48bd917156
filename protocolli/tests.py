"""
Tests per app protocolli.
"""

import json
from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from attivita.models import Attivita
from core.drafts import DraftStore

from .models import Protocollo
from .services import crea_attivita_da_azioni, filtra_protocolli, genera_pdf_protocollo

User = get_user_model()


def crea_protocollo(**kwargs):
    dati = {
        'titolo': 'Riunione comitato',
        'data_protocollo': date(2025, 3, 10),
        'partecipanti': ['Dana', 'Olga'],
    }
    dati.update(kwargs)
    return Protocollo.objects.create(**dati)


class ProtocolloModelTestCase(TestCase):

    def test_codice_automatico(self):
        protocollo = crea_protocollo()
        self.assertTrue(protocollo.codice.startswith('PRT-'))
        self.assertTrue(protocollo.codice.endswith('-0001'))
        self.assertTrue(crea_protocollo().codice.endswith('-0002'))

    def test_partecipanti_obbligatori(self):
        protocollo = Protocollo(titolo='Verbale', partecipanti=[])
        with self.assertRaises(ValidationError):
            protocollo.full_clean()

    def test_azioni_senza_task(self):
        protocollo = Protocollo(titolo='Verbale', partecipanti=['Dana'], azioni=[{'owner': 'Olga'}])
        with self.assertRaises(ValidationError) as ctx:
            protocollo.full_clean()
        self.assertIn('azioni', ctx.exception.message_dict)

    def test_approva(self):
        protocollo = crea_protocollo()
        protocollo.approva()
        protocollo.refresh_from_db()
        self.assertTrue(protocollo.approvato)
        self.assertIsNotNone(protocollo.approvato_at)

        with self.assertRaises(ValidationError):
            protocollo.approva()


class ProtocolloServiziTestCase(TestCase):

    def setUp(self):
        crea_protocollo(titolo='Annuale 2024', tipo='annual', data_protocollo=date(2024, 6, 1), approvato=True)
        crea_protocollo(titolo='Ordinaria 2025', data_protocollo=date(2025, 2, 1))
        crea_protocollo(titolo='Riservato', data_protocollo=date(2025, 4, 1), pubblico=False)

    def test_filtri(self):
        qs = Protocollo.objects.all()
        self.assertEqual(filtra_protocolli(qs, {'type': 'annual'}).count(), 1)
        self.assertEqual(filtra_protocolli(qs, {'approved': 'false'}).count(), 2)
        self.assertEqual(filtra_protocolli(qs, {'year': '2025'}).count(), 2)
        self.assertEqual(filtra_protocolli(qs, {'year': 'abc'}).count(), 3)
        self.assertEqual(filtra_protocolli(qs, {}, solo_pubblici=True).count(), 2)

    def test_ordinamento_per_data(self):
        titoli = [p.titolo for p in filtra_protocolli(Protocollo.objects.all(), {})]
        self.assertEqual(titoli, ['Riservato', 'Ordinaria 2025', 'Annuale 2024'])

    def test_pdf(self):
        protocollo = crea_protocollo(
            decisioni='Festa a giugno\nBudget approvato',
            azioni=[{'task': 'Prenotare la sala', 'owner': 'Dana', 'due': '2025-05-01'}],
        )
        buffer = genera_pdf_protocollo(protocollo)
        self.assertTrue(buffer.getvalue().startswith(b'%PDF'))

    def test_crea_attivita_da_azioni(self):
        protocollo = crea_protocollo(azioni=[
            {'task': 'Prenotare la sala', 'owner': 'Dana', 'due': '2025-05-01'},
            {'task': 'Comprare i palloncini', 'owner': '', 'due': 'presto'},
            {'task': 'x'},
        ])

        create = crea_attivita_da_azioni(protocollo)

        self.assertEqual(len(create), 2)
        sala = Attivita.objects.get(titolo='Prenotare la sala')
        self.assertEqual(sala.responsabile_nome, 'Dana')
        self.assertEqual(sala.scadenza, date(2025, 5, 1))
        self.assertEqual(sala.protocollo, protocollo)
        palloncini = Attivita.objects.get(titolo='Comprare i palloncini')
        self.assertEqual(palloncini.responsabile_nome, 'Da assegnare')
        self.assertIsNone(palloncini.scadenza)

        # ripetibile senza duplicati
        self.assertEqual(crea_attivita_da_azioni(protocollo), [])
        self.assertEqual(Attivita.objects.count(), 2)


class ProtocolloApiTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='editor', password='pass12345')
        self.pubblico = crea_protocollo()
        self.riservato = crea_protocollo(titolo='Riservato', pubblico=False)

    def test_lista_anonima_solo_pubblici(self):
        data = self.client.get('/api/protocols/').json()
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['data'][0]['id'], str(self.pubblico.pk))

    def test_lista_admin_completa(self):
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get('/api/protocols/').json()['count'], 2)

    def test_dettaglio_riservato_anonimo(self):
        response = self.client.get(f'/api/protocols/{self.riservato.pk}/')
        self.assertEqual(response.status_code, 404)

    def test_creazione_solo_admin(self):
        body = json.dumps({'titolo': 'Nuovo', 'data_protocollo': '2025-05-05', 'partecipanti': ['Dana']})

        self.client.force_login(self.editor)
        response = self.client.post('/api/protocols/', data=body, content_type='application/json')
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.post('/api/protocols/', data=body, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['tipo'], 'regular')
        self.assertTrue(data['pubblico'])

    def test_creazione_senza_partecipanti(self):
        self.client.force_login(self.admin)
        response = self.client.post(
            '/api/protocols/',
            data=json.dumps({'titolo': 'Nuovo', 'data_protocollo': '2025-05-05', 'partecipanti': []}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('partecipanti', response.json()['details'])

    def test_approva_api(self):
        self.client.force_login(self.admin)
        response = self.client.post(f'/api/protocols/{self.pubblico.pk}/approve/')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['data']['approvato'])

        response = self.client.post(f'/api/protocols/{self.pubblico.pk}/approve/')
        self.assertEqual(response.status_code, 400)

    def test_attivita_api(self):
        self.pubblico.azioni = [{'task': 'Stampare inviti', 'owner': 'Olga', 'due': ''}]
        self.pubblico.save()
        self.client.force_login(self.editor)

        response = self.client.post(f'/api/protocols/{self.pubblico.pk}/tasks/')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['count'], 1)


class ProtocolloPagineTestCase(TestCase):

    def setUp(self):
        self.editor = User.objects.create_user(username='olga', password='pass12345', ruolo='editor')
        self.client.force_login(self.editor)
        self.protocollo = crea_protocollo()

    def test_lista_e_dettaglio(self):
        self.assertEqual(self.client.get(reverse('protocolli:protocollo_list')).status_code, 200)
        response = self.client.get(self.protocollo.get_absolute_url())
        self.assertEqual(response.status_code, 200)
        self.assertIn('he', response.context['condivisione'])

    def test_pdf(self):
        response = self.client.get(reverse('protocolli:protocollo_pdf', kwargs={'pk': self.protocollo.pk}))
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn(self.protocollo.codice, response['Content-Disposition'])

    def test_crea_con_bozza(self):
        url = reverse('protocolli:protocollo_create')
        store = DraftStore(self.client.session, 'protocol')
        session = self.client.session
        session[store.chiave] = {'formData': {'titolo': 'Bozza verbale'}, 'metadata': {'timestamp': '2025-01-01T10:00:00+00:00'}}
        session.save()

        response = self.client.get(url + '?bozza=ripristina')
        self.assertEqual(response.context['form'].initial['titolo'], 'Bozza verbale')

        response = self.client.post(url, {
            'titolo': 'Verbale marzo',
            'data_protocollo': '2025-03-20',
            'tipo': 'regular',
            'partecipanti': 'Dana\nOlga',
            'azioni': 'Prenotare la sala | Dana | 2025-04-01',
            'pubblico': 'on',
        })
        self.assertEqual(response.status_code, 302)
        protocollo = Protocollo.objects.get(titolo='Verbale marzo')
        self.assertEqual(protocollo.created_by, self.editor)
        self.assertEqual(protocollo.partecipanti, ['Dana', 'Olga'])
        self.assertEqual(protocollo.azioni[0], {'task': 'Prenotare la sala', 'owner': 'Dana', 'due': '2025-04-01'})
        self.assertNotIn(store.chiave, self.client.session)
