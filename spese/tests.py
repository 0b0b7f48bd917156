"""
Tests per app spese.
"""

import json
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from .models import Spesa, parse_mese
from .services import filtra_spese, nome_file_export

User = get_user_model()


def crea_spesa(**kwargs):
    dati = {
        'titolo': 'Rinfresco riunione',
        'importo': Decimal('150.00'),
        'tipo': 'expense',
        'categoria': 'refreshments',
        'data_spesa': date(2025, 3, 10),
    }
    dati.update(kwargs)
    return Spesa.objects.create(**dati)


class TotaliSpeseTestCase(TestCase):
    """Test totali e ripartizione per categoria"""

    def setUp(self):
        crea_spesa(importo=Decimal('1000.00'), tipo='income', categoria='donations')
        crea_spesa(importo=Decimal('150.50'))
        crea_spesa(importo=Decimal('300.00'), categoria='events')

    def test_totali(self):
        totali = Spesa.totali(Spesa.objects.all())

        self.assertEqual(totali['entrate'], Decimal('1000.00'))
        self.assertEqual(totali['uscite'], Decimal('450.50'))
        self.assertEqual(totali['saldo'], Decimal('549.50'))

    def test_totali_queryset_vuoto(self):
        totali = Spesa.totali(Spesa.objects.none())
        self.assertEqual(totali['saldo'], Decimal('0'))

    def test_per_categoria(self):
        righe = Spesa.per_categoria(Spesa.objects.all())

        self.assertEqual([r['categoria'] for r in righe], ['events', 'refreshments', 'donations'])
        donazioni = righe[-1]
        self.assertEqual(donazioni['entrate'], Decimal('1000.00'))
        self.assertEqual(donazioni['saldo'], Decimal('1000.00'))


class FiltriSpeseTestCase(TestCase):

    def setUp(self):
        self.marzo = crea_spesa(data_spesa=date(2025, 3, 5))
        self.aprile = crea_spesa(data_spesa=date(2025, 4, 20), tipo='income', approvata=True)

    def test_filtro_mese(self):
        qs = filtra_spese(Spesa.objects.all(), {'month': '2025-03'})
        self.assertEqual(list(qs), [self.marzo])

    def test_mese_non_valido(self):
        with self.assertRaises(ValidationError):
            parse_mese('2025-13')
        with self.assertRaises(ValidationError):
            filtra_spese(Spesa.objects.all(), {'month': 'marzo'})

    def test_filtri_combinati(self):
        qs = filtra_spese(Spesa.objects.all(), {'type': 'income', 'approved': 'true', 'category': 'all'})
        self.assertEqual(list(qs), [self.aprile])

    def test_intervallo_date(self):
        qs = filtra_spese(Spesa.objects.all(), {'start_date': '2025-04-01', 'end_date': '2025-04-30'})
        self.assertEqual(list(qs), [self.aprile])

    def test_nome_file(self):
        self.assertEqual(nome_file_export('2025-03'), 'expenses_2025-03')
        self.assertEqual(nome_file_export(None), 'expenses_all')


class ApprovazioneSpesaTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='tesoriere', password='pass12345', ruolo='admin')

    def test_approva_e_revoca(self):
        spesa = crea_spesa()
        spesa.approva(self.admin)
        self.assertTrue(spesa.approvata)
        self.assertEqual(spesa.approvata_da, self.admin)
        self.assertIsNotNone(spesa.approvata_at)

        with self.assertRaises(ValidationError):
            spesa.approva(self.admin)

        spesa.revoca_approvazione(self.admin)
        self.assertFalse(spesa.approvata)
        self.assertIsNone(spesa.approvata_at)

    def test_importo_positivo(self):
        spesa = Spesa(titolo='Errata', importo=Decimal('0'), tipo='expense')
        with self.assertRaises(ValidationError):
            spesa.full_clean()


class SpeseApiTestCase(TestCase):
    """Test API /api/expenses/"""

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='editor', password='pass12345')
        crea_spesa(importo=Decimal('200.00'), tipo='income', data_spesa=date(2025, 3, 1))
        crea_spesa(importo=Decimal('50.00'), data_spesa=date(2025, 3, 2))

    def test_lista_con_totali(self):
        self.client.force_login(self.editor)
        data = self.client.get('/api/expenses/').json()

        self.assertTrue(data['success'])
        self.assertEqual(data['count'], 2)
        self.assertEqual(data['totals'], {'entrate': 200.0, 'uscite': 50.0, 'saldo': 150.0})

    def test_richiede_login(self):
        self.assertEqual(self.client.get('/api/expenses/').status_code, 401)

    def test_creazione(self):
        self.client.force_login(self.editor)
        response = self.client.post(
            '/api/expenses/',
            data=json.dumps({
                'titolo': 'Pullman gita',
                'importo': '1200',
                'tipo': 'expense',
                'categoria': 'transportation',
                'data_spesa': '2025-05-01',
                'metodo_pagamento': 'transfer',
            }),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.json()['data']['approvata'])

    def test_importo_negativo_rifiutato(self):
        self.client.force_login(self.editor)
        response = self.client.post(
            '/api/expenses/',
            data=json.dumps({'titolo': 'Errore', 'importo': '-5'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('importo', response.json()['details'])

    def test_mese_non_valido(self):
        self.client.force_login(self.editor)
        response = self.client.get('/api/expenses/?month=2025-99')
        self.assertEqual(response.status_code, 400)

    def test_approvazione_solo_admin(self):
        spesa = Spesa.objects.filter(tipo='expense').first()
        url = f'/api/expenses/{spesa.pk}/approve/'

        self.client.force_login(self.editor)
        self.assertEqual(self.client.post(url).status_code, 403)

        self.client.force_login(self.admin)
        self.assertEqual(self.client.post(url).status_code, 200)
        spesa.refresh_from_db()
        self.assertTrue(spesa.approvata)


class SpesePagineTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='dana', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='olga', password='pass12345', ruolo='editor')
        crea_spesa(titolo='Torta compleanno', data_spesa=date(2025, 3, 3))
        crea_spesa(titolo='Addobbi', data_spesa=date(2025, 4, 3))

    def test_export_csv_mese(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('spese:spese_export', kwargs={'formato': 'csv'}) + '?month=2025-03')

        self.assertEqual(response.status_code, 200)
        self.assertIn('expenses_2025-03.csv', response['Content-Disposition'])
        contenuto = response.content.decode('utf-8')
        self.assertTrue(contenuto.startswith('\ufeff'))
        self.assertIn('Torta compleanno', contenuto)
        self.assertNotIn('Addobbi', contenuto)

    def test_export_excel(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('spese:spese_export', kwargs={'formato': 'excel'}))
        self.assertEqual(response.status_code, 200)
        self.assertIn('expenses_all.xlsx', response['Content-Disposition'])

    def test_libro_cassa(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('spese:spesa_list'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['totali']['uscite'], Decimal('300.00'))

    def test_crea_movimento_imposta_autore(self):
        self.client.force_login(self.editor)
        response = self.client.post(reverse('spese:spesa_create'), {
            'titolo': 'Palloncini',
            'importo': '45.50',
            'tipo': 'expense',
            'categoria': 'events',
            'data_spesa': '2025-03-12',
            'metodo_pagamento': 'cash',
        })
        self.assertEqual(response.status_code, 302)

        spesa = Spesa.objects.get(titolo='Palloncini')
        self.assertEqual(spesa.created_by, self.editor)
        self.assertEqual(spesa.updated_by, self.editor)

    def test_utente_disattivato_senza_permessi(self):
        self.editor.is_active = False
        self.editor.save()
        self.assertFalse(self.editor.has_perm('spese.view_spesa'))
