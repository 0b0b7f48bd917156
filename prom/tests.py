"""
Tests per app prom.
"""

import json
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from core.validators import hash_identificativo

from .models import EventoProm, PreventivoFornitore, VoceBudget, Voto
from .services import (
    aggiorna_voci_budget,
    confronta_preventivi,
    nome_file_confronto,
    riepilogo_budget,
    sanifica_preventivo,
    seleziona_preventivo,
    statistiche_voti,
)

User = get_user_model()


def crea_prom(**kwargs):
    dati = {
        'titolo': 'Mesibat Siyum 2025',
        'budget_totale': Decimal('10000'),
        'numero_studenti': 30,
    }
    dati.update(kwargs)
    return EventoProm.objects.create(**dati)


def crea_preventivo(prom, **kwargs):
    dati = {
        'prom': prom,
        'categoria': 'venue',
        'nome_fornitore': 'Ulam Hagan',
        'prezzo_totale': Decimal('5000'),
    }
    dati.update(kwargs)
    return PreventivoFornitore.objects.create(**dati)


class RiepilogoBudgetTestCase(TestCase):
    """Test aritmetica del budget"""

    def test_totali_e_per_studente(self):
        prom = crea_prom()
        VoceBudget.objects.create(prom=prom, categoria='venue', importo_allocato=Decimal('5000'), importo_speso=Decimal('4000'))
        VoceBudget.objects.create(prom=prom, categoria='dj', importo_allocato=Decimal('2000'), importo_speso=Decimal('1000'))

        riepilogo = riepilogo_budget(prom)

        self.assertEqual(riepilogo['totale_allocato'], Decimal('7000'))
        self.assertEqual(riepilogo['totale_speso'], Decimal('5000'))
        self.assertEqual(riepilogo['rimanente'], Decimal('5000'))
        self.assertEqual(riepilogo['per_studente'], 167)
        self.assertEqual(riepilogo['percentuale_utilizzo'], 50)
        self.assertEqual(riepilogo['colore_utilizzo'], 'success')

    def test_senza_studenti_ne_budget(self):
        prom = crea_prom(budget_totale=Decimal('0'), numero_studenti=0)
        VoceBudget.objects.create(prom=prom, categoria='dj', importo_speso=Decimal('500'))

        riepilogo = riepilogo_budget(prom)

        self.assertEqual(riepilogo['per_studente'], 0)
        self.assertEqual(riepilogo['percentuale_utilizzo'], 0)
        self.assertEqual(riepilogo['rimanente'], Decimal('-500'))

    def test_colori_soglia(self):
        prom = crea_prom(budget_totale=Decimal('1000'))
        voce = VoceBudget.objects.create(prom=prom, categoria='venue', importo_speso=Decimal('750'))
        self.assertEqual(riepilogo_budget(prom)['colore_utilizzo'], 'warning')

        voce.importo_speso = Decimal('950')
        voce.save()
        self.assertEqual(riepilogo_budget(prom)['colore_utilizzo'], 'danger')

    def test_aggiorna_voci_upsert(self):
        prom = crea_prom()
        VoceBudget.objects.create(prom=prom, categoria='venue', importo_allocato=Decimal('100'))

        aggiorna_voci_budget(prom, [
            {'categoria': 'venue', 'importo_allocato': 3000},
            {'categoria': 'catering', 'importo_allocato': 2500, 'importo_speso': 500},
        ])

        self.assertEqual(prom.voci_budget.count(), 2)
        self.assertEqual(prom.voci_budget.get(categoria='venue').importo_allocato, Decimal('3000'))


class ConfrontoPreventiviTestCase(TestCase):
    """Test confronto preventivi per categoria"""

    def setUp(self):
        self.prom = crea_prom()
        self.caro = crea_preventivo(self.prom, nome_fornitore='Caro', prezzo_totale=Decimal('9000'), valutazione=5)
        self.economico = crea_preventivo(self.prom, nome_fornitore='Economico', prezzo_totale=Decimal('4000'), valutazione=2)
        self.medio = crea_preventivo(self.prom, nome_fornitore='Medio', prezzo_totale=Decimal('5000'), valutazione=4)
        self.dj = crea_preventivo(self.prom, categoria='dj', nome_fornitore='DJ Tal', prezzo_totale=Decimal('1500'))

    def test_statistiche_categoria(self):
        risultato = confronta_preventivi(PreventivoFornitore.objects.all())
        stats = risultato['statistiche']['venue']

        self.assertEqual(stats['numero'], 3)
        self.assertEqual(stats['prezzo_min'], Decimal('4000'))
        self.assertEqual(stats['prezzo_max'], Decimal('9000'))
        self.assertEqual(stats['prezzo_medio'], 6000)
        self.assertEqual(stats['piu_economico_id'], self.economico.pk)
        self.assertEqual(stats['meglio_valutato_id'], self.caro.pk)
        # 4/5000 > 5/9000 > 2/4000
        self.assertEqual(stats['miglior_rapporto_id'], self.medio.pk)

    def test_categoria_senza_valutazioni(self):
        stats = confronta_preventivi(PreventivoFornitore.objects.all())['statistiche']['dj']
        self.assertEqual(stats['piu_economico_id'], self.dj.pk)
        self.assertIsNone(stats['meglio_valutato_id'])
        self.assertIsNone(stats['miglior_rapporto_id'])

    def test_miglior_rapporto_coincide_con_economico(self):
        self.economico.valutazione = 5
        self.economico.save()

        stats = confronta_preventivi(PreventivoFornitore.objects.all())['statistiche']['venue']
        self.assertEqual(stats['piu_economico_id'], self.economico.pk)
        self.assertIsNone(stats['miglior_rapporto_id'])

    def test_ordinamento_e_filtro(self):
        risultato = confronta_preventivi(PreventivoFornitore.objects.all())
        self.assertEqual(
            [p.nome_fornitore for p in risultato['preventivi']],
            ['DJ Tal', 'Economico', 'Medio', 'Caro'],
        )

        filtrato = confronta_preventivi(PreventivoFornitore.objects.all(), categoria='dj')
        self.assertEqual(list(filtrato['statistiche']), ['dj'])

    def test_sanifica(self):
        self.caro.telefono = '0501234567'
        self.caro.note_admin = 'trattabile'
        self.caro.save()

        pubblico = sanifica_preventivo(self.caro, is_admin=False)
        self.assertNotIn('telefono', pubblico)
        self.assertNotIn('note_admin', pubblico)
        self.assertIn('telefono', sanifica_preventivo(self.caro, is_admin=True))

    def test_seleziona_aggiorna_budget(self):
        seleziona_preventivo(self.caro)
        seleziona_preventivo(self.medio)

        self.caro.refresh_from_db()
        self.assertFalse(self.caro.selezionato)
        self.assertTrue(PreventivoFornitore.objects.get(pk=self.medio.pk).selezionato)
        voce = VoceBudget.objects.get(prom=self.prom, categoria='venue')
        self.assertEqual(voce.importo_allocato, Decimal('5000'))

    def test_nome_file(self):
        oggi = timezone.localdate()
        self.assertEqual(nome_file_confronto(oggi), f"quotes_comparison_{oggi.isoformat()}.csv")


class VotazioneTestCase(TestCase):
    """Test votazione genitori"""

    def setUp(self):
        self.prom = crea_prom()
        self.finalista = crea_preventivo(self.prom, finalista=True)
        self.altro = crea_preventivo(self.prom, nome_fornitore='Altro')

    def test_apri_richiede_finalisti(self):
        prom = crea_prom(titolo='Senza finalisti')
        with self.assertRaises(ValidationError):
            prom.apri_votazione()

    def test_voto_con_votazione_chiusa(self):
        with self.assertRaisesMessage(ValidationError, 'non è attiva'):
            self.prom.registra_voto(self.finalista, '0501234567', 'prefer')

    def test_voto_fuori_finestra(self):
        self.prom.votazione_attiva = True
        self.prom.fine_votazione = timezone.now() - timedelta(days=1)
        self.prom.save()

        with self.assertRaisesMessage(ValidationError, 'terminata'):
            self.prom.registra_voto(self.finalista, '0501234567', 'prefer')

    def test_voto_ripetuto_aggiorna(self):
        self.prom.apri_votazione()
        self.assertEqual(self.prom.stato, 'voting')

        voto, creato = self.prom.registra_voto(self.finalista, ' Dana@Example.com ', 'prefer')
        self.assertTrue(creato)
        self.assertEqual(voto.identificativo_votante, hash_identificativo('dana@example.com'))

        voto, creato = self.prom.registra_voto(self.finalista, 'dana@example.com', 'oppose')
        self.assertFalse(creato)
        self.assertEqual(Voto.objects.count(), 1)
        self.assertEqual(voto.tipo_voto, 'oppose')

    def test_non_finalista(self):
        self.prom.apri_votazione()
        with self.assertRaises(ValidationError):
            self.prom.registra_voto(self.altro, '0501234567', 'prefer')

    def test_statistiche(self):
        self.prom.apri_votazione()
        secondo = crea_preventivo(self.prom, nome_fornitore='Secondo', finalista=True)
        self.prom.registra_voto(self.finalista, 'a', 'prefer')
        self.prom.registra_voto(self.finalista, 'b', 'oppose')
        self.prom.registra_voto(secondo, 'a', 'neutral')

        stats = statistiche_voti(self.prom)

        self.assertEqual(stats['totale_votanti'], 2)
        self.assertEqual(
            stats['per_preventivo'][str(self.finalista.pk)],
            {'prefer': 1, 'neutral': 0, 'oppose': 1, 'totale': 2},
        )

    def test_chiudi_votazione(self):
        self.prom.apri_votazione()
        self.prom.chiudi_votazione()
        self.assertFalse(self.prom.votazione_attiva)
        self.assertEqual(self.prom.stato, 'planning')


class PromApiTestCase(TestCase):
    """Test API /api/prom/"""

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='editor', password='pass12345')
        self.prom = crea_prom()
        self.preventivo = crea_preventivo(
            self.prom, finalista=True, telefono='0501234567', note_admin='riservato'
        )

    def test_lista_pubblica(self):
        data = self.client.get('/api/prom/').json()
        self.assertTrue(data['success'])
        self.assertEqual(data['count'], 1)

    def test_creazione_richiede_login(self):
        response = self.client.post('/api/prom/', data=json.dumps({'titolo': 'Prom'}), content_type='application/json')
        self.assertEqual(response.status_code, 401)

    def test_creazione_con_default(self):
        self.client.force_login(self.editor)
        response = self.client.post('/api/prom/', data=json.dumps({'titolo': 'Prom 2026'}), content_type='application/json')

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['stato'], 'planning')
        self.assertFalse(data['votazione_attiva'])

    def test_budget_get_e_put(self):
        self.client.force_login(self.editor)
        response = self.client.put(
            f'/api/prom/{self.prom.pk}/budget/',
            data=json.dumps({'items': [
                {'categoria': 'venue', 'importo_allocato': 6000, 'importo_speso': 2500},
                {'categoria': 'dj', 'importo_allocato': 1500},
            ]}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 2)

        data = self.client.get(f'/api/prom/{self.prom.pk}/budget/').json()['data']
        self.assertEqual(len(data['items']), 2)
        self.assertEqual(data['summary']['totale_allocato'], 7500.0)
        self.assertEqual(data['summary']['percentuale_utilizzo'], 25)

    def test_budget_categoria_non_valida(self):
        self.client.force_login(self.editor)
        response = self.client.put(
            f'/api/prom/{self.prom.pk}/budget/',
            data=json.dumps({'items': [{'categoria': 'piscina', 'importo_allocato': 10}]}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(VoceBudget.objects.count(), 0)

    def test_preventivi_sanificati_per_pubblico(self):
        data = self.client.get(f'/api/prom/{self.prom.pk}/quotes/?finalists=true').json()['data']
        self.assertEqual(len(data), 1)
        self.assertNotIn('telefono', data[0])
        self.assertNotIn('note_admin', data[0])

        self.client.force_login(self.admin)
        data = self.client.get(f'/api/prom/{self.prom.pk}/quotes/').json()['data']
        self.assertEqual(data[0]['telefono'], '0501234567')

    def test_preventivi_post_solo_admin(self):
        url = f'/api/prom/{self.prom.pk}/quotes/'
        corpo = json.dumps({'categoria': 'dj', 'nome_fornitore': 'DJ Noa', 'prezzo_totale': 2000})

        self.client.force_login(self.editor)
        self.assertEqual(self.client.post(url, data=corpo, content_type='application/json').status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.post(url, data=corpo, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['servizi_inclusi'], [])

    def test_preventivo_non_finalista_nascosto(self):
        altro = crea_preventivo(self.prom, nome_fornitore='Riservato')
        response = self.client.get(f'/api/prom/{self.prom.pk}/quotes/{altro.pk}/')
        self.assertEqual(response.status_code, 404)

    def test_put_seleziona(self):
        self.client.force_login(self.admin)
        response = self.client.put(
            f'/api/prom/{self.prom.pk}/quotes/{self.preventivo.pk}/',
            data=json.dumps({'selezionato': True}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        voce = VoceBudget.objects.get(prom=self.prom, categoria='venue')
        self.assertEqual(voce.importo_allocato, Decimal('5000'))

    def test_voto_e_statistiche(self):
        url = f'/api/prom/{self.prom.pk}/votes/'
        corpo = {'preventivo_id': str(self.preventivo.pk), 'identificativo': '0509876543', 'tipo_voto': 'prefer'}

        response = self.client.post(url, data=json.dumps(corpo), content_type='application/json')
        self.assertEqual(response.status_code, 400)

        self.prom.apri_votazione()
        response = self.client.post(url, data=json.dumps(corpo), content_type='application/json')
        self.assertEqual(response.status_code, 201)

        data = self.client.get(url).json()['data']
        self.assertEqual(data['totale_votanti'], 1)
        self.assertNotIn('votes', data)

        self.client.force_login(self.admin)
        data = self.client.get(url).json()['data']
        self.assertEqual(len(data['votes']), 1)

    def test_voto_tipo_non_valido(self):
        self.prom.apri_votazione()
        response = self.client.post(
            f'/api/prom/{self.prom.pk}/votes/',
            data=json.dumps({'preventivo_id': str(self.preventivo.pk), 'identificativo': 'x', 'tipo_voto': 'forse'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('tipo_voto', response.json()['details'])


class PromPagineTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='dana', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='olga', password='pass12345', ruolo='editor')
        self.prom = crea_prom()
        crea_preventivo(self.prom, finalista=True, valutazione=4)
        crea_preventivo(self.prom, nome_fornitore='Secondo', prezzo_totale=Decimal('3000'))

    def test_dashboard_e_dettaglio(self):
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get(reverse('prom:dashboard')).status_code, 200)
        response = self.client.get(self.prom.get_absolute_url())
        self.assertEqual(response.status_code, 200)
        self.assertIn('riepilogo', response.context)

    def test_export_csv(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('prom:prom_preventivi', kwargs={'pk': self.prom.pk}) + '?export=csv')

        self.assertEqual(response.status_code, 200)
        self.assertIn('quotes_comparison_', response['Content-Disposition'])
        contenuto = response.content.decode('utf-8')
        self.assertTrue(contenuto.startswith('\ufeff'))
        self.assertIn('שם ספק', contenuto)

    def test_preventivi_riservati_agli_admin(self):
        self.client.force_login(self.editor)
        url = reverse('prom:prom_preventivi', kwargs={'pk': self.prom.pk})
        self.assertRedirects(self.client.get(url), reverse('dashboard'))
        self.assertEqual(self.client.get(reverse('prom:dashboard')).status_code, 200)

    def test_pagina_votazione_pubblica(self):
        self.prom.apri_votazione()
        url = reverse('prom:prom_votazione', kwargs={'pk': self.prom.pk})

        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context['righe']), 1)

        finalista = self.prom.preventivi.get(finalista=True)
        self.client.post(url, {'preventivo': finalista.pk, 'identificativo': '0501112233', 'tipo_voto': 'prefer'})
        self.assertEqual(Voto.objects.filter(preventivo=finalista).count(), 1)

    def test_qr_code(self):
        response = self.client.get(reverse('prom:prom_qr_code', kwargs={'pk': self.prom.pk}))
        self.assertEqual(response['Content-Type'], 'image/png')
