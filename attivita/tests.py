"""
Tests per app attivita.
"""

import json
from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from .models import Attivita, AttivitaTag, Tag
from .services import (
    aggiungi_tag,
    elenco_tag,
    elimina_tag,
    filtra_attivita,
    rimuovi_tag,
    tag_in_blocco,
    verifica_modifica_tag,
)
from .tasks import invia_promemoria_attivita

User = get_user_model()


def crea_attivita(**kwargs):
    dati = {
        'titolo': 'Ordinare la torta',
        'responsabile_nome': 'Dana',
        'scadenza': timezone.localdate() + timedelta(days=7),
    }
    dati.update(kwargs)
    return Attivita.objects.create(**dati)


def crea_tag(nome='acquisti', **kwargs):
    dati = {'nome': nome, 'nome_he': 'קניות'}
    dati.update(kwargs)
    return Tag.objects.create(**dati)


class AttivitaModelTestCase(TestCase):

    def test_completata_at(self):
        attivita = crea_attivita(numero_solleciti=3)
        self.assertIsNone(attivita.completata_at)

        attivita.stato = 'completed'
        attivita.save()
        self.assertIsNotNone(attivita.completata_at)
        self.assertEqual(attivita.numero_solleciti, 0)

        attivita.stato = 'in_progress'
        attivita.save()
        self.assertIsNone(attivita.completata_at)

    def test_in_ritardo(self):
        ieri = timezone.localdate() - timedelta(days=1)
        self.assertTrue(crea_attivita(scadenza=ieri).in_ritardo)
        self.assertFalse(crea_attivita(scadenza=ieri, stato='completed').in_ritardo)
        self.assertFalse(crea_attivita(scadenza=None).in_ritardo)


class FiltriAttivitaTestCase(TestCase):

    def setUp(self):
        ieri = timezone.localdate() - timedelta(days=1)
        self.bassa = crea_attivita(titolo='Bassa', priorita='low', scadenza=date(2030, 1, 1))
        self.urgente_tardi = crea_attivita(titolo='Urgente tardi', priorita='urgent', scadenza=date(2030, 6, 1))
        self.urgente_presto = crea_attivita(titolo='Urgente presto', priorita='urgent', scadenza=date(2030, 2, 1))
        self.in_ritardo = crea_attivita(titolo='In ritardo', priorita='normal', scadenza=ieri, responsabile_nome='Olga Petrova')
        self.chiusa = crea_attivita(titolo='Chiusa', priorita='high', scadenza=ieri, stato='completed')

    def test_ordinamento_priorita_e_scadenza(self):
        titoli = [a.titolo for a in filtra_attivita(Attivita.objects.all(), {})]
        self.assertEqual(titoli, ['Urgente presto', 'Urgente tardi', 'Chiusa', 'In ritardo', 'Bassa'])

    def test_filtri(self):
        qs = Attivita.objects.all()
        self.assertEqual(filtra_attivita(qs, {'status': 'completed'}).count(), 1)
        self.assertEqual(filtra_attivita(qs, {'priority': 'urgent'}).count(), 2)
        self.assertEqual(list(filtra_attivita(qs, {'owner': 'olga'})), [self.in_ritardo])
        self.assertEqual(list(filtra_attivita(qs, {'overdue': 'true'})), [self.in_ritardo])

    def test_filtro_tag(self):
        tag = crea_tag()
        AttivitaTag.objects.create(attivita=self.bassa, tag=tag)
        self.assertEqual(list(filtra_attivita(Attivita.objects.all(), {'tag': 'acquisti'})), [self.bassa])
        self.assertEqual(list(filtra_attivita(Attivita.objects.all(), {'tag': str(tag.pk)})), [self.bassa])


class TagTestCase(TestCase):

    def setUp(self):
        self.attivita = crea_attivita()
        self.acquisti = crea_tag('acquisti', ordine_visualizzazione=2)
        self.logistica = crea_tag('logistica', nome_he='לוגיסטיקה', ordine_visualizzazione=1)
        self.sistema = crea_tag('urgente', nome_he='דחוף', di_sistema=True)

    def test_nome_non_valido(self):
        tag = Tag(nome='Con Spazi', nome_he='תגית')
        with self.assertRaises(ValidationError):
            tag.full_clean()

    def test_colore_non_valido(self):
        tag = Tag(nome='colore', nome_he='צבע', colore='blu')
        with self.assertRaises(ValidationError):
            tag.full_clean()

    def test_elenco_ordinamenti(self):
        AttivitaTag.objects.create(attivita=self.attivita, tag=self.acquisti)
        self.assertEqual(list(elenco_tag({}))[:2], [self.sistema, self.logistica])
        self.assertEqual(list(elenco_tag({'sort': 'usage'}))[0], self.acquisti)
        self.assertEqual(list(elenco_tag({'system': 'true'})), [self.sistema])

    def test_elimina_sistema(self):
        with self.assertRaises(PermissionDenied):
            elimina_tag(self.sistema)

    def test_elimina_in_uso_disattiva(self):
        AttivitaTag.objects.create(attivita=self.attivita, tag=self.acquisti)
        self.assertEqual(elimina_tag(self.acquisti), 'disattivata')
        self.acquisti.refresh_from_db()
        self.assertFalse(self.acquisti.is_active)
        self.assertNotIn(self.acquisti, elenco_tag({}))

        self.assertEqual(elimina_tag(self.logistica), 'eliminata')
        self.assertFalse(Tag.objects.filter(pk=self.logistica.pk).exists())

    def test_sistema_non_rinominabile(self):
        with self.assertRaises(PermissionDenied):
            verifica_modifica_tag(self.sistema, {'nome': 'altro'})
        with self.assertRaises(PermissionDenied):
            verifica_modifica_tag(self.sistema, {'attivo': False})
        verifica_modifica_tag(self.sistema, {'nome_he': 'דחוף מאוד'})

    def test_aggiungi_ignora_presenti(self):
        self.assertEqual(aggiungi_tag(self.attivita, [str(self.acquisti.pk)]), 1)
        self.assertEqual(aggiungi_tag(self.attivita, [str(self.acquisti.pk), str(self.logistica.pk)]), 1)
        self.assertEqual(self.attivita.attivita_tag.count(), 2)

    def test_aggiungi_tag_non_valide(self):
        with self.assertRaises(ValidationError):
            aggiungi_tag(self.attivita, [])
        self.logistica.soft_delete()
        with self.assertRaises(ValidationError):
            aggiungi_tag(self.attivita, [str(self.logistica.pk)])

    def test_rimuovi(self):
        aggiungi_tag(self.attivita, [str(self.acquisti.pk)])
        self.assertTrue(rimuovi_tag(self.attivita, self.acquisti.pk))
        self.assertFalse(rimuovi_tag(self.attivita, self.acquisti.pk))

    def test_blocco(self):
        altra = crea_attivita(titolo='Altra')
        task_ids = [str(self.attivita.pk), str(altra.pk)]
        tag_ids = [str(self.acquisti.pk), str(self.logistica.pk)]

        self.assertEqual(tag_in_blocco(task_ids, tag_ids, 'add'), 4)
        self.assertEqual(tag_in_blocco(task_ids, tag_ids, 'add'), 0)
        self.assertEqual(tag_in_blocco(task_ids, [str(self.acquisti.pk)], 'remove'), 2)

    def test_blocco_attivita_inesistente(self):
        with self.assertRaises(ValidationError):
            tag_in_blocco([str(self.acquisti.pk)], [str(self.acquisti.pk)], 'add')
        with self.assertRaises(ValidationError):
            tag_in_blocco([str(self.attivita.pk)], [str(self.acquisti.pk)], 'toggle')


class PromemoriaTestCase(TestCase):

    def test_invia_promemoria(self):
        passato = timezone.now() - timedelta(hours=1)
        da_sollecitare = crea_attivita(
            promemoria_automatico=True, data_promemoria=passato, responsabile_telefono='050-1234567'
        )
        crea_attivita(promemoria_automatico=True, data_promemoria=passato, stato='completed')
        crea_attivita(promemoria_automatico=False, data_promemoria=passato)

        risultato = invia_promemoria_attivita()

        self.assertEqual(risultato['promemoria'], 1)
        da_sollecitare.refresh_from_db()
        self.assertEqual(da_sollecitare.numero_solleciti, 1)
        self.assertTrue(da_sollecitare.ultimo_promemoria.startswith('https://wa.me/972501234567?text='))
        self.assertGreater(da_sollecitare.data_promemoria, timezone.now())


class AttivitaApiTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='editor', password='pass12345')
        self.attivita = crea_attivita()
        self.tag = crea_tag()

    def test_lista(self):
        data = self.client.get('/api/tasks/?status=pending').json()
        self.assertEqual(data['count'], 1)

    def test_creazione(self):
        body = {
            'titolo': 'Prenotare il pullman',
            'responsabile_nome': 'Olga',
            'scadenza': '2030-05-01',
            'tags': [str(self.tag.pk)],
        }
        response = self.client.post('/api/tasks/', data=json.dumps(body), content_type='application/json')
        self.assertEqual(response.status_code, 401)

        self.client.force_login(self.editor)
        response = self.client.post('/api/tasks/', data=json.dumps(body), content_type='application/json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['priorita'], 'normal')
        self.assertEqual(data['stato'], 'pending')
        self.assertEqual(data['tags'][0]['nome'], 'acquisti')

    def test_responsabile_troppo_corto(self):
        self.client.force_login(self.editor)
        body = {'titolo': 'Compito', 'responsabile_nome': 'D', 'scadenza': '2030-05-01'}
        response = self.client.post('/api/tasks/', data=json.dumps(body), content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('responsabile_nome', response.json()['details'])

    def test_put_completa(self):
        self.client.force_login(self.editor)
        response = self.client.put(
            f'/api/tasks/{self.attivita.pk}/',
            data=json.dumps({'stato': 'completed'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNotNone(response.json()['data']['completata_at'])

    def test_tag_attivita(self):
        self.client.force_login(self.editor)
        url = f'/api/tasks/{self.attivita.pk}/tags/'
        response = self.client.post(url, data=json.dumps({'tag_ids': [str(self.tag.pk)]}), content_type='application/json')
        self.assertEqual(response.json()['added_count'], 1)

        response = self.client.delete(url, data=json.dumps({'tag_id': str(self.tag.pk)}), content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.attivita.attivita_tag.count(), 0)

    def test_blocco_api(self):
        self.client.force_login(self.editor)
        response = self.client.post(
            '/api/tasks/bulk/tags/',
            data=json.dumps({'task_ids': [str(self.attivita.pk)], 'tag_ids': [str(self.tag.pk)], 'action': 'add'}),
            content_type='application/json',
        )
        self.assertEqual(response.json()['data']['affected'], 1)

    def test_tag_api_admin(self):
        body = json.dumps({'nome': 'trasporti', 'nome_he': 'הסעות'})
        self.client.force_login(self.editor)
        self.assertEqual(self.client.post('/api/tags/', data=body, content_type='application/json').status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.post('/api/tags/', data=body, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['colore'], '#0D98BA')

        response = self.client.post('/api/tags/', data=body, content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_tag_sistema_api(self):
        sistema = crea_tag('sistema', di_sistema=True)
        self.client.force_login(self.admin)
        response = self.client.patch(
            f'/api/tags/{sistema.pk}/', data=json.dumps({'attivo': False}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.delete(f'/api/tags/{sistema.pk}/').status_code, 403)


class AttivitaPagineTestCase(TestCase):

    def setUp(self):
        self.editor = User.objects.create_user(username='olga', password='pass12345', ruolo='editor')
        self.client.force_login(self.editor)

    def test_crea_con_tag(self):
        tag = crea_tag()
        response = self.client.post(reverse('attivita:attivita_create'), {
            'titolo': 'Allestire la sala',
            'responsabile_nome': 'Dana',
            'scadenza': '2030-05-01',
            'priorita': 'high',
            'stato': 'pending',
            'tags': [str(tag.pk)],
        })
        self.assertEqual(response.status_code, 302)
        attivita = Attivita.objects.get(titolo='Allestire la sala')
        self.assertEqual(list(attivita.tags.all()), [tag])
        self.assertEqual(attivita.created_by, self.editor)

    def test_lista_dettaglio_e_stato(self):
        attivita = crea_attivita()
        self.assertEqual(self.client.get(reverse('attivita:attivita_list') + '?overdue=true').status_code, 200)
        response = self.client.get(attivita.get_absolute_url())
        self.assertEqual(response.status_code, 200)
        self.assertIn('ru', response.context['condivisione'])

        self.client.post(reverse('attivita:attivita_cambia_stato', kwargs={'pk': attivita.pk}), {'stato': 'completed'})
        attivita.refresh_from_db()
        self.assertEqual(attivita.stato, 'completed')

    def test_tag_list(self):
        crea_tag()
        response = self.client.get(reverse('attivita:tag_list') + '?sort=usage')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context['tags']), 1)
