"""
Tests per app eventi.
"""

import json
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from .models import Evento, Registrazione, ListaSpesa, ArticoloSpesa
from .services import eventi_per_telefono, liste_per_telefono
from .tasks import aggiorna_stato_eventi

User = get_user_model()


def crea_evento(**kwargs):
    dati = {
        'titolo': 'Festa di fine anno',
        'data_inizio': timezone.now() + timedelta(days=10),
        'stato': 'published',
        'registrazione_attiva': True,
    }
    dati.update(kwargs)
    return Evento.objects.create(**dati)


class EventoRegistrazioneTestCase(TestCase):
    """Test per Evento.registra()"""

    def test_registrazione_incrementa_partecipanti(self):
        evento = crea_evento(max_partecipanti=10)

        registrazione = evento.registra('Dana Levi', '050-123-4567', numero_partecipanti=3)

        self.assertEqual(registrazione.telefono, '0501234567')
        self.assertEqual(registrazione.stato, 'confirmed')
        self.assertEqual(evento.partecipanti_attuali, 3)
        self.assertEqual(evento.posti_disponibili, 7)

    def test_registrazione_chiusa(self):
        evento = crea_evento(registrazione_attiva=False)

        with self.assertRaisesMessage(ValidationError, 'chiusa'):
            evento.registra('Dana Levi', '0501234567')

    def test_scadenza_passata(self):
        evento = crea_evento(scadenza_registrazione=timezone.now() - timedelta(hours=1))

        with self.assertRaisesMessage(ValidationError, 'scaduto'):
            evento.registra('Dana Levi', '0501234567')

    def test_posti_insufficienti(self):
        evento = crea_evento(max_partecipanti=5, partecipanti_attuali=4)

        with self.assertRaisesMessage(ValidationError, 'posti'):
            evento.registra('Dana Levi', '0501234567', numero_partecipanti=2)

        self.assertEqual(Registrazione.objects.count(), 0)

    def test_capienza_esatta_accettata(self):
        evento = crea_evento(max_partecipanti=5, partecipanti_attuali=3)
        evento.registra('Dana Levi', '0501234567', numero_partecipanti=2)
        self.assertEqual(evento.partecipanti_attuali, 5)
        self.assertFalse(evento.registrazione_aperta)

    def test_telefono_duplicato(self):
        evento = crea_evento()
        evento.registra('Dana Levi', '0501234567')

        with self.assertRaisesMessage(ValidationError, 'già registrato'):
            evento.registra('Altro Nome', '050 123 4567')

        self.assertEqual(evento.partecipanti_attuali, 1)

    def test_ordine_errori_chiusa_prima_della_capienza(self):
        """Con registrazione disattivata e posti esauriti vince 'chiusa'"""
        evento = crea_evento(registrazione_attiva=False, max_partecipanti=1, partecipanti_attuali=1)

        with self.assertRaisesMessage(ValidationError, 'chiusa'):
            evento.registra('Dana Levi', '0501234567')

    def test_telefono_non_valido(self):
        evento = crea_evento()
        with self.assertRaises(ValidationError):
            evento.registra('Dana Levi', '12345')

    def test_data_fine_precedente(self):
        evento = Evento(
            titolo='Evento',
            data_inizio=timezone.now(),
            data_fine=timezone.now() - timedelta(hours=2),
        )
        with self.assertRaises(ValidationError):
            evento.full_clean()


class ArticoloSpesaTestCase(TestCase):
    """Test prenotazione articoli lista spesa"""

    def setUp(self):
        self.lista = ListaSpesa.objects.create(
            nome_classe='ג2',
            nome_evento='Picnic di classe',
            telefono_creatore='0521112233',
        )
        self.articolo = ArticoloSpesa.objects.create(lista=self.lista, nome='Pita', quantita=20)

    def test_prenota(self):
        self.articolo.prenota('  Yael  ')
        self.assertEqual(self.articolo.nome_assegnatario, 'Yael')
        self.assertIsNotNone(self.articolo.assegnato_at)
        self.assertEqual(self.lista.articoli_prenotati, 1)

    def test_articolo_gia_preso(self):
        self.articolo.prenota('Yael')

        altro = ArticoloSpesa.objects.get(pk=self.articolo.pk)
        with self.assertRaisesMessage(ValidationError, 'già stato preso'):
            altro.prenota('Miriam')

        self.articolo.refresh_from_db()
        self.assertEqual(self.articolo.nome_assegnatario, 'Yael')

    def test_nome_troppo_corto(self):
        with self.assertRaises(ValidationError):
            self.articolo.prenota('Y')

    def test_lista_chiusa(self):
        self.lista.stato = 'completed'
        self.lista.save()
        with self.assertRaisesMessage(ValidationError, 'chiusa'):
            self.articolo.prenota('Yael')

    def test_annulla_prenotazione(self):
        self.articolo.prenota('Yael')
        self.articolo.annulla_prenotazione()
        self.articolo.refresh_from_db()
        self.assertEqual(self.articolo.nome_assegnatario, '')
        self.assertIsNone(self.articolo.assegnato_at)


class RicercaTelefonoTestCase(TestCase):
    """Test 'I miei eventi' / 'La mia spesa'"""

    def test_eventi_per_telefono(self):
        vecchio = crea_evento(titolo='Vecchio', telefono_creatore='0541234567',
                              data_inizio=timezone.now() - timedelta(days=5))
        nuovo = crea_evento(titolo='Nuovo', telefono_creatore='0541234567')
        crea_evento(titolo='Archiviato', telefono_creatore='0541234567', archiviato_at=timezone.now())
        crea_evento(titolo='Altro telefono', telefono_creatore='0549999999')

        risultati = eventi_per_telefono('054-123-4567')

        self.assertEqual([r['id'] for r in risultati], [str(nuovo.pk), str(vecchio.pk)])
        self.assertEqual(risultati[0]['edit_url'], f'/events/edit/{nuovo.edit_token}')

    def test_limite_cinquanta(self):
        Evento.objects.bulk_create([
            Evento(titolo=f'Evento {i}', data_inizio=timezone.now(), telefono_creatore='0541234567')
            for i in range(55)
        ])
        self.assertEqual(len(eventi_per_telefono('0541234567')), 50)

    def test_telefono_non_valido(self):
        with self.assertRaises(ValidationError):
            eventi_per_telefono('123')

    def test_liste_per_telefono(self):
        lista = ListaSpesa.objects.create(nome_classe='א1', nome_evento='Mesibat Hanukkah',
                                          telefono_creatore='0521112233')
        ArticoloSpesa.objects.create(lista=lista, nome='Sufganiot', nome_assegnatario='Noa')
        ArticoloSpesa.objects.create(lista=lista, nome='Succo')
        ListaSpesa.objects.create(nome_classe='א1', nome_evento='Archiviata',
                                  telefono_creatore='0521112233', stato='archived')

        risultati = liste_per_telefono('052-111-2233')

        self.assertEqual(len(risultati), 1)
        self.assertEqual(risultati[0]['articoli_totali'], 2)
        self.assertEqual(risultati[0]['articoli_prenotati'], 1)
        self.assertEqual(risultati[0]['share_url'], lista.get_absolute_url())


class EventiApiTestCase(TestCase):
    """Test API /api/events/"""

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='pass12345', ruolo='admin')
        self.editor = User.objects.create_user(username='editor', password='pass12345')

    def test_lista_pubblica_solo_eventi_pubblicati(self):
        pubblicato = crea_evento()
        crea_evento(titolo='Bozza', stato='draft')
        crea_evento(titolo='Riservato', visibilita='committee_only')

        response = self.client.get('/api/events/')
        data = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertTrue(data['success'])
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['data'][0]['id'], str(pubblicato.pk))

    def test_filtro_upcoming(self):
        crea_evento(titolo='Passato', data_inizio=timezone.now() - timedelta(days=1))
        futuro = crea_evento(titolo='Futuro')

        data = self.client.get('/api/events/?upcoming=true').json()

        self.assertEqual([e['id'] for e in data['data']], [str(futuro.pk)])

    def test_creazione_richiede_login(self):
        response = self.client.post(
            '/api/events/', data=json.dumps({'titolo': 'Nuovo'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_creazione_con_default(self):
        self.client.force_login(self.editor)
        response = self.client.post(
            '/api/events/',
            data=json.dumps({'titolo': 'Riunione genitori', 'data_inizio': '2030-03-01T19:00'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201)
        evento = Evento.objects.get(titolo='Riunione genitori')
        self.assertEqual(evento.stato, 'draft')
        self.assertEqual(evento.created_by, self.editor)

    def test_creazione_dati_non_validi(self):
        self.client.force_login(self.editor)
        response = self.client.post(
            '/api/events/', data=json.dumps({'titolo': 'X'}), content_type='application/json'
        )
        data = response.json()
        self.assertEqual(response.status_code, 400)
        self.assertIn('titolo', data['details'])
        self.assertIn('data_inizio', data['details'])

    def test_aggiornamento_parziale(self):
        evento = crea_evento(luogo='Palestra')
        self.client.force_login(self.editor)

        response = self.client.put(
            f'/api/events/{evento.pk}/', data=json.dumps({'titolo': 'Nuovo titolo'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        evento.refresh_from_db()
        self.assertEqual(evento.titolo, 'Nuovo titolo')
        self.assertEqual(evento.luogo, 'Palestra')

    def test_eliminazione_solo_admin(self):
        evento = crea_evento()
        self.client.force_login(self.editor)
        self.assertEqual(self.client.delete(f'/api/events/{evento.pk}/').status_code, 403)

        self.client.force_login(self.admin)
        self.assertEqual(self.client.delete(f'/api/events/{evento.pk}/').status_code, 200)
        evento.refresh_from_db()
        self.assertFalse(evento.is_active)

    def test_registrazione_api(self):
        evento = crea_evento(max_partecipanti=2)
        url = f'/api/events/{evento.pk}/register/'

        response = self.client.post(
            url, data=json.dumps({'nome': 'Dana', 'telefono': '0501234567', 'numero_partecipanti': 2}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['posti_disponibili'], 0)

        response = self.client.post(
            url, data=json.dumps({'nome': 'Avi', 'telefono': '0507654321'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('posti', response.json()['error'])

    def test_statistiche_registrazioni_admin(self):
        evento = crea_evento()
        evento.registra('Dana', '0501234567', numero_partecipanti=2)
        Registrazione.objects.create(evento=evento, nome='Avi', telefono='0507654321', stato='cancelled')
        url = f'/api/events/{evento.pk}/register/'

        self.assertEqual(self.client.get(url).status_code, 401)

        self.client.force_login(self.admin)
        data = self.client.get(url).json()
        self.assertEqual(data['count'], 2)
        self.assertEqual(data['stats']['confermate'], 1)
        self.assertEqual(data['stats']['annullate'], 1)
        self.assertEqual(data['stats']['partecipanti'], 2)

    def test_my_events_telefono_non_valido(self):
        response = self.client.get('/api/events/my-events/?phone=12345')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_my_events(self):
        evento = crea_evento(telefono_creatore='0541234567')
        data = self.client.get('/api/events/my-events/?phone=054-1234567').json()
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['data'][0]['edit_url'], f'/events/edit/{evento.edit_token}')

    def test_token_patch(self):
        evento = crea_evento(titolo='Prima')
        response = self.client.patch(
            f'/api/events/token/{evento.edit_token}/', data=json.dumps({'titolo': 'Dopo'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        evento.refresh_from_db()
        self.assertEqual(evento.titolo, 'Dopo')

        self.assertEqual(self.client.get('/api/events/token/inesistente/').status_code, 404)


class GroceryApiTestCase(TestCase):
    """Test API /api/grocery/"""

    def setUp(self):
        self.lista = ListaSpesa.objects.create(nome_classe='ב3', nome_evento='Tu BiShvat')
        self.articolo = ArticoloSpesa.objects.create(lista=self.lista, nome='Frutta secca')

    def _claim_url(self, item_id=None, token=None):
        return f'/api/grocery/{token or self.lista.share_token}/claim/{item_id or self.articolo.pk}/'

    def test_prenotazione_e_annullamento(self):
        response = self.client.post(
            self._claim_url(), data=json.dumps({'nome': 'Roni'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['nome_assegnatario'], 'Roni')

        response = self.client.post(
            self._claim_url(), data=json.dumps({'nome': 'Tal'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.delete(self._claim_url())
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['data']['nome_assegnatario'])

    def test_lista_inesistente(self):
        response = self.client.post(
            self._claim_url(token='nessuno'), data=json.dumps({'nome': 'Roni'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 404)

    def test_articolo_inesistente(self):
        altra = ListaSpesa.objects.create(nome_classe='ב3', nome_evento='Altra')
        estraneo = ArticoloSpesa.objects.create(lista=altra, nome='Pane')
        response = self.client.post(
            self._claim_url(item_id=estraneo.pk), data=json.dumps({'nome': 'Roni'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 404)

    def test_lista_chiusa(self):
        self.lista.stato = 'completed'
        self.lista.save()
        response = self.client.post(
            self._claim_url(), data=json.dumps({'nome': 'Roni'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_aggiunta_articoli(self):
        response = self.client.post(
            f'/api/grocery/{self.lista.share_token}/items/',
            data=json.dumps({'items': [{'nome': 'Piatti', 'quantita': 30}, {'nome': 'Bicchieri', 'note': None}]}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.lista.articoli.count(), 3)
        self.assertEqual(self.lista.articoli.get(nome='Bicchieri').note, '')

    def test_articolo_prenotato_non_eliminabile(self):
        self.articolo.prenota('Roni')
        response = self.client.delete(f'/api/grocery/{self.lista.share_token}/items/{self.articolo.pk}/')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(ArticoloSpesa.objects.filter(pk=self.articolo.pk).exists())

    def test_metodo_non_consentito(self):
        response = self.client.put(self._claim_url())
        self.assertEqual(response.status_code, 405)


class EventiPagineTestCase(TestCase):
    """Test pagine HTML pubbliche e del comitato"""

    def setUp(self):
        self.editor = User.objects.create_user(username='olga', password='pass12345', ruolo='editor')

    def test_registrazione_pubblica(self):
        evento = crea_evento()
        response = self.client.post(
            reverse('eventi:evento_registrazione', kwargs={'pk': evento.pk}),
            {'nome': 'Dana Levi', 'telefono': '050-1234567', 'numero_partecipanti': 2},
        )
        self.assertEqual(response.status_code, 302)
        evento.refresh_from_db()
        self.assertEqual(evento.partecipanti_attuali, 2)

    def test_modifica_tramite_token(self):
        evento = crea_evento()
        url = reverse('eventi:evento_modifica_token', kwargs={'token': evento.edit_token})
        self.assertEqual(self.client.get(url).status_code, 200)
        self.assertEqual(self.client.get(url.replace(evento.edit_token, 'sbagliato')).status_code, 404)

    def test_lista_eventi_richiede_login(self):
        response = self.client.get(reverse('eventi:evento_list'))
        self.assertEqual(response.status_code, 302)

    def test_editor_accede_alla_lista_eventi(self):
        self.client.force_login(self.editor)
        response = self.client.get(reverse('eventi:evento_list'))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, reverse('eventi:evento_create'))

    def test_crea_lista_spesa_imposta_autore(self):
        self.client.force_login(self.editor)
        response = self.client.post(reverse('eventi:lista_spesa_create'), {
            'nome_classe': 'ג2',
            'nome_evento': 'Hanukkah',
            'stato': 'active',
            'articoli-TOTAL_FORMS': '1',
            'articoli-INITIAL_FORMS': '0',
            'articoli-MIN_NUM_FORMS': '0',
            'articoli-MAX_NUM_FORMS': '1000',
            'articoli-0-nome': 'Sufganiyot',
            'articoli-0-quantita': '20',
            'articoli-0-ordine_visualizzazione': '0',
        })
        self.assertEqual(response.status_code, 302)

        lista = ListaSpesa.objects.get(nome_evento='Hanukkah')
        self.assertEqual(lista.created_by, self.editor)
        self.assertEqual(lista.articoli.get().quantita, 20)

    def test_dettaglio_con_condivisione(self):
        evento = crea_evento()
        self.client.force_login(self.editor)
        response = self.client.get(evento.get_absolute_url())
        self.assertEqual(response.status_code, 200)
        self.assertIn('he', response.context['condivisione'])
        self.assertIn(evento.titolo, response.context['condivisione']['he'].text)

    def test_qr_code(self):
        evento = crea_evento()
        self.client.force_login(self.editor)
        response = self.client.get(reverse('eventi:evento_qr_code', kwargs={'pk': evento.pk}))
        self.assertEqual(response['Content-Type'], 'image/png')

    def test_lista_spesa_pubblica_prenotazione(self):
        lista = ListaSpesa.objects.create(nome_classe='ד1', nome_evento='Purim')
        articolo = ArticoloSpesa.objects.create(lista=lista, nome='Mishloach manot')
        response = self.client.post(
            lista.get_absolute_url(), {'articolo_id': str(articolo.pk), 'nome_assegnatario': 'Shira'}
        )
        self.assertEqual(response.status_code, 302)
        articolo.refresh_from_db()
        self.assertEqual(articolo.nome_assegnatario, 'Shira')


class AggiornaStatoEventiTaskTestCase(TestCase):

    def test_eventi_terminati_completati(self):
        terminato = crea_evento(
            data_inizio=timezone.now() - timedelta(days=2),
            data_fine=timezone.now() - timedelta(days=1),
        )
        futuro = crea_evento()
        bozza = crea_evento(stato='draft', data_inizio=timezone.now() - timedelta(days=2))

        risultato = aggiorna_stato_eventi()

        self.assertEqual(risultato['completati'], 1)
        terminato.refresh_from_db()
        futuro.refresh_from_db()
        bozza.refresh_from_db()
        self.assertEqual(terminato.stato, 'completed')
        self.assertEqual(futuro.stato, 'published')
        self.assertEqual(bozza.stato, 'draft')
