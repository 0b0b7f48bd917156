"""
Tests per app users: ruoli, login e dashboard.
"""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from attivita.models import Attivita
from comunicazioni.models import MessaggioUrgente
from idee.models import Idea
from spese.models import Spesa

User = get_user_model()


class UserRuoloTestCase(TestCase):

    def test_is_portal_admin(self):
        admin = User.objects.create_user(username='admin', password='x', ruolo='admin')
        editor = User.objects.create_user(username='editor', password='x')
        superuser = User.objects.create_superuser(username='root', password='x', email='root@example.com')

        self.assertTrue(admin.is_portal_admin)
        self.assertFalse(editor.is_portal_admin)
        self.assertEqual(editor.ruolo, 'editor')
        self.assertTrue(superuser.is_portal_admin)

    def test_risultato_ricerca(self):
        user = User.objects.create_user(username='dana', password='x', first_name='Dana', ruolo='admin')
        self.assertEqual(user.get_search_result_display(), 'Dana (Amministratore)')


class LoginTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='dana', password='test123')

    def test_pagina_login(self):
        response = self.client.get(reverse('users:login'))
        self.assertEqual(response.status_code, 200)

    def test_login_ok(self):
        response = self.client.post(reverse('users:login'), {'username': 'dana', 'password': 'test123'})
        self.assertRedirects(response, reverse('dashboard'))
        self.assertTrue(self.client.session.get_expire_at_browser_close())

    def test_login_con_email(self):
        self.user.email = 'dana@example.com'
        self.user.save()
        response = self.client.post(reverse('users:login'), {'username': 'Dana@Example.com', 'password': 'test123'})
        self.assertRedirects(response, reverse('dashboard'))

    def test_ricordami(self):
        self.client.post(
            reverse('users:login'), {'username': 'dana', 'password': 'test123', 'remember_me': 'on'}
        )
        self.assertEqual(self.client.session.get_expiry_age(), 60 * 60 * 24 * 30)

    def test_credenziali_errate(self):
        response = self.client.post(reverse('users:login'), {'username': 'dana', 'password': 'sbagliata'})
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_logout(self):
        self.client.login(username='dana', password='test123')
        response = self.client.post(reverse('users:logout'))
        self.assertRedirects(response, reverse('users:login'))
        self.assertNotIn('_auth_user_id', self.client.session)


class DashboardTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='dana', password='test123')
        oggi = timezone.localdate()

        Attivita.objects.create(titolo='Ordinare la torta', responsabile_nome='Dana', scadenza=oggi + timedelta(days=3))
        Attivita.objects.create(titolo='Chiamare il fornitore', responsabile_nome='Dana', scadenza=oggi - timedelta(days=2))
        Attivita.objects.create(titolo='Fatta', responsabile_nome='Dana', scadenza=oggi - timedelta(days=2), stato='completed')

        Idea.objects.create(categoria='feature', titolo='Bacheca', descrizione='Una bacheca per gli annunci')
        Idea.objects.create(
            categoria='other', titolo='Vecchia', descrizione='Idea già valutata dal comitato', stato='reviewed'
        )

        Spesa.objects.create(
            titolo='Donazione', importo=Decimal('500.00'), tipo='income', categoria='donations', data_spesa=oggi
        )
        Spesa.objects.create(
            titolo='Rinfresco', importo=Decimal('120.00'), tipo='expense', categoria='refreshments', data_spesa=oggi
        )

        MessaggioUrgente.objects.create(titolo_he='הודעה דחופה', tipo='urgent')

    def test_login_richiesto(self):
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, 302)

    def test_statistiche(self):
        self.client.login(username='dana', password='test123')
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, 200)

        stats = response.context['stats']
        self.assertEqual(stats['attivita_aperte'], 2)
        self.assertEqual(stats['attivita_scadute'], 1)
        self.assertEqual(stats['idee_nuove'], 1)
        self.assertEqual(stats['saldo_mese'], Decimal('380.00'))
        self.assertEqual(stats['messaggi_urgenti_attivi'], 1)
        self.assertEqual(stats['eventi_prossimi_30gg'], 0)

    def test_attivita_urgenti_include_scadute(self):
        self.client.login(username='dana', password='test123')
        response = self.client.get(reverse('dashboard'))
        titoli = [a.titolo for a in response.context['attivita_urgenti']]
        self.assertEqual(titoli, ['Chiamare il fornitore'])


class PermessiRuoloTestCase(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='dana', password='x', ruolo='admin')
        self.editor = User.objects.create_user(username='olga', password='x', ruolo='editor')

    def test_admin_ha_tutti_i_permessi(self):
        self.assertTrue(self.admin.has_perm('spese.add_spesa'))
        self.assertTrue(self.admin.has_perm('comunicazioni.change_impostazioniapp'))
        self.assertTrue(self.admin.has_perm('users.change_user'))
        self.assertTrue(self.admin.has_module_perms('users'))

    def test_editor_gestisce_i_contenuti(self):
        self.assertTrue(self.editor.has_perm('eventi.add_evento'))
        self.assertTrue(self.editor.has_perm('attivita.change_attivita'))
        self.assertTrue(self.editor.has_perms(['protocolli.view_protocollo', 'spese.view_spesa']))
        self.assertTrue(self.editor.has_module_perms('eventi'))

    def test_editor_escluso_da_impostazioni_e_dati_riservati(self):
        self.assertFalse(self.editor.has_perm('comunicazioni.change_impostazioniapp'))
        self.assertFalse(self.editor.has_perm('prom.view_preventivofornitore'))
        self.assertFalse(self.editor.has_perm('users.change_user'))
        self.assertFalse(self.editor.has_module_perms('users'))

    def test_pagine_html_aperte_ai_ruoli(self):
        for utente in (self.admin, self.editor):
            self.client.force_login(utente)
            for nome in ('spese:spesa_list', 'eventi:evento_list', 'attivita:attivita_list', 'protocolli:protocollo_list'):
                self.assertEqual(self.client.get(reverse(nome)).status_code, 200, (utente, nome))
