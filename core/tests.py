"""
Tests per app core: formatter di condivisione, bozze, helpers API,
campi form condivisi, export e dati iniziali.
"""

import json
from datetime import date, datetime, timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock
from urllib.parse import unquote

from django.contrib.auth import get_user_model
from django.contrib.sessions.backends.db import SessionStore
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.management import call_command
from django.http import Http404
from django.test import RequestFactory, TestCase
from django.urls import reverse
from django.utils import timezone

from attivita.models import Tag
from comunicazioni.models import GruppoClasse, ImpostazioniApp
from idee.models import Idea

from .api import ApiError, api_view, dati_parziali, json_success, parse_json_body
from .drafts import DraftStore, chiave_bozza
from .export import csv_response
from .forms import AzioniField, ListaRigheField
from .i18n import campo_localizzato, normalizza_locale
from .share_formatters import (
    RLM,
    formatta_attivita,
    formatta_data,
    formatta_evento,
    formatta_idee,
    formatta_link_gruppi,
    formatta_maglietta_bianca,
    formatta_messaggio_urgente,
    formatta_protocollo,
    formatta_rappresentanti,
    link_whatsapp,
)
from .validators import hash_identificativo, normalizza_telefono, valida_telefono_israeliano

User = get_user_model()


# ============================================================================
# SHARE FORMATTERS
# ============================================================================


class ShareFormattersTestCase(TestCase):

    def test_link_whatsapp_codifica_il_testo(self):
        link = link_whatsapp("שלום & ciao")
        self.assertTrue(link.startswith("https://wa.me/?text="))
        self.assertNotIn(" ", link)
        self.assertEqual(unquote(link.split("text=", 1)[1]), "שלום & ciao")

    def test_formatta_data_ebraico_e_russo(self):
        self.assertEqual(formatta_data(date(2025, 1, 15), "he"), "15 בינואר 2025")
        self.assertEqual(formatta_data(date(2025, 1, 15), "ru"), "15 января 2025")
        self.assertEqual(formatta_data(None, "he"), "")

    def test_formatta_protocollo(self):
        dati = formatta_protocollo(
            {"id": "abc", "titolo": "Riunione di marzo", "data_protocollo": "2025-03-20"}, "he"
        )
        self.assertEqual(dati.title, "Riunione di marzo")
        self.assertEqual(dati.url, "https://beeri.online/he/protocols/abc")
        self.assertTrue(dati.text.startswith("📋 *Riunione di marzo*\n\n📅 20 במרץ 2025"))
        self.assertIn("📢 אל תפספסו שום עדכון! בקרו בפורטל:", dati.text)

    def test_formatta_attivita_tronca_e_traduce(self):
        dati = formatta_attivita(
            {
                "titolo": "Comprare i palloncini",
                "descrizione": "x" * 120,
                "priorita": "urgent",
                "stato": "pending",
                "responsabile_nome": "Dana",
                "scadenza": "2025-04-01",
            },
            "he",
        )
        self.assertEqual(dati.url, "https://beeri.online/he/tasks")
        self.assertIn(f"📝 {'x' * 100}...\n\n", dati.text)
        self.assertIn("📅 תאריך יעד: 1 באפריל 2025\n", dati.text)
        self.assertIn("🔴 עדיפות: דחופה\n", dati.text)
        self.assertIn("📊 סטטוס: לביצוע\n", dati.text)
        self.assertIn("👤 אחראי: Dana\n", dati.text)

    def test_formatta_evento_russo(self):
        dati = formatta_evento(
            {
                "id": "e1",
                "titolo": "מסיבת סוף שנה",
                "titolo_ru": "",
                "luogo": "אולם",
                "luogo_ru": "Зал",
                "tipo": "trip",
                "data_inizio": "2025-05-16T18:00:00",
            },
            "ru",
        )
        self.assertEqual(dati.title, "מסיבת סוף שנה")
        self.assertEqual(dati.url, "https://beeri.online/ru/events/e1")
        self.assertIn("🏷️ Тип: Поездка\n", dati.text)
        self.assertIn("📆 пятница, 16 мая 2025\n⏰ 18:00", dati.text)
        self.assertIn("📍 Место: Зал", dati.text)

    def test_formatta_idee(self):
        dati = formatta_idee("ru")
        self.assertEqual(dati.title, "Есть идеи?")
        self.assertIn("https://beeri.online/ideas\n\n📢 Не пропустите обновления!", dati.text)
        self.assertIsNone(dati.url)

    def test_formatta_rappresentanti_raggruppa_per_livello(self):
        dati = formatta_rappresentanti(
            [
                {"classe": "ב2", "nome": "Noa"},
                {"classe": "א1", "nome": "Dana"},
                {"classe": "א2", "nome": "Yael"},
            ],
            "he",
        )
        self.assertIn(f"א׳:\nDana - א1{RLM}\nYael - א2{RLM}", dati.text)
        self.assertLess(dati.text.index("א׳:"), dati.text.index("ב׳:"))

    def test_messaggio_urgente_russo_ricade_su_ebraico(self):
        messaggio = {
            "icona": "⚠️",
            "titolo_he": "הודעה",
            "titolo_ru": "",
            "descrizione_he": "פרטים",
            "data_inizio": "2025-03-01",
            "data_fine": "2025-03-05",
        }
        dati = formatta_messaggio_urgente(messaggio, "ru")
        self.assertEqual(dati.title, "הודעה")
        self.assertEqual(
            dati.text, "⚠️ הודעה\n\nפרטים\n\n📅 01/03/2025 - 05/03/2025\n\n🌐 https://beeri.online/ru"
        )

    def test_maglietta_bianca_oggi_o_domani(self):
        self.assertEqual(formatta_maglietta_bianca("he", venerdi=True).title, "היום - חולצה לבנה!")
        self.assertEqual(formatta_maglietta_bianca("he").title, "מחר - חולצה לבנה!")

    def test_link_gruppi(self):
        dati = formatta_link_gruppi([{"classe": "א", "url_whatsapp": "https://chat.whatsapp.com/x"}], "he")
        self.assertIn("*שכבת א*\nhttps://chat.whatsapp.com/x", dati.text)
        self.assertEqual(dati.as_dict()["url"], "https://beeri.online/he")


class I18nTestCase(TestCase):

    def test_normalizza_locale(self):
        self.assertEqual(normalizza_locale("ru-RU"), "ru")
        self.assertEqual(normalizza_locale("en"), "he")

    def test_campo_localizzato(self):
        obj = {"titolo": "כותרת", "titolo_ru": "Заголовок"}
        self.assertEqual(campo_localizzato(obj, "titolo", "ru"), "Заголовок")
        self.assertEqual(campo_localizzato(obj, "titolo", "he"), "כותרת")
        self.assertEqual(campo_localizzato({"titolo": "כותרת", "titolo_ru": ""}, "titolo", "ru"), "כותרת")


# ============================================================================
# VALIDATORI
# ============================================================================


class ValidatorsTestCase(TestCase):

    def test_normalizza_telefono(self):
        self.assertEqual(normalizza_telefono("050-123 4567"), "0501234567")
        self.assertEqual(normalizza_telefono(None), "")

    def test_telefono_israeliano(self):
        valida_telefono_israeliano("0501234567")
        with self.assertRaises(ValidationError):
            valida_telefono_israeliano("021234567")

    def test_hash_identificativo_normalizzato(self):
        self.assertEqual(hash_identificativo(" Dana@Example.com "), hash_identificativo("dana@example.com"))
        self.assertEqual(len(hash_identificativo("x")), 64)


# ============================================================================
# BOZZE
# ============================================================================


class DraftStoreTestCase(TestCase):

    def setUp(self):
        self.session = SessionStore()

    def test_chiave_bozza(self):
        self.assertEqual(chiave_bozza("protocol"), "draft_protocol_new")
        self.assertEqual(chiave_bozza("task", "42"), "draft_task_edit_42")

    def test_tipo_non_valido(self):
        with self.assertRaises(ValueError):
            DraftStore(self.session, "invoice")

    def test_salva_e_ripristina(self):
        store = DraftStore(self.session, "protocol", entita_id=7)
        self.assertFalse(store.has_draft)
        self.assertTrue(store.save({"titolo": "Bozza"}))

        bozza = store.get()
        self.assertEqual(bozza["formData"], {"titolo": "Bozza"})
        self.assertEqual(bozza["metadata"]["action"], "edit")
        self.assertEqual(bozza["metadata"]["entityId"], "7")
        self.assertEqual(store.restore(), {"titolo": "Bozza"})

        store.clear()
        self.assertIsNone(store.restore())

    def test_debounce(self):
        store = DraftStore(self.session, "task", debounce=2)
        self.assertTrue(store.save({"titolo": "uno"}))
        self.assertFalse(store.save({"titolo": "due"}))
        self.assertEqual(store.restore(), {"titolo": "uno"})
        self.assertTrue(store.save({"titolo": "tre"}, force=True))
        self.assertEqual(store.restore(), {"titolo": "tre"})

    def test_debounce_scaduto(self):
        store = DraftStore(self.session, "task", debounce=2)
        store.save({"titolo": "uno"})
        dopo = timezone.now() + timedelta(seconds=5)
        with mock.patch("core.drafts.timezone.now", return_value=dopo):
            self.assertTrue(store.save({"titolo": "due"}))


class DraftApiTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username="editor", password="test123", ruolo="editor")

    def test_login_richiesto(self):
        response = self.client.get(reverse("core_api:draft", args=["protocol"]))
        self.assertEqual(response.status_code, 401)

    def test_ciclo_bozza(self):
        self.client.login(username="editor", password="test123")
        url = reverse("core_api:draft", args=["task"])

        response = self.client.post(
            url, data=json.dumps({"formData": {"titolo": "Nuova"}}), content_type="application/json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["saved"])

        response = self.client.get(url)
        self.assertTrue(response.json()["has_draft"])
        self.assertEqual(response.json()["data"]["formData"], {"titolo": "Nuova"})

        self.client.delete(url)
        self.assertFalse(self.client.get(url).json()["has_draft"])

    def test_tipo_sconosciuto(self):
        self.client.login(username="editor", password="test123")
        response = self.client.get(reverse("core_api:draft", args=["invoice"]))
        self.assertEqual(response.status_code, 400)

    def test_form_data_mancante(self):
        self.client.login(username="editor", password="test123")
        response = self.client.post(
            reverse("core_api:draft", args=["task"]), data="{}", content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)


# ============================================================================
# HELPERS API
# ============================================================================


class ApiHelpersTestCase(TestCase):

    def setUp(self):
        self.factory = RequestFactory()

    def _chiama(self, eccezione, metodo="get"):
        @api_view(["GET"])
        def vista(request):
            raise eccezione

        return vista(getattr(self.factory, metodo)("/api/test/"))

    def test_metodo_non_consentito(self):
        @api_view(["GET"])
        def vista(request):
            return json_success()

        response = vista(self.factory.post("/api/test/"))
        self.assertEqual(response.status_code, 405)

    def test_mappatura_errori(self):
        self.assertEqual(self._chiama(ApiError("no", status=409)).status_code, 409)
        self.assertEqual(self._chiama(ValidationError("no")).status_code, 400)
        self.assertEqual(self._chiama(Http404()).status_code, 404)
        self.assertEqual(self._chiama(PermissionDenied()).status_code, 403)

    def test_errore_inatteso(self):
        response = self._chiama(RuntimeError("boom"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(json.loads(response.content)["error"], "Errore interno del server")

    def test_validation_error_con_campi(self):
        response = self._chiama(ValidationError({"titolo": ["obbligatorio"]}))
        payload = json.loads(response.content)
        self.assertEqual(payload["details"], {"titolo": ["obbligatorio"]})

    def test_json_success(self):
        payload = json.loads(json_success([1, 2], count=2, extra="x").content)
        self.assertEqual(payload, {"success": True, "data": [1, 2], "count": 2, "extra": "x"})

    def test_parse_json_body(self):
        request = self.factory.post("/api/test/", data="[1]", content_type="application/json")
        with self.assertRaises(ValidationError):
            parse_json_body(request)
        request = self.factory.post("/api/test/", data="{non json", content_type="application/json")
        with self.assertRaises(ValidationError):
            parse_json_body(request)

    def test_dati_parziali_mantiene_campi_assenti(self):
        from idee.forms import IdeaForm

        idea = Idea.objects.create(
            categoria="feature", titolo="Bacheca", descrizione="Una bacheca per gli annunci"
        )
        dati = dati_parziali(idea, IdeaForm, {"titolo": "Bacheca digitale"})
        self.assertEqual(dati["titolo"], "Bacheca digitale")
        self.assertEqual(dati["categoria"], "feature")


# ============================================================================
# CAMPI FORM
# ============================================================================


class CampiFormTestCase(TestCase):

    def test_lista_righe_da_testo_e_da_lista(self):
        campo = ListaRigheField(required=False)
        self.assertEqual(campo.clean("uno\n\n due \n"), ["uno", "due"])
        self.assertEqual(campo.clean(["a", " ", "b"]), ["a", "b"])
        self.assertEqual(campo.clean(""), [])
        self.assertEqual(campo.prepare_value(["a", "b"]), "a\nb")

    def test_azioni_da_testo(self):
        campo = AzioniField(required=False)
        self.assertEqual(
            campo.clean("Preparare volantini | Dana | 2025-03-01\nChiamare il comune"),
            [
                {"task": "Preparare volantini", "owner": "Dana", "due": "2025-03-01"},
                {"task": "Chiamare il comune", "owner": "", "due": ""},
            ],
        )

    def test_azioni_da_json(self):
        campo = AzioniField(required=False)
        self.assertEqual(
            campo.clean([{"task": " Stampare ", "owner": None}]),
            [{"task": "Stampare", "owner": "", "due": ""}],
        )
        with self.assertRaises(ValidationError):
            campo.clean(["non un oggetto"])

    def test_azioni_prepare_value(self):
        campo = AzioniField(required=False)
        self.assertEqual(
            campo.prepare_value([{"task": "Stampare", "owner": "Dana", "due": ""}]),
            "Stampare | Dana",
        )


# ============================================================================
# EXPORT
# ============================================================================


class CsvExportTestCase(TestCase):

    def test_csv_con_bom_e_formati(self):
        response = csv_response(
            "test.csv",
            ["Data", "Importo", "Pagato", "Note", "Tag"],
            [[date(2025, 3, 1), Decimal("12.5"), True, None, ["a", "b"]]],
        )
        contenuto = response.content.decode("utf-8")
        self.assertTrue(contenuto.startswith("\ufeff"))
        self.assertIn('attachment; filename="test.csv"', response["Content-Disposition"])
        righe = contenuto.lstrip("\ufeff").splitlines()
        self.assertEqual(righe[0], "Data,Importo,Pagato,Note,Tag")
        self.assertEqual(righe[1], '01/03/2025,12.50,✓,,"a, b"')

    def test_csv_datetime(self):
        response = csv_response("t.csv", ["Quando"], [[datetime(2025, 3, 1, 18, 30)]])
        self.assertIn("01/03/2025 18:30", response.content.decode("utf-8"))


# ============================================================================
# RICERCA GLOBALE
# ============================================================================


class GlobalSearchTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username="admin", password="test123", ruolo="admin")
        Idea.objects.create(categoria="feature", titolo="Bacheca digitale", descrizione="Una bacheca per la scuola")

    def test_query_troppo_corta(self):
        self.client.login(username="admin", password="test123")
        response = self.client.get(reverse("core:global_search"), {"q": "b"})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_trova_idea(self):
        self.client.login(username="admin", password="test123")
        response = self.client.get(reverse("core:global_search"), {"q": "bacheca"})
        payload = response.json()
        self.assertTrue(payload["success"])
        titoli = [item["title"] for cat in payload["results"] for item in cat["items"]]
        self.assertTrue(any("Bacheca digitale" in t for t in titoli))

    def test_login_richiesto(self):
        response = self.client.get(reverse("core:global_search"), {"q": "bacheca"})
        self.assertEqual(response.status_code, 302)


# ============================================================================
# DATI INIZIALI
# ============================================================================


class CaricaDatiInizialiTestCase(TestCase):

    def test_carica_dati(self):
        out = StringIO()
        call_command("carica_dati_iniziali", stdout=out)

        self.assertEqual(ImpostazioniApp.objects.count(), 1)
        self.assertEqual(Tag.objects.filter(di_sistema=True).count(), 5)
        self.assertEqual(GruppoClasse.objects.count(), 6)
        self.assertIn("Completato: 12 record creati", out.getvalue())

    def test_idempotente(self):
        call_command("carica_dati_iniziali", stdout=StringIO())
        out = StringIO()
        call_command("carica_dati_iniziali", stdout=out)
        self.assertIn("Completato: 0 record creati", out.getvalue())
        self.assertEqual(GruppoClasse.objects.count(), 6)

    def test_dry_run(self):
        call_command("carica_dati_iniziali", "--dry-run", stdout=StringIO())
        self.assertEqual(Tag.objects.count(), 0)
        self.assertEqual(GruppoClasse.objects.count(), 0)
        self.assertFalse(ImpostazioniApp.objects.exists())
