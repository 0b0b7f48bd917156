"""
CORE SHARE FORMATTERS - Portale Comitato
=========================================

Testi di condivisione (WhatsApp, clipboard) per ogni entità del portale,
in ebraico ('he') o russo ('ru').

Ogni formatter accetta un'istanza di model oppure un dict con gli stessi
nomi di campo e restituisce un DatiCondivisione(title, text, url).
"""

from dataclasses import dataclass
from datetime import date, datetime
from itertools import groupby
from typing import Optional
from urllib.parse import quote

from django.conf import settings
from django.utils import timezone

from .i18n import campo_localizzato, normalizza_locale

RLM = "‏"

FOOTER_PORTALE = {
    "he": "📢 אל תפספסו שום עדכון! בקרו בפורטל:",
    "ru": "📢 Не пропустите обновления! Заходите на портал:",
}

MESI = {
    "he": [
        "ינואר", "פברואר", "מרץ", "אפריל", "מאי", "יוני",
        "יולי", "אוגוסט", "ספטמבר", "אוקטובר", "נובמבר", "דצמבר",
    ],
    "ru": [
        "января", "февраля", "марта", "апреля", "мая", "июня",
        "июля", "августа", "сентября", "октября", "ноября", "декабря",
    ],
}

GIORNI = {
    "he": ["יום שני", "יום שלישי", "יום רביעי", "יום חמישי", "יום שישי", "שבת", "יום ראשון"],
    "ru": ["понедельник", "вторник", "среда", "четверг", "пятница", "суббота", "воскресенье"],
}

TIPI_EVENTO = {
    "he": {
        "general": "כללי",
        "meeting": "ישיבה",
        "fundraiser": "גיוס כספים",
        "trip": "טיול",
        "workshop": "סדנה",
    },
    "ru": {
        "general": "Общее",
        "meeting": "Встреча",
        "fundraiser": "Сбор средств",
        "trip": "Поездка",
        "workshop": "Мастер-класс",
    },
}

PRIORITA = {
    "he": {"low": "נמוכה", "normal": "רגילה", "high": "גבוהה", "urgent": "דחופה"},
    "ru": {"low": "Низкий", "normal": "Обычный", "high": "Высокий", "urgent": "Срочный"},
}

EMOJI_PRIORITA = {
    "urgent": "🔴",
    "high": "🟠",
    "normal": "🟡",
    "low": "🟢",
}

STATI_ATTIVITA = {
    "he": {"pending": "לביצוע", "in_progress": "בתהליך", "completed": "הושלם", "cancelled": "בוטל"},
    "ru": {"pending": "К выполнению", "in_progress": "В процессе", "completed": "Выполнено", "cancelled": "Отменено"},
}


@dataclass
class DatiCondivisione:
    """Risultato di un formatter: titolo, testo e (opzionale) url."""

    title: str
    text: str
    url: Optional[str] = None

    @property
    def whatsapp_url(self):
        return link_whatsapp(self.text)

    def as_dict(self):
        return {"title": self.title, "text": self.text, "url": self.url}


# ============================================================================
# HELPERS
# ============================================================================


def link_whatsapp(testo):
    """Deep link WhatsApp con il testo precompilato."""
    return f"https://wa.me/?text={quote(testo, safe='')}"


def url_portale(locale):
    return f"{settings.PORTAL_BASE_URL}/{locale}"


def footer_portale(locale):
    return f"{FOOTER_PORTALE[locale]}\n🌐 {url_portale(locale)}"


def _val(obj, campo, default=None):
    if isinstance(obj, dict):
        valore = obj.get(campo, default)
    else:
        valore = getattr(obj, campo, default)
    return default if valore is None else valore


def _localizzato(obj, campo, locale):
    """`campo_ru` in russo se presente, altrimenti `campo` (o `campo_he`)."""
    return campo_localizzato(obj, campo, locale) or _val(obj, f"{campo}_he") or ""


def _come_data(valore):
    if valore is None or valore == "":
        return None
    if isinstance(valore, datetime):
        if timezone.is_aware(valore):
            valore = timezone.localtime(valore)
        return valore
    if isinstance(valore, date):
        return valore
    testo = str(valore)
    try:
        return datetime.fromisoformat(testo.replace("Z", "+00:00"))
    except ValueError:
        return date.fromisoformat(testo[:10])


def formatta_data(valore, locale, con_anno=True, con_giorno_settimana=False):
    """'15 בינואר 2025' / '15 января 2025'."""
    d = _come_data(valore)
    if d is None:
        return ""
    mese = MESI[locale][d.month - 1]
    if locale == "he":
        mese = f"ב{mese}"
    testo = f"{d.day} {mese}"
    if con_anno:
        testo += f" {d.year}"
    if con_giorno_settimana:
        testo = f"{GIORNI[locale][d.weekday()]}, {testo}"
    return testo


def formatta_data_breve(valore):
    d = _come_data(valore)
    return d.strftime("%d/%m/%Y") if d else ""


def formatta_ora(valore):
    d = _come_data(valore)
    if isinstance(d, datetime):
        return d.strftime("%H:%M")
    return ""


def _tronca(testo, limite):
    return f"{testo[:limite]}{'...' if len(testo) > limite else ''}"


# ============================================================================
# PROTOCOLLI
# ============================================================================


def formatta_protocollo(protocollo, locale=None) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    titolo = _val(protocollo, "titolo", "")
    url = f"{url_portale(locale)}/protocols/{_val(protocollo, 'id', '')}"
    data = formatta_data(_val(protocollo, "data_protocollo"), locale)
    invito = "Посмотреть полный протокол:" if locale == "ru" else "לצפייה בפרוטוקול המלא:"

    text = f"📋 *{titolo}*\n\n📅 {data}\n\n🔗 {invito}\n\n{footer_portale(locale)}"
    return DatiCondivisione(title=titolo, text=text, url=url)


# ============================================================================
# EVENTI E ATTIVITA
# ============================================================================


def formatta_evento(evento, locale=None) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    url = f"{url_portale(locale)}/events/{_val(evento, 'id', '')}"

    titolo = _localizzato(evento, "titolo", locale)
    descrizione = _localizzato(evento, "descrizione", locale)
    luogo = _localizzato(evento, "luogo", locale)
    tipo = _val(evento, "tipo", "general")
    tipo_label = TIPI_EVENTO[locale].get(tipo, tipo)

    etichette = {
        "he": ("סוג", "מיקום", "לצפייה מלאה"),
        "ru": ("Тип", "Место", "Полная информация"),
    }[locale]

    inizio = _val(evento, "data_inizio")
    orario = f"⏰ {formatta_ora(inizio)}"
    fine = _val(evento, "data_fine")
    if fine:
        orario += f" - {formatta_ora(fine)}"

    text = f"📅 *{titolo}*\n\n"
    text += f"🏷️ {etichette[0]}: {tipo_label}\n"
    text += f"📆 {formatta_data(inizio, locale, con_giorno_settimana=True)}\n"
    text += orario
    if luogo:
        text += f"\n📍 {etichette[1]}: {luogo}"
    if descrizione:
        text += f"\n\n{descrizione}"
    text += f"\n\n🔗 {etichette[2]}:\n\n{footer_portale(locale)}"

    return DatiCondivisione(title=titolo, text=text, url=url)


def formatta_attivita(attivita, locale=None) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    titolo = _val(attivita, "titolo", "")
    url = f"{url_portale(locale)}/tasks"

    text = f"✅ *{titolo}*\n\n"

    descrizione = _val(attivita, "descrizione")
    if descrizione:
        text += f"📝 {_tronca(descrizione, 100)}\n\n"

    scadenza = _val(attivita, "scadenza")
    if scadenza:
        label = "Срок:" if locale == "ru" else "תאריך יעד:"
        text += f"📅 {label} {formatta_data(scadenza, locale)}\n"

    priorita = _val(attivita, "priorita")
    if priorita:
        label = "Приоритет:" if locale == "ru" else "עדיפות:"
        emoji = EMOJI_PRIORITA.get(priorita, "⚡")
        text += f"{emoji} {label} {PRIORITA[locale].get(priorita, priorita)}\n"

    stato = _val(attivita, "stato")
    if stato:
        label = "Статус:" if locale == "ru" else "סטטוס:"
        text += f"📊 {label} {STATI_ATTIVITA[locale].get(stato, stato)}\n"

    responsabile = _val(attivita, "responsabile_nome")
    if responsabile:
        label = "Ответственный:" if locale == "ru" else "אחראי:"
        text += f"👤 {label} {responsabile}\n"

    text += f"\n{footer_portale(locale)}"
    return DatiCondivisione(title=titolo, text=text, url=url)


# ============================================================================
# IDEE
# ============================================================================


def formatta_idee(locale=None) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    url_idee = f"{settings.PORTAL_BASE_URL}/ideas"

    if locale == "ru":
        titolo = "Есть идеи?"
        corpo = (
            "Поделитесь своими идеями для улучшения и новых функций!\n\n"
            "Ваши идеи помогают нам улучшать и адаптировать систему к вашим потребностям. "
            "Каждая идея рассматривается!\n\n"
            "🔗 *Отправить идею:*"
        )
    else:
        titolo = "יש לכם רעיון?"
        corpo = (
            "שתפו אותנו ברעיונות לשיפור ותכונות חדשות!\n\n"
            "הרעיונות שלכם עוזרים לנו לשפר ולהתאים את המערכת לצרכים שלכם. "
            "כל רעיון נבדק ונשקל!\n\n"
            "🔗 *שליחת רעיון:*"
        )

    text = f"💡 *{titolo}*\n\n{corpo}\n{url_idee}\n\n{footer_portale(locale)}"
    return DatiCondivisione(title=titolo, text=text)


# ============================================================================
# RAPPRESENTANTI
# ============================================================================


def formatta_rappresentanti(rappresentanti, locale=None) -> DatiCondivisione:
    """
    Rappresentanti di classe raggruppati per livello (prima lettera della classe).

    rappresentanti: sequenza di {'classe': 'א1', 'nome': '...'}
    """
    locale = normalizza_locale(locale)
    titolo = "Представители родительского комитета" if locale == "ru" else "נציגי ועד ההורים"

    gruppi = []
    ordinati = sorted(rappresentanti, key=lambda r: _val(r, "classe", "")[:1])
    for livello, membri in groupby(ordinati, key=lambda r: _val(r, "classe", "")[:1]):
        intestazione = f"{livello} класс:" if locale == "ru" else f"{livello}׳:"
        righe = [f"{_val(m, 'nome', '')} - {_val(m, 'classe', '')}{RLM}" for m in membri]
        gruppi.append(intestazione + "\n" + "\n".join(righe))

    text = f"{titolo}\n\n" + "\n\n".join(gruppi) + f"\n\n{footer_portale(locale)}"
    return DatiCondivisione(title=titolo, text=text, url=url_portale(locale))


# ============================================================================
# MESSAGGI URGENTI E GRUPPI
# ============================================================================


def formatta_messaggio_urgente(messaggio, locale=None) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    url = url_portale(locale)

    titolo = _localizzato(messaggio, "titolo", locale)
    descrizione = _localizzato(messaggio, "descrizione", locale)
    icona = _val(messaggio, "icona", "")

    text = f"{icona} {titolo}".strip()
    if descrizione:
        text += f"\n\n{descrizione}"

    inizio = formatta_data_breve(_val(messaggio, "data_inizio"))
    fine = formatta_data_breve(_val(messaggio, "data_fine"))
    if inizio or fine:
        text += f"\n\n📅 {inizio} - {fine}"
    text += f"\n\n🌐 {url}"

    return DatiCondivisione(title=titolo, text=text, url=url)


def formatta_maglietta_bianca(locale=None, venerdi=False) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    if locale == "ru":
        titolo = "Сегодня - белая рубашка!" if venerdi else "Завтра - белая рубашка!"
        descrizione = "Напоминание: в пятницу ученики приходят в школу в белой рубашке"
    else:
        titolo = "היום - חולצה לבנה!" if venerdi else "מחר - חולצה לבנה!"
        descrizione = "תזכורת: ביום שישי התלמידים מגיעים לבית הספר בחולצה לבנה"

    text = f"👕 {titolo}\n\n{descrizione}\n\n{footer_portale(locale)}"
    return DatiCondivisione(title=titolo, text=text, url=url_portale(locale))


def formatta_link_gruppi(gruppi, locale=None) -> DatiCondivisione:
    locale = normalizza_locale(locale)
    if locale == "ru":
        titolo = "Группы WhatsApp по классам"
        text = (
            f"{titolo} - школа Беэри\n\n"
            "Присоединяйтесь к группе WhatsApp вашего класса!\nНажмите на нужную ссылку:\n\n"
        )
    else:
        titolo = "קבוצות WhatsApp לפי שכבות"
        text = (
            f"{titolo} - בית ספר בארי\n\n"
            "הצטרפו לקבוצת WhatsApp של שכבת ילדכם!\nלחצו על הקישור המתאים:\n\n"
        )

    for gruppo in gruppi:
        classe = _val(gruppo, "classe", "")
        intestazione = f"{classe} класс" if locale == "ru" else f"שכבת {classe}"
        text += f"*{intestazione}*\n{_val(gruppo, 'url_whatsapp', '')}\n\n"

    text += footer_portale(locale)
    return DatiCondivisione(title=titolo, text=text, url=url_portale(locale))
