"""
Helpers per i contenuti bilingui ebraico/russo.
"""

from django.utils import translation

LOCALI = ("he", "ru")
LOCALE_DEFAULT = "he"


def normalizza_locale(locale=None):
    """Restituisce 'he' o 'ru'; senza argomento usa la lingua attiva."""
    if locale is None:
        locale = translation.get_language() or LOCALE_DEFAULT
    locale = locale.split("-")[0].lower()
    return locale if locale in LOCALI else LOCALE_DEFAULT


def campo_localizzato(obj, campo, locale=None):
    """
    Valore di `campo` nella lingua richiesta.

    In russo usa `<campo>_ru` se valorizzato, altrimenti ricade sul campo base.
    """
    if normalizza_locale(locale) == "ru":
        valore_ru = _leggi(obj, f"{campo}_ru")
        if valore_ru:
            return valore_ru
    return _leggi(obj, campo)


def _leggi(obj, campo):
    if isinstance(obj, dict):
        return obj.get(campo)
    return getattr(obj, campo, None)
