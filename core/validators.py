"""
Validatori e normalizzatori condivisi (telefoni, identificativi votanti, colori).
"""

import hashlib
import re

from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator

TELEFONO_REGEX = re.compile(r"^05\d{8}$")


def normalizza_telefono(telefono):
    """Rimuove spazi e trattini: '050-123 4567' -> '0501234567'."""
    return re.sub(r"[-\s]", "", telefono or "")


def valida_telefono_israeliano(telefono):
    if not TELEFONO_REGEX.match(telefono or ""):
        raise ValidationError(
            "Numero di telefono non valido (formato 05XXXXXXXX)", code="telefono_non_valido"
        )


def hash_identificativo(valore):
    """sha256 dell'identificativo normalizzato (minuscolo, senza spazi ai bordi)."""
    return hashlib.sha256((valore or "").strip().lower().encode("utf-8")).hexdigest()


validatore_colore_hex = RegexValidator(
    regex=r"^#[0-9A-Fa-f]{6}$",
    message="Colore non valido (formato #RRGGBB)",
)

validatore_slug_tag = RegexValidator(
    regex=r"^[a-z0-9_-]+$",
    message="Solo lettere minuscole, numeri, trattini e underscore",
)
