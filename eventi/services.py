"""
Servizi app eventi: ricerca "I miei eventi" / "La mia spesa" per telefono.
"""

from core.validators import normalizza_telefono, valida_telefono_israeliano

from .models import Evento, ListaSpesa

LIMITE_RISULTATI = 50


def _telefono_valido(telefono):
    """Normalizza e valida; solleva ValidationError se non è un cellulare israeliano."""
    telefono = normalizza_telefono(telefono)
    valida_telefono_israeliano(telefono)
    return telefono


def eventi_per_telefono(telefono):
    """
    Eventi creati con questo telefono, esclusi gli archiviati,
    dal più recente. Ogni voce include edit_url.
    """
    telefono = _telefono_valido(telefono)

    eventi = (
        Evento.objects.filter(telefono_creatore=telefono, is_active=True, archiviato_at__isnull=True)
        .order_by('-data_inizio')[:LIMITE_RISULTATI]
    )

    risultati = []
    for evento in eventi:
        data = evento.to_dict()
        data['edit_url'] = evento.get_edit_url() if evento.edit_token else None
        risultati.append(data)
    return risultati


def liste_per_telefono(telefono):
    """Liste spesa create con questo telefono (non archiviate), dalla più recente."""
    telefono = _telefono_valido(telefono)

    liste = (
        ListaSpesa.objects.filter(telefono_creatore=telefono, is_active=True)
        .exclude(stato='archived')
        .order_by('-created_at')[:LIMITE_RISULTATI]
    )

    risultati = []
    for lista in liste:
        data = lista.to_dict()
        data['share_url'] = lista.get_absolute_url()
        data['articoli_totali'] = lista.articoli.count()
        data['articoli_prenotati'] = lista.articoli_prenotati
        risultati.append(data)
    return risultati
