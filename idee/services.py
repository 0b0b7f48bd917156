"""
Servizi app idee: filtri e statistiche per la lista admin.
"""

from django.db.models import Count

from .models import Idea


def filtra_idee(queryset, params):
    """
    Filtri della lista admin: status, category ('all' o vuoto = tutti).
    """
    stato = params.get('status')
    if stato and stato != 'all':
        queryset = queryset.filter(stato=stato)

    categoria = params.get('category')
    if categoria and categoria != 'all':
        queryset = queryset.filter(categoria=categoria)

    return queryset.order_by('-created_at')


def statistiche_idee(queryset=None):
    """
    Conteggio idee per stato, con tutti gli stati presenti (anche a zero).

    Returns:
        dict: {'totale': n, 'per_stato': {stato: n}}
    """
    if queryset is None:
        queryset = Idea.objects.filter(is_active=True)

    per_stato = {codice: 0 for codice, _etichetta in Idea.STATO_CHOICES}
    for riga in queryset.order_by().values('stato').annotate(n=Count('id')):
        per_stato[riga['stato']] = riga['n']

    return {'totale': sum(per_stato.values()), 'per_stato': per_stato}
