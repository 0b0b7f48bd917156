"""
Admin per app spese.
"""

from django.contrib import admin

from .models import Spesa


@admin.register(Spesa)
class SpesaAdmin(admin.ModelAdmin):
    list_display = [
        'data_spesa',
        'titolo',
        'tipo',
        'categoria',
        'importo',
        'metodo_pagamento',
        'approvata',
    ]

    list_filter = ['tipo', 'categoria', 'approvata', 'metodo_pagamento', 'data_spesa']
    search_fields = ['titolo', 'descrizione', 'fornitore']
    date_hierarchy = 'data_spesa'
    raw_id_fields = ['evento']

    readonly_fields = [
        'approvata_da',
        'approvata_at',
        'created_at',
        'updated_at',
        'created_by',
        'updated_by',
    ]

    fieldsets = [
        ('Movimento', {
            'fields': ['titolo', 'descrizione', 'tipo', 'importo', 'data_spesa', 'categoria', 'metodo_pagamento']
        }),
        ('Dettagli', {
            'fields': ['fornitore', 'ricevuta_url', 'evento', 'note']
        }),
        ('Approvazione', {
            'fields': ['approvata', 'approvata_da', 'approvata_at']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]
