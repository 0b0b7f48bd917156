"""
Admin per app eventi.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Evento, Registrazione, ListaSpesa, ArticoloSpesa


# ============================================================================
# INLINE ADMINS
# ============================================================================

class RegistrazioneInline(admin.TabularInline):
    model = Registrazione
    extra = 0
    fields = ['nome', 'telefono', 'numero_partecipanti', 'stato', 'created_at']
    readonly_fields = ['created_at']


class ArticoloSpesaInline(admin.TabularInline):
    model = ArticoloSpesa
    extra = 1
    fields = ['nome', 'quantita', 'note', 'nome_assegnatario', 'ordine_visualizzazione']


# ============================================================================
# MODEL ADMINS
# ============================================================================

@admin.register(Evento)
class EventoAdmin(admin.ModelAdmin):
    list_display = [
        'titolo',
        'tipo',
        'data_inizio',
        'stato_badge',
        'visibilita',
        'partecipanti_attuali',
        'max_partecipanti',
        'archiviato_at',
    ]

    list_filter = [
        'stato',
        'tipo',
        'visibilita',
        'registrazione_attiva',
        'data_inizio',
    ]

    search_fields = ['titolo', 'titolo_ru', 'luogo', 'telefono_creatore']

    readonly_fields = [
        'edit_token',
        'partecipanti_attuali',
        'archiviato_at',
        'created_at',
        'updated_at',
        'created_by',
        'updated_by',
    ]

    fieldsets = [
        ('Contenuti', {
            'fields': [
                'titolo', 'titolo_ru',
                'descrizione', 'descrizione_ru',
                'luogo', 'luogo_ru',
            ]
        }),
        ('Date e Stato', {
            'fields': ['data_inizio', 'data_fine', 'tipo', 'stato', 'priorita', 'visibilita']
        }),
        ('Registrazioni', {
            'fields': [
                'registrazione_attiva',
                'scadenza_registrazione',
                'max_partecipanti',
                'partecipanti_attuali',
            ]
        }),
        ('Pagamento e Budget', {
            'fields': ['richiede_pagamento', 'importo_pagamento', 'budget_allocato', 'budget_speso'],
            'classes': ['collapse'],
        }),
        ('Creatore', {
            'fields': ['telefono_creatore', 'edit_token', 'archiviato_at'],
            'classes': ['collapse'],
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [RegistrazioneInline]

    def stato_badge(self, obj):
        colore = obj.stato_badge_color
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            f'var(--bs-{colore})' if colore else '#6c757d',
            obj.get_stato_display()
        )
    stato_badge.short_description = 'Stato'


@admin.register(Registrazione)
class RegistrazioneAdmin(admin.ModelAdmin):
    list_display = ['nome', 'evento', 'telefono', 'numero_partecipanti', 'stato', 'created_at']
    list_filter = ['stato', 'created_at']
    search_fields = ['nome', 'telefono', 'email', 'evento__titolo']
    raw_id_fields = ['evento']


@admin.register(ListaSpesa)
class ListaSpesaAdmin(admin.ModelAdmin):
    list_display = ['nome_evento', 'nome_classe', 'data_evento', 'stato', 'nome_organizzatore']
    list_filter = ['stato', 'data_evento']
    search_fields = ['nome_evento', 'nome_classe', 'nome_organizzatore', 'telefono_creatore']
    readonly_fields = ['share_token', 'created_at', 'updated_at']
    inlines = [ArticoloSpesaInline]
