"""
Admin per app protocolli.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Protocollo


@admin.register(Protocollo)
class ProtocolloAdmin(admin.ModelAdmin):
    list_display = ['codice', 'titolo', 'data_protocollo', 'tipo', 'approvato_badge', 'pubblico']
    list_filter = ['tipo', 'approvato', 'pubblico']
    search_fields = ['codice', 'numero_protocollo', 'titolo', 'decisioni']
    date_hierarchy = 'data_protocollo'
    readonly_fields = ['codice', 'approvato_at', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = [
        ('Riunione', {
            'fields': ['codice', 'numero_protocollo', 'titolo', 'data_protocollo', 'tipo', 'partecipanti']
        }),
        ('Contenuto', {
            'fields': ['ordine_del_giorno', 'decisioni', 'azioni']
        }),
        ('Documenti', {
            'fields': ['documento_url', 'allegati_url']
        }),
        ('Stato', {
            'fields': ['pubblico', 'approvato', 'approvato_at']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    def approvato_badge(self, obj):
        return format_html(
            '<span style="background-color: var(--bs-{}); color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            obj.stato_badge_color,
            'Approvato' if obj.approvato else 'Da approvare'
        )
    approvato_badge.short_description = 'Stato'
