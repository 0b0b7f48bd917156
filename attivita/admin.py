"""
Admin per app attivita.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Attivita, AttivitaTag, Tag


class AttivitaTagInline(admin.TabularInline):
    model = AttivitaTag
    extra = 0
    autocomplete_fields = ['tag']


@admin.register(Attivita)
class AttivitaAdmin(admin.ModelAdmin):
    list_display = ['titolo', 'responsabile_nome', 'scadenza', 'priorita', 'stato_badge', 'numero_solleciti']
    list_filter = ['stato', 'priorita', 'promemoria_automatico']
    search_fields = ['titolo', 'descrizione', 'responsabile_nome']
    date_hierarchy = 'scadenza'
    readonly_fields = ['completata_at', 'numero_solleciti', 'ultimo_promemoria', 'created_at', 'updated_at', 'created_by', 'updated_by']
    raw_id_fields = ['evento', 'attivita_padre', 'protocollo']

    fieldsets = [
        ('Attività', {
            'fields': ['titolo', 'descrizione', 'priorita', 'stato', 'scadenza', 'completata_at']
        }),
        ('Responsabile', {
            'fields': ['responsabile_nome', 'responsabile_telefono']
        }),
        ('Promemoria', {
            'fields': ['promemoria_automatico', 'data_promemoria', 'numero_solleciti', 'ultimo_promemoria']
        }),
        ('Collegamenti', {
            'fields': ['evento', 'attivita_padre', 'protocollo', 'allegati_url']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [AttivitaTagInline]

    def stato_badge(self, obj):
        return format_html(
            '<span style="background-color: var(--bs-{}); color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            obj.stato_badge_color,
            obj.get_stato_display()
        )
    stato_badge.short_description = 'Stato'


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ['nome', 'nome_he', 'emoji', 'colore_preview', 'ordine_visualizzazione', 'di_sistema', 'is_active']
    list_filter = ['di_sistema', 'is_active']
    search_fields = ['nome', 'nome_he']

    def colore_preview(self, obj):
        return format_html(
            '<span style="background-color: {}; padding: 3px 14px; border-radius: 3px;">&nbsp;</span>',
            obj.colore
        )
    colore_preview.short_description = 'Colore'
