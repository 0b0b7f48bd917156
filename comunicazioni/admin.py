"""
Admin per app comunicazioni.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import GruppoClasse, ImpostazioniApp, MessaggioUrgente


@admin.register(MessaggioUrgente)
class MessaggioUrgenteAdmin(admin.ModelAdmin):
    list_display = ['titolo_he', 'tipo_badge', 'attivo', 'data_inizio', 'data_fine']
    list_filter = ['tipo', 'attivo']
    search_fields = ['titolo_he', 'titolo_ru', 'descrizione_he', 'descrizione_ru']
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = [
        ('Messaggio', {
            'fields': ['tipo', 'icona', 'colore', 'titolo_he', 'titolo_ru', 'descrizione_he', 'descrizione_ru']
        }),
        ('Condivisione', {
            'fields': ['testo_condivisione_he', 'testo_condivisione_ru']
        }),
        ('Pubblicazione', {
            'fields': ['attivo', 'data_inizio', 'data_fine']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    def tipo_badge(self, obj):
        return format_html(
            '<span style="background-color: var(--bs-{}); color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            obj.badge_color,
            obj.get_tipo_display()
        )
    tipo_badge.short_description = 'Tipo'


@admin.register(ImpostazioniApp)
class ImpostazioniAppAdmin(admin.ModelAdmin):
    list_display = ['nome_comitato', 'anno_scolastico', 'banner_attivo', 'updated_at']

    def has_add_permission(self, request):
        return not ImpostazioniApp.objects.exists()


@admin.register(GruppoClasse)
class GruppoClasseAdmin(admin.ModelAdmin):
    list_display = ['classe', 'emoji', 'colore_preview', 'url_whatsapp', 'ordine_visualizzazione']
    list_editable = ['ordine_visualizzazione']

    def colore_preview(self, obj):
        return format_html(
            '<span style="display:inline-block; width:20px; height:20px; background-color:{}; border-radius:3px;"></span>',
            obj.colore
        )
    colore_preview.short_description = 'Colore'
