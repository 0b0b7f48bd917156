"""
Admin per app prom.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import EventoProm, VoceBudget, PreventivoFornitore, Voto


class VoceBudgetInline(admin.TabularInline):
    model = VoceBudget
    extra = 0
    fields = ['categoria', 'importo_allocato', 'importo_speso', 'note']


class PreventivoInline(admin.TabularInline):
    model = PreventivoFornitore
    extra = 0
    fields = ['categoria', 'nome_fornitore', 'prezzo_totale', 'valutazione', 'finalista', 'selezionato']
    show_change_link = True


@admin.register(EventoProm)
class EventoPromAdmin(admin.ModelAdmin):
    list_display = ['titolo', 'data_evento', 'stato_badge', 'budget_totale', 'numero_studenti', 'votazione_attiva']
    list_filter = ['stato', 'votazione_attiva']
    search_fields = ['titolo', 'titolo_ru', 'nome_location']
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = [
        ('Evento', {
            'fields': [
                'titolo', 'titolo_ru', 'descrizione', 'descrizione_ru',
                'data_evento', 'ora_evento', 'nome_location', 'indirizzo_location', 'stato',
            ]
        }),
        ('Budget', {
            'fields': ['budget_totale', 'numero_studenti']
        }),
        ('Votazione', {
            'fields': ['votazione_attiva', 'inizio_votazione', 'fine_votazione']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [VoceBudgetInline, PreventivoInline]

    def stato_badge(self, obj):
        return format_html(
            '<span style="background-color: var(--bs-{}); color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            obj.stato_badge_color,
            obj.get_stato_display()
        )
    stato_badge.short_description = 'Stato'


@admin.register(PreventivoFornitore)
class PreventivoFornitoreAdmin(admin.ModelAdmin):
    list_display = [
        'nome_fornitore',
        'prom',
        'categoria',
        'prezzo_totale',
        'stato_disponibilita',
        'valutazione',
        'finalista',
        'selezionato',
    ]
    list_filter = ['categoria', 'stato_disponibilita', 'finalista', 'selezionato']
    search_fields = ['nome_fornitore', 'contatto', 'telefono', 'email']
    raw_id_fields = ['prom']


@admin.register(Voto)
class VotoAdmin(admin.ModelAdmin):
    list_display = ['preventivo', 'tipo_voto', 'nome_votante', 'created_at']
    list_filter = ['tipo_voto']
    readonly_fields = ['identificativo_votante', 'created_at']
    raw_id_fields = ['prom', 'preventivo']
