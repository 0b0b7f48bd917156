"""
Admin per app sondaggi.
"""

from django.contrib import admin

from .models import RispostaCompetenze


@admin.register(RispostaCompetenze)
class RispostaCompetenzeAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'telefono', 'email', 'competenze_display', 'preferenza_contatto', 'classe_studente', 'created_at']
    list_filter = ['preferenza_contatto', 'classe_studente', 'lingua_invio']
    search_fields = ['nome_genitore', 'telefono', 'email', 'note']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = [
        ('Genitore', {
            'fields': ['nome_genitore', 'telefono', 'email', 'preferenza_contatto', 'classe_studente']
        }),
        ('Competenze', {
            'fields': ['competenze', 'altra_specialita', 'note', 'lingua_invio']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    def competenze_display(self, obj):
        return ', '.join(obj.competenze_he())
    competenze_display.short_description = 'Competenze'
