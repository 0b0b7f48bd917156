"""
Admin per app idee.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Idea, IdeaRiunione, Riunione


@admin.register(Idea)
class IdeaAdmin(admin.ModelAdmin):
    list_display = ['titolo', 'categoria', 'stato_badge', 'anonima', 'created_at']
    list_filter = ['stato', 'categoria', 'anonima']
    search_fields = ['titolo', 'descrizione', 'nome_proponente']
    readonly_fields = ['risposta_at', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = [
        ('Idea', {
            'fields': ['categoria', 'titolo', 'descrizione']
        }),
        ('Proponente', {
            'fields': ['anonima', 'nome_proponente', 'email_contatto']
        }),
        ('Gestione', {
            'fields': ['stato', 'risposta', 'risposta_at', 'note_admin']
        }),
        ('Metadata', {
            'fields': ['created_at', 'updated_at', 'created_by', 'updated_by'],
            'classes': ['collapse'],
        }),
    ]

    def stato_badge(self, obj):
        return format_html(
            '<span style="background-color: var(--bs-{}); color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            obj.stato_badge_color,
            obj.get_stato_display()
        )
    stato_badge.short_description = 'Stato'


class IdeaRiunioneInline(admin.TabularInline):
    model = IdeaRiunione
    extra = 0
    fields = ['titolo', 'descrizione', 'nome_proponente', 'anonima', 'lingua_invio']


@admin.register(Riunione)
class RiunioneAdmin(admin.ModelAdmin):
    list_display = ['titolo', 'data_riunione', 'stato', 'aperta']
    list_filter = ['stato', 'aperta']
    search_fields = ['titolo']
    date_hierarchy = 'data_riunione'
    inlines = [IdeaRiunioneInline]
