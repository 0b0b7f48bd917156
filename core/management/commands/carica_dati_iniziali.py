"""
Management command per caricare i dati di base del portale:
impostazioni, tag di sistema e gruppi WhatsApp delle classi.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from attivita.models import Tag
from comunicazioni.models import GruppoClasse, ImpostazioniApp


TAG_DI_SISTEMA = [
    {'nome': 'events', 'nome_he': 'אירועים', 'emoji': '🎉', 'colore': '#FF8200'},
    {'nome': 'maintenance', 'nome_he': 'תחזוקה', 'emoji': '🔧', 'colore': '#003153'},
    {'nome': 'finance', 'nome_he': 'כספים', 'emoji': '💰', 'colore': '#FFBA00'},
    {'nome': 'communication', 'nome_he': 'תקשורת', 'emoji': '📢', 'colore': '#0D98BA'},
    {'nome': 'prom', 'nome_he': 'מסיבת סיום', 'emoji': '🎓', 'colore': '#8B5CF6'},
]

GRUPPI_CLASSE = [
    {'classe': 'א', 'emoji': '📘', 'colore': '#87CEEB', 'url_whatsapp': 'https://chat.whatsapp.com/E3t0BQwhj0PCT4YjI1EfKg'},
    {'classe': 'ב', 'emoji': '📗', 'colore': '#0D98BA', 'url_whatsapp': 'https://chat.whatsapp.com/J8OF6XOfESbG6icg5fcgbo'},
    {'classe': 'ג', 'emoji': '📙', 'colore': '#FFBA00', 'url_whatsapp': 'https://chat.whatsapp.com/LBOfq7prC7N7cwoEEnR1xD'},
    {'classe': 'ד', 'emoji': '📒', 'colore': '#FF8200', 'url_whatsapp': 'https://chat.whatsapp.com/EHmRK5ArSlt2rnQwiJ2y6I'},
    {'classe': 'ה', 'emoji': '📔', 'colore': '#003153', 'url_whatsapp': 'https://chat.whatsapp.com/EaxwgHvtr3r7PPGLaeGG8Z'},
    {'classe': 'ו', 'emoji': '📕', 'colore': '#8B5CF6', 'url_whatsapp': 'https://chat.whatsapp.com/H1BvuS4Fcv09sLRNujLauj'},
]


class Command(BaseCommand):
    help = "Carica impostazioni, tag di sistema e gruppi classe (idempotente)"

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help="Mostra cosa verrebbe creato senza scrivere nel database",
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN: nessuna modifica verrà salvata"))

        with transaction.atomic():
            creati = self._carica()
            if dry_run:
                transaction.set_rollback(True)

        self.stdout.write(self.style.SUCCESS(f"Completato: {creati} record creati"))

    def _carica(self):
        creati = 0

        # 1. Impostazioni
        if not ImpostazioniApp.objects.exists():
            ImpostazioniApp.carica()
            creati += 1
            self.stdout.write(self.style.SUCCESS("✓ Impostazioni create"))

        # 2. Tag di sistema
        for dati in TAG_DI_SISTEMA:
            tag, created = Tag.objects.get_or_create(
                nome=dati['nome'],
                defaults={**dati, 'di_sistema': True},
            )
            if created:
                creati += 1
                self.stdout.write(self.style.SUCCESS(f"  ✓ Tag {tag.emoji} {tag.nome}"))

        # 3. Gruppi classe
        for ordine, dati in enumerate(GRUPPI_CLASSE, 1):
            gruppo, created = GruppoClasse.objects.get_or_create(
                classe=dati['classe'],
                defaults={**dati, 'ordine_visualizzazione': ordine},
            )
            if created:
                creati += 1
                self.stdout.write(self.style.SUCCESS(f"  ✓ Gruppo {gruppo}"))

        return creati
