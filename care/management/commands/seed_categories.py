from django.core.management.base import BaseCommand
from django.core.cache import cache

from care.models import Category
from care.views.categories import CATEGORY_CACHE_KEY

DEFAULT_CATEGORIES = [
    {'id': 'arztbesuch', 'label': 'Arztbesuch', 'description': 'Termin in einer Arztpraxis', 'color': '#00879e', 'icon': 'stethoscope'},
    {'id': 'mdk-besuch', 'label': 'MDK-Besuch', 'description': 'Begutachtung durch den Medizinischen Dienst', 'color': '#f3a712', 'icon': 'clipboard'},
    {'id': 'erstgespraech', 'label': 'Erstgespräch', 'description': 'Erstes Kennenlernen mit Klient und Angehörigen', 'color': '#7c3aed', 'icon': 'message-circle'},
    {'id': 'default', 'label': 'Default Category', 'description': '', 'color': '#64748b', 'icon': 'calendar'},
]


class Command(BaseCommand):
    help = "Create the default appointment categories (idempotent)."

    def handle(self, *args, **options):
        created = 0
        for entry in DEFAULT_CATEGORIES:
            values = {k: v for k, v in entry.items() if k != 'id'}
            _, was_created = Category.objects.get_or_create(id=entry['id'], defaults=values)
            created += int(was_created)
        cache.delete(CATEGORY_CACHE_KEY)
        self.stdout.write(self.style.SUCCESS(f"categories: {created} created, {len(DEFAULT_CATEGORIES) - created} already present"))
