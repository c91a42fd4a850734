"""
Management command to recompute the recent-usage window of fashion models.

Usage:
    python manage.py refresh_recent_usage               # All models
    python manage.py refresh_recent_usage <model_id>    # One model
"""

from django.core.management.base import BaseCommand, CommandError
from tryon.services.container import get_services
from fashion_models.exceptions import FashionModelNotFound


class Command(BaseCommand):
    help = 'Recompute recent try-on usage for fashion models'

    def add_arguments(self, parser):
        parser.add_argument('model_id', type=str, nargs='?', help='Fashion model id (optional)')

    def handle(self, *args, **options):
        catalog = get_services().catalog
        model_id = options.get('model_id')
        if model_id:
            try:
                catalog.get(model_id)
            except FashionModelNotFound as e:
                raise CommandError(str(e))

        changed = catalog.refresh_recent_usage(model_id)
        self.stdout.write(self.style.SUCCESS(f'Recent usage refreshed, {changed} model(s) changed'))
