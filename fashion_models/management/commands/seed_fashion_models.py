"""
Management command to seed the fashion model catalog with stock models.

Usage:
    python manage.py seed_fashion_models                 # Seed only if the catalog is empty
    python manage.py seed_fashion_models --force         # Add the stock models even if models exist
    python manage.py seed_fashion_models --image-base-url https://cdn.example.com/models/
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from fashion_models.models import FashionModel
import logging

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = 'https://thrift-studio.b-cdn.net/fashion-models/'

STOCK_MODELS = [
    {
        'name': 'Elena - Professional Female Model',
        'image_file': 'elena_front.jpg',
        'gender': 'women', 'body_type': 'slim', 'ethnicity': 'caucasian', 'category': 'general',
        'height': 175, 'sort_order': 1, 'tags': ['professional', 'studio', 'elegant', 'fashion'],
    },
    {
        'name': 'Sophie - Elegant Female Model',
        'image_file': 'sophie_front.jpg',
        'gender': 'women', 'body_type': 'average', 'ethnicity': 'caucasian', 'category': 'formal',
        'height': 170, 'sort_order': 2, 'tags': ['elegant', 'formal', 'professional', 'classic'],
    },
    {
        'name': 'Amara - Evening Wear Model',
        'image_file': 'amara_front.jpg',
        'gender': 'women', 'body_type': 'average', 'ethnicity': 'african', 'category': 'evening',
        'height': 172, 'sort_order': 3, 'tags': ['evening', 'gown', 'elegant'],
    },
    {
        'name': 'Marcus - Athletic Male Model',
        'image_file': 'marcus_front.jpg',
        'gender': 'men', 'body_type': 'athletic', 'ethnicity': 'caucasian', 'category': 'casual',
        'height': 185, 'sort_order': 4, 'tags': ['athletic', 'casual', 'lifestyle'],
    },
    {
        'name': 'Kwame - Business Male Model',
        'image_file': 'kwame_front.jpg',
        'gender': 'men', 'body_type': 'average', 'ethnicity': 'african', 'category': 'formal',
        'height': 182, 'sort_order': 5, 'tags': ['business', 'formal', 'suit'],
    },
    {
        'name': 'Daniel - Sportswear Male Model',
        'image_file': 'daniel_front.jpg',
        'gender': 'men', 'body_type': 'athletic', 'ethnicity': 'hispanic', 'category': 'athletic',
        'height': 180, 'sort_order': 6, 'tags': ['sport', 'gym', 'active'],
    },
    {
        'name': 'Alex - Unisex Street Model',
        'image_file': 'alex_front.jpg',
        'gender': 'unisex', 'body_type': 'slim', 'ethnicity': 'asian', 'category': 'casual',
        'height': 176, 'sort_order': 7, 'tags': ['street', 'casual', 'unisex'],
    },
]


class Command(BaseCommand):
    help = 'Seed the fashion model catalog with stock models'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Create the stock models even if the catalog is not empty'
        )
        parser.add_argument(
            '--image-base-url',
            type=str,
            default=DEFAULT_IMAGE_BASE_URL,
            help='Base URL the stock image file names are appended to'
        )

    def handle(self, *args, **options):
        force = options.get('force', False)
        base_url = options['image_base_url'].rstrip('/') + '/'

        existing = FashionModel.objects.count()
        if existing and not force:
            self.stdout.write(self.style.WARNING(
                f'Catalog already has {existing} fashion model(s); use --force to add the stock models anyway.'
            ))
            return

        created = 0
        with transaction.atomic():
            for entry in STOCK_MODELS:
                data = dict(entry)
                image_url = base_url + data.pop('image_file')
                _, was_created = FashionModel.objects.get_or_create(
                    name=data.pop('name'),
                    defaults={**data, 'image_url': image_url, 'thumbnail_url': image_url},
                )
                created += int(was_created)

        logger.info("Seeded %d fashion models", created)
        self.stdout.write(self.style.SUCCESS(f'Created {created} fashion model(s)'))
