from django.core.management.base import BaseCommand, CommandError

from catalog import seed
from catalog.apps import get_aggregator
from catalog.exceptions import StoreError
from catalog.records import SERVICES, build_item_record, build_service_record, items_path


class Command(BaseCommand):
    help = 'Copy the static catalog seed into the document store'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Write the seed even if the store already has services'
        )

    def handle(self, *args, **options):
        aggregator = get_aggregator()
        store = aggregator.store

        try:
            if store.list_documents(SERVICES) and not options['force']:
                self.stdout.write(self.style.WARNING('Services already seeded, use --force to overwrite'))
                return

            for service in seed.SERVICES:
                store.upsert_document(SERVICES, service.id, build_service_record({
                    'title': service.title,
                    'slug': service.id,
                    'description': service.description,
                    'features': service.features,
                    'price_start': service.price_start,
                }, image=service.image))

            products = seed.generate_products()
            for item in products:
                store.upsert_document(items_path(item.service_id), item.id, build_item_record({
                    'slug': item.id,
                    'name': item.name,
                    'price': item.price,
                    'old_price': item.old_price,
                    'short_description': item.short_description,
                    'full_description': item.full_description,
                    'tags': item.tags,
                    'stock_qty': item.stock_qty,
                    'rating': item.rating,
                    'reviews_count': item.reviews_count,
                }, image=item.image))
        except StoreError as exc:
            raise CommandError(f'Seeding failed: {exc}')

        aggregator.refresh()
        self.stdout.write(
            self.style.SUCCESS(f'Seeded {len(seed.SERVICES)} services and {len(products)} items')
        )
