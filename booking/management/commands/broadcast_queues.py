from django.core.management.base import BaseCommand
from django.core.cache import cache
from django.utils import timezone

from booking.services.queues import get_booking_service, queue_stats, stats_cache_key


class Command(BaseCommand):
    help = "Refresh today's queue stats cache and push the queue snapshot to WebSocket listeners."

    def handle(self, *args, **options):
        today = timezone.localdate()
        cache.delete(stats_cache_key(today))
        stats = queue_stats(today)
        get_booking_service().broadcast()
        self.stdout.write(self.style.SUCCESS(
            f"Broadcast {stats['total']} queue entries for {today:%Y-%m-%d}"
        ))
