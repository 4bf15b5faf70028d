from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone
from datetime import timedelta
from rides.models import Ride, RideNotification
import logging

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Clean up old completed/cancelled rides and read notifications."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Delete data older than this many days (default: RIDE_CLEANUP_DAYS).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without actually deleting.",
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days is None:
            days = getattr(settings, "RIDE_CLEANUP_DAYS", 30)
        dry_run = options["dry_run"]
        cutoff = timezone.now() - timedelta(days=days)

        # Finished rides; their notifications go with them via cascade
        old_rides = Ride.objects.filter(
            updated_at__lt=cutoff,
            status__in=Ride.TERMINAL_STATUSES,
        )
        rides_count = old_rides.count()

        # Read notifications on rides that are kept
        old_notifications = RideNotification.objects.filter(
            created_at__lt=cutoff,
            is_read=True,
        ).exclude(ride__in=old_rides)
        notifications_count = old_notifications.count()

        if dry_run:
            self.stdout.write(
                self.style.WARNING(
                    f"DRY RUN: Would delete {rides_count} old rides and {notifications_count} "
                    f"read notifications older than {days} days."
                )
            )
        else:
            old_notifications.delete()
            old_rides.delete()
            logger.info(f"Cleaned up {rides_count} old rides and {notifications_count} notifications")
            self.stdout.write(
                self.style.SUCCESS(
                    f"Deleted {rides_count} old rides and {notifications_count} read notifications "
                    f"older than {days} days."
                )
            )
