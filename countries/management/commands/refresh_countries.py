from django.core.management.base import BaseCommand, CommandError

from countries.exceptions import RefreshError
from countries.refresh import do_refresh


class Command(BaseCommand):
    help = 'Refresh countries from external APIs'

    def handle(self, *args, **options):
        # render the image inline; a daemon thread would die with the command
        try:
            result = do_refresh(background=False)
        except RefreshError as exc:
            raise CommandError(f'Refresh failed: {exc}') from exc

        self.stdout.write(self.style.SUCCESS(
            f"{result['message']}: {result['total_countries']} countries "
            f"at {result['last_refreshed_at'].isoformat()}"
        ))
