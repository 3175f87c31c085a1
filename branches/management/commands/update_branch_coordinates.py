import time

from django.core.management.base import BaseCommand

from branches.models import Branch
from branches.services import fill_coordinates


class Command(BaseCommand):
    help = "Geocode branch addresses that have no coordinates yet"

    def add_arguments(self, parser):
        parser.add_argument("--all", action="store_true", help="Re-geocode every active branch")
        parser.add_argument("--sleep", type=int, default=200, help="Milliseconds to wait between map API calls")
        parser.add_argument("--dry-run", action="store_true", help="List the branches without calling the map API")

    def handle(self, *args, **options):
        branches = Branch.objects.filter(is_active=True).exclude(address="")
        if not options["all"]:
            branches = branches.filter(lat__isnull=True) | branches.filter(lng__isnull=True)
        branches = branches.order_by("name")

        if options["dry_run"]:
            for branch in branches:
                self.stdout.write(f"{branch.pk}\t{branch.name}\t{branch.address}")
            self.stdout.write(self.style.SUCCESS(f"{branches.count()} branch(es) would be geocoded."))
            return

        succeeded = failed = 0
        for index, branch in enumerate(branches):
            if index and options["sleep"]:
                time.sleep(options["sleep"] / 1000)
            if fill_coordinates(branch, force=True):
                succeeded += 1
                self.stdout.write(f"OK   {branch.name}: {branch.lat}, {branch.lng}")
            else:
                failed += 1
                self.stdout.write(self.style.WARNING(f"FAIL {branch.name}: {branch.address}"))

        self.stdout.write(self.style.SUCCESS(f"Geocoded {succeeded} branch(es), {failed} failed."))


"""to fill in missing branch coordinates, run:

python manage.py update_branch_coordinates

"""
