from django.core.management.base import BaseCommand

from practice.services.stats import counts, inventory_value


class Command(BaseCommand):
    help = "Print record counts and the total inventory value."

    def handle(self, *args, **opts):
        c = counts()
        self.stdout.write("Database statistics")
        self.stdout.write("-" * 29)
        self.stdout.write(f"Appointments: {c['appointments']}")
        self.stdout.write(f"Inventory Items: {c['inventory']}")
        self.stdout.write(f"Medical Records: {c['medicalRecords']}")
        self.stdout.write(f"Total Inventory Value: ${inventory_value():.2f}")
