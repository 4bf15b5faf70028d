from decimal import Decimal

from django.db import migrations

SAMPLE_LOCATIONS = [
    ('City Center', 'Main Street, City Center', '12.9716', '77.5946'),
    ('Airport', 'International Airport', '13.1986', '77.7066'),
    ('Railway Station', 'Central Railway Station', '12.9760', '77.6038'),
    ('Bus Stand', 'Main Bus Terminal', '12.9698', '77.6128'),
    ('Hospital', 'General Hospital', '12.9584', '77.6401'),
    ('Shopping Mall', 'Grand Mall', '12.9352', '77.6245'),
    ('University', 'State University', '12.9279', '77.6271'),
    ('Tech Park', 'IT Technology Park', '12.8463', '77.6627'),
]


def seed_locations(apps, schema_editor):
    Location = apps.get_model('rides', 'Location')
    for name, address, lat, lon in SAMPLE_LOCATIONS:
        Location.objects.get_or_create(
            name=name,
            defaults={
                'address': address,
                'latitude': Decimal(lat),
                'longitude': Decimal(lon),
            },
        )


def unseed_locations(apps, schema_editor):
    Location = apps.get_model('rides', 'Location')
    Location.objects.filter(name__in=[row[0] for row in SAMPLE_LOCATIONS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('rides', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_locations, unseed_locations),
    ]
