from django.db import migrations, models


def create_status_row(apps, schema_editor):
    SystemStatus = apps.get_model('countries', 'SystemStatus')
    SystemStatus.objects.get_or_create(pk=1, defaults={'total_countries': 0})


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Country',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, unique=True)),
                ('capital', models.CharField(blank=True, max_length=255, null=True)),
                ('region', models.CharField(blank=True, max_length=100, null=True)),
                ('population', models.PositiveBigIntegerField()),
                ('currency_code', models.CharField(blank=True, max_length=10, null=True)),
                ('exchange_rate', models.FloatField(blank=True, null=True)),
                ('estimated_gdp', models.FloatField(blank=True, null=True)),
                ('flag_url', models.TextField(blank=True, null=True)),
                ('last_refreshed_at', models.DateTimeField()),
            ],
            options={
                'verbose_name_plural': 'countries',
                'db_table': 'countries',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['region'], name='countries_region_idx'),
                    models.Index(fields=['currency_code'], name='countries_currency_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SystemStatus',
            fields=[
                ('id', models.PositiveSmallIntegerField(default=1, primary_key=True, serialize=False)),
                ('total_countries', models.PositiveIntegerField(default=0)),
                ('last_refreshed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name_plural': 'system status',
                'db_table': 'system_status',
            },
        ),
        migrations.RunPython(create_status_row, migrations.RunPython.noop),
    ]
