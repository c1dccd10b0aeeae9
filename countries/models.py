from django.db import models

from .managers import CountryManager, SystemStatusManager


class Country(models.Model):
    name = models.CharField(max_length=255, unique=True)
    capital = models.CharField(max_length=255, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    population = models.PositiveBigIntegerField()
    currency_code = models.CharField(max_length=10, null=True, blank=True)
    # units of currency_code per 1 USD
    exchange_rate = models.FloatField(null=True, blank=True)
    estimated_gdp = models.FloatField(null=True, blank=True)
    flag_url = models.TextField(null=True, blank=True)
    last_refreshed_at = models.DateTimeField()

    objects = CountryManager()

    class Meta:
        db_table = "countries"
        verbose_name_plural = "countries"
        ordering = ['name']
        indexes = [
            models.Index(fields=['region'], name='countries_region_idx'),
            models.Index(fields=['currency_code'], name='countries_currency_idx'),
        ]

    def __str__(self):
        return self.name


class SystemStatus(models.Model):
    """
    Singleton aggregate row (pk=1) kept in step with the countries table.
    Created by the initial migration; read it through SystemStatus.objects.load().
    """
    SINGLETON_ID = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID)
    total_countries = models.PositiveIntegerField(default=0)
    last_refreshed_at = models.DateTimeField(null=True, blank=True)

    objects = SystemStatusManager()

    class Meta:
        db_table = "system_status"
        verbose_name_plural = "system status"

    def __str__(self):
        if self.last_refreshed_at:
            return f"{self.total_countries} countries, refreshed at {self.last_refreshed_at}"
        return f"{self.total_countries} countries, never refreshed"
