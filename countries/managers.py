import logging

from django.db import DatabaseError, models, transaction
from django.db.models import F

from .exceptions import CountryNotFound, PersistenceFailure

logger = logging.getLogger(__name__)

SORT_GDP_ASC = 'gdp_asc'
SORT_GDP_DESC = 'gdp_desc'


class CountryQuerySet(models.QuerySet):

    def named(self, name):
        """Case-insensitive match on the country name."""
        return self.filter(name__iexact=name)

    def filter_listing(self, region=None, currency=None):
        qs = self
        if region:
            qs = qs.filter(region__iexact=region)
        if currency:
            qs = qs.filter(currency_code__iexact=currency)
        return qs

    def sorted_by(self, sort=None):
        """
        Apply a listing sort. 'gdp_asc' and 'gdp_desc' order by estimated GDP
        with unknown values last; anything else falls back to name ascending.
        """
        if sort == SORT_GDP_DESC:
            return self.order_by(F('estimated_gdp').desc(nulls_last=True), 'name')
        if sort == SORT_GDP_ASC:
            return self.order_by(F('estimated_gdp').asc(nulls_last=True), 'name')
        return self.order_by('name')

    def top_by_gdp(self, limit=5):
        return self.exclude(estimated_gdp__isnull=True).order_by('-estimated_gdp')[:limit]


class CountryManager(models.Manager.from_queryset(CountryQuerySet)):
    """
    Store operations for Country rows. Every operation that changes the number
    of rows also rewrites the SystemStatus count in the same transaction.
    """

    def get_by_name(self, name):
        country = self.named(name).first()
        if country is None:
            raise CountryNotFound(name)
        return country

    def query_all(self, region=None, currency=None, sort=None):
        return self.filter_listing(region=region, currency=currency).sorted_by(sort)

    def upsert_all(self, candidates, refreshed_at):
        """
        Insert or fully overwrite one row per candidate, keyed by name, then
        store the live count and refresh time on the status row. All of it
        commits together or not at all.

        Args:
            candidates:    iterable of dicts holding Country field values.
            refreshed_at:  timestamp written to every row and the status row.

        Returns:
            int: the committed total row count.

        Raises:
            PersistenceFailure: if any write fails; nothing is kept.
        """
        # Import here to avoid circular imports
        from .models import SystemStatus

        try:
            with transaction.atomic():
                status = SystemStatus.objects.lock()
                for candidate in candidates:
                    self._upsert_one(candidate, refreshed_at)

                total = self.count()
                status.total_countries = total
                status.last_refreshed_at = refreshed_at
                status.save()
        except DatabaseError as exc:
            logger.exception("Refresh transaction rolled back")
            raise PersistenceFailure(str(exc)) from exc
        return total

    def _upsert_one(self, candidate, refreshed_at):
        fields = {k: v for k, v in candidate.items() if k != 'name'}
        fields['last_refreshed_at'] = refreshed_at

        existing = self.named(candidate['name']).first()
        if existing is None:
            return self.create(name=candidate['name'], **fields)

        # name keeps the casing it was first stored with
        for field, value in fields.items():
            setattr(existing, field, value)
        existing.save()
        return existing

    def delete_by_name(self, name):
        """
        Delete the named country and recount. Returns False when nothing
        matched. The status timestamp is left alone.
        """
        from .models import SystemStatus

        with transaction.atomic():
            status = SystemStatus.objects.lock()
            deleted, _ = self.named(name).delete()
            if not deleted:
                return False
            status.total_countries = self.count()
            status.save(update_fields=['total_countries'])
        return True


class SystemStatusManager(models.Manager):

    def load(self):
        status, _ = self.get_or_create(pk=self.model.SINGLETON_ID)
        return status

    def lock(self):
        """Fetch the status row under a row lock. Must run inside a transaction."""
        return self.select_for_update().get_or_create(pk=self.model.SINGLETON_ID)[0]

    def set_status(self, total, timestamp=None):
        status = self.load()
        status.total_countries = total
        if timestamp is not None:
            status.last_refreshed_at = timestamp
        status.save()
        return status
