import logging
import threading

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from . import services
from .models import Country, SystemStatus
from .reconcile import build_candidates
from .utils.image import save_summary_image

logger = logging.getLogger(__name__)

TOP_N = 5


def do_refresh(background=True):
    """
    Run one refresh cycle: fetch both feeds, reconcile, commit, then schedule
    the summary image.

    Both feeds are fetched before the transaction opens, so a feed failure
    leaves the store untouched. The image is rendered only after commit and
    never affects the result.

    Raises:
        ExternalSourceUnavailable: a feed timed out, was unreachable or failed.
        InternalRefreshError:      a feed payload could not be used.
        PersistenceFailure:        the transaction was rolled back.
    """
    countries_data = services.fetch_countries()
    rates = services.fetch_exchange_rates()

    candidates = build_candidates(countries_data, rates)

    now = timezone.now()
    total = Country.objects.upsert_all(candidates, now)

    transaction.on_commit(lambda: schedule_summary_image(background=background))
    logger.info("Refresh committed: %d countries", total)

    return {
        'message': 'Countries data refreshed successfully',
        'total_countries': total,
        'last_refreshed_at': now,
    }


def summary_snapshot():
    """Read what the summary image shows: total, top countries by GDP, refresh time."""
    status = SystemStatus.objects.load()
    top = [
        {'name': c.name, 'estimated_gdp': c.estimated_gdp}
        for c in Country.objects.top_by_gdp(TOP_N)
    ]
    return status.total_countries, top, status.last_refreshed_at


def write_summary_image(total, top, timestamp, out_path=None):
    out_path = out_path or settings.SUMMARY_IMAGE_PATH
    try:
        save_summary_image(total, top, timestamp, out_path)
    except Exception:
        logger.exception("Summary image generation failed")
        return None
    logger.info("Summary image written to %s", out_path)
    return out_path


def schedule_summary_image(background=True):
    """
    Snapshot the committed data in the calling thread, then render it.
    With background=True the rendering runs on a daemon thread, which is
    returned; otherwise it runs inline and None is returned.
    """
    try:
        total, top, timestamp = summary_snapshot()
    except Exception:
        logger.exception("Could not read data for the summary image")
        return None

    if not background:
        write_summary_image(total, top, timestamp)
        return None

    thread = threading.Thread(
        target=write_summary_image,
        args=(total, top, timestamp),
        name='summary-image',
        daemon=True,
    )
    thread.start()
    return thread
