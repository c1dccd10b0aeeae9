import logging

import requests
from django.conf import settings

from .exceptions import ExternalSourceUnavailable, InternalRefreshError

logger = logging.getLogger(__name__)

COUNTRIES_SOURCE = 'Countries API'
EXCHANGE_SOURCE = 'Exchange rates API'


def _get_json(source, url, timeout):
    """
    GET a feed once (no retries) and decode its JSON body.
    Transport failures and non-2xx answers become ExternalSourceUnavailable;
    a body that is not JSON is a malformed payload.
    """
    if timeout is None:
        timeout = settings.EXTERNAL_API_TIMEOUT
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.Timeout as exc:
        logger.warning("%s timed out after %ss", source, timeout)
        raise ExternalSourceUnavailable(source, 'timeout', f'no response within {timeout}s') from exc
    except requests.HTTPError as exc:
        code = getattr(exc.response, 'status_code', None)
        logger.warning("%s answered with HTTP %s", source, code)
        raise ExternalSourceUnavailable(source, 'status', f'HTTP {code}') from exc
    except requests.RequestException as exc:
        logger.warning("%s unreachable: %s", source, exc)
        raise ExternalSourceUnavailable(source, 'connection', str(exc)) from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise InternalRefreshError(f'{source} returned a body that is not JSON') from exc


def fetch_countries(timeout=None):
    """Fetch the full country list (name, capital, region, population, flag, currencies)."""
    data = _get_json(COUNTRIES_SOURCE, settings.EXTERNAL_COUNTRIES_API, timeout)
    if not isinstance(data, list):
        raise InternalRefreshError(f'{COUNTRIES_SOURCE} did not return a list of countries')
    return data


def fetch_exchange_rates(timeout=None):
    """Fetch the USD rate table as a mapping of currency code to rate."""
    data = _get_json(EXCHANGE_SOURCE, settings.EXTERNAL_EXCHANGE_API, timeout)
    if not isinstance(data, dict):
        raise InternalRefreshError(f'{EXCHANGE_SOURCE} did not return an object')
    if data.get('result') == 'error':
        raise ExternalSourceUnavailable(EXCHANGE_SOURCE, 'error', data.get('error-type', 'unknown error'))

    rates = data.get('rates')
    if not isinstance(rates, dict):
        raise InternalRefreshError(f'{EXCHANGE_SOURCE} response has no rates table')
    return rates
