"""
Join the country feed to the rate table and derive the GDP estimate.

Partial input never raises here: missing optional fields become None and a
country with no currency gets an estimate of exactly 0. Only entries that
cannot be keyed at all (no name, not an object, unusable population) are
rejected as a malformed payload.
"""
import random

from .exceptions import InternalRefreshError

GDP_FACTOR_MIN = 1000
GDP_FACTOR_MAX = 2000


def compute_estimated_gdp(population, exchange_rate):
    # fresh draw on every call; the estimate is deliberately not reproducible
    multiplier = random.uniform(GDP_FACTOR_MIN, GDP_FACTOR_MAX)
    return population * multiplier / exchange_rate


def _first_currency_code(currencies):
    first = currencies[0]
    if isinstance(first, dict):
        code = first.get('code')
        return code if isinstance(code, str) and code else None
    return None


def _resolve_rate(currency_code, rates):
    if not currency_code:
        return None
    rate = rates.get(currency_code)
    try:
        rate = float(rate) if rate is not None else None
    except (TypeError, ValueError):
        return None
    if not rate or rate <= 0:
        return None
    return rate


def build_candidate(country, rates):
    """
    Turn one country from the feed into a dict of Country field values.

    Args:
        country (dict):  an entry of the country feed.
        rates (dict):    currency code -> units per 1 USD.

    Returns:
        dict: name, capital, region, population, currency_code,
              exchange_rate, estimated_gdp, flag_url.
    """
    if not isinstance(country, dict):
        raise InternalRefreshError(f'Country entry is not an object: {country!r}')
    name = country.get('name')
    if not name or not isinstance(name, str):
        raise InternalRefreshError(f'Country entry without a name: {country!r}')

    try:
        population = int(country.get('population') or 0)
    except (TypeError, ValueError) as exc:
        raise InternalRefreshError(f'{name}: population is not a number') from exc
    if population < 0:
        raise InternalRefreshError(f'{name}: population is negative')

    currencies = country.get('currencies') or []
    if isinstance(currencies, list) and currencies:
        currency_code = _first_currency_code(currencies)
        exchange_rate = _resolve_rate(currency_code, rates)
        if exchange_rate is None:
            estimated_gdp = None
        else:
            estimated_gdp = compute_estimated_gdp(population, exchange_rate)
    else:
        currency_code = None
        exchange_rate = None
        estimated_gdp = 0

    return {
        'name': name,
        'capital': country.get('capital') or None,
        'region': country.get('region') or None,
        'population': population,
        'currency_code': currency_code,
        'exchange_rate': exchange_rate,
        'estimated_gdp': estimated_gdp,
        'flag_url': country.get('flag') or None,
    }


def build_candidates(countries, rates):
    return [build_candidate(c, rates) for c in countries]
