class RefreshError(Exception):
    """Base class for failures of a refresh cycle."""


class ExternalSourceUnavailable(RefreshError):
    """
    One of the external feeds could not be fetched.

    reason is one of 'timeout', 'connection', 'status' or 'error' (the feed
    answered but reported a failure in its body).
    """

    def __init__(self, source, reason, detail=''):
        self.source = source
        self.reason = reason
        self.detail = detail
        super().__init__(self.describe())

    def describe(self):
        message = f'Could not fetch data from {self.source} ({self.reason})'
        if self.detail:
            message = f'{message}: {self.detail}'
        return message


class PersistenceFailure(RefreshError):
    """The refresh transaction could not be committed and was rolled back."""


class InternalRefreshError(RefreshError):
    """Anything else that breaks a refresh, e.g. a malformed feed payload."""


class CountryNotFound(Exception):
    def __init__(self, name):
        self.name = name
        super().__init__(f'Country not found: {name}')
