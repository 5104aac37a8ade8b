"""Error types raised by the storage gateway and the report lifecycle.

Expected absences (unknown id, unknown email) are never errors: getters
return ``None`` and deletes return ``False``. Everything here is a genuine
failure the caller has to react to. Each class carries a ``kind`` string the
HTTP layer puts in its JSON error body.
"""


class CleanCityError(Exception):
    kind = 'error'

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class StorageError(CleanCityError):
    """The store rejected the operation."""
    kind = 'store_error'


class DuplicateError(StorageError):
    """A row with the same unique key already exists."""
    kind = 'already_exists'

    def __init__(self, field, value=None):
        super().__init__(f'{field} already exists')
        self.field = field
        self.value = value


class StoreUnavailableError(StorageError):
    """The store could not be reached."""
    kind = 'store_unavailable'


class RewardAwardError(StorageError):
    """The report owner could not be credited; the completion was rolled back."""
    kind = 'partial_completion'

    def __init__(self, report_id, user_id, message=None):
        super().__init__(message or f'Could not credit user {user_id} for report {report_id}')
        self.report_id = report_id
        self.user_id = user_id


class InvalidStatusError(CleanCityError, ValueError):
    """Unknown report status."""
    kind = 'invalid_status'

    def __init__(self, status):
        super().__init__(f'Invalid status: {status!r}')
        self.status = status


class AdminCodeError(CleanCityError):
    """The admin secret code cannot be used."""
    kind = 'admin_code_error'


class AdminCodeNotFoundError(AdminCodeError):
    """Invalid admin secret code."""
    kind = 'admin_code_not_found'


class AdminCodeUsedError(AdminCodeError):
    """This admin secret code has already been used."""
    kind = 'admin_code_used'


class AdminCodeCityMismatchError(AdminCodeError):
    """This admin secret code was issued for a different city."""
    kind = 'admin_code_city_mismatch'


class AdminLimitReachedError(AdminCodeError):
    """This city already has the maximum number of administrators."""
    kind = 'admin_limit_reached'
