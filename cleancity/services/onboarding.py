"""Admin registration through single-use, city-scoped secret codes."""
import logging

from cleancity.errors import (AdminCodeCityMismatchError, AdminCodeNotFoundError,
                              AdminCodeUsedError, AdminLimitReachedError, DuplicateError)
from cleancity.utils import same_city

logger = logging.getLogger(__name__)

def redeem_admin_code(storage, code):
    """Look up a code by its exact string. Returns None if it does not exist."""
    if not code:
        return None
    return storage.get_admin_secret_code(code)

def mark_used(storage, code_id):
    return storage.mark_admin_secret_code_used(code_id)

def register_admin(storage, data, code, max_admins_per_city=None):
    """Create an admin account from ``data`` using the secret ``code``.

    The code must exist, be unused and belong to the registrant's city. The
    code is claimed and the user created in one storage operation, so two
    registrations racing on the same code produce one admin at most.
    """
    secret = redeem_admin_code(storage, code)
    if secret is None:
        logger.warning('Admin registration with unknown code for %s', data.get('email'))
        raise AdminCodeNotFoundError()
    if secret.is_used:
        logger.warning('Admin registration with used code %s', secret.code)
        raise AdminCodeUsedError()
    if not same_city(secret.city, data.get('city')):
        raise AdminCodeCityMismatchError(
            f"This admin secret code is for {secret.city}, not {data.get('city')}")
    if max_admins_per_city is not None and \
            storage.get_admin_count_for_city(secret.city) >= max_admins_per_city:
        raise AdminLimitReachedError()

    if storage.get_user_by_email(data.get('email')):
        raise DuplicateError('email', data.get('email'))

    user = storage.create_admin_user(data, secret.id)
    logger.info('Admin %s registered for %s with code %s', user.id, secret.city, secret.code)
    return user

def seed_admin_codes(storage, codes):
    """Insert the bootstrap codes when the store has none. Returns how many were added."""
    if storage.get_all_admin_secret_codes():
        return 0
    logger.info('Initializing admin secret codes...')
    for code, city in codes:
        storage.create_admin_secret_code(code, city)
    logger.info('Admin secret codes initialized: %s', len(codes))
    return len(codes)
