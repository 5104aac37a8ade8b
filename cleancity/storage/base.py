"""The persistence contract shared by the database and in-memory backends.

Rules every backend follows:

* Creates fill in server defaults (ids, timestamps, ``status='pending'``,
  ``is_active=True``, ``reward_points=0``, ``is_used=False``). Values the
  caller passes for those fields are ignored.
* A missing row is not an error. Getters and updates return ``None``,
  deletes and ``mark_admin_secret_code_used`` return ``False``.
* Emails are stored lowercase and compared case-insensitively. City filters
  are case-insensitive. Every other lookup is exact.
* Unique key clashes raise :class:`~cleancity.errors.DuplicateError`, an
  unreachable store raises :class:`~cleancity.errors.StoreUnavailableError`.
"""
from abc import ABC, abstractmethod

from cleancity.utils import normalize_email

USER_FIELDS = ('email', 'full_name', 'password', 'phone', 'dob', 'address',
               'city', 'state', 'pincode', 'role', 'secret_code')
# Fields update_user may change; 'reward_points' is the administrative correction
USER_UPDATE_FIELDS = USER_FIELDS + ('is_active', 'reward_points')
REPORT_FIELDS = ('user_id', 'title', 'description', 'address', 'latitude',
                 'longitude', 'photo')


def clean_user_update(data):
    values = {k: v for k, v in data.items() if k in USER_UPDATE_FIELDS}
    if 'email' in values:
        values['email'] = normalize_email(values['email'])
    if values.get('city'):
        values['city'] = values['city'].strip()
    if 'role' in values:
        values['role'] = values['role'] or 'user'
    return values


def clean_new_user(data):
    values = {k: data.get(k) for k in USER_FIELDS}
    values['email'] = normalize_email(values['email'])
    values['city'] = (values['city'] or '').strip()
    values['role'] = values['role'] or 'user'
    values['secret_code'] = values['secret_code'] or None
    return values


def clean_report_data(data):
    return {k: data.get(k) for k in REPORT_FIELDS}


class Storage(ABC):

    # User operations
    @abstractmethod
    def get_user(self, user_id):
        ...

    @abstractmethod
    def get_user_by_email(self, email):
        ...

    @abstractmethod
    def create_user(self, data):
        ...

    @abstractmethod
    def update_user(self, user_id, data):
        ...

    @abstractmethod
    def delete_user(self, user_id) -> bool:
        """Remove the user row only; their reports are kept unchanged."""

    @abstractmethod
    def get_all_users(self):
        ...

    @abstractmethod
    def get_users_by_city(self, city):
        ...

    @abstractmethod
    def get_admin_count_for_city(self, city) -> int:
        ...

    # Admin secret code operations
    @abstractmethod
    def get_admin_secret_code(self, code):
        ...

    @abstractmethod
    def create_admin_secret_code(self, code, city):
        ...

    @abstractmethod
    def mark_admin_secret_code_used(self, code_id) -> bool:
        ...

    @abstractmethod
    def get_all_admin_secret_codes(self):
        ...

    @abstractmethod
    def create_admin_user(self, data, code_id):
        """Consume an unused admin code and create the admin user with it.

        Both happen or neither does. Raises ``AdminCodeUsedError`` when the
        code is already used (or unknown) by the time it is claimed.
        """

    # Report operations
    @abstractmethod
    def get_report(self, report_id):
        ...

    @abstractmethod
    def get_reports_by_user(self, user_id):
        ...

    @abstractmethod
    def get_all_reports(self):
        ...

    @abstractmethod
    def get_reports_by_status(self, status):
        ...

    @abstractmethod
    def get_reports_by_city(self, city):
        """Reports whose owner lives in ``city`` (case-insensitive)."""

    @abstractmethod
    def create_report(self, data):
        ...

    @abstractmethod
    def update_report_status(self, report_id, update):
        """Apply a :class:`~cleancity.status.StatusUpdate`.

        Returns ``(report, transition)`` or ``None`` if the report does not
        exist. Entering ``completed`` credits the owner in the same write, or
        raises ``RewardAwardError`` with nothing applied.
        """

    @abstractmethod
    def delete_report(self, report_id) -> bool:
        ...

    # Notification operations
    @abstractmethod
    def create_notification(self, user_id, title, message, n_type='info'):
        ...

    @abstractmethod
    def get_notifications(self, user_id, unread_only=True):
        ...

    @abstractmethod
    def mark_notifications_read(self, user_id) -> int:
        ...
