"""In-memory storage used by tests and by ``STORAGE_BACKEND = 'memory'``.

Rows are plain (transient) model instances kept in dicts. Nothing is
persisted and no lock is taken: this backend is only correct inside a single
process with one request at a time. Do not run it behind a threaded or
multi-worker server.
"""
import itertools
import logging

from cleancity.errors import AdminCodeUsedError, DuplicateError, RewardAwardError
from cleancity.models import AdminSecretCode, Notification, Report, User
from cleancity.status import ReportStatus, transition
from cleancity.storage.base import Storage, clean_new_user, clean_report_data, clean_user_update
from cleancity.utils import normalize_email, same_city, utcnow

logger = logging.getLogger(__name__)


class MemStorage(Storage):

    def __init__(self):
        self.users = {}
        self.admin_secret_codes = {}
        self.reports = {}
        self.notifications = {}
        self._user_ids = itertools.count(1)
        self._code_ids = itertools.count(1)
        self._report_ids = itertools.count(1)
        self._notification_ids = itertools.count(1)

    # User operations
    def get_user(self, user_id):
        return self.users.get(user_id)

    def get_user_by_email(self, email):
        email = normalize_email(email)
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, data):
        values = clean_new_user(data)
        if self.get_user_by_email(values['email']):
            raise DuplicateError('email', values['email'])
        user = User(id=next(self._user_ids), is_active=True, reward_points=0,
                    created_at=utcnow(), **values)
        self.users[user.id] = user
        return user

    def update_user(self, user_id, data):
        user = self.users.get(user_id)
        if user is None:
            return None
        values = clean_user_update(data)
        if 'email' in values:
            other = self.get_user_by_email(values['email'])
            if other is not None and other.id != user_id:
                raise DuplicateError('email', values['email'])
        for key, value in values.items():
            setattr(user, key, value)
        return user

    def delete_user(self, user_id):
        return self.users.pop(user_id, None) is not None

    def get_all_users(self):
        return list(self.users.values())

    def get_users_by_city(self, city):
        return [u for u in self.users.values() if same_city(u.city, city)]

    def get_admin_count_for_city(self, city):
        return sum(1 for u in self.get_users_by_city(city) if u.role == 'admin')

    # Admin secret code operations
    def get_admin_secret_code(self, code):
        return next((c for c in self.admin_secret_codes.values() if c.code == code), None)

    def create_admin_secret_code(self, code, city):
        if self.get_admin_secret_code(code):
            raise DuplicateError('code', code)
        secret = AdminSecretCode(id=next(self._code_ids), code=code, city=city, is_used=False)
        self.admin_secret_codes[secret.id] = secret
        return secret

    def mark_admin_secret_code_used(self, code_id):
        secret = self.admin_secret_codes.get(code_id)
        if secret is None:
            return False
        secret.is_used = True
        return True

    def get_all_admin_secret_codes(self):
        return list(self.admin_secret_codes.values())

    def create_admin_user(self, data, code_id):
        secret = self.admin_secret_codes.get(code_id)
        if secret is None or secret.is_used:
            raise AdminCodeUsedError()
        user = self.create_user(dict(data, role='admin', secret_code=secret.code))
        secret.is_used = True
        return user

    # Report operations
    def get_report(self, report_id):
        return self.reports.get(report_id)

    def get_reports_by_user(self, user_id):
        return [r for r in self.reports.values() if r.user_id == user_id]

    def get_all_reports(self):
        return list(self.reports.values())

    def get_reports_by_status(self, status):
        status = ReportStatus.parse(status).value
        return [r for r in self.reports.values() if r.status == status]

    def get_reports_by_city(self, city):
        user_ids = {u.id for u in self.get_users_by_city(city)}
        if not user_ids:
            return []
        return [r for r in self.reports.values() if r.user_id in user_ids]

    def create_report(self, data):
        now = utcnow()
        report = Report(
            id=next(self._report_ids),
            status=ReportStatus.PENDING.value,
            admin_notes=None,
            assigned_admin_id=None,
            reward_points=None,
            created_at=now,
            updated_at=now,
            completed_at=None,
            **clean_report_data(data)
        )
        self.reports[report.id] = report
        return report

    def update_report_status(self, report_id, update):
        report = self.reports.get(report_id)
        if report is None:
            return None

        change = transition(report.status, update, utcnow())
        owner = None
        if change.awarded:
            # Check before touching the report so a failed credit changes nothing
            owner = self.users.get(report.user_id)
            if owner is None:
                raise RewardAwardError(report_id, report.user_id, 'Report owner no longer exists')

        for key, value in change.values.items():
            setattr(report, key, value)
        if owner is not None:
            owner.reward_points = (owner.reward_points or 0) + change.awarded
            logger.info('Awarded %s points to user %s for report %s', change.awarded, owner.id, report_id)
        return report, change

    def delete_report(self, report_id):
        return self.reports.pop(report_id, None) is not None

    # Notification operations
    def create_notification(self, user_id, title, message, n_type='info'):
        notif = Notification(id=next(self._notification_ids), user_id=user_id, title=title,
                             message=message, type=n_type, is_read=False, created_at=utcnow())
        self.notifications[notif.id] = notif
        return notif

    def get_notifications(self, user_id, unread_only=True):
        notifs = [n for n in self.notifications.values()
                  if n.user_id == user_id and not (unread_only and n.is_read)]
        return sorted(notifs, key=lambda n: (n.created_at, n.id), reverse=True)

    def mark_notifications_read(self, user_id):
        count = 0
        for notif in self.notifications.values():
            if notif.user_id == user_id and not notif.is_read:
                notif.is_read = True
                count += 1
        return count
