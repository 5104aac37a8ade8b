"""SQLAlchemy-backed storage, the production backend.

Every write runs in one transaction on the Flask-SQLAlchemy session and is
rolled back before any error leaves this module. Store errors are
translated into the types in :mod:`cleancity.errors`.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError

from cleancity.errors import AdminCodeUsedError, DuplicateError, RewardAwardError, StoreUnavailableError
from cleancity.extensions import db
from cleancity.models import AdminSecretCode, Notification, Report, User
from cleancity.status import ReportStatus, transition
from cleancity.storage.base import Storage, clean_new_user, clean_report_data, clean_user_update
from cleancity.utils import normalize_email, utcnow

logger = logging.getLogger(__name__)

# Attempts at the status compare-and-set before giving up
MAX_STATUS_ATTEMPTS = 5


def _duplicate_field(exc):
    text = str(exc.orig).lower()
    for field in ('email', 'code'):
        if field in text:
            return field
    return 'row'


class DatabaseStorage(Storage):

    @contextmanager
    def _transaction(self):
        session = db.session
        try:
            yield session
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.info('Integrity error: %s', exc.orig)
            raise DuplicateError(_duplicate_field(exc)) from exc
        except OperationalError as exc:
            session.rollback()
            logger.error('Store unavailable: %s', exc.orig)
            raise StoreUnavailableError(str(exc.orig)) from exc
        except Exception:
            session.rollback()
            raise

    @contextmanager
    def _reading(self):
        try:
            yield db.session
        except OperationalError as exc:
            db.session.rollback()
            logger.error('Store unavailable: %s', exc.orig)
            raise StoreUnavailableError(str(exc.orig)) from exc

    # User operations
    def get_user(self, user_id):
        with self._reading() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email):
        with self._reading() as session:
            return session.execute(
                select(User).filter_by(email=normalize_email(email))
            ).scalar_one_or_none()

    def create_user(self, data):
        user = User(is_active=True, reward_points=0, created_at=utcnow(), **clean_new_user(data))
        with self._transaction() as session:
            session.add(user)
        return user

    def update_user(self, user_id, data):
        values = clean_user_update(data)
        with self._transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                return None
            for key, value in values.items():
                setattr(user, key, value)
        return user

    def delete_user(self, user_id):
        with self._transaction() as session:
            result = session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0

    def get_all_users(self):
        with self._reading() as session:
            return session.execute(select(User).order_by(User.id)).scalars().all()

    def get_users_by_city(self, city):
        with self._reading() as session:
            return session.execute(
                select(User).where(func.lower(User.city) == city.lower()).order_by(User.id)
            ).scalars().all()

    def get_admin_count_for_city(self, city):
        with self._reading() as session:
            return session.execute(
                select(func.count(User.id))
                .where(func.lower(User.city) == city.lower(), User.role == 'admin')
            ).scalar()

    # Admin secret code operations
    def get_admin_secret_code(self, code):
        with self._reading() as session:
            return session.execute(
                select(AdminSecretCode).filter_by(code=code)
            ).scalar_one_or_none()

    def create_admin_secret_code(self, code, city):
        secret = AdminSecretCode(code=code, city=city, is_used=False)
        with self._transaction() as session:
            session.add(secret)
        return secret

    def mark_admin_secret_code_used(self, code_id):
        with self._transaction() as session:
            result = session.execute(
                update(AdminSecretCode).where(AdminSecretCode.id == code_id).values(is_used=True)
            )
        return result.rowcount > 0

    def get_all_admin_secret_codes(self):
        with self._reading() as session:
            return session.execute(select(AdminSecretCode).order_by(AdminSecretCode.id)).scalars().all()

    def create_admin_user(self, data, code_id):
        with self._transaction() as session:
            # Claim the code first; a concurrent registration matches zero rows
            claimed = session.execute(
                update(AdminSecretCode)
                .where(AdminSecretCode.id == code_id, AdminSecretCode.is_used.is_(False))
                .values(is_used=True)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                raise AdminCodeUsedError()
            secret = session.get(AdminSecretCode, code_id)
            values = clean_new_user(dict(data, role='admin', secret_code=secret.code))
            user = User(is_active=True, reward_points=0, created_at=utcnow(), **values)
            session.add(user)
        return user

    # Report operations
    def get_report(self, report_id):
        with self._reading() as session:
            return session.get(Report, report_id)

    def get_reports_by_user(self, user_id):
        with self._reading() as session:
            return session.execute(
                select(Report).filter_by(user_id=user_id).order_by(Report.id)
            ).scalars().all()

    def get_all_reports(self):
        with self._reading() as session:
            return session.execute(select(Report).order_by(Report.id)).scalars().all()

    def get_reports_by_status(self, status):
        status = ReportStatus.parse(status).value
        with self._reading() as session:
            return session.execute(
                select(Report).filter_by(status=status).order_by(Report.id)
            ).scalars().all()

    def get_reports_by_city(self, city):
        with self._reading() as session:
            return session.execute(
                select(Report)
                .join(User, Report.user_id == User.id)
                .where(func.lower(User.city) == city.lower())
                .order_by(Report.id)
            ).scalars().all()

    def create_report(self, data):
        now = utcnow()
        report = Report(
            status=ReportStatus.PENDING.value,
            admin_notes=None,
            assigned_admin_id=None,
            reward_points=None,
            created_at=now,
            updated_at=now,
            completed_at=None,
            **clean_report_data(data)
        )
        with self._transaction() as session:
            session.add(report)
        return report

    def update_report_status(self, report_id, update_data):
        with self._transaction() as session:
            for attempt in range(1, MAX_STATUS_ATTEMPTS + 1):
                report = session.get(Report, report_id, populate_existing=True)
                if report is None:
                    return None

                change = transition(report.status, update_data, utcnow())
                # Compare-and-set on the status we just read
                written = session.execute(
                    update(Report)
                    .where(Report.id == report_id, Report.status == report.status)
                    .values(**change.values)
                    .execution_options(synchronize_session=False)
                )
                if written.rowcount == 1:
                    break
                logger.info('Report %s changed concurrently, retrying status update (attempt %s)',
                            report_id, attempt)
            else:
                raise StoreUnavailableError(f'Report {report_id} kept changing during status update')

            if change.awarded:
                self._credit_owner(session, report_id, report.user_id, change.awarded)

        return session.get(Report, report_id), change

    def _credit_owner(self, session, report_id, user_id, points):
        try:
            credited = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(reward_points=User.reward_points + points)
                .execution_options(synchronize_session=False)
            )
        except (IntegrityError, OperationalError) as exc:
            raise RewardAwardError(report_id, user_id, str(exc.orig)) from exc
        if credited.rowcount != 1:
            raise RewardAwardError(report_id, user_id, 'Report owner no longer exists')
        logger.info('Awarded %s points to user %s for report %s', points, user_id, report_id)

    def delete_report(self, report_id):
        with self._transaction() as session:
            result = session.execute(delete(Report).where(Report.id == report_id))
        return result.rowcount > 0

    # Notification operations
    def create_notification(self, user_id, title, message, n_type='info'):
        notif = Notification(user_id=user_id, title=title, message=message, type=n_type,
                             is_read=False, created_at=utcnow())
        with self._transaction() as session:
            session.add(notif)
        return notif

    def get_notifications(self, user_id, unread_only=True):
        query = select(Notification).filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        with self._reading() as session:
            return session.execute(
                query.order_by(Notification.created_at.desc(), Notification.id.desc())
            ).scalars().all()

    def mark_notifications_read(self, user_id):
        with self._transaction() as session:
            result = session.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
            )
        return result.rowcount
