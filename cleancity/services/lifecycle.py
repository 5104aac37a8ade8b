"""Report lifecycle: creation and status updates with the reward award.

The storage backend applies a status change and the owner's credit as one
write. This module adds the entry points the routes call and publishes a
"report completed" event to observers once the write has landed.
"""
import logging

from cleancity.status import StatusUpdate

logger = logging.getLogger(__name__)


class ReportLifecycle:

    def __init__(self, storage):
        self.storage = storage
        self._completed_listeners = []

    def subscribe_completed(self, listener):
        """Register ``listener(report, points)`` for reports entering ``completed``."""
        self._completed_listeners.append(listener)
        return listener

    def create_report(self, user_id, title, description, address, latitude, longitude, photo):
        report = self.storage.create_report({
            'user_id': user_id,
            'title': title,
            'description': description,
            'address': address,
            'latitude': latitude,
            'longitude': longitude,
            'photo': photo,
        })
        logger.info('Report %s created by user %s', report.id, user_id)
        return report

    def update_status(self, report_id, status, admin_notes=None, assigned_admin_id=None):
        """Move a report to ``status``.

        Returns the updated report, or ``None`` when it does not exist.
        Raises ``InvalidStatusError`` for an unknown status and
        ``RewardAwardError`` when the owner could not be credited.
        """
        update = StatusUpdate.create(status, admin_notes, assigned_admin_id)
        result = self.storage.update_report_status(report_id, update)
        if result is None:
            return None

        report, change = result
        logger.info('Report %s: %s -> %s', report_id, change.previous.value, update.status.value)
        if change.newly_completed:
            self._publish_completed(report, change.awarded)
        return report

    def _publish_completed(self, report, points):
        for listener in self._completed_listeners:
            try:
                listener(report, points)
            except Exception:
                # Observers never undo a completed transition
                logger.exception('Report completed listener %r failed for report %s', listener, report.id)
