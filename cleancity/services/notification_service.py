import logging

logger = logging.getLogger(__name__)

def create_notification(storage, user_id, title, message, n_type='info'):
    """Helper to create a notification"""
    return storage.create_notification(user_id, title, message, n_type)

def report_completed_listener(storage):
    """Build the lifecycle observer that tells a reporter their report was resolved."""
    def notify(report, points):
        create_notification(
            storage,
            report.user_id,
            'Report completed',
            f'Your report "{report.title}" has been resolved. You earned {points} reward points.',
            'success',
        )
        logger.debug('Completion notification queued for user %s', report.user_id)
    return notify
