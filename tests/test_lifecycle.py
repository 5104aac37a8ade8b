import pytest
from sqlalchemy import update
from cleancity.errors import InvalidStatusError, RewardAwardError
from cleancity.status import transition
from cleancity.storage import DatabaseStorage
from conftest import make_user_data

@pytest.fixture
def reporter(storage):
    return storage.create_user(make_user_data(email='reporter@example.com'))

@pytest.fixture
def report(lifecycle, reporter):
    return lifecycle.create_report(reporter.id, 't', 'd', 'addr', '40.1', '-73.2', 'photo.jpg')

def test_create_report_defaults(lifecycle, storage):
    user = storage.create_user(make_user_data())
    report = lifecycle.create_report(user.id, 't', 'd', 'addr', '40.1', '-73.2', 'photo.jpg')
    assert report.status == 'pending'
    assert report.reward_points is None
    assert report.completed_at is None
    assert report.admin_notes is None
    assert report.assigned_admin_id is None
    assert report.created_at == report.updated_at
    assert report.latitude == '40.1'
    assert report.photo == 'photo.jpg'

def test_update_status_not_found(lifecycle):
    assert lifecycle.update_status(404, 'completed') is None

def test_invalid_status(lifecycle, report):
    with pytest.raises(InvalidStatusError):
        lifecycle.update_status(report.id, 'archived')

def test_processing_applies_optional_fields(lifecycle, report):
    created_at = report.created_at
    updated = lifecycle.update_status(report.id, 'processing', admin_notes='crew sent', assigned_admin_id=9)
    assert updated.status == 'processing'
    assert updated.admin_notes == 'crew sent'
    assert updated.assigned_admin_id == 9
    assert updated.updated_at >= created_at
    assert updated.reward_points is None
    assert updated.completed_at is None

def test_completion_awards_owner(lifecycle, storage, report, reporter):
    lifecycle.update_status(report.id, 'processing')
    completed = lifecycle.update_status(report.id, 'completed', admin_notes='cleaned')
    assert completed.status == 'completed'
    assert completed.reward_points == 50
    assert completed.completed_at is not None
    assert completed.admin_notes == 'cleaned'
    assert storage.get_user(reporter.id).reward_points == 50

def test_completion_is_idempotent(lifecycle, storage, report, reporter):
    first = lifecycle.update_status(report.id, 'completed')
    points, completed_at = first.reward_points, first.completed_at

    again = lifecycle.update_status(report.id, 'completed', admin_notes='double checked')
    assert again.reward_points == points == 50
    assert again.completed_at == completed_at
    assert again.admin_notes == 'double checked'
    assert storage.get_user(reporter.id).reward_points == 50

def test_reopened_report_is_awarded_again(lifecycle, storage, report, reporter):
    first = lifecycle.update_status(report.id, 'completed')
    completed_at = first.completed_at

    reopened = lifecycle.update_status(report.id, 'processing', admin_notes='bins full again')
    assert reopened.status == 'processing'
    assert reopened.completed_at == completed_at
    assert reopened.reward_points == 50
    assert storage.get_user(reporter.id).reward_points == 50

    again = lifecycle.update_status(report.id, 'completed')
    assert again.completed_at >= completed_at
    assert again.reward_points == 50
    assert storage.get_user(reporter.id).reward_points == 100
    assert len(storage.get_notifications(reporter.id)) == 2

def test_stale_status_read_is_retried(lifecycle, storage, report, reporter, monkeypatch):
    if not isinstance(storage, DatabaseStorage):
        pytest.skip('compare-and-set only applies to the database backend')
    from cleancity.extensions import db
    from cleancity.models import Report
    from cleancity.storage import database

    lifecycle.update_status(report.id, 'processing')
    calls = []

    def racing_transition(current, update_data, now, **kwargs):
        if not calls:
            # another writer completes the report between our read and our write
            db.session.execute(
                update(Report).where(Report.id == report.id)
                .values(status='completed', reward_points=50, completed_at=now)
                .execution_options(synchronize_session=False)
            )
        calls.append(current)
        return transition(current, update_data, now, **kwargs)

    monkeypatch.setattr(database, 'transition', racing_transition)
    result = lifecycle.update_status(report.id, 'completed', admin_notes='late')

    assert calls == ['processing', 'completed']
    assert result.status == 'completed'
    assert result.admin_notes == 'late'
    # the competing write did not credit the owner and the retry awards nothing
    assert storage.get_user(reporter.id).reward_points == 0

def test_rejection_awards_nothing(lifecycle, storage, report, reporter):
    rejected = lifecycle.update_status(report.id, 'rejected', admin_notes='not waste')
    assert rejected.status == 'rejected'
    assert rejected.reward_points is None
    assert rejected.completed_at is None
    assert storage.get_user(reporter.id).reward_points == 0

def test_awards_accumulate_across_reports(lifecycle, storage, reporter):
    for _ in range(3):
        report = lifecycle.create_report(reporter.id, 't', 'd', 'a', '1', '2', 'p')
        lifecycle.update_status(report.id, 'completed')
    assert storage.get_user(reporter.id).reward_points == 150

def test_completion_of_orphaned_report_fails_cleanly(lifecycle, storage, report, reporter):
    storage.delete_user(reporter.id)
    with pytest.raises(RewardAwardError) as exc:
        lifecycle.update_status(report.id, 'completed')
    assert exc.value.kind == 'partial_completion'
    assert exc.value.report_id == report.id

    unchanged = storage.get_report(report.id)
    assert unchanged.status == 'pending'
    assert unchanged.reward_points is None
    assert unchanged.completed_at is None

    # rejecting it still works
    assert lifecycle.update_status(report.id, 'rejected').status == 'rejected'

def test_failed_credit_rolls_back_completion(lifecycle, storage, report, reporter, monkeypatch):
    if not isinstance(storage, DatabaseStorage):
        pytest.skip('credit write failure only applies to the database backend')

    def broken_credit(session, report_id, user_id, points):
        raise RewardAwardError(report_id, user_id, 'write failed')

    monkeypatch.setattr(storage, '_credit_owner', broken_credit)
    with pytest.raises(RewardAwardError):
        lifecycle.update_status(report.id, 'completed')

    assert storage.get_report(report.id).status == 'pending'
    assert storage.get_report(report.id).completed_at is None
    assert storage.get_user(reporter.id).reward_points == 0

def test_completed_listener_notifies_owner(lifecycle, storage, report, reporter):
    lifecycle.update_status(report.id, 'completed')
    lifecycle.update_status(report.id, 'completed')
    notifs = storage.get_notifications(reporter.id)
    assert len(notifs) == 1
    assert notifs[0].title == 'Report completed'
    assert '50' in notifs[0].message

def test_failing_listener_does_not_undo_completion(lifecycle, storage, report, reporter):
    seen = []

    @lifecycle.subscribe_completed
    def boom(rep, points):
        seen.append((rep.id, points))
        raise RuntimeError('mail server down')

    completed = lifecycle.update_status(report.id, 'completed')
    assert completed.status == 'completed'
    assert seen == [(report.id, 50)]
    assert storage.get_user(reporter.id).reward_points == 50
