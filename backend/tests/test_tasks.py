"""
Tests for the task catalog.
"""
import pytest

from conftest import set_balance
from shared.errors import Forbidden, NotFound, ValidationError


class TestCreate:

    def test_admin_creates_task(self, users, admin, repository):
        task = users.tasks.create(admin, ' Recycle ', 'Recycle a bottle', '10')

        assert task['title'] == 'Recycle'
        assert task['points'] == 10
        assert task['createdBy'] == admin.user_id
        assert task['taskId'] in repository.tasks

    def test_non_admin_forbidden(self, users, alice):
        with pytest.raises(Forbidden):
            users.tasks.create(alice, 'T', 'D', 5)

    @pytest.mark.parametrize('points', [-1, 2.5, 'ten', None, True, 'NaN', 1e300, '1e100000000'])
    def test_invalid_points(self, users, admin, points):
        with pytest.raises(ValidationError):
            users.tasks.create(admin, 'T', 'D', points)

    def test_missing_title(self, users, admin):
        with pytest.raises(ValidationError):
            users.tasks.create(admin, '', 'D', 5)


class TestListing:

    def test_admin_sees_all_newest_first(self, users, admin, repository):
        old = users.tasks.create(admin, 'Old', 'o', 1)
        new = users.tasks.create(admin, 'New', 'n', 1)
        repository.tasks[old['taskId']]['createdAt'] = '2024-01-01T00:00:00+00:00'
        repository.tasks[new['taskId']]['createdAt'] = '2025-01-01T00:00:00+00:00'

        titles = [t['title'] for t in users.tasks.list_for(admin)]

        assert titles == ['New', 'Old']

    def test_user_does_not_see_active_submissions(self, users, admin, alice):
        pending = users.tasks.create(admin, 'Pending', 'p', 1)
        approved = users.tasks.create(admin, 'Approved', 'a', 1)
        rejected = users.tasks.create(admin, 'Rejected', 'r', 1)
        untouched = users.tasks.create(admin, 'Untouched', 'u', 1)

        users.submissions.submit(alice, pending['taskId'])
        sub = users.submissions.submit(alice, approved['taskId'])
        users.submissions.approve(admin, sub['submissionId'])
        sub = users.submissions.submit(alice, rejected['taskId'])
        users.submissions.reject(admin, sub['submissionId'], 'No')

        visible = {t['taskId'] for t in users.tasks.list_for(alice)}

        assert visible == {rejected['taskId'], untouched['taskId']}

    def test_other_users_submissions_do_not_hide_tasks(self, users, admin, alice, bob):
        task = users.tasks.create(admin, 'T', 'D', 1)
        users.submissions.submit(bob, task['taskId'])

        assert [t['taskId'] for t in users.tasks.list_for(alice)] == [task['taskId']]


class TestDelete:

    def test_delete_reverses_approved_credit(self, users, admin, alice, repository):
        task = users.tasks.create(admin, 'T', 'D', 10)
        sub = users.submissions.submit(alice, task['taskId'])
        users.submissions.approve(admin, sub['submissionId'])
        assert repository.users[alice.user_id]['points'] == 10

        result = users.tasks.delete(admin, task['taskId'])

        assert result == {'taskId': task['taskId'], 'submissionsDeleted': 1, 'creditsReversed': 1}
        assert repository.users[alice.user_id]['points'] == 0
        assert repository.users[alice.user_id]['tokens'] == 0
        assert repository.submissions == {}
        assert repository.tasks == {}

    def test_delete_clamps_after_spending(self, users, admin, alice, repository):
        task = users.tasks.create(admin, 'T', 'D', 10)
        sub = users.submissions.submit(alice, task['taskId'])
        users.submissions.approve(admin, sub['submissionId'])
        users.ledger.debit(alice.user_id, 6)

        users.tasks.delete(admin, task['taskId'])

        assert repository.users[alice.user_id]['points'] == 0
        assert repository.users[alice.user_id]['tokens'] == 0

    def test_delete_leaves_pending_and_rejected_uncredited(self, users, admin, alice, bob, repository):
        task = users.tasks.create(admin, 'T', 'D', 10)
        users.submissions.submit(alice, task['taskId'])
        sub = users.submissions.submit(bob, task['taskId'])
        users.submissions.reject(admin, sub['submissionId'], 'No')
        set_balance(repository, bob.user_id, points=3, tokens=3)

        result = users.tasks.delete(admin, task['taskId'])

        assert result['creditsReversed'] == 0
        assert result['submissionsDeleted'] == 2
        assert repository.users[bob.user_id]['points'] == 3

    def test_delete_unknown_task(self, users, admin):
        with pytest.raises(NotFound):
            users.tasks.delete(admin, 'missing')

    def test_delete_requires_admin(self, users, admin, alice):
        task = users.tasks.create(admin, 'T', 'D', 10)
        with pytest.raises(Forbidden):
            users.tasks.delete(alice, task['taskId'])

    def test_delete_all(self, users, admin, alice, repository):
        for points in (3, 4):
            task = users.tasks.create(admin, 'T', 'D', points)
            sub = users.submissions.submit(alice, task['taskId'])
            users.submissions.approve(admin, sub['submissionId'])

        result = users.tasks.delete_all(admin)

        assert result == {'tasksDeleted': 2, 'submissionsDeleted': 2, 'creditsReversed': 2}
        assert repository.tasks == {}
        assert repository.users[alice.user_id]['points'] == 0
