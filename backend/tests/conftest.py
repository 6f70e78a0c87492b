"""
Shared fixtures: an in-memory repository with the same guarded-write
semantics as the DynamoDB adapter, and API Gateway event builders.
"""
import copy
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.app import Services, set_services  # noqa: E402
from shared.auth import Identity  # noqa: E402
from shared.repository import ConditionFailedError, Repository  # noqa: E402


class InMemoryRepository(Repository):
    """Dict-backed repository used by the service and handler tests."""

    def __init__(self):
        self.users = {}
        self.tasks = {}
        self.submissions = {}
        self.shop_items = {}
        self.shared_tokens = {}
        self.closed = False

    @staticmethod
    def _copy(item):
        return copy.deepcopy(item) if item is not None else None

    def _put_new(self, store, key, item):
        if item[key] in store:
            raise ConditionFailedError(f"{key} exists")
        store[item[key]] = copy.deepcopy(item)
        return self._copy(item)

    # Users

    def get_user(self, user_id):
        return self._copy(self.users.get(user_id))

    def create_user(self, item):
        return self._put_new(self.users, 'userId', item)

    def add_to_balances(self, user_id, points, tokens):
        if user_id not in self.users:
            raise ConditionFailedError('missing user')
        user = self.users[user_id]
        user['points'] = user.get('points', 0) + points
        user['tokens'] = user.get('tokens', 0) + tokens
        return self._copy(user)

    def debit_tokens(self, user_id, amount):
        user = self.users.get(user_id)
        if user is None or user.get('tokens', 0) < amount:
            raise ConditionFailedError('insufficient tokens')
        user['tokens'] -= amount
        return self._copy(user)

    def set_balances(self, user_id, points, tokens):
        if user_id not in self.users:
            raise ConditionFailedError('missing user')
        user = self.users[user_id]
        user['points'] = max(0, points)
        user['tokens'] = max(0, tokens)
        return self._copy(user)

    def update_user(self, user_id, attributes):
        if user_id not in self.users:
            raise ConditionFailedError('missing user')
        self.users[user_id].update(copy.deepcopy(attributes))
        return self._copy(self.users[user_id])

    def list_users(self):
        return [self._copy(u) for u in self.users.values()]

    # Tasks

    def put_task(self, item):
        self.tasks[item['taskId']] = copy.deepcopy(item)
        return self._copy(item)

    def get_task(self, task_id):
        return self._copy(self.tasks.get(task_id))

    def list_tasks(self):
        return [self._copy(t) for t in self.tasks.values()]

    def delete_task(self, task_id):
        self.tasks.pop(task_id, None)

    # Submissions

    def get_submission(self, submission_id):
        return self._copy(self.submissions.get(submission_id))

    def create_submission(self, item):
        return self._put_new(self.submissions, 'submissionId', item)

    def transition_submission(self, submission_id, expected_status, attributes, remove=(), credit=None):
        submission = self.submissions.get(submission_id)
        if submission is None or submission.get('status') != expected_status:
            raise ConditionFailedError('status changed')
        if credit is not None and credit[0] not in self.users:
            raise ConditionFailedError('missing user')

        submission.update(copy.deepcopy(attributes))
        for name in remove:
            submission.pop(name, None)
        if credit is not None:
            self.add_to_balances(credit[0], credit[1], credit[1])
        return self._copy(submission)

    def list_submissions_by_status(self, status):
        return [self._copy(s) for s in self.submissions.values() if s.get('status') == status]

    def list_submissions_for_user(self, user_id):
        return [self._copy(s) for s in self.submissions.values() if s.get('userId') == user_id]

    def list_submissions_for_task(self, task_id):
        return [self._copy(s) for s in self.submissions.values() if s.get('taskId') == task_id]

    def delete_submission(self, submission_id):
        self.submissions.pop(submission_id, None)

    # Shop

    def put_shop_item(self, item):
        self.shop_items[item['itemId']] = copy.deepcopy(item)
        return self._copy(item)

    def get_shop_item(self, item_id):
        return self._copy(self.shop_items.get(item_id))

    def list_shop_items(self):
        return [self._copy(i) for i in self.shop_items.values()]

    def delete_shop_item(self, item_id):
        self.shop_items.pop(item_id, None)

    # Shared tokens

    def create_shared_token(self, item):
        return self._put_new(self.shared_tokens, 'token', item)

    def get_shared_token(self, token):
        return self._copy(self.shared_tokens.get(token))

    def close(self):
        self.closed = True


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def services(repository):
    services = Services(repository)
    set_services(services)
    yield services
    set_services(None)


@pytest.fixture
def admin():
    return Identity(user_id='admin-1', email='admin@example.com', is_admin=True)


@pytest.fixture
def alice():
    return Identity(user_id='user-alice', email='alice@example.com', name='Alice')


@pytest.fixture
def bob():
    return Identity(user_id='user-bob', email='bob@example.com', name='Bob')


@pytest.fixture
def users(services, admin, alice, bob):
    """Ledger rows for the admin, alice and bob."""
    for identity in (admin, alice, bob):
        services.ledger.ensure(identity)
    return services


def set_balance(repository, user_id, points=0, tokens=0):
    repository.users[user_id]['points'] = points
    repository.users[user_id]['tokens'] = tokens


def make_event(identity=None, body=None, path_params=None, path=None, headers=None):
    """Build an API Gateway proxy event with Cognito authorizer claims."""
    event = {
        'httpMethod': 'POST',
        'path': path or '/',
        'headers': headers or {},
        'pathParameters': path_params,
        'queryStringParameters': None,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {}
    }
    if identity is not None:
        claims = {'sub': identity.user_id}
        if identity.email:
            claims['email'] = identity.email
        if identity.is_admin:
            claims['cognito:groups'] = 'admin'
        event['requestContext']['authorizer'] = {'claims': claims}
    return event


def response_body(response):
    return json.loads(response['body'])
