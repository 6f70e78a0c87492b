"""
Tests for the DynamoDB adapter using mocked boto3 tables.
"""
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from shared.dynamo import DynamoRepository, is_condition_failure, scan_all
from shared.repository import ConditionFailedError


def client_error(code):
    return ClientError({'Error': {'Code': code, 'Message': code}}, 'Operation')


@pytest.fixture
def tables():
    return {}


@pytest.fixture
def resource(tables):
    resource = MagicMock()

    def table(name):
        return tables.setdefault(name, MagicMock(name=name))

    resource.Table.side_effect = table
    return resource


@pytest.fixture
def repo(resource):
    return DynamoRepository(resource=resource)


class TestConditionMapping:

    def test_condition_codes(self):
        assert is_condition_failure(client_error('ConditionalCheckFailedException'))
        assert is_condition_failure(client_error('TransactionCanceledException'))
        assert not is_condition_failure(client_error('ProvisionedThroughputExceededException'))

    def test_create_user_conflict(self, repo):
        repo.users.put_item.side_effect = client_error('ConditionalCheckFailedException')

        with pytest.raises(ConditionFailedError):
            repo.create_user({'userId': 'u1', 'points': 0, 'tokens': 0})

        kwargs = repo.users.put_item.call_args.kwargs
        assert kwargs['ConditionExpression'] == 'attribute_not_exists(userId)'

    def test_other_errors_propagate(self, repo):
        repo.users.put_item.side_effect = client_error('InternalServerError')

        with pytest.raises(ClientError):
            repo.create_user({'userId': 'u1'})


class TestUsers:

    def test_debit_is_guarded(self, repo):
        repo.users.update_item.return_value = {'Attributes': {'userId': 'u1', 'tokens': 5}}

        result = repo.debit_tokens('u1', 20)

        kwargs = repo.users.update_item.call_args.kwargs
        assert kwargs['Key'] == {'userId': 'u1'}
        assert kwargs['ConditionExpression'] == 'tokens >= :amount'
        assert kwargs['ExpressionAttributeValues'][':amount'] == 20
        assert result['tokens'] == 5

    def test_debit_insufficient(self, repo):
        repo.users.update_item.side_effect = client_error('ConditionalCheckFailedException')

        with pytest.raises(ConditionFailedError):
            repo.debit_tokens('u1', 20)

    def test_set_balances_clamps(self, repo):
        repo.users.update_item.return_value = {'Attributes': {}}

        repo.set_balances('u1', -5, 3)

        values = repo.users.update_item.call_args.kwargs['ExpressionAttributeValues']
        assert values[':points'] == 0
        assert values[':tokens'] == 3

    def test_credit_uses_atomic_add(self, repo):
        repo.users.update_item.return_value = {'Attributes': {}}

        repo.add_to_balances('u1', 4, 4)

        kwargs = repo.users.update_item.call_args.kwargs
        assert kwargs['UpdateExpression'].startswith('ADD points :points, tokens :tokens')
        assert kwargs['ConditionExpression'] == 'attribute_exists(userId)'

    def test_get_user_missing(self, repo):
        repo.users.get_item.return_value = {}
        assert repo.get_user('u1') is None


class TestSubmissions:

    def test_transition_guard_and_remove(self, repo):
        repo.submissions.update_item.return_value = {'Attributes': {'status': 'pending'}}

        repo.transition_submission(
            's1', 'rejected', {'status': 'pending'}, remove=('declineReason',)
        )

        kwargs = repo.submissions.update_item.call_args.kwargs
        assert kwargs['ConditionExpression'] == '#status = :expected'
        assert kwargs['ExpressionAttributeValues'][':expected'] == 'rejected'
        assert ' REMOVE #r0' in kwargs['UpdateExpression']
        assert kwargs['ExpressionAttributeNames']['#r0'] == 'declineReason'

    def test_transition_condition_failure(self, repo):
        repo.submissions.update_item.side_effect = client_error('ConditionalCheckFailedException')

        with pytest.raises(ConditionFailedError):
            repo.transition_submission('s1', 'pending', {'status': 'approved'})

    def test_transition_with_credit_is_transactional(self, repo, resource):
        repo.submissions.get_item.return_value = {'Item': {'submissionId': 's1', 'status': 'approved'}}

        result = repo.transition_submission('s1', 'pending', {'status': 'approved'}, credit=('u1', 5))

        items = resource.meta.client.transact_write_items.call_args.kwargs['TransactItems']
        assert items[0]['Update']['Key'] == {'submissionId': 's1'}
        assert items[0]['Update']['ConditionExpression'] == '#status = :expected'
        assert items[1]['Update']['Key'] == {'userId': 'u1'}
        assert items[1]['Update']['ExpressionAttributeValues'][':amount'] == 5
        assert result['status'] == 'approved'
        repo.submissions.update_item.assert_not_called()

    def test_cancelled_transaction(self, repo, resource):
        resource.meta.client.transact_write_items.side_effect = client_error('TransactionCanceledException')

        with pytest.raises(ConditionFailedError):
            repo.transition_submission('s1', 'pending', {'status': 'approved'}, credit=('u1', 5))

    def test_list_by_status_uses_index(self, repo):
        repo.submissions.query.return_value = {'Items': [{'submissionId': 's1'}]}

        assert repo.list_submissions_by_status('pending') == [{'submissionId': 's1'}]
        assert repo.submissions.query.call_args.kwargs['IndexName'] == 'StatusIndex'


def test_scan_all_follows_pagination():
    table = MagicMock()
    table.scan.side_effect = [
        {'Items': [{'id': 1}], 'LastEvaluatedKey': {'id': 1}},
        {'Items': [{'id': 2}]},
    ]

    assert scan_all(table) == [{'id': 1}, {'id': 2}]
    assert table.scan.call_args_list[1].kwargs['ExclusiveStartKey'] == {'id': 1}
