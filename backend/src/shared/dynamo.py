"""
DynamoDB adapter for the storage interface.

Every guarded write is a single conditional request (or one transaction for
approve-and-credit), so concurrent requests are serialized by DynamoDB itself.
"""
from typing import Any, Dict, List, Optional, Tuple

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from .config import Config, config
from .logging import logger
from .models import timestamp
from .repository import ConditionFailedError, Item, Repository

# GSIs on the submissions table
STATUS_INDEX = 'StatusIndex'
USER_INDEX = 'UserIndex'
TASK_INDEX = 'TaskIndex'

CONDITION_FAILURE_CODES = ('ConditionalCheckFailedException', 'TransactionCanceledException')


def is_condition_failure(error: ClientError) -> bool:
    """True if a ClientError means a guard did not hold."""
    return error.response.get('Error', {}).get('Code') in CONDITION_FAILURE_CODES


def create_resource(cfg: Config = config):
    """Open a DynamoDB service resource for the configured region/endpoint."""
    return boto3.resource(
        'dynamodb',
        region_name=cfg.AWS_REGION,
        endpoint_url=cfg.DYNAMODB_ENDPOINT_URL
    )


def scan_all(table, **kwargs) -> List[Item]:
    """Scan a table following LastEvaluatedKey until exhausted."""
    items = []
    while True:
        response = table.scan(**kwargs)
        items.extend(response.get('Items', []))
        last_key = response.get('LastEvaluatedKey')
        if not last_key:
            return items
        kwargs['ExclusiveStartKey'] = last_key


def query_all(table, **kwargs) -> List[Item]:
    """Query a table or index following LastEvaluatedKey until exhausted."""
    items = []
    while True:
        response = table.query(**kwargs)
        items.extend(response.get('Items', []))
        last_key = response.get('LastEvaluatedKey')
        if not last_key:
            return items
        kwargs['ExclusiveStartKey'] = last_key


class DynamoRepository(Repository):
    """Repository backed by one DynamoDB table per entity."""

    def __init__(self, resource=None, cfg: Config = config):
        self.config = cfg
        self.resource = resource or create_resource(cfg)
        self.users = self.resource.Table(cfg.USERS_TABLE)
        self.tasks = self.resource.Table(cfg.TASKS_TABLE)
        self.submissions = self.resource.Table(cfg.SUBMISSIONS_TABLE)
        self.shop_items = self.resource.Table(cfg.SHOP_ITEMS_TABLE)
        self.shared_tokens = self.resource.Table(cfg.SHARED_TOKENS_TABLE)

    def _put_new(self, table, item: Item, key_name: str) -> Item:
        try:
            table.put_item(
                Item=item,
                ConditionExpression=f'attribute_not_exists({key_name})'
            )
        except ClientError as e:
            if is_condition_failure(e):
                raise ConditionFailedError(f"{key_name} {item.get(key_name)} already exists")
            raise
        return item

    def _update(self, table, key: Dict[str, Any], **params) -> Item:
        try:
            response = table.update_item(Key=key, ReturnValues='ALL_NEW', **params)
        except ClientError as e:
            if is_condition_failure(e):
                raise ConditionFailedError(f"Condition failed updating {table.name} {key}")
            raise
        return response.get('Attributes', {})

    # Users

    def get_user(self, user_id: str) -> Optional[Item]:
        return self.users.get_item(Key={'userId': user_id}).get('Item')

    def create_user(self, item: Item) -> Item:
        return self._put_new(self.users, item, 'userId')

    def add_to_balances(self, user_id: str, points: int, tokens: int) -> Item:
        return self._update(
            self.users,
            {'userId': user_id},
            UpdateExpression='ADD points :points, tokens :tokens SET updatedAt = :ts',
            ConditionExpression='attribute_exists(userId)',
            ExpressionAttributeValues={
                ':points': points,
                ':tokens': tokens,
                ':ts': timestamp()
            }
        )

    def debit_tokens(self, user_id: str, amount: int) -> Item:
        return self._update(
            self.users,
            {'userId': user_id},
            UpdateExpression='SET tokens = tokens - :amount, updatedAt = :ts',
            ConditionExpression='tokens >= :amount',
            ExpressionAttributeValues={
                ':amount': amount,
                ':ts': timestamp()
            }
        )

    def set_balances(self, user_id: str, points: int, tokens: int) -> Item:
        return self._update(
            self.users,
            {'userId': user_id},
            UpdateExpression='SET points = :points, tokens = :tokens, updatedAt = :ts',
            ConditionExpression='attribute_exists(userId)',
            ExpressionAttributeValues={
                ':points': max(0, points),
                ':tokens': max(0, tokens),
                ':ts': timestamp()
            }
        )

    def update_user(self, user_id: str, attributes: Item) -> Item:
        names = {}
        values = {':ts': timestamp()}
        assignments = ['updatedAt = :ts']
        for i, (name, value) in enumerate(sorted(attributes.items())):
            names[f'#a{i}'] = name
            values[f':v{i}'] = value
            assignments.append(f'#a{i} = :v{i}')
        return self._update(
            self.users,
            {'userId': user_id},
            UpdateExpression='SET ' + ', '.join(assignments),
            ConditionExpression='attribute_exists(userId)',
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values
        )

    def list_users(self) -> List[Item]:
        return scan_all(self.users)

    # Tasks

    def put_task(self, item: Item) -> Item:
        self.tasks.put_item(Item=item)
        return item

    def get_task(self, task_id: str) -> Optional[Item]:
        return self.tasks.get_item(Key={'taskId': task_id}).get('Item')

    def list_tasks(self) -> List[Item]:
        return scan_all(self.tasks)

    def delete_task(self, task_id: str) -> None:
        self.tasks.delete_item(Key={'taskId': task_id})

    # Submissions

    def get_submission(self, submission_id: str) -> Optional[Item]:
        return self.submissions.get_item(Key={'submissionId': submission_id}).get('Item')

    def create_submission(self, item: Item) -> Item:
        return self._put_new(self.submissions, item, 'submissionId')

    def transition_submission(
        self,
        submission_id: str,
        expected_status: str,
        attributes: Item,
        remove: Tuple[str, ...] = (),
        credit: Optional[Tuple[str, int]] = None
    ) -> Item:
        names = {'#status': 'status'}
        values = {':expected': expected_status}
        assignments = []
        for i, (name, value) in enumerate(sorted(attributes.items())):
            names[f'#a{i}'] = name
            values[f':v{i}'] = value
            assignments.append(f'#a{i} = :v{i}')

        expression = 'SET ' + ', '.join(assignments)
        if remove:
            removals = []
            for i, name in enumerate(remove):
                names[f'#r{i}'] = name
                removals.append(f'#r{i}')
            expression += ' REMOVE ' + ', '.join(removals)

        if credit is None:
            return self._update(
                self.submissions,
                {'submissionId': submission_id},
                UpdateExpression=expression,
                ConditionExpression='#status = :expected',
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values
            )

        user_id, amount = credit
        client = self.resource.meta.client
        try:
            client.transact_write_items(
                TransactItems=[
                    {
                        'Update': {
                            'TableName': self.config.SUBMISSIONS_TABLE,
                            'Key': {'submissionId': submission_id},
                            'UpdateExpression': expression,
                            'ConditionExpression': '#status = :expected',
                            'ExpressionAttributeNames': names,
                            'ExpressionAttributeValues': values
                        }
                    },
                    {
                        'Update': {
                            'TableName': self.config.USERS_TABLE,
                            'Key': {'userId': user_id},
                            'UpdateExpression': 'ADD points :amount, tokens :amount SET updatedAt = :ts',
                            'ConditionExpression': 'attribute_exists(userId)',
                            'ExpressionAttributeValues': {
                                ':amount': amount,
                                ':ts': timestamp()
                            }
                        }
                    }
                ]
            )
        except ClientError as e:
            if is_condition_failure(e):
                logger.warning(f"Transition of submission {submission_id} cancelled: {e}")
                raise ConditionFailedError(f"Submission {submission_id} is no longer {expected_status}")
            raise

        return self.get_submission(submission_id)

    def list_submissions_by_status(self, status: str) -> List[Item]:
        return query_all(
            self.submissions,
            IndexName=STATUS_INDEX,
            KeyConditionExpression=Key('status').eq(status)
        )

    def list_submissions_for_user(self, user_id: str) -> List[Item]:
        return query_all(
            self.submissions,
            IndexName=USER_INDEX,
            KeyConditionExpression=Key('userId').eq(user_id)
        )

    def list_submissions_for_task(self, task_id: str) -> List[Item]:
        return query_all(
            self.submissions,
            IndexName=TASK_INDEX,
            KeyConditionExpression=Key('taskId').eq(task_id)
        )

    def delete_submission(self, submission_id: str) -> None:
        self.submissions.delete_item(Key={'submissionId': submission_id})

    # Shop

    def put_shop_item(self, item: Item) -> Item:
        self.shop_items.put_item(Item=item)
        return item

    def get_shop_item(self, item_id: str) -> Optional[Item]:
        return self.shop_items.get_item(Key={'itemId': item_id}).get('Item')

    def list_shop_items(self) -> List[Item]:
        return scan_all(self.shop_items)

    def delete_shop_item(self, item_id: str) -> None:
        self.shop_items.delete_item(Key={'itemId': item_id})

    # Shared tokens

    def create_shared_token(self, item: Item) -> Item:
        return self._put_new(self.shared_tokens, item, 'token')

    def get_shared_token(self, token: str) -> Optional[Item]:
        return self.shared_tokens.get_item(Key={'token': token}).get('Item')

    def close(self) -> None:
        self.resource.meta.client.close()
