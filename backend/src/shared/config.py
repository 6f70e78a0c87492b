"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the platform.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # Local DynamoDB (e.g. dynamodb-local); unset in AWS
    DYNAMODB_ENDPOINT_URL = os.environ.get('DYNAMODB_ENDPOINT_URL') or None

    # DynamoDB Tables
    USERS_TABLE = os.environ.get('USERS_TABLE', 'Users')
    TASKS_TABLE = os.environ.get('TASKS_TABLE', 'Tasks')
    SUBMISSIONS_TABLE = os.environ.get('SUBMISSIONS_TABLE', 'Submissions')
    SHOP_ITEMS_TABLE = os.environ.get('SHOP_ITEMS_TABLE', 'ShopItems')
    SHARED_TOKENS_TABLE = os.environ.get('SHARED_TOKENS_TABLE', 'SharedTokens')

    # Cognito
    COGNITO_USER_POOL_ID = os.environ.get('COGNITO_USER_POOL_ID', '')
    ADMIN_GROUP = os.environ.get('ADMIN_GROUP', 'admin')

    # Shared login tokens
    SHARED_TOKEN_SECRET = os.environ.get('SHARED_TOKEN_SECRET', '')
    SHARED_TOKEN_DAYS_VALID = int(os.environ.get('SHARED_TOKEN_DAYS_VALID', '30'))
    SHARED_CREDENTIAL_TTL_MINUTES = int(os.environ.get('SHARED_CREDENTIAL_TTL_MINUTES', '60'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


config = Config()
