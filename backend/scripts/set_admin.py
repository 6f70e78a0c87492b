"""
Grant admin rights to a user by email.

Adds the Cognito user to the admin group and marks their ledger row as admin.

Usage: python scripts/set_admin.py user@example.com
"""
import argparse
import os
import sys

import boto3

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.app import close_services, get_services  # noqa: E402
from shared.auth import Identity  # noqa: E402
from shared.config import config  # noqa: E402
from shared.logging import logger  # noqa: E402


def find_cognito_user(cognito, email: str) -> dict:
    """Return {'username', 'sub', 'email'} for the user pool member with this email."""
    response = cognito.list_users(
        UserPoolId=config.COGNITO_USER_POOL_ID,
        Filter=f'email = "{email}"',
        Limit=1
    )
    users = response.get('Users', [])
    if not users:
        raise LookupError(f"No Cognito user with email {email}")

    user = users[0]
    attributes = {a['Name']: a['Value'] for a in user.get('Attributes', [])}
    return {
        'username': user['Username'],
        'sub': attributes.get('sub', user['Username']),
        'email': attributes.get('email', email)
    }


def set_admin(cognito, ledger, email: str) -> dict:
    cognito_user = find_cognito_user(cognito, email)
    logger.info(f"Found user: {cognito_user['sub']}")

    cognito.admin_add_user_to_group(
        UserPoolId=config.COGNITO_USER_POOL_ID,
        Username=cognito_user['username'],
        GroupName=config.ADMIN_GROUP
    )
    logger.info(f"Added {email} to Cognito group {config.ADMIN_GROUP}")

    user = ledger.ensure(Identity(
        user_id=cognito_user['sub'],
        email=cognito_user['email'],
        name=email.split('@')[0],
        is_admin=True
    ))
    logger.info(f"User {email} has been set as admin in the ledger")
    return user


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Grant admin rights to a user')
    parser.add_argument('email', help='Email address of the Cognito user')
    args = parser.parse_args(argv)

    if not config.COGNITO_USER_POOL_ID:
        logger.error('COGNITO_USER_POOL_ID is not configured')
        return 1

    cognito = boto3.client('cognito-idp', region_name=config.AWS_REGION)
    try:
        set_admin(cognito, get_services().ledger, args.email)
        return 0
    except Exception:
        logger.exception('Error setting admin')
        return 1
    finally:
        close_services()


if __name__ == '__main__':
    sys.exit(main())
