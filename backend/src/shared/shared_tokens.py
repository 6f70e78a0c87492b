"""
Shared login tokens.

An admin mints an opaque token for a user; whoever holds it can exchange it
for a short-lived credential for that user until the token expires.
"""
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .auth import Identity, create_shared_credential, require_admin
from .config import config
from .errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from .logging import logger
from .models import timestamp, utc_now
from .repository import ConditionFailedError, Repository

TOKEN_BYTES = 32


class SharedTokens:

    def __init__(self, repository: Repository):
        self.repository = repository

    def generate(self, identity: Identity, user_id: str, days_valid: Optional[Any] = None) -> Dict[str, Any]:
        require_admin(identity)
        if not user_id:
            raise ValidationError('UID is required', field='uid')
        if days_valid is None:
            days_valid = config.SHARED_TOKEN_DAYS_VALID
        try:
            days_valid = int(days_valid)
        except (TypeError, ValueError):
            raise ValidationError('daysValid must be a positive integer', field='daysValid')
        if days_valid <= 0:
            raise ValidationError('daysValid must be a positive integer', field='daysValid')

        target = self.repository.get_user(user_id)
        if target is None:
            raise NotFound('User', user_id)
        if target.get('admin', False):
            raise Forbidden('Shared tokens cannot be issued for admin accounts')

        now = utc_now()
        item = {
            'token': secrets.token_hex(TOKEN_BYTES),
            'userId': user_id,
            'createdBy': identity.user_id,
            'createdAt': timestamp(now),
            'expiresAt': timestamp(now + timedelta(days=days_valid))
        }
        try:
            self.repository.create_shared_token(item)
        except ConditionFailedError:
            raise Conflict('Token collision, try again')

        logger.info(f"Admin {identity.user_id} generated a shared token for user {user_id} valid {days_valid} days")
        return {'token': item['token'], 'expiresAt': item['expiresAt']}

    def login(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Exchange a shared token for a credential.

        Raises:
            ValidationError if no token is given
            Unauthorized if the token is unknown or expired
        """
        if not token:
            raise ValidationError('Token is required', field='token')

        shared = self.repository.get_shared_token(token)
        if shared is None:
            raise Unauthorized('Invalid token')

        expires_at = datetime.fromisoformat(shared['expiresAt'])
        if expires_at <= utc_now():
            raise Unauthorized('Token has expired')

        credential = create_shared_credential(shared['userId'], expires_at)
        logger.info(f"Shared token login for user {shared['userId']}")
        return {'customToken': credential, 'expiresAt': shared['expiresAt']}
