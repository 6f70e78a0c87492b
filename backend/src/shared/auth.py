"""
Authentication utilities for extracting user info from Cognito tokens.

The API boundary resolves the caller once into a role-tagged Identity and
passes it into every service call.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from .config import config
from .errors import Forbidden, Unauthorized
from .models import utc_now

SHARED_CREDENTIAL_ALGORITHM = 'HS256'
SHARED_CREDENTIAL_USE = 'shared'


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_admin: bool = False
    # True when authenticated with a shared-token credential instead of Cognito
    is_shared_credential: bool = False


def get_claims(event: dict) -> Optional[dict]:
    """Return Cognito authorizer claims or None if the request has none."""
    try:
        claims = event['requestContext']['authorizer']['claims']
    except (KeyError, TypeError):
        return None
    return claims or None


def get_user_sub(event: dict) -> Optional[str]:
    """
    Extract user sub (unique ID) from Cognito authorizer claims.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        User sub string or None if not authenticated
    """
    claims = get_claims(event)
    return claims.get('sub') if claims else None


def get_user_email(event: dict) -> Optional[str]:
    """Extract user email from Cognito claims."""
    claims = get_claims(event)
    return claims.get('email') if claims else None


def get_user_groups(event: dict) -> list:
    """Extract user groups from Cognito claims."""
    claims = get_claims(event) or {}
    groups = claims.get('cognito:groups', '')
    if isinstance(groups, str):
        # API Gateway flattens lists to "a,b" or "[a b]"
        groups = groups.strip('[]').replace(',', ' ').split()
    return list(groups or [])


def is_admin(event: dict) -> bool:
    """Check if user belongs to admin group."""
    return config.ADMIN_GROUP in get_user_groups(event)


def get_bearer_token(event: dict) -> Optional[str]:
    """Extract the bearer credential from the Authorization header."""
    headers = event.get('headers') or {}
    value = headers.get('Authorization') or headers.get('authorization') or ''
    if not value.startswith('Bearer '):
        return None
    return value[len('Bearer '):].strip() or None


def create_shared_credential(user_id: str, expires_at: datetime) -> str:
    """
    Mint a short-lived credential for a shared-token login.

    The credential expires after SHARED_CREDENTIAL_TTL_MINUTES or when the
    shared token itself expires, whichever comes first.
    """
    if not config.SHARED_TOKEN_SECRET:
        raise RuntimeError('SHARED_TOKEN_SECRET is not configured')

    now = utc_now()
    expire = min(now + timedelta(minutes=config.SHARED_CREDENTIAL_TTL_MINUTES), expires_at)
    payload = {
        'sub': user_id,
        'token_use': SHARED_CREDENTIAL_USE,
        'iat': now,
        'exp': expire,
    }
    return jwt.encode(payload, config.SHARED_TOKEN_SECRET, algorithm=SHARED_CREDENTIAL_ALGORITHM)


def decode_shared_credential(token: str) -> dict:
    """
    Decode and validate a shared credential.

    Raises:
        Unauthorized if the credential is invalid, expired or not a shared credential
    """
    if not config.SHARED_TOKEN_SECRET:
        raise Unauthorized('Invalid token')
    try:
        payload = jwt.decode(
            token,
            config.SHARED_TOKEN_SECRET,
            algorithms=[SHARED_CREDENTIAL_ALGORITHM]
        )
    except JWTError:
        raise Unauthorized('Invalid token')

    if payload.get('token_use') != SHARED_CREDENTIAL_USE or not payload.get('sub'):
        raise Unauthorized('Invalid token')
    return payload


def resolve_identity(event: dict) -> Identity:
    """
    Resolve the caller of an API Gateway event.

    Cognito authorizer claims win; otherwise a shared credential in the
    Authorization header is accepted. Shared credentials never grant admin.

    Raises:
        Unauthorized if the request carries no usable credential
    """
    claims = get_claims(event)
    if claims and claims.get('sub'):
        return Identity(
            user_id=claims['sub'],
            email=claims.get('email'),
            name=claims.get('name'),
            is_admin=is_admin(event)
        )

    token = get_bearer_token(event)
    if not token:
        raise Unauthorized('Unauthorized')

    payload = decode_shared_credential(token)
    return Identity(user_id=payload['sub'], is_shared_credential=True)


def require_admin(identity: Identity, message: str = 'Admin only') -> None:
    """Raise Forbidden unless the caller is an admin."""
    if not identity.is_admin:
        raise Forbidden(message)
