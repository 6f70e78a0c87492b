"""
User Profile Handler.
GET /users/me, POST /users/sync

The boundary has already created the caller's ledger row; this returns it.
"""
from shared.http import api_handler
from shared.models import to_int
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    user = services.ledger.get(identity.user_id)
    return format_response(200, {
        'userId': user['userId'],
        'email': user.get('email'),
        'name': user.get('name'),
        'points': to_int(user.get('points')),
        'tokens': to_int(user.get('tokens')),
        'admin': bool(user.get('admin', False))
    })
