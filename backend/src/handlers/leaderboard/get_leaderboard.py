"""
Leaderboard Handler.
GET /leaderboard
Non-admin users sorted by points.
"""
from shared.http import api_handler
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    return format_response(200, services.leaderboard.rank())
