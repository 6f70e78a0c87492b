"""
Leaderboard projection over the user ledger.
"""
from typing import Any, Dict, List

from .ledger import UserLedger
from .models import to_int


def display_label(user: Dict[str, Any]) -> str:
    return user.get('email') or user.get('name') or 'Unknown'


class Leaderboard:

    def __init__(self, ledger: UserLedger):
        self.ledger = ledger

    def rank(self) -> List[Dict[str, Any]]:
        """
        Non-admin users by descending points.

        sorted() is stable, so tied users keep the order storage returned
        them in; that order is not guaranteed between calls.
        """
        rows = [
            {
                'identity': user['userId'],
                'displayLabel': display_label(user),
                'points': to_int(user.get('points')),
                'tokens': to_int(user.get('tokens'))
            }
            for user in self.ledger.list_non_admin()
        ]
        return sorted(rows, key=lambda row: row['points'], reverse=True)
