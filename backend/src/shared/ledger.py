"""
User ledger: one row per identity holding point and token balances.
"""
from typing import Any, Dict, List

from .auth import Identity
from .errors import Forbidden, InsufficientBalance, NotFound
from .logging import logger
from .models import SubmissionStatus, timestamp, to_int
from .repository import ConditionFailedError, Repository


class UserLedger:
    """Balance bookkeeping on top of the repository."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def ensure(self, identity: Identity) -> Dict[str, Any]:
        """
        Get or create the ledger row for an authenticated caller.

        Idempotent: concurrent first contacts race on a conditional put and
        the loser reads the winner's row. The stored admin flag follows the
        Cognito group of the caller; shared credentials leave it untouched.
        Admin rows refuse shared credentials.
        """
        user = self.repository.get_user(identity.user_id)
        if user is None:
            now = timestamp()
            item = {
                'userId': identity.user_id,
                'points': 0,
                'tokens': 0,
                'admin': identity.is_admin,
                'createdAt': now,
                'updatedAt': now
            }
            if identity.email:
                item['email'] = identity.email
            if identity.name:
                item['name'] = identity.name
            try:
                user = self.repository.create_user(item)
                logger.info(f"Created ledger row for user {identity.user_id}")
                return user
            except ConditionFailedError:
                user = self.repository.get_user(identity.user_id)

        if identity.is_shared_credential and user.get('admin', False):
            raise Forbidden('Admins must sign in with their own account')
        if not identity.is_shared_credential and bool(user.get('admin', False)) != identity.is_admin:
            user = self.set_admin(identity.user_id, identity.is_admin)
        return user

    def get(self, user_id: str) -> Dict[str, Any]:
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound('User', user_id)
        return user

    def credit(self, user_id: str, amount: int) -> Dict[str, Any]:
        """Add amount to both the point and token balance."""
        try:
            user = self.repository.add_to_balances(user_id, amount, amount)
        except ConditionFailedError:
            raise NotFound('User', user_id)
        logger.info(f"Credited {amount} points/tokens to user {user_id}")
        return user

    def debit(self, user_id: str, tokens: int) -> Dict[str, Any]:
        """
        Remove tokens from a user's balance.

        Raises:
            NotFound if the user does not exist
            InsufficientBalance if the balance is below tokens; nothing is written
        """
        user = self.get(user_id)
        balance = to_int(user.get('tokens'))
        if balance < tokens:
            raise InsufficientBalance(balance, tokens)
        try:
            updated = self.repository.debit_tokens(user_id, tokens)
        except ConditionFailedError:
            # Balance changed between the read and the guarded write
            current = to_int(self.get(user_id).get('tokens'))
            raise InsufficientBalance(current, tokens)
        logger.info(f"Debited {tokens} tokens from user {user_id}")
        return updated

    def reverse_credit(self, user_id: str, amount: int) -> Dict[str, Any]:
        """Take back a previous credit, clamping both balances at zero."""
        user = self.get(user_id)
        points = max(0, to_int(user.get('points')) - amount)
        tokens = max(0, to_int(user.get('tokens')) - amount)
        updated = self.repository.set_balances(user_id, points, tokens)
        logger.info(f"Reversed {amount} points/tokens for user {user_id}: points={points}, tokens={tokens}")
        return updated

    def set_admin(self, user_id: str, admin: bool) -> Dict[str, Any]:
        try:
            user = self.repository.update_user(user_id, {'admin': admin})
        except ConditionFailedError:
            raise NotFound('User', user_id)
        logger.info(f"User {user_id} admin flag set to {admin}")
        return user

    def list_non_admin(self) -> List[Dict[str, Any]]:
        return [u for u in self.repository.list_users() if not u.get('admin', False)]

    def recalculate_points(self, user_id: str) -> int:
        """
        Recompute a user's points from their approved submissions.

        Tokens are not touched since redemptions have already spent them.

        Returns:
            The recomputed point total
        """
        user = self.get(user_id)
        total = 0
        for submission in self.repository.list_submissions_for_user(user_id):
            if submission.get('status') != SubmissionStatus.APPROVED:
                continue
            awarded = submission.get('pointsAwarded')
            if awarded is None:
                task = self.repository.get_task(submission['taskId'])
                awarded = task.get('points') if task else 0
            total += to_int(awarded)

        self.repository.set_balances(user_id, total, to_int(user.get('tokens')))
        logger.info(f"Recalculated points for user {user_id}: {total}")
        return total
