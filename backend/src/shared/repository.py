"""
Storage interface for the rewards platform.

Services only talk to a Repository. Items are plain dicts with the same
camelCase attributes the DynamoDB tables use. Guarded writes that lose their
condition raise ConditionFailedError and leave the stored state unchanged.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

Item = Dict[str, Any]


class ConditionFailedError(Exception):
    """Raised when a conditional write's guard does not hold."""


class Repository(ABC):
    """Persistence operations needed by the services."""

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[Item]:
        """Return the user or None."""

    @abstractmethod
    def create_user(self, item: Item) -> Item:
        """Create a user; ConditionFailedError if the userId already exists."""

    @abstractmethod
    def add_to_balances(self, user_id: str, points: int, tokens: int) -> Item:
        """Atomically add to both balances and return the updated user."""

    @abstractmethod
    def debit_tokens(self, user_id: str, amount: int) -> Item:
        """Subtract tokens; ConditionFailedError if the balance is below amount."""

    @abstractmethod
    def set_balances(self, user_id: str, points: int, tokens: int) -> Item:
        """Overwrite both balances, clamping each at zero."""

    @abstractmethod
    def update_user(self, user_id: str, attributes: Item) -> Item:
        """Set plain (non-balance) attributes on a user."""

    @abstractmethod
    def list_users(self) -> List[Item]:
        """Return every user."""

    # Tasks

    @abstractmethod
    def put_task(self, item: Item) -> Item:
        """Store a task."""

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Item]:
        """Return the task or None."""

    @abstractmethod
    def list_tasks(self) -> List[Item]:
        """Return every task."""

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """Delete a task."""

    # Submissions

    @abstractmethod
    def get_submission(self, submission_id: str) -> Optional[Item]:
        """Return the submission or None."""

    @abstractmethod
    def create_submission(self, item: Item) -> Item:
        """Create a submission; ConditionFailedError if the id already exists."""

    @abstractmethod
    def transition_submission(
        self,
        submission_id: str,
        expected_status: str,
        attributes: Item,
        remove: Tuple[str, ...] = (),
        credit: Optional[Tuple[str, int]] = None
    ) -> Item:
        """
        Update a submission only if its status is expected_status.

        Args:
            submission_id: Submission to update
            expected_status: Guard on the current status
            attributes: Attributes to set (including the new status)
            remove: Attributes to delete
            credit: Optional (user_id, amount) added to both balances in the
                same atomic write

        Returns:
            The updated submission

        Raises:
            ConditionFailedError if the submission is missing or not in expected_status
        """

    @abstractmethod
    def list_submissions_by_status(self, status: str) -> List[Item]:
        """Return submissions in a status."""

    @abstractmethod
    def list_submissions_for_user(self, user_id: str) -> List[Item]:
        """Return a user's submissions."""

    @abstractmethod
    def list_submissions_for_task(self, task_id: str) -> List[Item]:
        """Return a task's submissions."""

    @abstractmethod
    def delete_submission(self, submission_id: str) -> None:
        """Delete a submission."""

    # Shop

    @abstractmethod
    def put_shop_item(self, item: Item) -> Item:
        """Store a shop item."""

    @abstractmethod
    def get_shop_item(self, item_id: str) -> Optional[Item]:
        """Return the shop item or None."""

    @abstractmethod
    def list_shop_items(self) -> List[Item]:
        """Return every shop item."""

    @abstractmethod
    def delete_shop_item(self, item_id: str) -> None:
        """Delete a shop item."""

    # Shared tokens

    @abstractmethod
    def create_shared_token(self, item: Item) -> Item:
        """Store a shared token; ConditionFailedError if the token string exists."""

    @abstractmethod
    def get_shared_token(self, token: str) -> Optional[Item]:
        """Return the shared token or None."""

    def close(self) -> None:
        """Release connections held by the adapter."""
