"""
Status constants and record helpers for the rewards platform.
Submission lifecycle: pending → approved | rejected, rejected → pending (resubmit)
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

# Fixed namespace so a (user, task) pair always maps to the same submission id
SUBMISSION_NAMESPACE = uuid.UUID('6f1d8c2e-4b7a-4f3e-9a51-2c8e0d7b4a10')


class SubmissionStatus:
    """Submission review statuses."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    ACTIVE = (PENDING, APPROVED)


# Legal transitions and the action that performs each one
VALID_TRANSITIONS = {
    SubmissionStatus.PENDING: {
        SubmissionStatus.APPROVED: 'approve',
        SubmissionStatus.REJECTED: 'reject',
    },
    SubmissionStatus.REJECTED: {
        SubmissionStatus.PENDING: 'resubmit',
    },
    SubmissionStatus.APPROVED: {},
}


def can_transition(current: str, target: str) -> bool:
    """Check if a submission status transition is valid."""
    return target in VALID_TRANSITIONS.get(current, {})


def submission_id_for(user_id: str, task_id: str) -> str:
    """Deterministic submission id for a (user, task) pair."""
    return str(uuid.uuid5(SUBMISSION_NAMESPACE, f"{user_id}:{task_id}"))


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp used for every createdAt/updatedAt attribute."""
    return (moment or utc_now()).isoformat()


def to_int(value: Any, default: int = 0) -> int:
    """Convert a DynamoDB number (Decimal) or missing value to int."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return int(value)
    return int(value)


def task_summary(task: Optional[Dict[str, Any]], task_id: str = None) -> Dict[str, Any]:
    """Compact task view embedded in submission responses."""
    if not task:
        return {'taskId': task_id, 'title': 'Unknown Task', 'description': '', 'points': 0}
    return {
        'taskId': task['taskId'],
        'title': task.get('title', ''),
        'description': task.get('description', ''),
        'points': to_int(task.get('points')),
    }


def user_summary(user: Optional[Dict[str, Any]], user_id: str = None) -> Dict[str, Any]:
    """Compact user view embedded in submission responses."""
    if not user:
        return {'userId': user_id, 'email': 'Unknown', 'name': 'Unknown'}
    return {
        'userId': user['userId'],
        'email': user.get('email') or 'Unknown',
        'name': user.get('name') or 'Unknown',
    }
