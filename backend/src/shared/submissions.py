"""
Submission tracker.

Ties a user to one attempt at a task. A (user, task) pair owns exactly one
submission row whose status moves pending → approved | rejected, and
rejected → pending on resubmission. Approval credits the user once, in the
same guarded write that changes the status.
"""
from typing import Any, Dict, List, Optional

from .auth import Identity, require_admin
from .errors import Conflict, Forbidden, NotFound, ValidationError
from .ledger import UserLedger
from .logging import logger
from .models import (
    SubmissionStatus,
    can_transition,
    submission_id_for,
    task_summary,
    timestamp,
    to_int,
    user_summary,
)
from .repository import ConditionFailedError, Repository


class SubmissionTracker:
    """Submission state machine."""

    def __init__(self, repository: Repository, ledger: UserLedger):
        self.repository = repository
        self.ledger = ledger

    def get(self, submission_id: str) -> Dict[str, Any]:
        submission = self.repository.get_submission(submission_id)
        if submission is None:
            raise NotFound('Submission', submission_id)
        return submission

    def submit(self, identity: Identity, task_id: str, media_url: Optional[str] = None) -> Dict[str, Any]:
        """
        Submit proof for a task, or resubmit a rejected attempt.

        Args:
            identity: Caller; must not be an admin
            task_id: Task being completed
            media_url: Optional proof-of-completion link

        Returns:
            The submission formatted for the API

        Raises:
            Forbidden for admins, NotFound for an unknown user or task,
            Conflict while an active submission exists for the pair
        """
        if identity.is_admin:
            raise Forbidden('Admins cannot submit tasks')

        self.ledger.get(identity.user_id)
        task = self.repository.get_task(task_id)
        if task is None:
            raise NotFound('Task', task_id)

        submission_id = submission_id_for(identity.user_id, task_id)
        existing = self.repository.get_submission(submission_id)

        if existing is not None:
            status = existing.get('status')
            if status == SubmissionStatus.REJECTED:
                return self.resubmit(identity, submission_id, media_url)
            if status == SubmissionStatus.APPROVED:
                raise Conflict('This task has already been approved')
            raise Conflict('You have already submitted this task and it is pending review')

        item = {
            'submissionId': submission_id,
            'taskId': task_id,
            'userId': identity.user_id,
            'status': SubmissionStatus.PENDING,
            'submittedAt': timestamp()
        }
        if media_url:
            item['mediaUrl'] = media_url

        try:
            submission = self.repository.create_submission(item)
        except ConditionFailedError:
            raise Conflict('You have already submitted this task and it is pending review')

        logger.info(f"Task {task_id} submitted by user {identity.user_id} as {submission_id}")
        return self.format(submission, task=task)

    def resubmit(self, identity: Identity, submission_id: str, media_url: Optional[str] = None) -> Dict[str, Any]:
        """Move the caller's rejected submission back to pending, keeping its id."""
        if identity.is_admin:
            raise Forbidden('Admins cannot submit tasks')

        submission = self.get(submission_id)
        if submission.get('userId') != identity.user_id:
            raise Forbidden('You can only resubmit your own submissions')
        self._check_transition(submission, SubmissionStatus.PENDING)

        attributes = {
            'status': SubmissionStatus.PENDING,
            'submittedAt': timestamp()
        }
        if media_url:
            attributes['mediaUrl'] = media_url

        try:
            updated = self.repository.transition_submission(
                submission_id,
                SubmissionStatus.REJECTED,
                attributes,
                remove=('declineReason', 'reviewedBy', 'reviewedAt')
            )
        except ConditionFailedError:
            raise Conflict('Submission is no longer rejected')

        logger.info(f"User {identity.user_id} resubmitted task {submission['taskId']} ({submission_id})")
        return self.format(updated, task=self.repository.get_task(submission['taskId']))

    def approve(self, identity: Identity, submission_id: str) -> Dict[str, Any]:
        """
        Approve a pending submission and credit the task's points as points
        and tokens. The credit happens only on the pending → approved write,
        so repeated or racing calls credit once.
        """
        require_admin(identity)
        submission = self.get(submission_id)
        if submission.get('status') == SubmissionStatus.APPROVED:
            raise Conflict('Submission already approved')
        self._check_transition(submission, SubmissionStatus.APPROVED)

        task = self.repository.get_task(submission['taskId'])
        if task is None:
            raise NotFound('Task', submission['taskId'])
        user = self.ledger.get(submission['userId'])
        points = to_int(task.get('points'))

        try:
            updated = self.repository.transition_submission(
                submission_id,
                SubmissionStatus.PENDING,
                {
                    'status': SubmissionStatus.APPROVED,
                    'pointsAwarded': points,
                    'reviewedBy': identity.user_id,
                    'reviewedAt': timestamp()
                },
                credit=(user['userId'], points)
            )
        except ConditionFailedError:
            raise Conflict('Submission is no longer pending')

        logger.info(
            f"Submission {submission_id} approved by admin {identity.user_id}, "
            f"added {points} points to user {user['userId']}"
        )
        return self.format(updated, task=task)

    def reject(self, identity: Identity, submission_id: str, decline_reason: Optional[str]) -> Dict[str, Any]:
        """Reject a pending submission with a reason. No balance change."""
        require_admin(identity)
        if not decline_reason or not str(decline_reason).strip():
            raise ValidationError('Decline reason is required', field='declineReason')

        submission = self.get(submission_id)
        if submission.get('status') == SubmissionStatus.REJECTED:
            raise Conflict('Submission already rejected')
        self._check_transition(submission, SubmissionStatus.REJECTED)

        try:
            updated = self.repository.transition_submission(
                submission_id,
                SubmissionStatus.PENDING,
                {
                    'status': SubmissionStatus.REJECTED,
                    'declineReason': str(decline_reason).strip(),
                    'reviewedBy': identity.user_id,
                    'reviewedAt': timestamp()
                }
            )
        except ConditionFailedError:
            raise Conflict('Submission is no longer pending')

        logger.info(f"Submission {submission_id} rejected by admin {identity.user_id} with reason: {decline_reason}")
        return self.format(
            updated,
            task=self.repository.get_task(submission['taskId']),
            user=self.repository.get_user(submission['userId'])
        )

    def list_pending(self, identity: Identity) -> List[Dict[str, Any]]:
        require_admin(identity)
        pending = self.repository.list_submissions_by_status(SubmissionStatus.PENDING)
        pending.sort(key=lambda s: s.get('submittedAt', ''), reverse=True)

        tasks = {}
        users = {}
        result = []
        for submission in pending:
            task_id = submission['taskId']
            user_id = submission['userId']
            if task_id not in tasks:
                tasks[task_id] = self.repository.get_task(task_id)
            if user_id not in users:
                users[user_id] = self.repository.get_user(user_id)
            view = self.format(submission, task=tasks[task_id])
            view['user'] = user_summary(users[user_id], user_id)
            result.append(view)

        logger.info(f"Admin {identity.user_id} fetched {len(result)} pending submissions")
        return result

    def list_for_user(self, identity: Identity) -> List[Dict[str, Any]]:
        # Admins never own submissions
        if identity.is_admin:
            return []

        submissions = self.repository.list_submissions_for_user(identity.user_id)
        submissions.sort(key=lambda s: s.get('submittedAt', ''), reverse=True)
        return [
            self.format(s, task=self.repository.get_task(s['taskId']))
            for s in submissions
        ]

    def _check_transition(self, submission: Dict[str, Any], target: str) -> None:
        current = submission.get('status')
        if not can_transition(current, target):
            raise Conflict(f"Cannot move submission from '{current}' to '{target}'")

    @staticmethod
    def format(
        submission: Dict[str, Any],
        task: Optional[Dict[str, Any]] = None,
        user: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """API view of a submission with embedded task (and optionally user) summary."""
        result = {
            'submissionId': submission['submissionId'],
            'task': task_summary(task, submission.get('taskId')),
            'userId': submission.get('userId'),
            'status': submission.get('status'),
            'mediaUrl': submission.get('mediaUrl'),
            'submittedAt': submission.get('submittedAt'),
            'declineReason': submission.get('declineReason')
        }
        if user is not None:
            result['user'] = user_summary(user, submission.get('userId'))
        if submission.get('pointsAwarded') is not None:
            result['pointsAwarded'] = to_int(submission['pointsAwarded'])
        return result
