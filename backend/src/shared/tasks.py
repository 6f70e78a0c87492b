"""
Task catalog: admin-authored work items with a point value.
"""
from typing import Any, Dict, List

from .auth import Identity, require_admin
from .errors import NotFound, ValidationError
from .ledger import UserLedger
from .logging import logger
from .models import SubmissionStatus, new_id, timestamp, to_int
from .repository import Repository
from .utils import parse_non_negative_int


class TaskCatalog:

    def __init__(self, repository: Repository, ledger: UserLedger):
        self.repository = repository
        self.ledger = ledger

    def list_for(self, identity: Identity) -> List[Dict[str, Any]]:
        """
        Tasks visible to the caller, newest first.

        Admins see every task. Other users do not see tasks they already
        have an active (pending or approved) submission for; rejected tasks
        stay visible so they can be resubmitted.
        """
        tasks = self.repository.list_tasks()
        if not identity.is_admin:
            active_task_ids = {
                s['taskId']
                for s in self.repository.list_submissions_for_user(identity.user_id)
                if s.get('status') in SubmissionStatus.ACTIVE
            }
            tasks = [t for t in tasks if t['taskId'] not in active_task_ids]

        tasks.sort(key=lambda t: t.get('createdAt', ''), reverse=True)
        return tasks

    def create(self, identity: Identity, title: str, description: str, points: Any) -> Dict[str, Any]:
        require_admin(identity)
        if not title or not str(title).strip():
            raise ValidationError('Title is required', field='title')
        if not description or not str(description).strip():
            raise ValidationError('Description is required', field='description')
        if points is None or points == '':
            raise ValidationError('Points are required', field='points')

        item = {
            'taskId': new_id(),
            'title': str(title).strip(),
            'description': str(description).strip(),
            'points': parse_non_negative_int(points, 'points'),
            'createdBy': identity.user_id,
            'createdAt': timestamp()
        }
        self.repository.put_task(item)
        logger.info(f"Task {item['taskId']} created by admin {identity.user_id} worth {item['points']} points")
        return item

    def delete(self, identity: Identity, task_id: str) -> Dict[str, Any]:
        """
        Delete a task and its submissions.

        Credit granted by approved submissions is taken back first, clamping
        each balance at zero.

        Returns:
            Summary with the number of submissions removed and reversed
        """
        require_admin(identity)
        task = self.repository.get_task(task_id)
        if task is None:
            raise NotFound('Task', task_id)

        submissions = self.repository.list_submissions_for_task(task_id)
        reversed_count = 0
        for submission in submissions:
            if submission.get('status') != SubmissionStatus.APPROVED:
                continue
            amount = submission.get('pointsAwarded')
            if amount is None:
                amount = task.get('points')
            try:
                self.ledger.reverse_credit(submission['userId'], to_int(amount))
                reversed_count += 1
            except NotFound:
                logger.warning(f"User {submission['userId']} missing while reversing credit for task {task_id}")

        for submission in submissions:
            self.repository.delete_submission(submission['submissionId'])
        self.repository.delete_task(task_id)

        logger.info(
            f"Task {task_id} deleted by admin {identity.user_id}: "
            f"{len(submissions)} submissions removed, {reversed_count} credits reversed"
        )
        return {
            'taskId': task_id,
            'submissionsDeleted': len(submissions),
            'creditsReversed': reversed_count
        }

    def delete_all(self, identity: Identity) -> Dict[str, Any]:
        require_admin(identity)
        results = [self.delete(identity, t['taskId']) for t in self.repository.list_tasks()]
        return {
            'tasksDeleted': len(results),
            'submissionsDeleted': sum(r['submissionsDeleted'] for r in results),
            'creditsReversed': sum(r['creditsReversed'] for r in results)
        }
