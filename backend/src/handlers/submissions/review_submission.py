"""
Review Submission Handler (admin).
POST /tasks/submissions/{submissionId}/approve
POST /tasks/submissions/{submissionId}/reject   Body: { "declineReason": "..." }

The action comes from the {action} path parameter when the route is generic,
otherwise from the last path segment.
"""
from shared.errors import ValidationError
from shared.http import api_handler
from shared.utils import format_response, get_path_param, parse_body

ACTIONS = ('approve', 'reject')


def get_action(event: dict) -> str:
    action = get_path_param(event, 'action')
    if not action:
        action = (event.get('path') or event.get('resource') or '').rstrip('/').rsplit('/', 1)[-1]
    if action not in ACTIONS:
        raise ValidationError('Invalid action. Must be "approve" or "reject"', field='action')
    return action


@api_handler()
def handler(event, identity, services):
    submission_id = get_path_param(event, 'submissionId')
    action = get_action(event)

    if action == 'approve':
        submission = services.submissions.approve(identity, submission_id)
        points = submission.get('pointsAwarded', 0)
        return format_response(200, {
            'success': True,
            'message': f'Submission approved successfully. {points} points added to user.',
            'submission': submission
        })

    body = parse_body(event)
    submission = services.submissions.reject(identity, submission_id, body.get('declineReason'))
    return format_response(200, submission)
