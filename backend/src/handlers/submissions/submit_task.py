"""
Submit Task Handler.
POST /tasks/{taskId}/submit
Body: { "mediaUrl": "https://..." }   (optional)

Creates a pending submission, or moves a rejected one back to pending.
"""
from shared.http import api_handler
from shared.utils import format_response, get_path_param, parse_body


@api_handler()
def handler(event, identity, services):
    task_id = get_path_param(event, 'taskId')
    body = parse_body(event)
    submission = services.submissions.submit(identity, task_id, media_url=body.get('mediaUrl'))
    return format_response(200, submission)
