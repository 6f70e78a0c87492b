"""
List Pending Submissions Handler (admin).
GET /tasks/submissions/pending
"""
from shared.http import api_handler
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    return format_response(200, services.submissions.list_pending(identity))
