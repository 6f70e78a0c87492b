"""
List User Submissions Handler.
GET /tasks/submissions/user
"""
from shared.http import api_handler
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    return format_response(200, services.submissions.list_for_user(identity))
