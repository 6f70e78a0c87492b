"""
List Tasks Handler.
GET /tasks
Admins get every task; users get the tasks they can still submit.
"""
from shared.http import api_handler
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    tasks = services.tasks.list_for(identity)
    return format_response(200, tasks)
