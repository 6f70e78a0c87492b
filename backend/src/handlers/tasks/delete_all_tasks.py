"""
Delete All Tasks Handler.
DELETE /tasks/all
"""
from shared.http import api_handler
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    result = services.tasks.delete_all(identity)
    return format_response(200, {
        'message': 'All tasks and submissions deleted',
        **result
    })
