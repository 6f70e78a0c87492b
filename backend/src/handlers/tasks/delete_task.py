"""
Delete Task Handler.
DELETE /tasks/{taskId}
Removes the task and its submissions, reversing credit from approvals.
"""
from shared.http import api_handler
from shared.utils import format_response, get_path_param


@api_handler()
def handler(event, identity, services):
    task_id = get_path_param(event, 'taskId')
    result = services.tasks.delete(identity, task_id)
    return format_response(200, {
        'message': f'Task {task_id} deleted successfully',
        **result
    })
