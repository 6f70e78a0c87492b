"""
Create Task Handler.
POST /tasks
Body: { "title": "...", "description": "...", "points": 10 }
"""
from shared.http import api_handler
from shared.utils import format_response, parse_body


@api_handler()
def handler(event, identity, services):
    body = parse_body(event)
    task = services.tasks.create(
        identity,
        title=body.get('title'),
        description=body.get('description'),
        points=body.get('points')
    )
    return format_response(201, task)
