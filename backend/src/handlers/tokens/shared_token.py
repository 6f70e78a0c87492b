"""
Shared Token Handlers.

POST /token/generate   (admin)   Body: { "uid": "...", "daysValid": 30 }
POST /token/login      (public)  Body: { "token": "..." }
"""
from shared.http import api_handler
from shared.utils import format_response, parse_body


@api_handler()
def generate_handler(event, identity, services):
    body = parse_body(event)
    result = services.shared_tokens.generate(identity, body.get('uid'), body.get('daysValid'))
    return format_response(200, result)


@api_handler(authenticated=False)
def login_handler(event, services):
    body = parse_body(event)
    return format_response(200, services.shared_tokens.login(body.get('token')))
