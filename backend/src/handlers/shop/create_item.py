"""
Create Shop Item Handler (admin).
POST /shop
Body: { "name": "...", "description": "...", "cost": 20, "googleFormLink": "https://forms.gle/..." }
"""
from shared.http import api_handler
from shared.utils import format_response, parse_body


@api_handler()
def handler(event, identity, services):
    body = parse_body(event)
    item = services.shop.create_item(
        identity,
        name=body.get('name'),
        description=body.get('description'),
        cost=body.get('cost'),
        google_form_link=body.get('googleFormLink')
    )
    return format_response(201, item)
