"""
Redemption Handlers.

POST /shop/redeem           Body: { "itemId": "..." }
    Checks the caller can afford the item and returns its fulfillment form.
POST /shop/redeem/confirm   Body: { "itemId": "...", "userId": "..." }
    Debits the item's cost once the form has been filled in.
POST /shop/redeem/cancel    Body: { "itemId": "...", "userId": "..." }
    Acknowledges an abandoned redemption; no tokens move.
"""
from shared.http import api_handler
from shared.utils import format_response, parse_body


@api_handler()
def quote_handler(event, identity, services):
    body = parse_body(event)
    return format_response(200, services.shop.quote(identity, body.get('itemId')))


@api_handler()
def confirm_handler(event, identity, services):
    body = parse_body(event)
    result = services.shop.confirm(identity, body.get('itemId'), user_id=body.get('userId'))
    return format_response(200, result)


@api_handler()
def cancel_handler(event, identity, services):
    body = parse_body(event)
    result = services.shop.cancel(identity, body.get('itemId'), user_id=body.get('userId'))
    return format_response(200, result)
