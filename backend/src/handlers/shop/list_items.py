"""
List Shop Items Handler.
GET /shop
"""
from shared.http import api_handler
from shared.utils import format_response


@api_handler()
def handler(event, identity, services):
    return format_response(200, services.shop.list_items())
