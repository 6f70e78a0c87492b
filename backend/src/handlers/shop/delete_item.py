"""
Delete Shop Item Handler (admin).
DELETE /shop/{itemId}
"""
from shared.http import api_handler
from shared.utils import format_response, get_path_param


@api_handler()
def handler(event, identity, services):
    item_id = get_path_param(event, 'itemId')
    services.shop.delete_item(identity, item_id)
    return format_response(200, {'message': f'Shop item {item_id} deleted'})
