"""
Shop catalog and the two-phase redemption flow.

Redemption happens around an external fulfillment form:
    quote   - check affordability and hand out the form link, no debit
    confirm - re-check and debit the item's cost
    cancel  - acknowledge; nothing was debited at quote time

confirm is not idempotent: each call debits again while the balance covers it.
"""
from typing import Any, Dict, List, Optional

from .auth import Identity, require_admin
from .errors import Forbidden, InsufficientBalance, NotFound, ValidationError
from .ledger import UserLedger
from .logging import logger
from .models import new_id, timestamp, to_int
from .repository import Repository
from .utils import parse_non_negative_int


class Shop:

    def __init__(self, repository: Repository, ledger: UserLedger):
        self.repository = repository
        self.ledger = ledger

    def list_items(self) -> List[Dict[str, Any]]:
        items = self.repository.list_shop_items()
        items.sort(key=lambda i: (to_int(i.get('cost')), i.get('name', '')))
        return items

    def get_item(self, item_id: str) -> Dict[str, Any]:
        if not item_id:
            raise ValidationError('Missing itemId', field='itemId')
        item = self.repository.get_shop_item(item_id)
        if item is None:
            raise NotFound('Shop item', item_id)
        return item

    def create_item(
        self,
        identity: Identity,
        name: str,
        description: str,
        cost: Any,
        google_form_link: Optional[str] = None
    ) -> Dict[str, Any]:
        require_admin(identity, 'Forbidden: Admin access required')
        if not str(name or '').strip() or not str(description or '').strip() or cost is None or cost == '':
            raise ValidationError('Name, description, and cost are required')

        item = {
            'itemId': new_id(),
            'name': str(name).strip(),
            'description': str(description).strip(),
            'cost': parse_non_negative_int(cost, 'cost'),
            'googleFormLink': google_form_link or '',
            'createdAt': timestamp()
        }
        self.repository.put_shop_item(item)
        logger.info(f"Admin {identity.user_id} added shop item {item['itemId']} ({item['name']}) for {item['cost']} tokens")
        return item

    def delete_item(self, identity: Identity, item_id: str) -> None:
        require_admin(identity, 'Forbidden: Admin access required')
        self.get_item(item_id)
        self.repository.delete_shop_item(item_id)
        logger.info(f"Admin {identity.user_id} deleted shop item {item_id}")

    def quote(self, identity: Identity, item_id: str) -> Dict[str, Any]:
        """
        First phase of a redemption.

        Returns:
            The item with its fulfillment form link; balances are unchanged

        Raises:
            Forbidden for admins, NotFound for an unknown item,
            InsufficientBalance if the caller cannot afford it
        """
        if identity.is_admin:
            raise Forbidden('Admins cannot redeem shop items')
        item = self.get_item(item_id)
        user = self.ledger.get(identity.user_id)

        cost = to_int(item.get('cost'))
        balance = to_int(user.get('tokens'))
        if balance < cost:
            logger.warning(f"User {identity.user_id} cannot afford item {item_id}: {balance} < {cost}")
            raise InsufficientBalance(balance, cost)

        logger.info(f"User {identity.user_id} quoted item {item_id} for {cost} tokens (balance {balance})")
        return {
            'itemId': item['itemId'],
            'name': item.get('name'),
            'description': item.get('description'),
            'tokenCost': cost,
            'googleFormLink': item.get('googleFormLink') or ''
        }

    def confirm(self, identity: Identity, item_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Second phase: debit the item's cost from the redeeming user."""
        target = self._redeeming_user(identity, user_id, 'confirm')
        item = self.get_item(item_id)
        cost = to_int(item.get('cost'))

        user = self.ledger.debit(target, cost)
        remaining = to_int(user.get('tokens'))
        logger.info(f"User {target} confirmed redemption of {item.get('name')} for {cost} tokens, {remaining} left")
        return {'success': True, 'remainingTokens': remaining}

    def cancel(self, identity: Identity, item_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        if not item_id:
            raise ValidationError('Missing itemId', field='itemId')
        target = self._redeeming_user(identity, user_id, 'cancel')
        logger.info(f"User {target} canceled redemption for item {item_id}")
        return {'success': True, 'message': 'Redemption canceled successfully'}

    def _redeeming_user(self, identity: Identity, user_id: Optional[str], action: str) -> str:
        """Resolve whose redemption this is; admins may act for any user."""
        target = user_id or identity.user_id
        if not identity.is_admin and target != identity.user_id:
            raise Forbidden(f"You can only {action} your own redemptions")
        self.ledger.get(target)
        return target
