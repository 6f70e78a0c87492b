"""
Replace the shop catalog with the default reward items.

Usage: python scripts/seed_shop.py
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.app import close_services, get_services  # noqa: E402
from shared.logging import logger  # noqa: E402
from shared.models import new_id, timestamp  # noqa: E402

DEFAULT_ITEMS = [
    {'name': 'Reward 1', 'description': 'A cool reward', 'cost': 10,
     'googleFormLink': 'https://forms.gle/yL5TgcVEwu2rezTs7'},
    {'name': 'Reward 2', 'description': 'An awesome reward', 'cost': 20,
     'googleFormLink': 'https://forms.gle/yL5TgcVEwu2rezTs7'},
    {'name': 'Reward 3', 'description': 'A premium reward', 'cost': 50},
]


def seed_shop(repository, items=DEFAULT_ITEMS) -> int:
    """Delete every shop item and store the given ones. Returns the count written."""
    for existing in repository.list_shop_items():
        repository.delete_shop_item(existing['itemId'])
    logger.info('Cleared existing shop items')

    for data in items:
        repository.put_shop_item({
            'itemId': new_id(),
            'name': data['name'],
            'description': data['description'],
            'cost': data['cost'],
            'googleFormLink': data.get('googleFormLink', ''),
            'createdAt': timestamp()
        })
    logger.info(f"Added {len(items)} shop items")
    return len(items)


def main() -> int:
    try:
        seed_shop(get_services().repository)
        return 0
    except Exception:
        logger.exception('Error seeding shop')
        return 1
    finally:
        close_services()


if __name__ == '__main__':
    sys.exit(main())
