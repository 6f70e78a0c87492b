"""
Recompute every user's points from their approved submissions.

Usage: python scripts/recalculate_points.py
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.app import close_services, get_services  # noqa: E402
from shared.logging import logger  # noqa: E402


def recalculate_all(ledger) -> dict:
    """Returns {userId: points} for every user processed."""
    totals = {}
    for user in ledger.repository.list_users():
        totals[user['userId']] = ledger.recalculate_points(user['userId'])
    logger.info(f"Points recalculation completed for {len(totals)} users")
    return totals


def main() -> int:
    try:
        recalculate_all(get_services().ledger)
        return 0
    except Exception:
        logger.exception('Error recalculating points')
        return 1
    finally:
        close_services()


if __name__ == '__main__':
    sys.exit(main())
