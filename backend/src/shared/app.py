"""
Service wiring.

The storage handle is opened once per Lambda container (on the first
request) and passed into every service. close_services() releases it;
tests install their own services with set_services().
"""
from typing import Optional

from .config import Config, config
from .dynamo import DynamoRepository
from .leaderboard import Leaderboard
from .ledger import UserLedger
from .logging import logger
from .repository import Repository
from .shared_tokens import SharedTokens
from .shop import Shop
from .submissions import SubmissionTracker
from .tasks import TaskCatalog


class Services:
    """All services built over one repository."""

    def __init__(self, repository: Repository):
        self.repository = repository
        self.ledger = UserLedger(repository)
        self.tasks = TaskCatalog(repository, self.ledger)
        self.submissions = SubmissionTracker(repository, self.ledger)
        self.shop = Shop(repository, self.ledger)
        self.leaderboard = Leaderboard(self.ledger)
        self.shared_tokens = SharedTokens(repository)

    def close(self) -> None:
        self.repository.close()


_services: Optional[Services] = None


def open_services(cfg: Config = config) -> Services:
    """Build services over a fresh DynamoDB repository."""
    logger.info(f"Opening DynamoDB repository in {cfg.AWS_REGION}")
    return Services(DynamoRepository(cfg=cfg))


def get_services() -> Services:
    global _services
    if _services is None:
        _services = open_services()
    return _services


def set_services(services: Optional[Services]) -> None:
    global _services
    _services = services


def close_services() -> None:
    global _services
    if _services is not None:
        _services.close()
        _services = None
