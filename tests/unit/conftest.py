"""Unit-test fixtures: services wired to the in-memory fakes in fakes.py."""

import os

os.environ.setdefault("JWT_SECRET", "unit-test-secret")

import pytest

from src.wg_ledger.application.service import LedgerService
from src.wg_match.application.service import MatchService
from src.wg_pricing.application.service import PriceService
from src.wg_realtime.infrastructure.memory_bus import InMemoryEventBus
from src.wg_settlement.application.service import SettlementService
from src.wg_wagering.application.service import WageringService
from tests.unit.fakes import (
    STARTING_BALANCE,
    FakeLedgerRepository,
    FakeMatchRepository,
    FakePriceRepository,
    FakeSession,
    FakeStore,
    FakeWagerRepository,
)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def db(store: FakeStore) -> FakeSession:
    return FakeSession(store)


@pytest.fixture
def ledger_repo(store: FakeStore) -> FakeLedgerRepository:
    return FakeLedgerRepository(store)


@pytest.fixture
def price_repo(store: FakeStore) -> FakePriceRepository:
    return FakePriceRepository(store)


@pytest.fixture
def match_repo(store: FakeStore) -> FakeMatchRepository:
    return FakeMatchRepository(store)


@pytest.fixture
def wager_repo(store: FakeStore) -> FakeWagerRepository:
    return FakeWagerRepository(store)


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def ledger(ledger_repo: FakeLedgerRepository) -> LedgerService:
    return LedgerService(repo=ledger_repo, starting_balance=STARTING_BALANCE)


@pytest.fixture
def prices(price_repo: FakePriceRepository, match_repo: FakeMatchRepository) -> PriceService:
    return PriceService(repo=price_repo, matches=match_repo)


@pytest.fixture
def wagering(
    bus: InMemoryEventBus,
    ledger: LedgerService,
    prices: PriceService,
    wager_repo: FakeWagerRepository,
    match_repo: FakeMatchRepository,
) -> WageringService:
    return WageringService(bus, ledger=ledger, prices=prices, wagers=wager_repo, matches=match_repo)


@pytest.fixture
def settlement(
    bus: InMemoryEventBus,
    ledger: LedgerService,
    wager_repo: FakeWagerRepository,
    match_repo: FakeMatchRepository,
) -> SettlementService:
    return SettlementService(bus, ledger=ledger, wagers=wager_repo, matches=match_repo)


@pytest.fixture
def match_service(match_repo: FakeMatchRepository) -> MatchService:
    return MatchService(repo=match_repo)

