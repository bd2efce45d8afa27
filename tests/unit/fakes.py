"""In-memory repository fakes conforming to the repository Protocols.

All fakes write into one FakeStore. FakeSession.commit() checkpoints the
store and rollback() restores the last checkpoint, which is enough to check
that a failed operation leaves no partial debit, wager or snapshot behind.
"""

import copy
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

from jose import jwt

from config.settings import settings
from src.wg_common.enums import LedgerCategory, MatchStatus, WagerStatus
from src.wg_ledger.domain.models import Account, LedgerEntry
from src.wg_match.domain.models import Competitor, Match
from src.wg_pricing.domain.models import PriceSnapshot
from src.wg_wagering.domain.models import MatchBook, Wager, WagerStats

STARTING_BALANCE = 10_000


@dataclass
class StoreState:
    accounts: dict[str, Account] = field(default_factory=dict)
    entries: list[LedgerEntry] = field(default_factory=list)
    competitors: dict[str, Competitor] = field(default_factory=dict)
    matches: dict[str, Match] = field(default_factory=dict)
    snapshots: list[PriceSnapshot] = field(default_factory=list)
    wagers: dict[str, Wager] = field(default_factory=dict)


class FakeStore:
    def __init__(self) -> None:
        self.state = StoreState()
        self._committed = copy.deepcopy(self.state)

    def checkpoint(self) -> None:
        self._committed = copy.deepcopy(self.state)

    def restore(self) -> None:
        self.state = copy.deepcopy(self._committed)


class FakeSession:
    """Stands in for AsyncSession: only commit/rollback are ever called on it."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1
        self._store.checkpoint()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self._store.restore()


class FakeLedgerRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def get_account(self, db, account_id, for_update=False):  # type: ignore[no-untyped-def]
        account = self._store.state.accounts.get(account_id)
        return replace(account) if account else None

    async def create_account_if_absent(self, db, account_id, starting_balance):  # type: ignore[no-untyped-def]
        accounts = self._store.state.accounts
        if account_id not in accounts:
            now = datetime.now(UTC)
            accounts[account_id] = Account(account_id, starting_balance, 0, now, now)
        return replace(accounts[account_id])

    async def apply_delta(self, db, account_id, amount, category, description, wager_id):  # type: ignore[no-untyped-def]
        account = self._store.state.accounts.get(account_id)
        if account is None or account.balance + amount < 0:
            return None
        before = account.balance
        account.balance += amount
        account.version += 1
        entry = LedgerEntry(
            id=len(self._store.state.entries) + 1,
            account_id=account_id,
            category=category,
            amount=amount,
            balance_before=before,
            balance_after=account.balance,
            wager_id=wager_id,
            description=description,
            created_at=datetime.now(UTC),
        )
        self._store.state.entries.append(entry)
        return entry

    async def list_entries(self, db, account_id, cursor_id, limit, category):  # type: ignore[no-untyped-def]
        rows = [
            e for e in reversed(self._store.state.entries)
            if e.account_id == account_id
            and (category is None or e.category == category)
            and (cursor_id is None or e.id < cursor_id)
        ]
        return rows[:limit]

    async def entry_totals(self, db, account_id):  # type: ignore[no-untyped-def]
        rows = [e for e in self._store.state.entries if e.account_id == account_id]
        return sum(e.amount for e in rows), (rows[-1].balance_after if rows else None)


class FakePriceRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def _lane(self, match_id: str, market_type: str) -> list[PriceSnapshot]:
        return [
            s for s in self._store.state.snapshots
            if s.match_id == match_id and s.market_type == market_type
        ]

    async def latest_snapshot(self, db, match_id, market_type):  # type: ignore[no-untyped-def]
        lane = self._lane(match_id, market_type)
        return lane[-1] if lane else None

    async def insert_snapshot(self, db, match_id, market_type, price_a, price_b, volume_a, volume_b):  # type: ignore[no-untyped-def]
        snapshot = PriceSnapshot(
            id=len(self._store.state.snapshots) + 1,
            match_id=match_id,
            market_type=market_type,
            price_a=price_a,
            price_b=price_b,
            volume_a=volume_a,
            volume_b=volume_b,
            created_at=datetime.now(UTC),
        )
        self._store.state.snapshots.append(snapshot)
        return snapshot

    async def list_snapshots(self, db, match_id, market_type, limit):  # type: ignore[no-untyped-def]
        return self._lane(match_id, market_type)[-limit:]


class FakeMatchRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.locked: list[str] = []  # match ids read FOR UPDATE

    async def get_match(self, db, match_id, for_update=False):  # type: ignore[no-untyped-def]
        if for_update:
            self.locked.append(match_id)
        match = self._store.state.matches.get(match_id)
        return replace(match) if match else None

    async def get_competitor(self, db, competitor_id, for_update=False):  # type: ignore[no-untyped-def]
        competitor = self._store.state.competitors.get(competitor_id)
        return replace(competitor) if competitor else None

    async def save_match_state(self, db, match):  # type: ignore[no-untyped-def]
        self._store.state.matches[match.id] = replace(match)
        return replace(match)

    async def claim_rating_update(self, db, match_id):  # type: ignore[no-untyped-def]
        match = self._store.state.matches[match_id]
        if match.ratings_applied:
            return False
        match.ratings_applied = True
        return True

    async def save_competitor_result(self, db, competitor_id, rating, won):  # type: ignore[no-untyped-def]
        competitor = self._store.state.competitors[competitor_id]
        competitor.rating = rating
        competitor.wins += 1 if won else 0
        competitor.losses += 0 if won else 1
        competitor.total_matches += 1
        return replace(competitor)


class FakeWagerRepository:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    async def insert(self, db, wager):  # type: ignore[no-untyped-def]
        stored = replace(wager, placed_at=datetime.now(UTC))
        self._store.state.wagers[wager.id] = stored
        return replace(stored)

    async def get(self, db, wager_id, for_update=False):  # type: ignore[no-untyped-def]
        wager = self._store.state.wagers.get(wager_id)
        return replace(wager) if wager else None

    async def list_pending_for_match(self, db, match_id):  # type: ignore[no-untyped-def]
        return [
            replace(w) for w in self._store.state.wagers.values()
            if w.match_id == match_id and w.status == WagerStatus.PENDING
        ]

    async def transition_from_pending(self, db, wager_id, status, actual_payout, settled_at):  # type: ignore[no-untyped-def]
        wager = self._store.state.wagers.get(wager_id)
        if wager is None or wager.status != WagerStatus.PENDING:
            return None
        wager.status = status
        wager.actual_payout = actual_payout
        wager.settled_at = settled_at
        return replace(wager)

    async def list_for_account(self, db, account_id, status, cursor_id, limit):  # type: ignore[no-untyped-def]
        rows = sorted(
            (
                w for w in self._store.state.wagers.values()
                if w.account_id == account_id
                and (status is None or w.status == status)
                and (cursor_id is None or int(w.id) < int(cursor_id))
            ),
            key=lambda w: int(w.id),
            reverse=True,
        )
        return [replace(w) for w in rows[:limit]]

    async def account_stats(self, db, account_id):  # type: ignore[no-untyped-def]
        rows = [w for w in self._store.state.wagers.values() if w.account_id == account_id]

        def count(status: WagerStatus) -> int:
            return sum(1 for w in rows if w.status == status)

        return WagerStats(
            total=len(rows),
            pending=count(WagerStatus.PENDING),
            won=count(WagerStatus.WON),
            lost=count(WagerStatus.LOST),
            cancelled=count(WagerStatus.CANCELLED),
            total_wagered=sum(w.stake for w in rows if w.status != WagerStatus.CANCELLED),
            settled_wagered=sum(
                w.stake for w in rows if w.status in (WagerStatus.WON, WagerStatus.LOST)
            ),
            total_returned=sum(w.actual_payout or 0 for w in rows if w.status == WagerStatus.WON),
        )

    async def match_book(self, db, match_id):  # type: ignore[no-untyped-def]
        rows = [w for w in self._store.state.wagers.values() if w.match_id == match_id]
        ids = {w.id for w in rows}
        entries = [e for e in self._store.state.entries if e.wager_id in ids]

        def total(category: LedgerCategory) -> int:
            return sum(e.amount for e in entries if e.category == category)

        return MatchBook(
            match_id=match_id,
            pending=sum(1 for w in rows if w.status == WagerStatus.PENDING),
            won=sum(1 for w in rows if w.status == WagerStatus.WON),
            lost=sum(1 for w in rows if w.status == WagerStatus.LOST),
            cancelled=sum(1 for w in rows if w.status == WagerStatus.CANCELLED),
            staked=-total(LedgerCategory.WAGER_PLACED),
            paid_out=total(LedgerCategory.WAGER_WON),
            refunded=total(LedgerCategory.WAGER_REFUNDED),
        )

    async def pending_liability(self, db, match_id, market_type, side):  # type: ignore[no-untyped-def]
        return sum(
            w.potential_payout for w in self._store.state.wagers.values()
            if w.match_id == match_id and w.market_type == market_type
            and w.side == side and w.status == WagerStatus.PENDING
        )



def seed_match(
    store: FakeStore,
    match_id: str = "m1",
    rating_a: int = 1000,
    rating_b: int = 1000,
    status: MatchStatus = MatchStatus.SCHEDULED,
    wagering_open: bool = True,
) -> Match:
    """Put two competitors and a match into the store as committed state."""
    a, b = f"{match_id}-a", f"{match_id}-b"
    store.state.competitors[a] = Competitor(id=a, name=f"Player {a}", rating=rating_a)
    store.state.competitors[b] = Competitor(id=b, name=f"Player {b}", rating=rating_b)
    match = Match(
        id=match_id,
        competitor_a_id=a,
        competitor_b_id=b,
        status=status.value,
        wagering_open=wagering_open,
    )
    store.state.matches[match_id] = match
    store.checkpoint()
    return replace(match)


def seed_account(store: FakeStore, account_id: str, balance: int) -> None:
    now = datetime.now(UTC)
    store.state.accounts[account_id] = Account(account_id, balance, 0, now, now)
    store.checkpoint()


def finish_match(store: FakeStore, match_id: str, winner_id: str) -> None:
    """Mark a match COMPLETED with a winner, as the admin flow would."""
    match = store.state.matches[match_id]
    match.status = MatchStatus.COMPLETED.value
    match.wagering_open = False
    match.winner_id = winner_id
    store.checkpoint()


def make_token(sub: str | None = "acct-1", secret: str | None = None, **claims: object) -> str:
    """Mint a bearer token the way the identity provider would."""
    payload: dict[str, object] = {"exp": datetime.now(UTC) + timedelta(minutes=5), **claims}
    if sub is not None:
        payload["sub"] = sub
    return str(jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))
