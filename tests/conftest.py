"""Pytest configuration: in-memory databases and a controllable bill record store."""

import asyncio
import os
from datetime import date
from decimal import Decimal

# Set test database URL BEFORE any imports from rentbill
# This ensures the module-level engine never touches a file database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rentbill.api.app import app  # noqa: E402
from rentbill.models import Base  # noqa: E402
from rentbill.schemas.bills import (  # noqa: E402
    BillWithDetails,
    PreviousReadings,
    SaveBillRequest,
    SaveBillResult,
)
from rentbill.services import get_async_session  # noqa: E402
from rentbill.services.bill_cache import BillCache  # noqa: E402
from rentbill.services.bill_fetch_service import BillFetchService  # noqa: E402
from rentbill.services.bill_save_service import BillSaveService  # noqa: E402
from rentbill.services.bill_snapshot import BillSnapshot, build_save_request  # noqa: E402
from rentbill.services.bill_store import BillRecordStore  # noqa: E402
from rentbill.services.bill_view import BillView  # noqa: E402
from rentbill.services.errors import BillReadError, BillWriteError  # noqa: E402
from rentbill.services.periods import PeriodKey  # noqa: E402

TODAY = date(2025, 3, 15)
RENTER_ID = 7
MONTHLY_RENT = Decimal("9000")
MARCH = PeriodKey(RENTER_ID, 3, 2025)


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBillStore(BillRecordStore):
    """In-memory bill record store whose calls can be held open or made to fail."""

    def __init__(self):
        self.bills: dict[PeriodKey, SaveBillRequest] = {}
        self.read_calls: list[PeriodKey] = []
        self.save_calls: list[SaveBillRequest] = []
        self.failing_reads: set[PeriodKey] = set()
        self.fail_saves = False
        self.held_reads: dict[PeriodKey, asyncio.Event] = {}
        self.save_gate: asyncio.Event | None = None
        self._next_id = 100

    def seed(self, key: PeriodKey, snapshot: BillSnapshot) -> SaveBillResult:
        """Store a period directly, as if saved earlier."""
        return self._store(build_save_request(key, snapshot, TODAY))

    def hold(self, key: PeriodKey) -> asyncio.Event:
        """Block reads of key until the returned event is set."""
        event = asyncio.Event()
        self.held_reads[key] = event
        return event

    def reads_of(self, key: PeriodKey) -> int:
        return self.read_calls.count(key)

    async def read_period(self, renter_id: int, month: int, year: int) -> BillWithDetails:
        key = PeriodKey(renter_id, month, year)
        self.read_calls.append(key)
        gate = self.held_reads.get(key)
        if gate is not None:
            await gate.wait()
        if key in self.failing_reads:
            raise BillReadError(f"Failed to fetch bill details for {key}")
        return self._details(key)

    async def read_all_periods(self, renter_id: int) -> list[BillWithDetails]:
        keys = sorted(
            (key for key in self.bills if key.renter_id == renter_id),
            key=lambda k: (k.year, k.month),
            reverse=True,
        )
        return [self._details(key, with_previous=False) for key in keys]

    async def save_period(self, request: SaveBillRequest) -> SaveBillResult:
        self.save_calls.append(request)
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.fail_saves:
            raise BillWriteError("Failed to save bill")
        return self._store(request)

    def _store(self, request: SaveBillRequest) -> SaveBillResult:
        key = PeriodKey(request.bill.renter_id, request.bill.month, request.bill.year)
        existing = self.bills.get(key)
        bill_id = existing.bill.id if existing else self._new_id()
        stored = SaveBillRequest(
            bill=request.bill.model_copy(update={"id": bill_id}),
            expenses=[e.model_copy(update={"id": self._new_id()}) for e in request.expenses],
            payments=[p.model_copy(update={"id": self._new_id()}) for p in request.payments],
        )
        self.bills[key] = stored
        return SaveBillResult(
            bill_id=bill_id,
            expense_ids=[e.id for e in stored.expenses],
            payment_ids=[p.id for p in stored.payments],
        )

    def _details(self, key: PeriodKey, with_previous: bool = True) -> BillWithDetails:
        previous_readings = PreviousReadings()
        previous = self.bills.get(key.previous()) if with_previous else None
        if previous is not None:
            previous_readings = PreviousReadings(
                electricity_final=previous.bill.electricity_final_reading,
                motor_final=previous.bill.motor_final_reading,
            )
        stored = self.bills.get(key)
        if stored is None:
            return BillWithDetails(previous_readings=previous_readings)
        return BillWithDetails(
            bill=stored.bill,
            expenses=stored.expenses,
            payments=stored.payments,
            previous_readings=previous_readings,
        )

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeBillStore()


@pytest.fixture
def cache(clock):
    return BillCache(ttl_seconds=900, clock=clock)


@pytest.fixture
def view():
    return BillView(RENTER_ID, MONTHLY_RENT)


@pytest.fixture
async def fetcher(store, cache, view):
    service = BillFetchService(store, cache, view, today=lambda: TODAY)
    yield service
    service.cancel_background()


@pytest.fixture
def saver(store, cache, view, fetcher):
    return BillSaveService(store, cache, view, fetcher, today=lambda: TODAY)


@pytest.fixture
async def db_engine():
    """Fresh in-memory database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_db_session(db_engine):
    """Create async test database session."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def api_client(db_engine):
    """httpx client bound to the FastAPI app and the test database."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
