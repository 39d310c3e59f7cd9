"""
Pytest configuration and shared fixtures for donation kernel tests.

Database selection:
    DATABASE_URL, when set, points the suite at a real PostgreSQL database.
    Otherwise every run gets a fresh SQLite file under pytest's temp dir.
    Tests marked ``postgres`` (real threads, real commits, advisory locks)
    are skipped on SQLite.

Isolation:
    Each test runs inside an outer connection-level transaction that is
    rolled back at teardown.  Services' own begin_nested() calls become
    nested SAVEPOINTs inside it.
"""

import json
import logging
import os
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from donation_kernel.db.base import Base
from donation_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from donation_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from donation_kernel.domain.clock import DeterministicClock
from donation_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from donation_kernel.models import (
    Campaign,
    Fundraiser,
    LedgerAccount,
    Mitra,
    NormalSide,
    PaymentStatus,
    QurbanPackage,
    QurbanPackagePeriod,
    Setting,
    Transaction,
    ZakatPeriod,
    ZakatType,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "postgres: mark test as requiring PostgreSQL"
    )
    config.addinivalue_line(
        "markers", "slow_locks: mark test as potentially waiting for DB locks"
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture donation_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, session):
            LedgerService(session).post_donation(...)
            logs = captured_logs()
            assert any(r["message"] == "ledger_entry_posted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("donation_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def db_url(tmp_path_factory):
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    db_file = tmp_path_factory.mktemp("db") / "donation_kernel_test.db"
    return f"sqlite:///{db_file}"


@pytest.fixture(scope="session")
def db_engine(db_url):
    """Initialize the module-level engine once per test session."""
    engine = init_engine_from_url(db_url, echo=False, pool_size=5, max_overflow=5)
    yield engine
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables and install the immutability listeners."""
    drop_tables()
    create_tables()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    drop_tables()


@pytest.fixture
def session(db_engine, db_tables):
    """
    Per-test session bound to a rolled-back outer transaction.

    Commits inside the test release SAVEPOINTs only; nothing a test writes
    survives it.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(
        bind=conn,
        join_transaction_mode="create_savepoint",
        expire_on_commit=False,
    )
    yield sess
    sess.close()
    if trans.is_active:
        trans.rollback()
    conn.close()


@pytest.fixture
def is_postgres_backend(db_engine) -> bool:
    return db_engine.dialect.name == "postgresql"


@pytest.fixture
def pg_session_factory(db_engine, db_tables):
    """
    Session factory for tests that commit for real from several threads.

    PostgreSQL only.  Every table is truncated after the test.
    """
    if db_engine.dialect.name != "postgresql":
        pytest.skip("requires PostgreSQL (set DATABASE_URL)")

    yield get_session_factory()

    table_names = ", ".join(table.name for table in reversed(Base.metadata.sorted_tables))
    with db_engine.begin() as conn:
        conn.execute(text(f"TRUNCATE {table_names} CASCADE"))


# ---------------------------------------------------------------------------
# Time and actors
# ---------------------------------------------------------------------------


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def test_actor_id():
    """A fixed actor for created_by columns."""
    return uuid4()


# ---------------------------------------------------------------------------
# Ledger accounts
# ---------------------------------------------------------------------------

DEFAULT_TEST_ACCOUNTS = (
    ("1010", "Kas", NormalSide.DEBIT, True),
    ("1020", "Bank Operasional", NormalSide.DEBIT, True),
    ("2010", "Titipan Dana Campaign", NormalSide.CREDIT, True),
    ("1099", "Bank Lama (ditutup)", NormalSide.DEBIT, False),
)


@pytest.fixture
def ledger_accounts(session) -> dict[str, LedgerAccount]:
    """The default chart of accounts plus one inactive account (1099)."""
    accounts = {}
    for code, name, side, active in DEFAULT_TEST_ACCOUNTS:
        account = LedgerAccount(
            code=code,
            name=name,
            normal_side=side.value,
            is_active=active,
        )
        session.add(account)
        accounts[code] = account
    session.flush()
    return accounts


# ---------------------------------------------------------------------------
# Partners, programs and transactions
# ---------------------------------------------------------------------------


@pytest.fixture
def make_mitra(session):
    """Factory: a mitra operated by a fresh (or given) user id."""

    def _make(name: str = "Mitra Amanah", user_id=None) -> Mitra:
        mitra = Mitra(name=name, user_id=user_id or uuid4())
        session.add(mitra)
        session.flush()
        return mitra

    return _make


@pytest.fixture
def make_fundraiser(session):
    def _make(code: str | None = None) -> Fundraiser:
        fundraiser = Fundraiser(code=code or f"FR-{uuid4().hex[:8].upper()}", user_id=uuid4())
        session.add(fundraiser)
        session.flush()
        return fundraiser

    return _make


@pytest.fixture
def make_campaign(session):
    def _make(pillar: str | None = None, mitra: Mitra | None = None, title: str = "Sumur Wakaf") -> Campaign:
        campaign = Campaign(
            title=title,
            pillar=pillar,
            mitra_id=mitra.id if mitra is not None else None,
        )
        session.add(campaign)
        session.flush()
        return campaign

    return _make


@pytest.fixture
def make_zakat_type(session):
    def _make(created_by_user_id=None, name: str = "Zakat Maal") -> ZakatType:
        zakat_type = ZakatType(name=name, created_by_user_id=created_by_user_id)
        session.add(zakat_type)
        session.flush()
        return zakat_type

    return _make


@pytest.fixture
def make_zakat_period(session):
    def _make(
        zakat_type: ZakatType | None = None,
        mitra: Mitra | None = None,
        name: str = "Ramadhan 1445",
    ) -> ZakatPeriod:
        period = ZakatPeriod(
            name=name,
            zakat_type_id=zakat_type.id if zakat_type is not None else None,
            mitra_id=mitra.id if mitra is not None else None,
        )
        session.add(period)
        session.flush()
        return period

    return _make


@pytest.fixture
def make_qurban_package_period(session):
    """Factory: a qurban package period whose package was created by ``created_by_user_id``."""

    def _make(created_by_user_id=None) -> QurbanPackagePeriod:
        package = QurbanPackage(name="Kambing A", created_by_user_id=created_by_user_id)
        session.add(package)
        session.flush()
        period = QurbanPackagePeriod(package_id=package.id)
        session.add(period)
        session.flush()
        return period

    return _make


@pytest.fixture
def make_transaction(session, deterministic_clock):
    """
    Factory: a transaction, paid unless told otherwise.

    product_id defaults to a random id that matches no catalog row.
    """

    def _make(
        product_type: str = "campaign",
        total_amount: int = 100_000,
        admin_fee: int = 0,
        product_id=None,
        payment_status: str = PaymentStatus.PAID.value,
        referred_by_fundraiser_id=None,
        type_specific_data: dict | None = None,
        product_name: str = "Program Test",
    ) -> Transaction:
        paid = payment_status == PaymentStatus.PAID.value
        tx = Transaction(
            transaction_number=f"TRX-{uuid4().hex[:12].upper()}",
            product_type=product_type,
            product_id=product_id or uuid4(),
            product_name=product_name,
            total_amount=total_amount,
            admin_fee=admin_fee,
            donor_name="Hamba Allah",
            payment_status=payment_status,
            paid_at=deterministic_clock.now() if paid else None,
            referred_by_fundraiser_id=referred_by_fundraiser_id,
            type_specific_data=type_specific_data,
        )
        session.add(tx)
        session.flush()
        return tx

    return _make


@pytest.fixture
def set_amil_settings(session):
    """
    Factory: write rows in the "amil" settings category.

    Usage::

        set_amil_settings(amil_donation_percentage="20", amil_developer_percentage="2")
    """

    def _set(**values) -> None:
        for key, value in values.items():
            session.add(Setting(category="amil", key=key, value=value))
        session.flush()

    return _set
