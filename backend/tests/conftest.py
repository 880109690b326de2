"""Shared test fixtures."""

import pytest
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import date
from decimal import Decimal

import finbot.main as main_module
from finbot.database import Base
from finbot.dependencies import get_db
from finbot.main import app
from finbot.models.bill import Bill
from finbot.models.category import Category, CategoryType
from finbot.models.savings_box import SavingsBox
from finbot.models.transaction import Transaction, TransactionSource, TransactionType
from finbot.exceptions import ParseError
from finbot.seed import seed_categories
from finbot.services.ai_service import TransactionParser
from finbot.services.pending_store import TransactionGuess


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh, seeded database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    seed_categories(session)

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session, monkeypatch):
    """Create a test client with database override; the lifespan touches no real resources."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    monkeypatch.setattr(main_module, "init_db", lambda: None)
    monkeypatch.setattr(main_module.settings, "telegram_enabled", False)

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory(db_session):
    """Stand-in for SessionLocal that hands out the test session without closing it."""
    @contextmanager
    def factory():
        yield db_session

    return factory


def get_seeded_category(db_session, name, category_type=CategoryType.expense):
    return db_session.query(Category).filter(
        Category.name == name,
        Category.type == category_type
    ).one()


@pytest.fixture
def food_category(db_session):
    return get_seeded_category(db_session, "Alimentacao")


@pytest.fixture
def salary_category(db_session):
    return get_seeded_category(db_session, "Salario", CategoryType.income)


@pytest.fixture
def bills_category(db_session):
    return get_seeded_category(db_session, "Contas")


@pytest.fixture
def sample_transaction(db_session, food_category):
    """Create a sample expense."""
    txn = Transaction(
        type=TransactionType.expense,
        amount=Decimal("150.00"),
        description="Mercado",
        category_id=food_category.id,
        date=date(2024, 1, 15),
        source=TransactionSource.manual,
    )
    db_session.add(txn)
    db_session.commit()
    db_session.refresh(txn)
    return txn


@pytest.fixture
def sample_savings_box(db_session):
    """Create an empty savings box with a goal."""
    box = SavingsBox(name="VIAGEM", goal_amount=Decimal("5000"), current_amount=Decimal("0"))
    db_session.add(box)
    db_session.commit()
    db_session.refresh(box)
    return box


@pytest.fixture
def sample_bill(db_session, bills_category):
    """Create an internet bill due on the 10th."""
    bill = Bill(
        name="INTERNET",
        amount=Decimal("99.90"),
        due_day=10,
        category_id=bills_category.id,
        is_recurring=True,
        reminder_days_before=1,
    )
    db_session.add(bill)
    db_session.commit()
    db_session.refresh(bill)
    return bill


class FakeParser(TransactionParser):
    """Deterministic parser: replies from a text -> guess table, ParseError otherwise."""

    def __init__(self, guesses=None, transcription=None, image_guess=None):
        self.guesses = guesses or {}
        self.transcription = transcription
        self.image_guess = image_guess
        self.calls = []

    async def parse_text(self, text):
        self.calls.append(("text", text))
        if text not in self.guesses:
            raise ParseError("not a transaction")
        return self.guesses[text]

    async def parse_image(self, image_bytes):
        self.calls.append(("image", len(image_bytes)))
        if self.image_guess is None:
            raise ParseError("no transaction in image")
        return self.image_guess

    async def transcribe(self, audio_bytes):
        self.calls.append(("audio", len(audio_bytes)))
        if self.transcription is None:
            raise ParseError("empty transcription")
        return self.transcription


@pytest.fixture
def market_guess():
    return TransactionGuess(
        type="expense",
        amount=150.0,
        category="Alimentacao",
        description="Mercado",
        date=date(2024, 1, 15),
        confidence=0.95,
    )


@pytest.fixture
def fake_parser(market_guess):
    return FakeParser(guesses={"gastei 150 no mercado": market_guess})


class RecordingSender:
    """Reminder sender that records deliveries and can fail for chosen bills."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)
        self._next_id = 100

    async def __call__(self, chat_id, text, bill_id):
        if bill_id in self.fail_for:
            raise RuntimeError("telegram unavailable")
        self._next_id += 1
        self.sent.append((chat_id, text, bill_id))
        return self._next_id


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def make_sender():
    return RecordingSender


@pytest.fixture
def make_parser():
    return FakeParser
