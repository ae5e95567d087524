"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator, List, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from societal_debt.api.main import create_app
from societal_debt.infrastructure.database.models import Base
from societal_debt.infrastructure.database.session import get_db
from societal_debt.domain.models import PracticeAssignment, Polarity, Remediation, Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def sample_classified() -> List[Tuple[Transaction, List[PracticeAssignment]]]:
    """Classified purchases covering unethical, ethical, mixed and unclassified cases"""
    return [
        (
            Transaction("tx_burger", date(2025, 3, 1), "Burger Barn", 100.0),
            [
                PracticeAssignment(
                    "Factory Farming",
                    Polarity.UNETHICAL,
                    50,
                    category="Animal Welfare",
                    description="Sources from industrial feedlots",
                    remediation=Remediation("The Humane League", "https://thehumaneleague.org"),
                ),
            ],
        ),
        (
            Transaction("tx_coffee", date(2025, 3, 2), "Equal Exchange", 50.0),
            [
                PracticeAssignment(
                    "Fair Trade",
                    Polarity.ETHICAL,
                    20,
                    category="Poverty",
                    description="Certified fair trade beans",
                    remediation=Remediation("Fair Trade", note="Keep it up"),
                ),
            ],
        ),
        (
            Transaction("tx_power", date(2025, 3, 3), "City Power", 80.0),
            [
                PracticeAssignment("High Emissions", Polarity.UNETHICAL, 40, category="Climate Change"),
                PracticeAssignment("Clean Energy", Polarity.ETHICAL, 10, category="Climate Change"),
            ],
        ),
        (
            Transaction("tx_books", date(2025, 3, 4), "Corner Books", 30.0),
            [],
        ),
    ]
