"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from market_gateway.api.main import create_app
from market_gateway.domain.models import CompleteTransactionCommand, CreateTransactionCommand, PaymentMethod
from market_gateway.infrastructure.database.models import Base, VehicleRecord
from market_gateway.infrastructure.database.session import build_engine, get_db
from market_gateway.services.transactions import TransactionService
from market_gateway.services.vehicles import VehicleService


SELLER = "seller-1"
BUYER = "buyer-1"
STRANGER = "stranger-1"

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
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
def service(db: Session) -> TransactionService:
    return TransactionService(db)


@pytest.fixture
def make_vehicle(db: Session) -> Callable[..., VehicleRecord]:
    """Factory for active vehicles owned by SELLER unless told otherwise"""

    def _make(owner_id: str = SELLER, status: str = "active", **listing) -> VehicleRecord:
        vehicles = VehicleService(db)
        fields = dict(make="Toyota", model="Corolla", year=2019, price=Decimal("25000"), mileage=Decimal("42000"))
        fields.update(listing)
        vehicle = vehicles.register_vehicle(owner_id=owner_id, **fields)
        if status == "archived":
            vehicle = vehicles.archive_vehicle(str(vehicle.id), owner_id)
        elif status == "sold":
            # Sold only happens through a completed sale
            sale = CreateTransactionCommand(
                vehicle_id=str(vehicle.id),
                buyer_id=STRANGER if owner_id != STRANGER else BUYER,
                amount=fields["price"],
                currency="USD",
                payment_method=PaymentMethod.CASH,
            )
            sales = TransactionService(db)
            txn = sales.create_transaction(sale, owner_id)
            sales.complete_transaction(str(txn.id), CompleteTransactionCommand("SOLD-FIXTURE"), owner_id)
            db.refresh(vehicle)
        return vehicle

    return _make


@pytest.fixture
def cash_sale() -> Callable[..., CreateTransactionCommand]:
    """Command for a 25000 USD cash sale of the given vehicle to BUYER"""

    def _command(vehicle: VehicleRecord, **overrides) -> CreateTransactionCommand:
        fields = dict(
            vehicle_id=str(vehicle.id),
            buyer_id=BUYER,
            amount=Decimal("25000"),
            currency="USD",
            payment_method=PaymentMethod.CASH,
        )
        fields.update(overrides)
        return CreateTransactionCommand(**fields)

    return _command
