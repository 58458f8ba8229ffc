"""Vehicle listing operations used by the marketplace API"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from market_gateway.config import settings
from market_gateway.domain.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from market_gateway.domain.models import (
    VEHICLE_SORT_FIELDS,
    UpdateVehicleCommand,
    VehicleFilters,
    VehicleStatus,
)
from market_gateway.infrastructure.database.models import VehicleRecord
from market_gateway.infrastructure.database.repositories import VehicleRepository
from market_gateway.infrastructure.database.session import unit_of_work
from market_gateway.services.transactions import parse_id, utcnow


def validate_listing(year: Optional[int], price: Optional[Decimal], mileage: Optional[Decimal]) -> None:
    if year is not None and not 1900 <= year <= 2100:
        raise ValidationFailedError("year must be between 1900 and 2100")
    if price is not None and price < 0:
        raise ValidationFailedError("price must be non-negative")
    if mileage is not None and mileage < 0:
        raise ValidationFailedError("mileage must be non-negative")


class VehicleService:
    """Register, edit, archive and search vehicle listings"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.vehicles = VehicleRepository(db)
        self.clock = clock

    def register_vehicle(
        self,
        owner_id: str,
        make: str,
        model: str,
        year: int,
        price: Decimal,
        mileage: Decimal = Decimal(0),
    ) -> VehicleRecord:
        """List a vehicle for sale; new listings start active"""
        validate_listing(year, price, mileage)

        with unit_of_work(self.db):
            vehicle = self.vehicles.create_vehicle(owner_id, make, model, year, price, mileage, self.clock())
        return vehicle

    def get_vehicle(self, vehicle_id: str) -> VehicleRecord:
        vehicle = self.vehicles.get_by_id(parse_id(vehicle_id, "vehicle ID"))
        if vehicle is None:
            raise NotFoundError("vehicle not found")
        return vehicle

    def update_vehicle(self, vehicle_id: str, command: UpdateVehicleCommand, owner_id: str) -> VehicleRecord:
        """
        Apply the owner's edits.

        Status may move between active and archived. A vehicle becomes sold
        only by completing a sale, never through an edit.
        """
        validate_listing(command.year, command.price, command.mileage)
        if command.status == VehicleStatus.SOLD:
            raise InvalidStateError("vehicles are marked sold only by completing a sale")

        vehicle = self._owned_vehicle(vehicle_id, owner_id)
        with unit_of_work(self.db):
            for field in ("make", "model", "year", "price", "mileage"):
                value = getattr(command, field)
                if value is not None:
                    setattr(vehicle, field, value)
            if command.status is not None:
                vehicle.status = command.status.value
            vehicle.updated_at = self.clock()
        return vehicle

    def archive_vehicle(self, vehicle_id: str, owner_id: str) -> VehicleRecord:
        """Soft delete: the listing stays stored but is no longer for sale"""
        return self.update_vehicle(vehicle_id, UpdateVehicleCommand(status=VehicleStatus.ARCHIVED), owner_id)

    def list_by_owner(self, owner_id: str) -> List[VehicleRecord]:
        return self.vehicles.get_by_owner(owner_id)

    def list_vehicles(
        self,
        filters: VehicleFilters,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[VehicleRecord], int, int, int]:
        """Returns (items, total_count, page, limit); limit is capped at max_page_size"""
        if filters.sort_by not in VEHICLE_SORT_FIELDS:
            raise ValidationFailedError(f"sortBy must be one of {', '.join(VEHICLE_SORT_FIELDS)}")
        if filters.sort_order not in ("asc", "desc"):
            raise ValidationFailedError("sortOrder must be asc or desc")

        if page < 1:
            page = 1
        if limit < 1:
            limit = 10
        limit = min(limit, settings.max_page_size)

        items, total = self.vehicles.list_vehicles(filters, (page - 1) * limit, limit)
        return items, total, page, limit

    def _owned_vehicle(self, vehicle_id: str, owner_id: str) -> VehicleRecord:
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle.owner_id != owner_id:
            raise ForbiddenError("you are not the owner of this vehicle")
        return vehicle
