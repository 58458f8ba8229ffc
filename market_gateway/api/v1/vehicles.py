"""/v1/vehicles - listing registration, editing and search"""

from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query

from market_gateway.api.v1.schemas import (
    TransactionListResponse,
    VehicleCreateRequest,
    VehicleListResponse,
    VehiclePageResponse,
    VehicleResponse,
    VehicleUpdateRequest,
)
from market_gateway.api.v1.transactions import to_list_response
from market_gateway.api.dependencies import get_current_user_id, get_transaction_service, get_vehicle_service
from market_gateway.domain.models import UpdateVehicleCommand, VehicleFilters, VehicleStatus
from market_gateway.infrastructure.database.models import VehicleRecord
from market_gateway.services.transactions import TransactionService
from market_gateway.services.vehicles import VehicleService

router = APIRouter()

# camelCase spellings accepted from existing clients
SORT_ALIASES = {"createdAt": "created_at"}


def to_response(vehicle: VehicleRecord) -> VehicleResponse:
    return VehicleResponse(
        id=str(vehicle.id),
        owner_id=vehicle.owner_id,
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        price=vehicle.price,
        mileage=vehicle.mileage,
        status=vehicle.status,
        created_at=vehicle.created_at,
        updated_at=vehicle.updated_at,
    )


@router.post("/vehicles", response_model=VehicleResponse, status_code=201)
def register_vehicle(
    request_body: VehicleCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    """List a vehicle owned by the caller; it starts active"""
    vehicle = service.register_vehicle(
        owner_id=user_id,
        make=request_body.make,
        model=request_body.model,
        year=request_body.year,
        price=request_body.price,
        mileage=request_body.mileage,
    )
    return to_response(vehicle)


@router.get("/vehicles", response_model=VehiclePageResponse)
def list_vehicles(
    make: Optional[str] = Query(None, description="Case-insensitive substring"),
    model: Optional[str] = Query(None, description="Case-insensitive substring"),
    status: Optional[VehicleStatus] = Query(None),
    min_price: Optional[Decimal] = Query(None),
    max_price: Optional[Decimal] = Query(None),
    min_year: Optional[int] = Query(None),
    max_year: Optional[int] = Query(None),
    sort_by: str = Query("created_at", description="price, year, mileage or created_at"),
    sort_order: str = Query("desc", description="asc or desc"),
    page: int = Query(1),
    limit: int = Query(10),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Search listings with filters, sorting and pagination"""
    filters = VehicleFilters(
        make=make,
        model=model,
        status=status,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        sort_by=SORT_ALIASES.get(sort_by, sort_by),
        sort_order=sort_order.lower(),
    )
    records, total, page, limit = service.list_vehicles(filters, page, limit)
    return VehiclePageResponse(
        vehicles=[to_response(v) for v in records],
        total_count=total,
        page=page,
        limit=limit,
        total_pages=(total + limit - 1) // limit,
    )


@router.get("/vehicles/mine", response_model=VehicleListResponse)
def list_my_vehicles(
    user_id: str = Depends(get_current_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    vehicles = [to_response(v) for v in service.list_by_owner(user_id)]
    return VehicleListResponse(vehicles=vehicles, count=len(vehicles))


@router.get("/vehicles/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(vehicle_id: str, service: VehicleService = Depends(get_vehicle_service)):
    return to_response(service.get_vehicle(vehicle_id))


@router.put("/vehicles/{vehicle_id}", response_model=VehicleResponse)
def update_vehicle(
    vehicle_id: str,
    request_body: VehicleUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Owner edits the listing; status may be set to active or archived"""
    command = UpdateVehicleCommand(
        make=request_body.make,
        model=request_body.model,
        year=request_body.year,
        price=request_body.price,
        mileage=request_body.mileage,
        status=request_body.status,
    )
    return to_response(service.update_vehicle(vehicle_id, command, user_id))


@router.delete("/vehicles/{vehicle_id}", response_model=VehicleResponse)
def archive_vehicle(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Soft delete: the vehicle is archived, its transactions are kept"""
    return to_response(service.archive_vehicle(vehicle_id, user_id))


@router.get("/vehicles/{vehicle_id}/transactions", response_model=TransactionListResponse)
def list_vehicle_transactions(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
):
    return to_list_response(service.list_for_vehicle(vehicle_id))
