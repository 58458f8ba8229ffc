"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from market_gateway.infrastructure.database.session import get_db
from market_gateway.services.transactions import TransactionService
from market_gateway.services.vehicles import VehicleService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, already authenticated by the upstream gateway"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="unauthorized")
    return x_user_id.strip()


def get_transaction_service(request: Request, db: Session = Depends(get_db)) -> TransactionService:
    """Provide a transaction engine bound to this request's session"""
    return TransactionService(db, request_id=get_request_id(request))


def get_vehicle_service(db: Session = Depends(get_db)) -> VehicleService:
    return VehicleService(db)
