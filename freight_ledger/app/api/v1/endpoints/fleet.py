"""
Fleet reference data API Endpoints.

Vehicles, drivers and clients that shipments point to.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.config import settings
from freight_ledger.app.db.session import get_db
from freight_ledger.app.repositories import fleet as fleet_repo
from freight_ledger.app.schemas.fleet import (
    VehicleCreate, VehicleUpdate, VehicleResponse, VehicleListResponse,
    DriverCreate, DriverResponse, ClientCreate, ClientResponse,
)
from freight_ledger.app.services.audit import log_event, AuditAction

vehicle_router = APIRouter(prefix="/vehicles", tags=["Vehicles"])
driver_router = APIRouter(prefix="/drivers", tags=["Drivers"])
client_router = APIRouter(prefix="/clients", tags=["Clients"])


@vehicle_router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    vehicles, total = await fleet_repo.list_vehicles(db, page=page, page_size=page_size)
    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in vehicles],
        total=total,
        page=page,
        page_size=page_size
    )


@vehicle_router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a vehicle.

    Returns 409 if the plate is already registered.
    """
    if await fleet_repo.find_vehicle_by_plate(db, vehicle_data.plate):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Vehicle with plate '{vehicle_data.plate}' already exists"
        )

    vehicle = await fleet_repo.create_vehicle(db, vehicle_data.model_dump())

    await log_event(
        db=db,
        action=AuditAction.VEHICLE_CREATED,
        entity_type="vehicle",
        entity_id=vehicle.id,
        metadata={"plate": vehicle.plate, "name": vehicle.name}
    )

    return VehicleResponse.model_validate(vehicle)


@vehicle_router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db)
):
    vehicle = await fleet_repo.get_vehicle(db, vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@vehicle_router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    vehicle_data: VehicleUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update a vehicle. Only provided fields change."""
    vehicle = await fleet_repo.get_vehicle(db, vehicle_id)
    changes = vehicle_data.model_dump(exclude_unset=True)

    if "plate" in changes and changes["plate"] != vehicle.plate:
        if await fleet_repo.find_vehicle_by_plate(db, changes["plate"]):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Vehicle with plate '{changes['plate']}' already exists"
            )

    vehicle = await fleet_repo.update_vehicle(db, vehicle, changes)

    await log_event(
        db=db,
        action=AuditAction.VEHICLE_UPDATED,
        entity_type="vehicle",
        entity_id=vehicle.id,
        metadata={"fields": sorted(changes.keys())}
    )

    return VehicleResponse.model_validate(vehicle)


@vehicle_router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db)
):
    vehicle = await fleet_repo.get_vehicle(db, vehicle_id)
    plate = vehicle.plate

    await fleet_repo.delete_vehicle(db, vehicle)

    await log_event(
        db=db,
        action=AuditAction.VEHICLE_DELETED,
        entity_type="vehicle",
        entity_id=vehicle_id,
        metadata={"plate": plate}
    )


@driver_router.get("", response_model=List[DriverResponse])
async def list_drivers(db: AsyncSession = Depends(get_db)):
    drivers = await fleet_repo.list_drivers(db)
    return [DriverResponse.model_validate(d) for d in drivers]


@driver_router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    driver_data: DriverCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a driver, optionally bound to a vehicle."""
    if await fleet_repo.find_driver_by_cedula(db, driver_data.cedula):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Driver with cedula '{driver_data.cedula}' already exists"
        )
    if driver_data.vehicle_id is not None:
        await fleet_repo.get_vehicle(db, driver_data.vehicle_id)

    driver = await fleet_repo.create_driver(db, driver_data.model_dump())

    await log_event(
        db=db,
        action=AuditAction.DRIVER_CREATED,
        entity_type="driver",
        entity_id=driver.id,
        metadata={"cedula": driver.cedula}
    )

    return DriverResponse.model_validate(driver)


@client_router.get("", response_model=List[ClientResponse])
async def list_clients(db: AsyncSession = Depends(get_db)):
    clients = await fleet_repo.list_clients(db)
    return [ClientResponse.model_validate(c) for c in clients]


@client_router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    db: AsyncSession = Depends(get_db)
):
    if await fleet_repo.find_client_by_name(db, client_data.nombre):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Client '{client_data.nombre}' already exists"
        )

    client = await fleet_repo.create_client(db, client_data.model_dump())

    await log_event(
        db=db,
        action=AuditAction.CLIENT_CREATED,
        entity_type="client",
        entity_id=client.id,
        metadata={"nombre": client.nombre}
    )

    return ClientResponse.model_validate(client)
