"""
Vehicle, driver and client persistence.
"""

import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import ResourceNotFoundError
from freight_ledger.app.models.fleet import Vehicle, Driver, Client

logger = logging.getLogger(__name__)


async def get_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    """
    Fetch one vehicle.

    Raises:
        ResourceNotFoundError: If no vehicle has this id
    """
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()
    if vehicle is None:
        raise ResourceNotFoundError("Vehicle", vehicle_id)
    return vehicle


async def find_vehicle_by_plate(db: AsyncSession, plate: str):
    result = await db.execute(select(Vehicle).where(Vehicle.plate == plate))
    return result.scalar_one_or_none()


async def list_vehicles(db: AsyncSession, page: int = 1, page_size: int = 10) -> Tuple[List[Vehicle], int]:
    total = (await db.execute(select(func.count(Vehicle.id)))).scalar() or 0
    offset = (page - 1) * page_size
    result = await db.execute(select(Vehicle).order_by(Vehicle.name, Vehicle.id).offset(offset).limit(page_size))
    return list(result.scalars().all()), total


async def create_vehicle(db: AsyncSession, values: Dict[str, Any]) -> Vehicle:
    vehicle = Vehicle(**values)
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)
    logger.info("Vehicle %s (%s) created", vehicle.id, vehicle.plate)
    return vehicle


async def update_vehicle(db: AsyncSession, vehicle: Vehicle, values: Dict[str, Any]) -> Vehicle:
    for field, value in values.items():
        setattr(vehicle, field, value)
    await db.commit()
    await db.refresh(vehicle)
    return vehicle


async def delete_vehicle(db: AsyncSession, vehicle: Vehicle) -> None:
    """Delete vehicle; drivers bound to it are unbound."""
    vehicle_id = vehicle.id
    await db.execute(update(Driver).where(Driver.vehicle_id == vehicle_id).values(vehicle_id=None))
    await db.delete(vehicle)
    await db.commit()
    logger.info("Vehicle %s deleted", vehicle_id)


async def get_driver(db: AsyncSession, driver_id: int) -> Driver:
    """
    Fetch one driver.

    Raises:
        ResourceNotFoundError: If no driver has this id
    """
    result = await db.execute(select(Driver).where(Driver.id == driver_id))
    driver = result.scalar_one_or_none()
    if driver is None:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


async def list_drivers(db: AsyncSession) -> List[Driver]:
    result = await db.execute(select(Driver).order_by(Driver.last_name, Driver.first_name))
    return list(result.scalars().all())


async def find_driver_by_cedula(db: AsyncSession, cedula: str):
    result = await db.execute(select(Driver).where(Driver.cedula == cedula))
    return result.scalar_one_or_none()


async def create_driver(db: AsyncSession, values: Dict[str, Any]) -> Driver:
    driver = Driver(**values)
    db.add(driver)
    await db.commit()
    await db.refresh(driver)
    logger.info("Driver %s created", driver.id)
    return driver


async def get_client(db: AsyncSession, client_id: int) -> Client:
    """
    Fetch one client.

    Raises:
        ResourceNotFoundError: If no client has this id
    """
    result = await db.execute(select(Client).where(Client.id == client_id))
    client = result.scalar_one_or_none()
    if client is None:
        raise ResourceNotFoundError("Client", client_id)
    return client


async def list_clients(db: AsyncSession) -> List[Client]:
    result = await db.execute(select(Client).order_by(Client.nombre))
    return list(result.scalars().all())


async def find_client_by_name(db: AsyncSession, nombre: str):
    result = await db.execute(select(Client).where(Client.nombre == nombre))
    return result.scalar_one_or_none()


async def create_client(db: AsyncSession, values: Dict[str, Any]) -> Client:
    client = Client(**values)
    db.add(client)
    await db.commit()
    await db.refresh(client)
    logger.info("Client %s created", client.id)
    return client
