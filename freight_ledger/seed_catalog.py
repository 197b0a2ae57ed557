"""
Database seeding script for reference data.

Creates the clients, vehicles and drivers shipments are registered against.
Run this script after the database is set up but before first use.
"""

import asyncio

from sqlalchemy import select

from freight_ledger.app.db.session import AsyncSessionLocal, create_tables
from freight_ledger.app.models.fleet import Vehicle, Driver, Client

# Imported so create_tables() sees every table
from freight_ledger.app.models import audit_log, debt, expense, shipment  # noqa: F401

CLIENTS = ["Polar", "Plumrose", "Cargill", "Coposa"]

VEHICLES = [
    {"name": "Mack 01", "brand": "Mack", "model": "Granite", "color": "Blanco", "plate": "A12BC3D"},
    {"name": "Iveco 02", "brand": "Iveco", "model": "Trakker", "color": "Rojo", "plate": "A45EF6G"},
]

DRIVERS = [
    {"cedula": "V12345678", "first_name": "José", "last_name": "Pérez", "plate": "A12BC3D"},
    {"cedula": "V87654321", "first_name": "Luis", "last_name": "González", "plate": "A45EF6G"},
]


async def seed_catalog(session_factory=AsyncSessionLocal) -> dict:
    """
    Seed reference clients, vehicles and drivers.

    Existing rows (matched by name, plate or cedula) are left untouched,
    so the script can be run repeatedly.

    Returns:
        Number of rows created per table
    """
    created = {"clients": 0, "vehicles": 0, "drivers": 0}

    async with session_factory() as db:
        print("🌱 Starting catalog seeding...")

        for nombre in CLIENTS:
            result = await db.execute(select(Client).where(Client.nombre == nombre))
            if result.scalar_one_or_none() is None:
                db.add(Client(nombre=nombre))
                created["clients"] += 1

        vehicles_by_plate = {}
        for values in VEHICLES:
            result = await db.execute(select(Vehicle).where(Vehicle.plate == values["plate"]))
            vehicle = result.scalar_one_or_none()
            if vehicle is None:
                vehicle = Vehicle(**values)
                db.add(vehicle)
                created["vehicles"] += 1
            vehicles_by_plate[values["plate"]] = vehicle
        await db.flush()

        for values in DRIVERS:
            result = await db.execute(select(Driver).where(Driver.cedula == values["cedula"]))
            if result.scalar_one_or_none() is None:
                db.add(Driver(
                    cedula=values["cedula"],
                    first_name=values["first_name"],
                    last_name=values["last_name"],
                    vehicle_id=vehicles_by_plate[values["plate"]].id,
                ))
                created["drivers"] += 1

        await db.commit()

    print(f"🎉 Catalog seeding completed: {created}")
    return created


async def main():
    await create_tables()
    await seed_catalog()


if __name__ == "__main__":
    asyncio.run(main())
