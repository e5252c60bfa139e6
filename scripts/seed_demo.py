#!/usr/bin/env python3
"""
Seed script to create demo staff, areas and tables
"""

import asyncio


DEMO_TABLES = [
    # (number, capacity, area, location_description)
    ("T001", 2, "indoor", "Window, left of entrance"),
    ("T002", 4, "indoor", "Center of main hall"),
    ("T003", 4, "indoor", "Near the bar"),
    ("T004", 6, "outdoor", "Garden, under the pergola"),
    ("T005", 4, "outdoor", "Garden, by the fountain"),
    ("T006", 8, "vip", "Private room"),
    ("T007", 2, "terrace", "Terrace corner"),
]

DEMO_STAFF = [
    # (email, full name, role)
    ("owner@tableside.local", "Demo Owner", "owner"),
    ("cashier@tableside.local", "Demo Cashier", "cashier"),
    ("waiter@tableside.local", "Demo Waiter", "waiter"),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from tableside.config import settings
    from tableside.database import SessionLocal, engine, Base
    from tableside.models.user import StaffUser, StaffRole
    from tableside.api.auth import create_access_token
    from tableside.services import AreaRegistry, TableStore, run_in_transaction
    
    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    async with SessionLocal() as db:
        result = await db.execute(
            select(StaffUser).where(StaffUser.email == DEMO_STAFF[0][0])
        )
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return
        
        print("Creating demo staff...")
        staff = []
        for email, full_name, role in DEMO_STAFF:
            user = StaffUser(
                email=email,
                full_name=full_name,
                role=StaffRole(role),
                is_active=True,
            )
            db.add(user)
            staff.append(user)
        await db.commit()
        
        print("Registering areas...")
        registry = AreaRegistry(db)
        added = await run_in_transaction(
            db,
            lambda: registry.ensure_areas(settings.default_areas_list),
            name="seed_areas",
        )
        print(f"  {len(added)} area(s) added")
        
        print("Creating demo tables...")
        store = TableStore(db)
        for number, capacity, area, description in DEMO_TABLES:
            table = await run_in_transaction(
                db,
                lambda: store.create_table(
                    capacity=capacity,
                    area=area,
                    number=number,
                    location_description=description,
                ),
                name="seed_table",
            )
            print(f"  {table.number} ({table.capacity} seats, {table.area})")
    
        print(f"Demo access tokens (valid for {settings.access_token_expire_minutes} minutes):")
        for user in staff:
            print(f"  {user.role.value:<8} {user.email}: {create_access_token(user)}")
    
    print("Demo data created successfully!")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
