# init_db.py
import asyncio

from careschedule.db.base import Base
from careschedule.db.sql import engine

# IMPORTANT: import all models so that Base.metadata knows them
from careschedule.modules.audit import models as audit_models  # noqa: F401
from careschedule.modules.availability import models as availability_models  # noqa: F401
from careschedule.modules.slots import models as slot_models  # noqa: F401


async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    print("Database schema recreated successfully!")


if __name__ == "__main__":
    asyncio.run(init_models())
