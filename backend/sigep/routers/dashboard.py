"""Dashboard: headline counters and the recent-activity feed."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=schemas.DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)):
    return schemas.DashboardStats(**await crud.get_dashboard_stats(db))


@router.get("/activities", response_model=List[schemas.Activity])
async def recent_activities(db: AsyncSession = Depends(get_db)):
    return [schemas.Activity(**a) for a in await crud.get_recent_activities(db)]
