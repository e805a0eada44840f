"""
DAYFLOW Planner API - XP Router
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.database import get_database
from dayflow.auth.dependencies import CurrentUser
from dayflow.xp.repository import MongoXPRepository, XPRepositoryInterface
from dayflow.xp.service import XPService
from dayflow.xp.schemas import XPResponse


router = APIRouter(prefix="/xp", tags=["XP"])


async def get_xp_repository(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> XPRepositoryInterface:
    """Dependency to get XP repository instance."""
    return MongoXPRepository(db)


async def get_xp_service(
    repository: Annotated[XPRepositoryInterface, Depends(get_xp_repository)]
) -> XPService:
    return XPService(repository)


@router.get("", response_model=XPResponse, summary="Get XP total and level")
async def get_xp(
    current_user: CurrentUser,
    service: Annotated[XPService, Depends(get_xp_service)],
) -> XPResponse:
    return await service.get_progress(current_user.id)
