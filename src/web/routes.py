"""
Attendance HTTP routes.

Success responses use the {"message"?, "data"} envelope; AttendanceError
and HTTPException are turned into {"message"} by the handlers in main.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..middleware.auth import CurrentUser, get_current_user, require_admin
from ..services.attendance import AttendanceService, get_attendance_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


def get_service() -> AttendanceService:
    """FastAPI dependency for the attendance service."""
    return get_attendance_service()


# ============================================================================
# State transitions
# ============================================================================

@router.post("/checkin")
async def check_in(
    current_user: CurrentUser = Depends(get_current_user),
    service: AttendanceService = Depends(get_service),
):
    """Check in for today."""
    result = await service.check_in(current_user.id)
    return {"message": "Checked in", "data": result}


@router.post("/checkout")
async def check_out(
    current_user: CurrentUser = Depends(get_current_user),
    service: AttendanceService = Depends(get_service),
):
    """Check out for today."""
    result = await service.check_out(current_user.id)
    return {"message": "Checked out", "data": result}


@router.get("/today")
async def today_status(
    current_user: CurrentUser = Depends(get_current_user),
    service: AttendanceService = Depends(get_service),
):
    return {"data": await service.get_today_status(current_user.id)}


# ============================================================================
# Personal reports
# ============================================================================

@router.get("/my")
async def my_attendance(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    current_user: CurrentUser = Depends(get_current_user),
    service: AttendanceService = Depends(get_service),
):
    return {"data": await service.list_mine(current_user.id, month)}


@router.get("/my/stats")
async def my_attendance_stats(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    current_user: CurrentUser = Depends(get_current_user),
    service: AttendanceService = Depends(get_service),
):
    return {"data": await service.list_mine_stats(current_user.id, month)}


# ============================================================================
# Organisation reports (admin)
# ============================================================================

@router.get("/all")
async def all_attendance(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    status: Optional[str] = Query(None, description="Filter by attendance status"),
    current_user: CurrentUser = Depends(require_admin),
    service: AttendanceService = Depends(get_service),
):
    logger.debug(f"Admin {current_user.id} listing attendance month={month} status={status}")
    return {"data": await service.list_all(month, status)}


@router.get("/all/stats")
async def all_attendance_stats(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    current_user: CurrentUser = Depends(require_admin),
    service: AttendanceService = Depends(get_service),
):
    return {"data": await service.list_all_stats(month)}
