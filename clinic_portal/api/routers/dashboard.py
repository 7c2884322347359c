"""
Dashboard router - headline numbers for the staff dashboard.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import DashboardStatsResponse
from services import DashboardService
from core.auth import require_staff, verify_api_key
from core.dependencies import get_dashboard_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(verify_api_key), Depends(require_staff)],
)


@router.get(
    "/stats",
    response_model=DashboardStatsResponse,
    summary="Dashboard statistics",
    description="Revenue totals, this month against last month, client count and programs by type."
)
async def get_dashboard_stats(
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    return DashboardStatsResponse(data=dashboard_service.get_stats())
