"""
Pydantic schemas for the staff dashboard and maintenance endpoints.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class ProgramCount(BaseModel):
    program_type: str = Field(..., example="addiction")
    label: str = Field(..., example="Addiction")
    count: int


class DashboardStats(BaseModel):
    total_revenue: float = Field(..., description="Sum of total_program_fee over all agreements")
    total_client_count: int
    monthly_revenue: float = Field(..., description="Activated agreements, current UTC month")
    last_month_revenue: float
    monthly_revenue_change_percent: Optional[float] = None
    programs_by_type: List[ProgramCount]


class DashboardStatsResponse(BaseModel):
    success: bool = True
    data: DashboardStats


class ReminderRunResult(BaseModel):
    success: bool = True
    patients_checked: int
    sent: int
    failed: int
