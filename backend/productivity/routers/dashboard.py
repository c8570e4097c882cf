"""Dashboard routes."""

from fastapi import APIRouter

from productivity.dependencies import DashboardAPIDep
from productivity.models import DashboardData, QuickStats

router = APIRouter()


@router.get("", response_model=DashboardData)
async def get_dashboard(api: DashboardAPIDep):
    return await api.get_dashboard_data()


@router.get("/quick-stats", response_model=QuickStats)
async def get_quick_stats(api: DashboardAPIDep):
    return await api.get_quick_stats()
