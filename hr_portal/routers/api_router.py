from fastapi import APIRouter
from hr_portal.routers import (
    auth, leave, employees, attendance, announcements,
    assets, invoices, notifications, insights
)

# Centralized API router hub
# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(leave.calendar_router, tags=["Leave"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(attendance.router, tags=["Attendance"])
api_router.include_router(announcements.router, tags=["Announcements"])
api_router.include_router(assets.router, tags=["Assets"])
api_router.include_router(invoices.router, tags=["Invoices"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(insights.router, tags=["Insights"])
