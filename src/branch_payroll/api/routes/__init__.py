"""API routes."""

from branch_payroll.api.routes.approvals import router as approvals_router
from branch_payroll.api.routes.employees import router as employees_router
from branch_payroll.api.routes.health import router as health_router
from branch_payroll.api.routes.timesheets import router as timesheets_router

__all__ = ["approvals_router", "employees_router", "health_router", "timesheets_router"]
