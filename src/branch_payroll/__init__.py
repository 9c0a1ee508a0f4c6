"""Branch payroll: timesheets, wage computation and approval workflow."""

__version__ = "0.1.0"
