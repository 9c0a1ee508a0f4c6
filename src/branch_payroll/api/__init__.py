"""HTTP surface for branch payroll."""
