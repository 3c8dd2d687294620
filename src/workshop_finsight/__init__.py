# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Workshop FinSight
-----------------

A Python financial reporting engine for the back office of a car-repair
workshop that also leases fleet vehicles to drivers. It turns the current
snapshot of sales, services, inventory, staff and fleet collections into
the figures the back office reports on.

Main capabilities:
- aggregation of sales and completed services into a unified operations
  ledger,
- cost-of-goods resolution against the current inventory,
- operational income and profit with a breakdown per operation type,
- payroll, fixed expenses and a profitability-gated commission model,
- inventory movement tracking (parts sold and supplies consumed),
- driver rental debt, deposit and manual debt balances, fleet summary,
- multi-period comparison of financial summaries.

Workshop FinSight separates computation (core modules), configuration
(TOML), and presentation (CLI), making it suitable for scripting,
automation and back office reporting.


Version: 0.1.0

Usage:
    python -m workshop_finsight.cli --help
"""

__all__ = ["engine", "operations", "commissions", "rentals", "report_service", "views", "io"]

__version__ = "0.1.0"
