"""
Core modules for FinCLI.

This package contains the budget allocation engine, the accounting
create/revise flows and the shared exception types.
"""
