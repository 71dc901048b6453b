"""
Finance Tracker - Source Package

A personal finance ledger for recording incomes and expenses, assigning
monthly category budgets, tracking savings goals and moving leftover
money between months and goals.

DESIGN PRINCIPLES:
1. Validate → Ask the user when a policy trips → Commit
2. Fail early, fail visibly
3. No silent corrections
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
