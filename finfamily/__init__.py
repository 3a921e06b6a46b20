"""
FinFamily - Source Package

A family-finance tracker: income, expense and asset records grouped under
four modules, monthly views, and goal-vs-actual progress.

DESIGN PRINCIPLES:
1. Records change only through explicit user action
2. Goal reconciliation is pure and deterministic
3. External services fail soft: the app degrades, it doesn't crash
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinFamily Team"
