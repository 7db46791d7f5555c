# backend/portfolio_analytics/__init__.py
"""
Portfolio Analytics Engine.

Values multi-currency investment portfolios from persisted positions,
price bars and FX rates, and reports totals, allocation, concentration
and period performance in each portfolio's base currency.
"""
