"""
MoneyMigo - Source Package

Client-side authentication session engine for the MoneyMigo
personal finance app.

DESIGN PRINCIPLES:
1. One writer for the session, many readers
2. Every provider failure becomes a canonical error kind
3. Every error kind maps to exactly one recovery action
4. The app stays usable without a provider (demo mode)
5. The identity provider is swappable
"""

__version__ = "1.0.0"
__author__ = "MoneyMigo Team"
