"""
Info Cards - Source Package

A personal information-card manager (accounts, todos, subscriptions, memos)
with AI-assisted tagging.

DESIGN PRINCIPLES:
1. AI suggests tags -> the gate decides -> only then is a card saved
2. Remote failures degrade, they never crash a request
3. Heuristic results are always marked as such
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Info Cards Team"
