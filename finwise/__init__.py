"""
FinWise - Source Package

A personal finance assistant: dashboard trackers, an AI advisor
grounded in the user's banking data, and a learn page with generated
quizzes, quotes and reading.

DESIGN PRINCIPLES:
1. Remote failures degrade, never crash
2. Collaborators sit behind interfaces and are swappable
3. Session state is explicit and constructed, not ambient
4. Significant actions are audited
"""

__version__ = "1.0.0"
__author__ = "FinWise Team"
