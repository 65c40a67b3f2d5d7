"""
CareCore: In-Home Care Delivery Core

Care plans, recurrence-driven task generation, the task completion
lifecycle, per-jurisdiction compliance gating and the service
authorization unit ledger.
"""

__version__ = "0.1.0"
__author__ = "CareCore Team"
