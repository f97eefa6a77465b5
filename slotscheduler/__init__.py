"""
slotscheduler - available booking slots from busy times and weekly availability.
"""

__version__ = "0.1.0"
