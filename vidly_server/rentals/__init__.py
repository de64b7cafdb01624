"""
Rental lifecycle for the Vidly server.

This module provides:
- RentalLifecycleManager: checkout and return with atomic stock adjustment
- compute_rental_fee: per-started-day pricing
"""

from .lifecycle import RentalLifecycleManager
from .pricing import compute_rental_fee, rental_days

__all__ = ["RentalLifecycleManager", "compute_rental_fee", "rental_days"]
