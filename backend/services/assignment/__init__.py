"""
Driver and vehicle assignment service.

This module handles:
    - Claiming an available driver for a new ride request
    - Releasing a driver back to the available pool
    - Auto-assigning a free vehicle to a newly created driver
    - Releasing a driver's vehicle
"""

from .driver_assignment import (
    claim_available_driver,
    ensure_driver_can_become_available,
    release_driver,
    set_driver_availability,
)
from .vehicle_assignment import (
    assign_vehicle,
    assign_vehicle_to_new_driver,
    release_vehicle_from_driver,
)

__all__ = [
    "claim_available_driver",
    "ensure_driver_can_become_available",
    "release_driver",
    "set_driver_availability",
    "assign_vehicle",
    "assign_vehicle_to_new_driver",
    "release_vehicle_from_driver",
]
