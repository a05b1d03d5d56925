"""Database models for the VironaX analytics backend"""

from vironax.models.meta_data import MetaDailyMetric

from vironax.models.orders import (
    SallaOrder,
    ManualOrder
)

__all__ = [
    "MetaDailyMetric",
    "SallaOrder",
    "ManualOrder",
]
