"""Delivery domain module - success/failure accounting for SMTP transactions."""

from .counters import DeliveryCounters

__all__ = ["DeliveryCounters"]
