"""
Shipping zone, method and rate tables.

Zones group pincodes (patterns, ranges, explicit lists, exclusions).
Methods are service levels with a default price and transit time.
Rates override a method's price/transit time inside one zone, optionally
narrowed by weight, order value and the JSON `conditions` qualifier:

    {
      "productCategories": ["books"],
      "customerGroups": ["wholesale"],
      "weekdays": [1, 2, 3, 4, 5],          # Sunday=0
      "timeRanges": [{"start": "09:00", "end": "17:00"}]
    }
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime,
    Numeric, Text, JSON, ForeignKey, Index
)
from sqlalchemy.orm import relationship

from shipzone.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ShippingZone(Base):
    __tablename__ = "shipping_zones"
    __table_args__ = (
        Index("ix_shipping_zones_active_priority", "is_active", "priority"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    # Lower number = evaluated first / more specific
    priority = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Lists of strings
    pincode_patterns = Column(JSON, default=list)
    pincode_ranges = Column(JSON, default=list)  # "400001-400099"
    included_pincodes = Column(JSON, default=list)
    excluded_pincodes = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    rates = relationship("ShippingRate", back_populates="shipping_zone")

    def __repr__(self):
        return f"<ShippingZone(id={self.id}, name={self.name}, priority={self.priority}, active={self.is_active})>"


class ShippingMethod(Base):
    __tablename__ = "shipping_methods"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    icon = Column(String(255), nullable=True)

    base_rate = Column(Numeric(10, 2), nullable=False)
    estimated_days = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    rates = relationship("ShippingRate", back_populates="shipping_method")

    def __repr__(self):
        return f"<ShippingMethod(id={self.id}, code={self.code}, active={self.is_active})>"


class ShippingRate(Base):
    __tablename__ = "shipping_rates"
    __table_args__ = (
        Index("ix_shipping_rates_method_zone", "shipping_method_id", "shipping_zone_id"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    rate = Column(Numeric(10, 2), nullable=False)

    shipping_method_id = Column(String(36), ForeignKey("shipping_methods.id"), nullable=False)
    shipping_zone_id = Column(String(36), ForeignKey("shipping_zones.id"), nullable=False)

    # Bands; a max of NULL or 0 is unbounded
    min_weight = Column(Numeric(10, 3), nullable=True)  # kg
    max_weight = Column(Numeric(10, 3), nullable=True)
    min_order_value = Column(Numeric(10, 2), nullable=True)
    max_order_value = Column(Numeric(10, 2), nullable=True)

    estimated_days = Column(Integer, nullable=True)  # overrides the method default
    conditions = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    shipping_method = relationship("ShippingMethod", back_populates="rates")
    shipping_zone = relationship("ShippingZone", back_populates="rates")

    def __repr__(self):
        return f"<ShippingRate(id={self.id}, method={self.shipping_method_id}, zone={self.shipping_zone_id}, rate={self.rate})>"
