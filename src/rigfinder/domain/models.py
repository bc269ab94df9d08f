"""SQLAlchemy ORM models for rigfinder.

All models use SQLite-compatible types:
- String(36) for UUID primary keys
- Numeric(10, 2) for money
- DateTime for timestamps (naive UTC, no TIMESTAMPTZ)
"""

import uuid
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from rigfinder.infra.clock import utcnow
from rigfinder.infra.database import Base

DEFAULT_CPC_RATE = Decimal("15.00")


# ---------------------------------------------------------------------------
# Auth / User
# ---------------------------------------------------------------------------


class User(Base):
    """Platform user. Owned by the auth collaborator; read-only here."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="vendor")  # vendor, admin
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)


# ---------------------------------------------------------------------------
# Vendor Domain
# ---------------------------------------------------------------------------


class Vendor(Base):
    """Equipment rental company with a yard location."""

    __tablename__ = "vendors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    website = Column(String(500))
    yard_address = Column(String(500), nullable=False)
    yard_lat = Column(Float)
    yard_lng = Column(Float)
    plan_status = Column(String(20), default="free")  # free, pro, enterprise
    is_sponsored = Column(Boolean, default=False)
    # is_active gates search visibility, billing_status gates invoicing only
    is_active = Column(Boolean, default=True, index=True)
    billing_status = Column(String(20), default="ACTIVE", nullable=False)
    onboarding_date = Column(DateTime, default=utcnow)
    last_contacted_at = Column(DateTime)
    admin_notes = Column(Text)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    billing = relationship("VendorBilling", back_populates="vendor", uselist=False)
    equipment = relationship("Equipment", back_populates="vendor")
    contact_events = relationship("ContactEvent", back_populates="vendor")
    lead_requests = relationship("LeadRequest", back_populates="vendor")


class VendorBilling(Base):
    """Per-vendor pay-per-click configuration."""

    __tablename__ = "vendor_billing"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(36), ForeignKey("vendors.id"), unique=True, nullable=False)
    cpc_rate = Column(Numeric(10, 2), nullable=False, default=DEFAULT_CPC_RATE)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    vendor = relationship("Vendor", back_populates="billing")


class Equipment(Base):
    """A rentable machine listed by a vendor."""

    __tablename__ = "equipment"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False, index=True)
    size_class = Column(String(10))  # small, medium, large
    make = Column(String(100))
    model = Column(String(100))
    year = Column(Integer)
    rate_hour_min = Column(Float)
    rate_hour_max = Column(Float)
    rate_day_min = Column(Float)
    rate_day_max = Column(Float)
    notes = Column(Text)
    image_url = Column(String(500))
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    vendor = relationship("Vendor", back_populates="equipment")
    availability = relationship("Availability", back_populates="equipment", uselist=False)

    @property
    def title(self) -> str:
        return " ".join(part for part in (self.type, self.make, self.model) if part)


class Availability(Base):
    """Current rentability of one piece of equipment (1:1)."""

    __tablename__ = "availability"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    equipment_id = Column(
        String(36), ForeignKey("equipment.id"), unique=True, nullable=False
    )
    status = Column(String(20), nullable=False, default="UNKNOWN")
    # Only meaningful while LIMITED: next date the machine is expected back
    earliest_date = Column(DateTime)
    last_updated = Column(DateTime, default=utcnow)

    equipment = relationship("Equipment", back_populates="availability")


# ---------------------------------------------------------------------------
# Contact / Billing Domain
# ---------------------------------------------------------------------------


class ContactEvent(Base):
    """Append-only contact ledger. Sole source of truth for billing.

    dedupe_key embeds the 30-minute time bucket, so the unique index
    allows at most one row per (vendor, equipment, type, session, bucket).
    Legacy click-tracking rows carry no dedupe_key.
    """

    __tablename__ = "contact_events"
    __table_args__ = (
        Index("ix_contact_events_billable_created", "is_billable", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=False, index=True)
    equipment_id = Column(String(36), ForeignKey("equipment.id"), nullable=True)
    event_type = Column(String(20), nullable=False)
    session_id = Column(String(100))
    ip_hash = Column(String(64))
    user_agent_hash = Column(String(64))
    dedupe_key = Column(String(64), unique=True, nullable=True)
    is_billable = Column(Boolean, nullable=False, default=True)
    search_location_text = Column(String(500))
    search_radius = Column(Float)
    need_date = Column(String(50))
    referrer = Column(String(500))
    search_params_json = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    vendor = relationship("Vendor", back_populates="contact_events")


class LeadRequest(Base):
    """Structured inbound inquiry from a contractor to a vendor."""

    __tablename__ = "lead_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=False, index=True)
    equipment_id = Column(String(36), ForeignKey("equipment.id"), nullable=True)
    requester_name = Column(String(255))
    requester_phone = Column(String(50))
    requester_email = Column(String(255))
    message = Column(Text)
    jobsite_location_text = Column(String(500))
    radius = Column(Float)
    need_date = Column(String(50))
    created_at = Column(DateTime, default=utcnow)

    vendor = relationship("Vendor", back_populates="lead_requests")


class Report(Base):
    """User flag on an outdated or incorrect listing."""

    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    equipment_id = Column(String(36), ForeignKey("equipment.id"), nullable=True)
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=True)
    reason = Column(String(255), nullable=False, default="outdated")
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime, default=utcnow)
    reviewed_at = Column(DateTime)


class AuditLog(Base):
    """Best-effort record of vendor and admin actions."""

    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(36), nullable=True)
    user_id = Column(String(36), nullable=True)
    action = Column(String(50), nullable=False)
    details = Column(Text)
    created_at = Column(DateTime, default=utcnow)
