"""Domain enumerations for the rigfinder marketplace.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class EquipmentType(str, Enum):
    """Machine categories a listing can belong to."""

    CTL = "CTL"
    SKID = "SKID"
    EXCAVATOR = "EXCAVATOR"
    DOZER = "DOZER"
    CRANE = "CRANE"
    BACKHOE = "BACKHOE"
    FORKLIFT = "FORKLIFT"
    TELEHANDLER = "TELEHANDLER"
    ROLLER = "ROLLER"
    GRADER = "GRADER"
    LOADER = "LOADER"
    DUMP_TRUCK = "DUMP_TRUCK"
    OTHER = "OTHER"


class SizeClass(str, Enum):
    """Rough machine size bucket."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class AvailabilityStatus(str, Enum):
    """Rentability of a single piece of equipment.

    Any status may be set to any other by the owning vendor. UNKNOWN is the
    initial state and also a valid resting state.
    """

    AVAILABLE = "AVAILABLE"
    LIMITED = "LIMITED"
    UNAVAILABLE = "UNAVAILABLE"
    UNKNOWN = "UNKNOWN"


class ContactEventType(str, Enum):
    """Contact actions a contractor can take on a listing."""

    CALL = "CALL"
    TEXT = "TEXT"
    EMAIL = "EMAIL"
    WEBSITE = "WEBSITE"
    REQUEST = "REQUEST"


class BillingStatus(str, Enum):
    """Whether a vendor's contact events are invoiced."""

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    OPTED_OUT = "OPTED_OUT"


class PlanStatus(str, Enum):
    """Vendor subscription plan."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class ReportStatus(str, Enum):
    """Review state of a listing report."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"


class NeedDate(str, Enum):
    """When the contractor needs the machine on site."""

    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    ANY = "any"


class UserRole(str, Enum):
    """Roles carried in access tokens."""

    VENDOR = "vendor"
    ADMIN = "admin"


class AuditAction(str, Enum):
    """Action labels written to the audit log."""

    ADMIN_ACTION = "admin_action"
    LISTING_EDIT = "listing_edit"
    AVAILABILITY_UPDATE = "availability_update"
