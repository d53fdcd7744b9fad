"""Domain models for the dormitory billing application."""

from __future__ import annotations

import enum
import uuid

from tortoise import fields, models


class RoomStatus(str, enum.Enum):
    """Occupancy state of a room."""

    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"


class PaymentStatus(str, enum.Enum):
    """Lifecycle of a billing entry's payment."""

    PENDING = "Pending"
    REVIEW = "Review"
    PAID = "Paid"
    OVERDUE = "Overdue"
    LATE = "Late"
    REJECTED = "Rejected"


class ResidentStatus(str, enum.Enum):
    """Whether a resident still lives in the dormitory."""

    ACTIVE = "Active"
    CHECKED_OUT = "CheckedOut"


class DepositStatus(str, enum.Enum):
    """What happened to a resident's deposit at checkout."""

    HELD = "Held"
    RETURNED = "Returned"
    PARTIALLY_RETURNED = "PartiallyReturned"
    FORFEITED = "Forfeited"


class DistributionMode(str, enum.Enum):
    """How common-area costs are split between rooms."""

    EQUAL = "equal"
    PROPORTIONAL = "proportional"


class CapMode(str, enum.Enum):
    """Upper bound applied to the distributed common-area cost."""

    NONE = "none"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class BaseModel(models.Model):
    """Abstract base model with common fields."""

    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True


class Room(BaseModel):
    """A rentable room with its own water and electric meters."""

    number = fields.CharField(max_length=20, unique=True)
    price = fields.DecimalField(max_digits=10, decimal_places=2)
    status = fields.CharEnumField(RoomStatus, default=RoomStatus.AVAILABLE)
    last_water_reading = fields.IntField(
        default=0, description="Water meter value carried to the next bill"
    )
    last_electric_reading = fields.IntField(
        default=0, description="Electric meter value carried to the next bill"
    )
    charge_common_area = fields.BooleanField(default=True)

    # Per-room overrides, null means "use SystemConfig"
    water_rate = fields.DecimalField(max_digits=10, decimal_places=4, null=True)
    electric_rate = fields.DecimalField(max_digits=10, decimal_places=4, null=True)
    trash_fee = fields.DecimalField(max_digits=10, decimal_places=2, null=True)
    internet_fee = fields.DecimalField(max_digits=10, decimal_places=2, null=True)
    other_fees = fields.DecimalField(max_digits=10, decimal_places=2, null=True)

    billings: fields.ReverseRelation[BillingEntry]
    residents: fields.ReverseRelation[Resident]

    def __str__(self) -> str:
        return f"Room {self.number}"


class Resident(BaseModel):
    """A tenant living in a room; kept after checkout for history."""

    full_name = fields.CharField(max_length=255)
    phone = fields.CharField(max_length=50, null=True)
    line_user_id = fields.CharField(max_length=100, null=True)
    room: fields.ForeignKeyNullableRelation[Room] = fields.ForeignKeyField(
        "models.Room", related_name="residents", null=True, on_delete=fields.SET_NULL
    )
    status = fields.CharEnumField(ResidentStatus, default=ResidentStatus.ACTIVE)
    check_in_date = fields.DateField()
    check_out_date = fields.DateField(null=True)

    deposit_status = fields.CharEnumField(DepositStatus, default=DepositStatus.HELD)
    deposit_returned_date = fields.DateField(null=True)
    deposit_returned_amount = fields.DecimalField(
        max_digits=10, decimal_places=2, null=True
    )
    deposit_forfeit_reason = fields.CharField(max_length=255, null=True)

    billings: fields.ReverseRelation[BillingEntry]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.status.value})"


class BillingEntry(BaseModel):
    """A room's bill for one month."""

    month = fields.DateField()  # first day of the billing month
    room: fields.ForeignKeyRelation[Room] = fields.ForeignKeyField(
        "models.Room", related_name="billings"
    )
    # Active resident at billing time
    resident: fields.ForeignKeyNullableRelation[Resident] = fields.ForeignKeyField(
        "models.Resident", related_name="billings", null=True, on_delete=fields.SET_NULL
    )

    rent = fields.DecimalField(max_digits=10, decimal_places=2)
    water_meter_last = fields.IntField()
    water_meter_current = fields.IntField()
    water_rate = fields.DecimalField(max_digits=10, decimal_places=4)
    electric_meter_last = fields.IntField()
    electric_meter_current = fields.IntField()
    electric_rate = fields.DecimalField(max_digits=10, decimal_places=4)

    trash_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    internet_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    other_fees = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    common_water_fee = fields.DecimalField(max_digits=12, decimal_places=4, default=0)
    common_electric_fee = fields.DecimalField(
        max_digits=12, decimal_places=4, default=0
    )
    common_internet_fee = fields.DecimalField(
        max_digits=12, decimal_places=4, default=0
    )
    common_trash_fee = fields.DecimalField(max_digits=12, decimal_places=4, default=0)
    total_amount = fields.DecimalField(max_digits=12, decimal_places=4)

    payment_status = fields.CharEnumField(
        PaymentStatus, default=PaymentStatus.PENDING
    )
    payment_date = fields.DatetimeField(null=True)
    slip_reference = fields.CharField(max_length=255, null=True)
    reviewed_at = fields.DatetimeField(null=True)
    review_note = fields.CharField(max_length=255, null=True)

    class Meta:
        unique_together = ("room", "month")

    def __str__(self) -> str:
        return f"Bill for {self.room_id} on {self.month}: {self.total_amount}"


class CentralMeterRecord(BaseModel):
    """Building-wide meter readings and the provider's charges for one month."""

    month = fields.DateField(unique=True)
    water_meter_last = fields.IntField()
    water_meter_current = fields.IntField()
    water_rate_from_utility = fields.DecimalField(max_digits=10, decimal_places=4)
    electric_meter_last = fields.IntField()
    electric_meter_current = fields.IntField()
    electric_total_cost = fields.DecimalField(
        max_digits=12,
        decimal_places=2,
        description="Amount paid to the provider; the unit rate is derived from it",
    )
    maintenance_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    internet_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    trash_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    note = fields.CharField(max_length=255, null=True)

    def __str__(self) -> str:
        return f"Central meter for {self.month}"


class SystemConfig(BaseModel):
    """Process-wide defaults for rates, fees and the common-area policy."""

    dorm_name = fields.CharField(max_length=255, default="")
    water_rate = fields.DecimalField(max_digits=10, decimal_places=4)
    electric_rate = fields.DecimalField(max_digits=10, decimal_places=4)
    trash_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    internet_fee = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    other_fees = fields.DecimalField(max_digits=10, decimal_places=2, default=0)

    common_area_enabled = fields.BooleanField(default=False)
    common_area_distribution = fields.CharEnumField(
        DistributionMode, default=DistributionMode.EQUAL
    )
    common_area_cap_type = fields.CharEnumField(CapMode, default=CapMode.NONE)
    common_area_cap_percentage = fields.DecimalField(
        max_digits=5, decimal_places=2, default=0
    )
    common_area_cap_fixed = fields.DecimalField(
        max_digits=12, decimal_places=2, default=0
    )

    def __str__(self) -> str:
        return f"System config ({self.dorm_name})"


class RecurringExpense(BaseModel):
    """Template for an expense that repeats every month."""

    title = fields.CharField(max_length=255)
    amount = fields.DecimalField(max_digits=12, decimal_places=2)
    category = fields.CharField(max_length=50)
    day_of_month = fields.IntField()
    is_active = fields.BooleanField(default=True)
    note = fields.CharField(max_length=255, null=True)

    expenses: fields.ReverseRelation[Expense]

    def __str__(self) -> str:
        return f"{self.title} (day {self.day_of_month})"


class Expense(BaseModel):
    """An operating expense paid by the owner."""

    title = fields.CharField(max_length=255)
    amount = fields.DecimalField(max_digits=12, decimal_places=2)
    category = fields.CharField(max_length=50)
    date = fields.DateField()
    note = fields.CharField(max_length=255, null=True)
    recurring: fields.ForeignKeyNullableRelation[RecurringExpense] = (
        fields.ForeignKeyField(
            "models.RecurringExpense",
            related_name="expenses",
            null=True,
            on_delete=fields.SET_NULL,
        )
    )

    def __str__(self) -> str:
        return f"{self.title}: {self.amount} on {self.date}"
