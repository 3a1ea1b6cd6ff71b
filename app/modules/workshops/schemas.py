from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum
from app.config import settings
from app.modules.forms.codec import parse_form_schema
from app.modules.forms.schemas import FormField, StoredFormField


class ScheduleType(str, Enum):
    FIXED = "fixed"
    FLEXIBLE = "flexible"


class WorkshopStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


class WorkshopCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=10)
    category: str = Field(min_length=1)
    location: str = Field(min_length=1)
    price: Optional[int] = Field(default=None, ge=0)  # None means free
    capacity: Optional[int] = Field(default=None, ge=1)  # None means unlimited
    schedule_type: Optional[ScheduleType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    application_form: List[FormField] = []
    form_color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    auto_approve: bool = False

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class WorkshopUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=10)
    category: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    price: Optional[int] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)
    schedule_type: Optional[ScheduleType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    application_form: Optional[List[FormField]] = None
    form_color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    auto_approve: Optional[bool] = None

    @model_validator(mode="after")
    def end_after_start(self):
        # Only when both dates are sent; a lone date is checked against nothing
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


def _int_or_none(value: Any) -> Optional[int]:
    # bool is an int subclass; a stored true is not a price
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class WorkshopResponse(BaseModel):
    id: str
    master_id: str
    title: str
    description: str
    category: str
    location: str
    price: Optional[int] = None
    capacity: Optional[int] = None
    schedule_type: Optional[ScheduleType] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    application_form: List[StoredFormField] = []
    image_url: Optional[str] = None
    form_color: str
    auto_approve: bool = False
    status: WorkshopStatus = WorkshopStatus.DRAFT
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "WorkshopResponse":
        """Build from a stored row. Anything malformed falls back to its default instead of failing the read."""
        schedule_type = record.get("schedule_type")
        status = record.get("status")
        auto_approve = record.get("auto_approve")
        return cls(
            id=str(record.get("id") or ""),
            master_id=str(record.get("master_id") or ""),
            title=str(record.get("title") or ""),
            description=str(record.get("description") or ""),
            category=str(record.get("category") or ""),
            location=str(record.get("location") or ""),
            price=_int_or_none(record.get("price")),
            capacity=_int_or_none(record.get("capacity")),
            schedule_type=schedule_type if schedule_type in {s.value for s in ScheduleType} else None,
            start_date=_str_or_none(record.get("start_date")),
            end_date=_str_or_none(record.get("end_date")),
            application_form=parse_form_schema(record.get("application_form")),
            image_url=_str_or_none(record.get("image_url")),
            form_color=_str_or_none(record.get("form_color")) or settings.default_form_color,
            auto_approve=auto_approve if isinstance(auto_approve, bool) else False,
            status=status if status in {s.value for s in WorkshopStatus} else WorkshopStatus.DRAFT,
            created_at=_str_or_none(record.get("created_at")),
        )


class WorkshopListResponse(BaseModel):
    workshops: List[WorkshopResponse]
    total: int


class MasterDashboardResponse(BaseModel):
    workshops: List[WorkshopResponse]
    total_workshops: int
    published_workshops: int
    draft_workshops: int

    @classmethod
    def from_workshops(cls, workshops: List[WorkshopResponse]) -> "MasterDashboardResponse":
        return cls(
            workshops=workshops,
            total_workshops=len(workshops),
            published_workshops=sum(1 for w in workshops if w.status == WorkshopStatus.PUBLISHED),
            draft_workshops=sum(1 for w in workshops if w.status == WorkshopStatus.DRAFT),
        )
