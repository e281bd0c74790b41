from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer

# Amounts go over the wire as JSON numbers, not strings.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApplicationStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class LoanAmountPosition(str, Enum):
    ABOVE = "above"
    BELOW = "below"
    AT = "at"


class ApplicationCreate(BaseModel):
    applicant_name: str = Field(min_length=1, max_length=255)
    applicant_email: EmailStr
    loan_amount: Decimal = Field(gt=0, max_digits=18, decimal_places=2)
    notes: str | None = Field(default=None, max_length=4000)


class TaskDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: TaskStatus
    assigned_to_broker_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicationDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    broker_id: UUID
    status: ApplicationStatus
    loan_amount: Amount
    applicant_name: str
    applicant_email: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    task: TaskDTO | None = None


class ApplicationListResponse(BaseModel):
    success: bool = True
    applications: list[ApplicationDTO]


class ApplicationCreateResponse(BaseModel):
    success: bool = True
    loan_amount: Amount | None = Field(default=None, serialization_alias="loanAmount")
    message: str
