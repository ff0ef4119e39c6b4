# app/models/application.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum

from app.utils.datetime_utils import DateTimeUtils


class ApplicationStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


# Outcomes an admin review may move a Pending application to.
REVIEW_OUTCOMES = (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


class HousingType(Enum):
    HOUSE = "House"
    APARTMENT = "Apartment"
    CONDO = "Condo"
    OTHER = "Other"


def application_id_for(pet_id: str, applicant_id: str) -> str:
    """Document id of the one application a user may hold for a pet."""
    return f"{pet_id}_{applicant_id}"


@dataclass
class Application:
    """
    Document structure of the Firestore 'applications' collection.

    ``applicant`` is a snapshot {'user_id', 'name', 'email'} taken at submission.
    ``applicant_info`` holds phone, address, housing_type, has_yard, has_pets,
    pets_description, experience and reason.
    ``pet`` is never stored; it is filled in with Pet.to_summary() for responses.
    """
    application_id: str
    pet_id: str
    applicant_id: str
    applicant: Dict[str, Any]
    applicant_info: Dict[str, Any]
    status: ApplicationStatus = ApplicationStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
    pet: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @property
    def is_pending(self) -> bool:
        return self.status is ApplicationStatus.PENDING

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Application":
        processed_data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__ and k != 'pet'}

        status = processed_data.get('status')
        if isinstance(status, str):
            processed_data['status'] = ApplicationStatus(status)

        for key in ('created_at', 'updated_at', 'reviewed_at'):
            if key in processed_data:
                processed_data[key] = DateTimeUtils.coerce_datetime(processed_data[key])

        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        """Firestore document form; the transient ``pet`` summary is left out."""
        application_dict = asdict(self)
        application_dict.pop('pet')
        application_dict['status'] = self.status.value
        return application_dict

    def to_response(self) -> Dict[str, Any]:
        response = self.to_dict()
        response['pet'] = self.pet
        return response
