# app/models/pet.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum
import logging

from app.utils.datetime_utils import DateTimeUtils


class PetSpecies(Enum):
    DOG = "Dog"
    CAT = "Cat"
    BIRD = "Bird"
    RABBIT = "Rabbit"
    OTHER = "Other"


class PetGender(Enum):
    MALE = "Male"
    FEMALE = "Female"


class PetSize(Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


class PetStatus(Enum):
    """Availability of a pet. Kept in sync with its applications by ApplicationWorkflow."""
    AVAILABLE = "Available"
    PENDING = "Pending"
    ADOPTED = "Adopted"


_ENUM_FIELDS = {
    'species': PetSpecies,
    'gender': PetGender,
    'size': PetSize,
    'status': PetStatus,
}


@dataclass
class Pet:
    """
    Document structure of the Firestore 'pets' collection.
    Enum fields are stored as their string values.
    """
    pet_id: str
    name: str
    species: PetSpecies
    breed: str
    age: int
    gender: PetGender
    size: PetSize
    description: str
    added_by: str
    color: Optional[str] = None
    medical_history: Optional[str] = None
    vaccinated: bool = False
    neutered: bool = False
    photos: List[str] = field(default_factory=list)
    status: PetStatus = PetStatus.AVAILABLE
    adoption_fee: float = 0
    location: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pet":
        """Builds a Pet from a Firestore document, converting enum strings and timestamps."""
        processed_data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}

        for key, enum_cls in _ENUM_FIELDS.items():
            value = processed_data.get(key)
            if isinstance(value, str):
                try:
                    processed_data[key] = enum_cls(value)
                except ValueError:
                    logging.warning(f"Invalid {enum_cls.__name__} value '{value}' for pet {processed_data.get('pet_id')}")
                    raise

        for key in ('created_at', 'updated_at'):
            if key in processed_data:
                processed_data[key] = DateTimeUtils.coerce_datetime(processed_data[key])

        if processed_data.get('photos') is None:
            processed_data['photos'] = []

        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with enum values, ready for Firestore or a response schema."""
        pet_dict = asdict(self)
        for key in _ENUM_FIELDS:
            pet_dict[key] = getattr(self, key).value
        return pet_dict

    def to_summary(self) -> Dict[str, Any]:
        """The subset embedded in application responses."""
        return {
            'pet_id': self.pet_id,
            'name': self.name,
            'species': self.species.value,
            'breed': self.breed,
            'status': self.status.value,
            'photos': list(self.photos),
        }
