# app/repositories/pet_repository.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore

from app.models.pet import Pet, PetStatus
from app.repositories.base import FirestoreRepository, ListQuery
from app.utils.datetime_utils import DateTimeUtils


class PetRepository(FirestoreRepository):
    """Pet store backed by the 'pets' collection."""

    collection_name = 'pets'

    def find_by_id(self, pet_id: str) -> Optional[Pet]:
        data = self._get_dict(pet_id)
        return Pet.from_dict(data) if data else None

    def find_by_ids(self, pet_ids: List[str]) -> Dict[str, Pet]:
        return {pet_id: Pet.from_dict(data) for pet_id, data in self._get_many_dicts(pet_ids).items()}

    def create(self, pet: Pet) -> Pet:
        self.collection.document(pet.pet_id).set(DateTimeUtils.for_firestore(pet.to_dict()))
        logging.info(f"Pet created: {pet.pet_id} ({pet.species.value}, {pet.name})")
        return pet

    def update(self, pet_id: str, update_data: Dict[str, Any]) -> Optional[Pet]:
        """Partial update of already-validated fields. Returns None if the pet is gone."""
        if not self._update(pet_id, update_data):
            return None
        return self.find_by_id(pet_id)

    def update_status(self, pet_id: str, status: PetStatus) -> bool:
        """Single-document status write. Returns False if the pet does not exist."""
        return self._update(pet_id, {'status': status.value})

    def add_photos(self, pet_id: str, photo_urls: List[str]) -> Optional[Pet]:
        """Appends photo URLs atomically (ArrayUnion keeps the existing order)."""
        ref = self._document(pet_id)
        if ref is None or not ref.get().exists:
            return None
        ref.update({
            'photos': firestore.ArrayUnion(photo_urls),
            'updated_at': DateTimeUtils.now(),
        })
        return self.find_by_id(pet_id)

    def find_page(self, list_query: ListQuery, offset: int, limit: int) -> Tuple[List[Pet], int]:
        page, total = self._find_page_dicts(list_query, offset, limit)
        return [Pet.from_dict(data) for data in page], total
