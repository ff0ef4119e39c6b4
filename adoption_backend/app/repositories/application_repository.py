# app/repositories/application_repository.py
import logging
from typing import List, Optional, Tuple

from google.api_core.exceptions import AlreadyExists

from app.core.exceptions import DuplicateKeyError
from app.models.application import Application, ApplicationStatus, application_id_for
from app.repositories.base import FirestoreRepository, ListQuery
from app.utils.datetime_utils import DateTimeUtils


class ApplicationRepository(FirestoreRepository):
    """
    Application store backed by the 'applications' collection.

    Documents are keyed by ``{pet_id}_{applicant_id}``, so the store itself
    refuses a second application for the same (pet, applicant) pair.
    """

    collection_name = 'applications'

    def find_by_id(self, application_id: str) -> Optional[Application]:
        data = self._get_dict(application_id)
        return Application.from_dict(data) if data else None

    def exists_for(self, pet_id: str, applicant_id: str) -> bool:
        ref = self._document(application_id_for(pet_id, applicant_id))
        return ref is not None and ref.get().exists

    def create(self, application: Application) -> Application:
        """Inserts the document; raises DuplicateKeyError if the pair already applied."""
        ref = self.collection.document(application.application_id)
        try:
            ref.create(DateTimeUtils.for_firestore(application.to_dict()))
        except AlreadyExists:
            raise DuplicateKeyError('pet_id, applicant_id', application.application_id)
        return application

    def update_status(self, application_id: str, status: ApplicationStatus,
                      reviewed_by: Optional[str] = None, review_notes: Optional[str] = None) -> Optional[Application]:
        """Moves an application to ``status`` and stamps the review fields."""
        update_data = {
            'status': status.value,
            'reviewed_at': DateTimeUtils.now(),
        }
        if reviewed_by:
            update_data['reviewed_by'] = reviewed_by
        if review_notes:
            update_data['review_notes'] = review_notes

        if not self._update(application_id, update_data):
            return None
        return self.find_by_id(application_id)

    def reject_pending_siblings(self, pet_id: str, exclude_application_id: str, review_notes: str) -> int:
        """
        Rejects every other Pending application for ``pet_id`` in batched writes.

        The set is selected by predicate, not iterated in any particular order;
        re-running it finds nothing left to change.
        """
        pending = self.collection \
            .where('pet_id', '==', pet_id) \
            .where('status', '==', ApplicationStatus.PENDING.value) \
            .stream()
        refs = [doc.reference for doc in pending if doc.id != exclude_application_id]

        now = DateTimeUtils.now()
        update_data = {
            'status': ApplicationStatus.REJECTED.value,
            'reviewed_at': now,
            'review_notes': review_notes,
            'updated_at': now,
        }
        rejected = self._batched(refs, lambda batch, ref: batch.update(ref, update_data))
        logging.info(f"Cascade-rejected {rejected} pending application(s) for pet {pet_id}")
        return rejected

    def count_for_pet(self, pet_id: str, status: ApplicationStatus) -> int:
        return self.count([('pet_id', '==', pet_id), ('status', '==', status.value)])

    def find_page(self, list_query: ListQuery, offset: int, limit: int) -> Tuple[List[Application], int]:
        page, total = self._find_page_dicts(list_query, offset, limit)
        return [Application.from_dict(data) for data in page], total
