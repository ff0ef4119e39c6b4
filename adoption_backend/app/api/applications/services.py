# app/api/applications/services.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.core.security import Actor, Permission, authorize
from app.models.application import (
    Application, ApplicationStatus, REVIEW_OUTCOMES, application_id_for
)
from app.models.pet import PetStatus
from app.repositories import ApplicationRepository, PetRepository, UserRepository, ListQuery
from app.utils.api_response import build_pagination

CASCADE_REJECTION_NOTE = "Pet adopted by another applicant"

# A pet takes applications until one of them is approved.
OPEN_FOR_APPLICATIONS = (PetStatus.AVAILABLE, PetStatus.PENDING)


class ApplicationWorkflow:
    """
    Adoption applications and the pet availability they drive.

    Every mutating operation leaves the pet consistent with its applications:
    Adopted when one is Approved, Pending while any is Pending, otherwise
    Available. Writes are sequential single-document updates plus one batched
    cascade; there is no cross-document transaction.
    """
    def __init__(self,
                 application_repository: ApplicationRepository,
                 pet_repository: PetRepository,
                 user_repository: UserRepository):
        self.applications = application_repository
        self.pets = pet_repository
        self.users = user_repository
        logging.info("ApplicationWorkflow initialized with dependencies.")

    # --- lifecycle ---
    def submit_application(self, actor: Actor, pet_id: str, applicant_info: Dict[str, Any]) -> Application:
        """Creates a Pending application for ``actor`` and marks the pet Pending."""
        authorize(actor, Permission.APPLICATION_SUBMIT)

        pet = self.pets.find_by_id(pet_id)
        if not pet:
            raise NotFoundError("Pet not found")
        if pet.status not in OPEN_FOR_APPLICATIONS:
            raise BadRequestError("This pet is not available for adoption")
        if self.applications.exists_for(pet_id, actor.user_id):
            raise BadRequestError("You have already applied for this pet")

        applicant = self.users.find_by_id(actor.user_id)
        if not applicant:
            raise NotFoundError("User not found")

        application = self.applications.create(Application(
            application_id=application_id_for(pet_id, actor.user_id),
            pet_id=pet_id,
            applicant_id=actor.user_id,
            applicant=applicant.to_summary(),
            applicant_info=applicant_info,
        ))

        self.pets.update_status(pet_id, PetStatus.PENDING)
        pet.status = PetStatus.PENDING
        logging.info(f"Application {application.application_id} submitted for pet {pet_id} by user {actor.user_id}")

        application.pet = pet.to_summary()
        return application

    def review_application(self, actor: Actor, application_id: str, new_status: str,
                           review_notes: Optional[str] = None) -> Application:
        """
        Approves or rejects a Pending application.

        Approval adopts the pet and rejects every other Pending application for
        it; rejection returns the pet to Available once nothing is left pending.
        """
        authorize(actor, Permission.APPLICATION_REVIEW, "Only admins can update application status")

        try:
            outcome = ApplicationStatus(new_status)
        except ValueError:
            outcome = None
        if outcome not in REVIEW_OUTCOMES:
            valid = ', '.join(s.value for s in REVIEW_OUTCOMES)
            raise BadRequestError(f"Invalid status. Must be one of: {valid}")

        application = self.applications.find_by_id(application_id)
        if not application:
            raise NotFoundError("Application not found")
        if not application.is_pending:
            raise BadRequestError(f"Application has already been reviewed ({application.status.value})")

        updated = self.applications.update_status(application_id, outcome, actor.user_id, review_notes)
        if not updated:
            raise NotFoundError("Application not found")
        logging.info(f"Application {application_id} {outcome.value.lower()} by admin {actor.user_id}")

        if outcome is ApplicationStatus.APPROVED:
            self._adopt(application.pet_id, application_id)
        else:
            self._sync_pet_status(application.pet_id)

        return self._with_pets([updated])[0]

    def delete_application(self, actor: Actor, application_id: str) -> None:
        """Withdraws a Pending application (applicant or admin) and re-evaluates the pet."""
        application = self.applications.find_by_id(application_id)
        if not application:
            raise NotFoundError("Application not found")
        if not self._can_access(actor, application, Permission.APPLICATION_MANAGE_ANY):
            raise ForbiddenError("Not authorized to delete this application")
        if not application.is_pending:
            raise BadRequestError("Can only delete pending applications")

        self.applications.delete(application_id)
        logging.info(f"Application {application_id} deleted by user {actor.user_id}")
        self._sync_pet_status(application.pet_id)

    # --- pet coordination ---
    def _adopt(self, pet_id: str, approved_application_id: str) -> None:
        if not self.pets.update_status(pet_id, PetStatus.ADOPTED):
            logging.warning(f"Pet {pet_id} no longer exists; approved application {approved_application_id} kept")
        self.applications.reject_pending_siblings(pet_id, approved_application_id, CASCADE_REJECTION_NOTE)

    def _sync_pet_status(self, pet_id: str) -> None:
        """
        Re-derives pet availability after an application left Pending.

        Adopted pets stay Adopted; pets with Pending applications keep their
        status; anything else becomes Available.
        """
        if self.applications.count_for_pet(pet_id, ApplicationStatus.APPROVED) > 0:
            return
        if self.applications.count_for_pet(pet_id, ApplicationStatus.PENDING) > 0:
            return
        if self.pets.update_status(pet_id, PetStatus.AVAILABLE):
            logging.info(f"Pet {pet_id} has no pending applications left; now Available")
        else:
            logging.warning(f"Pet {pet_id} no longer exists; skipped availability update")

    # --- reads ---
    def list_applications(self, actor: Actor, filters: Dict[str, Any],
                          page: int, limit: int) -> Tuple[List[Application], Dict[str, int]]:
        """
        Newest-first page of applications.

        Requesters without APPLICATION_VIEW_ANY only ever see their own; their
        filters narrow within that scope.
        """
        list_query = self.build_query(actor, filters)
        applications, total = self.applications.find_page(list_query, (page - 1) * limit, limit)
        applications = self._with_pets(applications)
        return applications, build_pagination(page, limit, total, len(applications))

    @staticmethod
    def build_query(actor: Actor, filters: Dict[str, Any]) -> ListQuery:
        list_query = ListQuery()
        if not actor.can(Permission.APPLICATION_VIEW_ANY):
            list_query.where('applicant_id', '==', actor.user_id)
        if filters.get('status'):
            list_query.where('status', '==', filters['status'])
        if filters.get('pet_id'):
            list_query.where('pet_id', '==', filters['pet_id'])
        return list_query

    def get_application_by_id(self, actor: Actor, application_id: str) -> Application:
        application = self.applications.find_by_id(application_id)
        if not application:
            raise NotFoundError("Application not found")
        if not self._can_access(actor, application, Permission.APPLICATION_VIEW_ANY):
            raise ForbiddenError("Not authorized to view this application")
        return self._with_pets([application])[0]

    def get_statistics(self, actor: Actor) -> List[Dict[str, Any]]:
        """Number of applications per status."""
        authorize(actor, Permission.STATISTICS_VIEW, "Only admins can view application statistics")
        return [
            {'status': status.value, 'count': self.applications.count([('status', '==', status.value)])}
            for status in ApplicationStatus
        ]

    # --- helpers ---
    @staticmethod
    def _can_access(actor: Actor, application: Application, permission: Permission) -> bool:
        return actor.can(permission) or application.applicant_id == actor.user_id

    def _with_pets(self, applications: List[Application]) -> List[Application]:
        pets = self.pets.find_by_ids([a.pet_id for a in applications])
        for application in applications:
            pet = pets.get(application.pet_id)
            application.pet = pet.to_summary() if pet else None
        return applications
