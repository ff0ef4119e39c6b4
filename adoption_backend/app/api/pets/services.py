# app/api/pets/services.py
import logging
import uuid
from typing import Dict, Any, List, Optional, Tuple

from werkzeug.datastructures import FileStorage

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.security import Actor, Permission, authorize
from app.models.application import ApplicationStatus
from app.models.pet import Pet, PetGender, PetSize, PetSpecies, PetStatus
from app.repositories import ApplicationRepository, PetRepository, ListQuery
from app.services.storage_service import StorageService
from app.utils.api_response import build_pagination


class PetService:
    """Pet catalog: listing/filtering, admin maintenance, photos and statistics."""
    def __init__(self,
                 pet_repository: PetRepository,
                 application_repository: ApplicationRepository,
                 storage_service: StorageService,
                 photo_extensions=('jpeg', 'jpg', 'png', 'gif', 'webp'),
                 photo_max_bytes: int = 5 * 1024 * 1024,
                 photo_max_files: int = 10):
        self.pets = pet_repository
        self.applications = application_repository
        self.storage_service = storage_service
        self.photo_extensions = tuple(photo_extensions)
        self.photo_max_bytes = photo_max_bytes
        self.photo_max_files = photo_max_files
        logging.info("PetService initialized with dependencies.")

    # --- listing ---
    @staticmethod
    def build_query(params: Dict[str, Any], actor: Optional[Actor]) -> ListQuery:
        """
        Translates listing filters into a store predicate.

        Without an explicit status only Available pets are listed, unless an
        admin asks for every status with ``admin_view``.
        """
        list_query = ListQuery()

        if params.get('search'):
            list_query.matching(params['search'], 'name', 'breed')
        if params.get('breed'):
            list_query.matching(params['breed'], 'breed')

        for key in ('species', 'gender', 'size'):
            if params.get(key):
                list_query.where(key, '==', params[key])

        min_age, max_age = params.get('min_age'), params.get('max_age')
        if min_age is not None and max_age is not None and min_age > max_age:
            raise BadRequestError("min_age cannot be greater than max_age")
        if min_age is not None:
            list_query.where('age', '>=', min_age)
        if max_age is not None:
            list_query.where('age', '<=', max_age)

        if params.get('status'):
            list_query.where('status', '==', params['status'])
        elif not (params.get('admin_view') and actor and actor.can(Permission.PET_VIEW_ALL)):
            list_query.where('status', '==', PetStatus.AVAILABLE.value)

        return list_query

    def list_pets(self, params: Dict[str, Any], actor: Optional[Actor],
                  page: int, limit: int) -> Tuple[List[Pet], Dict[str, int]]:
        list_query = self.build_query(params, actor)
        pets, total = self.pets.find_page(list_query, (page - 1) * limit, limit)
        return pets, build_pagination(page, limit, total, len(pets))

    def get_pet(self, pet_id: str) -> Pet:
        pet = self.pets.find_by_id(pet_id)
        if not pet:
            raise NotFoundError("Pet not found")
        return pet

    def get_filter_options(self) -> Dict[str, List[str]]:
        """Distinct species and breeds among listed pets, for search forms."""
        available = [('status', '==', PetStatus.AVAILABLE.value)]
        return {
            'species': self.pets.distinct('species', available),
            'breeds': self.pets.distinct('breed', available),
        }

    # --- admin maintenance ---
    def create_pet(self, actor: Actor, pet_data: Dict[str, Any]) -> Pet:
        authorize(actor, Permission.PET_MANAGE, "Only admins can add pets")
        new_pet = Pet(
            pet_id=str(uuid.uuid4()),
            name=pet_data['name'],
            species=PetSpecies(pet_data['species']),
            breed=pet_data['breed'],
            age=pet_data['age'],
            gender=PetGender(pet_data['gender']),
            size=PetSize(pet_data['size']),
            description=pet_data['description'],
            added_by=actor.user_id,
            color=pet_data.get('color'),
            medical_history=pet_data.get('medical_history'),
            vaccinated=pet_data.get('vaccinated', False),
            neutered=pet_data.get('neutered', False),
            photos=pet_data.get('photos') or [],
            adoption_fee=pet_data.get('adoption_fee', 0),
            location=pet_data.get('location'),
        )
        return self.pets.create(new_pet)

    def update_pet(self, actor: Actor, pet_id: str, update_data: Dict[str, Any]) -> Pet:
        """Partial update of validated fields. A ``status`` here is an admin override."""
        authorize(actor, Permission.PET_MANAGE, "Only admins can update pets")
        if not update_data:
            raise BadRequestError("No fields provided to update")
        if 'status' in update_data:
            self._log_override(pet_id, update_data['status'], actor)

        updated_pet = self.pets.update(pet_id, update_data)
        if not updated_pet:
            raise NotFoundError("Pet not found")
        logging.info(f"Pet {pet_id} updated with fields: {list(update_data.keys())}")
        return updated_pet

    def update_pet_status(self, actor: Actor, pet_id: str, status: str) -> Pet:
        """Admin override of the pet status; applications are left untouched."""
        authorize(actor, Permission.PET_MANAGE, "Only admins can update pet status")
        try:
            new_status = PetStatus(status)
        except ValueError:
            valid = ', '.join(s.value for s in PetStatus)
            raise BadRequestError(f"Invalid status. Must be one of: {valid}")

        self._log_override(pet_id, new_status.value, actor)
        if not self.pets.update_status(pet_id, new_status):
            raise NotFoundError("Pet not found")
        return self.get_pet(pet_id)

    def delete_pet(self, actor: Actor, pet_id: str) -> None:
        """Deletes the pet. Applications referencing it are not touched."""
        authorize(actor, Permission.PET_MANAGE, "Only admins can delete pets")
        if not self.pets.find_by_id(pet_id):
            raise NotFoundError("Pet not found")

        open_applications = self.applications.count([
            ('pet_id', '==', pet_id),
            ('status', 'in', [ApplicationStatus.PENDING.value, ApplicationStatus.APPROVED.value]),
        ])
        if open_applications:
            logging.warning(f"Deleting pet {pet_id} still referenced by {open_applications} pending/approved application(s)")

        self.pets.delete(pet_id)
        logging.info(f"Pet {pet_id} deleted by admin {actor.user_id}")

    def _log_override(self, pet_id: str, status: str, actor: Actor) -> None:
        logging.warning(f"Admin {actor.user_id} manually set pet {pet_id} status to {status}")

    # --- photos ---
    def add_photos(self, actor: Actor, pet_id: str, files: List[FileStorage]) -> Pet:
        """Validates and uploads 1..N image files, then appends their URLs to the pet."""
        authorize(actor, Permission.PET_MANAGE, "Only admins can upload pet photos")
        files = [f for f in files if f and f.filename]
        if not files:
            raise BadRequestError("Please upload at least one photo")
        if len(files) > self.photo_max_files:
            raise BadRequestError(f"File upload error: at most {self.photo_max_files} photos per request")
        for f in files:
            self._validate_photo(f)

        self.get_pet(pet_id)

        photo_urls = []
        for f in files:
            f.stream.seek(0)
            photo_urls.append(self.storage_service.upload_pet_photo(pet_id, f.stream, f.filename, f.mimetype))

        updated_pet = self.pets.add_photos(pet_id, photo_urls)
        if not updated_pet:
            raise NotFoundError("Pet not found")
        logging.info(f"Uploaded {len(photo_urls)} photo(s) for pet {pet_id}")
        return updated_pet

    def _validate_photo(self, f: FileStorage) -> None:
        extension = f.filename.rsplit('.', 1)[-1].lower() if '.' in f.filename else ''
        mimetype = (f.mimetype or '').lower()
        if extension not in self.photo_extensions or not mimetype.startswith('image/') \
                or mimetype.split('/', 1)[1] not in self.photo_extensions:
            raise BadRequestError(f"Images only! ({', '.join(self.photo_extensions)})")

        f.stream.seek(0, 2)
        size = f.stream.tell()
        f.stream.seek(0)
        if size > self.photo_max_bytes:
            raise BadRequestError(f"File upload error: {f.filename} exceeds {self.photo_max_bytes // (1024 * 1024)}MB")

    # --- statistics ---
    def get_statistics(self, actor: Actor) -> Dict[str, List[Dict[str, Any]]]:
        """Pet counts by status and by species (species sorted by count, descending)."""
        authorize(actor, Permission.STATISTICS_VIEW, "Only admins can view pet statistics")
        status_stats = [
            {'status': status.value, 'count': self.pets.count([('status', '==', status.value)])}
            for status in PetStatus
        ]
        species_stats = sorted(
            ({'species': species.value, 'count': self.pets.count([('species', '==', species.value)])}
             for species in PetSpecies),
            key=lambda s: s['count'],
            reverse=True
        )
        return {'status_stats': status_stats, 'species_stats': species_stats}
