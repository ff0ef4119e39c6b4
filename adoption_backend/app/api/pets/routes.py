# app/api/pets/routes.py
from flask import Blueprint, request, current_app

from app.core.security import Permission, permission_required, current_actor
from app.utils.api_response import success_response, created_response, paginated_response
from .schemas import (
    PetCreateSchema,
    PetUpdateSchema,
    PetStatusSchema,
    PetListQuerySchema,
    PetResponseSchema,
    PetFilterOptionsSchema,
    PetStatisticsSchema
)

pets_bp = Blueprint('pets_bp', __name__)


def _dump(pet):
    return PetResponseSchema().dump(pet.to_dict())


@pets_bp.route('', methods=['GET'])
@permission_required(optional=True)
def list_pets():
    """[Public] Paginated pet listing with search and filters."""
    pet_service = current_app.services['pets']
    params = PetListQuerySchema().load(request.args.to_dict())
    pets, pagination = pet_service.list_pets(params, current_actor(), params['page'], params['limit'])
    return paginated_response('Pets retrieved successfully', [_dump(p) for p in pets], pagination)


@pets_bp.route('/filter-options', methods=['GET'])
def get_filter_options():
    """[Public] Species and breeds present among available pets."""
    pet_service = current_app.services['pets']
    options = pet_service.get_filter_options()
    return success_response('Filter options retrieved successfully', PetFilterOptionsSchema().dump(options))


@pets_bp.route('/admin/stats', methods=['GET'])
@permission_required(Permission.STATISTICS_VIEW)
def get_pet_stats():
    """[Admin] Pet counts by status and species."""
    pet_service = current_app.services['pets']
    stats = pet_service.get_statistics(current_actor())
    return success_response('Statistics retrieved successfully', PetStatisticsSchema().dump(stats))


@pets_bp.route('/<string:pet_id>', methods=['GET'])
def get_pet(pet_id: str):
    """[Public] Full pet profile."""
    pet_service = current_app.services['pets']
    return success_response('Pet retrieved successfully', _dump(pet_service.get_pet(pet_id)))


@pets_bp.route('', methods=['POST'])
@permission_required(Permission.PET_MANAGE)
def create_pet():
    """[Admin] Add a pet to the catalog."""
    pet_service = current_app.services['pets']
    validated_data = PetCreateSchema().load(request.get_json(silent=True) or {})
    new_pet = pet_service.create_pet(current_actor(), validated_data)
    return created_response('Pet created successfully', _dump(new_pet))


@pets_bp.route('/<string:pet_id>', methods=['PUT'])
@permission_required(Permission.PET_MANAGE)
def update_pet(pet_id: str):
    """[Admin] Partial update of a pet."""
    pet_service = current_app.services['pets']
    update_data = PetUpdateSchema().load(request.get_json(silent=True) or {})
    updated_pet = pet_service.update_pet(current_actor(), pet_id, update_data)
    return success_response('Pet updated successfully', _dump(updated_pet))


@pets_bp.route('/<string:pet_id>/status', methods=['PATCH'])
@permission_required(Permission.PET_MANAGE)
def update_pet_status(pet_id: str):
    """[Admin] Manually override a pet's status."""
    pet_service = current_app.services['pets']
    data = PetStatusSchema().load(request.get_json(silent=True) or {})
    updated_pet = pet_service.update_pet_status(current_actor(), pet_id, data['status'])
    return success_response('Pet status updated successfully', _dump(updated_pet))


@pets_bp.route('/<string:pet_id>', methods=['DELETE'])
@permission_required(Permission.PET_MANAGE)
def delete_pet(pet_id: str):
    pet_service = current_app.services['pets']
    pet_service.delete_pet(current_actor(), pet_id)
    return success_response('Pet deleted successfully')


@pets_bp.route('/<string:pet_id>/photos', methods=['POST'])
@permission_required(Permission.PET_MANAGE)
def upload_photos(pet_id: str):
    """[Admin] Upload photos (multipart field 'photos', repeatable)."""
    pet_service = current_app.services['pets']
    # browsers send an empty part for an untouched file input
    files = [f for f in request.files.getlist('photos') if f and f.filename]
    updated_pet = pet_service.add_photos(current_actor(), pet_id, files)
    return success_response(f"Successfully uploaded {len(files)} image(s)", _dump(updated_pet))
