# app/api/applications/routes.py
from flask import Blueprint, request, current_app

from app.core.security import Permission, permission_required, current_actor
from app.utils.api_response import success_response, created_response, paginated_response
from .schemas import (
    ApplicationCreateSchema,
    ApplicationReviewSchema,
    ApplicationListQuerySchema,
    ApplicationResponseSchema,
    StatusCountSchema
)

applications_bp = Blueprint('applications_bp', __name__)


def _dump(application):
    return ApplicationResponseSchema().dump(application.to_response())


@applications_bp.route('', methods=['POST'])
@permission_required(Permission.APPLICATION_SUBMIT)
def submit_application():
    """Submit an adoption application for a pet."""
    workflow = current_app.services['applications']
    data = ApplicationCreateSchema().load(request.get_json(silent=True) or {})
    application = workflow.submit_application(current_actor(), data['pet_id'], data['applicant_info'])
    return created_response('Application submitted successfully', _dump(application))


@applications_bp.route('', methods=['GET'])
@permission_required()
def list_applications():
    """The requester's own applications, or every application for admins."""
    workflow = current_app.services['applications']
    params = ApplicationListQuerySchema().load(request.args.to_dict())
    applications, pagination = workflow.list_applications(
        current_actor(),
        {'status': params.get('status'), 'pet_id': params.get('pet_id')},
        params['page'],
        params['limit']
    )
    return paginated_response(
        'Applications retrieved successfully',
        [_dump(a) for a in applications],
        pagination
    )


@applications_bp.route('/stats', methods=['GET'])
@permission_required(Permission.STATISTICS_VIEW)
def get_application_stats():
    """[Admin] Number of applications per status."""
    workflow = current_app.services['applications']
    stats = workflow.get_statistics(current_actor())
    return success_response('Statistics retrieved successfully', StatusCountSchema(many=True).dump(stats))


@applications_bp.route('/<string:application_id>', methods=['GET'])
@permission_required()
def get_application(application_id: str):
    workflow = current_app.services['applications']
    application = workflow.get_application_by_id(current_actor(), application_id)
    return success_response('Application retrieved successfully', _dump(application))


@applications_bp.route('/<string:application_id>/status', methods=['PUT', 'PATCH'])
@permission_required(Permission.APPLICATION_REVIEW)
def review_application(application_id: str):
    """[Admin] Approve or reject a pending application."""
    workflow = current_app.services['applications']
    data = ApplicationReviewSchema().load(request.get_json(silent=True) or {})
    application = workflow.review_application(
        current_actor(), application_id, data['status'], data.get('review_notes')
    )
    return success_response('Application status updated successfully', _dump(application))


@applications_bp.route('/<string:application_id>', methods=['DELETE'])
@permission_required()
def delete_application(application_id: str):
    """Withdraw a pending application (the applicant or an admin)."""
    workflow = current_app.services['applications']
    workflow.delete_application(current_actor(), application_id)
    return success_response('Application deleted successfully')
