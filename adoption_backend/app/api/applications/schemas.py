# app/api/applications/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from app.models.application import ApplicationStatus, HousingType


class ApplicantInfoSchema(Schema):
    """Details the applicant supplies about their home and experience."""
    phone = fields.Str(required=True, validate=validate.Length(min=1, max=30),
                       error_messages={"required": "Phone number is required"})
    address = fields.Str(required=True, validate=validate.Length(min=1, max=300),
                         error_messages={"required": "Address is required"})
    housing_type = fields.Str(required=True, validate=validate.OneOf([e.value for e in HousingType],
                                                                      error="Invalid housing type"))
    has_yard = fields.Bool(load_default=False)
    has_pets = fields.Bool(load_default=False)
    pets_description = fields.Str(allow_none=True, validate=validate.Length(max=500))
    experience = fields.Str(required=True, validate=validate.Length(min=1, max=1000),
                            error_messages={"required": "Pet experience is required"})
    reason = fields.Str(required=True, validate=validate.Length(min=1, max=500, error="Reason cannot be more than 500 characters"),
                        error_messages={"required": "Reason for adoption is required"})


class ApplicationCreateSchema(Schema):
    """POST /api/applications request body."""
    pet_id = fields.Str(required=True,
                        validate=[validate.Length(min=1, max=1500),
                                  validate.Regexp(r"^(?!__.*__$)(?!\.{1,2}$)[^/]+$", error="Invalid pet ID")],
                        error_messages={"required": "Pet ID is required"})
    applicant_info = fields.Nested(ApplicantInfoSchema, required=True)


class ApplicationReviewSchema(Schema):
    """PUT /api/applications/<id>/status request body. The outcome itself is checked by the workflow."""
    status = fields.Str(required=True)
    review_notes = fields.Str(allow_none=True, validate=validate.Length(max=1000))


class ApplicationListQuerySchema(Schema):
    """Query string of GET /api/applications."""
    class Meta:
        unknown = EXCLUDE

    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=100))
    status = fields.Str(validate=validate.OneOf([s.value for s in ApplicationStatus]))
    pet_id = fields.Str()


class ApplicantSummarySchema(Schema):
    user_id = fields.Str()
    name = fields.Str()
    email = fields.Str()


class PetSummarySchema(Schema):
    pet_id = fields.Str()
    name = fields.Str()
    species = fields.Str()
    breed = fields.Str()
    status = fields.Str()
    photos = fields.List(fields.Str())


class ApplicationResponseSchema(Schema):
    application_id = fields.Str(dump_only=True)
    pet_id = fields.Str()
    pet = fields.Nested(PetSummarySchema, allow_none=True)
    applicant_id = fields.Str()
    applicant = fields.Nested(ApplicantSummarySchema)
    applicant_info = fields.Nested(ApplicantInfoSchema)
    status = fields.Str()
    reviewed_by = fields.Str(allow_none=True)
    reviewed_at = fields.DateTime(allow_none=True)
    review_notes = fields.Str(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class StatusCountSchema(Schema):
    status = fields.Str()
    count = fields.Int()
