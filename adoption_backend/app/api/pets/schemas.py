# app/api/pets/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from app.models.pet import PetGender, PetSize, PetSpecies, PetStatus


class PetCreateSchema(Schema):
    """POST /api/pets request body."""
    name = fields.Str(required=True, validate=validate.Length(min=1, max=50, error="Name cannot be more than 50 characters"))
    species = fields.Str(required=True, validate=validate.OneOf([e.value for e in PetSpecies], error="Invalid species"))
    breed = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    age = fields.Int(required=True, validate=validate.Range(min=0, error="Age cannot be negative"))
    gender = fields.Str(required=True, validate=validate.OneOf([e.value for e in PetGender], error="Gender must be Male or Female"))
    size = fields.Str(required=True, validate=validate.OneOf([e.value for e in PetSize], error="Invalid size"))
    color = fields.Str(allow_none=True, validate=validate.Length(max=50))
    description = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="Description cannot be more than 1000 characters"))
    medical_history = fields.Str(allow_none=True, validate=validate.Length(max=500, error="Medical history cannot be more than 500 characters"))
    vaccinated = fields.Bool(load_default=False)
    neutered = fields.Bool(load_default=False)
    photos = fields.List(fields.Str(), load_default=list)
    adoption_fee = fields.Float(load_default=0, validate=validate.Range(min=0, error="Adoption fee cannot be negative"))
    location = fields.Str(allow_none=True, validate=validate.Length(max=100))


class PetUpdateSchema(Schema):
    """PUT /api/pets/<pet_id> partial update. ``status`` is an admin override."""
    name = fields.Str(validate=validate.Length(min=1, max=50))
    species = fields.Str(validate=validate.OneOf([e.value for e in PetSpecies]))
    breed = fields.Str(validate=validate.Length(min=1, max=50))
    age = fields.Int(validate=validate.Range(min=0))
    gender = fields.Str(validate=validate.OneOf([e.value for e in PetGender]))
    size = fields.Str(validate=validate.OneOf([e.value for e in PetSize]))
    color = fields.Str(allow_none=True)
    description = fields.Str(validate=validate.Length(min=1, max=1000))
    medical_history = fields.Str(allow_none=True, validate=validate.Length(max=500))
    vaccinated = fields.Bool()
    neutered = fields.Bool()
    photos = fields.List(fields.Str())
    adoption_fee = fields.Float(validate=validate.Range(min=0))
    location = fields.Str(allow_none=True)
    status = fields.Str(validate=validate.OneOf([e.value for e in PetStatus]))


class PetStatusSchema(Schema):
    """PATCH /api/pets/<pet_id>/status. The value is checked by PetService."""
    status = fields.Str(required=True)


class PetListQuerySchema(Schema):
    """Query string of GET /api/pets."""
    class Meta:
        unknown = EXCLUDE

    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=12, validate=validate.Range(min=1, max=100))
    search = fields.Str()
    species = fields.Str(validate=validate.OneOf([e.value for e in PetSpecies]))
    breed = fields.Str()
    gender = fields.Str(validate=validate.OneOf([e.value for e in PetGender]))
    size = fields.Str(validate=validate.OneOf([e.value for e in PetSize]))
    min_age = fields.Int(validate=validate.Range(min=0))
    max_age = fields.Int(validate=validate.Range(min=0))
    status = fields.Str(validate=validate.OneOf([e.value for e in PetStatus]))
    admin_view = fields.Bool(load_default=False)


class PetResponseSchema(Schema):
    pet_id = fields.Str(dump_only=True)
    name = fields.Str()
    species = fields.Str()
    breed = fields.Str()
    age = fields.Int()
    gender = fields.Str()
    size = fields.Str()
    color = fields.Str(allow_none=True)
    description = fields.Str()
    medical_history = fields.Str(allow_none=True)
    vaccinated = fields.Bool()
    neutered = fields.Bool()
    photos = fields.List(fields.Str())
    status = fields.Str()
    adoption_fee = fields.Float()
    location = fields.Str(allow_none=True)
    added_by = fields.Str()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class PetFilterOptionsSchema(Schema):
    species = fields.List(fields.Str())
    breeds = fields.List(fields.Str())


class PetStatisticsSchema(Schema):
    status_stats = fields.List(fields.Dict())
    species_stats = fields.List(fields.Dict())
