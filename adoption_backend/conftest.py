# conftest.py
"""
Shared pytest fixtures.

Tests run against an in-memory stand-in for the Firestore client and the
Storage bucket, so no Firebase project or credentials are needed. The fake
covers the subset of the client API the repositories use.
"""
import copy
import itertools
import uuid

import pytest
from firebase_admin import firestore
from flask_jwt_extended import create_access_token, create_refresh_token
from google.api_core.exceptions import AlreadyExists, NotFound

from app import create_app
from app.core.security import Actor, Role
from app.models.pet import Pet, PetGender, PetSize, PetSpecies, PetStatus
from app.models.user import User
from app.services.storage_service import StorageService
from app.utils.password_hash import hash_password

TEST_PASSWORD = 'password123'


# =====================================================================================
# In-memory Firestore
# =====================================================================================
def _compare(op, actual, expected):
    try:
        if op == '==':
            return actual == expected
        if op == '!=':
            return actual != expected
        if op == '<':
            return actual is not None and actual < expected
        if op == '<=':
            return actual is not None and actual <= expected
        if op == '>':
            return actual is not None and actual > expected
        if op == '>=':
            return actual is not None and actual >= expected
        if op == 'in':
            return actual in expected
        if op == 'not-in':
            return actual not in expected
        if op == 'array-contains':
            return expected in (actual or [])
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator in fake Firestore: {op}")


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self._collection.docs

    def get(self):
        return FakeSnapshot(self, self._docs.get(self.id))

    def set(self, data):
        self._docs[self.id] = copy.deepcopy(data)

    def create(self, data):
        if self.id in self._docs:
            raise AlreadyExists(f"Document already exists: {self._collection.name}/{self.id}")
        self.set(data)

    def update(self, data):
        if self.id not in self._docs:
            raise NotFound(f"No document to update: {self._collection.name}/{self.id}")
        doc = self._docs[self.id]
        for key, value in data.items():
            if isinstance(value, firestore.ArrayUnion):
                current = list(doc.get(key) or [])
                current.extend(v for v in value.values if v not in current)
                doc[key] = current
            else:
                doc[key] = copy.deepcopy(value)

    def delete(self):
        self._docs.pop(self.id, None)


class FakeAggregation:
    def __init__(self, value):
        self.value = value


class FakeCountQuery:
    def __init__(self, query):
        self._query = query

    def get(self):
        return [[FakeAggregation(len(list(self._query.stream())))]]


class FakeQuery:
    def __init__(self, collection, filters=(), orders=(), offset=0, limit=None):
        self._collection = collection
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._offset = offset
        self._limit = limit

    def _copy(self, **changes):
        state = dict(filters=self._filters, orders=self._orders, offset=self._offset, limit=self._limit)
        state.update(changes)
        return FakeQuery(self._collection, **state)

    def where(self, field_path, op_string, value):
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path, direction=firestore.Query.ASCENDING):
        return self._copy(orders=self._orders + ((field_path, direction),))

    def offset(self, num_to_skip):
        return self._copy(offset=num_to_skip)

    def limit(self, count):
        return self._copy(limit=count)

    def select(self, field_paths):
        return self

    def count(self):
        return FakeCountQuery(self._copy(offset=0, limit=None))

    def stream(self):
        matched = [
            (doc_id, data) for doc_id, data in self._collection.docs.items()
            if all(_compare(op, data.get(f), v) for f, op, v in self._filters)
        ]
        for field_path, direction in reversed(self._orders):
            matched = [item for item in matched if item[1].get(field_path) is not None]
            matched.sort(key=lambda item: item[1][field_path],
                         reverse=direction == firestore.Query.DESCENDING)
        end = None if self._limit is None else self._offset + self._limit
        for doc_id, data in matched[self._offset:end]:
            yield FakeSnapshot(self._collection.document(doc_id), data)

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def __init__(self, name):
        self.name = name
        self.docs = {}
        super().__init__(self)

    def document(self, document_id=None):
        # the real client splits ids on "/" and refuses a collection path here
        if document_id is not None and "/" in document_id:
            raise ValueError("A document must have an even number of path elements")
        return FakeDocumentReference(self, document_id or uuid.uuid4().hex)


class FakeWriteBatch:
    def __init__(self, db):
        self._db = db
        self._writes = []

    def update(self, reference, field_updates):
        self._writes.append(lambda: reference.update(field_updates))

    def set(self, reference, document_data):
        self._writes.append(lambda: reference.set(document_data))

    def delete(self, reference):
        self._writes.append(reference.delete)

    def commit(self):
        for write in self._writes:
            write()
        self._writes = []
        self._db.batches_committed += 1


class FakeFirestore:
    def __init__(self):
        self._collections = {}
        self.batches_committed = 0

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def batch(self):
        return FakeWriteBatch(self)

    def get_all(self, references):
        return [ref.get() for ref in references]


# =====================================================================================
# In-memory Storage bucket
# =====================================================================================
class FakeBlob:
    def __init__(self, bucket, name):
        self._bucket = bucket
        self.name = name
        self.content_type = None
        self.public = False

    def upload_from_file(self, file_obj, content_type=None):
        self.content_type = content_type
        self._bucket.files[self.name] = file_obj.read()
        self._bucket.blobs[self.name] = self

    def exists(self):
        return self.name in self._bucket.files

    def make_public(self):
        self.public = True

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self._bucket.name}/{self.name}"


class FakeBucket:
    def __init__(self, name='test-bucket'):
        self.name = name
        self.files = {}
        self.blobs = {}

    def blob(self, blob_name):
        return self.blobs.get(blob_name) or FakeBlob(self, blob_name)


# =====================================================================================
# Fixtures
# =====================================================================================
@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def fake_bucket():
    return FakeBucket()


@pytest.fixture
def app(fake_db, fake_bucket):
    storage_service = StorageService()
    storage_service.bucket = fake_bucket
    app = create_app('testing', db=fake_db, storage_service=storage_service)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.services


@pytest.fixture
def workflow(services):
    return services['applications']


@pytest.fixture
def pet_service(services):
    return services['pets']


@pytest.fixture(scope='session')
def password_hash():
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def make_user(services, password_hash):
    """Stores a user directly (bypassing registration) and returns it."""
    counter = itertools.count(1)

    def _make_user(role=Role.USER, name=None, email=None, **overrides):
        n = next(counter)
        user = User(
            user_id=str(uuid.uuid4()),
            name=name or f"{role.value.title()} {n}",
            email=email or f"{role.value}{n}@example.com",
            password_hash=password_hash,
            role=role,
            **overrides
        )
        return services['auth'].users.create(user)
    return _make_user


@pytest.fixture
def make_pet(services):
    """Stores a pet directly and returns it. Keyword arguments override the defaults."""
    counter = itertools.count(1)

    def _make_pet(**overrides):
        n = next(counter)
        data = dict(
            pet_id=str(uuid.uuid4()),
            name=f"Pet {n}",
            species=PetSpecies.DOG,
            breed='Labrador',
            age=3,
            gender=PetGender.MALE,
            size=PetSize.LARGE,
            description='Friendly and house-trained.',
            added_by='seed-admin',
            status=PetStatus.AVAILABLE,
        )
        data.update(overrides)
        return services['pets'].pets.create(Pet(**data))
    return _make_pet


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, name='Admin', email='admin@example.com')


@pytest.fixture
def alice(make_user):
    return make_user(name='Alice', email='alice@example.com')


@pytest.fixture
def bob(make_user):
    return make_user(name='Bob', email='bob@example.com')


def actor_of(user):
    return Actor(user_id=user.user_id, role=user.role)


def auth_header(user, refresh=False):
    """Authorization header for ``user``; must be called inside an app context."""
    claims = {'role': user.role.value}
    make_token = create_refresh_token if refresh else create_access_token
    token = make_token(identity=user.user_id, additional_claims=claims)
    return {'Authorization': f'Bearer {token}'}


APPLICANT_INFO = {
    'phone': '555-0100',
    'address': '1 Main St',
    'housing_type': 'House',
    'has_yard': True,
    'has_pets': False,
    'experience': 'Grew up with dogs',
    'reason': 'Looking for a running companion',
}


def stored_pet_status(services, pet_id):
    return services['pets'].pets.find_by_id(pet_id).status


