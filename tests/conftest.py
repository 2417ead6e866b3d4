import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_FIRST_ADMIN"] = "false"
os.environ["SECRET_KEY"] = "test-secret"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from intothewild import auth
from intothewild.database import Base, get_db
from intothewild.models.id_proof import IdType, TrekRequiredIdType, UserIdProof
from intothewild.models.trek import TrekEvent
from intothewild.models.user import User
from intothewild.storage import ObjectStorage, StorageError, get_storage

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeStorage(ObjectStorage):
    """Keeps uploaded objects in memory."""

    def __init__(self):
        self.objects = {}
        self.deleted = []

    def upload(self, path, data, content_type):
        self.objects[path] = (data.read(), content_type)
        return path

    def get_public_url(self, path):
        return f"https://files.test/{path}"

    def delete(self, path):
        self.deleted.append(path)
        self.objects.pop(path, None)


class FailingStorage(FakeStorage):

    def upload(self, path, data, content_type):
        raise StorageError("bucket unreachable")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def failing_storage():
    return FailingStorage()


@pytest.fixture
def client(db, storage):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role="participant", **kwargs):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=kwargs.pop("username", f"trekker{n}"),
            email=kwargs.pop("email", f"trekker{n}@example.com"),
            full_name=kwargs.pop("full_name", f"Trekker {n}"),
            phone=kwargs.pop("phone", f"98450000{n:02d}"),
            role=role,
            **kwargs
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_trek(db):
    def _make_trek(**kwargs):
        values = {
            "name": "Kudremukh Peak",
            "location": "Chikmagalur",
            "start_datetime": datetime.utcnow() + timedelta(days=14),
            "max_participants": 10,
            "government_id_required": False,
            "cost": 2500.0,
        }
        values.update(kwargs)
        trek = TrekEvent(**values)
        db.add(trek)
        db.commit()
        db.refresh(trek)
        return trek

    return _make_trek


@pytest.fixture
def make_id_type(db):
    def _make_id_type(name):
        id_type = IdType(name=name)
        db.add(id_type)
        db.commit()
        db.refresh(id_type)
        return id_type

    return _make_id_type


@pytest.fixture
def require_ids(db):
    def _require_ids(trek, *id_types):
        for id_type in id_types:
            db.add(TrekRequiredIdType(trek_id=trek.id, id_type_id=id_type.id))
        db.commit()

    return _require_ids


@pytest.fixture
def give_proof(db):
    def _give_proof(user, id_type, status="approved"):
        proof = UserIdProof(
            user_id=user.id,
            id_type_id=id_type.id,
            proof_url=f"https://files.test/id-proofs/{user.id}/{id_type.id}.jpg",
            verification_status=status,
        )
        db.add(proof)
        db.commit()
        return proof

    return _give_proof


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", username="admin", email="admin@intothewild.in")


@pytest.fixture
def headers_for():
    def _headers_for(user):
        token = auth.create_access_token(data={"sub": user.email, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers_for


@pytest.fixture
def user_headers(user, headers_for):
    return headers_for(user)


@pytest.fixture
def admin_headers(admin, headers_for):
    return headers_for(admin)
