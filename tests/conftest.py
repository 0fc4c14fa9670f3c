"""Test fixtures for the medication reminder backend."""
import itertools
import os

import pytest

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from medreminder import create_app
from medreminder.errors import AuthProviderError, StoreError
from medreminder.services.identity_service import AuthUser


class FakeStore:
    """In-memory document store with the same surface as ``FirestoreStore``.

    Subscriptions fire synchronously: once on registration and again after
    every write touching the subscribed collection.
    """

    def __init__(self):
        self.collections = {}
        self._ids = itertools.count(1)
        self._subscriptions = {}
        self._sub_ids = itertools.count(1)
        self.fail = False
        self.calls = []

    def _check(self, op, collection):
        self.calls.append((op, collection))
        if self.fail:
            raise StoreError(f"{op} {collection} unavailable")

    def _rows(self, collection, filters):
        docs = self.collections.get(collection, {})
        return [
            (doc_id, dict(data))
            for doc_id, data in docs.items()
            if all(data.get(k) == v for k, v in (filters or {}).items())
        ]

    def _publish(self, collection):
        for sub_collection, filters, callback in list(self._subscriptions.values()):
            if sub_collection == collection:
                callback(self._rows(collection, filters))

    def find(self, collection, filters):
        self._check("find", collection)
        return self._rows(collection, filters)

    def get(self, collection, doc_id):
        self._check("get", collection)
        data = self.collections.get(collection, {}).get(doc_id)
        return dict(data) if data is not None else None

    def add(self, collection, data):
        self._check("add", collection)
        doc_id = f"{collection[:3]}-{next(self._ids)}"
        self.collections.setdefault(collection, {})[doc_id] = dict(data)
        self._publish(collection)
        return doc_id

    def update(self, collection, doc_id, data):
        self._check("update", collection)
        doc = self.collections[collection][doc_id]
        for key, value in data.items():
            if value is None:
                doc.pop(key, None)
            else:
                doc[key] = value
        self._publish(collection)

    def delete(self, collection, doc_id):
        self._check("delete", collection)
        self.collections.get(collection, {}).pop(doc_id, None)
        self._publish(collection)

    def delete_many(self, collection, doc_ids):
        self._check("delete_many", collection)
        doc_ids = list(doc_ids)
        for doc_id in doc_ids:
            self.collections.get(collection, {}).pop(doc_id, None)
        self._publish(collection)
        return len(doc_ids)

    def subscribe(self, collection, filters, callback):
        self._check("subscribe", collection)
        sub_id = next(self._sub_ids)
        self._subscriptions[sub_id] = (collection, dict(filters), callback)
        callback(self._rows(collection, filters))

        def unsubscribe():
            self._subscriptions.pop(sub_id, None)

        return unsubscribe

    @property
    def subscription_count(self):
        return len(self._subscriptions)

    def seed(self, collection, doc_id, data):
        self.collections.setdefault(collection, {})[doc_id] = dict(data)
        self._publish(collection)


class FakeIdentity:
    """Email/password accounts kept in a dict."""

    def __init__(self):
        self.users = {}
        self.error = None
        self.calls = 0

    def sign_up(self, email, password, display_name):
        self.calls += 1
        if self.error:
            raise self.error
        if email in self.users:
            raise AuthProviderError("auth/email-already-in-use", "EMAIL_EXISTS")
        uid = f"uid-{len(self.users) + 1}"
        self.users[email] = {"uid": uid, "password": password, "name": display_name}
        return AuthUser(uid=uid, email=email, display_name=display_name, id_token=f"token-{uid}")

    def sign_in(self, email, password):
        self.calls += 1
        if self.error:
            raise self.error
        user = self.users.get(email)
        if not user or user["password"] != password:
            raise AuthProviderError("auth/invalid-credential", "INVALID_LOGIN_CREDENTIALS")
        return AuthUser(uid=user["uid"], email=email, display_name=user["name"], id_token=f"token-{user['uid']}")

    def verify_token(self, id_token):
        for email, user in self.users.items():
            if id_token == f"token-{user['uid']}":
                return AuthUser(uid=user["uid"], email=email, display_name=user["name"], id_token=id_token)
        return None


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def identity():
    return FakeIdentity()


@pytest.fixture()
def app(store, identity):
    app = create_app(
        {"TESTING": True, "MESSAGES_LOCALE": "en", "SNAPSHOT_WAIT_SECONDS": 0.1, "STREAM_REFRESH_SECONDS": 0.05},
        store=store,
        identity=identity,
    )
    yield app
    app.extensions["medreminder.sessions"].close_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers(client, identity):
    """Register a user and return bearer headers for them."""
    response = client.post(
        "/api/v1/auth/signup",
        json={
            "name": "Ayşe Yılmaz",
            "email": "ayse@example.com",
            "password": "secret1",
            "confirmPassword": "secret1",
        },
    )
    assert response.status_code == 201
    token = response.get_json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
