from types import SimpleNamespace
from typing import Callable, Iterator, List, Optional

import pytest
from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from restdoc import RestAPI, RestDocument, RestResource, create_token

JWT_SECRET_KEY = "restdoc-test-secret-key-0123456789"

db = SQLAlchemy()


class Pet(RestDocument, db.Model):
    """
    description: Pet of an owner
    """

    __tablename__ = "pets"
    exclude_attrs = ["chip_code"]

    name = db.Column(db.String, default="")
    age = db.Column(db.Integer)
    chip_code = db.Column(db.String, default="")


class Owner(RestDocument, db.Model):
    """
    description: Pet owner, the password and the refresh token are never sent
    """

    __tablename__ = "owners"
    references = {"pets": "Pet", "best_friend": Pet}

    name = db.Column(db.String, default="")
    password = db.Column(db.String)
    refresh_token = db.Column(db.String, default="")
    pets = db.Column(db.JSON)
    best_friend = db.Column(db.JSON)

    def rest_filter(self, options=None):
        result = super().rest_filter(options)
        result.pop("password", None)
        result.pop("refresh_token", None)
        return result


class Person(RestDocument, db.Model):
    """
    description: Person with friends, a document referencing its own kind
    """

    __tablename__ = "persons"
    references = {"friends": "Person"}

    name = db.Column(db.String, default="")
    friends = db.Column(db.JSON)


class RecordingDocument:
    """
    Document double: records the storage calls, stores nothing
    """

    def __init__(self, found: Optional[List[object]] = None) -> None:
        self.calls: List[str] = []
        self.found = found or []

    def find(self, filter=None, options=None):
        self.calls.append("find")
        return self.found

    def find_one(self, filter=None, options=None):
        self.calls.append("find_one")
        return None

    def create(self, fields=None):
        self.calls.append("create")
        calls = self.calls
        instance = SimpleNamespace(id="recorded", rest_filter=lambda options=None: {"id": "recorded"})
        instance.save = lambda: calls.append("save") or instance
        return instance

    def find_one_and_update(self, filter=None, fields=None):
        self.calls.append("find_one_and_update")
        return None

    def delete_one(self, filter=None):
        self.calls.append("delete_one")
        return 0


def default_resources() -> List[RestResource]:
    owners = RestResource(
        "owners",
        Owner,
        {
            "sub_resources": [
                {"name": "pets", "property": "pets", "document": Pet},
                {"name": "best_friend", "property": "best_friend", "document": Pet},
            ]
        },
    )
    pets = RestResource("pets", Pet)
    return [owners, pets]


@pytest.fixture
def make_app() -> Iterator[Callable[..., Flask]]:
    """
    Factory fixture: creates an app exposing the resources returned by `resources_factory`,
    the resources are created in the app context so they use the app config
    """
    contexts = []

    def _make_app(resources_factory: Callable[[], List[RestResource]] = default_resources, **config) -> Flask:
        app = Flask("restdoc_test")
        app.config.update(
            SQLALCHEMY_DATABASE_URI="sqlite://",
            SQLALCHEMY_TRACK_MODIFICATIONS=False,
            JWT_SECRET_KEY=JWT_SECRET_KEY,
            TESTING=True,
        )
        app.config.update(config)
        db.init_app(app)
        ctx = app.app_context()
        ctx.push()
        contexts.append(ctx)
        db.create_all()
        api = RestAPI(app, app_db=db, port=None)
        api.expose(*resources_factory())
        return app

    yield _make_app

    for ctx in reversed(contexts):
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture
def app(make_app: Callable[..., Flask]) -> Flask:
    return make_app()


@pytest.fixture
def client(app: Flask):
    return app.test_client()


def auth_headers(identity: str = "alice", roles: tuple = ("USER",)) -> dict:
    """
    must be called in an app context
    """
    return {"Authorization": f"Bearer {create_token(identity, roles)}"}
