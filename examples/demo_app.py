#!/usr/bin/env python
#
# This is a demo application to demonstrate the functionality of the restdoc REST API with JWT auth
#
# It can be ran standalone like this:
# python demo_app.py [Listener-IP]
#
# This will run the example on http://Listener-Ip:5000
#
# - A database is created and an admin user is added
# - The users resource is exposed on /api/users, the books of a user on /api/users/<id>/books
# - creating, updating and deleting users requires the ADMIN role
# - swagger2 documentation is generated, the swagger ui is served on /api/docs
#
"""
Example invocation:

t@TEMP:~$ token=$(curl -X POST localhost:5000/login -d '{ "login" : "admin", "password" : "admin" }' \
          --header "Content-Type: application/json" | jq .access_token -r)
t@TEMP:~$ curl localhost:5000/api/users -H "Authorization: Bearer $token"
[
  {
    "books": [],
    "id": "ac608ebb-1b67-48d3-a9a0-1fba75a78227",
    "login": "admin",
    "roles": ["USER", "ADMIN"],
    "settings": {"theme": "theme-default"}
  }
]
"""
import sys
from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import validates
from werkzeug.security import check_password_hash, generate_password_hash
from restdoc import RestAPI, RestDocument, RestResource, create_token

db = SQLAlchemy()

class Book(RestDocument, db.Model):
    """
    description: Book of a user
    """

    __tablename__ = "books"
    title = db.Column(db.String, default="")
    author = db.Column(db.String, default="")


class User(RestDocument, db.Model):
    """
    description: Application user, the password and the refresh token are never sent
    """

    __tablename__ = "users"
    references = {"books": "Book"}

    login = db.Column(db.String(64), unique=True, nullable=False)
    password = db.Column(db.String, nullable=False)
    roles = db.Column(db.JSON, default=lambda: ["USER"])
    refresh_token = db.Column(db.String, default="")
    settings = db.Column(db.JSON, default=lambda: {"theme": "theme-default"})
    books = db.Column(db.JSON, default=list)

    @validates("password")
    def hash_password(self, key, password):
        """
        Every assigned password is hashed, loading a user from the database doesn't assign it
        """
        if password:
            password = generate_password_hash(password)
        return password

    def check_password(self, candidate_password):
        """
        :param candidate_password: clear text password
        :return: whether the candidate matches the user password
        """
        return bool(self.password) and check_password_hash(self.password, candidate_password)

    def rest_filter(self, options=None):
        """
        Filters private property(ies) for the REST result
        """
        result = super().rest_filter(options)
        result.pop("password", None)
        result.pop("refresh_token", None)
        return result


def create_app(config=None):
    """
    :param config: app config overrides
    :return: Flask app
    """
    app = Flask("demo_app")
    app.config.update(
        SQLALCHEMY_DATABASE_URI="sqlite://",
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SECRET_KEY=b"sdqfjqsdfqizroqnxwc",
        JWT_SECRET_KEY="ik,ncbxh-rest-demo-secret-key-0123",
    )
    app.config.update(config or {})
    db.init_app(app)

    @app.route("/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        login = data.get("login", None)
        password = data.get("password", None)
        if not login or not password:
            return jsonify({"msg": "Missing login or password parameter"}), 400

        user = User.find_one({"login": login})
        if user is None or not user.check_password(password):
            return jsonify({"msg": "Bad login or password"}), 401

        access_token = create_token(user.id, user.roles or [])
        return jsonify(access_token=access_token), 200

    with app.app_context():
        db.create_all()
        api = RestAPI(app, app_db=db, prefix="/api", port=None, custom_swagger=custom_swagger)
        users = RestResource(
            "users",
            User,
            {
                "global": {"protected": True},
                "post": {"protected": True, "roles": ["ADMIN"]},
                "put": {"protected": True, "roles": ["ADMIN"]},
                "delete": {"protected": True, "roles": ["ADMIN"]},
                "sub_resources": [{"name": "books", "property": "books", "document": Book}],
            },
        )
        api.expose_resource(users)
        if User.find_one({"login": "admin"}) is None:
            User.create({"login": "admin", "password": "admin", "roles": ["USER", "ADMIN"]}).save()

    return app


custom_swagger = {
    "securityDefinitions": {"Bearer": {"type": "apiKey", "in": "header", "name": "Authorization"}},
    "security": [{"Bearer": []}],
}  # Customized swagger will be merged


if __name__ == "__main__":
    HOST = sys.argv[1] if len(sys.argv) > 1 else "0.0.0.0"
    PORT = 5000
    demo_app = create_app({"DEBUG": True})
    print(f"Starting API: http://{HOST}:{PORT}/api/docs")
    demo_app.run(host=HOST, port=PORT)
