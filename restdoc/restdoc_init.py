import logging
import os
import sys
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy
import restdoc
import flask.app
from typing import Any, Dict, Optional


class RESTDOC:
    """This class configures the Flask application to serve RestResource routes
    :param app: a Flask application.
    :param app_db: the Flask-SQLAlchemy extension, app.extensions["sqlalchemy"] when omitted
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables
    LOGLEVEL = logging.WARNING
    LOG_FILE = None
    # "{prefix}/{resource name}" => /api/users
    RESOURCE_URL_FMT = "{}/{}"
    # relative rules, mounted on the RESOURCE_URL_FMT url
    INSTANCE_RULE = "/<string:id>"
    SUBRESOURCE_RULE = "/<string:id>/<any({}):sub_name>"
    SUBRESOURCE_INSTANCE_RULE = "/<string:id>/<any({}):sub_name>/<string:sub_id>"
    # endpoint naming
    ENDPOINT_FMT = "{}api.{}"
    # status code of a sub resource POST, top level creation always returns 201
    SUBRESOURCE_CREATED_STATUS = 200
    # swagger ui location, relative to the api prefix
    SWAGGER_UI_URL = "/docs"

    def __init__(self, app: flask.app.Flask, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, app_db: Optional[SQLAlchemy] = None, **kwargs) -> None:
        """
        Application initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if app_db is None:
            app_db = app.extensions["sqlalchemy"]

        restdoc.DB = self.db = app_db

        app.url_map.strict_slashes = False

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        for conf_name, conf_val in kwargs.items():
            setattr(RESTDOC, conf_name, conf_val)

        log_file = app.config.get("LOG_FILE", RESTDOC.LOG_FILE)
        if log_file:
            self.add_file_handler(log_file)

        if "flask-jwt-extended" not in app.extensions:
            # requires_login / requires_role rely on the jwt manager
            JWTManager(app)

        # pylint: disable=unused-argument,unused-variable
        @app.teardown_appcontext
        def shutdown_session(exception=None):
            """cfr. https://flask-sqlalchemy.palletsprojects.com/en/latest/quickstart/"""
            self.db.session.remove()

    @staticmethod
    def add_file_handler(log_file: str) -> None:
        """
        Append the log records to `log_file` as well
        """
        for handler in log.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_file):
                return
        handler = logging.FileHandler(log_file, mode="a")
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s"))
        log.addHandler(handler)

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stderr so we redirect eveything to sys.stderr
        """
        log = logging.getLogger("restdoc")
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


def dict_merge(dct: Dict[str, Any], merge_dct: Dict[Any, Any]) -> None:
    """Recursive dict merge used for creating the swagger spec.
    Inspired by :meth:``dict.update()``, instead of updating only
    top-level keys, dict_merge recurses down into dicts nested
    to an arbitrary depth, updating keys. The ``merge_dct`` is merged into ``dct``.
    :param dct: dict onto which the merge is executed
    :param merge_dct: dct merged into dct
    :return: None
    """
    for k in merge_dct:
        if k in dct and isinstance(dct[k], dict):
            dict_merge(dct[k], merge_dct[k])
        else:
            # convert to string, for ex. http return codes
            dct[str(k)] = merge_dct[k]


#
# DB and logging initialization
#
DB = SQLAlchemy()

try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = RESTDOC.init_logging(LOGLEVEL)
