# flask_restful_swagger2 API subclass
import copy
import json
import re
from http import HTTPStatus
import werkzeug
from flask import Flask
from flask_restful import abort
from flask_restful.utils import cors
from flask_restful_swagger_2 import Api as FRSApiBase
from flask_restful_swagger_2 import validate_path_item_object, parse_method_doc
from flask_restful_swagger_2 import extract_swagger_path, Extractor, ValidationError as FRSValidationError
from flask_swagger_ui import get_swaggerui_blueprint
from functools import wraps
import restdoc
from .config import get_config
from .errors import ConfigurationError, GenericError, RestError
from .json_encoder import RestJSONProvider, RestJSONEncoder
from .swagger_doc import parse_object_doc
from typing import Callable

# "<any(pets):sub_name>": a converter matching a single sub resource name
SINGLE_NAME_CONVERTER_RE = re.compile(r"<any\((\w+)\):\w+>")


class RestAPI(FRSApiBase):
    """
    Subclass of the flask_restful_swagger API class where we add the expose_resource method
    this method creates the API endpoints of a RestResource and the corresponding swagger
    documentation
    """

    _operation_ids = {}
    _custom_swagger = {}

    def __init__(
        self,
        app: Flask,
        host: str = "localhost",
        port: int = 5000,
        prefix: str = "",
        description: str = "restdoc API",
        swaggerui_blueprint: bool = True,
        **kwargs,
    ) -> None:
        """
        :param app: Flask app
        :param host: host shown in the swagger
        :param port: port shown in the swagger, may be None when proxied
        :param prefix: url prefix of all the exposed resources
        :param swaggerui_blueprint: whether to serve the swagger ui
        :param kwargs: "app_db" (Flask-SQLAlchemy extension), "config" (RESTDOC settings),
                       "custom_swagger" (merged in the swagger.json) and flask_restful_swagger_2 Api arguments
        """
        self._custom_swagger = kwargs.pop("custom_swagger", {})
        self.swaggerui_blueprint = swaggerui_blueprint
        app_db = kwargs.pop("app_db", None)
        restdoc.RESTDOC(app, app_db=app_db, **kwargs.pop("config", {}))
        # the host shown in the swagger ui
        if port:
            host = f"{host}:{port}"

        api_spec_url = kwargs.pop("api_spec_url", "/swagger")
        super().__init__(
            app,
            api_spec_url=api_spec_url,
            host=host,
            description=description,
            prefix=prefix,
            base_path=prefix,
            **kwargs,
        )
        app.json = RestJSONProvider(app)
        # dicts returned by flask-restful resources (swagger.json, error bodies)
        app.config.setdefault("RESTFUL_JSON", {"cls": RestJSONEncoder})

        if swaggerui_blueprint:
            ui_url = f"{prefix}{get_config('SWAGGER_UI_URL')}"
            swaggerui = get_swaggerui_blueprint(ui_url, f"{prefix}{api_spec_url}.json", config={"docExpansion": "none", "defaultModelsExpandDepth": -1})
            app.register_blueprint(swaggerui, url_prefix=ui_url)
        self.update_spec()

    def update_spec(self) -> None:
        """
        merge the custom swagger in the swagger.json
        """
        restdoc.dict_merge(self.get_swagger_doc(), self._custom_swagger)

    def expose_resource(self, resource: "restdoc.RestResource", url_prefix: str = "") -> None:
        """This method mounts the routes compiled by the RestResource:
        {url_prefix}/{name}, {url_prefix}/{name}/<id> and the nested routes of every sub resource

        :param resource: RestResource
        :param url_prefix: url prefix
        """
        RESOURCE_URL_FMT = get_config("RESOURCE_URL_FMT")  # configurable resource collection url formatter
        ENDPOINT_FMT = get_config("ENDPOINT_FMT")
        url = RESOURCE_URL_FMT.format(url_prefix, resource.name)

        for route in resource.routes:
            endpoint = ENDPOINT_FMT.format(url_prefix, resource.name + route.endpoint)
            restdoc.log.info(f"Exposing {resource.name} on {url + route.rule}, endpoint: {endpoint}")
            self.add_resource(route.api_class, url + route.rule, endpoint=endpoint, methods=route.methods)

        object_doc = parse_object_doc(resource.document)
        tag = {"name": resource.name}
        if isinstance(object_doc.get("description"), str):
            tag["description"] = object_doc["description"]
        self._swagger_object["tags"].append(tag)

        self.update_spec()

    def expose(self, *resources: "restdoc.RestResource", url_prefix: str = "") -> None:
        """
        Expose multiple resources at once
        """
        for resource in resources:
            self.expose_resource(resource, url_prefix)

    def add_resource(self, resource, *urls, **kwargs):
        """
        This method is partly copied from flask_restful_swagger_2/__init__.py

        Changed because the operation ids are generated here and only the
        methods passed in kwargs["methods"] are documented
        """
        path_item = {}
        methods = kwargs.get("methods") or resource.methods or []
        for method in [m.lower() for m in methods]:
            f = getattr(resource, method, None)
            operation = getattr(f, "__swagger_operation_object", None)
            if not operation:
                continue
            operation, _ = Extractor.extract(copy.deepcopy(operation))
            summary = parse_method_doc(f, operation)
            if summary:
                operation["summary"] = summary.split("<br/>")[0]
            operation["operationId"] = self._get_operation_id(operation.get("summary", ""))
            path_item[method] = operation

        if path_item:
            try:
                validate_path_item_object(path_item)
                # Check whether we manage to convert to json
                json.dumps(path_item)
            except (FRSValidationError, TypeError) as exc:
                restdoc.log.exception(exc)
                raise ConfigurationError(f"Swagger validation failed for {urls}: {exc}")
            for url in urls:
                self._swagger_object["paths"][swagger_path(url)] = path_item

        # pylint: disable=bad-super-call
        super(FRSApiBase, self).add_resource(resource, *urls, **kwargs)

    @classmethod
    def _get_operation_id(cls, summary: str) -> str:
        """
        :param summary:
        """
        summary = "".join(c for c in summary if c.isalnum())
        if summary not in cls._operation_ids:
            cls._operation_ids[summary] = 0
        else:
            cls._operation_ids[summary] += 1
        return f"{summary}_{cls._operation_ids[summary]}"


def swagger_path(url: str) -> str:
    """
    :param url: flask url rule, e.g. /owners/<string:id>/<any(pets):sub_name>
    :return: swagger path, e.g. /owners/{id}/pets
    """
    return extract_swagger_path(SINGLE_NAME_CONVERTER_RE.sub(r"\1", url))


def api_decorator(cls, swagger_decorator):
    """Decorator for the API views:
        - add the protection pre-checks ( cls.protection )
        - add cors
        - add generic exception handling
        - add swagger documentation ( swagger_decorator )

    The pre-checks are wrapped by the exception handling so their errors
    are formatted like the handler errors

    :param cls: The class that will be decorated (e.g. CollectionAPI, SubInstanceAPI subclasses)
    :param swagger_decorator: function that will generate the swagger
    :return: decorated class
    """
    cors_domain = get_config("cors_domain")
    for method_name, protection in cls.protection.items():
        method = getattr(cls, method_name, None)
        if not method:
            continue

        decorated_method = protection.gate(method)
        # Add cors
        if cors_domain is not None:
            decorated_method = cors.crossdomain(origin=cors_domain)(decorated_method)
        # Add exception handling
        decorated_method = http_method_decorator(decorated_method)

        try:
            # Add swagger documentation
            decorated_method = swagger_decorator(decorated_method, protection)
        except (KeyError, TypeError, ValueError) as exc:
            restdoc.log.exception(exc)
            restdoc.log.error(f"Failed to generate documentation for {cls.__name__}.{method_name}")

        setattr(cls, method_name, decorated_method)
    return cls


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the exposed HTTP methods (get, post, put, delete)
    - commit the database
    - convert all exceptions to a JSON error body, this is the single exit point of the failing requests:
        {"errors": [{"title": ..., "detail": ..., "code": "404"}]}

    This method will be called for all requests
    :param fun:
    :return: wrapped fun
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        """Wrap the method and perform error handling
        :param *args:
        :param **kwargs:
        :return: result of the wrapped method
        """
        rest_exception = None
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        message = ""
        try:
            result = fun(*args, **kwargs)
            restdoc.DB.session.commit()
            return result

        except RestError as exc:
            if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
                restdoc.log.exception(exc)
            rest_exception = exc

        except werkzeug.exceptions.HTTPException as exc:
            # e.g. an invalid json body
            status_code = exc.code
            message = exc.description
            restdoc.log.error(message)

        except Exception as exc:
            restdoc.log.exception(exc)
            rest_exception = GenericError(str(exc))

        status_code = getattr(rest_exception, "status_code", status_code)
        title = getattr(rest_exception, "message", message)
        detail = getattr(rest_exception, "detail", title)

        restdoc.DB.session.rollback()
        errors = dict(title=title, detail=detail, code=str(status_code))
        abort(status_code, errors=[errors])

    return method_wrapper
