#
# Functions for api documentation: these decorators generate the swagger operation objects
# of the exposed http methods, the objects are collected by RestAPI.add_resource
#
# pylint: disable=redefined-builtin,line-too-long,protected-access,logging-format-interpolation
#
import inspect
from http import HTTPStatus
import yaml
from flask_restful_swagger_2 import swagger
import restdoc
from .config import get_config, is_debug
from .restdoc_init import dict_merge
from typing import Any, Callable, Dict, List, Optional

DOC_DELIMITER = "---"  # used as delimiter between the swagger yaml spec and regular documentation

# additional responses added when in debug mode
debug_responses = {
    HTTPStatus.BAD_REQUEST.value: {"description": HTTPStatus.BAD_REQUEST.description},
    HTTPStatus.INTERNAL_SERVER_ERROR.value: {"description": "Internal Server Error"},
}

SWAGGER_TYPES = {str: "string", int: "integer", float: "number", bool: "boolean"}


def parse_object_doc(object: Any) -> Dict[str, Any]:
    """
    Parse the yaml description from the documented classes and methods
    A docstring that isn't a yaml dict is used as description
    """
    api_doc = {}
    # __doc__ instead of inspect.getdoc: the docstring of a superclass doesn't document a subclass
    obj_doc = getattr(object, "__doc__", None)
    if not obj_doc:
        return api_doc
    obj_doc = inspect.cleandoc(obj_doc)
    raw_doc = obj_doc.split(DOC_DELIMITER)[0]

    try:
        yaml_doc = yaml.safe_load(raw_doc)
    except yaml.YAMLError as exc:
        restdoc.log.error(f"Failed to parse documentation {raw_doc} ({exc})")
        yaml_doc = {"description": raw_doc}

    if isinstance(yaml_doc, dict):
        api_doc.update(yaml_doc)
    elif raw_doc.strip():
        api_doc["description"] = raw_doc.strip()

    return api_doc


def apply_fstring(swagger_obj: Any, vars: Dict[str, str]) -> Any:
    """
    Format the "{name}" placeholders in the swagger object
    """
    if isinstance(swagger_obj, str):
        result = swagger_obj
        try:
            result = swagger_obj.format(**vars)
        except (KeyError, IndexError, ValueError) as exc:
            restdoc.log.error(f"Failed to format {swagger_obj} ({exc})")
        return result
    if isinstance(swagger_obj, list):
        return [apply_fstring(item, vars) for item in swagger_obj]
    if isinstance(swagger_obj, dict):
        # integer keys are http status codes
        return {str(k): apply_fstring(v, vars) for k, v in swagger_obj.items()}
    return swagger_obj


def document_schema(document: Any) -> Dict[str, Any]:
    """
    :param document: document class
    :return: swagger schema of the document fields, an empty object schema for documents without columns
    """
    schema = {"type": "object"}
    get_columns = getattr(document, "_s_columns", None)
    if not callable(get_columns):
        return schema
    properties = {}
    for name, column in get_columns().items():
        if name == "id" or name in getattr(document, "exclude_attrs", []):
            continue
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            python_type = None
        prop = {}
        if python_type in SWAGGER_TYPES:
            prop["type"] = SWAGGER_TYPES[python_type]
        properties[name] = prop
    schema["properties"] = properties
    return schema


def default_query_parameters(instance: bool = False) -> List[Dict[str, Any]]:
    """
    :param instance: whether the request retrieves a single document (only "populate" is used)
    :return: the query string parameters of a GET request
    """
    parameters = [
        {
            "name": "populate",
            "in": "query",
            "type": "string",
            "required": False,
            "description": '"true" or a csv list of the reference fields to embed',
        }
    ]
    if instance:
        return parameters
    parameters += [
        {"name": "sort", "in": "query", "type": "string", "required": False, "description": 'csv list of fields, prefix a field with "-" to sort descending'},
        {"name": "limit", "in": "query", "type": "integer", "format": "int64", "required": False, "description": "Max number of items"},
        {"name": "skip", "in": "query", "type": "integer", "format": "int64", "required": False, "description": "Number of items to skip"},
    ]
    return parameters


def swagger_doc(resource, sub_resource=None, instance: bool = False) -> Callable:
    """
    :param resource: RestResource
    :param sub_resource: SubResource of the nested endpoints
    :param instance: whether the url identifies a single document
    :return: decorator that adds the swagger operation object to an http method
    """

    def swagger_doc_gen(func: Callable, protection: Optional[Any] = None) -> Callable:
        """
        Decorator used to document the RestResourceAPI HTTP methods exposed in the API
        """
        http_method = func.__name__.lower()
        document = sub_resource.document if sub_resource else resource.document
        doc_vars = {"name": resource.name, "sub_name": sub_resource.name if sub_resource else ""}

        parameters = []
        if sub_resource or instance:
            parameters.append({"name": "id", "in": "path", "type": "string", "required": True, "description": f"{resource.name} id"})
        if sub_resource and instance:
            parameters.append({"name": "sub_id", "in": "path", "type": "string", "required": True, "description": f"{sub_resource.name} id"})

        if http_method == "get":
            parameters += default_query_parameters(instance)
        elif http_method in ("post", "put"):
            parameters.append(
                {
                    "name": f"{http_method.upper()} body",
                    "in": "body",
                    "description": "document fields",
                    "schema": document_schema(document),
                    "required": True,
                }
            )

        responses = {}
        if protection is not None and protection.protected:
            responses[HTTPStatus.UNAUTHORIZED.value] = {"description": HTTPStatus.UNAUTHORIZED.description}
            if protection.roles:
                responses[HTTPStatus.FORBIDDEN.value] = {"description": f"Forbidden, requires one of the roles {protection.roles}"}
        if is_debug():
            responses.update(debug_responses)

        doc = {"tags": [resource.name], "parameters": parameters, "responses": responses, "produces": ["application/json"]}
        if http_method in ("post", "put"):
            doc["consumes"] = ["application/json"]
        dict_merge(doc, parse_object_doc(func))
        doc = apply_fstring(doc, doc_vars)
        if sub_resource and http_method == "post" and "200" in doc["responses"]:
            # the nested creation status is configurable
            created = doc["responses"].pop("200")
            doc["responses"][str(get_config("SUBRESOURCE_CREATED_STATUS"))] = created
        return swagger.doc(doc)(func)

    return swagger_doc_gen
