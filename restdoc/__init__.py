# flake8: noqa: F401
#
# restdoc_init has to be imported first: the other modules use restdoc.log and restdoc.DB
#
from .restdoc_init import DB, log, RESTDOC, dict_merge
from .errors import (
    RestError,
    ConfigurationError,
    ValidationError,
    GenericError,
    NotFoundError,
    UnAuthenticatedError,
    UnAuthorizedError,
)
from .query import QueryOptions, parse_query_parameters
from .protection import ProtectionRule, effective_rule
from .security import requires_login, requires_role, create_token
from .base import RestDocument
from .linkage import linkage_ids, link_position
from .resource import RestResource, SubResource
from .json_encoder import RestJSONProvider
from .restdoc_api import RestAPI
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "RESTDOC",
    "RestAPI",
    "DB",
    "log",
    # documents:
    "RestDocument",
    "RestJSONProvider",
    # resources:
    "RestResource",
    "SubResource",
    "ProtectionRule",
    "effective_rule",
    "linkage_ids",
    "link_position",
    # query options:
    "QueryOptions",
    "parse_query_parameters",
    # security:
    "requires_login",
    "requires_role",
    "create_token",
    # Errors:
    "RestError",
    "ConfigurationError",
    "ValidationError",
    "GenericError",
    "NotFoundError",
    "UnAuthenticatedError",
    "UnAuthorizedError",
)
