#
# Resource descriptors: RestResource and SubResource
#
# A RestResource is compiled once, when it is constructed:
#   - the name, document and config are validated, errors raise a ConfigurationError
#   - the protection rule of every verb is resolved
#   - the flask-restful Resource classes are generated for the primary and the nested routes
#
# The routes are mounted on an app by RestAPI.expose_resource
#
# pylint: disable=logging-format-interpolation,line-too-long,redefined-builtin
#
from collections import namedtuple
from typing import Any, Dict, List, Mapping, Optional
import restdoc
from .config import get_config
from .errors import ConfigurationError
from .protection import GLOBAL, VERBS, ProtectionRule, effective_rule
from .restful import CollectionAPI, InstanceAPI, SubCollectionAPI, SubInstanceAPI
from .restdoc_api import api_decorator
from .swagger_doc import swagger_doc

# Operations a document has to implement, "save" and "rest_filter" are instance methods
DOCUMENT_OPERATIONS = ("find", "find_one", "create", "find_one_and_update", "delete_one")
SUB_RESOURCES = "sub_resources"

# rule: url rule relative to the resource url
# endpoint: endpoint suffix
Route = namedtuple("Route", ["rule", "endpoint", "api_class", "methods"])


def check_document(document: Any, owner: str) -> None:
    """
    Verify that `document` implements the document operations
    :param document: document class (e.g. a RestDocument subclass)
    :param owner: description used in the error message
    """
    if document is None:
        raise ConfigurationError(f"No document associated to the {owner}")
    missing = [operation for operation in DOCUMENT_OPERATIONS if not callable(getattr(document, operation, None))]
    if missing:
        raise ConfigurationError(f"The document of the {owner} doesn't implement {', '.join(missing)}")


class SubResource:
    """
    A document nested in a parent resource document:
    the parent's `property` field holds the id (or the list of ids) of the linked documents

    The optional `config` holds protection rules for the nested routes,
    verbs without a rule use the rule of the parent resource
    """

    def __init__(self, name: str, property: str, document: Any, config: Optional[Mapping] = None) -> None:
        if not isinstance(name, str) or not name.isidentifier():
            raise ConfigurationError(f"Sub resource name must be a valid identifier instead got '{name}'")
        if not isinstance(property, str) or not property:
            raise ConfigurationError(f"Sub resource '{name}' property must be a non empty string")
        check_document(document, f"sub resource '{name}'")
        if config is not None and not isinstance(config, Mapping):
            raise ConfigurationError(f"Sub resource '{name}' config must be a dict instead got '{type(config).__name__}'")

        self.name = name
        self.property = property
        self.document = document
        self.config = dict(config or {})
        self.rules = {verb: ProtectionRule.parse(self.config[verb]) for verb in VERBS + (GLOBAL,) if verb in self.config}

    @classmethod
    def from_config(cls, raw: Any) -> "SubResource":
        """
        :param raw: SubResource or dict with "name", "property", "document" and optionally "config"
        """
        if isinstance(raw, SubResource):
            return raw
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Sub resource descriptor must be a dict instead got '{type(raw).__name__}'")
        return cls(raw.get("name"), raw.get("property"), raw.get("document"), raw.get("config"))

    def rule(self, verb: str, parent_rule: ProtectionRule) -> ProtectionRule:
        """
        :return: the rule of `verb` for the nested routes
        """
        return self.rules.get(verb) or self.rules.get(GLOBAL) or parent_rule

    def __repr__(self) -> str:
        return f"SubResource(name={self.name!r}, property={self.property!r})"


class RestResource:
    """
    Exposable resource:

        users = RestResource("users", User, {
            "global": {"protected": True},
            "post": {"protected": True, "roles": ["ADMIN"]},
            "sub_resources": [{"name": "books", "property": "books", "document": Book}],
        })
        api.expose_resource(users, url_prefix="/api")

    :param name: resource name, used in the urls, the logs and the error messages
    :param document: document class implementing find, find_one, create, find_one_and_update and delete_one
    :param config: protection rules per verb ("list", "get", "post", "put", "delete" or "global") and "sub_resources"
    """

    def __init__(self, name: str, document: Any, config: Optional[Mapping] = None) -> None:
        if not name:
            raise ConfigurationError("No Resource name found")
        if not isinstance(name, str):
            raise ConfigurationError(f"Resource name must be a non empty string instead got '{type(name).__name__}'")
        check_document(document, f"resource '{name}'")
        if config is not None and not isinstance(config, Mapping):
            raise ConfigurationError(f"Resource '{name}' config must be a dict instead got '{type(config).__name__}'")

        self._name = name
        self._document = document
        self.config = dict(config or {})
        for key in self.config:
            if key not in VERBS + (GLOBAL, SUB_RESOURCES):
                restdoc.log.warning(f"Resource '{name}': ignoring unknown config key '{key}'")

        # the global rule is validated even when every verb overrides it
        ProtectionRule.parse(self.config.get(GLOBAL))
        self.rules = {verb: effective_rule(self.config, verb) for verb in VERBS}

        raw_sub_resources = self.config.get(SUB_RESOURCES) or []
        if not isinstance(raw_sub_resources, (list, tuple)):
            raise ConfigurationError(f"Resource '{name}' sub_resources must be a list instead got '{type(raw_sub_resources).__name__}'")
        self.sub_resources: Dict[str, SubResource] = {}
        for raw in raw_sub_resources:
            sub_resource = SubResource.from_config(raw)
            if sub_resource.name in self.sub_resources:
                raise ConfigurationError(f"Resource '{name}' has a duplicate sub resource '{sub_resource.name}'")
            self.sub_resources[sub_resource.name] = sub_resource

        self.routes = self._compile_routes()
        restdoc.log.info(f"Resource '{name}': created")

    @property
    def name(self) -> str:
        return self._name

    @property
    def document(self) -> Any:
        return self._document

    def _compile_routes(self) -> List[Route]:
        """
        Create the Route list: primary collection and instance routes, followed by
        the collection and instance routes of every sub resource
        """
        INSTANCE_RULE = get_config("INSTANCE_RULE")
        SUBRESOURCE_RULE = get_config("SUBRESOURCE_RULE")
        SUBRESOURCE_INSTANCE_RULE = get_config("SUBRESOURCE_INSTANCE_RULE")
        rules = self.rules

        routes = [
            self._route("", "", CollectionAPI, {"get": rules["list"], "post": rules["post"]}),
            self._route(INSTANCE_RULE, ".instance", InstanceAPI, {"get": rules["get"], "put": rules["put"], "delete": rules["delete"]}),
        ]
        for sub in self.sub_resources.values():
            collection_protection = {"get": sub.rule("list", rules["list"]), "post": sub.rule("post", rules["post"])}
            instance_protection = {verb: sub.rule(verb, rules[verb]) for verb in ("get", "put", "delete")}
            routes.append(self._route(SUBRESOURCE_RULE.format(sub.name), f".{sub.name}", SubCollectionAPI, collection_protection, sub))
            routes.append(
                self._route(SUBRESOURCE_INSTANCE_RULE.format(sub.name), f".{sub.name}.instance", SubInstanceAPI, instance_protection, sub)
            )
        return routes

    def _route(self, rule: str, endpoint: str, api_base: type, protection: Dict[str, ProtectionRule], sub_resource: Optional[SubResource] = None) -> Route:
        """
        creates a class of the form

        @api_decorator
        class users_books_SubCollectionAPI(SubCollectionAPI):
            resource = self
            sub_resource = sub_resource
            protection = {"get": .., "post": ..}
        """
        sub_name = f"_{sub_resource.name}" if sub_resource else ""
        api_class_name = f"{self.name}{sub_name}_{api_base.__name__}"
        properties = {"resource": self, "sub_resource": sub_resource, "protection": protection}
        swagger_decorator = swagger_doc(self, sub_resource, instance=api_base.instance)
        api_class = api_decorator(type(api_class_name, (api_base,), properties), swagger_decorator)
        for http_method, protection_rule in protection.items():
            restdoc.log.info(f"Resource '{self.name}': '{http_method.upper()} {rule or '/'}' route {protection_rule.describe()} created")
        return Route(rule, endpoint, api_class, [http_method.upper() for http_method in protection])

    def __repr__(self) -> str:
        return f"RestResource(name={self.name!r}, document={getattr(self.document, '__name__', self.document)!r})"
