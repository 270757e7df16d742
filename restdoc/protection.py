#
# Route protection rules
#
# A rule is declared per verb ("list", "get", "post", "put", "delete") or for all verbs ("global"):
#   { "protected": True, "roles": ["ADMIN"] }
#
# Rules are validated when the resource is constructed, a malformed rule raises a ConfigurationError
#
from .errors import ConfigurationError
from .security import requires_login, requires_role
from typing import Callable, List, Mapping, Optional

VERBS = ("list", "get", "post", "put", "delete")
GLOBAL = "global"


class ProtectionRule:
    """
    Authentication and role requirements of a route
    """

    def __init__(self, protected: bool = False, roles: Optional[List[str]] = None) -> None:
        self.protected = protected
        self.roles = roles

    @classmethod
    def parse(cls, raw: Optional[Mapping]) -> "ProtectionRule":
        """
        :param raw: rule as declared in the resource config, may be None
        :return: validated ProtectionRule
        """
        if raw is None:
            return cls()
        if isinstance(raw, ProtectionRule):
            return raw
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Resource config route rule must be a dict instead got '{type(raw).__name__}'")

        protected = raw.get("protected", False) is True
        roles = raw.get("roles", None)
        if roles is not None:
            if not isinstance(roles, (list, tuple)):
                raise ConfigurationError(f"Resource config route roles must be a list of strings instead got '{type(roles).__name__}'")
            for role in roles:
                if not isinstance(role, str):
                    raise ConfigurationError(f"Resource config route role must be a string instead got '{type(role).__name__}'")
            roles = list(roles)
        return cls(protected=protected, roles=roles)

    @property
    def decorators(self) -> List[Callable]:
        """
        :return: the ordered pre-checks, identity first
        """
        if not self.protected:
            return []
        if self.roles is None:
            return [requires_login]
        return [requires_login, requires_role(self.roles)]

    def gate(self, handler: Callable) -> Callable:
        """
        :param handler: terminal route handler
        :return: handler wrapped by the pre-checks, the first check is run first
        """
        for decorator in reversed(self.decorators):
            handler = decorator(handler)
        return handler

    def describe(self) -> str:
        if not self.protected:
            return "public"
        if self.roles is None:
            return "protected"
        return f"protected with roles{self.roles}"

    def __repr__(self) -> str:
        return f"ProtectionRule(protected={self.protected}, roles={self.roles})"


def effective_rule(config: Optional[Mapping], verb: str) -> ProtectionRule:
    """
    :param config: resource config
    :param verb: one of VERBS
    :return: the rule declared for `verb`, else the "global" rule, else an unprotected rule
    """
    if not config:
        return ProtectionRule()
    raw = config.get(verb)
    if raw is None:
        raw = config.get(GLOBAL)
    return ProtectionRule.parse(raw)
