#
# Authentication with flask-jwt-extended
# https://flask-jwt-extended.readthedocs.io/en/stable/
#
# requires_login and requires_role are handler decorators: they either pass control
# to the decorated handler or raise an error that is formatted by http_method_decorator
#
from functools import wraps
from flask import g
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
import restdoc
from .errors import UnAuthenticatedError, UnAuthorizedError
from typing import Callable, Sequence

ROLES_CLAIM = "roles"


def create_token(identity, roles: Sequence[str] = ()) -> str:
    """
    :param identity: user identifier, stored in the "sub" claim
    :param roles: role names of the user
    :return: encoded access token
    """
    return create_access_token(identity=str(identity), additional_claims={ROLES_CLAIM: list(roles)})


def requires_login(fun: Callable) -> Callable:
    """
    Require a valid bearer token, the identity and its roles are stored in `flask.g`
    """

    @wraps(fun)
    def login_wrapper(*args, **kwargs):
        try:
            verify_jwt_in_request()
        except (JWTExtendedException, PyJWTError) as exc:
            raise UnAuthenticatedError(str(exc))
        g.identity = get_jwt_identity()
        g.roles = get_jwt().get(ROLES_CLAIM, [])
        restdoc.log.debug(f"Authenticated '{g.identity}' with roles {g.roles}")
        return fun(*args, **kwargs)

    return login_wrapper


def requires_role(roles: Sequence[str]) -> Callable:
    """
    :param roles: the identity has to hold at least one of these roles
    :return: decorator, to be applied after `requires_login`
    """

    def role_decorator(fun: Callable) -> Callable:
        @wraps(fun)
        def role_wrapper(*args, **kwargs):
            identity_roles = getattr(g, "roles", None) or []
            if not set(identity_roles).intersection(roles):
                raise UnAuthorizedError(f"'{getattr(g, 'identity', None)}' has none of the roles {list(roles)}")
            return fun(*args, **kwargs)

        return role_wrapper

    return role_decorator
