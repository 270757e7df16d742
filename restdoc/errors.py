# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user.
# If set to debug, too much sensitive info might be shown !
#
# The exceptions will be caught in http_method_decorator and formatted, for example:
# {
#      "title": "Not Found: users 'a8c2'",
#      "detail": "Not Found: users 'a8c2'",
#      "code": "404"
# }
#
import traceback
from http import HTTPStatus
import restdoc
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class RestError(Exception):
    """
    Superclass of the errors that are converted to an http error response
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""


class ConfigurationError(RestError, TypeError):
    """
    This exception is raised when a resource is declared with an invalid configuration,
    i.e. while the routes are being compiled and before the server accepts any traffic
    """

    message = "Configuration Error: "

    def __init__(self, message=""):
        Exception.__init__(self, message)
        restdoc.log.critical("ConfigurationError: %s", message)
        self.message += message


class NotFoundError(RestError):
    """
    This exception is raised when a resource instance was not found
    The message always names the resource and the id that was looked up
    """

    status_code = HTTPStatus.NOT_FOUND.value
    message = "Not Found: "

    def __init__(self, resource_name, object_id, status_code=HTTPStatus.NOT_FOUND.value):
        """
        :param resource_name: name of the (sub) resource
        :param object_id: id that was looked up
        :param status_code: HTTP Status code
        """
        Exception.__init__(self, resource_name, object_id)
        self.status_code = status_code
        self.resource_name = resource_name
        self.object_id = object_id
        restdoc.log.info("Not found: %s '%s'", resource_name, object_id)
        self.message += f"{resource_name} '{object_id}'"


class UnAuthenticatedError(RestError):
    """
    This exception is raised when a protected route is requested without a valid identity
    """

    status_code = HTTPStatus.UNAUTHORIZED.value
    message = "Authentication Error: "

    def __init__(self, message="", status_code=HTTPStatus.UNAUTHORIZED.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        restdoc.log.warning("UnAuthenticatedError: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class UnAuthorizedError(RestError):
    """
    This exception is raised when the identity doesn't hold any of the required roles
    """

    status_code = HTTPStatus.FORBIDDEN.value
    message = "Authorization Error: "

    def __init__(self, message="", status_code=HTTPStatus.FORBIDDEN.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        restdoc.log.warning("UnAuthorizedError: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class GenericError(RestError):
    """
    This exception is raised when the storage or the server failed
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value  # 500
    message = "Generic Error: "

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        restdoc.log.error("Generic Error: %s", message)
        if is_debug():
            restdoc.log.debug(traceback.format_exc(120))
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG


class ValidationError(RestError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Validation Error: "

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value):
        Exception.__init__(self, message)
        self.status_code = status_code
        restdoc.log.warning("ValidationError: %s", message)
        self.message += message
