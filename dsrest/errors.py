# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user
# for unclassified (500) errors. If set to debug, sensitive info might be shown !
#
# The exceptions will be caught in http_method_decorator and formatted, for example:
# {
#     "errors": [
#         {
#             "status": "404",
#             "title": "Not Found",
#             "detail": "Resource does not implement the FindAll interface"
#         }
#     ]
# }
#
# Data sources may raise these exceptions too, or any exception with a
# "status_code" attribute: the status code will be used in the response.
#
from http import HTTPStatus
import dsrest
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class JsonapiError(Exception):
    """
    Base class for the errors rendered as a JSON:API error document,
    it can be raised as-is by data sources with a custom status code
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    title = HTTPStatus.INTERNAL_SERVER_ERROR.phrase
    message = ""
    logged = False  # set by the subclasses that log when they are created

    def __init__(self, message="", status_code=None):
        """
        :param message: Message to be returned in the (json) body
        :param status_code: HTTP Status code
        """
        Exception.__init__(self, message)
        if status_code is not None:
            self.status_code = int(status_code)
            try:
                self.title = HTTPStatus(self.status_code).phrase
            except ValueError:
                pass
        self.message = str(message)

    @property
    def detail(self):
        return self.message


class NotFoundError(JsonapiError):
    """
    This exception is raised when an item or a linked resource was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value
    title = HTTPStatus.NOT_FOUND.phrase

    def __init__(self, message="", status_code=HTTPStatus.NOT_FOUND.value):
        JsonapiError.__init__(self, message, status_code)
        dsrest.log.error("Not found: %s", message)
        self.logged = True


class CapabilityMissingError(NotFoundError):
    """
    This exception is raised when the data source doesn't implement the
    optional capability required by the request
    """

    def __init__(self, capability, status_code=HTTPStatus.NOT_FOUND.value):
        self.capability = getattr(capability, "value", capability)
        NotFoundError.__init__(self, f"Resource does not implement the {self.capability} interface", status_code)


class ForbiddenError(JsonapiError):
    """
    This exception is raised when the request is refused,
    f.i. client generated ids or a malformed update payload
    """

    status_code = HTTPStatus.FORBIDDEN.value
    title = HTTPStatus.FORBIDDEN.phrase

    def __init__(self, message="", status_code=HTTPStatus.FORBIDDEN.value):
        JsonapiError.__init__(self, message, status_code)
        dsrest.log.error("Forbidden: %s", message)
        self.logged = True


class ConflictError(JsonapiError):
    """
    This exception is raised when the payload conflicts with the endpoint (id or type mismatch)
    """

    status_code = HTTPStatus.CONFLICT.value
    title = HTTPStatus.CONFLICT.phrase

    def __init__(self, message="", status_code=HTTPStatus.CONFLICT.value):
        JsonapiError.__init__(self, message, status_code)
        dsrest.log.warning("Conflict: %s", message)
        self.logged = True


class ValidationError(JsonapiError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    title = HTTPStatus.BAD_REQUEST.phrase

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value):
        JsonapiError.__init__(self, message, status_code)
        dsrest.log.warning("ValidationError: %s", message)
        self.logged = True


class GenericError(JsonapiError):
    """
    This exception is raised when an error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value  # 500

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value):
        JsonapiError.__init__(self, message, status_code)
        dsrest.log.error("Generic Error: %s", message)
        self.logged = True
        if not is_debug():
            self.message = HIDDEN_LOG
