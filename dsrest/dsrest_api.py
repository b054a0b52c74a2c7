# flask_restful API subclass
from http import HTTPStatus
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple
import werkzeug
from werkzeug.exceptions import default_exceptions
from flask import Flask
from flask_restful import Api as FRSApiBase, abort
from flask_restful.representations.json import output_json
from flask_restful.utils import OrderedDict
from functools import wraps
import dsrest
from .config import get_config, is_debug
from .errors import HIDDEN_LOG, JsonapiError
from .json_encoder import DSRESTJSONProvider
from .jsonapi import DSRESTRelatedAPI, DSRESTResourceAPI
from .jsonapi_formatting import Information
from .registry import Registry, ResourceDescriptor
from .response import JSONAPI_MEDIA_TYPE
from .util import normalize_prefix

DEFAULT_REPRESENTATIONS = [(JSONAPI_MEDIA_TYPE, output_json)]

# The following URL formatters determine the urls of the API resources,
# the argument is the resource name (eg. posts), the API prefix is added by flask-restful
RESOURCE_URL_FMT = "/{}"
INSTANCE_URL_FMT = RESOURCE_URL_FMT + "/<string:id>"
RELATED_URL_FMT = INSTANCE_URL_FMT + "/<string:linked>"

# endpoint naming
ENDPOINT_FMT = "{}api.{}"


class DSRESTAPI(FRSApiBase):
    """
    Subclass of the flask_restful API class where we add the expose_object method
    this method registers the data source and creates the API endpoints of the resource

    http://jsonapi.org/format/#content-negotiation-servers
    Servers MUST send all JSON:API data in response documents with
    the header Content-Type: application/vnd.api+json without any media type parameters.
    """

    def __init__(
        self,
        app: Flask,
        prefix: str = "",
        base_url: Optional[str] = None,
        redirect_trailing_slash: bool = True,
        **kwargs,
    ) -> None:
        """
        :param app: Flask app
        :param prefix: url prefix of all endpoints, eg. "v1" => /v1/posts
        :param base_url: added in front of all generated urls,
            eg. http://localhost/v1/posts/1 instead of /v1/posts/1
        :param redirect_trailing_slash: when disabled, an url ending with / will 404
        """
        prefix = normalize_prefix(prefix)
        dsrest.DSREST(app, **kwargs)
        if base_url is None:
            with app.app_context():
                base_url = get_config("DSREST_BASE_URL") or ""

        self.registry = Registry()
        self.info = Information(prefix=prefix, base_url=base_url.rstrip("/"))
        self.redirect_trailing_slash = redirect_trailing_slash

        super().__init__(app, prefix=prefix, default_mediatype=JSONAPI_MEDIA_TYPE)
        app.json = DSRESTJSONProvider(app)
        self.representations = OrderedDict(DEFAULT_REPRESENTATIONS)
        # No resources can be added once the app is serving requests
        app.before_request(self.registry.freeze)

    def set_redirect_trailing_slash(self, enabled: bool) -> None:
        """
        :param enabled: when enabled, /posts/ is handled like /posts, otherwise it will 404
        """
        if len(self.registry):
            raise RuntimeError("set_redirect_trailing_slash must be called before resources are exposed")
        self.redirect_trailing_slash = enabled

    def expose_object(self, prototype: Any, source: Any, relationships: Optional[Mapping[str, str]] = None) -> ResourceDescriptor:
        """This methods registers the data source and creates the API url endpoints
        :param prototype: the record class (or an empty instance of it),
            the same class is used to create new records
        :param source: data source, it must implement the dsrest.CRUD interface,
            the other interfaces are optional
        :param relationships: optional relationships, {field name: related class name},
            by default these are derived from the field type hints
        :return: the registered ResourceDescriptor

        creates classes of the form

        class Post_API(DSRESTResourceAPI):
            descriptor = <posts descriptor>

        and adds them as api resources to /posts, /posts/{id} and /posts/{id}/{linked}
        """
        descriptor = self.registry.register(prototype, source, relationships)
        name = descriptor.name
        properties = {"descriptor": descriptor, "registry": self.registry, "info": self.info}
        strict_slashes = not self.redirect_trailing_slash
        endpoint_prefix = self.info.prefix.strip("/")

        # Expose the collection
        api_class_name = f"{descriptor.type_name}_API"  # name for dynamically generated classes
        url = RESOURCE_URL_FMT.format(name)
        endpoint = ENDPOINT_FMT.format(endpoint_prefix, name)
        api_class = api_decorator(type(api_class_name, (DSRESTResourceAPI,), properties))
        dsrest.log.info(f"Exposing {name} on {self.info.prefix}{url}, endpoint: {endpoint}")
        self.add_resource(api_class, url, endpoint=endpoint, methods=["GET", "POST", "OPTIONS"], strict_slashes=strict_slashes)

        # Expose the instances
        url = INSTANCE_URL_FMT.format(name)
        endpoint = ENDPOINT_FMT.format(endpoint_prefix, name + "Id")
        api_class = api_decorator(type(api_class_name + "_i", (DSRESTResourceAPI,), properties))
        dsrest.log.info(f"Exposing {name} instances on {self.info.prefix}{url}, endpoint: {endpoint}")
        self.add_resource(
            api_class, url, endpoint=endpoint, methods=["GET", "PATCH", "DELETE", "OPTIONS"], strict_slashes=strict_slashes
        )

        # Expose the linked resources
        url = RELATED_URL_FMT.format(name)
        endpoint = ENDPOINT_FMT.format(endpoint_prefix, name + ".linked")
        api_class = api_decorator(type(api_class_name + "_linked", (DSRESTRelatedAPI,), properties))
        dsrest.log.info(f"Exposing {name} linked resources on {self.info.prefix}{url}, endpoint: {endpoint}")
        self.add_resource(api_class, url, endpoint=endpoint, methods=["GET"], strict_slashes=strict_slashes)

        return descriptor

    def expose(self, *resources: Tuple[Any, Any]) -> None:
        """
        Expose multiple (prototype, source) pairs at once
        """
        for prototype, source in resources:
            self.expose_object(prototype, source)

    def handler(self) -> Flask:
        """
        :return: the WSGI application serving the API
        """
        return self.app

    @property
    def resources_exposed(self) -> Iterable[ResourceDescriptor]:
        return iter(self.registry)

    def handle_error(self, e):
        """
        Errors raised outside the resource methods (eg. 405 Method Not Allowed from the router)
        are rendered as a jsonapi error document too
        """
        if isinstance(e, werkzeug.exceptions.HTTPException) and not getattr(e, "data", None):
            error = dict(status=str(e.code), title=_status_phrase(e.code), detail=e.description)
            e.data = {"errors": [error]}
        return super().handle_error(e)


def api_decorator(cls):
    """Decorator for the API views:
        - add generic exception handling

    :param cls: The class that will be decorated (e.g. DSRESTResourceAPI, DSRESTRelatedAPI)
    :return: decorated class
    """
    for method_name in ["patch", "post", "delete", "get", "options"]:
        method = getattr(cls, method_name, None)
        if not method:
            continue
        decorated_method = http_method_decorator(method)
        setattr(cls, method_name, decorated_method)
    return cls


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTP Error"


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the supported jsonapi HTTP methods (get, post, patch, delete, options)
    - convert all exceptions to a jsonapi error document

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
        dsrest_exception = None
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        message = ""
        try:
            return fun(*args, **kwargs)

        except JsonapiError as exc:
            dsrest_exception = exc
            if not exc.logged:
                dsrest.log.error(f"{type(exc).__name__}: {exc.message}")

        except werkzeug.exceptions.HTTPException as exc:
            status_code = exc.code
            message = exc.description
            dsrest.log.error(message)

        except Exception as exc:
            # data source errors: a status_code attribute determines the response status
            dsrest.log.exception(exc)
            status_code = getattr(exc, "status_code", status_code)
            message = str(exc) if is_debug() else HIDDEN_LOG

        status_code = getattr(dsrest_exception, "status_code", status_code)
        if isinstance(status_code, bool) or not isinstance(status_code, int) or status_code not in default_exceptions:
            status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        status_code = int(status_code)
        title = getattr(dsrest_exception, "title", None) or _status_phrase(status_code)
        detail = getattr(dsrest_exception, "detail", message)

        errors = dict(status=str(status_code), title=title, detail=detail)
        abort(status_code, errors=[errors])

    return method_wrapper
