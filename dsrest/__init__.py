# flake8: noqa: F401
from .dsrest_init import log, DSREST
from .errors import (
    JsonapiError,
    NotFoundError,
    CapabilityMissingError,
    ForbiddenError,
    ConflictError,
    ValidationError,
    GenericError,
)
from .capabilities import Capability, CRUD, FindAll, FindMultiple, PaginatedFindAll, supports
from .registry import Registry, ResourceDescriptor, Field, FieldKind
from .request import DSRESTRequest, CallContext, build_request
from .jsonapi_formatting import PaginationMode, PaginationParams, jsonapi_format_response
from .json_encoder import DSRESTJSONProvider
from .dsrest_api import DSRESTAPI
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "DSRESTAPI",
    "DSREST",
    "log",
    # data source interfaces:
    "Capability",
    "CRUD",
    "FindAll",
    "FindMultiple",
    "PaginatedFindAll",
    "supports",
    # registry:
    "Registry",
    "ResourceDescriptor",
    "Field",
    "FieldKind",
    # jsonapi:
    "PaginationMode",
    "PaginationParams",
    "jsonapi_format_response",
    "DSRESTJSONProvider",
    # Errors:
    "JsonapiError",
    "NotFoundError",
    "CapabilityMissingError",
    "ForbiddenError",
    "ConflictError",
    "ValidationError",
    "GenericError",
    # request
    "DSRESTRequest",
    "CallContext",
    "build_request",
)
