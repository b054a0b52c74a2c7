"""
http://jsonapi.org/format/#content-negotiation-servers

Server Responsibilities
Servers MUST send all JSON API data in response documents with the header
"Content-Type: application/vnd.api+json" without any media type parameters.

DSRESTRequest is set as the flask app request_class, the data sources receive
a CallContext that is built from it for every call.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from flask import Request, request as flask_request
import dsrest
from .errors import ValidationError
from .jsonapi_formatting import PaginationParams


# pylint: disable=too-many-ancestors
class DSRESTRequest(Request):
    """
    Parse jsonapi-related the request arguments:
    - header: Content-Type should be "application/vnd.api+json"
    - query args: page[number], page[size], page[offset], page[limit]
    - body: valid json
    """

    jsonapi_content_types = ["application/json", "application/vnd.api+json"]
    is_jsonapi = False  # indicates whether this is a jsonapi request

    def __init__(self, *args, **kwargs):
        """
        constructor
        """
        super().__init__(*args, **kwargs)
        self.parse_content_type()

    def parse_content_type(self):
        """
        Check if the request content type is jsonapi
        """
        if not isinstance(self.content_type, str):  # pragma: no cover
            return

        content_type = self.content_type.split(";")[0].strip()
        if content_type in self.jsonapi_content_types:
            self.is_jsonapi = True

    @property
    def pagination(self) -> PaginationParams:
        """
        :return: the pagination query parameters
        """
        return PaginationParams.from_args(self.args)

    def get_jsonapi_payload(self) -> Dict[str, Any]:
        """
        :return: jsonapi request payload
        :raises ValidationError: if the body isn't a json object
        """
        if not self.is_jsonapi:
            dsrest.log.warning(f'Invalid Media Type! "{self.content_type}"')
        result = self.get_json(force=True, silent=True)
        if not isinstance(result, dict):
            raise ValidationError("Invalid JSON Payload")
        return result


@dataclass
class CallContext:
    """
    Request information passed to the data source methods:
    - plain_request: the flask request
    - query_params: the query arguments, comma separated values are split,
      eg. ?filter=a,b => {"filter": ["a", "b"]}
    - header: request headers
    """

    plain_request: Any
    query_params: Dict[str, List[str]] = field(default_factory=dict)
    header: Any = None


def build_request(req: Optional[Request] = None) -> CallContext:
    """
    :param req: flask request, defaults to the current request
    :return: new CallContext
    """
    if req is None:
        req = flask_request._get_current_object()
    query_params = {key: req.args.get(key, "").split(",") for key in req.args.keys()}
    return CallContext(plain_request=req, query_params=query_params, header=req.headers)
