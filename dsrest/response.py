# Response class and helpers used to write the jsonapi responses
from http import HTTPStatus
from typing import Any, Dict, Optional
from flask import Response, current_app

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class DSRESTResponse(Response):
    """
    Response class
    """

    dsrest_headers = {"Content-Type": JSONAPI_MEDIA_TYPE}


def respond_with(document: Any, status: int = HTTPStatus.OK, headers: Optional[Dict[str, str]] = None) -> DSRESTResponse:
    """
    :param document: jsonapi document
    :param status: HTTP status code
    :param headers: additional response headers, eg. Location
    :return: json encoded response with the jsonapi content type
    """
    body = current_app.json.dumps(document)
    response = DSRESTResponse(body, status=int(status), headers=headers)
    response.headers.update(DSRESTResponse.dsrest_headers)
    return response


def no_content(headers: Optional[Dict[str, str]] = None) -> DSRESTResponse:
    """
    :return: 204 response without body
    """
    return DSRESTResponse(status=HTTPStatus.NO_CONTENT.value, headers=headers)
