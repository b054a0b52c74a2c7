# JSON:API response formatting functions:
# - pagination links (https://jsonapi.org/format/#fetching-pagination)
# - top level documents
#
# Two pagination strategies are supported, the client has to use either
# page[number] and page[size], or page[offset] and page[limit].
# Any other combination is not a valid pagination request and
# the collection will be fetched without pagination.
#
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode
from werkzeug.datastructures import MultiDict
from .errors import ValidationError

JSONAPI_VERSION = "1.0"


class PaginationMode(Enum):
    NONE = "none"
    PAGE_NUMBER_SIZE = "number/size"
    PAGE_OFFSET_LIMIT = "offset/limit"


@dataclass(frozen=True)
class Information:
    """
    Url information used to generate links:
    the API prefix (eg. "/v1") and the optional base url (eg. "http://localhost:5000")
    """

    prefix: str = ""
    base_url: str = ""

    def url(self, *parts: str) -> str:
        """
        :return: absolute url (relative if no base url has been configured) for the path parts
        """
        return "/".join([f"{self.base_url}{self.prefix}"] + [str(part) for part in parts])


@dataclass(frozen=True)
class PaginationParams:
    """
    Raw pagination query parameters
    """

    number: str = ""
    size: str = ""
    offset: str = ""
    limit: str = ""

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "PaginationParams":
        """
        :param args: request query arguments
        """
        return cls(
            number=args.get("page[number]", ""),
            size=args.get("page[size]", ""),
            offset=args.get("page[offset]", ""),
            limit=args.get("page[limit]", ""),
        )

    @property
    def mode(self) -> PaginationMode:
        if self.number and self.size and not self.offset and not self.limit:
            return PaginationMode.PAGE_NUMBER_SIZE
        if self.offset and self.limit and not self.number and not self.size:
            return PaginationMode.PAGE_OFFSET_LIMIT
        return PaginationMode.NONE

    @property
    def is_valid(self) -> bool:
        return self.mode is not PaginationMode.NONE

    def parse(self) -> Tuple[int, int]:
        """
        :return: (number, size) or (offset, limit), depending on the mode
        :raises ValidationError: if the values aren't valid
        """
        if self.mode is PaginationMode.PAGE_NUMBER_SIZE:
            return _parse_uint("page[number]", self.number, 1), _parse_uint("page[size]", self.size, 1)
        if self.mode is PaginationMode.PAGE_OFFSET_LIMIT:
            return _parse_uint("page[offset]", self.offset, 0), _parse_uint("page[limit]", self.limit, 1)
        raise ValidationError("Invalid pagination parameters")

    def get_links(self, path: str, args: Mapping[str, Any], count: int, base_url: str = "") -> Dict[str, str]:
        """
        Create the first, prev, next and last pagination links

        :param path: request path, eg. "/v1/posts"
        :param args: request query arguments, these are preserved in the links
        :param count: total number of items, as returned by the data source
        :param base_url: prefix for the generated urls
        :return: links dictionary
        """
        result = {}
        params = MultiDict(args)
        request_url = f"{base_url}{path}"

        def get_link(key, value):
            params[key] = str(value)
            query = urlencode(sorted(params.items(multi=True), key=lambda item: item[0]))
            return f"{request_url}?{query}"

        if self.mode is PaginationMode.PAGE_NUMBER_SIZE:
            number, size = self.parse()
            # there is one more page with len(items) < size if count isn't a multiple of size
            total_pages = max(-(-count // size), 1)
            if number != 1:
                result["first"] = get_link("page[number]", 1)
                result["prev"] = get_link("page[number]", number - 1)
            if number != total_pages:
                result["next"] = get_link("page[number]", number + 1)
                result["last"] = get_link("page[number]", total_pages)
        else:
            offset, limit = self.parse()
            if offset != 0:
                result["first"] = get_link("page[offset]", 0)
                result["prev"] = get_link("page[offset]", offset - limit if offset >= limit else 0)
            # check if there are more entries to be loaded
            if offset + limit < count:
                result["next"] = get_link("page[offset]", offset + limit)
                result["last"] = get_link("page[offset]", max(count - limit, 0))

        return result


def _parse_uint(name: str, value: str, minimum: int) -> int:
    try:
        result = int(value)
    except ValueError:
        raise ValidationError(f"Pagination Value Error: {name}={value}")
    if result < minimum:
        raise ValidationError(f"Pagination Value Error: {name} must be at least {minimum}")
    return result


def jsonapi_format_response(data: Any = None, links: Optional[Dict[str, str]] = None, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Create a response dict according to the json:api schema
    :param data: the encoded primary data
    :return: jsonapi formatted dictionary
    """
    result = dict(data=data)
    if meta:
        result["meta"] = meta
    result["jsonapi"] = dict(version=JSONAPI_VERSION)
    if links:
        result["links"] = links
    return result
