# Data source capabilities
#
# A data source MUST implement the CRUD interface in order to be exposed,
# all the other interfaces are optional. Support for an optional interface is
# declared by inheriting from it, eg.
#
# class PostSource(CRUD, FindAll, PaginatedFindAll):
#     ...
#
# The dispatcher checks the declared interfaces when a request comes in
# and responds with 404 if the interface required by the request is missing.
#
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, List, Tuple
from .errors import CapabilityMissingError


class Capability(str, Enum):
    CRUD = "CRUD"
    FIND_ALL = "FindAll"
    FIND_MULTIPLE = "FindMultiple"
    PAGINATED_FIND_ALL = "PaginatedFindAll"


class CRUD(ABC):
    """
    The CRUD interface MUST be implemented in order to expose a data source

    Every method receives the dsrest.request.CallContext of the http request
    """

    @abstractmethod
    def find_one(self, id: str, request) -> Any:
        """
        :param id: jsonapi id from the url
        :return: the object with the given id
        """

    @abstractmethod
    def create(self, obj: Any, request) -> str:
        """
        Store a new object
        :return: the id of the new object
        """

    @abstractmethod
    def update(self, obj: Any, request) -> None:
        """
        :param obj: the stored object, with the request attributes merged into it
        """

    @abstractmethod
    def delete(self, id: str, request) -> None:
        pass


class FindAll(ABC):
    """
    Optional interface to fetch all records at once
    (also used to fetch linked resources)
    """

    @abstractmethod
    def find_all(self, request) -> Iterable[Any]:
        pass


class FindMultiple(ABC):
    """
    Optional interface to fetch multiple records by their id at once, eg. /posts/1,2,3
    """

    @abstractmethod
    def find_multiple(self, ids: List[str], request) -> Iterable[Any]:
        pass


class PaginatedFindAll(ABC):
    """
    Optional interface to fetch a subset of all records.

    The pagination query parameters must be used to limit the result,
    either page[number] and page[size], or page[offset] and page[limit].
    The pagination links are generated from the returned total count.
    """

    @abstractmethod
    def paginated_find_all(self, request) -> Tuple[Iterable[Any], int]:
        """
        :return: objects, total count
        """


_INTERFACES = {
    Capability.CRUD: CRUD,
    Capability.FIND_ALL: FindAll,
    Capability.FIND_MULTIPLE: FindMultiple,
    Capability.PAGINATED_FIND_ALL: PaginatedFindAll,
}


def supports(source: Any, capability) -> bool:
    """
    :param source: data source
    :param capability: Capability (or its name, eg. "FindAll")
    :return: whether the data source declares the capability interface
    """
    return isinstance(source, _INTERFACES[Capability(capability)])


def require(source: Any, capability) -> Any:
    """
    :return: source, if it implements the capability
    :raises CapabilityMissingError: if it doesn't
    """
    capability = Capability(capability)
    if not supports(source, capability):
        raise CapabilityMissingError(capability)
    return source
