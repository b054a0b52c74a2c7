#  This file contains the jsonapi-related flask-restful "Resource" objects:
#  - DSRESTResourceAPI for the exposed collections and instances
#  - DSRESTRelatedAPI for the linked resources (/posts/1/comments)
#
# The resource classes are created for every exposed record class by
# DSRESTAPI.expose_object, the following class attributes are set:
#  - descriptor: the ResourceDescriptor of the exposed record class
#  - registry: the Registry holding all exposed resources
#  - info: url information (prefix and base url)
#
# The data source methods are called depending on the request and the
# capabilities the data source implements, cfr. dsrest.capabilities
#
# pylint: disable=redefined-builtin,invalid-name
#
import dsrest
from flask import request
from flask_restful import Resource as FRSResource
from http import HTTPStatus
from .capabilities import Capability, require
from .codec import marshal, unmarshal, unmarshal_into
from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .jsonapi_formatting import jsonapi_format_response
from .request import build_request
from .response import no_content, respond_with

COLLECTION_ALLOW = "GET,POST,PATCH,OPTIONS"
INSTANCE_ALLOW = "GET,PATCH,DELETE,OPTIONS"


class Resource(FRSResource):
    """
    Superclass for the exposed endpoints
    * Collections and instances : DSRESTResourceAPI
    * Linked resources : DSRESTRelatedAPI
    """

    descriptor = None
    registry = None
    info = None

    def options(self, **kwargs):
        """
        HTTP OPTIONS
        """
        allow = INSTANCE_ALLOW if "id" in kwargs else COLLECTION_ALLOW
        return no_content({"Allow": allow})

    def _respond_with(self, data, descriptor=None, status=HTTPStatus.OK, links=None, meta=None, headers=None):
        """
        Encode the data source result and create the response
        """
        descriptor = descriptor or self.descriptor
        result = jsonapi_format_response(marshal(data, descriptor, self.info), links=links, meta=meta)
        return respond_with(result, status, headers)


class DSRESTResourceAPI(Resource):
    """
    Flask webservice wrapper for the data source of the exposed resource

    /posts          GET, POST, OPTIONS
    /posts/{id}     GET, PATCH, DELETE, OPTIONS
    """

    def get(self, **kwargs):
        """
        HTTP GET: return instances
        If no id is given: return all instances, paginated if requested
        If an id is given, get an instance by id
        If a comma separated list of ids is given, get the instances by their ids
        """
        if "id" in kwargs:
            return self._read(kwargs["id"])
        return self._index()

    def _index(self):
        pagination = request.pagination
        source = self.descriptor.source

        if pagination.is_valid:
            source = require(source, Capability.PAGINATED_FIND_ALL)
            # malformed page values should fail before the data source is called
            pagination.parse()
            objs, count = source.paginated_find_all(build_request())
            count = int(count)
            links = pagination.get_links(request.path, request.args, count, self.info.base_url)
            return self._respond_with(objs, links=links, meta={"total": count})

        source = require(source, Capability.FIND_ALL)
        objs = source.find_all(build_request())
        return self._respond_with(objs)

    def _read(self, id):
        ids = id.split(",")
        source = self.descriptor.source

        if len(ids) == 1:
            obj = source.find_one(ids[0], build_request())
            if obj is None:
                raise NotFoundError(f"No {self.descriptor.name} with id {ids[0]}")
        else:
            source = require(source, Capability.FIND_MULTIPLE)
            obj = source.find_multiple(ids, build_request())

        return self._respond_with(obj)

    def post(self, **kwargs):
        """
        http://jsonapi.org/format/#crud-creating
        The request MUST include a single resource object as primary data.
        The resource object MUST contain at least a type member.

        Response:
        403: This implementation does not accept client-generated IDs
        201: Created
        Location Header identifying the location of the newly created resource
        Body : created object, as returned by the data source
        """
        payload = request.get_jsonapi_payload()
        new_objs = unmarshal(payload, self.descriptor)
        if len(new_objs) != 1:
            raise ValidationError("expected exactly one object")

        data = payload["data"]
        if isinstance(data, list):
            data = data[0]
        if data.get("id") not in (None, ""):
            raise ForbiddenError("Client generated IDs are not supported.")

        call_context = build_request()
        id = self.descriptor.source.create(new_objs[0], call_context)
        location = f"{self.info.prefix}/{self.descriptor.name}/{id}"

        obj = self.descriptor.source.find_one(str(id), call_context)
        if obj is None:
            raise NotFoundError(f"Created {self.descriptor.name} {id} not found")

        return self._respond_with(obj, status=HTTPStatus.CREATED, headers={"Location": location})

    def patch(self, **kwargs):
        """
        https://jsonapi.org/format/#crud-updating
        Update the object with the specified id:
        the attributes and relationships in the request are merged into the object
        returned by the data source, the result is passed to the data source update
        """
        id = kwargs.get("id")
        payload = request.get_jsonapi_payload()

        if "data" not in payload:
            raise ForbiddenError("missing mandatory data key.")
        data = payload["data"]
        if not isinstance(data, dict):
            raise ForbiddenError("data must contain an object.")
        if "id" not in data:
            raise ForbiddenError("missing mandatory id key.")
        if "type" not in data:
            raise ForbiddenError("missing mandatory type key.")
        if str(data["id"]) != id:
            raise ConflictError(f"Invalid ID {data['id']} != {id}")
        if data["type"] != self.descriptor.name:
            raise ConflictError(f"Invalid type {data['type']} != {self.descriptor.name}")

        call_context = build_request()
        obj = self.descriptor.source.find_one(id, call_context)
        if obj is None:
            raise NotFoundError(f"No {self.descriptor.name} with id {id}")

        obj = unmarshal_into(payload, self.descriptor, obj)
        self.descriptor.source.update(obj, call_context)
        return no_content()

    def delete(self, **kwargs):
        """
        http://jsonapi.org/format/1.1/#crud-deleting:
        A server MUST return a 204 No Content status code if a deletion
        request is successful and no content is returned.
        """
        id = kwargs.get("id")
        self.descriptor.source.delete(id, build_request())
        return no_content()


class DSRESTRelatedAPI(Resource):
    """
    Linked resources: /posts/{id}/comments

    The relationship field of the parent record determines the related
    resource, its data source is asked for all records with a
    "<parent name>ID" query parameter, eg. postsID=1, the data source has to
    filter the result
    """

    def get(self, id, linked):
        field = self.descriptor.relationships.get(linked)
        target = self.registry.lookup_by_field_element_type(field.element_type) if field else None
        if target is None:
            raise NotFoundError(f"No resource handler is registered to handle the linked resource {linked}")

        source = require(target.source, Capability.FIND_ALL)
        call_context = build_request()
        call_context.query_params[f"{self.descriptor.name}ID"] = [id]
        dsrest.log.debug(f"Fetching {target.name} linked to {self.descriptor.name} {id}")
        objs = source.find_all(call_context)
        return self._respond_with(objs, descriptor=target)
