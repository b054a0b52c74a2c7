# JSON:API encoding and decoding of the data source records
#
# Records are encoded according to their ResourceDescriptor schema:
#
# {
#     "type": "posts",
#     "id": "1",
#     "attributes": {"title": "Hello"},
#     "relationships": {
#         "comments": {
#             "data": [{"type": "comments", "id": "1"}],
#             "links": {"related": "http://localhost:5000/v1/posts/1/comments"}
#         }
#     },
#     "links": {"self": "http://localhost:5000/v1/posts/1"}
# }
#
# Relationship field values are either related records (their id is used)
# or plain ids. When decoding, relationship fields are set to the plain ids.
#
import collections.abc
import dataclasses
from typing import Any, Dict, List, Optional
from .errors import ConflictError, ValidationError
from .jsonapi_formatting import Information
from .registry import Field, FieldKind, ResourceDescriptor


def get_id(obj: Any) -> str:
    """
    :return: the jsonapi id of a record, "" if it hasn't been set
    """
    obj_id = obj.get("id") if isinstance(obj, dict) else getattr(obj, "id", None)
    if obj_id is None:
        return ""
    return str(obj_id)


def _is_collection(data: Any) -> bool:
    """
    :return: whether the data source returned several records (any iterable but strings and mappings)
    """
    return isinstance(data, collections.abc.Iterable) and not isinstance(data, (str, bytes, bytearray, collections.abc.Mapping))


def _linkage(value: Any, field: Field) -> Any:
    """
    :return: resource identifier object(s) for a relationship value
    """

    def identifier(item):
        item_id = item if isinstance(item, (str, int)) else get_id(item)
        return {"type": field.target_name, "id": str(item_id)}

    if field.kind is FieldKind.COLLECTION:
        return [identifier(item) for item in value or []]
    if value is None or value == "":
        return None
    return identifier(value)


def encode_resource(obj: Any, descriptor: ResourceDescriptor, info: Optional[Information] = None) -> Dict[str, Any]:
    """
    :param obj: record to encode
    :param descriptor: descriptor of the record resource
    :param info: url information, used to create the links
    :return: jsonapi resource object
    """
    obj_id = get_id(obj)
    result = {"type": descriptor.name, "id": obj_id}
    result["attributes"] = {field.json_name: getattr(obj, field.name, None) for field in descriptor.attributes}

    relationships = {}
    for rel_name, field in descriptor.relationships.items():
        relationship = {"data": _linkage(getattr(obj, field.name, None), field)}
        if info is not None and obj_id:
            relationship["links"] = {"related": info.url(descriptor.name, obj_id, rel_name)}
        relationships[rel_name] = relationship
    if relationships:
        result["relationships"] = relationships

    if info is not None and obj_id:
        result["links"] = {"self": info.url(descriptor.name, obj_id)}

    return result


def marshal(data: Any, descriptor: ResourceDescriptor, info: Optional[Information] = None) -> Any:
    """
    Encode the data returned by a data source: a single record, a collection or None
    :return: jsonapi primary data
    """
    if data is None:
        return None
    if _is_collection(data):
        return [encode_resource(obj, descriptor, info) for obj in data]
    return encode_resource(data, descriptor, info)


def _document_data(document: Any) -> Any:
    if not isinstance(document, dict) or "data" not in document:
        raise ValidationError("missing mandatory data key")
    return document["data"]


def _linkage_ids(linkage: Any, field: Field, rel_name: str) -> Any:
    """
    :return: the id(s) of the resource identifier object(s)
    """

    def identifier_id(item):
        if not isinstance(item, dict) or item.get("id") is None:
            raise ValidationError(f"Invalid resource identifier for relationship {rel_name}")
        item_type = item.get("type")
        if item_type is not None and field.target_name and item_type != field.target_name:
            raise ConflictError(f"Invalid type {item_type} for relationship {rel_name}")
        return str(item["id"])

    if field.kind is FieldKind.COLLECTION:
        if not isinstance(linkage, list):
            raise ValidationError(f"Relationship {rel_name} requires a list of resource identifiers")
        return [identifier_id(item) for item in linkage]
    if linkage is None:
        return None
    return identifier_id(linkage)


def decode_values(data: Any, descriptor: ResourceDescriptor, require_type: bool = False) -> Dict[str, Any]:
    """
    :param data: jsonapi resource object
    :param require_type: whether a missing "type" member is an error
    :return: the record values, by python attribute name
    """
    if not isinstance(data, dict):
        raise ValidationError("data must contain an object")

    obj_type = data.get("type")
    if obj_type is None and require_type:
        raise ValidationError("missing mandatory type key")
    if obj_type is not None and obj_type != descriptor.name:
        raise ConflictError(f"Invalid type {obj_type} != {descriptor.name}")

    values = {}
    if data.get("id") is not None:
        values["id"] = str(data["id"])

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise ValidationError("attributes must be an object")
    for attr_name, value in attributes.items():
        field = descriptor.get_attribute(attr_name)
        if field is None:
            raise ValidationError(f'Invalid attribute "{attr_name}" for {descriptor.name}')
        values[field.name] = value

    relationships = data.get("relationships") or {}
    if not isinstance(relationships, dict):
        raise ValidationError("relationships must be an object")
    for rel_name, relationship in relationships.items():
        field = descriptor.relationships.get(rel_name)
        if field is None:
            raise ValidationError(f'Invalid relationship "{rel_name}" for {descriptor.name}')
        if not isinstance(relationship, dict) or "data" not in relationship:
            raise ValidationError(f"Relationship {rel_name} has no data")
        values[field.name] = _linkage_ids(relationship["data"], field, rel_name)

    return values


def _new_record(values: Dict[str, Any], descriptor: ResourceDescriptor) -> Any:
    resource_type = descriptor.resource_type
    if dataclasses.is_dataclass(resource_type):
        init_names = {f.name for f in dataclasses.fields(resource_type) if f.init}
        try:
            obj = resource_type(**{k: v for k, v in values.items() if k in init_names})
        except TypeError as exc:
            raise ValidationError(f"Invalid {descriptor.name} object: {exc}")
        for name, value in values.items():
            if name not in init_names:
                object.__setattr__(obj, name, value)
        return obj

    obj = resource_type()
    for name, value in values.items():
        setattr(obj, name, value)
    return obj


def unmarshal(document: Any, descriptor: ResourceDescriptor) -> List[Any]:
    """
    Create new records from a request document
    :param document: jsonapi document, the data member may hold an object or a list of objects
    :return: list of records
    """
    data = _document_data(document)
    items = data if isinstance(data, list) else [data]
    return [_new_record(decode_values(item, descriptor, require_type=True), descriptor) for item in items]


def unmarshal_into(document: Any, descriptor: ResourceDescriptor, obj: Any) -> Any:
    """
    Merge the attributes and relationships present in the document into an existing record,
    the other fields are left untouched

    :param document: jsonapi document with a single resource object
    :param obj: record to update
    :return: the updated record (a copy for frozen dataclasses)
    """
    data = _document_data(document)
    if isinstance(data, list):
        if len(data) != 1:
            raise ValidationError("expected exactly one object")
        data = data[0]

    values = decode_values(data, descriptor)
    if dataclasses.is_dataclass(obj) and type(obj).__dataclass_params__.frozen:
        return dataclasses.replace(obj, **values)
    for name, value in values.items():
        setattr(obj, name, value)
    return obj
