# Resource registry
#
# The registry holds a ResourceDescriptor for every exposed record class:
# the resource name, the field schema and the data source.
# It's filled when the resources are exposed and frozen when the app starts
# serving requests, after which it is only read.
#
# The field schema is built from the type hints of the record class:
#
# @dataclass
# class Post:
#     id: str = ""
#     title: str = ""
#     author: Optional["User"] = None          => reference to "users"
#     comments: List["Comment"] = field(...)   => collection of "comments"
#
import collections.abc
import dataclasses
import datetime
import decimal
import re
import typing
import uuid
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union
import dsrest
from .capabilities import CRUD
from .util import jsonify, resource_name

try:
    from types import UnionType
except ImportError:  # pragma: no cover
    UnionType = Union

# types that can't be exposed as a resource
NON_RECORD_TYPES = (list, tuple, set, frozenset, dict, str, bytes, bytearray, int, float, complex, bool, Enum)

# annotations of these types are attributes, never relationships
SCALAR_TYPES = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    bool,
    dict,
    decimal.Decimal,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    Enum,
)
SCALAR_NAMES = {
    "Any",
    "str",
    "bytes",
    "bytearray",
    "int",
    "float",
    "complex",
    "bool",
    "dict",
    "Dict",
    "Mapping",
    "object",
    "Decimal",
    "date",
    "datetime",
    "time",
    "timedelta",
    "UUID",
    "None",
}
SEQUENCE_TYPES = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.Collection,
    collections.abc.Iterable,
)
SEQUENCE_NAMES = {
    "list",
    "List",
    "tuple",
    "Tuple",
    "set",
    "Set",
    "frozenset",
    "FrozenSet",
    "Sequence",
    "MutableSequence",
    "Collection",
    "Iterable",
}

_GENERIC_RE = re.compile(r"^(?:[\w.]+\.)?(\w+)\[(.*)\]$", re.DOTALL)


class FieldKind(Enum):
    SCALAR = "scalar"
    REFERENCE = "reference"  # to-one relationship
    COLLECTION = "collection"  # to-many relationship


@dataclass(frozen=True)
class Field:
    name: str  # python attribute name
    json_name: str  # JSON:API member name
    kind: FieldKind
    element_type: Optional[str] = None  # related class name for relationships

    @property
    def is_relationship(self) -> bool:
        return self.kind is not FieldKind.SCALAR

    @property
    def target_name(self) -> Optional[str]:
        """
        :return: the expected resource name of the relationship target
        """
        if self.element_type is None:
            return None
        return resource_name(self.element_type)


@dataclass(frozen=True, eq=False)
class ResourceDescriptor:
    type_name: str
    name: str
    resource_type: type
    fields: Tuple[Field, ...]
    source: CRUD
    relationships: Mapping[str, Field]

    @property
    def attributes(self) -> Tuple[Field, ...]:
        """
        :return: the fields encoded as JSON:API attributes (i.e. all except id and the relationships)
        """
        return tuple(f for f in self.fields if not f.is_relationship and f.name != "id")

    def get_attribute(self, json_name: str) -> Optional[Field]:
        for field in self.attributes:
            if field.json_name == json_name:
                return field
        return None


def _split_args(text: str) -> list:
    """split the arguments of a generic annotation string at the top level commas"""
    result, depth, current = [], 0, ""
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "," and depth == 0:
            result.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        result.append(current.strip())
    return result


def _parse_annotation_string(text: str) -> Tuple[FieldKind, Optional[str]]:
    """
    Parse a forward reference annotation, eg. "Optional['User']", "List[Comment]", "User | None"
    """
    text = text.strip().strip("'\"").strip()
    union_members = [m.strip() for m in text.split("|")] if "[" not in text else []
    if len(union_members) > 1:
        members = [m for m in union_members if m != "None"]
        if len(members) == 1:
            return _parse_annotation_string(members[0])
        return FieldKind.SCALAR, None

    match = _GENERIC_RE.match(text)
    if match:
        outer, inner = match.groups()
        args = _split_args(inner)
        if outer == "Optional" and len(args) == 1:
            return _parse_annotation_string(args[0])
        if outer == "Union":
            members = [a for a in args if a.strip("'\"") != "None"]
            if len(members) == 1:
                return _parse_annotation_string(members[0])
        if outer in SEQUENCE_NAMES and args:
            kind, element_type = _parse_annotation_string(args[0])
            if kind is FieldKind.REFERENCE:
                return FieldKind.COLLECTION, element_type
        return FieldKind.SCALAR, None

    name = text.rsplit(".", 1)[-1]
    if name in SCALAR_NAMES or not name.isidentifier():
        return FieldKind.SCALAR, None
    return FieldKind.REFERENCE, name


def field_kind(annotation: Any) -> Tuple[FieldKind, Optional[str]]:
    """
    :param annotation: type hint of a record field
    :return: field kind, name of the element type (for relationships)
    """
    if isinstance(annotation, str):
        return _parse_annotation_string(annotation)
    if isinstance(annotation, typing.ForwardRef):
        return _parse_annotation_string(annotation.__forward_arg__)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is Union or origin is UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return field_kind(members[0])
        return FieldKind.SCALAR, None

    if origin is not None:
        if isinstance(origin, type) and issubclass(origin, SEQUENCE_TYPES) and not issubclass(origin, (str, bytes, dict)) and args:
            kind, element_type = field_kind(args[0])
            if kind is FieldKind.REFERENCE:
                return FieldKind.COLLECTION, element_type
        return FieldKind.SCALAR, None

    if annotation is Any or annotation is object:
        return FieldKind.SCALAR, None
    if isinstance(annotation, type) and not issubclass(annotation, SCALAR_TYPES + SEQUENCE_TYPES):
        return FieldKind.REFERENCE, annotation.__name__

    return FieldKind.SCALAR, None


def _is_sequence_annotation(annotation: Any) -> bool:
    if isinstance(annotation, str):
        match = _GENERIC_RE.match(annotation.strip().strip("'\""))
        return bool(match) and match.group(1) in SEQUENCE_NAMES
    origin = typing.get_origin(annotation) or annotation
    return isinstance(origin, type) and issubclass(origin, SEQUENCE_TYPES) and not issubclass(origin, (str, bytes, dict))


def _type_hints(resource_type: type) -> Dict[str, Any]:
    """
    :return: the type hints of the record class, unresolved forward references are kept as strings
    """
    try:
        return typing.get_type_hints(resource_type)
    except (NameError, TypeError):
        # forward references to classes that can't be resolved from the module, eg. local classes
        hints = {}
        for klass in reversed(resource_type.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.strip().startswith(("ClassVar", "typing.ClassVar"))
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def build_schema(resource_type: type, relationships: Optional[Mapping[str, str]] = None) -> Tuple[Field, ...]:
    """
    Create the field schema of a record class

    :param resource_type: record class
    :param relationships: optional explicit relationships, {field name: related class name}
    :return: tuple of Field
    """
    relationships = dict(relationships or {})
    hints = _type_hints(resource_type)
    if dataclasses.is_dataclass(resource_type):
        names = [f.name for f in dataclasses.fields(resource_type)]
    else:
        names = list(hints)

    result = []
    for name in names:
        annotation = hints.get(name, Any)
        if name.startswith("_") or _is_classvar(annotation):
            continue
        kind, element_type = field_kind(annotation)
        if name in relationships:
            element_type = relationships.pop(name)
            if kind is not FieldKind.COLLECTION:
                kind = FieldKind.COLLECTION if _is_sequence_annotation(annotation) else FieldKind.REFERENCE
        result.append(Field(name=name, json_name=jsonify(name), kind=kind, element_type=element_type))

    if relationships:
        raise TypeError(f"{resource_type.__name__} has no fields {', '.join(relationships)}")

    return tuple(result)


class Registry:
    """
    Resource descriptors, by resource name, in registration order
    """

    def __init__(self) -> None:
        self._resources: Dict[str, ResourceDescriptor] = {}
        self.frozen = False

    def register(self, prototype: Any, source: CRUD, relationships: Optional[Mapping[str, str]] = None) -> ResourceDescriptor:
        """
        :param prototype: record class, or an (empty) instance of it
        :param source: data source implementing the CRUD interface
        :param relationships: optional explicit relationships, {field name: related class name}
        :return: the new ResourceDescriptor
        """
        if self.frozen:
            raise RuntimeError("Resources can't be added after the API started serving requests")

        resource_type = prototype if isinstance(prototype, type) else type(prototype)
        if issubclass(resource_type, NON_RECORD_TYPES):
            raise TypeError(f"pass a record class (or an empty record instance) to expose a resource, not {resource_type.__name__}")

        fields = build_schema(resource_type, relationships)
        if not fields:
            raise TypeError(f"{resource_type.__name__} has no annotated fields")
        if "id" not in [f.name for f in fields]:
            raise TypeError(f"{resource_type.__name__} has no id field")
        if not isinstance(source, CRUD):
            raise TypeError(f"{type(source).__name__} doesn't implement the CRUD interface")

        name = resource_name(resource_type.__name__)
        if name in self._resources:
            raise ValueError(f'A resource named "{name}" has already been registered')

        descriptor = ResourceDescriptor(
            type_name=resource_type.__name__,
            name=name,
            resource_type=resource_type,
            fields=fields,
            source=source,
            relationships=MappingProxyType({f.json_name: f for f in fields if f.is_relationship}),
        )
        self._resources[name] = descriptor
        dsrest.log.debug(f"Registered {resource_type.__name__} as {name}")
        return descriptor

    def freeze(self) -> None:
        """
        Called when the app starts serving requests, no resources can be registered afterwards
        """
        self.frozen = True

    def lookup_by_plural_name(self, name: str) -> Optional[ResourceDescriptor]:
        return self._resources.get(name)

    def lookup_by_field_element_type(self, type_name: str) -> Optional[ResourceDescriptor]:
        """
        Find the resource of a relationship target
        :param type_name: the element type name of a relationship field, eg. "Comment"
        :return: the resource descriptor, eg. for "comments"
        """
        name = resource_name(type_name)
        for descriptor in self._resources.values():
            if descriptor.name == name or descriptor.type_name == type_name:
                return descriptor
        return None

    def lookup_by_class(self, resource_type: type) -> Optional[ResourceDescriptor]:
        for descriptor in self._resources.values():
            if descriptor.resource_type is resource_type:
                return descriptor
        return None

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        return iter(list(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: object) -> bool:
        return name in self._resources
