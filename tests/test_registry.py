from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from dsrest import Capability, CapabilityMissingError, FieldKind, Registry, supports
from dsrest.capabilities import require
from dsrest.registry import build_schema, field_kind
from dsrest.util import jsonify, normalize_prefix, resource_name
from memory_sources import Comment, CommentSource, Post, PostSource, User, UserSource


def _kinds(fields) -> dict:
    return {f.name: (f.kind, f.element_type) for f in fields}


def test_schema_from_type_hints() -> None:
    assert _kinds(build_schema(Post)) == {
        "id": (FieldKind.SCALAR, None),
        "title": (FieldKind.SCALAR, None),
        "body": (FieldKind.SCALAR, None),
        "author": (FieldKind.REFERENCE, "User"),
        "comments": (FieldKind.COLLECTION, "Comment"),
        "tags": (FieldKind.SCALAR, None),
    }


def test_schema_with_unresolved_forward_references() -> None:
    @dataclass
    class Article:
        id: str = ""
        writer: "Optional[Writer]" = None  # noqa: F821
        reviewers: "List[Writer]" = field(default_factory=list)  # noqa: F821
        score: "int" = 0

    assert _kinds(build_schema(Article)) == {
        "id": (FieldKind.SCALAR, None),
        "writer": (FieldKind.REFERENCE, "Writer"),
        "reviewers": (FieldKind.COLLECTION, "Writer"),
        "score": (FieldKind.SCALAR, None),
    }


def test_schema_with_explicit_relationships() -> None:
    @dataclass
    class Ticket:
        id: str = ""
        owner: str = ""
        watchers: List[str] = field(default_factory=list)

    kinds = _kinds(build_schema(Ticket, {"owner": "User", "watchers": "User"}))
    assert kinds["owner"] == (FieldKind.REFERENCE, "User")
    assert kinds["watchers"] == (FieldKind.COLLECTION, "User")

    with pytest.raises(TypeError):
        build_schema(Ticket, {"assignee": "User"})


@pytest.mark.parametrize(
    "annotation, expected",
    [
        (str, (FieldKind.SCALAR, None)),
        (Optional[int], (FieldKind.SCALAR, None)),
        (List[int], (FieldKind.SCALAR, None)),
        (list, (FieldKind.SCALAR, None)),
        (dict, (FieldKind.SCALAR, None)),
        (User, (FieldKind.REFERENCE, "User")),
        (Optional[User], (FieldKind.REFERENCE, "User")),
        (List[Comment], (FieldKind.COLLECTION, "Comment")),
        ("List['Comment']", (FieldKind.COLLECTION, "Comment")),
        ("User | None", (FieldKind.REFERENCE, "User")),
        ("Optional[str]", (FieldKind.SCALAR, None)),
    ],
)
def test_field_kind(annotation, expected) -> None:
    assert field_kind(annotation) == expected


def test_register() -> None:
    registry = Registry()
    posts = PostSource()
    descriptor = registry.register(Post, posts)

    assert descriptor.name == "posts"
    assert descriptor.type_name == "Post"
    assert descriptor.resource_type is Post
    assert descriptor.source is posts
    assert set(descriptor.relationships) == {"author", "comments"}
    assert [f.json_name for f in descriptor.attributes] == ["title", "body", "tags"]
    assert descriptor.relationships["comments"].target_name == "comments"
    assert "posts" in registry
    assert len(registry) == 1


def test_register_an_instance() -> None:
    registry = Registry()
    descriptor = registry.register(Comment(), UserSource())
    assert descriptor.name == "comments"
    assert descriptor.resource_type is Comment


def test_register_plain_class() -> None:
    class Note:
        id: str
        text: str

    descriptor = Registry().register(Note, UserSource())
    assert descriptor.name == "notes"
    assert [f.name for f in descriptor.fields] == ["id", "text"]


def test_register_duplicate() -> None:
    registry = Registry()
    registry.register(Post, PostSource())
    with pytest.raises(ValueError):
        registry.register(Post(), PostSource())


@pytest.mark.parametrize("prototype", [list, dict, [], {}, 5, "posts"])
def test_register_not_a_record(prototype) -> None:
    with pytest.raises(TypeError):
        Registry().register(prototype, UserSource())


def test_register_without_id() -> None:
    @dataclass
    class Anonymous:
        name: str = ""

    class Empty:
        pass

    with pytest.raises(TypeError):
        Registry().register(Anonymous, UserSource())
    with pytest.raises(TypeError):
        Registry().register(Empty, UserSource())


def test_register_without_crud() -> None:
    class ReadOnly:
        def find_one(self, id, request):
            return None

    with pytest.raises(TypeError):
        Registry().register(User, ReadOnly())


def test_register_frozen() -> None:
    registry = Registry()
    registry.register(User, UserSource())
    registry.freeze()
    with pytest.raises(RuntimeError):
        registry.register(Post, PostSource())
    assert len(registry) == 1


def test_lookups() -> None:
    registry = Registry()
    posts = registry.register(Post, PostSource())
    comments = registry.register(Comment, CommentSource(PostSource()))

    assert registry.lookup_by_plural_name("posts") is posts
    assert registry.lookup_by_plural_name("post") is None
    assert registry.lookup_by_field_element_type("Comment") is comments
    assert registry.lookup_by_field_element_type(posts.relationships["comments"].element_type) is comments
    assert registry.lookup_by_field_element_type("User") is None
    assert registry.lookup_by_class(Post) is posts
    assert registry.lookup_by_class(User) is None
    assert list(registry) == [posts, comments]


def test_capabilities() -> None:
    assert supports(PostSource(), Capability.FIND_MULTIPLE)
    assert supports(PostSource(), "PaginatedFindAll")
    assert supports(UserSource(), Capability.CRUD)
    assert not supports(UserSource(), Capability.FIND_ALL)

    source = PostSource()
    assert require(source, Capability.FIND_ALL) is source
    with pytest.raises(CapabilityMissingError) as exc_info:
        require(UserSource(), Capability.FIND_ALL)
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Resource does not implement the FindAll interface"


@pytest.mark.parametrize(
    "type_name, name",
    [("Post", "posts"), ("Category", "categories"), ("Person", "people"), ("BlogPost", "blogPosts")],
)
def test_resource_name(type_name: str, name: str) -> None:
    assert resource_name(type_name) == name


def test_naming_helpers() -> None:
    assert jsonify("ID") == "id"
    assert jsonify("createdAt") == "createdAt"
    assert normalize_prefix("v1") == "/v1"
    assert normalize_prefix("/v1/") == "/v1"
    assert normalize_prefix("") == ""
