from types import SimpleNamespace

import pytest
from flask import Flask

from dsrest import DSRESTAPI
from memory_sources import Comment, CommentSource, Post, PostSource, User, UserSource


@pytest.fixture
def store() -> SimpleNamespace:
    posts = PostSource(
        Post(id="1", title="Hello", body="First post", author="1", comments=["1", "2"], tags=["intro"]),
        Post(id="2", title="Again", body="Second post", author="1"),
        Post(id="3", title="Bye", body="Last post"),
    )
    comments = CommentSource(posts, Comment(id="1", text="Nice"), Comment(id="2", text="Meh"), Comment(id="3", text="Unrelated"))
    users = UserSource(User(id="1", name="marvin"))
    return SimpleNamespace(posts=posts, comments=comments, users=users)


@pytest.fixture
def api(store: SimpleNamespace) -> DSRESTAPI:
    app = Flask("dsrest_tests")
    app.config["TESTING"] = True
    api = DSRESTAPI(app, prefix="v1")
    api.expose((Post, store.posts), (Comment, store.comments), (User, store.users))
    return api


@pytest.fixture
def app(api: DSRESTAPI) -> Flask:
    return api.handler()


@pytest.fixture
def client(app: Flask):
    return app.test_client()
