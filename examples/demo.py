#!/usr/bin/env python
#
# In-memory users and chocolates exposed as JSON:API resources
#
# run:
# $ FLASK_APP=demo flask run
# or
# $ python demo.py [host [port]]
#
# then:
# $ curl http://localhost:5000/v1/users
# $ curl "http://localhost:5000/v1/users?page[number]=1&page[size]=1"
# $ curl http://localhost:5000/v1/users/1/sweets
#
import itertools
import sys
from dataclasses import dataclass, field
from typing import List
from flask import Flask
from dsrest import DSRESTAPI, CRUD, FindAll, FindMultiple, PaginatedFindAll, NotFoundError, ValidationError


@dataclass
class Chocolate:
    id: str = ""
    name: str = ""
    taste: str = ""


@dataclass
class User:
    id: str = ""
    username: str = ""
    sweets: List[Chocolate] = field(default_factory=list)


class MemorySource(CRUD, FindAll, FindMultiple):
    """
    Stores the records in a dict, by id
    """

    def __init__(self, *objs):
        self.objs = {}
        self._ids = itertools.count(1)
        for obj in objs:
            self.create(obj, None)

    def find_one(self, id, request):
        if id not in self.objs:
            raise NotFoundError(f"{id} not found")
        return self.objs[id]

    def find_all(self, request):
        return list(self.objs.values())

    def find_multiple(self, ids, request):
        return [self.find_one(id, request) for id in ids]

    def create(self, obj, request):
        obj.id = str(next(self._ids))
        self.objs[obj.id] = obj
        return obj.id

    def update(self, obj, request):
        self.objs[obj.id] = obj

    def delete(self, id, request):
        self.find_one(id, request)
        del self.objs[id]


class UserSource(MemorySource, PaginatedFindAll):
    def paginated_find_all(self, request):
        users = list(self.objs.values())
        params = request.query_params
        try:
            if "page[number]" in params:
                size = int(params["page[size]"][0])
                start = (int(params["page[number]"][0]) - 1) * size
            else:
                size = int(params["page[limit]"][0])
                start = int(params["page[offset]"][0])
        except ValueError:
            raise ValidationError("Invalid page parameters")
        return users[start : start + size], len(users)


class ChocolateSource(MemorySource):
    def __init__(self, users, *objs):
        super().__init__(*objs)
        self.users = users

    def find_all(self, request):
        # /users/{id}/sweets passes the user id as usersID
        user_ids = request.query_params.get("usersID") if request else None
        if not user_ids:
            return super().find_all(request)
        user = self.users.find_one(user_ids[0], request)
        return [self.find_one(choc_id, request) for choc_id in user.sweets]


def create_api(app, host="localhost", port=5000, prefix="v1"):
    users = UserSource()
    chocolates = ChocolateSource(users, Chocolate(name="Ritter Sport", taste="Very Good"), Chocolate(name="Milka", taste="Sweet"))
    users.create(User(username="marvin", sweets=["1"]), None)
    users.create(User(username="trillian", sweets=["1", "2"]), None)

    api = DSRESTAPI(app, prefix=prefix, base_url=f"http://{host}:{port}")
    api.expose_object(User, users)
    api.expose_object(Chocolate, chocolates)
    print(f"Starting API: http://{host}:{port}/{prefix}")
    return api


def create_app(host="localhost", port=5000):
    app = Flask("dsrest_demo")
    create_api(app, host, port)
    return app


HOST = sys.argv[1] if len(sys.argv) > 1 else "localhost"
PORT = int(sys.argv[2]) if len(sys.argv) > 2 else 5000
app = create_app(HOST, PORT)

if __name__ == "__main__":
    app.run(host=HOST, port=PORT)
