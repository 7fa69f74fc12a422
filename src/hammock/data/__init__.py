"""Active-record persistence for hammock.

Models declare a table and typed fields, then save, find, list and
delete themselves through a synchronous SQLite ``Database``::

    from hammock.data import Database, Field, Model

    class Post(Model):
        table = "posts"
        fields = (Field("title", "string"), Field("published", "bool"))

    db = Database("sqlite:///app.db")
    db.register(Post)

    post = Post.create({"title": "Hello", "published": False})
    same = Post.find_or_fail(post.id)
"""

from hammock.data.database import Database
from hammock.data.errors import (
    DataError,
    DomainError,
    EntityDeletedError,
    PreconditionError,
    QueryError,
    RecordNotFoundError,
    StorageNotConfiguredError,
)
from hammock.data.model import Model, accessor, mutator
from hammock.data.schema import Field, SchemaRegistry, coerce_attributes, coerce_type
from hammock.data.statements import Delete, Insert, Select, Update

__all__ = [
    "DataError",
    "Database",
    "Delete",
    "DomainError",
    "EntityDeletedError",
    "Field",
    "Insert",
    "Model",
    "PreconditionError",
    "QueryError",
    "RecordNotFoundError",
    "SchemaRegistry",
    "Select",
    "StorageNotConfiguredError",
    "Update",
    "accessor",
    "coerce_attributes",
    "coerce_type",
    "mutator",
]
