"""Active-record models.

A model is a mutable bag of attributes that knows how to persist itself
to one table::

    class Post(Model):
        table = "posts"
        fields = (Field("title", "string"), Field("published", "bool"))

        @accessor("title")
        def _title(self) -> str:
            return self.attributes.get("title", "").strip()

    db.register(Post)

    post = Post.create({"title": "Hello", "published": False})
    post.set("published", True)
    post.save_if_changed()

    Post.find_or_fail(post.id).delete()

Accessors and mutators are plain methods marked with ``@accessor(name)``
/ ``@mutator(name)``. They are collected into per-class lookup tables when
the class is created; nothing is discovered by name at runtime.

Lifecycle: constructed (no id) -> persisted (has id) -> deleted. A deleted
entity refuses further ``set()``, ``save()`` and ``delete()`` calls.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Self

from hammock.data.errors import (
    EntityDeletedError,
    PreconditionError,
    RecordNotFoundError,
    StorageNotConfiguredError,
)
from hammock.data.schema import Field

if TYPE_CHECKING:
    from hammock.data.database import Database

_ACCESSOR_MARK = "__hammock_accessor__"
_MUTATOR_MARK = "__hammock_mutator__"


def accessor(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a method as the getter for attribute *name*.

    The method takes only ``self`` and returns the attribute value.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, _ACCESSOR_MARK, name)
        return func

    return decorator


def mutator(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a method as the setter for attribute *name*.

    The method takes ``(self, value)`` and is responsible for storing the
    value, usually via ``self.attributes_ref[name] = ...``.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, _MUTATOR_MARK, name)
        return func

    return decorator


def _snake_case(name: str) -> str:
    """``BlogPost`` -> ``blog_post``."""
    return re.sub(r"(.)(?=[A-Z])", r"\1_", name).lower()


class Model:
    """Base class for active-record entities.

    ``table`` defaults to the snake_cased class name. A subclass of a
    model that declares ``table`` explicitly shares that table; a subclass
    of a model whose name was derived gets its own derived name.
    """

    table: ClassVar[str] = ""
    fields: ClassVar[tuple[Field, ...]] = ()
    storage: ClassVar[Database | None] = None

    _table_declared: ClassVar[bool] = False
    _accessors: ClassVar[dict[str, Callable[[Any], Any]]] = {}
    _mutators: ClassVar[dict[str, Callable[[Any, Any], None]]] = {}

    __slots__ = ("_attributes", "_deleted", "_original_attributes")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get("table"):
            cls._table_declared = True
        elif not cls._table_declared:
            cls.table = _snake_case(cls.__name__)
        accessors = dict(cls._accessors)
        mutators = dict(cls._mutators)
        for member in cls.__dict__.values():
            name = getattr(member, _ACCESSOR_MARK, None)
            if name is not None:
                accessors[name] = member
            name = getattr(member, _MUTATOR_MARK, None)
            if name is not None:
                mutators[name] = member
        cls._accessors = accessors
        cls._mutators = mutators

    def __init__(self, attributes: Mapping[str, Any] | None = None) -> None:
        self._attributes: dict[str, Any] = {}
        self._deleted = False
        for name, value in (attributes or {}).items():
            self.set(name, value)
        self._original_attributes: dict[str, Any] = dict(self._attributes)

    # -- Attribute access --

    def get(self, name: str) -> Any:
        """Return attribute *name*, or ``None`` if it is not set."""
        getter = self._accessors.get(name)
        if getter is not None:
            return getter(self)
        return self._attributes.get(name)

    def set(self, name: str, value: Any) -> None:
        """Set attribute *name*, running its mutator if one is declared."""
        self._check_not_deleted()
        setter = self._mutators.get(name)
        if setter is not None:
            setter(self, value)
        else:
            self._attributes[name] = value

    def has(self, name: str) -> bool:
        """True if attribute *name* is present and not ``None``."""
        return self._attributes.get(name) is not None

    def unset(self, name: str) -> None:
        """Remove attribute *name*. Missing names are ignored."""
        self._check_not_deleted()
        self._attributes.pop(name, None)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        self.unset(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    @property
    def attributes(self) -> dict[str, Any]:
        """A copy of the current attributes."""
        return dict(self._attributes)

    @property
    def attributes_ref(self) -> dict[str, Any]:
        """The live attribute dict, for use inside mutators."""
        return self._attributes

    @property
    def original_attributes(self) -> dict[str, Any]:
        """A copy of the attributes as they were at construction."""
        return dict(self._original_attributes)

    def update_attributes(self, attributes: Mapping[str, Any]) -> Self:
        """Set each attribute in *attributes*. Returns ``self``."""
        for name, value in attributes.items():
            self.set(name, value)
        return self

    @property
    def id(self) -> int | None:
        return self.get("id")

    @id.setter
    def id(self, value: Any) -> None:
        self.set("id", value)

    @mutator("id")
    def _set_id(self, value: Any) -> None:
        if isinstance(value, bool):
            self._attributes["id"] = None
            return
        try:
            self._attributes["id"] = int(value)
        except (TypeError, ValueError):
            self._attributes["id"] = None

    @property
    def deleted(self) -> bool:
        return self._deleted

    def has_changed(self) -> bool:
        """True if the attributes differ from the construction snapshot."""
        return self._attributes != self._original_attributes

    # -- Persistence --

    @classmethod
    def _storage(cls) -> Database:
        if cls.storage is None:
            msg = (
                f"{cls.__name__} has no storage. Register it with "
                "Database.register() or list it in AppConfig.models."
            )
            raise StorageNotConfiguredError(msg)
        return cls.storage

    def _check_not_deleted(self) -> None:
        if self._deleted:
            msg = f"{type(self).__name__} {self.id} has been deleted"
            raise EntityDeletedError(msg)

    def save(self) -> Self:
        """Update the row keyed on ``id``, or insert and capture the new id."""
        self._check_not_deleted()
        db = self._storage()
        if self.has("id"):
            db.update(self.table).fields(self._attributes).condition("id", self.id).execute()
        else:
            values = {k: v for k, v in self._attributes.items() if k != "id"}
            db.insert(self.table).fields(values).execute()
            self.set("id", db.last_insert_id())
        return self

    def save_if_changed(self) -> Self:
        """Save only if the attributes changed since construction."""
        if self.has_changed():
            self.save()
        return self

    def delete(self) -> Self:
        """Delete the row. The entity is unusable afterwards."""
        self._check_not_deleted()
        if not self.has("id"):
            msg = f"Cannot delete {type(self).__name__} without an id"
            raise PreconditionError(msg)
        self._storage().delete(self.table).condition("id", self.id).execute()
        self._deleted = True
        return self

    @classmethod
    def create(cls, attributes: Mapping[str, Any]) -> Self:
        """Construct and immediately save a new entity."""
        return cls(attributes).save()

    @classmethod
    def find_or_fail(cls, id: Any) -> Self:  # noqa: A002
        """Load the entity with primary key *id*.

        Raises ``RecordNotFoundError`` if no row has that id.
        """
        rows = (
            cls._storage()
            .select(cls.table)
            .condition("id", id)
            .range(0, 1)
            .execute_and_fetch_all()
        )
        if not rows:
            msg = f"{cls.__name__} {id!r} not found"
            raise RecordNotFoundError(msg)
        return cls(rows[0])

    @classmethod
    def all(cls, page: int = 1, per_page: int = 10) -> list[Self]:
        """Load one page of entities in storage order. Pages start at 1."""
        start = max(page - 1, 0) * per_page
        rows = cls._storage().select(cls.table).range(start, per_page).execute_and_fetch_all()
        return [cls(row) for row in rows]

    @classmethod
    def count(cls) -> int:
        """Number of rows in the model's table."""
        return cls._storage().select(cls.table).count()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return type(self) is type(other) and self._attributes == other._attributes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"


# Model itself never passes through __init_subclass__.
Model._mutators = {"id": Model._set_id}
