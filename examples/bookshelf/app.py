"""Bookshelf: a REST resource backed by SQLite.

Demonstrates:
- ``AppConfig.resources`` for the standard CRUD routes
- hand-written routes registered ahead of the resource routes
- ``@accessor`` / ``@mutator`` on a model
- a custom exception map and CORS origin

Run:
    uvicorn examples.bookshelf.app:app
"""

from hammock import App, AppConfig, Field, Model, NotFound, Request, accessor, mutator
from hammock.data import PreconditionError

SCHEMA = """
CREATE TABLE IF NOT EXISTS books (
    id     INTEGER PRIMARY KEY AUTOINCREMENT,
    title  TEXT NOT NULL DEFAULT '',
    author TEXT,
    rating INTEGER,
    read   INTEGER NOT NULL DEFAULT 0
);
"""


class Book(Model):
    table = "books"
    fields = (
        Field("title", "string"),
        Field("author", "string"),
        Field("rating", "int"),
        Field("read", "bool"),
    )

    @accessor("author")
    def _author(self) -> str:
        return self.attributes_ref.get("author") or "Anonymous"

    @mutator("rating")
    def _set_rating(self, value: object) -> None:
        if value in (None, ""):
            self.attributes_ref["rating"] = None
            return
        rating = int(value)  # type: ignore[call-overload]
        if not 1 <= rating <= 5:
            msg = f"Rating must be between 1 and 5, got {rating}"
            raise PreconditionError(msg)
        self.attributes_ref["rating"] = rating


app = App(
    AppConfig(
        storage="sqlite:///:memory:",
        resources={"books": Book},
        allow_origin="*",
        exception_map={PreconditionError: 422},
    )
)


@app.on_startup
def create_tables() -> None:
    app.db.execute_script(SCHEMA)


@app.get("books/unread")
def unread(request: Request) -> list[dict]:
    rows = app.db.select("books").condition("read", False).execute_and_fetch_all()
    return rows


@app.post("books/:id/read")
def mark_read(id: str, request: Request) -> Book:
    book = Book.find_or_fail(id)
    book.set("read", True)
    return book.save_if_changed()


@app.get("authors/:name")
def by_author(name: str, request: Request) -> dict:
    rows = app.db.select("books").condition("author", name).execute_and_fetch_all()
    if not rows:
        raise NotFound(f"No books by {name}")
    books = [Book(row) for row in rows]
    return {"author": name, "titles": [b.get("title") for b in books]}
