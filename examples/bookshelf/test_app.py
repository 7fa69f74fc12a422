"""Tests for the bookshelf example: REST resource plus custom routes."""

from hammock.testing import TestClient


async def _add(client, **data: str) -> dict:
    response = await client.post("/books", data=data)
    assert response.status == 200
    return response.json()


class TestBookResource:
    async def test_create_and_show(self, example_app) -> None:
        async with TestClient(example_app) as client:
            created = await _add(client, title="Dune", author="Herbert", rating="5")
            assert created["id"] == 1
            shown = (await client.get("/books/1")).json()
        assert shown == {"id": 1, "title": "Dune", "author": "Herbert", "rating": 5, "read": False}

    async def test_rating_mutator_rejects_out_of_range(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/books", data={"title": "Bad", "rating": "9"})
        assert response.status == 422
        assert response.text.startswith("HTTP/1.1 422 ")

    async def test_update(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await _add(client, title="Emma")
            updated = (await client.put("/books/1", json={"rating": 4})).json()
        assert updated["rating"] == 4

    async def test_list(self, example_app) -> None:
        async with TestClient(example_app) as client:
            for title in ("A", "B", "C"):
                await _add(client, title=title)
            listing = (await client.get("/books", query={"per_page": 2, "page": 2})).json()
        assert listing["total"] == 3
        assert [b["title"] for b in listing["books"]] == ["C"]

    async def test_delete(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await _add(client, title="Gone")
            assert (await client.delete("/books/1")).status == 200
            assert (await client.get("/books/1")).status == 404

    async def test_cors_origin(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/books")
        assert response.header("access-control-allow-origin") == "*"


class TestCustomRoutes:
    async def test_unread_beats_resource_route(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await _add(client, title="Pending")
            response = await client.get("/books/unread")
        assert [b["title"] for b in response.json()] == ["Pending"]

    async def test_mark_read(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await _add(client, title="Done soon")
            marked = (await client.post("/books/1/read")).json()
            unread = (await client.get("/books/unread")).json()
        assert marked["read"] is True
        assert unread == []

    async def test_author_accessor_default(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await _add(client, title="Beowulf")
            response = await client.get("/books/1")
        # The accessor shapes get(); the JSON body is the raw attributes.
        assert response.json()["author"] is None

    async def test_by_author(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await _add(client, title="Emma", author="Austen")
            await _add(client, title="Persuasion", author="Austen")
            response = await client.get("/authors/Austen")
        assert response.json() == {"author": "Austen", "titles": ["Emma", "Persuasion"]}

    async def test_unknown_author(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/authors/Nobody")
        assert response.status == 404

    async def test_preflight(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.options("/books/1")
        assert response.header("allow") == "GET, POST, PUT, DELETE, OPTIONS"
