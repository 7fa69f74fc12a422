"""Hello: the smallest hammock app.

Plain routes, positional path parameters, and each kind of return value.

Run:
    uvicorn examples.hello.app:app
"""

from xml.etree import ElementTree

from hammock import App, Request

app = App()


@app.get("")
def index(request: Request) -> str:
    return "<h1>Hello, hammock</h1>"


@app.get("greet/:name")
def greet(name: str, request: Request) -> dict[str, str]:
    return {"greeting": f"Hello, {name}!"}


@app.get("sum/:a/:b")
def add(a: str, b: str, request: Request) -> dict[str, int]:
    return {"sum": int(a) + int(b)}


@app.get("feed.xml")
def feed(request: Request) -> ElementTree.Element:
    root = ElementTree.Element("feed")
    for word in ("hello", "hammock"):
        ElementTree.SubElement(root, "entry").text = word
    return root


@app.post("ping")
def ping(request: Request) -> None:
    """Nothing to say: an empty 200."""
