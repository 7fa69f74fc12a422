"""Path-mask compilation.

A mask is a route pattern such as ``"posts/:id/comments/:comment_id"``:
literal segments match verbatim, ``:name`` segments capture one or more
characters (non-greedy), and the whole mask ``"*"`` matches any
non-empty path. The full path must match.

Examples::

    "posts"            -> ^posts$                  ()
    "posts/:id"        -> ^posts/(.+?)$            ("id",)
    "files/:name.json" -> ^files/(.+?)\\.json$      ("name",)
    "*"                -> ^.+$                     ()

Compiled masks are memoized by a ``MaskCache`` owned by the router.
"""

import re
from dataclasses import dataclass

WILDCARD = "*"
PLACEHOLDER_MARKER = ":"

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True, slots=True)
class CompiledMask:
    """A mask compiled to a regex plus its placeholder names, in order."""

    mask: str
    pattern: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> tuple[str, ...] | None:
        """Return the captured values if *path* matches, else ``None``."""
        m = self.pattern.fullmatch(path)
        if m is None:
            return None
        return m.groups()


def compile_mask(mask: str) -> CompiledMask:
    """Compile *mask* into a ``CompiledMask``. Pure, uncached."""
    if mask == WILDCARD:
        return CompiledMask(mask, re.compile(r".+", re.DOTALL), ())

    parts: list[str] = []
    names: list[str] = []
    for segment in mask.split("/"):
        m = _PLACEHOLDER.match(segment)
        if m is None:
            parts.append(re.escape(segment))
            continue
        names.append(m.group(1))
        parts.append("(.+?)" + re.escape(segment[m.end() :]))
    return CompiledMask(mask, re.compile("/".join(parts), re.DOTALL), tuple(names))


class MaskCache:
    """Memoizes ``compile_mask`` per distinct mask string.

    Entries are never evicted; the set of masks is bounded by the
    registered routes. ``hits`` and ``misses`` count lookups.
    """

    __slots__ = ("_compiled", "hits", "misses")

    def __init__(self) -> None:
        self._compiled: dict[str, CompiledMask] = {}
        self.hits = 0
        self.misses = 0

    def compile(self, mask: str) -> CompiledMask:
        compiled = self._compiled.get(mask)
        if compiled is not None:
            self.hits += 1
            return compiled
        self.misses += 1
        compiled = compile_mask(mask)
        self._compiled[mask] = compiled
        return compiled

    def __contains__(self, mask: object) -> bool:
        return mask in self._compiled

    def __len__(self) -> int:
        return len(self._compiled)
