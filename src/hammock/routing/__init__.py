"""Routing: path-mask compilation and an ordered, first-match route registry."""

from hammock.routing.mask import CompiledMask, MaskCache, compile_mask
from hammock.routing.route import SUPPORTED_METHODS, Route, RouteMatch
from hammock.routing.router import Router

__all__ = [
    "SUPPORTED_METHODS",
    "CompiledMask",
    "MaskCache",
    "Route",
    "RouteMatch",
    "Router",
    "compile_mask",
]
