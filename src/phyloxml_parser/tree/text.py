"""Routing of character data to scalar fields of the entities being built.

Two route kinds exist. Parent routes handle small child elements of a
multi-field container (``<taxonomy><code>..</code></taxonomy>``); the text
lands on the container. Leaf routes handle elements whose whole text is the
value of the entity they produced (``<uri>..</uri>``). Both kinds may fire
for the same text event.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional

from .coercion import parse_float, parse_int
from .context import BuilderState
from .dispatch import CLADE, PHYLOGENY, resolve


class RouteTarget(Enum):
    """Which object a parent route writes to."""

    CLADE = auto()      # Innermost open clade
    BINDING = auto()    # Entity on top of the binding stack
    PHYLOGENY = auto()  # The phylogeny in progress


def _as_string(text: str, field: str) -> str:
    return text


@dataclass(frozen=True)
class TextRoute:
    """Destination of a text value."""

    field: str
    convert: Callable[[str, str], Any] = _as_string
    append: bool = False


def _routes(**routes: TextRoute) -> Dict[str, TextRoute]:
    return routes


def _text(field: str) -> TextRoute:
    return TextRoute(field)


def _float(field: str) -> TextRoute:
    return TextRoute(field, parse_float)


def _int(field: str) -> TextRoute:
    return TextRoute(field, parse_int)


# parent tag -> (target, current tag -> route)
PARENT_ROUTES: Dict[str, tuple] = {
    CLADE: (RouteTarget.CLADE, _routes(
        name=_text("name"),
        branch_length=_float("branch_length"),
        width=_float("width"),
    )),
    "taxonomy": (RouteTarget.BINDING, _routes(
        code=_text("code"),
        scientific_name=_text("scientific_name"),
        authority=_text("authority"),
        common_name=TextRoute("common_names", append=True),
        synonym=TextRoute("synonyms", append=True),
        rank=_text("rank"),
    )),
    "sequence": (RouteTarget.BINDING, _routes(
        symbol=_text("symbol"),
        name=_text("name"),
        gene_name=_text("gene_name"),
        location=_text("location"),
    )),
    "annotation": (RouteTarget.BINDING, _routes(desc=_text("desc"))),
    "color": (RouteTarget.BINDING, _routes(
        red=_int("red"),
        green=_int("green"),
        blue=_int("blue"),
        alpha=_int("alpha"),
    )),
    "date": (RouteTarget.BINDING, _routes(
        desc=_text("desc"),
        value=_float("value"),
        minimum=_float("minimum"),
        maximum=_float("maximum"),
    )),
    "events": (RouteTarget.BINDING, _routes(
        type=_text("type"),
        duplications=_int("duplications"),
        speciations=_int("speciations"),
        losses=_int("losses"),
    )),
    "distribution": (RouteTarget.BINDING, _routes(desc=_text("desc"))),
    "point": (RouteTarget.BINDING, _routes(
        lat=_float("lat"),
        long=_float("long"),
        alt=_float("alt"),
    )),
    "reference": (RouteTarget.BINDING, _routes(desc=_text("desc"))),
    PHYLOGENY: (RouteTarget.PHYLOGENY, _routes(
        name=_text("name"),
        description=_text("description"),
        date=_text("date"),
    )),
}

# current tag -> route onto the entity that tag produced
LEAF_ROUTES: Dict[str, TextRoute] = {
    "accession": _text("value"),
    "confidence": _float("value"),
    "id": _text("value"),
    "mol_seq": _text("value"),
    "domain": _text("name"),
    "property": _text("value"),
    "uri": _text("value"),
}

TEXT_ELEMENTS = frozenset(
    tag for _, routes in PARENT_ROUTES.values() for tag in routes
)


def _store(target: Any, route: TextRoute, text: str) -> None:
    value = route.convert(text, route.field)
    if not route.append:
        setattr(target, route.field, value)
        return
    values = getattr(target, route.field)
    if values is None:
        values = []
        setattr(target, route.field, values)
    values.append(value)


class TextRouter:
    """Write character data into the state of one parse."""

    def __init__(self, state: BuilderState) -> None:
        self.state = state

    def _target(self, kind: RouteTarget) -> Optional[Any]:
        stacks = self.state.stacks
        if kind is RouteTarget.CLADE:
            return stacks.current_clade()
        if kind is RouteTarget.PHYLOGENY:
            return self.state.phylogeny
        # Only when the container element produced the binding itself
        if resolve(stacks.peek_ancestor(1), stacks.peek_ancestor(2)) is None:
            return None
        return stacks.current_binding()

    def route(self, text: str) -> int:
        """Route one text event. Returns the number of fields written."""
        stacks = self.state.stacks
        tag = stacks.peek_ancestor(0)
        if tag is None:
            return 0
        parent = stacks.peek_ancestor(1)
        written = 0

        if parent in PARENT_ROUTES:
            kind, routes = PARENT_ROUTES[parent]
            route = routes.get(tag)
            if route is not None:
                target = self._target(kind)
                if target is not None:
                    _store(target, route, text)
                    written += 1

        leaf = LEAF_ROUTES.get(tag)
        if leaf is not None and resolve(tag, parent) is not None:
            _store(stacks.current_binding(), leaf, text)
            written += 1

        return written
