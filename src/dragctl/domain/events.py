"""Inbound lifecycle events and the replay script format.

A drag provider (or a replay script) emits these events. Each carries a
``type`` discriminator so a script can be parsed straight into models::

    {"boards": [...], "events": [
        {"type": "item_click", "item_id": "A-item-1"},
        {"type": "drag_start", "draggable_id": "A-item-1"},
        {"type": "drag_update", "draggable_id": "A-item-1",
         "source": {"board_id": "A", "index": 0},
         "destination": {"board_id": "B", "index": 2}},
        {"type": "drag_end", "draggable_id": "A-item-1",
         "source": {"board_id": "A", "index": 0},
         "destination": {"board_id": "B", "index": 2}},
        {"type": "escape"}
    ]}

The ``boards`` key is optional, and a bare list of events is accepted too.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from dragctl.domain.models import Board, Location


class DragStart(BaseModel):
    model_config = {"frozen": True}

    type: Literal["drag_start"] = "drag_start"
    draggable_id: str


class DragUpdate(BaseModel):
    model_config = {"frozen": True}

    type: Literal["drag_update"] = "drag_update"
    draggable_id: str
    source: Location
    destination: Location | None = None


class DragEnd(BaseModel):
    model_config = {"frozen": True}

    type: Literal["drag_end"] = "drag_end"
    draggable_id: str
    source: Location
    destination: Location | None = None


class ItemClick(BaseModel):
    model_config = {"frozen": True}

    type: Literal["item_click"] = "item_click"
    item_id: str


class EscapePressed(BaseModel):
    model_config = {"frozen": True}

    type: Literal["escape"] = "escape"


DragEvent = Annotated[
    DragStart | DragUpdate | DragEnd | ItemClick | EscapePressed,
    Field(discriminator="type"),
]


class Script(BaseModel):
    """A parsed replay script."""

    model_config = {"frozen": True}

    boards: tuple[Board, ...] | None = None
    events: tuple[DragEvent, ...] = ()


_SCRIPT_ADAPTER: TypeAdapter[Script] = TypeAdapter(Script)


def parse_script(raw: str) -> Script:
    """Parse a JSON replay script.

    Raises ``ValueError`` (including pydantic's ``ValidationError``) for
    malformed documents.
    """
    data: Any = json.loads(raw)
    if isinstance(data, list):
        data = {"events": data}
    return _SCRIPT_ADAPTER.validate_python(data)
