"""
Step list editing.

Every function returns a new list and leaves the input untouched. Step ids
survive every edit, so callers can use them as stable keys.
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Literal

from stepline.models import DEFAULT_KIND
from stepline.models import OperationKind
from stepline.models import Step
from stepline.models import new_step

logger = logging.getLogger(__name__)


def add_step(steps: list[Step], kind: OperationKind | str = DEFAULT_KIND, **fields: Any) -> list[Step]:
    """Append a new step of `kind` with that kind's defaults."""
    return [*steps, new_step(kind, **fields)]


def remove_step(steps: list[Step], step_id: str) -> list[Step]:
    return [step for step in steps if step.id != step_id]


def update_step(steps: list[Step], step_id: str, **fields: Any) -> list[Step]:
    """
    Change fields of the step with `step_id`.

    Nothing is validated here; a step may be left without a secret key or
    with a parameter its kind ignores. Unknown ids leave the list as is.
    """
    if not any(step.id == step_id for step in steps):
        logger.debug(f"update_step: no step with id {step_id}")
    return [step.with_updates(**fields) if step.id == step_id else step for step in steps]


def move_step(steps: list[Step], index: int, direction: Literal["up", "down"]) -> list[Step]:
    """Swap the step at `index` with its neighbour. Moving past an end is a no-op."""
    new_index = index - 1 if direction == "up" else index + 1
    if not (0 <= index < len(steps)) or not (0 <= new_index < len(steps)):
        return list(steps)

    moved = list(steps)
    moved[index], moved[new_index] = moved[new_index], moved[index]
    return moved
