#!/usr/bin/env python3
"""
Focus tracking for the orbit camera.

The focus is a FocusPoint: none (free-fly), the system mass center, or a body
referenced by its stable id. Ids do not shift when lower-indexed bodies are
removed, so only removal of the focused body itself drops the focus.
"""
from typing import Iterable, Optional

from .constants import POSITION_SCALE
from .data_models import FocusKind, FocusPoint
from .physics import GravitySystem
from .vector_utils import Vec3, vec_scale


class FocusController:
    def __init__(self):
        self._focus = FocusPoint.none()

    @property
    def focus(self) -> FocusPoint:
        return self._focus

    def set_focus(self, focus: FocusPoint) -> None:
        self._focus = focus

    def resolve(self, system: GravitySystem, pending_removals: Iterable[int] = ()) -> Optional[Vec3]:
        """
        Target point for the orbit camera in display units, or None for free-fly.

        A body focus whose id is pending removal or no longer present falls back
        to free-fly and resets the focus to none.
        """
        focus = self._focus
        if focus.kind is FocusKind.NONE:
            return None
        if focus.kind is FocusKind.MASS_CENTER:
            return system.mass_center()

        if focus.body_id in set(pending_removals):
            self._focus = FocusPoint.none()
            return None
        body = system.get(focus.body_id)
        if body is None:
            self._focus = FocusPoint.none()
            return None
        return vec_scale(body.position, POSITION_SCALE)

    def on_removed(self, body_ids: Iterable[int]) -> None:
        if self._focus.kind is FocusKind.BODY and self._focus.body_id in set(body_ids):
            self._focus = FocusPoint.none()
