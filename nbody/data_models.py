#!/usr/bin/env python3
"""
Data models for the N-body simulator.

This module defines the dataclasses shared between physics, camera, the
simulation controller and the UI/renderer.

Units and usage
- position is in simulation units, velocity in simulation units per second, radius is visual only.
- color is an RGB triple of floats in [0, 1].
- Body instances are owned by GravitySystem and mutated in place by the integrator and by edits.
- InputState, CameraPose and RenderSnapshot are immutable per-frame values.
"""
import enum
from dataclasses import dataclass, replace
from typing import FrozenSet, Optional, Tuple

from .constants import DEFAULT_BODY_COLOR, DEFAULT_BODY_MASS, DEFAULT_BODY_RADIUS
from .vector_utils import Vec3


@dataclass
class Body:
    """
    Represents a point mass in the simulation.

    Fields:
    - mass: Mass (positive)
    - radius: Visual radius, not used by the physics
    - position: 3D position (x, y, z)
    - velocity: 3D velocity (vx, vy, vz)
    - color: RGB floats in [0, 1] used for rendering
    - body_id: Stable identifier assigned by GravitySystem.add_body (-1 until added)
    - name: Display label
    """
    mass: float = DEFAULT_BODY_MASS
    radius: float = DEFAULT_BODY_RADIUS
    position: Vec3 = (0.0, 0.0, 0.0)
    velocity: Vec3 = (0.0, 0.0, 0.0)
    color: Tuple[float, float, float] = DEFAULT_BODY_COLOR
    body_id: int = -1
    name: str = "Body"

    def copy(self) -> "Body":
        return replace(self)

    @property
    def label(self) -> str:
        return f"{self.name} #{self.body_id}"


class FocusKind(enum.Enum):
    NONE = "none"
    MASS_CENTER = "mass_center"
    BODY = "body"


@dataclass(frozen=True)
class FocusPoint:
    """What the camera orbits: nothing (free-fly), the mass center, or one body by id."""
    kind: FocusKind = FocusKind.NONE
    body_id: Optional[int] = None

    @classmethod
    def none(cls) -> "FocusPoint":
        return cls(FocusKind.NONE)

    @classmethod
    def mass_center(cls) -> "FocusPoint":
        return cls(FocusKind.MASS_CENTER)

    @classmethod
    def body(cls, body_id: int) -> "FocusPoint":
        return cls(FocusKind.BODY, body_id)

    @property
    def is_free(self) -> bool:
        return self.kind is FocusKind.NONE


@dataclass(frozen=True)
class InputState:
    """
    Already-resolved input for one frame.

    keys_down holds the lowercase names of keys currently held ("w", "a", ...);
    keys_pressed holds keys that went down this frame ("tab", "escape").
    """
    keys_down: FrozenSet[str] = frozenset()
    keys_pressed: FrozenSet[str] = frozenset()
    mouse_position: Tuple[float, float] = (0.0, 0.0)
    frame_time: float = 0.0

    def is_down(self, key: str) -> bool:
        return key in self.keys_down

    def is_pressed(self, key: str) -> bool:
        return key in self.keys_pressed


@dataclass(frozen=True)
class CameraPose:
    position: Vec3
    front: Vec3
    right: Vec3
    up: Vec3


@dataclass(frozen=True)
class RenderSnapshot:
    """Everything the renderer and UI need for one frame; never aliases simulation state."""
    pose: CameraPose
    bodies: Tuple[Body, ...]
    mass_center: Vec3
    focus: FocusPoint
    running: bool
    grabbed: bool
    total_energy: float = 0.0
    total_momentum: Vec3 = (0.0, 0.0, 0.0)
    quit_requested: bool = False
    status: Optional[str] = None
