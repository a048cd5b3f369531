#!/usr/bin/env python3
"""
Simulation controller: owns all mutable simulation state.

One call to tick() per rendered frame performs, strictly in order:
input commands (quit, cursor grab) -> focus resolution -> camera update ->
physics step (only while running). The caller renders the returned snapshot
and then calls apply_pending_removals(), so removals requested from the UI
during a frame never invalidate indices that the same frame still reads.

Everything here is single-threaded; the UI and renderer run in the same loop.
"""
import time
from typing import Callable, List, Optional, Tuple

from .camera import Camera3D
from .constants import MAX_BODY_RADIUS, MIN_BODY_RADIUS
from .data_models import Body, CameraPose, FocusKind, FocusPoint, InputState, RenderSnapshot
from .focus import FocusController
from .physics import GravitySystem
from .presets import load_preset
from .utils import try_float
from .vector_utils import clamp

# Editable numeric fields: name -> (attribute, vector component or None)
EDITABLE_FIELDS = {
    "mass": ("mass", None),
    "radius": ("radius", None),
    "x": ("position", 0),
    "y": ("position", 1),
    "z": ("position", 2),
    "vx": ("velocity", 0),
    "vy": ("velocity", 1),
    "vz": ("velocity", 2),
}


class SimulationController:
    """
    Single owner of the bodies, camera, focus and run state.

    The UI calls the command methods (add_body, remove_body, edit_body, ...)
    between ticks; the renderer only reads RenderSnapshot objects.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter,
                 mouse_position: Tuple[float, float] = (0.0, 0.0)):
        self.clock = clock
        self.system = GravitySystem()
        self.camera = Camera3D(mouse_position=mouse_position)
        self.focus = FocusController()
        self.running = False
        # Upper bound for a single physics step in seconds; None integrates any wall-clock gap as one step.
        self.max_dt: Optional[float] = None
        self.last_status_msg: Optional[str] = None

        self._prev_instant = self.clock()
        self._pending_removals: List[int] = []

    # -----------------------
    # Frame
    # -----------------------

    def tick(self, inputs: InputState) -> RenderSnapshot:
        quit_requested = inputs.is_pressed("escape")
        if inputs.is_pressed("tab"):
            self.camera.toggle_grab()

        target = self.focus.resolve(self.system, self._pending_removals)
        if target is None:
            self.camera.update_free(inputs)
        else:
            self.camera.update_with_point(target, inputs)

        if self.running:
            now = self.clock()
            dt = now - self._prev_instant
            self._prev_instant = now
            if self.max_dt is not None:
                dt = min(dt, self.max_dt)
            self.system.step(dt)

        return self.snapshot(quit_requested)

    def snapshot(self, quit_requested: bool = False) -> RenderSnapshot:
        return RenderSnapshot(
            pose=self.camera.pose(),
            bodies=tuple(body.copy() for body in self.system),
            mass_center=self.system.mass_center(),
            focus=self.focus.focus,
            running=self.running,
            grabbed=self.camera.grabbed,
            total_energy=self.system.total_energy(),
            total_momentum=self.system.total_momentum(),
            quit_requested=quit_requested,
            status=self.last_status_msg,
        )

    def apply_pending_removals(self) -> List[int]:
        """Drain the removal queue. Returns the ids that were actually removed."""
        removed = []
        for body_id in self._pending_removals:
            index = self.system.index_of(body_id)
            if index is None:
                continue
            self.system.remove_at(index)
            removed.append(body_id)
        self._pending_removals.clear()
        if removed:
            self.focus.on_removed(removed)
            if len(removed) == 1:
                self.last_status_msg = f"Removed body #{removed[0]}."
            else:
                self.last_status_msg = f"Removed {len(removed)} bodies."
        return removed

    # -----------------------
    # Commands
    # -----------------------

    def add_body(self, body: Optional[Body] = None) -> Body:
        body = self.system.add_body(body)
        self.last_status_msg = f"Added body #{body.body_id}."
        return body

    def remove_body(self, index: int) -> bool:
        """Queue the body at `index` for removal at the end of the current frame."""
        if not 0 <= index < len(self.system):
            return False
        body_id = self.system[index].body_id
        if body_id not in self._pending_removals:
            self._pending_removals.append(body_id)
            self.last_status_msg = f"Removing body #{body_id}."
        return True

    def edit_body(self, index: int, field: str, raw_text: str) -> bool:
        """
        Parse `raw_text` into a numeric body field.

        Returns True when the value was applied. Invalid text, an unknown field
        or an index out of range leave every body unchanged.
        """
        value = try_float(raw_text)
        if value is None or field not in EDITABLE_FIELDS:
            return False
        if not 0 <= index < len(self.system):
            return False

        body = self.system[index]
        attr, component = EDITABLE_FIELDS[field]
        if component is None:
            setattr(body, attr, value)
        else:
            vec = list(getattr(body, attr))
            vec[component] = value
            setattr(body, attr, tuple(vec))
        return True

    def set_body_radius(self, index: int, radius: float) -> None:
        if 0 <= index < len(self.system):
            self.system[index].radius = clamp(float(radius), MIN_BODY_RADIUS, MAX_BODY_RADIUS)

    def set_body_color(self, index: int, color) -> None:
        if 0 <= index < len(self.system):
            r, g, b = (clamp(float(c), 0.0, 1.0) for c in color[:3])
            self.system[index].color = (r, g, b)

    def set_running(self, running: bool) -> None:
        """Start or pause stepping. Starting resets the reference clock so paused time is not integrated."""
        if running and not self.running:
            self._prev_instant = self.clock()
        self.running = running
        self.last_status_msg = f"Simulation {'running' if running else 'paused'}."

    def step_once(self, dt: float) -> None:
        """Advance the physics by a fixed dt regardless of the run flag."""
        self.system.step(dt)

    def set_focus(self, focus: FocusPoint) -> None:
        self.focus.set_focus(focus)
        if focus.is_free:
            self.last_status_msg = "Free camera."
        elif focus.kind is FocusKind.MASS_CENTER:
            self.last_status_msg = "Focused on mass center."
        else:
            self.last_status_msg = f"Focused on body #{focus.body_id}."

    def focus_body(self, index: int) -> bool:
        if not 0 <= index < len(self.system):
            return False
        self.set_focus(FocusPoint.body(self.system[index].body_id))
        return True

    def toggle_grab(self) -> bool:
        return self.camera.toggle_grab()

    def load_preset(self, name: str) -> None:
        """Replace all bodies with a built-in scene. Raises KeyError for unknown names."""
        bodies = load_preset(name)
        self.system.clear()
        self._pending_removals.clear()
        for body in bodies:
            self.system.add_body(body)
        self.focus.set_focus(FocusPoint.none())
        self.last_status_msg = f"Loaded preset '{name}'."

    def pop_status(self) -> Optional[str]:
        msg = self.last_status_msg
        self.last_status_msg = None
        return msg

    # -----------------------
    # Read views
    # -----------------------

    def camera_pose(self) -> CameraPose:
        return self.camera.pose()

    def bodies(self) -> Tuple[Body, ...]:
        return self.system.bodies
