#!/usr/bin/env python3
"""
N-body simulator application entry point and UI/renderer coordination.

What this module does
- Opens a Pygame viewport that draws the bodies in 3D and polls keyboard/mouse state.
- Opens a Dear PyGui control panel for running/pausing, choosing the camera focus,
  loading presets and editing the body list.
- Drives both from a single frame loop around nbody.simulation.SimulationController.

Frame loop (one iteration per frame, nothing runs concurrently)
1) Pygame input is resolved into an InputState.
2) SimulationController.tick() updates the camera and, while running, the physics,
   and returns a RenderSnapshot.
3) The viewport draws the snapshot; Dear PyGui renders a frame, firing widget callbacks
   that call the controller's command methods.
4) Removals requested during the frame are applied.

Controls (viewport window)
- W/S/A/D/Q/E: fly (free camera) or yaw/pitch/zoom (focused camera)
- Mouse: look around while the cursor is grabbed
- Tab: grab/release the cursor
- Space: run/pause
- Escape: quit

Units and conventions
- Simulation units for bodies; the viewport draws positions multiplied by POSITION_SCALE.
- Colors are RGB floats in 0..1 in the model, 0..255 for drawing.

Running
1) Install dependencies: `pip install pygame dearpygui`
2) Run this module: `python nbody_sim.py`
"""

from typing import Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from nbody.camera import VirtualCursor, axis_indicator, projected_radius, view_depth, world_to_screen
from nbody.constants import (
    AXIS_COLORS,
    AXIS_LENGTH,
    BACKGROUND_COLOR,
    BODY_DRAW_DIVISOR,
    GIZMO_SCALE,
    HUD_COLOR,
    MAX_BODY_RADIUS,
    MIN_BODY_RADIUS,
    NEAR_PLANE,
    POSITION_SCALE,
    TARGET_FPS,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from nbody.data_models import Body, FocusKind, FocusPoint, InputState, RenderSnapshot
from nbody.presets import list_presets
from nbody.simulation import SimulationController
from nbody.vector_utils import Vec3, vec_add, vec_scale, vec_sub

# Pygame key -> name used in InputState
HELD_KEYS = {
    pygame.K_w: "w",
    pygame.K_s: "s",
    pygame.K_a: "a",
    pygame.K_d: "d",
    pygame.K_q: "q",
    pygame.K_e: "e",
}
PRESSED_KEYS = {
    pygame.K_TAB: "tab",
    pygame.K_ESCAPE: "escape",
    pygame.K_SPACE: "space",
}

SAFE_COORD_LIMIT = 30000


def _safe_point(pt) -> Optional[Tuple[int, int]]:
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if abs(x) > SAFE_COORD_LIMIT or abs(y) > SAFE_COORD_LIMIT:
        return None
    return (x, y)


def _to_rgb255(color) -> Tuple[int, int, int]:
    return tuple(max(0, min(255, int(round(c * 255)))) for c in color[:3])


def clip_segment(pose, a: Vec3, b: Vec3, near: float = NEAR_PLANE * 10) -> Optional[Tuple[Vec3, Vec3]]:
    """Clip a display-space segment against the camera near plane."""
    da = view_depth(pose, a)
    db = view_depth(pose, b)
    if da < near and db < near:
        return None
    if da < near:
        t = (near - da) / (db - da)
        a = vec_add(a, vec_scale(vec_sub(b, a), t))
    elif db < near:
        t = (near - db) / (da - db)
        b = vec_add(b, vec_scale(vec_sub(a, b), t))
    return a, b


# ============================================================
# Pygame Viewport
# ============================================================

class PygameRenderer:
    """
    Pygame viewport: polls raw input and draws RenderSnapshots.

    Draws the world axes, the bodies as shaded discs sorted back to front,
    the camera gizmo and a position readout.
    """
    def __init__(self):
        self.surface = None
        self.clock = None
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)
        self._font = None
        self._cursor_grabbed = None
        self.cursor = VirtualCursor()
        self.closed = False

    def open(self):
        pygame.init()
        pygame.display.set_caption("N-body Simulator - Viewport")
        self.surface = pygame.display.set_mode(self.viewport_size, pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        try:
            self._font = pygame.font.SysFont("consolas", 16)
        except pygame.error:
            self._font = pygame.font.Font(None, 16)

    def close(self):
        pygame.quit()

    def poll_input(self) -> InputState:
        pressed = set()
        rel_x, rel_y = 0, 0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.closed = True
            elif event.type == pygame.VIDEORESIZE:
                self.viewport_size = (event.w, event.h)
                self.surface = pygame.display.set_mode(self.viewport_size, pygame.RESIZABLE)
            elif event.type == pygame.KEYDOWN and event.key in PRESSED_KEYS:
                pressed.add(PRESSED_KEYS[event.key])
            elif event.type == pygame.MOUSEMOTION:
                rel_x += event.rel[0]
                rel_y += event.rel[1]

        keys = pygame.key.get_pressed()
        down = {name for key, name in HELD_KEYS.items() if keys[key]}
        if self._cursor_grabbed:
            # Grabbed cursors are pinned to the window; only relative motion is unbounded.
            mouse = self.cursor.move((rel_x, rel_y))
        else:
            mouse = self.cursor.reset(pygame.mouse.get_pos())
        return InputState(
            keys_down=frozenset(down),
            keys_pressed=frozenset(pressed),
            mouse_position=mouse,
            frame_time=self.clock.get_time() / 1000.0,
        )

    def apply_cursor(self, grabbed: bool):
        if grabbed == self._cursor_grabbed:
            return
        pygame.event.set_grab(grabbed)
        pygame.mouse.set_visible(not grabbed)
        self._cursor_grabbed = grabbed
        self.cursor.reset(pygame.mouse.get_pos())

    def draw(self, snapshot: RenderSnapshot):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)
        pose = snapshot.pose

        self.draw_axes(surf, pose)
        self.draw_bodies(surf, pose, snapshot.bodies)
        self.draw_gizmo(surf, pose)

        focus = snapshot.focus
        if focus.kind is FocusKind.NONE:
            mode = "Free camera"
        elif focus.kind is FocusKind.MASS_CENTER:
            mode = "Focus: mass center"
        else:
            mode = f"Focus: body #{focus.body_id}"
        self.draw_text(surf, "WASD/QE: move | Mouse: look | Tab: grab cursor | Space: run/pause | Esc: quit",
                       10, 10)
        self.draw_text(surf, f"{mode}  [{'Running' if snapshot.running else 'Paused'}]  Bodies: {len(snapshot.bodies)}",
                       10, 30)

        pygame.display.flip()

    def draw_axes(self, surf, pose):
        for k, color in enumerate(AXIS_COLORS):
            end = [0.0, 0.0, 0.0]
            end[k] = AXIS_LENGTH
            start = [0.0, 0.0, 0.0]
            start[k] = -AXIS_LENGTH
            clipped = clip_segment(pose, tuple(start), tuple(end))
            if clipped is None:
                continue
            pa = world_to_screen(pose, clipped[0], self.viewport_size)
            pb = world_to_screen(pose, clipped[1], self.viewport_size)
            if pa is None or pb is None:
                continue
            try:
                pygame.draw.line(surf, color, (int(pa[0]), int(pa[1])), (int(pb[0]), int(pb[1])), 1)
            except (TypeError, ValueError, OverflowError):
                continue

    def draw_bodies(self, surf, pose, bodies: Tuple[Body, ...]):
        projected = []
        for b in bodies:
            p = world_to_screen(pose, vec_scale(b.position, POSITION_SCALE), self.viewport_size)
            if p is None:
                continue
            projected.append((p, b))
        # far to near
        projected.sort(key=lambda item: -item[0][2])
        for (sx, sy, depth), b in projected:
            pt = _safe_point((sx, sy))
            if pt is None:
                continue
            r = projected_radius(b.radius / BODY_DRAW_DIVISOR, depth, self.viewport_size[1])
            vis_r = max(1, min(int(r), 400))
            color = _to_rgb255(b.color)
            gfxdraw.filled_circle(surf, pt[0], pt[1], vis_r, color)
            gfxdraw.aacircle(surf, pt[0], pt[1], vis_r, color)

    def draw_gizmo(self, surf, pose):
        base = (self.viewport_size[0] - 80, 80)
        for (dx, dy), color, label in zip(axis_indicator(pose), AXIS_COLORS, "XYZ"):
            end = (int(base[0] + dx * GIZMO_SCALE), int(base[1] + dy * GIZMO_SCALE))
            pygame.draw.line(surf, color, base, end, 2)
            self.draw_text(surf, label, end[0] + 4, end[1] - 4, color)

        position = pose.position
        for row, (axis, value) in enumerate(zip("XYZ", position)):
            self.draw_text(surf, f"{axis}: {value / POSITION_SCALE:.2f}",
                           base[0] - 60, base[1] + 60 + row * 16)

    def draw_text(self, surface, text, x, y, color=HUD_COLOR):
        img = self._font.render(text, True, color)
        surface.blit(img, (x, y))


# ============================================================
# Dear PyGui Control Panel
# ============================================================

class UI:
    """
    Dear PyGui interface: run controls, camera focus, presets and the body list.

    Widget callbacks only call SimulationController command methods; body rows
    carry the stable body id as user_data and translate it back to an index when
    they fire.
    """
    def __init__(self, sim: SimulationController):
        self.sim = sim
        self.status_msg_id = None
        self.diagnostics_id = None
        self.running_id = None
        self.body_list_id = None
        self._listed_ids: Tuple[int, ...] = ()
        self._field_ids = {}  # (body_id, field) -> widget id
        self._build_ui()

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='N-body Simulator - Controls', width=420, height=760)

        with dpg.window(label="Simulation Controls", width=400, height=740, pos=(10, 10), tag="main_window"):
            dpg.add_text("Simulation")
            with dpg.group(horizontal=True):
                self.running_id = dpg.add_checkbox(label="Run simulation", default_value=self.sim.running,
                                                   callback=lambda s, a, u: self.sim.set_running(bool(a)))
                dpg.add_button(label="Step", callback=lambda: self.sim.step_once(1.0 / TARGET_FPS))
            with dpg.group(horizontal=True):
                dpg.add_button(label="Free camera", callback=lambda: self.sim.set_focus(FocusPoint.none()))
                dpg.add_button(label="Focus camera on mass center",
                               callback=lambda: self.sim.set_focus(FocusPoint.mass_center()))

            dpg.add_separator()
            presets = list_presets()
            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                dpg.add_combo(presets, default_value=presets[0], width=200, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_preset(dpg.get_value("preset_combo")))

            dpg.add_separator()
            dpg.add_button(label="Add new body", callback=lambda: self.sim.add_body())
            self.status_msg_id = dpg.add_text("")
            self.diagnostics_id = dpg.add_text("")
            dpg.add_separator()
            self.body_list_id = dpg.add_group()

        dpg.setup_dearpygui()
        dpg.show_viewport()

    def load_preset(self, name: str):
        try:
            self.sim.load_preset(name)
        except KeyError:
            self._set_status(f"Unknown preset '{name}'.")

    def _set_status(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)

    def _index(self, body_id: int) -> Optional[int]:
        return self.sim.system.index_of(body_id)

    def _on_edit(self, sender, app_data, user_data):
        body_id, field = user_data
        index = self._index(body_id)
        if index is not None:
            self.sim.edit_body(index, field, app_data)

    def _on_radius(self, sender, app_data, user_data):
        index = self._index(user_data)
        if index is not None:
            self.sim.set_body_radius(index, app_data)

    def _on_color(self, sender, app_data, user_data):
        index = self._index(user_data)
        if index is None:
            return
        # Dear PyGui reports color edits as 0..1 floats with alpha
        self.sim.set_body_color(index, app_data[:3])

    def _on_focus(self, sender, app_data, user_data):
        index = self._index(user_data)
        if index is not None:
            self.sim.focus_body(index)

    def _on_remove(self, sender, app_data, user_data):
        index = self._index(user_data)
        if index is not None:
            self.sim.remove_body(index)

    def _rebuild_body_list(self, bodies: Tuple[Body, ...]):
        dpg.delete_item(self.body_list_id, children_only=True)
        self._field_ids.clear()
        for b in bodies:
            bid = b.body_id
            with dpg.collapsing_header(label=b.label, parent=self.body_list_id):
                self._field_ids[(bid, "mass")] = dpg.add_input_text(
                    hint="Mass", default_value=f"{b.mass}", width=200,
                    callback=self._on_edit, user_data=(bid, "mass"))
                dpg.add_slider_float(label="radius", default_value=b.radius, min_value=MIN_BODY_RADIUS,
                                     max_value=MAX_BODY_RADIUS, width=200,
                                     callback=self._on_radius, user_data=bid)
                dpg.add_text("Position:")
                for field in ("x", "y", "z"):
                    self._field_ids[(bid, field)] = dpg.add_input_text(
                        hint=field, width=200, callback=self._on_edit, user_data=(bid, field))
                dpg.add_text("Velocity:")
                for field in ("vx", "vy", "vz"):
                    self._field_ids[(bid, field)] = dpg.add_input_text(
                        hint=field, width=200, callback=self._on_edit, user_data=(bid, field))
                dpg.add_color_edit(default_value=[c * 255 for c in b.color], no_alpha=True, width=200,
                                   callback=self._on_color, user_data=bid)
                with dpg.group(horizontal=True):
                    dpg.add_button(label="Focus body", callback=self._on_focus, user_data=bid)
                    dpg.add_button(label="Remove this body", callback=self._on_remove, user_data=bid)
        self._listed_ids = tuple(b.body_id for b in bodies)

    def _refresh_fields(self, bodies: Tuple[Body, ...]):
        """Write current values into fields the user is not typing in."""
        for b in bodies:
            values = {
                "mass": b.mass,
                "x": b.position[0], "y": b.position[1], "z": b.position[2],
                "vx": b.velocity[0], "vy": b.velocity[1], "vz": b.velocity[2],
            }
            for field, value in values.items():
                item = self._field_ids.get((b.body_id, field))
                if item is None or dpg.is_item_active(item):
                    continue
                dpg.set_value(item, f"{value}")

    def render_frame(self, snapshot: RenderSnapshot):
        ids = tuple(b.body_id for b in snapshot.bodies)
        if ids != self._listed_ids:
            self._rebuild_body_list(snapshot.bodies)
        self._refresh_fields(snapshot.bodies)
        dpg.set_value(self.running_id, snapshot.running)
        px, py, pz = snapshot.total_momentum
        dpg.set_value(self.diagnostics_id,
                      f"Energy: {snapshot.total_energy:.4e}\nMomentum: ({px:.3e}, {py:.3e}, {pz:.3e})")
        msg = self.sim.pop_status()
        if msg:
            self._set_status(msg)
        dpg.render_dearpygui_frame()

    def is_open(self) -> bool:
        return dpg.is_dearpygui_running()

    def close(self):
        dpg.destroy_context()


# ============================================================
# Application Entry
# ============================================================

def build_default_scene(sim: SimulationController):
    # Start with an empty scene by default
    sim.load_preset("Empty")


def main():
    renderer = PygameRenderer()
    renderer.open()

    sim = SimulationController(mouse_position=pygame.mouse.get_pos())
    build_default_scene(sim)

    ui = UI(sim)
    try:
        while ui.is_open() and not renderer.closed:
            inputs = renderer.poll_input()
            if inputs.is_pressed("space"):
                sim.set_running(not sim.running)

            snapshot = sim.tick(inputs)
            if snapshot.quit_requested or renderer.closed:
                break

            renderer.apply_cursor(snapshot.grabbed)
            renderer.draw(snapshot)
            ui.render_frame(snapshot)

            sim.apply_pending_removals()
            renderer.clock.tick(TARGET_FPS)
    finally:
        ui.close()
        renderer.close()


if __name__ == "__main__":
    main()
