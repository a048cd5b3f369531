#!/usr/bin/env python3
"""
3D camera with two navigation modes.

- Free-fly: W/S/A/D/Q/E translate along the camera basis by a fixed amount per
  frame; mouse movement turns the view while the cursor is grabbed.
- Orbit: the camera sits on a sphere around a target point. A/D change yaw,
  Q/E change pitch, W/S zoom. The camera always looks at the target.

Both modes finish by recomputing the orthonormal basis {front, right, up}
from the front vector and the world up axis.
"""
import math
from typing import List, Optional, Tuple

from .constants import (
    CAMERA_FOV_DEGREES,
    DEFAULT_ORBIT_RADIUS,
    DEFAULT_PITCH,
    DEFAULT_YAW,
    LOOK_SPEED,
    MIN_ORBIT_RADIUS,
    MOVE_SPEED,
    NEAR_PLANE,
    PITCH_LIMIT,
    WORLD_UP,
    ZOOM_SPEED,
)
from .data_models import CameraPose, InputState
from .vector_utils import (
    ZERO,
    Vec3,
    clamp,
    spherical_direction,
    vec_add,
    vec_cross,
    vec_dot,
    vec_norm,
    vec_scale,
    vec_sub,
)


class Camera3D:
    """
    Viewer position and orientation.

    Attributes:
        position: eye position in display units.
        front, right, up: right-handed orthonormal basis.
        yaw, pitch: view angles in radians; pitch stays within [-PITCH_LIMIT, PITCH_LIMIT].
        radius: orbit distance to the focus target (unused in free-fly mode).
        grabbed: whether mouse movement is consumed as look input.
    """

    def __init__(self, position: Vec3 = ZERO, mouse_position: Tuple[float, float] = (0.0, 0.0),
                 move_speed: float = MOVE_SPEED, look_speed: float = LOOK_SPEED,
                 zoom_speed: float = ZOOM_SPEED):
        self.world_up: Vec3 = WORLD_UP
        self.yaw = DEFAULT_YAW
        self.pitch = DEFAULT_PITCH
        self.radius = DEFAULT_ORBIT_RADIUS
        self.move_speed = move_speed
        self.look_speed = look_speed
        self.zoom_speed = zoom_speed

        self.position: Vec3 = position
        self.last_mouse_position = (float(mouse_position[0]), float(mouse_position[1]))
        self.grabbed = True
        self.orbiting = False

        self.front: Vec3 = ZERO
        self.right: Vec3 = ZERO
        self.up: Vec3 = ZERO
        self.update_basis(spherical_direction(self.yaw, self.pitch))

    def update_basis(self, front: Vec3) -> None:
        self.front = vec_norm(front)
        self.right = vec_norm(vec_cross(self.front, self.world_up))
        self.up = vec_norm(vec_cross(self.right, self.front))

    def toggle_grab(self) -> bool:
        self.grabbed = not self.grabbed
        return self.grabbed

    def pose(self) -> CameraPose:
        return CameraPose(self.position, self.front, self.right, self.up)

    def _reverse_view_angles(self) -> None:
        # spherical_direction(yaw + pi, -pitch) == -spherical_direction(yaw, pitch)
        self.yaw += math.pi
        self.pitch = -self.pitch

    def update_free(self, inputs: InputState) -> None:
        if self.orbiting:
            # Keep looking at the former target.
            self._reverse_view_angles()
            self.orbiting = False

        step = self.move_speed
        if inputs.is_down("w"):
            self.position = vec_add(self.position, vec_scale(self.front, step))
        if inputs.is_down("s"):
            self.position = vec_sub(self.position, vec_scale(self.front, step))
        if inputs.is_down("a"):
            self.position = vec_sub(self.position, vec_scale(self.right, step))
        if inputs.is_down("d"):
            self.position = vec_add(self.position, vec_scale(self.right, step))
        if inputs.is_down("q"):
            self.position = vec_add(self.position, vec_scale(self.up, step))
        if inputs.is_down("e"):
            self.position = vec_sub(self.position, vec_scale(self.up, step))

        mx, my = inputs.mouse_position
        dx = mx - self.last_mouse_position[0]
        dy = my - self.last_mouse_position[1]
        self.last_mouse_position = (float(mx), float(my))

        if self.grabbed:
            delta = inputs.frame_time
            self.yaw += dx * delta * self.look_speed
            self.pitch += dy * delta * -self.look_speed
            self.pitch = clamp(self.pitch, -PITCH_LIMIT, PITCH_LIMIT)
            self.update_basis(spherical_direction(self.yaw, self.pitch))

    def update_with_point(self, focus_point: Vec3, inputs: InputState) -> None:
        if not self.orbiting:
            # Sit behind the target along the current view direction.
            self._reverse_view_angles()
            self.orbiting = True

        delta = inputs.frame_time
        if inputs.is_down("a"):
            self.yaw -= self.look_speed * delta
        if inputs.is_down("d"):
            self.yaw += self.look_speed * delta
        if inputs.is_down("q"):
            self.pitch += self.look_speed * delta
        if inputs.is_down("e"):
            self.pitch -= self.look_speed * delta
        self.pitch = clamp(self.pitch, -PITCH_LIMIT, PITCH_LIMIT)

        # zoom in/out
        if inputs.is_down("w"):
            self.radius -= self.zoom_speed
        if inputs.is_down("s"):
            self.radius += self.zoom_speed
        self.radius = max(self.radius, MIN_ORBIT_RADIUS)

        # Mouse reference tracks the cursor in orbit mode too.
        self.last_mouse_position = (float(inputs.mouse_position[0]), float(inputs.mouse_position[1]))

        offset = vec_scale(spherical_direction(self.yaw, self.pitch), self.radius)
        self.position = vec_add(focus_point, offset)
        self.update_basis(vec_sub(focus_point, self.position))


class VirtualCursor:
    """
    Cursor position accumulated from relative mouse motion.

    A grabbed system cursor stops at the window border; summing the relative
    motion instead gives a position that keeps changing, so mouse-look can
    turn without limit.
    """

    def __init__(self, position: Tuple[float, float] = (0.0, 0.0)):
        self.position = (float(position[0]), float(position[1]))

    def reset(self, position: Tuple[float, float]) -> Tuple[float, float]:
        self.position = (float(position[0]), float(position[1]))
        return self.position

    def move(self, rel: Tuple[float, float]) -> Tuple[float, float]:
        self.position = (self.position[0] + rel[0], self.position[1] + rel[1])
        return self.position


def focal_length(viewport_height: int, fov_degrees: float = CAMERA_FOV_DEGREES) -> float:
    """Distance in pixels from the eye to the image plane for a vertical field of view."""
    return (viewport_height / 2.0) / math.tan(math.radians(fov_degrees) / 2.0)


def view_depth(pose: CameraPose, point: Vec3) -> float:
    return vec_dot(vec_sub(point, pose.position), pose.front)


def world_to_screen(pose: CameraPose, point: Vec3, viewport_size: Tuple[int, int],
                    fov_degrees: float = CAMERA_FOV_DEGREES) -> Optional[Tuple[float, float, float]]:
    """
    Perspective-project a display-space point.

    Returns (screen_x, screen_y, depth) or None when the point is behind the
    near plane. Screen y grows downwards.
    """
    rel = vec_sub(point, pose.position)
    depth = vec_dot(rel, pose.front)
    if depth < NEAR_PLANE:
        return None
    w, h = viewport_size
    focal = focal_length(h, fov_degrees)
    sx = w / 2.0 + vec_dot(rel, pose.right) * focal / depth
    sy = h / 2.0 - vec_dot(rel, pose.up) * focal / depth
    return (sx, sy, depth)


def projected_radius(radius: float, depth: float, viewport_height: int,
                     fov_degrees: float = CAMERA_FOV_DEGREES) -> float:
    if depth <= 0:
        return 0.0
    return radius * focal_length(viewport_height, fov_degrees) / depth


def axis_indicator(pose: CameraPose) -> List[Tuple[float, float]]:
    """
    Screen-plane direction (x right, y down) of the world X, Y and Z axes as seen
    from the camera orientation, for the corner gizmo.
    """
    axes = [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)]
    return [(vec_dot(axis, pose.right), -vec_dot(axis, pose.up)) for axis in axes]
