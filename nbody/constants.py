#!/usr/bin/env python3
"""
Shared constants for the N-body simulator (simulation units unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier.
"""

# Physical constants
G = 6.67430e-8  # scaled gravitational constant (not SI)
EPS = 1e-9  # separations below this contribute zero acceleration

# Simulation units -> display (render/camera) units
POSITION_SCALE = 0.001

# Body defaults
DEFAULT_BODY_MASS = 1e9
DEFAULT_BODY_RADIUS = 5.0
DEFAULT_BODY_COLOR = (1.0, 1.0, 1.0)
MIN_BODY_RADIUS = 0.5  # radius slider bounds in the UI
MAX_BODY_RADIUS = 10.0

# Camera controls
MOVE_SPEED = 0.01  # display units per frame in free-fly mode
LOOK_SPEED = 0.1  # radians per (pixel * second) for mouse look, radians/s for orbit keys
ZOOM_SPEED = MOVE_SPEED * 2.0  # orbit radius change per frame
PITCH_LIMIT = 1.5  # just under pi/2
MIN_ORBIT_RADIUS = 0.05
DEFAULT_YAW = 1.18
DEFAULT_PITCH = 0.0
DEFAULT_ORBIT_RADIUS = 5.0
WORLD_UP = (0.0, 1.0, 0.0)
CAMERA_FOV_DEGREES = 45.0
NEAR_PLANE = 0.01

# Rendering (viewport)
VIEW_WIDTH = 1260
VIEW_HEIGHT = 768
TARGET_FPS = 60
BACKGROUND_COLOR = (0, 0, 0)
AXIS_LENGTH = 10000.0
AXIS_COLORS = ((230, 41, 55), (0, 228, 48), (0, 121, 241))  # X, Y, Z
GIZMO_SCALE = 40
HUD_COLOR = (255, 255, 255)
BODY_DRAW_DIVISOR = 200.0  # body.radius / divisor = display radius
