#!/usr/bin/env python3
"""
Built-in scenes.

Each template returns a fresh list of bodies in simulation units. Orbits lie in
the XZ plane (Y is up for the camera). Masses are chosen so that orbital
periods come out in minutes with the scaled G.
"""
import math
from typing import Callable, Dict, List

from .constants import G
from .data_models import Body
from .physics import circular_orbit_velocity
from .vector_utils import vec_norm, vec_scale

STAR_MASS = 1e13


def template_empty() -> List[Body]:
    return []


def template_star_and_planet() -> List[Body]:
    """
    Heavy star at the origin with one light planet on a circular orbit.

    The planet mass is negligible so the star stays put.
    """
    r = 1000.0
    v = circular_orbit_velocity(STAR_MASS, r)
    star = Body(name="Star", mass=STAR_MASS, radius=8.0, color=(1.0, 0.8, 0.0))
    planet = Body(
        name="Planet",
        mass=1.0,
        radius=2.0,
        position=(r, 0.0, 0.0),
        velocity=(0.0, 0.0, v),
        color=(0.39, 0.58, 0.93),
    )
    return [star, planet]


def template_three_body_lagrange() -> List[Body]:
    """
    Lagrange triangular configuration: equal masses on an equilateral triangle
    rotating rigidly about the center of mass.

    With R the distance from the center to each mass, omega^2 = G*m / (sqrt(3) * R^3).
    """
    m = STAR_MASS
    R = 1000.0
    omega = math.sqrt(G * m / (math.sqrt(3.0) * R ** 3))
    v = omega * R

    bodies = []
    colors = [(1.0, 0.47, 0.47), (0.47, 1.0, 0.47), (0.47, 0.47, 1.0)]
    for k, (name, color) in enumerate(zip("ABC", colors)):
        angle = 2.0 * math.pi * k / 3.0
        x, z = R * math.cos(angle), R * math.sin(angle)
        tangent = vec_norm((-z, 0.0, x))
        bodies.append(Body(name=name, mass=m, radius=5.0, position=(x, 0.0, z),
                           velocity=vec_scale(tangent, v), color=color))
    return bodies


def template_three_body_figure_eight() -> List[Body]:
    """Equal-mass figure-eight periodic solution (Chenciner-Montgomery), scaled.

    Dimensionless initial conditions (G=1, m=1):
    r1=(-0.97000436, 0.24308753), r2=(0.97000436,-0.24308753), r3=(0,0)
    v1=(0.4662036850, 0.4323657300), v2=(0.4662036850, 0.4323657300), v3=(-0.93240737,-0.86473146)
    Length unit L, velocity unit V = sqrt(G*m/L).
    """
    m = STAR_MASS
    L = 1000.0
    V = math.sqrt(G * m / L)

    r = [(-0.97000436, 0.24308753), (0.97000436, -0.24308753), (0.0, 0.0)]
    v = [(0.4662036850, 0.4323657300), (0.4662036850, 0.4323657300), (-0.93240737, -0.86473146)]
    colors = [(1.0, 0.47, 0.47), (0.47, 1.0, 0.47), (0.47, 0.47, 1.0)]

    bodies = []
    for name, (rx, rz), (vx, vz), color in zip("ABC", r, v, colors):
        bodies.append(Body(name=name, mass=m, radius=5.0, position=(rx * L, 0.0, rz * L),
                           velocity=(vx * V, 0.0, vz * V), color=color))
    return bodies


PRESETS: Dict[str, Callable[[], List[Body]]] = {
    "Empty": template_empty,
    "Star and planet": template_star_and_planet,
    "Three-body (Lagrange)": template_three_body_lagrange,
    "Three-body (Figure-eight)": template_three_body_figure_eight,
}


def list_presets() -> List[str]:
    return list(PRESETS.keys())


def load_preset(name: str) -> List[Body]:
    """Fresh bodies for a preset. Raises KeyError for unknown names."""
    return PRESETS[name]()
