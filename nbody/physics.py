#!/usr/bin/env python3
"""
Core Physics Engine for the N-body simulator

Responsibilities
- Own the ordered body collection and hand out stable body ids.
- Compute pairwise gravitational accelerations with a minimum-distance guard.
- Advance body states with semi-implicit (symplectic) Euler: velocities from the
  old positions first, then positions from the new velocities.
- Provide the mass-weighted center and a few diagnostics (energy, momentum).

Units and conventions
- Positions are in simulation units; the mass center is returned in display units
  (multiplied by POSITION_SCALE) because the camera orbits in display space.
- G is a scaled constant (6.67430e-8), not the SI value.

Numerical notes
- Guard: separations below EPS contribute exactly zero acceleration. This is a
  safety clamp against division by zero, not a softened potential; force between
  near-coincident bodies is silently dropped.
- Complexity: acceleration computation is O(N^2) per step (direct summation), no
  spatial partitioning.
- accelerate() is two-phase: accelerations are accumulated from a snapshot of the
  positions, then applied. The result does not depend on body order.
- Malformed inputs (zero/negative mass, NaN positions) are not rejected and
  propagate into the results.
"""

import math
from typing import Iterator, List, Optional, Tuple

from .constants import EPS, G, POSITION_SCALE
from .data_models import Body
from .vector_utils import ZERO, Vec3, vec_add, vec_len, vec_scale, vec_sub


def find_acceleration(position: Vec3, other_position: Vec3, other_mass: float) -> Vec3:
    """
    Acceleration at `position` caused by a point mass at `other_position`.

        a = G * m_other / r^2 * (other - self) / r

    Returns the zero vector when r < EPS.
    """
    vector = vec_sub(other_position, position)
    r = vec_len(vector)
    if r < EPS:
        return ZERO
    return vec_scale(vector, G * other_mass / (r * r * r))


class GravitySystem:
    """
    Ordered, index-addressable collection of bodies plus the integrator.

    Indices follow insertion order and shift on removal; body ids are assigned
    once on add_body and never reused.
    """

    def __init__(self, bodies: Optional[List[Body]] = None):
        self._bodies: List[Body] = []
        self._next_id = 0
        for body in bodies or []:
            self.add_body(body)

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __getitem__(self, index: int) -> Body:
        return self._bodies[index]

    @property
    def bodies(self) -> Tuple[Body, ...]:
        """Read view in insertion order. The Body objects themselves are live."""
        return tuple(self._bodies)

    def add_body(self, body: Optional[Body] = None) -> Body:
        """Append a body (a default Body if omitted) and assign it the next id."""
        if body is None:
            body = Body()
        body.body_id = self._next_id
        self._next_id += 1
        self._bodies.append(body)
        return body

    def remove_at(self, index: int) -> Body:
        return self._bodies.pop(index)

    def clear(self) -> None:
        self._bodies.clear()

    def index_of(self, body_id: int) -> Optional[int]:
        for i, body in enumerate(self._bodies):
            if body.body_id == body_id:
                return i
        return None

    def get(self, body_id: int) -> Optional[Body]:
        index = self.index_of(body_id)
        if index is None:
            return None
        return self._bodies[index]

    def compute_accelerations(self) -> List[Vec3]:
        """
        Net gravitational acceleration on every body, same order as the bodies.

        Positions and masses are read from a snapshot taken at the start of the
        call. Self-interaction is skipped.
        """
        positions = [body.position for body in self._bodies]
        masses = [body.mass for body in self._bodies]
        n = len(positions)
        accelerations = [ZERO] * n

        for i in range(n):
            total = ZERO
            for j in range(n):
                if i == j:
                    continue
                total = vec_add(total, find_acceleration(positions[i], positions[j], masses[j]))
            accelerations[i] = total

        return accelerations

    def accelerate(self, dt: float) -> None:
        """Explicit Euler on velocity: velocity_i += a_i * dt for every body."""
        accelerations = self.compute_accelerations()
        for body, acceleration in zip(self._bodies, accelerations):
            body.velocity = vec_add(body.velocity, vec_scale(acceleration, dt))

    def move_bodies(self, dt: float) -> None:
        """position += velocity * dt for every body. No collision handling."""
        for body in self._bodies:
            body.position = vec_add(body.position, vec_scale(body.velocity, dt))

    def step(self, dt: float) -> None:
        """One semi-implicit Euler step: accelerate completes before any body moves."""
        self.accelerate(dt)
        self.move_bodies(dt)

    def mass_center(self) -> Vec3:
        """
        Mass-weighted average position in display units:

            sum(position_i * mass_i) / sum(mass_i) * POSITION_SCALE

        Returns the zero vector for an empty system or a zero total mass.
        """
        if not self._bodies:
            return ZERO
        total_mass = 0.0
        weighted = ZERO
        for body in self._bodies:
            weighted = vec_add(weighted, vec_scale(body.position, body.mass))
            total_mass += body.mass
        if total_mass == 0:
            return ZERO
        return vec_scale(weighted, POSITION_SCALE / total_mass)

    # -----------------------
    # Diagnostics
    # -----------------------

    def kinetic_energy(self) -> float:
        return sum(0.5 * b.mass * (b.velocity[0] ** 2 + b.velocity[1] ** 2 + b.velocity[2] ** 2)
                   for b in self._bodies)

    def potential_energy(self) -> float:
        """Pairwise -G*m_i*m_j/r, skipping pairs closer than EPS like the integrator does."""
        energy = 0.0
        n = len(self._bodies)
        for i in range(n):
            bi = self._bodies[i]
            for j in range(i + 1, n):
                bj = self._bodies[j]
                r = vec_len(vec_sub(bj.position, bi.position))
                if r < EPS:
                    continue
                energy -= G * bi.mass * bj.mass / r
        return energy

    def total_energy(self) -> float:
        return self.kinetic_energy() + self.potential_energy()

    def total_momentum(self) -> Vec3:
        momentum = ZERO
        for body in self._bodies:
            momentum = vec_add(momentum, vec_scale(body.velocity, body.mass))
        return momentum


def circular_orbit_velocity(central_mass: float, orbital_radius: float) -> float:
    """
    Speed v = sqrt(G * M / r) that keeps a light body on a circle of radius r.

    Uses the scaled G, so `orbital_radius` is in simulation units (before
    POSITION_SCALE) and the result is in simulation units per second.
    Returns 0.0 for a non-positive radius.
    """
    if orbital_radius <= 0:
        return 0.0
    return math.sqrt(G * central_mass / orbital_radius)


def orbital_period(central_mass: float, orbital_radius: float) -> float:
    """
    Period of a circular orbit, T = 2 * pi * sqrt(r^3 / (G * M)).

    Returns 0.0 when either input is non-positive.
    """
    if orbital_radius <= 0 or central_mass <= 0:
        return 0.0

    return 2.0 * math.pi * math.sqrt(orbital_radius ** 3 / (G * central_mass))
