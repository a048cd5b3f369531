"""
Unit tests for the simulation controller.

Tests cover:
- Tick ordering, run/pause and the reference clock
- Deferred removal and focus reconciliation
- Numeric body edits
- Input commands (quit, cursor grab)
- Presets
"""

import pytest

from nbody.constants import POSITION_SCALE
from nbody.data_models import Body, FocusKind, FocusPoint, InputState
from nbody.physics import GravitySystem, circular_orbit_velocity
from nbody.presets import PRESETS, list_presets, load_preset
from nbody.simulation import SimulationController
from nbody.vector_utils import vec_dot, vec_len, vec_norm, vec_sub


def idle(**kwargs):
    return InputState(frame_time=1.0 / 60, **kwargs)


@pytest.fixture
def sim(clock):
    return SimulationController(clock=clock)


class TestRunning:
    """Tests for physics stepping inside tick."""

    def test_paused_tick_leaves_bodies(self, sim, clock):
        body = sim.add_body(Body(velocity=(1.0, 0.0, 0.0)))
        clock.advance(5.0)
        sim.tick(idle())
        assert body.position == (0.0, 0.0, 0.0)

    def test_running_integrates_elapsed_time(self, sim, clock):
        body = sim.add_body(Body(velocity=(2.0, 0.0, 0.0)))
        sim.set_running(True)
        clock.advance(0.25)
        sim.tick(idle())
        assert body.position == pytest.approx((0.5, 0.0, 0.0))
        clock.advance(0.25)
        sim.tick(idle())
        assert body.position == pytest.approx((1.0, 0.0, 0.0))

    def test_resume_resets_reference_clock(self, sim, clock):
        body = sim.add_body(Body(velocity=(1.0, 0.0, 0.0)))
        clock.advance(100.0)
        sim.set_running(True)
        clock.advance(0.5)
        sim.tick(idle())
        assert body.position == pytest.approx((0.5, 0.0, 0.0))

        sim.set_running(False)
        clock.advance(1000.0)
        sim.tick(idle())
        sim.set_running(True)
        clock.advance(0.5)
        sim.tick(idle())
        assert body.position == pytest.approx((1.0, 0.0, 0.0))

    def test_set_running_true_twice_keeps_reference(self, sim, clock):
        body = sim.add_body(Body(velocity=(1.0, 0.0, 0.0)))
        sim.set_running(True)
        clock.advance(1.0)
        sim.set_running(True)
        sim.tick(idle())
        assert body.position == pytest.approx((1.0, 0.0, 0.0))

    def test_large_gap_is_one_step_without_max_dt(self, sim, clock):
        body = sim.add_body(Body(velocity=(1.0, 0.0, 0.0)))
        sim.set_running(True)
        clock.advance(30.0)
        sim.tick(idle())
        assert body.position[0] == pytest.approx(30.0)

    def test_max_dt_clamps_step(self, sim, clock):
        body = sim.add_body(Body(velocity=(1.0, 0.0, 0.0)))
        sim.max_dt = 0.1
        sim.set_running(True)
        clock.advance(30.0)
        sim.tick(idle())
        assert body.position[0] == pytest.approx(0.1)

    def test_step_once_ignores_run_flag(self, sim):
        body = sim.add_body(Body(velocity=(0.0, 3.0, 0.0)))
        sim.step_once(0.5)
        assert body.position == pytest.approx((0.0, 1.5, 0.0))


class TestRemoval:
    """Tests for deferred removal."""

    def test_removal_is_deferred(self, sim):
        sim.add_body()
        sim.add_body()
        assert sim.remove_body(0) is True
        assert len(sim.bodies()) == 2
        snapshot = sim.tick(idle())
        assert len(snapshot.bodies) == 2
        removed = sim.apply_pending_removals()
        assert len(removed) == 1
        assert len(sim.bodies()) == 1

    def test_invalid_index_is_ignored(self, sim):
        sim.add_body()
        assert sim.remove_body(5) is False
        assert sim.remove_body(-1) is False
        assert sim.apply_pending_removals() == []
        assert len(sim.bodies()) == 1

    def test_double_request_removes_once(self, sim):
        for _ in range(3):
            sim.add_body()
        sim.remove_body(1)
        sim.remove_body(1)
        assert sim.apply_pending_removals() == [1]
        assert [b.body_id for b in sim.bodies()] == [0, 2]

    def test_removing_focused_body_resets_focus(self, sim):
        sim.add_body(Body(position=(0.0, 0.0, 0.0)))
        sim.add_body(Body(position=(1000.0, 0.0, 0.0)))
        assert sim.focus_body(1)
        sim.tick(idle())

        sim.remove_body(1)
        snapshot = sim.tick(idle())
        assert snapshot.focus.kind is FocusKind.NONE
        sim.apply_pending_removals()

        snapshot = sim.tick(idle())
        assert snapshot.focus == FocusPoint.none()
        assert len(snapshot.bodies) == 1

    def test_removing_last_index_while_focused(self, sim):
        """Focus on the last index plus its removal never reads past the end."""
        for x in (0.0, 10.0, 20.0):
            sim.add_body(Body(position=(x, 0.0, 0.0)))
        sim.focus_body(2)
        sim.remove_body(2)
        sim.tick(idle())
        sim.apply_pending_removals()
        snapshot = sim.tick(idle())
        assert snapshot.focus.is_free

    def test_removing_lower_body_keeps_focus_on_same_body(self, sim):
        sim.add_body(Body(position=(0.0, 0.0, 0.0)))
        target = sim.add_body(Body(position=(500.0, 0.0, 0.0)))
        sim.focus_body(1)
        sim.remove_body(0)
        sim.tick(idle())
        sim.apply_pending_removals()

        snapshot = sim.tick(idle())
        assert snapshot.focus == FocusPoint.body(target.body_id)
        look_at = (500.0 * POSITION_SCALE, 0.0, 0.0)
        to_target = vec_norm(vec_sub(look_at, snapshot.pose.position))
        assert vec_dot(to_target, snapshot.pose.front) == pytest.approx(1.0)

    def test_removal_status_follows_queue(self, sim):
        sim.add_body()
        sim.add_body()
        sim.remove_body(0)
        assert sim.pop_status() == "Removing body #0."
        sim.apply_pending_removals()
        assert sim.pop_status() == "Removed body #0."

    def test_removal_status_counts_bodies(self, sim):
        for _ in range(3):
            sim.add_body()
        sim.remove_body(0)
        sim.remove_body(2)
        sim.apply_pending_removals()
        assert sim.pop_status() == "Removed 2 bodies."


class TestEditBody:
    """Tests for numeric text edits."""

    def test_invalid_text_keeps_value(self, sim):
        body = sim.add_body()
        assert sim.edit_body(0, "mass", "abc") is False
        assert body.mass == 1e9

    def test_partial_number_keeps_value(self, sim):
        body = sim.add_body()
        assert sim.edit_body(0, "vx", "1e") is False
        assert body.velocity == (0.0, 0.0, 0.0)

    def test_valid_scalar_edit(self, sim):
        body = sim.add_body()
        assert sim.edit_body(0, "mass", "2.5e10") is True
        assert body.mass == 2.5e10

    def test_valid_component_edit(self, sim):
        body = sim.add_body()
        assert sim.edit_body(0, "y", "-12.5") is True
        assert sim.edit_body(0, "vz", "3") is True
        assert body.position == (0.0, -12.5, 0.0)
        assert body.velocity == (0.0, 0.0, 3.0)

    def test_unknown_field_or_index(self, sim):
        body = sim.add_body()
        assert sim.edit_body(0, "charge", "1.0") is False
        assert sim.edit_body(3, "mass", "1.0") is False
        assert body.mass == 1e9

    def test_radius_and_color_setters_clamp(self, sim):
        body = sim.add_body()
        sim.set_body_radius(0, 50.0)
        sim.set_body_color(0, (1.5, -0.2, 0.5, 1.0))
        assert body.radius == 10.0
        assert body.color == (1.0, 0.0, 0.5)


class TestInputCommands:
    """Tests for key commands consumed by tick."""

    def test_escape_requests_quit(self, sim):
        assert sim.tick(idle(keys_pressed=frozenset({"escape"}))).quit_requested is True
        assert sim.tick(idle()).quit_requested is False

    def test_tab_toggles_grab(self, sim):
        snapshot = sim.tick(idle(keys_pressed=frozenset({"tab"})))
        assert snapshot.grabbed is False
        snapshot = sim.tick(idle(keys_pressed=frozenset({"tab"})))
        assert snapshot.grabbed is True

    def test_mass_center_focus_drives_orbit(self, sim):
        sim.add_body(Body(position=(1000.0, 0.0, 0.0)))
        sim.add_body(Body(position=(3000.0, 0.0, 0.0)))
        sim.set_focus(FocusPoint.mass_center())
        snapshot = sim.tick(idle())
        center = snapshot.mass_center
        assert center == pytest.approx((2.0, 0.0, 0.0))
        assert vec_len(vec_sub(snapshot.pose.position, center)) == pytest.approx(sim.camera.radius)

    def test_snapshot_does_not_alias_bodies(self, sim):
        body = sim.add_body()
        snapshot = sim.tick(idle())
        snapshot.bodies[0].mass = 1.0
        assert body.mass == 1e9

    def test_status_messages(self, sim):
        sim.add_body()
        assert sim.pop_status() == "Added body #0."
        assert sim.pop_status() is None
        sim.set_running(True)
        assert sim.tick(idle()).status == "Simulation running."

    def test_snapshot_carries_diagnostics(self, sim):
        sim.add_body(Body(mass=2.0, velocity=(3.0, 0.0, 0.0)))
        sim.add_body(Body(mass=1.0, position=(1000.0, 0.0, 0.0), velocity=(0.0, -1.0, 0.0)))
        snapshot = sim.tick(idle())
        assert snapshot.total_energy == pytest.approx(sim.system.total_energy())
        assert snapshot.total_momentum == pytest.approx((6.0, -1.0, 0.0))

    def test_body_label_uses_name_and_id(self, sim):
        sim.load_preset("Star and planet")
        assert [b.label for b in sim.bodies()] == ["Star #0", "Planet #1"]
        assert sim.add_body().label == "Body #2"


class TestPresets:
    """Tests for the built-in scenes."""

    def test_all_presets_load(self, sim):
        for name in list_presets():
            sim.load_preset(name)
            assert len(sim.bodies()) == len(PRESETS[name]())

    def test_unknown_preset_raises(self, sim):
        with pytest.raises(KeyError):
            sim.load_preset("Nope")

    def test_load_resets_focus(self, sim):
        sim.load_preset("Star and planet")
        sim.focus_body(1)
        sim.load_preset("Three-body (Lagrange)")
        assert sim.focus.focus.is_free

    def test_star_and_planet_is_circular(self):
        star, planet = load_preset("Star and planet")
        r = vec_len(planet.position)
        assert vec_len(planet.velocity) == pytest.approx(circular_orbit_velocity(star.mass, r))

    def test_lagrange_centered(self):
        bodies = load_preset("Three-body (Lagrange)")
        system = GravitySystem(bodies)
        assert system.mass_center() == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)
        speed = vec_len(bodies[0].velocity)
        assert vec_len(system.total_momentum()) / (bodies[0].mass * speed) < 1e-9

    def test_figure_eight_zero_momentum(self):
        system = GravitySystem(load_preset("Three-body (Figure-eight)"))
        speed_scale = max(vec_len(b.velocity) for b in system)
        momentum = system.total_momentum()
        assert vec_len(momentum) / (1e13 * speed_scale) < 1e-6
