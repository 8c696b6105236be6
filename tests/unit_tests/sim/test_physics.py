from dataclasses import replace

import numpy as np
import pytest

from quadrotor_sim.constants import GRAVITY
from quadrotor_sim.sim.params import DEFAULT_CONFIG, QuadrotorParams
from quadrotor_sim.sim.physics import (
    MotorState,
    clip_command,
    forces_torques,
    hover_rotor_speed,
    hover_voltage,
    motor_dynamics,
    step,
    thrust,
)
from quadrotor_sim.sim.state import VehicleState


def load_params(**changes) -> QuadrotorParams:
    params = QuadrotorParams.from_file(DEFAULT_CONFIG)
    return replace(params, **changes) if changes else params


def hover_state(params: QuadrotorParams) -> VehicleState:
    return VehicleState(propeller_angular_velocity=np.full(4, hover_rotor_speed(params)))


@pytest.mark.unit
def test_clip_command():
    params = load_params()
    voltage, clipped = clip_command(np.full(4, 1.5 * params.max_voltage), params)
    assert clipped
    assert np.all(voltage == params.max_voltage)
    voltage, clipped = clip_command(np.array([0.0, 1.0, 2.0, params.max_voltage]), params)
    assert not clipped
    assert np.array_equal(voltage, [0.0, 1.0, 2.0, params.max_voltage])
    _, clipped = clip_command(np.array([-1.0, 1.0, 1.0, 1.0]), params)
    assert clipped


@pytest.mark.unit
def test_voltage_clamping():
    """A command above the voltage limit is treated exactly like the limit."""
    params = load_params()
    state = hover_state(params)
    command = np.array([1.5, 1.0, 1.0, 0.5]) * params.max_voltage
    over, over_acc = step(state, params, command, 0.01)
    limit, limit_acc = step(state, params, np.minimum(command, params.max_voltage), 0.01)
    assert over == limit
    assert np.array_equal(over_acc, limit_acc)


@pytest.mark.unit
def test_rotor_spin_up():
    """Rotors of a stationary body converge to the steady state of the motor model."""
    params = load_params()
    u = params.max_voltage
    a = params.phi**2 / params.ra
    steady = (-a + np.sqrt(a**2 + 4 * params.mm * params.phi * u / params.ra)) / (2 * params.mm)
    speed = np.zeros(4)
    for _ in range(3000):
        last = speed
        speed = motor_dynamics(np.full(4, u), speed, params, 1e-3).rotor_speed
        assert np.all(speed >= last - 1e-9)
    assert np.allclose(speed, steady, rtol=1e-3)


@pytest.mark.unit
def test_rotor_speed_non_negative():
    params = load_params()
    motors = motor_dynamics(np.zeros(4), np.full(4, 500.0), params, 1.0)
    assert np.all(motors.rotor_speed == 0)
    assert np.all(motors.rotor_acc == -500.0)


@pytest.mark.unit
def test_thrust_curve():
    params = load_params()
    w = np.array([0.0, 100.0, 500.0, 800.0])
    expected = params.ct_0 + params.ct_1 * w + params.ct_2 * w**2
    assert np.allclose(thrust(w, params), expected)
    assert np.isclose(4 * thrust(hover_rotor_speed(params), params), params.mass * GRAVITY)


@pytest.mark.unit
def test_free_fall():
    """Without thrust and drag, the vertical velocity decreases linearly with time."""
    params = load_params(
        ct_0=0.0,
        ct_1=0.0,
        ct_2=0.0,
        drag_coeff_force=np.zeros((3, 3)),
        drag_coeff_moment=np.zeros((3, 3)),
    )
    state, dt, n = VehicleState(), 0.01, 100
    for _ in range(n):
        state, body_acc = step(state, params, np.zeros(4), dt)
    assert np.allclose(body_acc, [0.0, 0.0, -GRAVITY])
    assert np.isclose(state.global_velocity[2], -GRAVITY * n * dt, rtol=1e-12)
    assert np.allclose(state.global_velocity[:2], 0.0)
    # Semi-implicit Euler: z_n = -g dt^2 n (n + 1) / 2
    assert np.isclose(state.global_position[2], -GRAVITY * dt**2 * n * (n + 1) / 2, rtol=1e-12)
    assert np.allclose(state.orientation, np.eye(3))


@pytest.mark.unit
def test_hover_equilibrium():
    """The hover voltage at hover rotor speed leaves all velocities unchanged."""
    params = load_params()
    state = hover_state(params)
    next_state, body_acc = step(state, params, np.full(4, hover_voltage(params)), 0.01)
    assert np.allclose(body_acc, 0.0, atol=1e-9)
    assert np.allclose(next_state.global_velocity, 0.0, atol=1e-9)
    assert np.allclose(next_state.body_angular_velocity, 0.0, atol=1e-9)
    assert np.allclose(
        next_state.propeller_angular_velocity, state.propeller_angular_velocity, atol=1e-6
    )


@pytest.mark.unit
def test_roll_torque():
    """More thrust on the left rotors rolls the quadrotor to the right (positive x torque)."""
    params = load_params()
    motors = MotorState(np.array([600.0, 600.0, 500.0, 500.0]), np.zeros(4), np.zeros(4))
    ft = forces_torques(VehicleState(), motors, params)
    assert ft.t[0] > 0
    assert np.isclose(ft.t[1], 0.0)
    assert np.isclose(ft.t[2], 0.0)


@pytest.mark.unit
def test_yaw_reaction_torque():
    params = load_params()
    motors = MotorState(np.array([600.0, 500.0, 600.0, 500.0]), np.zeros(4), np.zeros(4))
    ft = forces_torques(VehicleState(), motors, params)
    expected = -params.mm * 2 * (600.0**2 - 500.0**2)
    assert np.isclose(ft.t[2], expected)
    assert np.allclose(ft.t[:2], 0.0)
    # Accelerating rotors add a reaction torque proportional to the rotor inertia
    motors = MotorState(np.full(4, 500.0), np.array([100.0, 0.0, 0.0, 0.0]), np.zeros(4))
    ft = forces_torques(VehicleState(), motors, params)
    assert np.isclose(ft.t[2], -params.jm * 100.0)


@pytest.mark.unit
def test_linear_drag():
    params = load_params()
    state = VehicleState(global_velocity=np.array([1.0, 0.0, 0.0]))
    motors = MotorState(np.zeros(4), np.zeros(4), np.zeros(4))
    ft = forces_torques(state, motors, params)
    assert np.isclose(ft.f[0], -params.drag_coeff_force[0, 0])


@pytest.mark.unit
def test_power():
    params = load_params()
    u = hover_voltage(params)
    state = hover_state(params)
    next_state, _ = step(state, params, np.full(4, u), 0.01)
    w = state.propeller_angular_velocity[0]
    current = (u - params.phi * w) / params.ra
    assert np.isclose(next_state.power, 4 * u * current)
    assert next_state.power > 0


@pytest.mark.unit
def test_step_does_not_modify_state():
    params = load_params()
    state = VehicleState.from_pose(g_z=1.0, w_x=0.5, roll=0.1)
    copy = state.replace()
    next_state, _ = step(state, params, np.full(4, params.max_voltage), 0.01)
    assert state == copy
    assert next_state != state


@pytest.mark.unit
def test_step_invalid_dt():
    params = load_params()
    with pytest.raises(AssertionError):
        step(VehicleState(), params, np.zeros(4), 0.0)
