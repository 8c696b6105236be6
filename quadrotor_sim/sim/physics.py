"""Physics module of the quadrotor simulation.

The dynamics are split into two subsystems that can be tested independently:

* The electromechanical motor model. Each rotor is driven by a DC motor whose armature current
  follows from the applied voltage and the back-EMF. The motor torque accelerates the rotor against
  the aerodynamic drag torque of the propeller.
* The rigid body model. Rotor thrust, gravity and linear aerodynamic drag produce the body force.
  Thrust moments around the center of gravity, rotor reaction torques, aerodynamic moment drag and
  the gyroscopic term produce the body torque.

All functions are pure. :func:`step` takes a state and returns the next one together with the
body-frame acceleration used by the sensor model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np
from scipy.spatial.transform import Rotation as R

from quadrotor_sim.constants import GRAVITY
from quadrotor_sim.utils.rotations import orthonormalize

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from quadrotor_sim.sim.params import QuadrotorParams
    from quadrotor_sim.sim.state import VehicleState


class ForceTorque(NamedTuple):
    """Total force and torque acting on the body, both in the body frame."""

    f: NDArray[np.floating]
    t: NDArray[np.floating]


class MotorState(NamedTuple):
    """Result of one motor model update for all four rotors."""

    rotor_speed: NDArray[np.floating]
    rotor_acc: NDArray[np.floating]
    current: NDArray[np.floating]


def clip_command(
    command: NDArray[np.floating], params: QuadrotorParams
) -> tuple[NDArray[np.floating], bool]:
    """Clip the rotor voltages to the admissible range.

    Args:
        command: The voltage for each rotor. Shape: (4,).
        params: The quadrotor parameters.

    Returns:
        The clipped voltages and a flag that is True if any component was out of range.
    """
    command = np.asarray(command, dtype=np.float64)
    assert command.shape == (4,), f"Expected one voltage per rotor, got shape {command.shape}"
    voltage = np.clip(command, params.min_voltage, params.max_voltage)
    return voltage, bool(np.any(voltage != command))


def motor_dynamics(
    voltage: NDArray[np.floating],
    rotor_speed: NDArray[np.floating],
    params: QuadrotorParams,
    dt: float,
) -> MotorState:
    """Advance the rotor speeds by one explicit Euler step.

    The armature current is ``i = (u - phi * w) / ra``. The motor torque ``phi * i`` accelerates the
    rotor with inertia ``jm`` against the propeller drag torque ``mm * w^2``.

    Args:
        voltage: The clipped voltage applied to each motor. Shape: (4,).
        rotor_speed: The current rotor speeds. Shape: (4,).
        params: The quadrotor parameters.
        dt: The integration step.
    """
    current = (voltage - params.phi * rotor_speed) / params.ra
    rotor_acc = (params.phi * current - params.mm * rotor_speed**2) / params.jm
    # The motor cannot reverse the propeller
    next_speed = np.maximum(rotor_speed + rotor_acc * dt, 0.0)
    return MotorState(next_speed, (next_speed - rotor_speed) / dt, current)


def thrust(rotor_speed: NDArray[np.floating], params: QuadrotorParams) -> NDArray[np.floating]:
    """Thrust of each rotor from the quadratic thrust curve."""
    t = params.ct_0 + params.ct_1 * rotor_speed + params.ct_2 * rotor_speed**2
    return np.maximum(t, 0.0)


def forces_torques(
    state: VehicleState, motors: MotorState, params: QuadrotorParams
) -> ForceTorque:
    """Compute the total body force and torque.

    Args:
        state: The current state of the quadrotor.
        motors: The updated motor state.
        params: The quadrotor parameters.

    Returns:
        The force and torque in the body frame. Gravity and drag are included in the force.
    """
    thrusts = thrust(motors.rotor_speed, params)
    rot = state.orientation
    gravity = rot.T @ np.array([0.0, 0.0, -GRAVITY * params.mass])
    drag = params.drag_coeff_force @ (rot.T @ state.global_velocity)
    force = np.array([0.0, 0.0, np.sum(thrusts)]) + gravity - drag

    arms = params.propeller_coord - params.gravity_center
    thrust_vectors = np.zeros((4, 3))
    thrust_vectors[:, 2] = thrusts
    torque = np.sum(np.cross(arms, thrust_vectors), axis=0)
    # Reaction torque of the spinning and accelerating propellers about the body z axis
    reaction = params.mm * motors.rotor_speed**2 + params.jm * motors.rotor_acc
    torque[2] -= np.dot(params.rotor_directions, reaction)
    w = state.body_angular_velocity
    torque = torque - params.drag_coeff_moment @ w - np.cross(w, params.inertia @ w)
    return ForceTorque(force, torque)


def rigid_body_step(
    state: VehicleState, ft: ForceTorque, params: QuadrotorParams, dt: float
) -> tuple[VehicleState, NDArray[np.floating]]:
    """Integrate the rigid body by one semi-implicit Euler step.

    Velocities are updated first, then the position and orientation use the new velocities. The
    orientation is composed with the exponential map of the angular velocity increment and projected
    back onto SO(3) to remove floating point drift.

    Args:
        state: The current state. Rotor speeds and power are taken over unchanged.
        ft: Body force and torque.
        params: The quadrotor parameters.
        dt: The integration step.

    Returns:
        The next state and the body-frame acceleration.
    """
    body_acc = ft.f / params.mass
    world_acc = state.orientation @ body_acc
    velocity = state.global_velocity + world_acc * dt
    position = state.global_position + velocity * dt

    ang_vel = state.body_angular_velocity + params.inverse_inertia @ ft.t * dt
    delta = R.from_rotvec(ang_vel * dt).as_matrix()
    orientation = orthonormalize(state.orientation @ delta)
    next_state = state.replace(
        global_position=position,
        global_velocity=velocity,
        body_angular_velocity=ang_vel,
        orientation=orientation,
    )
    return next_state, body_acc


def step(
    state: VehicleState, params: QuadrotorParams, command: NDArray[np.floating], dt: float
) -> tuple[VehicleState, NDArray[np.floating]]:
    """Advance the quadrotor by one integration step.

    Args:
        state: The current state.
        params: The quadrotor parameters.
        command: The voltage for each rotor. Out of range voltages are clipped. Shape: (4,).
        dt: The integration step. Must be positive.

    Returns:
        The next state and the body-frame acceleration of this step.
    """
    assert dt > 0, f"Time step must be positive, got {dt}"
    voltage, _ = clip_command(command, params)
    motors = motor_dynamics(voltage, state.propeller_angular_velocity, params, dt)
    ft = forces_torques(state, motors, params)
    next_state, body_acc = rigid_body_step(state, ft, params, dt)
    power = float(np.dot(voltage, motors.current))
    next_state = next_state.replace(propeller_angular_velocity=motors.rotor_speed, power=power)
    return next_state, body_acc


def hover_rotor_speed(params: QuadrotorParams) -> float:
    """Rotor speed at which the four rotors together carry the weight of the quadrotor."""
    target = params.mass * GRAVITY / 4
    if params.ct_2 == 0:
        return (target - params.ct_0) / params.ct_1
    disc = params.ct_1**2 - 4 * params.ct_2 * (params.ct_0 - target)
    return (-params.ct_1 + np.sqrt(disc)) / (2 * params.ct_2)


def hover_voltage(params: QuadrotorParams) -> float:
    """Voltage that keeps the rotors spinning at the hover rotor speed.

    At the steady state the motor torque equals the propeller drag torque, so the current is
    ``mm * w^2 / phi`` and the voltage ``phi * w + ra * mm * w^2 / phi``.
    """
    w = hover_rotor_speed(params)
    return params.phi * w + params.ra * params.mm * w**2 / params.phi
