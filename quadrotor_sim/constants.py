"""Constants for the quadrotor simulator."""

GRAVITY = 9.8
PRECISION = 1e-3  # Default maximum internal integration step in seconds
ROTOR_DIRECTIONS = (1.0, -1.0, 1.0, -1.0)  # Spin direction of each rotor about body z

# Sensor noise standard deviations
ACC_NOISE_STD = 0.05  # m/s^2
GYRO_NOISE_STD = 0.005  # rad/s
VIO_NOISE_STD = 0.02  # m/s
VIO_RANGE_GAIN = 0.01  # Relative VIO noise increase per meter distance from the origin

# Velocity control task
TASK_MAX_VELOCITY = 2.0  # m/s per axis
TASK_REVERSION = 0.5  # Mean reversion rate in 1/s
TASK_VOLATILITY = 1.0  # m/s per sqrt(s)
