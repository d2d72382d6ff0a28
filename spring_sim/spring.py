"""Closed-form damped spring solver.

Each step evaluates the exact solution of

    p'' + 2*d*f*p' + f^2*p = f^2*g

over the interval dt, starting from the current position/velocity and the
current goal. There is no integration error to accumulate, so any dt works.

Values only need `+`, `-` and multiplication by a float on the right, so
floats, numpy arrays and small vector classes can all be animated.
"""

from __future__ import annotations

import math
import numbers
from typing import Generic, TypeVar

import numpy as np


T = TypeVar('T')

# Below this, sin(x*c)/c style quotients switch to a series expansion.
EPS = 1e-4

TWO_PI = 2.0 * math.pi


class InvalidArgument(ValueError):
    """Raised when a spring is constructed with unusable parameters."""


def _is_real(x) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, bool)


def _sin_c_over_c(a: float, c: float, sin_ac: float) -> float:
    """
    sin(a*c)/c, stable as c -> 0.

    Maclaurin expansion in c:
      sin(a*c)/c = a - (a^3*c^2)/6 + (a^5*c^4)/120 + O(c^6)
    Horner form:
      a + (a^2*c^4/20 - c^2) * a^3/6
    """
    if c > EPS:
        return sin_ac / c
    return a + ((a * a) * (c * c) * (c * c) / 20.0 - c * c) * (a * a * a) / 6.0


def _exp(x: float) -> float:
    # numpy instead of math so overflow/inf/nan propagate instead of raising
    return float(np.exp(x))


def _sqrt(x: float) -> float:
    return float(np.sqrt(x))


def spring_step(
    damping_ratio: float,
    frequency: float,
    goal: T,
    position: T,
    velocity: T,
    dt: float,
) -> tuple[T, T]:
    """
    Advance (position, velocity) by dt toward goal.

    Returns the new (position, velocity). The regime is picked by comparing the
    damping ratio with exactly 1; the critical case has its own closed form.
    """
    d = damping_ratio
    f = frequency * TWO_PI
    g = goal
    v0 = velocity

    offset = position - g

    with np.errstate(all='ignore'):
        decay = _exp(-d * f * dt)

        if d == 1:
            # Critically damped
            p1 = (offset * (1.0 + f * dt) + v0 * dt) * decay + g
            v1 = (v0 * (1.0 - f * dt) - offset * (f * f * dt)) * decay

        elif d < 1:
            # Underdamped
            c = _sqrt(1.0 - d * d)
            fc = f * c

            i = float(np.cos(fc * dt))
            j = float(np.sin(fc * dt))

            # z = sin(dt*f*c)/c, expanded in c (damping ratio near 1)
            z = _sin_c_over_c(dt * f, c, j)
            # y = sin(dt*f*c)/(f*c), expanded in f*c (frequency near 0)
            y = _sin_c_over_c(dt, fc, j)

            p1 = (offset * (i + d * z) + v0 * y) * decay + g
            v1 = (v0 * (i - d * z) - offset * (z * f)) * decay

        else:
            # Overdamped
            c = _sqrt(d * d - 1.0)

            r1 = -f * (d - c)
            r2 = -f * (d + c)

            # From co1 + co2 = offset and co1*r1 + co2*r2 = v0.
            # r2 - r1 = -2*f*c; unguarded when frequency == 0 (inf/nan results).
            inv = float(np.divide(1.0, r2 - r1))
            co2 = (v0 - offset * r1) * inv
            co1 = offset - co2

            e1 = co1 * _exp(r1 * dt)
            e2 = co2 * _exp(r2 * dt)

            p1 = e1 + e2 + g
            v1 = e1 * r1 + e2 * r2

    return p1, v1


class Spring(Generic[T]):
    """
    A damped spring pulling `position` toward `goal`.

    The goal starts at the initial position and the velocity starts at
    `position * 0`, so the zero has the same type/shape as the position.
    """

    def __init__(self, damping_ratio: float, frequency: float, position: T):
        if not _is_real(damping_ratio):
            raise InvalidArgument('Damping ratio must be a number')
        if not _is_real(frequency):
            raise InvalidArgument('Frequency must be a number')
        if damping_ratio * frequency < 0:
            raise InvalidArgument('Spring does not converge')

        self._d = damping_ratio
        self._f = frequency
        self._g = position
        self._p = position
        self._v = position * 0

    def __repr__(self) -> str:
        return (
            f'Spring(damping_ratio={self._d!r}, frequency={self._f!r}, '
            f'goal={self._g!r}, position={self._p!r}, velocity={self._v!r})'
        )

    @property
    def damping_ratio(self) -> float:
        return self._d

    @property
    def frequency(self) -> float:
        return self._f

    @property
    def goal(self) -> T:
        return self._g

    @property
    def position(self) -> T:
        return self._p

    @property
    def velocity(self) -> T:
        return self._v

    def set_goal(self, goal: T) -> None:
        self._g = goal

    def get_position(self) -> T:
        return self._p

    def get_velocity(self) -> T:
        return self._v

    def step(self, dt: float) -> T:
        """Advance by dt seconds and return the new position."""
        self._p, self._v = spring_step(self._d, self._f, self._g, self._p, self._v, dt)
        return self._p
