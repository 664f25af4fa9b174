"""Three-component vectors and unit direction cosines."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

RandomSource = Callable[[], float]


@dataclass
class Vector3:
    """A Cartesian vector with the usual arithmetic."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, factor: float) -> Vector3:
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Vector3:
        return Vector3(self.x / divisor, self.y / divisor, self.z / divisor)

    def dot(self, other: Vector3) -> float:
        """Scalar product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Vector product."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        """Euclidean norm."""
        return math.sqrt(self.dot(self))


@dataclass
class DirectionCosine:
    """A unit direction given by its cosines with the x, y and z axes."""

    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    def sample_isotropic(self, rng: RandomSource) -> None:
        """Set this direction to one drawn uniformly from the unit sphere.

        ``rng`` is called with no arguments and returns a uniform sample in [0, 1).
        """
        self.gamma = 1.0 - 2.0 * rng()
        sine_gamma = math.sqrt(1.0 - self.gamma * self.gamma)
        phi = math.pi * (2.0 * rng() - 1.0)
        self.alpha = sine_gamma * math.cos(phi)
        self.beta = sine_gamma * math.sin(phi)

    def rotate_3d_vector(
        self, sin_theta: float, cos_theta: float, sin_phi: float, cos_phi: float
    ) -> None:
        """Rotate the local vector (Theta, Phi) into the frame of this direction.

        The local vector is given by the sine and cosine of its polar angle
        from the local z-axis and of its azimuth from the local x-axis; the
        result replaces this direction.
        """
        own_cos_theta = self.gamma
        own_sin_theta = math.sqrt(1.0 - own_cos_theta * own_cos_theta)
        if own_sin_theta < 1e-6:
            own_cos_phi, own_sin_phi = 1.0, 0.0
        else:
            own_cos_phi = self.alpha / own_sin_theta
            own_sin_phi = self.beta / own_sin_theta

        local_x = sin_theta * cos_phi
        local_y = sin_theta * sin_phi
        self.alpha = (
            own_cos_theta * own_cos_phi * local_x
            - own_sin_phi * local_y
            + own_sin_theta * own_cos_phi * cos_theta
        )
        self.beta = (
            own_cos_theta * own_sin_phi * local_x
            + own_cos_phi * local_y
            + own_sin_theta * own_sin_phi * cos_theta
        )
        self.gamma = -own_sin_theta * local_x + own_cos_theta * cos_theta