"""Affine transforms with a cached inverse.

A Transform stores a 4x4 homogeneous matrix ``H`` together with its inverse.
The inverse is never recomputed numerically: each elementary operation
(translation, scale, rotation) is appended along with its analytic inverse,
so the pair stays consistent after every mutation.

Conventions:
    - ``append_*`` and ``cat`` post-compose: the new operation is applied
      after everything already in the transform.
    - Points use w = 1, vectors use w = 0.
    - Normals are mapped with the transpose of the inverse linear part and
      renormalized.
    - Ray mapping returns ``(ray, s)`` where ``s`` is the length of the mapped
      direction before normalization. A distance ``t`` measured along the
      mapped ray corresponds to ``t / s`` along the original ray.

Example:
    >>> from whitted.core.ray import vec3
    >>> from whitted.core.transform import Transform
    >>> xf = Transform().append_scale(2.0, 2.0, 2.0).append_translation(1.0, 0.0, 0.0)
    >>> xf.apply(vec3(1.0, 1.0, 1.0))
    array([3., 2., 2.])
"""

from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt

from whitted.core.ray import Ray, Vec3, as_vec3, normalize

Matrix4 = npt.NDArray[np.float64]


def _translation_pair(tx: float, ty: float, tz: float) -> tuple[Matrix4, Matrix4]:
    forward = np.eye(4)
    forward[:3, 3] = (tx, ty, tz)
    inverse = np.eye(4)
    inverse[:3, 3] = (-tx, -ty, -tz)
    return forward, inverse


def _scale_pair(sx: float, sy: float, sz: float) -> tuple[Matrix4, Matrix4]:
    forward = np.diag([sx, sy, sz, 1.0]).astype(np.float64)
    # Zero scale is not invertible; the inverse is left as inf entries.
    with np.errstate(divide="ignore"):
        inv = 1.0 / np.array([sx, sy, sz], dtype=np.float64)
    inverse = np.diag([inv[0], inv[1], inv[2], 1.0])
    return forward, inverse


def rotation_matrix(rx: float, ry: float, rz: float) -> npt.NDArray[np.float64]:
    """Build a 3x3 rotation from an exponential-map vector in degrees.

    The axis is the normalized ``(rx, ry, rz)`` and the angle is its magnitude
    in degrees. Uses Rodrigues' formula. A zero vector gives the identity.

    Args:
        rx: X component of the rotation vector (degrees).
        ry: Y component of the rotation vector (degrees).
        rz: Z component of the rotation vector (degrees).

    Returns:
        A 3x3 orthonormal rotation matrix.
    """
    axis = np.array([rx, ry, rz], dtype=np.float64)
    angle_deg = float(np.linalg.norm(axis))
    if angle_deg == 0.0:
        return np.eye(3)
    k = axis / angle_deg
    theta = math.radians(angle_deg)
    kx, ky, kz = k
    skew = np.array(
        [
            [0.0, -kz, ky],
            [kz, 0.0, -kx],
            [-ky, kx, 0.0],
        ]
    )
    return np.eye(3) + math.sin(theta) * skew + (1.0 - math.cos(theta)) * (skew @ skew)


def _rotation_pair(rx: float, ry: float, rz: float) -> tuple[Matrix4, Matrix4]:
    rot = rotation_matrix(rx, ry, rz)
    forward = np.eye(4)
    forward[:3, :3] = rot
    inverse = np.eye(4)
    inverse[:3, :3] = rot.T
    return forward, inverse


class Transform:
    """An affine transform with its inverse kept alongside.

    Attributes:
        matrix: Read-only view of the forward 4x4 matrix.
        inverse_matrix: Read-only view of the inverse 4x4 matrix.
    """

    def __init__(self) -> None:
        self._h = np.eye(4)
        self._h_inv = np.eye(4)

    @property
    def matrix(self) -> Matrix4:
        view = self._h.view()
        view.flags.writeable = False
        return view

    @property
    def inverse_matrix(self) -> Matrix4:
        view = self._h_inv.view()
        view.flags.writeable = False
        return view

    def copy(self) -> Transform:
        """Return an independent copy of this transform."""
        other = Transform()
        other._h = self._h.copy()
        other._h_inv = self._h_inv.copy()
        return other

    def __repr__(self) -> str:
        return f"Transform(H={self._h.tolist()})"

    # =========================================================================
    # Mutation
    # =========================================================================

    def reset(self) -> Transform:
        """Reset to the identity transform."""
        self._h = np.eye(4)
        self._h_inv = np.eye(4)
        return self

    def _compose(self, forward: Matrix4, inverse: Matrix4) -> Transform:
        with np.errstate(invalid="ignore", over="ignore"):
            self._h = forward @ self._h
            self._h_inv = self._h_inv @ inverse
        return self

    def cat(self, other: Transform) -> Transform:
        """Compose ``other`` after this transform, in place.

        After the call, ``self.apply(p)`` equals ``other.apply(old_self.apply(p))``.

        Args:
            other: The transform to apply after this one.

        Returns:
            This transform, for chaining.
        """
        return self._compose(other._h, other._h_inv)

    def append_translation(self, tx: float, ty: float, tz: float) -> Transform:
        return self._compose(*_translation_pair(tx, ty, tz))

    def append_scale(self, sx: float, sy: float, sz: float) -> Transform:
        """Append a per-axis scale.

        A zero factor makes the transform singular. No error is raised; the
        inverse then contains non-finite entries.
        """
        return self._compose(*_scale_pair(sx, sy, sz))

    def append_rotation(self, rx: float, ry: float, rz: float) -> Transform:
        """Append a rotation given as an exponential map in degrees."""
        return self._compose(*_rotation_pair(rx, ry, rz))

    # =========================================================================
    # Application
    # =========================================================================

    @staticmethod
    def _point(m: Matrix4, p: Vec3) -> Vec3:
        # Singular inverses hold inf entries
        with np.errstate(invalid="ignore", over="ignore"):
            return m[:3, :3] @ as_vec3(p) + m[:3, 3]

    def apply(self, point: Vec3) -> Vec3:
        return self._point(self._h, point)

    def apply_inverse(self, point: Vec3) -> Vec3:
        return self._point(self._h_inv, point)

    def apply_vector(self, v: Vec3) -> Vec3:
        return self._h[:3, :3] @ as_vec3(v)

    def apply_inverse_vector(self, v: Vec3) -> Vec3:
        with np.errstate(invalid="ignore", over="ignore"):
            return self._h_inv[:3, :3] @ as_vec3(v)

    def apply_normal(self, n: Vec3) -> Vec3:
        """Map a surface normal from object space to world space.

        Uses the transpose of the inverse linear part, then renormalizes.
        """
        return normalize(self._h_inv[:3, :3].T @ as_vec3(n))

    def apply_normal_inverse(self, n: Vec3) -> Vec3:
        """Map a surface normal from world space back to object space."""
        return normalize(self._h[:3, :3].T @ as_vec3(n))

    def apply_ray(self, ray: Ray) -> tuple[Ray, float]:
        """Map a ray through the forward transform.

        Returns:
            Tuple of (mapped_ray, s) where s is the length of the mapped
            direction before normalization.
        """
        direction = self.apply_vector(ray.direction)
        with np.errstate(invalid="ignore", over="ignore"):
            s = float(np.linalg.norm(direction))
            return Ray(self.apply(ray.origin), direction), s

    def apply_inverse_ray(self, ray: Ray) -> tuple[Ray, float]:
        """Map a ray through the inverse transform.

        Returns:
            Tuple of (mapped_ray, s) where s is the length of the mapped
            direction before normalization.
        """
        direction = self.apply_inverse_vector(ray.direction)
        with np.errstate(invalid="ignore", over="ignore"):
            s = float(np.linalg.norm(direction))
            return Ray(self.apply_inverse(ray.origin), direction), s
