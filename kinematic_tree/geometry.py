"""geometry.py - Rigid Transforms and Spatial Algebra"""
from __future__ import annotations

import numpy.typing as npt

import operator as op

import numpy as np

import scipy.spatial.transform as sptl

from kinematic_tree.config import DEFAULT_SEQUENCE, DEFAULT_DEGREES
from kinematic_tree.utilities import sequence_to_index, as_spatial_vector, read_only

__all__ = ['Isometry',                              # rigid transforms
           'ad_T', 'ad_inv_T', 'ad_R', 'ad',        # spatial algebra
           'adjoint_matrix',
           'skew_symmetric_matrix']                 # helpers

# %% Rigid Transforms
class Isometry():
    """Rigid transformation in 3D space, the pose of a child coordinate frame
    expressed in the coordinates of its base frame. Instances are immutable,
    their arrays are read-only and operations return new instances.

    :param rotation: Rotation matrix, defaults to :code:`numpy.eye(3)`
    :type rotation: numpy.typing.ArrayLike | None, optional

    :param translation: Child origin in base coordinates, defaults to :code:`numpy.zeros(3)`
    :type translation: numpy.typing.ArrayLike | None, optional
    """
    def __init__(self,
                 rotation   : npt.ArrayLike | None = None,
                 translation: npt.ArrayLike | None = None):
        """Initialize Isometry"""
        rotation    = rotation    if rotation    is not None else np.eye(3)
        translation = translation if translation is not None else np.zeros(3)

        rotation = np.array(rotation, dtype=np.double)
        if rotation.shape != (3,3):
            raise ValueError('Rotation matrix must be 3x3')

        translation = np.array(translation, dtype=np.double).reshape(-1)
        if translation.shape != (3,):
            raise ValueError('Translation must be three dimensional')

        self._rotation = read_only(rotation)
        self._translation = read_only(translation)

    rotation: np.ndarray = property(op.attrgetter('_rotation'))
    translation: np.ndarray = property(op.attrgetter('_translation'))

    # Constructors
    @classmethod
    def identity(cls) -> Isometry:
        return cls()

    @classmethod
    def from_matrix(cls, matrix: npt.ArrayLike) -> Isometry:
        """Creates Isometry from a 4x4 homogeneous matrix

        :param matrix: Homogeneous transformation matrix
        :type matrix: numpy.typing.ArrayLike

        :raises ValueError: If `matrix` is not 4x4

        :return: Rigid transform
        :rtype: Isometry
        """
        matrix = np.asarray(matrix, dtype=np.double)
        if matrix.shape != (4,4):
            raise ValueError('Homogeneous matrix must be 4x4')
        return cls(matrix[:3,:3], matrix[:3,3])

    @classmethod
    def from_rotation(cls, rotation: sptl.Rotation,
                      translation: npt.ArrayLike | None = None) -> Isometry:
        """Creates Isometry from a :code:`scipy.spatial.transform.Rotation`"""
        return cls(rotation.as_matrix(), translation)

    @classmethod
    def from_euler(cls,
                   position: npt.ArrayLike | None = None,  # Longitudinal (X), Lateral (Y), Vertical (Z)
                   angle   : npt.ArrayLike | None = None,  # Roll (X), Pitch (Y), Yaw (Z)
                   sequence: str = DEFAULT_SEQUENCE,
                   degrees : bool = DEFAULT_DEGREES) -> Isometry:
        """Creates Isometry from a position and intrinsic Euler angles

        :param position: Frame origin position in base frame, defaults to :code:`numpy.zeros(3)`
        :type position: numpy.typing.ArrayLike, optional

        :param angle: Euler angles ordered [X,Y,Z], defaults to :code:`numpy.zeros(3)`
        :type angle: numpy.typing.ArrayLike, optional

        :param sequence: Euler angle sequence, defaults to :code:`'ZYX'`
        :type sequence: str, optional

        :param degrees: Flag to denote if angles are supplied in degrees, defaults to :code:`True`
        :type degrees: bool, optional

        :return: Rigid transform
        :rtype: Isometry
        """
        angle = np.zeros(3) if angle is None else np.asarray(angle, dtype=np.double)
        index = sequence_to_index(sequence)

        rotation = sptl.Rotation.from_euler(sequence, angle[index], degrees)
        return cls.from_rotation(rotation, position)

    # Algebra
    def __matmul__(self, other: Isometry) -> Isometry:
        """Composes two rigid transforms, :code:`(self @ other)(x) = self(other(x))`"""
        if not isinstance(other, Isometry):
            return NotImplemented

        return Isometry(self.rotation @ other.rotation,
                        self.rotation @ other.translation + self.translation)

    def inverse(self) -> Isometry:
        """Computes inverse transform

        :return: Inverse rigid transform
        :rtype: Isometry
        """
        R_T = self.rotation.T
        return Isometry(R_T, -R_T @ self.translation)

    def apply(self, point: npt.ArrayLike) -> np.ndarray:
        """Maps point(s) from child coordinates into base coordinates

        :param point: Point position vector(s) of shape :math:`(3,)` or :math:`(n,3)`
        :type point: numpy.typing.ArrayLike

        :return: Point position vector(s) in base coordinates
        :rtype: numpy.ndarray
        """
        return np.asarray(point, dtype=np.double) @ self.rotation.T + self.translation

    def rotate(self, direction: npt.ArrayLike) -> np.ndarray:
        """Maps direction(s) from child coordinates into base coordinates"""
        return np.asarray(direction, dtype=np.double) @ self.rotation.T

    def matrix(self) -> np.ndarray:
        """Returns the 4x4 homogeneous matrix representation"""
        out = np.eye(4)
        out[:3,:3] = self.rotation
        out[:3,3] = self.translation
        return out

    def as_rotation(self) -> sptl.Rotation:
        return sptl.Rotation.from_matrix(self.rotation)

    def copy(self) -> Isometry:
        return Isometry(self.rotation, self.translation)

    def allclose(self, other: Isometry, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """Compares two transforms entry-wise within tolerance"""
        return np.allclose(self.rotation, other.rotation, rtol=rtol, atol=atol) \
           and np.allclose(self.translation, other.translation, rtol=rtol, atol=atol)

    def __str__(self) -> str:
        return f"Isometry(rotation={self.rotation.tolist()}, translation={self.translation.tolist()})"

    def __repr__(self) -> str:
        return str(self)

# %% Spatial Algebra
# Spatial vectors are stacked [angular, linear].
def ad_T(T: Isometry, V: npt.ArrayLike) -> np.ndarray:
    r"""Adjoint transport of a spatial vector from the child coordinates of `T`
    into its base coordinates, :math:`Ad_T V`

    :param T: Rigid transform
    :type T: Isometry

    :param V: Spatial vector
    :type V: numpy.typing.ArrayLike

    :return: Transported spatial vector
    :rtype: numpy.ndarray
    """
    V = as_spatial_vector(V)
    w = T.rotation @ V[:3]
    return np.concatenate([w, T.rotation @ V[3:] + np.cross(T.translation, w)])

def ad_inv_T(T: Isometry, V: npt.ArrayLike) -> np.ndarray:
    r"""Inverse adjoint transport, :math:`Ad_{T^{-1}} V`, carrying a spatial
    vector from the base coordinates of `T` into its child coordinates

    :param T: Rigid transform
    :type T: Isometry

    :param V: Spatial vector
    :type V: numpy.typing.ArrayLike

    :return: Transported spatial vector
    :rtype: numpy.ndarray
    """
    V = as_spatial_vector(V)
    R_T = T.rotation.T
    return np.concatenate([R_T @ V[:3], R_T @ (V[3:] - np.cross(T.translation, V[:3]))])

def ad_R(T: Isometry, V: npt.ArrayLike) -> np.ndarray:
    """Rotational part of the adjoint: re-expresses both halves of a spatial
    vector in the base coordinates of `T` without moving its reference point"""
    V = as_spatial_vector(V)
    return np.concatenate([T.rotation @ V[:3], T.rotation @ V[3:]])

def ad(V: npt.ArrayLike, W: npt.ArrayLike) -> np.ndarray:
    r"""Lie bracket of two spatial vectors, :math:`ad_V W = [V, W]`

    :param V: First spatial vector
    :type V: numpy.typing.ArrayLike

    :param W: Second spatial vector
    :type W: numpy.typing.ArrayLike

    :return: Spatial vector :math:`[w_V \times w_W, w_V \times v_W + v_V \times w_W]`
    :rtype: numpy.ndarray
    """
    V, W = as_spatial_vector(V), as_spatial_vector(W)
    return np.concatenate([np.cross(V[:3], W[:3]),
                           np.cross(V[:3], W[3:]) + np.cross(V[3:], W[:3])])

def adjoint_matrix(T: Isometry) -> np.ndarray:
    """6x6 matrix form of :code:`ad_T`"""
    out = np.zeros((6,6))
    out[:3,:3] = T.rotation
    out[3:,3:] = T.rotation
    out[3:,:3] = skew_symmetric_matrix(T.translation) @ T.rotation
    return out

# %% Helpers
def skew_symmetric_matrix(v: np.ndarray) -> np.ndarray:
    r"""Creates skew symmetric cross-product matrix corresponding
    to vector in :math:`\mathbb{R}^3`

    :param v: Input vector
    :type v: numpy.ndarray

    :return: Skew symmetric cross-product matrix
    :rtype: numpy.ndarray
    """
    return np.array([[ 0   , -v[2],  v[1]],
                     [ v[2],  0   , -v[0]],
                     [-v[1],  v[0],  0   ]])
