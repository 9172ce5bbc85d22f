"""shapes.py - Visualization and Mass Property Shapes"""
from __future__ import annotations

import itertools as itl
from abc import ABC, abstractmethod

import numpy.typing as npt
import numpy as np

import matplotlib.pyplot as plt

from kinematic_tree.geometry import Isometry

__all__ = ['Shape', 'EllipsoidShape', 'BoxShape']

DEFAULT_COLOR = (0.5, 0.5, 1.0, 1.0)

class Shape(ABC):
    """Geometric primitive owned by a frame, expressed in the frame's
    coordinates and centered on its origin. Zero extents skip the volume
    computation and zero mass skips the mass tensor and inertia.

    :param dim: Primitive extents along X, Y, Z
    :type dim: numpy.typing.ArrayLike

    :param mass: Mass, defaults to 0
    :type mass: float, optional

    :param color: Default RGBA color, defaults to (0.5, 0.5, 1.0, 1.0)
    :type color: numpy.typing.ArrayLike, optional
    """
    def __init__(self, dim: npt.ArrayLike, mass: float = 0.0,
                 color: npt.ArrayLike = DEFAULT_COLOR):
        """Initialize Shape"""
        self.dim = np.array(dim, dtype=np.double)
        if self.dim.shape != (3,):
            raise ValueError('Shape dimensions must be three dimensional')

        self.mass = float(mass)
        self.color = tuple(color)

        self.volume = 0.0
        self.mass_tensor = np.zeros((4,4))
        self.inertia = np.zeros((3,3))

        if np.any(self.dim != 0):
            self.volume = self.compute_volume()
        if self.mass != 0:
            self.mass_tensor = self.compute_mass_tensor()
            self.inertia = self.compute_inertia()

    @abstractmethod
    def compute_volume(self) -> float:
        pass

    @abstractmethod
    def second_moments(self) -> np.ndarray:
        """Diagonal of :math:`\\int r r^T dm / m` about the shape center"""

    def compute_mass_tensor(self) -> np.ndarray:
        """Mass tensor :math:`[\\int r r^T dm, 0; 0, m]`"""
        out = np.zeros((4,4))
        out[:3,:3] = np.diag(self.second_moments()) * self.mass
        out[3,3] = self.mass
        return out

    def compute_inertia(self) -> np.ndarray:
        """Rotational inertia about the shape center from the mass tensor"""
        C = self.mass_tensor[:3,:3]
        return np.trace(C) * np.eye(3) - C

    def _pen_color(self, color: npt.ArrayLike | None, use_default_color: bool):
        if use_default_color or color is None:
            return self.color
        return tuple(color)

    @abstractmethod
    def draw(self, ax: plt.Axes, transform: Isometry,
             color: npt.ArrayLike | None = None, use_default_color: bool = True):
        """Draws the shape at `transform` on 3D axes"""

class EllipsoidShape(Shape):
    """Ellipsoid with diameters `dim`"""
    def compute_volume(self) -> float:
        # 4/3 pi (a/2)(b/2)(c/2)
        return np.pi * np.prod(self.dim) / 6

    def second_moments(self) -> np.ndarray:
        """Solid ellipsoid moments :math:`r^2/5 = d^2/20` per axis, which give
        :math:`I_{xx} = m (r_y^2 + r_z^2) / 5`. A :math:`d^2/10` factor would
        double the inertia."""
        return self.dim**2 / 20

    def draw(self, ax: plt.Axes, transform: Isometry,
             color: npt.ArrayLike | None = None, use_default_color: bool = True,
             resolution: int = 12):
        u, v = np.meshgrid(np.linspace(0, 2*np.pi, 2*resolution),
                           np.linspace(0, np.pi, resolution))
        points = np.stack([np.cos(u)*np.sin(v),
                           np.sin(u)*np.sin(v),
                           np.cos(v)], axis=-1) * self.dim/2

        points = transform.apply(points.reshape(-1,3)).reshape(points.shape)
        ax.plot_wireframe(points[...,0], points[...,1], points[...,2],
                          color=self._pen_color(color, use_default_color),
                          linewidth=0.5)

class BoxShape(Shape):
    """Rectangular box with side lengths `dim`"""
    def compute_volume(self) -> float:
        return float(np.prod(self.dim))

    def second_moments(self) -> np.ndarray:
        return self.dim**2 / 12

    def corners(self) -> np.ndarray:
        """Box corners in frame coordinates, shape :math:`(8,3)`"""
        return np.array(list(itl.product([-0.5, 0.5], repeat=3))) * self.dim

    def draw(self, ax: plt.Axes, transform: Isometry,
             color: npt.ArrayLike | None = None, use_default_color: bool = True):
        corners = transform.apply(self.corners())
        pen = self._pen_color(color, use_default_color)

        # Corners differing in exactly one coordinate share an edge
        for i, j in itl.combinations(range(8), 2):
            if bin(i ^ j).count('1') == 1:
                ax.plot(*corners[[i, j]].T, color=pen)
