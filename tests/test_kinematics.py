"""Kinematics module tests"""
import pytest

import numpy as np

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from kinematic_tree.entity import Entity
from kinematic_tree.frame import WorldFrame
from kinematic_tree.geometry import Isometry, ad_R
from kinematic_tree.kinematics import FixedFrame, SimpleFrame, KinematicSystem
from kinematic_tree.shapes import BoxShape

from testing_utilities import random_uniform, random_isometry, random_spatial_vector

__all__ = ['TestFixedFrame', 'TestSimpleFrame', 'TestKinematicSystem']

NUM_STATES = 5

@pytest.fixture
def root() -> WorldFrame:
    return WorldFrame()

class TestFixedFrame():
    def test_zero_relative_motion(self, root: WorldFrame):
        frame = FixedFrame(root, 'frame', random_isometry())

        assert np.array_equal(frame.relative_spatial_velocity(), np.zeros(6))
        assert np.array_equal(frame.relative_spatial_acceleration(), np.zeros(6))
        assert np.array_equal(frame.spatial_velocity(), np.zeros(6))
        assert np.array_equal(frame.spatial_acceleration(), np.zeros(6))

    def test_transform_immutable(self, root: WorldFrame):
        T = random_isometry()
        frame = FixedFrame(root, 'frame', T)
        child = FixedFrame(frame, 'child', random_isometry())
        expected = child.world_transform()

        with pytest.raises(AttributeError):
            child.transform_relative_to(frame).translation = np.zeros(3)
        with pytest.raises(ValueError):
            frame.relative_transform().translation[0] += 1.0

        assert frame.relative_transform().allclose(T)
        assert child.world_transform() is expected

    def test_set_relative_transform(self, root: WorldFrame):
        frame = FixedFrame(root, 'frame')
        child = FixedFrame(frame, 'child', random_isometry())
        child.world_transform()

        T = random_isometry()
        frame.set_relative_transform(T)

        assert child.needs_transform_update
        assert child.world_transform().allclose(T @ child.relative_transform())

    def test_from_euler(self, root: WorldFrame):
        frame = FixedFrame(root, 'frame', Isometry.from_euler([1, 0, 0], [0, 0, 90]))
        child = FixedFrame(frame, 'child', Isometry(translation=[1, 0, 0]))

        assert np.allclose(child.world_transform().translation, [1, 1, 0])

@pytest.mark.parametrize('pose, linear_velocity, angular_velocity, linear_acceleration, angular_acceleration',
    [(random_isometry(), *[random_uniform(1, 3) for _ in range(4)]) for _ in range(NUM_STATES)])
class TestSimpleFrame():
    def test_classic_derivatives(self, root: WorldFrame, pose: Isometry,
                                 linear_velocity: np.ndarray, angular_velocity: np.ndarray,
                                 linear_acceleration: np.ndarray, angular_acceleration: np.ndarray):
        """Tests classical derivatives set in World coordinates are reported back"""
        frame = SimpleFrame(root, 'frame', pose)
        frame.set_classic_derivatives(linear_velocity, angular_velocity,
                                      linear_acceleration, angular_acceleration)

        assert np.allclose(frame.linear_velocity(), linear_velocity)
        assert np.allclose(frame.angular_velocity(), angular_velocity)
        assert np.allclose(frame.linear_acceleration(), linear_acceleration)
        assert np.allclose(frame.angular_acceleration(), angular_acceleration)

    def test_velocity_in_parent_coordinates(self, root: WorldFrame, pose: Isometry,
                                            linear_velocity: np.ndarray, angular_velocity: np.ndarray,
                                            linear_acceleration: np.ndarray, angular_acceleration: np.ndarray):
        """Tests relative velocity set in parent coordinates is reported back
        relative to a moving parent"""
        parent = SimpleFrame(root, 'parent', random_isometry())
        parent.set_relative_spatial_velocity(random_spatial_vector())

        frame = SimpleFrame(parent, 'frame', pose)
        V = np.concatenate([angular_velocity, linear_velocity])
        frame.set_relative_spatial_velocity(V, parent)

        assert np.allclose(frame.relative_spatial_velocity(), ad_R(pose.inverse(), V))
        assert np.allclose(frame.spatial_velocity(parent, parent), V)

    def test_acceleration_in_parent_coordinates(self, root: WorldFrame, pose: Isometry,
                                                linear_velocity: np.ndarray, angular_velocity: np.ndarray,
                                                linear_acceleration: np.ndarray, angular_acceleration: np.ndarray):
        frame = SimpleFrame(root, 'frame', pose)
        A = np.concatenate([angular_acceleration, linear_acceleration])
        frame.set_relative_spatial_acceleration(A, root)

        assert np.allclose(frame.relative_spatial_acceleration(), ad_R(pose.inverse(), A))
        assert np.allclose(frame.spatial_acceleration(in_coordinates_of=root), A)

    def test_partial_acceleration(self, root: WorldFrame, pose: Isometry,
                                  linear_velocity: np.ndarray, angular_velocity: np.ndarray,
                                  linear_acceleration: np.ndarray, angular_acceleration: np.ndarray):
        from kinematic_tree.geometry import ad

        parent = SimpleFrame(root, 'parent')
        parent.set_classic_derivatives(angular_velocity=angular_velocity)
        frame = SimpleFrame(parent, 'frame', pose)
        frame.set_classic_derivatives(linear_velocity=linear_velocity)

        assert np.allclose(frame.partial_acceleration(),
                           ad(frame.spatial_velocity(), frame.relative_spatial_velocity()))

class TestSimpleFrameValidation():
    def test_spatial_vector_shape(self, root: WorldFrame):
        frame = SimpleFrame(root, 'frame')
        with pytest.raises(ValueError):
            frame.set_relative_spatial_velocity(np.zeros(3))

    def test_relative_motion_read_only(self, root: WorldFrame):
        V, A = random_spatial_vector(), random_spatial_vector()
        frame = SimpleFrame(root, 'frame')
        frame.set_relative_spatial_velocity(V)
        frame.set_relative_spatial_acceleration(A)

        with pytest.raises(ValueError):
            frame.relative_spatial_velocity()[0] = 1.0
        with pytest.raises(ValueError):
            frame.relative_spatial_acceleration()[3] = 1.0

        assert V.flags.writeable
        assert np.array_equal(frame.relative_spatial_velocity(), V)
        assert np.array_equal(frame.relative_spatial_acceleration(), A)

class TestKinematicSystem():
    def _system_A(self, root: WorldFrame) -> KinematicSystem:
        A = FixedFrame(root, 'A', random_isometry())
        B = SimpleFrame(A, 'B', random_isometry())
        C = FixedFrame(B, 'C', random_isometry())
        D = FixedFrame(A, 'D', random_isometry())
        Entity(D, 'E')

        return KinematicSystem.from_frame(root)

    def test_from_frame(self, root: WorldFrame):
        system = self._system_A(root)

        assert system.number_of_nodes() == 6
        assert system.number_of_edges() == 5

        A, E = system.find('A'), system.find('E')
        assert (root, A) in system.edges
        assert system.edges[root, A]['transform'].allclose(A.relative_transform())
        assert system.edges[E.parent_frame, E]['transform'] is None

    def test_find_missing(self, root: WorldFrame):
        system = self._system_A(root)
        with pytest.raises(KeyError):
            system.find('Z')

    def test_path(self, root: WorldFrame):
        system = self._system_A(root)
        A, B, C, D = (system.find(name) for name in 'ABCD')

        assert system.get_path(C, D) == [
            (B, C, 'reverse'), (A, B, 'reverse'), (A, D, 'forward')]

        with pytest.raises(KeyError):
            system.path([C, D])

    def test_transform(self, root: WorldFrame):
        system = self._system_A(root)
        A, B, C, D = (system.find(name) for name in 'ABCD')

        for source, target in [(C, D), (D, C), (C, root), (root, C), (B, A)]:
            assert system.transform(source, target).allclose(
                source.transform_relative_to(target), atol=1e-9)

    def test_plot(self, root: WorldFrame):
        system = self._system_A(root)
        system.find('C').add_shape(BoxShape([1, 2, 3]))

        fig = plt.figure()
        ax = fig.add_subplot(projection='3d')
        system.plot(ax)

        assert len(ax.texts) == 5
        assert len(ax.lines) == 12
        plt.close(fig)
