"""kinematics.py - Concrete Frames and Kinematic Systems"""
from __future__ import annotations

import numpy.typing as npt

import numpy as np

import networkx as nx
import matplotlib.pyplot as plt

from kinematic_tree.entity import Entity
from kinematic_tree.frame import Frame
from kinematic_tree.geometry import Isometry, ad, ad_R
from kinematic_tree.utilities import as_spatial_vector, read_only

__all__ = ['FixedFrame', 'SimpleFrame', 'KinematicSystem']

# %% Concrete Frames
class FixedFrame(Frame):
    """Frame rigidly offset from its parent

    :param parent_frame: Parent frame
    :type parent_frame: Frame

    :param name: Frame name, defaults to ''
    :type name: str, optional

    :param relative_transform: Pose in parent coordinates, defaults to identity
    :type relative_transform: Isometry | None, optional
    """
    def __init__(self, parent_frame: Frame, name: str = '',
                 relative_transform: Isometry | None = None):
        """Initialize FixedFrame"""
        self._relative_transform = Isometry() if relative_transform is None \
            else relative_transform.copy()
        self._zero = read_only(np.zeros(6))

        super().__init__(parent_frame, name)

    def set_relative_transform(self, transform: Isometry):
        """Sets the fixed offset and invalidates the subtree

        :param transform: Pose in parent coordinates
        :type transform: Isometry
        """
        self._relative_transform = transform.copy()
        self.notify_transform_update()

    def relative_transform(self) -> Isometry:
        return self._relative_transform

    def relative_spatial_velocity(self) -> np.ndarray:
        return self._zero

    def primary_relative_acceleration(self) -> np.ndarray:
        return self._zero

    def partial_acceleration(self) -> np.ndarray:
        return self._zero

class SimpleFrame(Frame):
    """Frame whose pose, velocity and acceleration relative to its parent are
    set directly. Relative velocity and acceleration are stored in this
    frame's own coordinates.

    :param parent_frame: Parent frame
    :type parent_frame: Frame

    :param name: Frame name, defaults to ''
    :type name: str, optional

    :param relative_transform: Pose in parent coordinates, defaults to identity
    :type relative_transform: Isometry | None, optional
    """
    def __init__(self, parent_frame: Frame, name: str = '',
                 relative_transform: Isometry | None = None):
        """Initialize SimpleFrame"""
        self._relative_transform = Isometry() if relative_transform is None \
            else relative_transform.copy()
        self._relative_velocity = read_only(np.zeros(6))
        self._relative_acceleration = read_only(np.zeros(6))

        super().__init__(parent_frame, name)

    def set_relative_transform(self, transform: Isometry):
        self._relative_transform = transform.copy()
        self.notify_transform_update()

    def set_relative_spatial_velocity(self, velocity: npt.ArrayLike,
                                      in_coordinates_of: Frame | None = None):
        """Sets spatial velocity relative to the parent frame

        :param velocity: Relative spatial velocity [angular, linear]
        :type velocity: numpy.typing.ArrayLike

        :param in_coordinates_of: Coordinates `velocity` is expressed in,
            defaults to this frame
        :type in_coordinates_of: Frame | None, optional
        """
        velocity = as_spatial_vector(velocity)
        if in_coordinates_of is not None and in_coordinates_of is not self:
            velocity = ad_R(in_coordinates_of.transform_relative_to(self), velocity)

        self._relative_velocity = read_only(velocity)
        self.notify_velocity_update()

    def set_relative_spatial_acceleration(self, acceleration: npt.ArrayLike,
                                          in_coordinates_of: Frame | None = None):
        """Sets spatial acceleration relative to the parent frame

        :param acceleration: Relative spatial acceleration [angular, linear]
        :type acceleration: numpy.typing.ArrayLike

        :param in_coordinates_of: Coordinates `acceleration` is expressed in,
            defaults to this frame
        :type in_coordinates_of: Frame | None, optional
        """
        acceleration = as_spatial_vector(acceleration)
        if in_coordinates_of is not None and in_coordinates_of is not self:
            acceleration = ad_R(in_coordinates_of.transform_relative_to(self), acceleration)

        self._relative_acceleration = read_only(acceleration)
        self.notify_acceleration_update()

    def set_classic_derivatives(self,
                                linear_velocity     : npt.ArrayLike | None = None,
                                angular_velocity    : npt.ArrayLike | None = None,
                                linear_acceleration : npt.ArrayLike | None = None,
                                angular_acceleration: npt.ArrayLike | None = None):
        """Sets relative motion from classical derivatives expressed in the
        parent frame's coordinates. Unspecified derivatives are zero.

        :param linear_velocity: Origin velocity, defaults to zero
        :type linear_velocity: numpy.typing.ArrayLike | None, optional

        :param angular_velocity: Angular velocity, defaults to zero
        :type angular_velocity: numpy.typing.ArrayLike | None, optional

        :param linear_acceleration: Origin acceleration, defaults to zero
        :type linear_acceleration: numpy.typing.ArrayLike | None, optional

        :param angular_acceleration: Angular acceleration, defaults to zero
        :type angular_acceleration: numpy.typing.ArrayLike | None, optional
        """
        v, w, a, alpha = (np.zeros(3) if x is None else np.asarray(x, dtype=np.double)
                          for x in (linear_velocity, angular_velocity,
                                    linear_acceleration, angular_acceleration))

        # Spatial acceleration omits the w x v term of r''
        self.set_relative_spatial_velocity(np.concatenate([w, v]), self.parent_frame)
        self.set_relative_spatial_acceleration(
            np.concatenate([alpha, a - np.cross(w, v)]), self.parent_frame)

    def relative_transform(self) -> Isometry:
        return self._relative_transform

    def relative_spatial_velocity(self) -> np.ndarray:
        return self._relative_velocity

    def relative_spatial_acceleration(self) -> np.ndarray:
        return self._relative_acceleration

    def primary_relative_acceleration(self) -> np.ndarray:
        return self._relative_acceleration

    def partial_acceleration(self) -> np.ndarray:
        return ad(self.spatial_velocity(), self.relative_spatial_velocity())

# %% Kinematic System
class KinematicSystem(nx.DiGraph):
    """Directed graph snapshot of a kinematic tree. Nodes are the entities of
    the tree, edges point from parent to child and carry the child's relative
    transform under the 'transform' attribute."""
    def __init__(self, incoming_graph_data = None, **attr):
        """Initialize KinematicSystem"""
        super().__init__(incoming_graph_data, **attr)
        self._path: dict[tuple[Entity,Entity], list[tuple[Entity,Entity,str]]] = {}

    @classmethod
    def from_frame(cls, root: Frame) -> KinematicSystem:
        """Collects the subtree below `root`

        :param root: Subtree root frame
        :type root: Frame

        :return: Graph snapshot
        :rtype: KinematicSystem
        """
        system = cls()
        system.add_node(root, name=root.name)

        pending = [root]
        while pending:
            frame = pending.pop()
            for entity in frame.child_entities:
                transform = entity.relative_transform().copy() \
                    if isinstance(entity, Frame) else None

                system.add_node(entity, name=entity.name)
                system.add_edge(frame, entity, transform=transform)

                if isinstance(entity, Frame):
                    pending.append(entity)

        return system

    def find(self, name: str) -> Entity:
        """Looks up a node by name

        :raises KeyError: If no node carries `name`
        """
        for node, node_name in self.nodes(data='name'):
            if node_name == name:
                return node

        raise KeyError(f"No entity named '{name}'")

    # Traversal
    def get_path(self, source: Entity, target: Entity) -> list[tuple[Entity,Entity,str]]:
        """Generates transform sequence between two frames

        :param source: Source node
        :type source: Entity

        :param target: Target node
        :type target: Entity

        :return: Path between nodes as a list of tuples describing the
            transformations: (base, follower, orientation)
        :rtype: list[tuple[Entity,Entity,str]]
        """
        if (source, target) not in self._path:
            nodes = nx.shortest_path(self.to_undirected(as_view=True), source, target)
            self._path[(source, target)] = self.path(nodes)

        return self._path[(source, target)]

    def path(self, nodes: list[Entity]) -> list[tuple[Entity,Entity,str]]:
        """Generates transform sequence from list of adjacent nodes

        :raises KeyError: If the node list is non-adjacent
        """
        path = []
        for j in range(len(nodes)-1):
            if (nodes[j], nodes[j+1]) in self.edges:
                path.append((nodes[j], nodes[j+1], 'forward'))
            elif (nodes[j+1], nodes[j]) in self.edges:
                path.append((nodes[j+1], nodes[j], 'reverse'))
            else:
                raise KeyError("Edge ({},{}) is not present".format(nodes[j], nodes[j+1]))

        return path

    def transform(self, source: Frame, target: Frame) -> Isometry:
        """Pose of `source` in the coordinates of `target` composed from the
        snapshot's edge transforms

        :param source: Source frame
        :type source: Frame

        :param target: Target frame
        :type target: Frame

        :return: Relative pose
        :rtype: Isometry
        """
        out = Isometry()
        for base, follower, orientation in self.get_path(source, target):
            edge = self.edges[base, follower]['transform']
            if orientation == 'forward':
                out = edge.inverse() @ out
            else:
                out = edge @ out

        return out

    def plot(self, ax: plt.Axes | None = None, frame: Frame | None = None,
             size: float = 1, shapes: bool = True):
        """3D plot of the frame triads, optionally with frame shapes

        :param ax: Plotting axes, defaults to current axes
        :type ax: matplotlib.pyplot.Axes | None, optional

        :param frame: Reference frame to plot in, defaults to the snapshot root
        :type frame: Frame | None, optional

        :param size: Quiver size, defaults to 1
        :type size: float, optional

        :param shapes: Draw frame shapes in World coordinates, defaults to True
        :type shapes: bool, optional
        """
        ax = plt.gca() if ax is None else ax
        frame = next(iter(self.nodes)) if frame is None else frame

        for node in self.nodes():
            if not isinstance(node, Frame):
                continue

            T = self.transform(node, frame)
            for i, color in enumerate('rgb'):
                ax.quiver(*T.translation, *T.rotation[:,i],
                          color=color, length=size, normalize=True)
            ax.text(*T.translation, node.name)

        if shapes and frame.is_world:
            for node in self.nodes():
                if isinstance(node, Frame):
                    node.draw(ax, depth=0)

        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_zlabel('Z')
        ax.set_aspect('equal')
