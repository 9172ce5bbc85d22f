"""frame.py - Cached Kinematic Reference Frames"""
from __future__ import annotations

import logging
import functools
from abc import ABC, abstractmethod

import numpy.typing as npt
import numpy as np

import matplotlib.pyplot as plt

from kinematic_tree.config import WORLD_FRAME_NAME
from kinematic_tree.entity import Entity, ParentChange
from kinematic_tree.geometry import Isometry, ad_T, ad_inv_T, ad_R, ad
from kinematic_tree.shapes import Shape
from kinematic_tree.utilities import read_only

__all__ = ['Frame', 'WorldFrame', 'world']

logger = logging.getLogger(__name__)

# hook -> (implied hook, dirty flag)
_INVALIDATION = {
    'notify_transform_update': ('notify_velocity_update', '_need_transform_update'),
    'notify_velocity_update': ('notify_acceleration_update', '_need_velocity_update'),
    'notify_acceleration_update': (None, '_need_acceleration_update'),
}

# %% Frame
class Frame(Entity, ABC):
    """Kinematic reference frame with a local coordinate system. World pose,
    spatial velocity and spatial acceleration are composed lazily from the
    primitives of concrete subclasses and cached until invalidated.

    Spatial vectors are stacked [angular, linear].

    :param parent_frame: Parent frame
    :type parent_frame: Frame

    :param name: Frame name, defaults to ''
    :type name: str, optional

    :param quiet: Exclude the frame from its parent's child sets, defaults to False
    :type quiet: bool, optional

    :raises ValueError: If `parent_frame` is :code:`None`
    """
    def __init__(self, parent_frame: Frame, name: str = '', quiet: bool = False):
        """Initialize Frame"""
        if parent_frame is None:
            raise ValueError(f"Frame '{name}' requires a parent frame, "
                             "only World frames are parentless")

        self._init_state(am_world=False)
        super().__init__(parent_frame, name, quiet)

    def _init_state(self, am_world: bool):
        self._world_transform = Isometry()
        self._velocity = read_only(np.zeros(6))
        self._acceleration = read_only(np.zeros(6))

        self._need_transform_update = not am_world
        self._need_velocity_update = not am_world
        self._need_acceleration_update = not am_world

        self._child_entities: set[Entity] = set()
        self._child_frames: set[Frame] = set()
        self._shapes: list[Shape] = []

        self._am_world = am_world

    # Primitives supplied by concrete frames
    @abstractmethod
    def relative_transform(self) -> Isometry:
        """Pose of this frame in the coordinates of its parent"""

    @abstractmethod
    def relative_spatial_velocity(self) -> np.ndarray:
        """Spatial velocity relative to the parent, in this frame's coordinates"""

    @abstractmethod
    def primary_relative_acceleration(self) -> np.ndarray:
        """Acceleration due to this frame's own motion relative to its parent"""

    @abstractmethod
    def partial_acceleration(self) -> np.ndarray:
        """Transport correction from the time variation of the relative transform"""

    def relative_spatial_acceleration(self) -> np.ndarray:
        return self.primary_relative_acceleration()

    # Tree structure
    @property
    def is_world(self) -> bool:
        return self._am_world

    @property
    def child_entities(self) -> frozenset[Entity]:
        return frozenset(self._child_entities)

    @property
    def num_child_entities(self) -> int:
        return len(self._child_entities)

    @property
    def child_frames(self) -> frozenset[Frame]:
        return frozenset(self._child_frames)

    @property
    def num_child_frames(self) -> int:
        return len(self._child_frames)

    def process_new_entity(self, entity: Entity):
        """Hook invoked after `entity` registers as a child of this frame"""

    def change_parent_frame(self, new_parent: Frame | None) -> ParentChange:
        """Moves this frame (and its subtree) into a new parent frame. Requests
        that would make the frame its own ancestor are rejected and logged.

        :param new_parent: New parent frame, :code:`None` detaches the frame
        :type new_parent: Frame | None

        :return: :code:`ParentChange.REJECTED` if a circular dependency was
            refused, otherwise :code:`ParentChange.ACCEPTED`
        :rtype: ParentChange
        """
        if new_parent is not None and new_parent.depends_on(self):
            # World parenting itself is the only permitted loop
            if not (self.is_world and new_parent.is_world):
                logger.warning(
                    "Attempting to create a circular kinematic dependency by "
                    "making Frame '%s' a child of Frame '%s'. This will not be "
                    "allowed.", self.name, new_parent.name)
                return ParentChange.REJECTED

        if self._parent_frame is not None:
            self._parent_frame._child_frames.discard(self)

        super().change_parent_frame(new_parent)

        if new_parent is not None and not self._quiet:
            new_parent._child_frames.add(self)

        return ParentChange.ACCEPTED

    def destroy(self):
        """Severs every relation of this frame: detaches it from its parent,
        moves its child entities to the World frame and releases its shapes"""
        if self._am_world:
            return

        root = self.world_frame or world()
        self.change_parent_frame(None)

        for entity in list(self._child_entities):
            entity.change_parent_frame(root)

        self.remove_all_shapes()

    # Pose
    def world_transform(self) -> Isometry:
        """Returns the cached pose of this frame relative to World

        :return: World pose
        :rtype: Isometry
        """
        for frame in self._stale_chain('_need_transform_update'):
            frame._world_transform = \
                frame._parent_frame.world_transform() @ frame.relative_transform()
            frame._need_transform_update = False

        return self._world_transform

    def _stale_chain(self, flag: str) -> list[Frame]:
        """Stale ancestors of this frame, root side first, ending with this
        frame. Empty when this frame's cache is clean.

        :param flag: Dirty flag attribute name
        :type flag: str

        :return: Frames to recompute in order
        :rtype: list[Frame]
        """
        chain = []
        frame = self
        while not frame._am_world and getattr(frame, flag):
            chain.append(frame)
            frame = frame._parent_frame

        chain.reverse()
        return chain

    def transform_relative_to(self, other: Frame) -> Isometry:
        """Pose of this frame expressed in the coordinates of `other`

        :param other: Reference frame
        :type other: Frame

        :return: Relative pose
        :rtype: Isometry
        """
        if other.is_world:
            return self.world_transform()
        elif other is self._parent_frame:
            return self.relative_transform()

        return other.world_transform().inverse() @ self.world_transform()

    # Velocity
    def _spatial_velocity(self) -> np.ndarray:
        for frame in self._stale_chain('_need_velocity_update'):
            frame._velocity = read_only(
                ad_inv_T(frame.relative_transform(),
                         frame._parent_frame.spatial_velocity())
                + frame.relative_spatial_velocity())
            frame._need_velocity_update = False

        return self._velocity

    def spatial_velocity(self,
                         relative_to: Frame | None = None,
                         in_coordinates_of: Frame | None = None) -> np.ndarray:
        """Spatial velocity of this frame relative to another frame

        :param relative_to: Reference frame, defaults to World
        :type relative_to: Frame | None, optional

        :param in_coordinates_of: Frame whose coordinates express the result,
            defaults to this frame
        :type in_coordinates_of: Frame | None, optional

        :return: Spatial velocity [angular, linear]
        :rtype: numpy.ndarray
        """
        if relative_to is None or relative_to.is_world:
            if in_coordinates_of is None or in_coordinates_of is self:
                return self._spatial_velocity()

            if in_coordinates_of.is_world:
                return ad_R(self.world_transform(), self._spatial_velocity())

            return ad_R(self.transform_relative_to(in_coordinates_of),
                        self._spatial_velocity())

        in_coordinates_of = self if in_coordinates_of is None else in_coordinates_of
        return ad_R(self.transform_relative_to(in_coordinates_of),
                    self._spatial_velocity()
                    - ad_T(relative_to.transform_relative_to(self),
                           relative_to.spatial_velocity()))

    def linear_velocity(self,
                        relative_to: Frame | None = None,
                        in_coordinates_of: Frame | None = None) -> np.ndarray:
        """Linear velocity of this frame's origin, defaults to relative to
        World in World coordinates"""
        in_coordinates_of = in_coordinates_of or self.world_frame
        return self.spatial_velocity(relative_to, in_coordinates_of)[3:]

    def angular_velocity(self,
                         relative_to: Frame | None = None,
                         in_coordinates_of: Frame | None = None) -> np.ndarray:
        """Angular velocity of this frame, defaults to relative to World in
        World coordinates"""
        in_coordinates_of = in_coordinates_of or self.world_frame
        return self.spatial_velocity(relative_to, in_coordinates_of)[:3]

    # Acceleration
    def _spatial_acceleration(self) -> np.ndarray:
        for frame in self._stale_chain('_need_acceleration_update'):
            frame._acceleration = read_only(
                ad_inv_T(frame.relative_transform(),
                         frame._parent_frame.spatial_acceleration())
                + frame.primary_relative_acceleration()
                + frame.partial_acceleration())
            frame._need_acceleration_update = False

        return self._acceleration

    def spatial_acceleration(self,
                             relative_to: Frame | None = None,
                             in_coordinates_of: Frame | None = None) -> np.ndarray:
        """Spatial acceleration of this frame relative to another frame

        Relative accelerations of independently moving frames do not add, the
        Lie bracket of this frame's velocity with its velocity relative to
        `relative_to` is removed before re-expressing the result.

        :param relative_to: Reference frame, defaults to World
        :type relative_to: Frame | None, optional

        :param in_coordinates_of: Frame whose coordinates express the result,
            defaults to this frame
        :type in_coordinates_of: Frame | None, optional

        :return: Spatial acceleration [angular, linear]
        :rtype: numpy.ndarray
        """
        if relative_to is None or relative_to.is_world:
            if in_coordinates_of is None or in_coordinates_of is self:
                return self._spatial_acceleration()

            if in_coordinates_of.is_world:
                return ad_R(self.world_transform(), self._spatial_acceleration())

            return ad_R(self.transform_relative_to(in_coordinates_of),
                        self._spatial_acceleration())

        # a_21[O] = R_O2 (a_2[2] - X_21 a_1[1] - ad(v_2[2], v_21[2]))
        in_coordinates_of = self if in_coordinates_of is None else in_coordinates_of
        return ad_R(self.transform_relative_to(in_coordinates_of),
                    self._spatial_acceleration()
                    - ad_T(relative_to.transform_relative_to(self),
                           relative_to.spatial_acceleration())
                    - ad(self._spatial_velocity(),
                         self.spatial_velocity(relative_to, self)))

    def linear_acceleration(self,
                            relative_to: Frame | None = None,
                            in_coordinates_of: Frame | None = None) -> np.ndarray:
        """Classical linear acceleration of this frame's origin, defaults to
        relative to World in World coordinates

        :param relative_to: Reference frame, defaults to World
        :type relative_to: Frame | None, optional

        :param in_coordinates_of: Frame whose coordinates express the result,
            defaults to World
        :type in_coordinates_of: Frame | None, optional

        :return: Linear acceleration
        :rtype: numpy.ndarray
        """
        relative_to = relative_to or self.world_frame
        in_coordinates_of = in_coordinates_of or self.world_frame

        v_rel = self.spatial_velocity(relative_to, in_coordinates_of)

        # r'' = a + w x v
        return self.spatial_acceleration(relative_to, in_coordinates_of)[3:] \
            + np.cross(v_rel[:3], v_rel[3:])

    def angular_acceleration(self,
                             relative_to: Frame | None = None,
                             in_coordinates_of: Frame | None = None) -> np.ndarray:
        in_coordinates_of = in_coordinates_of or self.world_frame
        return self.spatial_acceleration(relative_to, in_coordinates_of)[:3]

    # Invalidation
    def notify_transform_update(self):
        """Marks the world pose (and everything derived from it) stale for
        this frame and its subtree"""
        self._invalidate('notify_transform_update')

    def notify_velocity_update(self):
        self._invalidate('notify_velocity_update')

    def notify_acceleration_update(self):
        self._invalidate('notify_acceleration_update')

    def _invalidate(self, hook: str):
        """Walks the subtree with a work-list, marking the cache behind `hook`
        stale. Each frame first raises the implied lighter update and stops at
        frames that are already stale. Entities overriding `hook` are handed
        the call instead.

        :param hook: Name of the notification hook
        :type hook: str
        """
        implied, flag = _INVALIDATION[hook]
        base_hook = getattr(Frame, hook)

        pending = [self]
        while pending:
            frame = pending.pop()
            if implied is not None:
                getattr(frame, implied)()

            if getattr(frame, flag):
                continue

            setattr(frame, flag, True)
            for entity in frame._child_entities:
                if isinstance(entity, Frame) \
                        and getattr(type(entity), hook) is base_hook:
                    pending.append(entity)
                else:
                    getattr(entity, hook)()

    @property
    def needs_transform_update(self) -> bool:
        return self._need_transform_update

    @property
    def needs_velocity_update(self) -> bool:
        return self._need_velocity_update

    @property
    def needs_acceleration_update(self) -> bool:
        return self._need_acceleration_update

    # Visualization
    @property
    def shapes(self) -> tuple[Shape, ...]:
        return tuple(self._shapes)

    def add_shape(self, shape: Shape):
        self._shapes.append(shape)

    def remove_shape(self, shape: Shape):
        """Releases a single owned shape

        :raises ValueError: If `shape` is not owned by this frame
        """
        self._shapes.remove(shape)

    def remove_all_shapes(self):
        self._shapes.clear()

    def draw(self,
             ax: plt.Axes | None = None,
             color: npt.ArrayLike | None = None,
             use_default_color: bool = True,
             depth: int = -1):
        """Draws owned shapes at this frame's world pose, then the subtree

        :param ax: 3D plotting axes
        :type ax: matplotlib.pyplot.Axes | None

        :param color: Override RGBA color, defaults to None
        :type color: numpy.typing.ArrayLike | None, optional

        :param use_default_color: Use each shape's own color, defaults to True
        :type use_default_color: bool, optional

        :param depth: Child levels to descend, negative is unlimited, defaults to -1
        :type depth: int, optional
        """
        if ax is None:
            logger.debug("Frame '%s' received no render target", self.name)
            return

        transform = self.world_transform()
        for shape in self._shapes:
            shape.draw(ax, transform, color, use_default_color)

        if depth == 0:
            return

        for entity in self._child_entities:
            entity.draw(ax, color, use_default_color, depth - 1)

# %% World Frame
class WorldFrame(Frame):
    """Self-parented root of a kinematic tree with identity pose and zero
    motion. Use :code:`world()` for the process-wide default instance; extra
    instances host independent trees.

    :param name: Frame name, defaults to 'World'
    :type name: str, optional
    """
    def __init__(self, name: str = WORLD_FRAME_NAME):
        """Initialize WorldFrame"""
        self._init_state(am_world=True)
        self._relative_transform = Isometry()
        self._zero = read_only(np.zeros(6))

        Entity.__init__(self, None, name, quiet=True)
        self.change_parent_frame(self)

    def relative_transform(self) -> Isometry:
        return self._relative_transform

    def relative_spatial_velocity(self) -> np.ndarray:
        return self._zero

    def relative_spatial_acceleration(self) -> np.ndarray:
        return self._zero

    def primary_relative_acceleration(self) -> np.ndarray:
        return self._zero

    def partial_acceleration(self) -> np.ndarray:
        return self._zero

    def change_parent_frame(self, new_parent: Frame | None) -> ParentChange:
        if self._parent_frame is self and new_parent is not self:
            logger.warning("World frame '%s' cannot be reparented", self.name)
            return ParentChange.REJECTED

        return super().change_parent_frame(new_parent)

    # World motion never changes
    def notify_transform_update(self):
        pass

    def notify_velocity_update(self):
        pass

    def notify_acceleration_update(self):
        pass

@functools.lru_cache(maxsize=None)
def world() -> WorldFrame:
    """Returns the process-wide World frame, constructing it on first call"""
    return WorldFrame()
