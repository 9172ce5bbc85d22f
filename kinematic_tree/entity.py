"""entity.py - Attachable Entities"""
from __future__ import annotations

import enum
import typing as typ

import operator as op

if typ.TYPE_CHECKING:
    from kinematic_tree.frame import Frame

__all__ = ['ParentChange', 'Entity']

class ParentChange(enum.Enum):
    """Outcome of a reparenting request"""
    ACCEPTED = enum.auto()
    REJECTED = enum.auto()

    def __bool__(self) -> bool:
        return self is ParentChange.ACCEPTED

class Entity():
    """Object occupying a position within exactly one parent frame

    :param parent_frame: Frame the entity is attached to
    :type parent_frame: Frame | None

    :param name: Entity name, defaults to ''
    :type name: str, optional

    :param quiet: Exclude the entity from its parent's child set, defaults to False
    :type quiet: bool, optional
    """
    def __init__(self, parent_frame: Frame | None, name: str = '', quiet: bool = False):
        """Initialize Entity"""
        self.name = name
        self._parent_frame = None
        self._quiet = quiet

        self.change_parent_frame(parent_frame)

    parent_frame: Frame | None = property(op.attrgetter('_parent_frame'))
    is_quiet: bool = property(op.attrgetter('_quiet'))

    @property
    def is_world(self) -> bool:
        return False

    @property
    def world_frame(self) -> Frame | None:
        """Root World frame of the tree this entity belongs to, :code:`None`
        once detached"""
        frame = self if self.is_world else self._parent_frame
        while frame is not None and not frame.is_world:
            frame = frame.parent_frame
        return frame

    def change_parent_frame(self, new_parent: Frame | None) -> ParentChange:
        """Moves the entity into a new parent frame and invalidates anything
        that depends on its pose

        :param new_parent: New parent frame, :code:`None` detaches the entity
        :type new_parent: Frame | None

        :return: Reparenting outcome
        :rtype: ParentChange
        """
        if self._parent_frame is not None and not self._quiet:
            self._parent_frame._child_entities.discard(self)

        self._parent_frame = new_parent

        if new_parent is not None:
            if not self._quiet:
                new_parent._child_entities.add(self)
                new_parent.process_new_entity(self)
            self.notify_transform_update()

        return ParentChange.ACCEPTED

    def depends_on(self, frame: Frame | None) -> bool:
        """Checks whether `frame` is this entity or one of its ancestors

        :param frame: Candidate frame
        :type frame: Frame | None

        :return: Dependency flag
        :rtype: bool
        """
        if frame is None:
            return False
        if frame is self:
            return True

        ancestor = self._parent_frame
        while ancestor is not None:
            if ancestor is frame:
                return True
            if ancestor.is_world:
                break
            ancestor = ancestor.parent_frame

        return False

    # Invalidation hooks
    def notify_transform_update(self):
        pass

    def notify_velocity_update(self):
        pass

    def notify_acceleration_update(self):
        pass

    def draw(self, ax=None, color=None, use_default_color: bool = True, depth: int = -1):
        """Entities have no visual representation of their own"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.name}')"
