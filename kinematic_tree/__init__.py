"""kinematic_tree - Cached Kinematic Reference Frame Trees"""
from kinematic_tree.geometry import Isometry, ad_T, ad_inv_T, ad_R, ad
from kinematic_tree.entity import Entity, ParentChange
from kinematic_tree.frame import Frame, WorldFrame, world
from kinematic_tree.kinematics import FixedFrame, SimpleFrame, KinematicSystem
from kinematic_tree.shapes import Shape, EllipsoidShape, BoxShape
from kinematic_tree.logging_config import setup_logging

__all__ = ['Isometry', 'ad_T', 'ad_inv_T', 'ad_R', 'ad',
           'Entity', 'ParentChange',
           'Frame', 'WorldFrame', 'world',
           'FixedFrame', 'SimpleFrame', 'KinematicSystem',
           'Shape', 'EllipsoidShape', 'BoxShape',
           'setup_logging']
