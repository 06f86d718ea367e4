"""
Core dungeon layout functionality.
"""

from .geometry import Point, Circle
from .delaunay import Triangle, Triangulation, DegenerateGeometryError
from .kruskal import Segment, Graph, DisconnectedEdgeSetError
from .corridors import Corridor, CorridorPlan, build_corridors, extract_segments
from .physics import PhysicsSpace, SeparationSpace, SpaceOptions, BodySpec, ShapeMaterial
from .rooms import Room, RoomStatus
from .pipeline import DungeonGenerator, GenerationPhase, GeneratorOptions, LayoutSnapshot

__all__ = ['Point', 'Circle', 'Triangle', 'Triangulation', 'DegenerateGeometryError',
           'Segment', 'Graph', 'DisconnectedEdgeSetError',
           'Corridor', 'CorridorPlan', 'build_corridors', 'extract_segments',
           'PhysicsSpace', 'SeparationSpace', 'SpaceOptions', 'BodySpec', 'ShapeMaterial',
           'Room', 'RoomStatus',
           'DungeonGenerator', 'GenerationPhase', 'GeneratorOptions', 'LayoutSnapshot']
