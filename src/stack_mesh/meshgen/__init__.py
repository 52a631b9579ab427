# -*- coding: utf-8 -*-
"""
Construction of the device geometry.

Key modules:
- catalog:        Material and boundary names of the stack.
- config:         Validated geometry configuration.
- component:      Layer components and collector alignment transforms.
- mesh_generator: Sequential merge of the stack pattern.
- geometry:       Mesh types, boundary recovery, checkpoint and load balancing.
"""

from .catalog import LayerCatalog
from .config import GeometryConfig, load_config
from .component import Component
from .mesh_generator import STACK_ORDER, MergeStep, MeshGenerator, StackRole
from .geometry import Geometry

__all__ = [
    "LayerCatalog",
    "GeometryConfig",
    "load_config",
    "Component",
    "MeshGenerator",
    "MergeStep",
    "StackRole",
    "STACK_ORDER",
    "Geometry",
]
