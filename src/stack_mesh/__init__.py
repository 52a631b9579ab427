"""
Stack-Mesh

A Python package for assembling the mesh of layered energy storage devices
(collector / electrode / separator / electrode / collector stacks) and
distributing it over MPI ranks.
"""

from . import meshgen
from . import polymesh

__all__ = [
    "meshgen",
    "polymesh",
]
