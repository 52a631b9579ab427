# -*- coding: utf-8 -*-
"""
Layer components and the transforms aligning collectors with electrodes.

A component is one slab of the stack: a box, its subdivision, the structured
mesh filling it and where it currently sits along the stacking direction.

Axes
----
Layers are stacked along `STACK_AXIS`; a layer's thickness is its extent on
that axis. The collector tab protrudes along `ALIGNMENT_AXIS`, the last axis
of the space (y in 2D, z in 3D), which is also the axis the alignment
transforms act on.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from ..polymesh.poly_mesh import PolyMesh

STACK_AXIS = 0
ALIGNMENT_AXIS = -1

# Points this close to either end of the collector stay in place.
ALIGNMENT_TOLERANCE = 1e-15


def _at_collector_end(p: np.ndarray, max_value: float) -> bool:
    coord = p[ALIGNMENT_AXIS]
    return coord < ALIGNMENT_TOLERANCE or coord > max_value - ALIGNMENT_TOLERANCE


def transform_collector_anode(
    p: np.ndarray, scale_factor: float, max_value: float
) -> np.ndarray:
    """
    Scales the interior points of the anode collector along the alignment axis.

    Points at the bottom (0) or top (`max_value`) of the collector are returned
    unchanged.
    """
    if _at_collector_end(p, max_value):
        return p
    q = np.array(p, dtype=float)
    q[ALIGNMENT_AXIS] *= scale_factor
    return q


def transform_collector_cathode(
    p: np.ndarray, scale_factor: float, max_value: float, offset: float
) -> np.ndarray:
    """
    Scales and offsets the interior points of the cathode collector along the
    alignment axis. End points are returned unchanged.
    """
    if _at_collector_end(p, max_value):
        return p
    q = np.array(p, dtype=float)
    q[ALIGNMENT_AXIS] = scale_factor * q[ALIGNMENT_AXIS] + offset
    return q


def alignment_parameters(
    collector: "Component", electrode: "Component"
) -> Tuple[float, float, float]:
    """
    Parameters of the collector transforms.

    The collector is subdivided uniformly along the alignment axis. The
    interior of that subdivision is rescaled so that the node row just below
    the top matches the electrode height.

    Returns:
        (scale_factor, cathode_offset, cathode_shift): the shared scale
        factor, the offset of the cathode variant and the one-time shift of
        the cathode collector along the alignment axis.
    """
    collector_height = collector.height
    electrode_height = electrode.height
    delta = collector_height / collector.repetitions[ALIGNMENT_AXIS]
    scale_factor = electrode_height / (collector_height - delta)
    cathode_offset = collector_height - electrode_height - scale_factor * delta
    cathode_shift = -(collector_height - electrode_height)
    return scale_factor, cathode_offset, cathode_shift


@dataclass
class Component:
    """
    One layer of the stack.

    Attributes:
        box_dimensions: Origin and far corner of the layer box, in meters.
        repetitions: Number of cells along each axis.
        mesh: Mesh of the layer, None until `build` is called.
        offset: Current position of the layer along the stacking axis.
        shift_vector: Translation applied at the next merge; the alignment
            component is pending and cleared after the first merge.
    """

    box_dimensions: Tuple[np.ndarray, np.ndarray]
    repetitions: Tuple[int, ...]
    mesh: Optional[PolyMesh] = None
    offset: float = 0.0
    shift_vector: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        origin = np.asarray(self.box_dimensions[0], dtype=float)
        corner = np.asarray(self.box_dimensions[1], dtype=float)
        self.box_dimensions = (origin, corner)
        self.repetitions = tuple(int(r) for r in self.repetitions)
        if self.shift_vector is None:
            self.shift_vector = np.zeros(self.dimension)
        else:
            self.shift_vector = np.asarray(self.shift_vector, dtype=float)

    @classmethod
    def from_dimensions(
        cls, dimensions: Sequence[float], repetitions: Sequence[int]
    ) -> "Component":
        """A component whose box spans from the origin to `dimensions`."""
        if len(dimensions) != len(repetitions):
            raise ValueError(
                f"dimensions={list(dimensions)} and repetitions={list(repetitions)} "
                "must have the same length"
            )
        return cls((np.zeros(len(dimensions)), np.asarray(dimensions)), repetitions)

    @property
    def dimension(self) -> int:
        return len(self.box_dimensions[1])

    @property
    def thickness(self) -> float:
        return float(self.box_dimensions[1][STACK_AXIS])

    @property
    def height(self) -> float:
        return float(self.box_dimensions[1][ALIGNMENT_AXIS])

    def build(self, material_id: int) -> PolyMesh:
        """Creates the structured mesh of the layer, tagged with `material_id`."""
        self.mesh = PolyMesh.create_subdivided_box(
            self.repetitions,
            self.box_dimensions[0],
            self.box_dimensions[1],
            material_id=material_id,
        )
        return self.mesh
