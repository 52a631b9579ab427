# -*- coding: utf-8 -*-
"""
Assembly of the layered stack.

The stack repeats an eight slot pattern of layer roles. Starting from the
anode collector, components are translated along the stacking axis and merged
one at a time into the global mesh; each merge advances the running offset by
the thickness of the merged layer, so consecutive layers touch without gaps.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

import numpy as np

from ..exceptions import MeshInvariantError
from ..polymesh.distributed_mesh import DistributedMesh
from .catalog import LayerCatalog
from .component import (
    ALIGNMENT_AXIS,
    STACK_AXIS,
    Component,
    alignment_parameters,
    transform_collector_anode,
    transform_collector_cathode,
)
from .config import GeometryConfig

logger = logging.getLogger(__name__)


class StackRole(Enum):
    """Role of a slot in the stack; the value is the material name of its cells."""

    ANODE_ELECTRODE = "anode"
    SEPARATOR = "separator"
    CATHODE_ELECTRODE = "cathode"
    CATHODE_COLLECTOR = "collector_cathode"
    ANODE_COLLECTOR = "collector_anode"

    @property
    def layer(self) -> str:
        """Configuration section holding the layer's dimensions and divisions."""
        if self in (StackRole.ANODE_COLLECTOR, StackRole.CATHODE_COLLECTOR):
            return "collector"
        return self.value


STACK_ORDER: Tuple[StackRole, ...] = (
    StackRole.ANODE_ELECTRODE,
    StackRole.SEPARATOR,
    StackRole.CATHODE_ELECTRODE,
    StackRole.CATHODE_COLLECTOR,
    StackRole.CATHODE_ELECTRODE,
    StackRole.SEPARATOR,
    StackRole.ANODE_ELECTRODE,
    StackRole.ANODE_COLLECTOR,
)

SLOTS_PER_CYCLE = 4


@dataclass(frozen=True)
class MergeStep:
    """Record of one merge of a component into the global mesh."""

    role: StackRole
    offset_before: float
    offset_after: float
    applied_shift: Tuple[float, ...]
    n_cells: int


def merge_component(
    component: Component, offset: float, mesh: DistributedMesh
) -> np.ndarray:
    """
    Moves `component` to `offset` along the stacking axis and merges it.

    A pending shift along the alignment axis is applied together with the
    stacking translation, then cleared so later merges of the same component
    only move it along the stacking axis.

    Returns:
        The translation applied to the component.
    """
    component.shift_vector[STACK_AXIS] = offset - component.offset
    applied = component.shift_vector.copy()
    component.mesh.shift(applied)
    component.offset = offset
    mesh.merge(component.mesh)
    if component.shift_vector[ALIGNMENT_AXIS] != 0.0:
        component.shift_vector[ALIGNMENT_AXIS] = 0.0
    return applied


class MeshGenerator:
    """
    Builds the layer components of a stack and merges them into one mesh.

    Attributes:
        config (GeometryConfig): Dimensions, divisions and repetition count.
        catalog (LayerCatalog): Resolves roles to material ids.
        components (Dict[StackRole, Component]): Built components per role.
        steps (List[MergeStep]): One record per merge, in merge order.
    """

    def __init__(self, config: GeometryConfig, catalog: LayerCatalog):
        self.config = config
        self.catalog = catalog
        self.components: Dict[StackRole, Component] = {}
        self.steps: List[MergeStep] = []
        self.collector_top = 0.0
        self.collector_bottom = 0.0

    def _new_component(self, role: StackRole) -> Component:
        layer = role.layer
        component = Component.from_dimensions(
            self.config.layer_dimensions(layer), self.config.layers[layer].divisions
        )
        component.build(self.catalog.material_id(role.value))
        return component

    def build_components(self) -> Dict[StackRole, Component]:
        """Creates the meshes of all roles and aligns the collectors."""
        components = {
            role: self._new_component(role)
            for role in (
                StackRole.ANODE_ELECTRODE,
                StackRole.CATHODE_ELECTRODE,
                StackRole.SEPARATOR,
                StackRole.ANODE_COLLECTOR,
                StackRole.CATHODE_COLLECTOR,
            )
        }
        anode = components[StackRole.ANODE_ELECTRODE]
        collector_a = components[StackRole.ANODE_COLLECTOR]
        collector_c = components[StackRole.CATHODE_COLLECTOR]

        scale_factor, cathode_offset, cathode_shift = alignment_parameters(
            collector_a, anode
        )
        top = collector_a.height
        collector_a.mesh.transform(
            lambda p: transform_collector_anode(p, scale_factor, top)
        )
        collector_c.mesh.transform(
            lambda p: transform_collector_cathode(p, scale_factor, top, cathode_offset)
        )
        collector_c.shift_vector[ALIGNMENT_AXIS] = cathode_shift

        self.collector_top = top
        self.collector_bottom = cathode_shift
        self.components = components
        logger.debug(
            "Collector alignment: scale factor %.6g, cathode offset %.6g, "
            "cathode shift %.6g",
            scale_factor,
            cathode_offset,
            cathode_shift,
        )
        return components

    def assemble(self, mesh: DistributedMesh) -> List[MergeStep]:
        """
        Merges the stack into `mesh`.

        The anode collector seeds the mesh. Then `n_repetitions + 1` cycles of
        four slots each walk through `STACK_ORDER`.

        Raises:
            MeshInvariantError: If a merge loses or duplicates cells or the
                running offset does not advance.
        """
        if not self.components:
            self.build_components()

        seed = self.components[StackRole.ANODE_COLLECTOR]
        mesh.copy_from(seed.mesh)
        offset = seed.thickness
        self.steps = []

        pos = 0
        for _ in range(self.config.n_repetitions + 1):
            for _ in range(SLOTS_PER_CYCLE):
                role = STACK_ORDER[pos]
                component = self.components[role]
                n_before = mesh.n_global_active_cells

                applied = merge_component(component, offset, mesh)

                step = MergeStep(
                    role=role,
                    offset_before=offset,
                    offset_after=offset + component.thickness,
                    applied_shift=tuple(float(s) for s in applied),
                    n_cells=mesh.n_global_active_cells,
                )
                if step.n_cells != n_before + component.mesh.n_cells:
                    raise MeshInvariantError(
                        f"Merging {role.value} at offset {offset:.6g} gave "
                        f"{step.n_cells} cells, expected "
                        f"{n_before + component.mesh.n_cells}."
                    )
                if not step.offset_after > step.offset_before:
                    raise MeshInvariantError(
                        f"The stack offset did not advance after merging {role.value}."
                    )
                self.steps.append(step)
                logger.debug(
                    "Merged %s at offset %.6g (%d cells)",
                    role.value,
                    offset,
                    step.n_cells,
                )

                offset = step.offset_after
                pos = (pos + 1) % len(STACK_ORDER)

        logger.info(
            "Assembled stack of %d layers, %d cells, thickness %.6g m",
            len(self.steps) + 1,
            mesh.n_global_active_cells,
            offset,
        )
        return self.steps
