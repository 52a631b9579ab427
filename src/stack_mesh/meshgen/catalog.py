# -*- coding: utf-8 -*-
"""
Symbolic material and boundary names for the layered stack.

The `LayerCatalog` maps names such as "anode" or "collector" to sets of integer
tags. Cells carry material tags, faces carry boundary tags. A catalog is built
once, never mutated afterwards and passed explicitly to every component that
needs to resolve a name.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping

from ..common.parsing import as_is, get_child, get_required, to_vector
from ..exceptions import ConfigurationError


def _freeze(mapping: Mapping[str, Iterable[int]]) -> Mapping[str, FrozenSet[int]]:
    return MappingProxyType(
        {str(name): frozenset(int(t) for t in tags) for name, tags in mapping.items()}
    )


@dataclass(frozen=True)
class LayerCatalog:
    """
    Immutable name -> tag-set mappings for materials and boundaries.

    Attributes:
        materials: Material name to the set of material ids of its cells.
        boundaries: Boundary name to the set of boundary ids of its faces.
    """

    materials: Mapping[str, FrozenSet[int]] = field(default_factory=dict)
    boundaries: Mapping[str, FrozenSet[int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "materials", _freeze(self.materials))
        object.__setattr__(self, "boundaries", _freeze(self.boundaries))

    @classmethod
    def default(cls) -> "LayerCatalog":
        """The catalog used for generated stacks."""
        return cls(
            materials={
                "anode": {0},
                "separator": {1},
                "cathode": {2},
                "collector_anode": {3},
                "collector_cathode": {4},
                "collector": {3, 4},
            },
            boundaries={"anode": {1}, "cathode": {2}},
        )

    @classmethod
    def from_config(cls, database: Mapping[str, Any]) -> "LayerCatalog":
        """
        Reads a catalog from a configuration database.

        The database lists ``materials`` (a count) followed by sections
        ``material_0`` .. ``material_<n-1>``, each with a ``name`` and a
        ``material_id`` list. Boundaries follow the same pattern with
        ``boundaries``, ``boundary_<b>`` and ``boundary_id``.
        """
        materials: Dict[str, List[int]] = {}
        n_materials = get_required(database, "materials", int)
        for m in range(n_materials):
            section = get_child(database, f"material_{m}")
            name = get_required(section, "name", str)
            materials[name] = to_vector(get_required(section, "material_id", as_is), int)

        boundaries: Dict[str, List[int]] = {}
        n_boundaries = get_required(database, "boundaries", int)
        for b in range(n_boundaries):
            section = get_child(database, f"boundary_{b}")
            name = get_required(section, "name", str)
            boundaries[name] = to_vector(get_required(section, "boundary_id", as_is), int)

        return cls(materials=materials, boundaries=boundaries)

    def material_ids(self, name: str) -> FrozenSet[int]:
        try:
            return self.materials[name]
        except KeyError:
            raise ConfigurationError(
                f"Material '{name}' is not defined. Known materials: "
                f"{sorted(self.materials)}"
            ) from None

    def material_id(self, name: str) -> int:
        """The tag stamped on cells built for material ``name`` (smallest tag)."""
        ids = self.material_ids(name)
        if not ids:
            raise ConfigurationError(f"Material '{name}' has no material id.")
        return min(ids)

    def boundary_ids(self, name: str) -> FrozenSet[int]:
        try:
            return self.boundaries[name]
        except KeyError:
            raise ConfigurationError(
                f"Boundary '{name}' is not defined. Known boundaries: "
                f"{sorted(self.boundaries)}"
            ) from None

    def boundary_id(self, name: str) -> int:
        """The single boundary id of ``name``; multi-tag boundaries are rejected."""
        ids = self.boundary_ids(name)
        if len(ids) != 1:
            raise ConfigurationError(
                f"The '{name}' boundary id must have a size of one, got {sorted(ids)}."
            )
        return next(iter(ids))

    def to_dict(self) -> Dict[str, Dict[str, List[int]]]:
        """Plain-data form, used by the checkpoint archive."""
        return {
            "materials": {k: sorted(v) for k, v in self.materials.items()},
            "boundaries": {k: sorted(v) for k, v in self.boundaries.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Iterable[int]]]) -> "LayerCatalog":
        return cls(
            materials=data.get("materials", {}), boundaries=data.get("boundaries", {})
        )
