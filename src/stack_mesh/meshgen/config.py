# -*- coding: utf-8 -*-
"""
Geometry configuration.

A configuration is a nested mapping, typically loaded from a JSON file. It is
read once into frozen dataclasses and validated on construction, so the rest
of the package never sees a missing or malformed value.

Lengths in the configuration are in centimeters and the geometric area in
square centimeters; `GeometryConfig.layer_dimensions` returns meters.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.parsing import as_is, get_child, get_required, to_vector
from ..exceptions import ConfigurationError
from ..polymesh.mesh_io import check_mesh_extension
from .catalog import LayerCatalog

logger = logging.getLogger(__name__)

CM_TO_M = 0.01
CM2_TO_M2 = 0.0001

MESH_TYPES = ("restart", "file", "supercapacitor", "generate")
LAYER_NAMES = ("collector", "anode", "separator", "cathode")

# Divisions used by the "supercapacitor" mesh type, per dimension.
SUPERCAPACITOR_DIVISIONS = {
    2: {"collector": (1, 6), "anode": (10, 5), "separator": (5, 5), "cathode": (10, 5)},
    3: {
        "collector": (3, 3, 3),
        "anode": (5, 5, 2),
        "separator": (4, 4, 2),
        "cathode": (5, 5, 2),
    },
}


@dataclass(frozen=True)
class LayerConfig:
    """Discretization and partitioning weight of one layer type."""

    divisions: Tuple[int, ...]
    weight: int = 0

    def __post_init__(self) -> None:
        if any(d < 1 for d in self.divisions):
            raise ConfigurationError(
                f"Layer divisions must be positive, got {list(self.divisions)}."
            )
        if self.weight < 0:
            raise ConfigurationError(f"Layer weight must be >= 0, got {self.weight}.")

    @classmethod
    def from_dict(
        cls, database: Mapping[str, Any], default_divisions: Optional[Tuple[int, ...]] = None
    ) -> "LayerConfig":
        if default_divisions is not None:
            divisions = tuple(default_divisions)
        else:
            divisions = tuple(to_vector(get_required(database, "divisions", as_is), int))
        weight = get_required(database, "weight", int) if "weight" in database else 0
        return cls(divisions=divisions, weight=weight)


@dataclass(frozen=True)
class GeometryConfig:
    """
    Everything needed to build or load the mesh of a stack.

    Attributes:
        type: One of "restart", "file", "supercapacitor" or "generate".
        dim: Spatial dimension, 2 or 3.
        layers: Layer name ("collector", "anode", "separator", "cathode") to
            its discretization. Empty for "restart" and "file".
        thicknesses: Layer thickness in cm, keyed like `layers`.
        tab_height: Height of the collector tab in cm.
        geometric_area: Area of the device in cm^2.
        n_repetitions: Extra stack cycles beyond the first.
        n_refinements: Number of global refinements after assembly.
        checkpoint: Whether to write the coarse mesh.
        coarse_mesh_filename: Path of the coarse mesh checkpoint.
        mesh_file: Mesh file read by the "file" type.
        partition_method: Method used to partition cells over ranks.
        catalog: Catalog read from the configuration, None to use the default.
    """

    type: str
    dim: int
    layers: Mapping[str, LayerConfig] = field(default_factory=dict)
    thicknesses: Mapping[str, float] = field(default_factory=dict)
    tab_height: float = 0.0
    geometric_area: float = 0.0
    n_repetitions: int = 1
    n_refinements: int = 0
    checkpoint: bool = False
    coarse_mesh_filename: Optional[str] = None
    mesh_file: Optional[str] = None
    partition_method: str = "metis"
    catalog: Optional[LayerCatalog] = None

    def __post_init__(self) -> None:
        if self.type not in MESH_TYPES:
            raise ConfigurationError(
                f"Unknown mesh type '{self.type}', expected one of {list(MESH_TYPES)}."
            )
        if self.dim not in (2, 3):
            raise ConfigurationError(f"dim must be 2 or 3, got {self.dim}.")
        if self.n_repetitions < 0 or self.n_refinements < 0:
            raise ConfigurationError(
                "n_repetitions and n_refinements must be non-negative."
            )
        if (self.checkpoint or self.type == "restart") and not self.coarse_mesh_filename:
            raise ConfigurationError(
                "Missing required configuration entry 'coarse_mesh_filename'."
            )
        if self.type == "file":
            if not self.mesh_file:
                raise ConfigurationError(
                    "Missing required configuration entry 'mesh_file'."
                )
            if self.catalog is None:
                raise ConfigurationError(
                    "Missing required configuration entry 'materials'."
                )
            check_mesh_extension(self.mesh_file)
        if self.is_generated:
            self._validate_generated()

    def _validate_generated(self) -> None:
        for name in LAYER_NAMES:
            layer = self.layers.get(name)
            if layer is None:
                raise ConfigurationError(f"Missing configuration section '{name}'.")
            if len(layer.divisions) != self.dim:
                raise ConfigurationError(
                    f"The '{name}' divisions {list(layer.divisions)} must have "
                    f"{self.dim} entries."
                )
        for name, value in self.thicknesses.items():
            if value <= 0.0:
                raise ConfigurationError(f"'{name}' must be positive, got {value}.")
        if self.geometric_area <= 0.0:
            raise ConfigurationError("'geometric_area' must be positive.")
        if self.tab_height <= 0.0:
            raise ConfigurationError("'tab_height' must be positive.")
        if self.thicknesses["anode_collector"] != self.thicknesses["cathode_collector"]:
            raise ConfigurationError("Both collectors must have the same thickness.")

        # The alignment maps all but the last collector row onto the electrode.
        if self.layers["collector"].divisions[-1] < 2:
            raise ConfigurationError(
                "The collector needs at least 2 divisions along the last axis."
            )
        collector_height = self.layer_dimensions("collector")[-1]
        for name in ("anode", "separator", "cathode"):
            if collector_height <= self.layer_dimensions(name)[-1]:
                raise ConfigurationError(
                    f"The collector must be taller than the '{name}' layer, "
                    f"got {collector_height:.6g} m."
                )

    @property
    def is_generated(self) -> bool:
        return self.type in ("supercapacitor", "generate")

    @property
    def weights(self) -> Dict[str, int]:
        """Extra partitioning weight per layer type."""
        return {name: layer.weight for name, layer in self.layers.items()}

    def layer_dimensions(self, name: str) -> Tuple[float, ...]:
        """
        Far corner, in meters, of the box of layer `name` (origin at zero).

        The first entry is the thickness along the stacking direction. In 2D
        the second entry is the geometric area used as a length; in 3D the
        in-plane sides are the square root of the area. Collectors extend by
        the tab height along the last axis.
        """
        thickness_key = {
            "collector": "anode_collector",
            "anode": "anode_electrode",
            "separator": "separator",
            "cathode": "cathode_electrode",
        }[name]
        thickness = self.thicknesses[thickness_key] * CM_TO_M
        area = self.geometric_area * CM2_TO_M2
        tab = self.tab_height * CM_TO_M if name == "collector" else 0.0
        if self.dim == 2:
            return (thickness, area + tab)
        side = math.sqrt(area)
        return (thickness, side, side + tab)

    @classmethod
    def from_dict(cls, database: Mapping[str, Any]) -> "GeometryConfig":
        """Reads and validates a configuration database."""
        mesh_type = get_required(database, "type", str)
        dim = get_required(database, "dim", int)
        if dim not in (2, 3):
            raise ConfigurationError(f"dim must be 2 or 3, got {dim}.")

        kwargs: Dict[str, Any] = dict(
            type=mesh_type,
            dim=dim,
            checkpoint=bool(database.get("checkpoint", False)),
            coarse_mesh_filename=database.get("coarse_mesh_filename"),
            mesh_file=database.get("mesh_file"),
            partition_method=str(database.get("partition_method", "metis")),
            n_refinements=int(database.get("n_refinements", 0)),
            n_repetitions=int(database.get("n_repetitions", 1)),
        )
        if "materials" in database:
            kwargs["catalog"] = LayerCatalog.from_config(database)

        if mesh_type in ("supercapacitor", "generate"):
            layers = {}
            for name in LAYER_NAMES:
                if mesh_type == "supercapacitor":
                    # Divisions are fixed, only the weight may be configured.
                    layers[name] = LayerConfig.from_dict(
                        database.get(name) or {},
                        SUPERCAPACITOR_DIVISIONS.get(dim, {}).get(name),
                    )
                else:
                    layers[name] = LayerConfig.from_dict(get_child(database, name))
            kwargs["layers"] = layers
            kwargs["thicknesses"] = {
                key: get_required(database, f"{key}_thickness", float)
                for key in (
                    "anode_collector",
                    "cathode_collector",
                    "anode_electrode",
                    "separator",
                    "cathode_electrode",
                )
            }
            kwargs["tab_height"] = get_required(database, "tab_height", float)
            kwargs["geometric_area"] = get_required(database, "geometric_area", float)

            if mesh_type == "supercapacitor":
                # One refinement by default, the configured value comes on top.
                kwargs["n_repetitions"] = 0
                kwargs["n_refinements"] = 1 + int(database.get("n_refinements", 0))

        config = cls(**kwargs)
        logger.debug("Loaded %s geometry configuration (dim=%d).", mesh_type, dim)
        return config


def load_config(path: str) -> GeometryConfig:
    """Reads a JSON configuration file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            database = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}") from e
    if not isinstance(database, Mapping):
        raise ConfigurationError(f"Configuration file {path} must hold a JSON object.")
    return GeometryConfig.from_dict(database)
