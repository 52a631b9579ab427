import argparse
import logging
import os

from mpi4py import MPI

from stack_mesh.logging_config import setup_logging
from stack_mesh.meshgen import Geometry, load_config

SAMPLE_CONFIG = {
    "type": "supercapacitor",
    "dim": 2,
    "anode_collector_thickness": 5.0e-4,
    "cathode_collector_thickness": 5.0e-4,
    "anode_electrode_thickness": 50.0e-4,
    "separator_thickness": 25.0e-4,
    "cathode_electrode_thickness": 50.0e-4,
    "tab_height": 5.0e-4,
    "geometric_area": 25.0e-2,
    "anode": {"weight": 1000},
    "cathode": {"weight": 1000},
    "partition_method": "hierarchical",
}


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Assemble the mesh of a layered device and plot it."
    )
    parser.add_argument("--config", help="JSON geometry configuration (default: a 2D supercapacitor).")
    parser.add_argument("--output-dir", default="data", help="Directory for the plot and log.")
    parser.add_argument("--show-cells", action="store_true", help="Label cells in the plot.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages.")
    return parser.parse_args()


def main():
    """Create a sample stack mesh, print its summary and save a plot."""
    args = _parse_args()
    comm = MPI.COMM_WORLD
    os.makedirs(args.output_dir, exist_ok=True)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=os.path.join(args.output_dir, f"stack_mesh_{comm.Get_rank()}.log"),
        rank=comm.Get_rank(),
    )

    config = load_config(args.config) if args.config else SAMPLE_CONFIG
    geometry = Geometry(config, comm)

    if comm.Get_rank() == 0:
        geometry.coarse_mesh.print_summary()
        if geometry.dimension == 2:
            geometry.coarse_mesh.plot(
                os.path.join(args.output_dir, "stack_mesh.png"),
                show_cells=args.show_cells,
            )
            geometry.coarse_mesh.plot(
                os.path.join(args.output_dir, "stack_mesh_partition.png"),
                parts=geometry.mesh.cell_partitions,
            )


if __name__ == "__main__":
    main()
