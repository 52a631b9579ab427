import matplotlib
import numpy as np
from matplotlib.patches import Polygon, Rectangle
from matplotlib.collections import PatchCollection

DEFAULT_CELL_COLOR = "#90EE90"


def polygon_area(points):
    """Calculates the area of a polygon using the shoelace formula."""
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * np.abs(np.dot(x, np.roll(y, 1)) - np.dot(y, np.roll(x, 1)))


def get_geometry_extent(nodes):
    """Computes the extent of the geometry based on node coordinates."""
    min_coords = np.min(nodes, axis=0)
    max_coords = np.max(nodes, axis=0)
    extent = np.linalg.norm(max_coords - min_coords)
    return extent if extent > 0 else 1.0


def plot_mesh(
    ax,
    nodes,
    cells,
    show_nodes=False,
    show_cells=False,
    parts=None,
    title="Mesh",
    label="Part",
):
    """
    Plots a 2D stack mesh, coloring cells by partition or material id.

    Args:
        ax: Matplotlib axes object.
        nodes (np.ndarray): Array of node coordinates (num_nodes, 2).
        cells (list): List of lists, where each inner list contains the node indices for a cell.
        show_nodes (bool): Whether to display node labels.
        show_cells (bool): Whether to display cell labels.
        parts (np.ndarray, optional): Array of partition or material IDs for each cell.
        title (str, optional): The title for the plot.
        label (str, optional): Legend prefix for the values in `parts`.
    """
    if nodes.shape[1] > 2:
        nodes = nodes[:, :2]

    geometry_extent = get_geometry_extent(nodes)

    part_colors = None
    if parts is not None:
        unique_parts = np.unique(parts)
        num_parts = len(unique_parts)
        cmap = matplotlib.colormaps["tab20"].resampled(max(num_parts, 1))
        part_min = unique_parts.min()
        part_range = (unique_parts.max() - part_min) if num_parts > 1 else 1

        part_colors = {
            part_id: cmap((part_id - part_min) / part_range) for part_id in unique_parts
        }

    patches = []
    for i, cell_conn in enumerate(cells):
        points = nodes[cell_conn]
        color = part_colors[parts[i]] if part_colors is not None else DEFAULT_CELL_COLOR
        patches.append(
            Polygon(points, facecolor=color, edgecolor="k", alpha=0.7, lw=0.5)
        )

        if show_cells:
            # Scale font size with the cell size relative to the geometry extent
            font_scale_factor = np.sqrt(polygon_area(points)) / geometry_extent
            cell_fontsize = min(max(2, int(font_scale_factor * 120)), 10)

            cell_centroid = np.mean(points, axis=0)
            ax.text(
                cell_centroid[0],
                cell_centroid[1],
                str(i),
                color="black",
                ha="center",
                va="center",
                fontsize=cell_fontsize,
                weight="bold",
                bbox=dict(
                    facecolor="white",
                    alpha=0.6,
                    edgecolor="none",
                    boxstyle="round,pad=0.2",
                ),
            )

    ax.add_collection(PatchCollection(patches, match_original=True))

    if show_nodes:
        for i in range(nodes.shape[0]):
            ax.text(
                nodes[i, 0],
                nodes[i, 1],
                str(i),
                color="darkred",
                ha="center",
                va="center",
                fontsize=6,
                bbox=dict(
                    facecolor="yellow",
                    alpha=0.6,
                    edgecolor="none",
                    boxstyle="round,pad=0.1",
                ),
            )

    ax.set_title(title, fontsize=18, pad=20)
    ax.set_xlabel("X", fontsize=14, labelpad=8)
    ax.set_ylabel("Y", fontsize=14, labelpad=8)
    ax.grid(True, linestyle="--", alpha=0.5)
    ax.set_aspect("equal", adjustable="box")
    ax.tick_params(axis="both", which="major", pad=2, labelsize=12)
    ax.autoscale_view()

    for spine in ax.spines.values():
        spine.set_visible(False)

    legend_handles = []
    if part_colors is not None:
        for part_id in np.unique(parts):
            num_cells_in_part = np.sum(parts == part_id)
            legend_handles.append(
                Rectangle(
                    (0, 0),
                    1,
                    1,
                    color=part_colors[part_id],
                    label=f"{label} {part_id} (#{num_cells_in_part})",
                )
            )
    else:
        legend_handles.append(
            Rectangle(
                (0, 0), 1, 1, color=DEFAULT_CELL_COLOR, label=f"Cells (#{len(cells)})"
            )
        )

    ax.legend(
        handles=legend_handles,
        loc="upper left",
        bbox_to_anchor=(1.0, 1.0),
        fontsize=14,
        frameon=False,
        ncol=1,
    )
