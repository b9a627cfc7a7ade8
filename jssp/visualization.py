"""Machine-oriented Gantt charts of schedule results, rendered off-screen with matplotlib."""

import logging
import os
from typing import Optional

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from .models import ScheduleResult  # noqa: E402

logger = logging.getLogger("jssp.visualization")


def plot_gantt(
    result: ScheduleResult,
    save_path: Optional[str] = None,
    title: Optional[str] = None,
    show_legend: Optional[bool] = None,
) -> Optional[str]:
    """Draw a machine-oriented Gantt chart of a schedule result.

    One horizontal bar per scheduled operation: row = machine, colour = job,
    label = ``J<job>`` when the bar is wide enough.

    - Uses constrained_layout to reduce layout warnings.
    - Disables legend automatically for more than 40 jobs unless forced.
    - Adaptive figure size based on number of machines and makespan.

    Args:
        result: Scheduled result (unscheduled operations are skipped).
        save_path: PNG destination; when None the figure is only closed.
        title: Chart title; defaults to algorithm name and makespan.
        show_legend: Force legend on/off; None applies the auto policy.

    Returns:
        The path written, or None when ``save_path`` is None.
    """
    problem = result.problem
    m = max(problem.num_machines, 1)
    n = problem.num_jobs

    base_w, base_h = 10, 0.5 * m + 2
    fig, ax = plt.subplots(
        figsize=(min(base_w + result.makespan * 0.02, 18), min(base_h, 16)),
        constrained_layout=True,
    )
    cmap = matplotlib.colormaps["tab20"]
    colors = [cmap(i % 20) for i in range(max(n, 1))]
    for op in problem.operations:
        if not op.is_scheduled:
            continue
        ax.barh(
            op.machine_id,
            op.duration,
            left=op.start,
            height=0.8,
            color=colors[op.job_id],
            alpha=0.85,
            edgecolor="black",
            linewidth=0.6,
        )
        if result.makespan and op.duration / result.makespan > 0.03:
            ax.text(
                op.start + op.duration / 2,
                op.machine_id,
                f"J{op.job_id}",
                ha="center",
                va="center",
                fontsize=7,
            )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    if title is None:
        title = f"{result.algorithm or 'Schedule'} - Makespan = {result.makespan}"
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_yticks(range(problem.num_machines))
    ax.set_yticklabels([f"M{i}" for i in range(problem.num_machines)])
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    ax.set_ylim(-0.5, m - 0.5)
    ax.invert_yaxis()

    if show_legend is None:
        show_legend = 0 < n <= 40
    if show_legend:
        legend_elements = [
            plt.Rectangle(
                (0, 0), 1, 1, facecolor=colors[i], alpha=0.85, edgecolor="black", label=f"Job {i}"
            )
            for i in range(n)
        ]
        ax.legend(
            handles=legend_elements,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if n <= 25 else 2,
        )

    written = None
    if save_path:
        _ensure_dir(os.path.dirname(save_path))
        fig.savefig(save_path, dpi=180)  # dpi 180 as a quality/time trade-off
        written = str(save_path)
        logger.info("Gantt chart saved as: %s", written)
    plt.close(fig)
    return written


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)

