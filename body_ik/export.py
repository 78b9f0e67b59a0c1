# body_ik/export.py
"""
Exporters for a finished iteration history.

Nothing here runs inside the solve loop. Each exporter owns its file for the
duration of a ``with`` block; ``export_history`` turns I/O failures into
warnings so the solve result never depends on a writable filesystem or a
supported plot format.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np

from .history import IterationHistory, IterationRecord

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = "log.txt"
DEFAULT_CSV_PATH = "iterates.csv"
RULE = "_" * 46


def _join(values, fmt: str = "{:.3f}") -> str:
    return " , ".join(fmt.format(v) for v in values)


def format_iteration(record: IterationRecord) -> str:
    """
    Text block for one iterate, e.g.

        Iteration 1 :

        joint vector :
         1.573 , 2.974 , 3.151

        SE(3) end-effector config:
        ...
    """
    lines = [
        f"Iteration {record.index} :",
        "",
        "joint vector :",
        " " + _join(record.thetalist),
        "",
        "SE(3) end-effector config:",
    ]
    lines.extend(" ".join(f"{v:.3f}" for v in row) for row in record.Tsb)
    lines += [
        "",
        "error twist V_b:",
        " " + _join(record.Vb),
        "",
        f"angular error magnitude ||omega_b||: {record.angular_error:.4f}",
        f"linear error magnitude ||v_b||: {record.linear_error:.4f}",
        RULE,
    ]
    return "\n".join(lines) + "\n"


def write_iteration_log(history: IterationHistory, path: str = DEFAULT_LOG_PATH):
    with open(path, 'w') as f:
        for record in history:
            f.write(format_iteration(record))
    logger.info(f"Iteration log saved to {path}")


def write_joint_history_csv(history: IterationHistory, path: str = DEFAULT_CSV_PATH):
    """One row per iteration, one column per joint."""
    with open(path, 'w') as f:
        np.savetxt(f, history.joint_matrix(), delimiter=',', fmt='%.17g')
    logger.info(f"Joint history saved to {path}")


def plot_convergence(history: IterationHistory, path: str,
                     eomg: Optional[float] = None, ev: Optional[float] = None):
    """Error norms per iteration on a log scale, with tolerance lines."""
    iterations = np.arange(len(history))
    # Exact zeros cannot be drawn on a log axis
    ang = np.maximum(history.angular_errors(), 1e-16)
    lin = np.maximum(history.linear_errors(), 1e-16)

    fig, ax = plt.subplots(figsize=(8, 5))
    try:
        ax.semilogy(iterations, ang, 'o-', label='||omega_b||')
        ax.semilogy(iterations, lin, 's-', label='||v_b||')
        if eomg is not None:
            ax.axhline(eomg, color='C0', linestyle='--', alpha=0.6, label='eomg')
        if ev is not None:
            ax.axhline(ev, color='C1', linestyle='--', alpha=0.6, label='ev')
        ax.set_xlabel('Iteration')
        ax.set_ylabel('Error magnitude')
        ax.set_title('Body-frame IK convergence')
        ax.legend()
        ax.grid(True, which='both', alpha=0.3)
        fig.savefig(path, dpi=150, bbox_inches='tight')
    finally:
        plt.close(fig)
    logger.info(f"Convergence plot saved to {path}")


@dataclass
class ExportReport:
    written: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def export_history(
    history: IterationHistory,
    log_path: Optional[str] = DEFAULT_LOG_PATH,
    csv_path: Optional[str] = DEFAULT_CSV_PATH,
    plot_path: Optional[str] = None,
    eomg: Optional[float] = None,
    ev: Optional[float] = None,
) -> ExportReport:
    """
    Run every configured exporter. A path of None skips that exporter.

    A failing exporter is logged as a warning and listed in the report; the
    remaining exporters still run.
    """
    jobs = []
    if log_path:
        jobs.append((log_path, lambda: write_iteration_log(history, log_path)))
    if csv_path:
        jobs.append((csv_path, lambda: write_joint_history_csv(history, csv_path)))
    if plot_path:
        jobs.append((plot_path, lambda: plot_convergence(history, plot_path, eomg, ev)))

    report = ExportReport()
    for path, job in jobs:
        try:
            job()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not write {path}: {e}")
            report.failures[str(path)] = str(e)
        else:
            report.written.append(str(path))
    return report
