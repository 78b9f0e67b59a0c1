# body_ik/monitoring.py
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .error_handling import check_singularity
from .poe_kin import as_screw_matrix, jacobian_body
from .solver import IKResult

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PACKAGE_LOGGER = 'body_ik'


def setup_logging(level='INFO', log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger with a console handler and, optionally, a
    file handler. Calling it again replaces the previous handlers.
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    pkg_logger.setLevel(level)

    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    pkg_logger.addHandler(ch)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setFormatter(formatter)
        pkg_logger.addHandler(fh)

    return pkg_logger


@dataclass
class SolveMetrics:
    converged: bool
    iterations: int
    angular_error: float
    linear_error: float
    computation_time: float
    min_singular_value: Optional[float] = None


class KinematicsMonitor:
    def __init__(self, singularity_threshold: float = 1e-3):
        self.logger = logging.getLogger(f'{PACKAGE_LOGGER}.monitor')
        self.singularity_threshold = singularity_threshold

    def log_solve(self, result: IKResult, computation_time: float,
                  Blist=None) -> SolveMetrics:
        final = result.final_record
        metrics = SolveMetrics(
            converged=result.converged,
            iterations=result.iterations,
            angular_error=final.angular_error,
            linear_error=final.linear_error,
            computation_time=computation_time,
        )

        if result.converged:
            self.logger.info(f"IK converged in {result.iterations} iterations "
                             f"({computation_time:.4f}s)")
            self.logger.info(f"Angular error: {final.angular_error:.6e}, "
                             f"Linear error: {final.linear_error:.6e}")
        else:
            self.logger.warning(f"IK failed to converge after {result.iterations} iterations")
            self.logger.warning(f"Last angular error: {final.angular_error:.6e}, "
                                f"Linear error: {final.linear_error:.6e}")

        if Blist is not None:
            J = jacobian_body(as_screw_matrix(Blist), result.thetalist)
            near_singular, min_sigma = check_singularity(J, self.singularity_threshold)
            metrics.min_singular_value = min_sigma
            if near_singular:
                self.logger.warning(f"Final configuration is near a singularity "
                                    f"(min singular value {min_sigma:.3e})")

        self.logger.info(f"Final joint vector: {np.round(result.thetalist, 6)}")
        return metrics
