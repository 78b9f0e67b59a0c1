# body_ik/main.py
"""
Command line entry point: solve one IK problem described by a YAML file and
export the iterate history.
"""

import argparse
import logging
import sys
import time

import numpy as np

from .config import ConfigurationError, IKConfig
from .error_handling import IKInputError
from .export import export_history
from .monitoring import KinematicsMonitor, setup_logging
from .solver import ik_body_iterates

logger = logging.getLogger('body_ik.main')

EXIT_CONVERGED = 0
EXIT_NOT_CONVERGED = 1
EXIT_BAD_INPUT = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Newton-Raphson inverse kinematics in the body frame")
    parser.add_argument("config", nargs="?", default="robot_config.yaml",
                        help="YAML configuration file (default: robot_config.yaml)")
    parser.add_argument("--max-iterations", type=int, default=None,
                        help="override ik_params.max_iterations")
    parser.add_argument("--no-export", action="store_true",
                        help="skip writing the iteration log and CSV table")
    parser.add_argument("--plot", default=None, metavar="PATH",
                        help="also save a convergence plot to PATH")
    parser.add_argument("--log-level", default=None,
                        help="logging level (default: from config, else INFO)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level or 'INFO')

    try:
        config = IKConfig(args.config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_BAD_INPUT

    try:
        setup_logging(args.log_level or config.log_level, config.log_file)
    except OSError as e:
        setup_logging(args.log_level or config.log_level)
        logger.warning(f"Could not open log file {config.log_file}: {e}")

    ik_params = config.get_ik_params()
    if args.max_iterations is not None:
        ik_params['max_iterations'] = args.max_iterations

    try:
        Blist = config.screw_axes
        start_time = time.time()
        result = ik_body_iterates(
            Blist,
            config.home,
            config.target_pose,
            config.initial_guess,
            **ik_params
        )
        computation_time = time.time() - start_time
    except (ConfigurationError, IKInputError) as e:
        logger.error(f"Invalid IK problem: {e}")
        return EXIT_BAD_INPUT

    KinematicsMonitor().log_solve(result, computation_time, Blist=Blist)

    if not args.no_export:
        paths = config.get_export_paths()
        if args.plot:
            paths['plot_path'] = args.plot
        report = export_history(result.history, eomg=ik_params['eomg'],
                                ev=ik_params['ev'], **paths)
        if not report.ok:
            logger.warning(f"{len(report.failures)} export(s) failed; solve result unaffected")

    print(f"thetalist = {np.array2string(result.thetalist, precision=4)}")
    print(f"success = {result.converged}")
    return EXIT_CONVERGED if result.converged else EXIT_NOT_CONVERGED


if __name__ == "__main__":
    sys.exit(main())
