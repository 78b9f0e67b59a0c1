# body_ik/config.py
"""
YAML configuration for a body-frame IK run.

Layout::

    robot:
      screw_axes: [[0, 0, -1, 2, 0, 0], ...]   # one 6-vector per joint
      home: 4x4
    target:
      pose: 4x4
      initial_guess: [...]
    ik_params:
      eomg: 0.01
      ev: 0.001
      max_iterations: 20
    export:
      log_path: log.txt
      csv_path: iterates.csv
      plot_path: null
    logging:
      level: INFO
      file: null

Environment variables BODY_IK_EOMG, BODY_IK_EV and BODY_IK_MAX_ITERATIONS
override the matching ik_params entries.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

import numpy as np
import yaml

from .export import DEFAULT_CSV_PATH, DEFAULT_LOG_PATH
from .solver import MAX_ITERATIONS

logger = logging.getLogger(__name__)

ENV_PREFIX = "BODY_IK_"

DEFAULT_IK_PARAMS = {
    'eomg': 1e-2,
    'ev': 1e-3,
    'max_iterations': MAX_ITERATIONS,
}

IK_PARAM_TYPES = {
    'eomg': float,
    'ev': float,
    'max_iterations': int,
}


class ConfigurationError(Exception):
    """Custom exception for configuration-related errors."""
    pass


class IKConfig:
    def __init__(self, config_path: str):
        self.config_path = Path(config_path)

        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}")

        if not isinstance(self.config, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        self._validate_config()
        self.ik_params = self._load_ik_params()
        self._apply_env_overrides()

        logger.info(f"Configuration loaded from {config_path}")

    def _validate_config(self):
        required = {
            'robot': ['screw_axes', 'home'],
            'target': ['pose', 'initial_guess'],
        }
        for section, fields in required.items():
            if not isinstance(self.config.get(section), dict):
                raise ConfigurationError(f"Missing required configuration section: {section}")
            for field in fields:
                if field not in self.config[section]:
                    raise ConfigurationError(f"Missing required {section} configuration: {field}")

    def _load_ik_params(self) -> Dict[str, Any]:
        raw = self.config.get('ik_params') or {}
        if not isinstance(raw, dict):
            raise ConfigurationError("ik_params must be a mapping")
        params = dict(DEFAULT_IK_PARAMS)
        for key, value in raw.items():
            if key not in IK_PARAM_TYPES:
                raise ConfigurationError(f"Unknown ik_params entry: {key}")
            params[key] = self._convert(key, value)
        return params

    def _apply_env_overrides(self):
        # Example: BODY_IK_MAX_ITERATIONS=50
        for key in IK_PARAM_TYPES:
            env_value = os.environ.get(ENV_PREFIX + key.upper())
            if env_value is not None:
                self.ik_params[key] = self._convert(key, env_value)
                logger.debug(f"ik_params.{key} overridden from environment: {env_value}")

    @staticmethod
    def _convert(key: str, value):
        # No silent coercion: bools and fractional iteration caps are rejected
        if isinstance(value, bool):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}")
        if IK_PARAM_TYPES[key] is int and isinstance(value, float) and not value.is_integer():
            raise ConfigurationError(f"Invalid value for {key}: {value!r}")
        try:
            return IK_PARAM_TYPES[key](value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}")

    # -------------------- accessors --------------------

    @property
    def screw_axes(self) -> np.ndarray:
        """Screw axes as a 6xn matrix (one column per joint)."""
        return self._array('robot', 'screw_axes').T

    @property
    def home(self) -> np.ndarray:
        return self._array('robot', 'home')

    @property
    def target_pose(self) -> np.ndarray:
        return self._array('target', 'pose')

    @property
    def initial_guess(self) -> np.ndarray:
        return self._array('target', 'initial_guess')

    def _array(self, section: str, key: str) -> np.ndarray:
        try:
            return np.array(self.config[section][key], dtype=float)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{section}.{key} is not a numeric array: {e}")

    def get_ik_params(self) -> Dict[str, Any]:
        return dict(self.ik_params)

    def get_export_paths(self) -> Dict[str, Any]:
        export = self.config.get('export') or {}
        return {
            'log_path': export.get('log_path', DEFAULT_LOG_PATH),
            'csv_path': export.get('csv_path', DEFAULT_CSV_PATH),
            'plot_path': export.get('plot_path'),
        }

    @property
    def log_level(self) -> str:
        return (self.config.get('logging') or {}).get('level', 'INFO')

    @property
    def log_file(self):
        return (self.config.get('logging') or {}).get('file')
