"""Solver configuration record and YAML loading."""

from dataclasses import MISSING, dataclass, asdict, fields
import math
import numbers

import yaml

from .exceptions import ConfigError, ShapeError


# Parameter names used by earlier versions of the solver
_LEGACY_KEYS = {
    'Beta': 'beta',
    'LambdaBar': 'lambda_bar',
    'Lambda': 'lambda_reg',
    'lambda': 'lambda_reg',
    'N': 'n',
    'IterMax': 'iter_max',
    'NonNegOrth': 'non_neg_orth',
    'isPos': 'non_neg_orth',
    'LargeScale': 'large_scale',
}


@dataclass(frozen=True)
class SolverConfig:
    """
    Immutable parameters of the pFISTA solver.

    Attributes
    ----------
    beta : float
        Geometric decay of the regularization parameter, in (0, 1). Best taken
        very close to 1.
    lambda_bar : float
        Floor of the regularization schedule (e.g. 1e-7), >= 0
    lambda_reg : float
        Initial sparsity regularization parameter, >= 0
    n : int
        Length N of the reconstructed vector (perfect square)
    iter_max : int
        Number of iterations (no early stopping)
    non_neg_orth : bool
        Project each iterate onto the real non-negative orthant
    large_scale : bool
        Transform operator columns one at a time (lower memory, same result)
    n_jobs : int
        joblib workers used on the large-scale path
    """
    beta: float
    lambda_bar: float
    lambda_reg: float
    n: int
    iter_max: int
    non_neg_orth: bool = True
    large_scale: bool = False
    n_jobs: int = 1

    @classmethod
    def from_dict(cls, params):
        """
        Build a config from a mapping.

        Accepts snake_case field names as well as the legacy parameter
        names (``Beta``, ``LambdaBar``, ``Lambda``, ``N``, ``IterMax``,
        ``NonNegOrth``, ``LargeScale``).

        Raises
        ------
        ConfigError
            If a key is unknown or a required field is missing
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in params.items():
            name = _LEGACY_KEYS.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown solver parameter '{key}'")
            kwargs[name] = value

        missing = [f.name for f in fields(cls)
                   if f.name not in kwargs and f.default is MISSING]
        if missing:
            raise ConfigError(f"Missing solver parameters: {', '.join(missing)}")

        config = cls(**kwargs)
        config.validate()
        return config

    def validate(self):
        """
        Check parameter ranges.

        Raises
        ------
        ConfigError
            If beta is not in (0, 1), iter_max is not a positive integer,
            lambda_bar or lambda_reg is negative or not finite, or n_jobs is zero
        ShapeError
            If n is not a perfect square
        """
        if not isinstance(self.beta, numbers.Real) or not 0.0 < self.beta < 1.0:
            raise ConfigError(f"beta must be in (0, 1), got {self.beta}")
        if isinstance(self.iter_max, bool) or not isinstance(self.iter_max, numbers.Integral) \
                or self.iter_max <= 0:
            raise ConfigError(f"iter_max must be a positive integer, got {self.iter_max}")
        if not isinstance(self.lambda_bar, numbers.Real) or not math.isfinite(self.lambda_bar) \
                or self.lambda_bar < 0:
            raise ConfigError(f"lambda_bar must be finite and non-negative, got {self.lambda_bar}")
        if not isinstance(self.lambda_reg, numbers.Real) or not math.isfinite(self.lambda_reg) \
                or self.lambda_reg < 0:
            raise ConfigError(f"lambda_reg must be finite and non-negative, got {self.lambda_reg}")
        if not isinstance(self.n_jobs, numbers.Integral) or self.n_jobs == 0:
            raise ConfigError(f"n_jobs must be a non-zero integer, got {self.n_jobs}")

        if isinstance(self.n, bool) or not isinstance(self.n, numbers.Integral) or self.n <= 0:
            raise ShapeError(f"N must be a positive perfect square, got {self.n}")
        side = math.isqrt(int(self.n))
        if side * side != self.n:
            raise ShapeError(f"N must be a perfect square, got {self.n}")

    def to_dict(self):
        """Return the configuration as a plain dict."""
        return asdict(self)


def as_solver_config(config):
    """Accept a SolverConfig or a mapping; return a validated SolverConfig."""
    if isinstance(config, SolverConfig):
        config.validate()
        return config
    return SolverConfig.from_dict(config)


def load_config_section(config_path, section=None, required=True):
    """
    Read one top-level mapping from a YAML file.

    Parameters
    ----------
    config_path : str or Path
        Path to a YAML file
    section : str or None, optional
        Top-level key to return; the whole document when None
    required : bool, optional
        Raise when the section is absent, otherwise return an empty dict

    Returns
    -------
    dict

    Raises
    ------
    ConfigError
        If the section is missing (and required) or is not a mapping
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if section is not None:
        if not isinstance(config, dict) or section not in config:
            if required:
                raise ConfigError(f"Section '{section}' not found in {config_path}")
            return {}
        config = config[section]

    if not isinstance(config, dict):
        raise ConfigError(f"Parameters in {config_path} must be a mapping")

    return dict(config)


def load_solver_config(config_path, section='solver'):
    """
    Load solver parameters from a YAML file.

    Parameters
    ----------
    config_path : str or Path
        Path to a YAML file, e.g. config/solver_parameters.yaml
    section : str or None, optional
        Top-level key holding the solver parameters, default: 'solver'.
        Use None when the parameters are at the top level.

    Returns
    -------
    SolverConfig

    Examples
    --------
    >>> config = load_solver_config("config/solver_parameters.yaml")
    >>> config.beta
    0.99
    """
    return SolverConfig.from_dict(load_config_section(config_path, section))
