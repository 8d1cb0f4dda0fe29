import configparser
from dataclasses import dataclass, fields

import numpy as np

from .errors import ConfigurationError

# area fraction of the hexagonal close packing of identical discs
CLOSE_PACKING = np.pi / (2.0 * np.sqrt(3.0))

# (section, key) in the ini file -> field of Parameters
INI_KEYS = {
    ("System", "n_small"): "n_small",
    ("System", "n_large"): "n_large",
    ("System", "d_small"): "d_small",
    ("System", "d_large"): "d_large",
    ("System", "density"): "density",
    ("Run", "n_sweeps"): "n_sweeps",
    ("Run", "sample_interval"): "sample_interval",
    ("Run", "max_disp"): "max_disp",
    ("Run", "seed"): "seed",
    ("Run", "max_attempts"): "max_attempts",
    ("Run", "filename"): "filename",
}


@dataclass
class Parameters:
    """
    The parameters of a binary hard disc simulation

    Attributes:
        n_sweeps (int): the number of Monte-Carlo sweeps
        sample_interval (int): the number of sweeps between two samples
        n_small (int): the number of small particles
        n_large (int): the number of large particles
        d_small (float): the diameter of the small particles
        d_large (float): the diameter of the large particles
        density (float): sets the box size, see `box_length`
        max_disp (float): the maximum trial displacement, in units of
            the diameter of the moving particle
        seed (int): the seed of the random number generator
        max_attempts (int): the maximum number of trial positions for
            placing one particle in the initial configuration
        filename (str): the name of the trajectory file
    """
    n_sweeps: int = 10000
    sample_interval: int = 100
    n_small: int = 1000
    n_large: int = 100
    d_small: float = 1.0
    d_large: float = 10.0
    density: float = 0.1
    max_disp: float = 0.1
    seed: int = 0
    max_attempts: int = 100_000
    filename: str = "trajectory.xyz"

    def __post_init__(self):
        self.validate()

    @property
    def box_length(self):
        return np.sqrt(
            np.pi * (self.n_small * self.d_small + self.n_large * self.d_large)
            / (4.0 * self.density)
        )

    @property
    def box(self):
        return (self.box_length, self.box_length)

    @property
    def radius_small(self):
        return 0.5 * self.d_small

    @property
    def radius_large(self):
        return 0.5 * self.d_large

    @property
    def n_particles(self):
        return self.n_small + self.n_large

    @property
    def n_samples(self):
        return self.n_sweeps // self.sample_interval

    @property
    def area_fraction(self):
        area = np.pi / 4.0 * (
            self.n_small * self.d_small ** 2 + self.n_large * self.d_large ** 2
        )
        return area / self.box_length ** 2

    def validate(self):
        """
        Check the parameters, raise ConfigurationError for the first
            invalid one
        """
        if self.d_small <= 0 or self.d_large <= 0:
            raise ConfigurationError(
                f"Diameters must be positive, got {self.d_small} and {self.d_large}"
            )
        if self.n_small < 0 or self.n_large < 0 or self.n_particles == 0:
            raise ConfigurationError(
                f"Invalid particle numbers: {self.n_small} small and {self.n_large} large"
            )
        if self.density <= 0:
            raise ConfigurationError(f"Density must be positive, got {self.density}")
        if self.area_fraction >= CLOSE_PACKING:
            raise ConfigurationError(
                f"Density {self.density} leads to an area fraction of "
                f"{self.area_fraction:.4f}, above close packing ({CLOSE_PACKING:.4f})"
            )
        d_max = max(self.d_small, self.d_large)
        if self.box_length < 2 * d_max:
            raise ConfigurationError(
                f"Box ({self.box_length:.4f}) is smaller than twice the "
                f"largest interaction range ({d_max})"
            )
        if self.n_sweeps < 0:
            raise ConfigurationError(f"Negative number of sweeps: {self.n_sweeps}")
        if self.sample_interval <= 0:
            raise ConfigurationError(
                f"Sample interval must be positive, got {self.sample_interval}"
            )
        if self.max_disp <= 0 or self.max_disp * d_max >= 0.5 * self.box_length:
            raise ConfigurationError(f"Invalid maximum displacement: {self.max_disp}")
        if self.max_attempts <= 0:
            raise ConfigurationError(
                f"Maximum attempts must be positive, got {self.max_attempts}"
            )

    @classmethod
    def from_ini(cls, filename):
        """
        Load the parameters from an ini file, the missing values take
            the default values

        ..code-block::

            [System]
            n_small = 1000
            density = 0.1

            [Run]
            n_sweeps = 1e4

        Args:
            filename (str): the path to the ini file

        Return:
            Parameters: the validated parameters
        """
        conf = configparser.ConfigParser()
        if not conf.read(filename):
            raise ConfigurationError(f"Can't read the configuration file: {filename}")
        types = {f.name: f.type for f in fields(cls)}
        kwargs = {}
        for section in ("System", "Run"):
            if section not in conf:
                continue
            for key, value in conf[section].items():
                name = INI_KEYS.get((section, key))
                if name is None:
                    raise ConfigurationError(f"Unknown option [{section}] {key}")
                kwargs[name] = _convert(value, types[name], key)
        return cls(**kwargs)


def _convert(value, kind, key):
    """
    Numbers like 1e4 are allowed for integer options
    """
    try:
        if kind in (int, "int"):
            return int(float(value))
        if kind in (float, "float"):
            return float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid value for {key}: {value}") from None
    return value
