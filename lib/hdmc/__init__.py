from . import analysis, geometry, packing, spatial
from .analysis import XYZ, TrajectoryRecorder, dump_xyz
from .config import Parameters
from .errors import ConfigurationError, GenerationFailure, TrajectoryError
from .hard_disc import BinaryHardDisc, Species
from .log import setup_logging
from .rng import RandomSource
from .spatial import RTreeIndex, SpatialIndex
