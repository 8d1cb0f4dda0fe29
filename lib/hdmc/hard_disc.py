"""
Monte-Carlo simulation of a binary mixture of hard discs

A trial move displaces one randomly chosen disc by a random vector, the
move is accepted if the disc does not overlap with any other disc. Each
species keeps its positions in a dense array, the id of a particle in the
spatial index of its species is its row in that array.
"""
import logging
from enum import IntEnum

import numpy as np

from .analysis import get_area_fraction
from .config import CLOSE_PACKING
from .errors import ConfigurationError
from .geometry import disc_aabb, find_overlaps, overlaps, periodic_wrap
from .packing import place_particles
from .rng import RandomSource
from .spatial import RTreeIndex

logger = logging.getLogger(__name__)


class Species(IntEnum):
    """
    The value is also the tag of the species in the xyz trajectory
    """
    SMALL = 0
    LARGE = 1


class BinaryHardDisc:
    """
    A binary hard disc system in a 2D box

    Example:
        >>> system = BinaryHardDisc(100, 10, 1, 5, box=(30, 30))
        >>> system.fill_hd()
        >>> system.run(n_sweeps=1000, sample_interval=100)
        >>> small, large = system.get_positions()

    Attributes:
        box (tuple): the side lengths of the box
        is_pbc (tuple): the periodicity of each axis
        max_disp (float): the maximum trial displacement, in units of the\
            diameter of the moving disc
        rng (RandomSource): the random numbers of the packing and the moves
        n_sweep (int): the number of finished sweeps
        n_sample (int): the number of samples taken
        attempted (dict): the number of trial moves for each species
        accepted (dict): the number of accepted moves for each species
    """
    def __init__(
            self, n_small, n_large, d_small, d_large, box, is_pbc=(True, True),
            max_disp=0.1, rng=None, max_attempts=100_000, density=None,
            index_type=RTreeIndex,
    ):
        self.n_small = int(n_small)
        self.n_large = int(n_large)
        self.box = tuple(float(L) for L in box)
        self.is_pbc = tuple(bool(p) for p in is_pbc)
        self.max_disp = float(max_disp)
        self.max_attempts = int(max_attempts)
        self.density = density
        self.rng = RandomSource(0) if rng is None else rng
        self.diameters = {
            Species.SMALL: float(d_small), Species.LARGE: float(d_large)
        }
        self.radii = {s: d / 2.0 for s, d in self.diameters.items()}
        self.__index_type = index_type
        self.__check()

        self.__positions = {
            Species.SMALL: np.zeros((self.n_small, 2)),
            Species.LARGE: np.zeros((self.n_large, 2)),
        }
        self.__indices = {}
        self.n_sweep = 0
        self.n_sample = 0
        self.attempted = {s: 0 for s in Species}
        self.accepted = {s: 0 for s in Species}

    @classmethod
    def from_parameters(cls, params, rng=None, **kwargs):
        """
        Create the system from :class:`hdmc.config.Parameters`, with a
            square periodic box. Other keyword arguments are passed to the
            constructor.
        """
        if rng is None:
            rng = RandomSource(params.seed)
        return cls(
            params.n_small, params.n_large, params.d_small, params.d_large,
            box=params.box, is_pbc=(True, True), max_disp=params.max_disp,
            rng=rng, max_attempts=params.max_attempts, density=params.density,
            **kwargs,
        )

    def __check(self):
        if len(self.box) != 2 or len(self.is_pbc) != 2:
            raise ConfigurationError("Only 2D boxes are supported")
        if min(self.diameters.values()) <= 0:
            raise ConfigurationError("Diameters must be positive")
        if self.n_small < 0 or self.n_large < 0 or self.n_particles == 0:
            raise ConfigurationError("Invalid particle numbers")
        d_max = max(self.diameters.values())
        for L, pbc in zip(self.box, self.is_pbc):
            if pbc and L < 2 * d_max:
                raise ConfigurationError(
                    f"Box ({L}) is smaller than twice the largest interaction range ({d_max})"
                )
            if self.max_disp <= 0 or self.max_disp * d_max >= 0.5 * L:
                raise ConfigurationError(f"Invalid maximum displacement: {self.max_disp}")
        area_fraction = get_area_fraction(
            self.n_small, self.n_large, self.diameters[Species.SMALL],
            self.diameters[Species.LARGE], self.box,
        )
        if area_fraction >= CLOSE_PACKING:
            raise ConfigurationError(
                f"Area fraction {area_fraction:.4f} is above close packing ({CLOSE_PACKING:.4f})"
            )
        if not all(self.is_pbc):
            logger.warning(
                "Non-periodic axes are not confined, discs may leave the box"
            )

    @property
    def n_particles(self):
        return self.n_small + self.n_large

    @property
    def is_filled(self):
        return bool(self.__indices)

    @property
    def acceptance(self):
        """
        dict: the fraction of accepted trial moves for each species
        """
        return {
            s: self.accepted[s] / self.attempted[s] if self.attempted[s] else 0.0
            for s in Species
        }

    def fill_hd(self):
        """
        Fill the box with randomly placed, non-overlapping discs, large
            discs first.
        """
        placed = []
        for species in (Species.LARGE, Species.SMALL):
            n = self.n_large if species == Species.LARGE else self.n_small
            index = self.__index_type(self.box, self.is_pbc, capacity=n)
            self.__positions[species] = place_particles(
                n, self.radii[species], self.box, self.is_pbc, self.rng, index,
                neighbours=placed, max_attempts=self.max_attempts,
                name=species.name.lower(), density=self.density,
            )
            self.__indices[species] = index
            placed.append(
                (self.__positions[species], index, self.radii[species])
            )

    def load_positions(self, positions_small, positions_large):
        """
        Use a given configuration instead of a random one

        Args:
            positions_small (numpy.ndarray): shape (n_small, 2)
            positions_large (numpy.ndarray): shape (n_large, 2)
        """
        given = {Species.SMALL: positions_small, Species.LARGE: positions_large}
        counts = {Species.SMALL: self.n_small, Species.LARGE: self.n_large}
        positions, indices = {}, {}
        for species in Species:
            pos = np.array(given[species], dtype=float).reshape((-1, 2))
            if len(pos) != counts[species]:
                raise ValueError(
                    f"Expecting {counts[species]} {species.name.lower()} particles, got {len(pos)}"
                )
            index = self.__index_type(self.box, self.is_pbc, capacity=len(pos))
            for i, p in enumerate(pos):
                pos[i] = periodic_wrap(p, self.box, self.is_pbc)
                index.insert(i, disc_aabb(pos[i], self.radii[species]))
            positions[species] = pos
            indices[species] = index
        n_overlap = len(find_overlaps(*self.__stack(positions), self.box, self.is_pbc))
        if n_overlap > 0:
            raise ValueError(f"The configuration has {n_overlap} overlapping pairs")
        self.__positions = positions
        self.__indices = indices

    def trial_move(self):
        """
        Attempt to displace one randomly chosen disc

        Return:
            bool: True if the move was accepted
        """
        particle = self.rng.integer(0, self.n_particles - 1)
        if particle < self.n_small:
            species = Species.SMALL
        else:
            species = Species.LARGE
            particle -= self.n_small
        radius = self.radii[species]
        step = self.max_disp * self.diameters[species]

        old = self.__positions[species][particle]
        x = old[0] + step * (2.0 * self.rng.uniform() - 1.0)
        y = old[1] + step * (2.0 * self.rng.uniform() - 1.0)
        position = periodic_wrap((x, y), self.box, self.is_pbc)
        aabb = disc_aabb(position, radius)
        self.attempted[species] += 1

        for other in Species:  # small first, then large
            cutoff = (radius + self.radii[other]) ** 2
            others = self.__positions[other]
            for j in self.__indices[other].query(aabb):
                if other == species and j == particle:
                    continue
                if overlaps(position, others[j], self.box, self.is_pbc, cutoff):
                    return False

        self.__positions[species][particle] = position
        self.__indices[species].update(particle, aabb)
        self.accepted[species] += 1
        return True

    def sweep(self):
        """
        Perform one Monte-Carlo sweep, i.e. one trial move per disc on average
        """
        if not self.is_filled:
            raise RuntimeError("The system is empty, call fill_hd or load_positions first")
        for _ in range(self.n_particles):
            self.trial_move()
        self.n_sweep += 1

    def run(self, n_sweeps, sample_interval, sampler=None):
        """
        Perform many sweeps, and sample the configuration regularly

        Args:
            n_sweeps (int): the number of sweeps
            sample_interval (int): take a sample after every\
                [sample_interval] sweeps
            sampler (callable): it is called as `sampler(system)` for each\
                sample, after all moves of the sweep
        """
        if n_sweeps < 0:
            raise ConfigurationError(f"Negative number of sweeps: {n_sweeps}")
        if sample_interval <= 0:
            raise ConfigurationError(f"Invalid sample interval: {sample_interval}")
        n_samples = n_sweeps // sample_interval
        width = len(str(n_samples))
        sample_flag = 0
        for _ in range(n_sweeps):
            self.sweep()
            sample_flag += 1
            if sample_flag == sample_interval:
                sample_flag = 0
                self.n_sample += 1
                if sampler is not None:
                    sampler(self)
                logger.info(
                    f"Saved configuration {self.n_sample:>{width}} of {n_samples}"
                )

    def get_positions(self):
        """
        Return:
            tuple: copies of the positions of the small and the large discs,\
                shape (n_small, 2) and (n_large, 2)
        """
        return (
            self.__positions[Species.SMALL].copy(),
            self.__positions[Species.LARGE].copy(),
        )

    def get_index(self, species):
        return self.__indices[Species(species)]

    def get_box(self):
        return list(self.box)

    def report_overlap(self):
        """
        Check every pair of discs for overlaps

        Return:
            bool: True if any pair of discs overlaps
        """
        positions, radii = self.__stack(self.__positions)
        return len(find_overlaps(positions, radii, self.box, self.is_pbc)) > 0

    def __stack(self, positions):
        radii = np.concatenate([
            np.full(len(positions[s]), self.radii[s]) for s in Species
        ])
        return np.concatenate([positions[s] for s in Species]), radii

    def __repr__(self):
        acc = self.acceptance
        lines = [f"Binary hard disc system ({self.n_particles} particles)"]
        for s in Species:
            n = self.n_small if s == Species.SMALL else self.n_large
            lines.append(
                f"  {s.name.lower():>5}: N = {n}, diameter = {self.diameters[s]}, "
                f"acceptance = {acc[s]:.4f}"
            )
        lines.append(
            f"  box: {self.box[0]:.4f} x {self.box[1]:.4f}, periodic = {self.is_pbc}"
        )
        lines.append(f"  sweeps: {self.n_sweep}, samples: {self.n_sample}")
        return "\n".join(lines)
