"""
Random, overlap-free initial configurations

The particles are placed one after another at uniformly random positions,
a position is redrawn until the particle does not overlap with any placed
particle. Species should be placed from large to small so that the small
particles fill the gaps between the large ones.
"""
import logging

import numpy as np

from .errors import GenerationFailure
from .geometry import disc_aabb, overlaps

logger = logging.getLogger(__name__)


def place_particles(
        n, radius, box, is_pbc, rng, index, neighbours=(),
        max_attempts=100_000, name='particle', density=None
):
    """
    Place n discs in the box with random sequential insertion

    Args:
        n (int): the number of discs to place
        radius (float): the radius of the discs
        box (iterable): the side lengths of the box
        is_pbc (iterable): the periodicity of each axis
        rng (RandomSource): the random number source
        index (SpatialIndex): an empty index of this species, the placed
            discs are inserted into it with their id
        neighbours (iterable): the species placed before, each element is\
            a tuple (positions, index, radius). They are only read.
        max_attempts (int): the maximum number of trial positions per disc
        name (str): the name of the species, for the messages
        density (float): the density of the system, for the messages

    Return:
        numpy.ndarray: the positions of the discs, shape (n, 2)
    """
    positions = np.zeros((n, 2))
    cutoff_self = (2.0 * radius) ** 2
    others = [
        (pos, idx, (radius + r) ** 2) for pos, idx, r in neighbours
    ]
    logger.info(f"Inserting {n} {name} particles")
    total_attempts = 0
    for i in range(n):
        for attempt in range(1, max_attempts + 1):
            position = (box[0] * rng.uniform(), box[1] * rng.uniform())
            aabb = disc_aabb(position, radius)
            is_overlap = False
            for pos, idx, cutoff in others:
                if any(
                    overlaps(position, pos[j], box, is_pbc, cutoff)
                    for j in idx.query(aabb)
                ):
                    is_overlap = True
                    break
            if not is_overlap and i > 0:
                is_overlap = any(
                    overlaps(position, positions[j], box, is_pbc, cutoff_self)
                    for j in index.query(aabb)
                )
            if not is_overlap:
                break
        else:
            raise GenerationFailure(name, i, max_attempts, density)
        total_attempts += attempt
        index.insert(i, aabb)
        positions[i] = position
    logger.info(
        f"Inserted {n} {name} particles with {total_attempts} trial positions"
    )
    return positions
