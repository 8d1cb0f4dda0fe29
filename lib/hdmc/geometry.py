"""
Geometry of discs in a (partially) periodic box

The functions working on a single pair are called for every trial move,
they operate on short sequences of python floats and avoid numpy overhead.
The vectorised :func:`find_overlaps` is meant for validation only.
"""
import numpy as np


def periodic_wrap(position, box, is_pbc):
    """
    Put a position back into the box along the periodic axes

    Args:
        position (iterable): the coordinates of a point, shape (dim, )
        box (iterable): the side lengths of the box, shape (dim, )
        is_pbc (iterable): the periodicity of each axis, shape (dim, )

    Return:
        list: the wrapped coordinates, each periodic coordinate
            lies in [0, box)
    """
    wrapped = []
    for x, L, pbc in zip(position, box, is_pbc):
        if pbc and (x < 0 or x >= L):
            x = x % L
            if x >= L:  # x % L rounds up to L for tiny negative x
                x -= L
        wrapped.append(x)
    return wrapped


def minimum_image(a, b, box, is_pbc):
    """
    Get the shortest separation vector a - b considering periodic images

    The box must be at least twice as large as the interaction range,
        then a single shift per axis is enough.

    Args:
        a (iterable): the position of the first point
        b (iterable): the position of the second point
        box (iterable): the side lengths of the box
        is_pbc (iterable): the periodicity of each axis

    Return:
        list: the minimum image separation
    """
    separation = []
    for xa, xb, L, pbc in zip(a, b, box, is_pbc):
        s = xa - xb
        if s < -0.5 * L:
            s += pbc * L
        elif s >= 0.5 * L:
            s -= pbc * L
        separation.append(s)
    return separation


def overlaps(a, b, box, is_pbc, cutoff_sq):
    """
    Check if two discs overlap. Touching discs (distance == cutoff)
        do NOT overlap.

    Args:
        a (iterable): the centre of the first disc
        b (iterable): the centre of the second disc
        box (iterable): the side lengths of the box
        is_pbc (iterable): the periodicity of each axis
        cutoff_sq (float): the squared sum of the two radii

    Return:
        bool: True if the squared distance is strictly below the cutoff
    """
    r_sq = 0.0
    for s in minimum_image(a, b, box, is_pbc):
        r_sq += s * s
    return r_sq < cutoff_sq


def disc_aabb(position, radius):
    """
    The axis-aligned bounding box of a disc, as (x_min, y_min, x_max, y_max)
    """
    x, y = position
    return (x - radius, y - radius, x + radius, y + radius)


def find_overlaps(positions, radii, box, is_pbc):
    """
    Find all overlapping pairs by checking every pair of particles

    Args:
        positions (numpy.ndarray): the positions of all particles, shape (n, dim)
        radii (numpy.ndarray): the radius of each particle, shape (n, )
        box (iterable): the side lengths of the box, shape (dim, )
        is_pbc (iterable): the periodicity of each axis, shape (dim, )

    Return:
        list: the overlapping pairs (i, j) with i < j
    """
    positions = np.asarray(positions, dtype=float)
    radii = np.asarray(radii, dtype=float)
    box = np.asarray(box, dtype=float)
    shift = box * np.asarray(is_pbc, dtype=float)

    diff = positions[:, None, :] - positions[None, :, :]
    diff = np.where(diff < -0.5 * box, diff + shift, diff)
    diff = np.where(diff >= 0.5 * box, diff - shift, diff)
    r_sq = np.einsum("ijk,ijk->ij", diff, diff)
    cutoff = radii[:, None] + radii[None, :]

    mask = np.triu(r_sq < cutoff ** 2, k=1)
    return [(int(i), int(j)) for i, j in zip(*np.nonzero(mask))]
