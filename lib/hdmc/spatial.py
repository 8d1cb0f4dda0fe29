"""
Broad-phase spatial indices for discs in a periodic box

An index stores one axis-aligned bounding box per particle of a single
species. Queries return candidate ids whose box intersects the query box
(or one of its periodic images). Candidates may be false positives, the
exact test is :func:`hdmc.geometry.overlaps`.
"""
import logging
from abc import ABC, abstractmethod

from rtree.index import Index, Property

logger = logging.getLogger(__name__)


class SpatialIndex(ABC):
    """
    The interface that the packing generator and the Monte-Carlo
        engine require from a spatial index

    Attributes:
        box (tuple): the side lengths of the box
        is_pbc (tuple): the periodicity of each axis
        capacity (int): the expected number of entries, a sizing hint
    """
    def __init__(self, box, is_pbc, capacity=0):
        self.box = tuple(float(L) for L in box)
        self.is_pbc = tuple(bool(p) for p in is_pbc)
        self.capacity = int(capacity)
        if len(self.box) != len(self.is_pbc):
            raise ValueError("box and is_pbc must have the same dimension")

    @abstractmethod
    def insert(self, pid, aabb):
        """
        Register a new entry

        Args:
            pid (int): the id of the particle, unique in this index
            aabb (tuple): the bounding box, (x_min, y_min, x_max, y_max)
        """

    @abstractmethod
    def update(self, pid, aabb):
        """
        Replace the bounding box of an existing entry
        """

    @abstractmethod
    def query(self, aabb):
        """
        Get the ids of all entries whose bounding box intersects
            the given box, including the periodic images

        Return:
            list: the sorted ids of the candidates
        """

    @abstractmethod
    def __len__(self): pass

    @abstractmethod
    def __contains__(self, pid): pass

    def __repr__(self):
        return f"<{self.__class__.__name__}: {len(self)} entries, box={self.box}>"


class RTreeIndex(SpatialIndex):
    """
    A spatial index backed by an R-tree (libspatialindex)

    The boxes are stored as they are, a box of a particle close to the
        edge of the box extends beyond the edge. The periodic boundary is
        handled at query time by also searching the shifted images of the
        query box.
    """
    def __init__(self, box, is_pbc, capacity=0):
        super().__init__(box, is_pbc, capacity)
        if len(self.box) != 2:
            raise ValueError("RTreeIndex only supports 2D boxes")
        self.__tree = Index(properties=Property(dimension=2))
        self.__aabbs = {}
        self.__max_half_width = 0.0

    def insert(self, pid, aabb):
        if pid in self.__aabbs:
            raise KeyError(f"Duplicated id in the index: {pid}")
        aabb = tuple(float(v) for v in aabb)
        self.__tree.insert(pid, aabb)
        self.__aabbs[pid] = aabb
        self.__track_size(aabb)

    def update(self, pid, aabb):
        if pid not in self.__aabbs:
            raise KeyError(f"Can't update a missing id: {pid}")
        aabb = tuple(float(v) for v in aabb)
        self.__tree.delete(pid, self.__aabbs[pid])
        self.__tree.insert(pid, aabb)
        self.__aabbs[pid] = aabb
        self.__track_size(aabb)

    def query(self, aabb):
        if not self.__aabbs:
            return []
        found = set()
        for image in self.__images(aabb):
            found.update(self.__tree.intersection(image))
        return sorted(found)

    def get_aabb(self, pid):
        return self.__aabbs[pid]

    def __len__(self):
        return len(self.__aabbs)

    def __contains__(self, pid):
        return pid in self.__aabbs

    def __track_size(self, aabb):
        half = max(aabb[2] - aabb[0], aabb[3] - aabb[1]) / 2.0
        if half > self.__max_half_width:
            self.__max_half_width = half

    def __images(self, aabb):
        """
        The query box and its periodic images that could touch a stored box.
            A stored box never reaches further than the largest half width
            outside of the simulation box.
        """
        margin = 2.0 * self.__max_half_width
        shifts = []
        for d, (L, pbc) in enumerate(zip(self.box, self.is_pbc)):
            lo, hi = aabb[d], aabb[d + 2]
            shift = [0.0]
            if pbc:
                if lo < margin:
                    shift.append(L)
                if hi > L - margin:
                    shift.append(-L)
            shifts.append(shift)
        for sx in shifts[0]:
            for sy in shifts[1]:
                yield (aabb[0] + sx, aabb[1] + sy, aabb[2] + sx, aabb[3] + sy)
