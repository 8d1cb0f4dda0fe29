import re
import numpy as np
import pandas as pd
from scipy.special import j0

from .errors import TrajectoryError


def dump_xyz(filename, positions_small, positions_large):
    """
    Append one frame of a binary mixture to an xyz file. The small discs\
        have the tag 0, the large discs have the tag 1, and the z coordinate\
        is always 0.

    ..code-block::

        3

        0 1.000000 2.000000 0
        0 4.000000 5.000000 0
        1 7.000000 8.000000 0

    Args:
        filename (str): the name of the xyz file, it can be an existing file
        positions_small (numpy.ndarray): the positions of small discs, shape (n, 2)
        positions_large (numpy.ndarray): the positions of large discs, shape (n, 2)

    Return:
        None
    """
    frame = []
    for tag, positions in enumerate((positions_small, positions_large)):
        positions = np.asarray(positions, dtype=float).reshape((-1, 2))
        n = len(positions)
        frame.append(np.concatenate((
            np.full((n, 1), tag), positions, np.zeros((n, 1))
        ), axis=1))
    frame = np.concatenate(frame, axis=0)
    with open(filename, 'a') as f:
        np.savetxt(
            f, frame, delimiter=' ',
            header='%s\n' % len(frame),
            comments='',
            fmt=['%d', '%.6f', '%.6f', '%d']
        )


class TrajectoryRecorder:
    """
    Write the configurations of a :class:`hdmc.hard_disc.BinaryHardDisc`\
        to an xyz file. The file is emptied when the recorder is created.

    Example:
        >>> recorder = TrajectoryRecorder("trajectory.xyz")
        >>> system.run(n_sweeps=1000, sample_interval=100, sampler=recorder)

    Attributes:
        filename (str): the name of the xyz file
        n_frame (int): the number of frames written
    """
    def __init__(self, filename):
        self.filename = filename
        self.n_frame = 0
        try:
            open(filename, 'w').close()
        except OSError as err:
            raise TrajectoryError(
                f"Can't create the trajectory file {filename}: {err}"
            ) from err

    def __call__(self, system):
        try:
            dump_xyz(self.filename, *system.get_positions())
        except OSError as err:
            raise TrajectoryError(
                f"Failed to write frame {self.n_frame} to {self.filename}: {err}"
            ) from err
        self.n_frame += 1


class XYZ:
    """
    Frame-wise access to the xyz file written by :func:`dump_xyz`.\
        The file is parsed once to locate the frames, a frame is loaded\
        with `pandas.read_csv` only when it is requested.

    Attributes:
        numbers (list): the number of particles in each frame
        __cursors (list): the stream position of the first data line\
            of each frame
    """
    header_pattern = r'(\d+)\n'

    def __init__(self, filename):
        self.filename = filename
        self.numbers = []
        self.__cursors = []
        self.__frame = 0
        self.__f = open(filename, 'r')
        self.__parse()

    def __parse(self):
        self.__f.seek(0)
        line = self.__f.readline()
        while line:
            is_head = re.match(self.header_pattern, line)
            if not is_head:
                raise ValueError(f"Invalid xyz header in {self.filename}: {line!r}")
            n = int(is_head.group(1))
            self.__f.readline()  # the comment line
            self.numbers.append(n)
            self.__cursors.append(self.__f.tell())
            for _ in range(n):
                self.__f.readline()
            line = self.__f.readline()

    def __getitem__(self, i):
        """
        Args:
            i (int or slice): the frame number

        Return:
            np.ndarray: the tag and coordinates of all particles in a frame,\
                shape (n, 4)
        """
        if isinstance(i, slice):
            return [self[f] for f in range(*i.indices(len(self)))]
        if self.numbers[i] == 0:
            return np.empty((0, 4))
        self.__f.seek(self.__cursors[i])
        result = pd.read_csv(
            self.__f, nrows=self.numbers[i], sep=' ',
            header=None, index_col=False,
        ).values
        return result.astype(float).reshape((-1, 4))

    def __len__(self):
        return len(self.numbers)

    def __iter__(self):
        self.__frame = 0
        return self

    def __next__(self):
        if self.__frame < len(self):
            self.__frame += 1
            return self[self.__frame - 1]
        raise StopIteration

    def get_positions(self, i, tag=None):
        """
        Get the 2D positions in frame i, optionally only for one species

        Return:
            np.ndarray: the positions, shape (n, 2)
        """
        frame = self[i]
        if tag is not None:
            frame = frame[frame[:, 0] == tag]
        return frame[:, 1:3]

    def close(self):
        self.__f.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def get_area_fraction(n_small, n_large, d_small, d_large, box):
    """
    The fraction of the box area covered by discs

    Args:
        n_small (int): the number of small discs
        n_large (int): the number of large discs
        d_small (float): the diameter of small discs
        d_large (float): the diameter of large discs
        box (iterable): the side lengths of the box

    Return:
        float: the area fraction
    """
    area = np.pi / 4.0 * (n_small * d_small ** 2 + n_large * d_large ** 2)
    return area / np.prod(box)


def __isf_2d(x1, x2, pbc_box, q):
    """
    Calculate the self intermediate scattering function between two 2D\
        configurations, with the isotropic average J0(q r).

    Args:
        x1 (numpy.ndarray): the particle locations, shape (n, 2)
        x2 (numpy.ndarray): the particle locations, shape (n, 2)
        pbc_box (iterable): the side length of a periodic boundary, use None\
            for non-periodic axes.
        q (float): the wavenumber.

    Return
        float: the value of the self intermediate scattering function
    """
    shift = x2 - x1
    for d in range(2):
        if pbc_box[d] is not None:
            s1d = shift[:, d]
            s1d[s1d >= pbc_box[d] / 2.0] -= pbc_box[d]
            s1d[s1d < -pbc_box[d] / 2.0] += pbc_box[d]
    shift -= shift.mean(0)[np.newaxis, :]
    dist = np.linalg.norm(shift, axis=1)
    return np.mean(j0(q * dist))


def get_isf_2d(trajectory, pbc_box, q=2*np.pi, length=None, sample_num=None):
    """
    Calculate the average isf from trajectory. The displacement between\
        two frames is taken as the minimum image, the frames should be close\
        enough in time.

    Args:
        trajectory (iterable): a collection of positions arranged according\
            to the time, each element has shape (n, 2).
        pbc_box (iterable): the side length of a periodic boundary, [Lx, Ly]
        q (float): the wavenumber.
        length (int): the largest lag time of the isf.
        sample_num (int): the maximum number of points sampled per tau value.

    Return:
        numpy.ndarray: the isf as a function of lag time.
    """
    trajectory = [np.array(frame, dtype=float) for frame in trajectory]
    length_full = len(trajectory)
    if length is None:
        length = length_full
    if sample_num is None:
        sample_num = length_full

    isf = np.zeros(length)
    count = np.zeros(length)
    for i in range(length_full):
        for j in range(i+1, length_full):
            tau = j - i
            if (tau >= length) or (count[tau] == sample_num):
                continue
            isf[tau] += __isf_2d(trajectory[i], trajectory[j], pbc_box, q)
            count[tau] += 1
    count[0] = 1
    isf[0] = 1
    count[count == 0] = 1
    return isf / count
