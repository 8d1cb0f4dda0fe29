import numpy as np


class RandomSource:
    """
    A seeded stream of random numbers, shared by the packing and the
        Monte-Carlo moves. The numbers are drawn one at a time so that the
        order of the draws, and hence the trajectory, is reproducible.

    Attributes:
        seed (int): the seed of the Mersenne-Twister generator
    """
    def __init__(self, seed=0):
        self.seed = seed
        self.__generator = np.random.Generator(np.random.MT19937(seed))

    def uniform(self):
        """
        Return:
            float: a uniform random number in [0, 1)
        """
        return float(self.__generator.random())

    def integer(self, lo, hi):
        """
        Return:
            int: a uniform random integer in [lo, hi], both ends included
        """
        return int(self.__generator.integers(lo, hi, endpoint=True))

    def __repr__(self):
        return f"<RandomSource: MT19937, seed={self.seed}>"
