class ConfigurationError(ValueError):
    """
    Invalid simulation parameters, raised before any simulation work starts
    """


class GenerationFailure(RuntimeError):
    """
    The packing generator could not place a particle within the attempt cap

    Attributes:
        species (str): the name of the species being placed
        index (int): the index of the particle that could not be placed
        attempts (int): the number of rejected trial positions
        density (float): the density of the system, if known
    """
    def __init__(self, species, index, attempts, density=None):
        self.species = species
        self.index = index
        self.attempts = attempts
        self.density = density
        msg = f"Failed to place {species} particle #{index} after {attempts} attempts"
        if density is not None:
            msg += f" (density = {density:.4f}), try a lower density"
        super().__init__(msg)


class TrajectoryError(IOError):
    """
    Writing the trajectory file failed, the run can't continue
    """
