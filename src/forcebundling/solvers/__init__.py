from forcebundling.solvers.compatibility import compatibility_matrix, compute_compatibility_lists
from forcebundling.solvers.forces import electrostatic_forces, resulting_forces, spring_forces
from forcebundling.solvers.subdivision import SubdivisionStore, resample
from forcebundling.solvers.solver import BundlingSolver

__all__ = [
    "BundlingSolver",
    "SubdivisionStore",
    "compatibility_matrix",
    "compute_compatibility_lists",
    "electrostatic_forces",
    "resample",
    "resulting_forces",
    "spring_forces",
]
