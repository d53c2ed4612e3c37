'''
Error types raised by the decomposition solvers. 
Every error derives from DecompositionError and from the builtin 
exception a caller would naturally catch for that situation. 
'''

class DecompositionError(Exception):
    """Base class for all errors raised by robust_pca."""


class ConfigurationError(DecompositionError, ValueError):
    """A hyperparameter is out of range. Raised when the config is built."""


class ShapeError(DecompositionError, ValueError):
    """Matrix dimensions are incompatible with the operation."""


class DegenerateInputError(DecompositionError, ValueError):
    """Input carries no signal to decompose (e.g. zero variance)."""


class NumericalError(DecompositionError, ArithmeticError):
    """SVD did not converge, or non-finite values were found."""


class NotFittedError(DecompositionError, RuntimeError):
    """Accessor called before fit()."""
