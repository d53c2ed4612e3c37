from __future__ import annotations
from typing import Optional, Union
from numpy.typing import NDArray, ArrayLike

from .BaseConfig import BaseConfig, RPCAConfig
from .exceptions import NotFittedError

'''
Base solver class and interface. 
Basic requirements for all solvers: fit, predict, check_fitted. 
'''

class DecompositionSolver:
    """Abstract base class for matrix decompositions."""
    def __init__(self, config: Optional[Union[BaseConfig, RPCAConfig]] = None):
        self.config = config
        self._fitted = False

    def fit(self, X: ArrayLike):
        raise NotImplementedError

    def predict(self) -> NDArray:
        raise NotImplementedError

    def _check_fitted(self):
        if not self._fitted:
            raise NotFittedError(f"Call fit() before using {type(self).__name__}.")

    @staticmethod
    def _readonly(A: NDArray) -> NDArray:
        view = A.view()
        view.flags.writeable = False
        return view
