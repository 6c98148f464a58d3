"""
Implementation of :class:`.FunctionAdapter`.
"""

import logging
from typing import Any, Optional, Sequence

import pandas as pd

from pytools.api import AllTracker

from .._types import PredictFunction
from .base import ModelAdapter

log = logging.getLogger(__name__)

__all__ = [
    "FunctionAdapter",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class FunctionAdapter(ModelAdapter):
    """
    Adapter for a plain prediction function.

    The function is called with a data frame of explanatory variables, and must
    return the predicted responses as a series, a data frame, or an array with
    one row per observation.
    """

    #: The default name of the response of a single-output function.
    DEFAULT_RESPONSE_NAMES = ("Y1",)

    #: The function to be profiled.
    function: PredictFunction

    def __init__(
        self,
        function: PredictFunction,
        *,
        inputs: pd.DataFrame,
        response_names: Optional[Sequence[str]] = None,
    ) -> None:
        """
        :param function: the prediction function
        :param inputs: the input matrix, with one named column per explanatory
            variable
        :param response_names: the names of the function's outputs, in output
            order (default: a single output named ``Y1``)
        """
        if not callable(function):
            raise TypeError(
                f"arg function must be callable: {type(function).__qualname__}"
            )

        super().__init__(
            inputs=inputs,
            response_names=(
                FunctionAdapter.DEFAULT_RESPONSE_NAMES
                if response_names is None
                else response_names
            ),
        )

        self.function = function

    def _predict_native(self, x: pd.DataFrame) -> Any:
        return self.function(x)


__tracker.validate()
