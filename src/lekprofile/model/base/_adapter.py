"""
Core implementation of :mod:`lekprofile.model.base`
"""

import logging
from abc import ABCMeta, abstractmethod
from typing import Any, List, Sequence

import numpy as np
import pandas as pd

from pytools.api import AllTracker, to_list

from ...errors import (
    InsufficientVariablesError,
    MissingNamesError,
    PredictionFailure,
)

log = logging.getLogger(__name__)

__all__ = [
    "ModelAdapter",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class ModelAdapter(metaclass=ABCMeta):
    """
    Uniform view of a fitted model, as required to compute Lek profiles.

    Fitted models come in many shapes with no common interface; an adapter
    resolves the four things a Lek profile needs from them:

    - :attr:`.inputs`: the explanatory input matrix, with one named column per
      explanatory variable and one row per observation
    - :attr:`.explanatory_names`: the names of the explanatory variables
    - :attr:`.response_names`: the names of the model's outputs
    - :meth:`.predict`: a function mapping an input matrix to a matrix of
      predicted responses

    The adapter only reads from the model it wraps, and :meth:`.predict` is the
    only place where the model's native prediction routine is invoked.

    Support for a new kind of model is added by implementing a new subclass.
    """

    #: The name of the column index of prediction data frames.
    IDX_RESPONSE = "response"

    def __init__(self, *, inputs: pd.DataFrame, response_names: Sequence[str]) -> None:
        """
        :param inputs: the explanatory input matrix
        :param response_names: the names of the model outputs, in output order
        :raise InsufficientVariablesError: if the input matrix has fewer than two
            columns
        :raise MissingNamesError: if the input matrix has non-string column names,
            or no response names are given
        """
        if not isinstance(inputs, pd.DataFrame):
            raise TypeError(
                "arg inputs must be a data frame, but is a "
                f"{type(inputs).__qualname__}"
            )

        explanatory_names = inputs.columns.to_list()

        unnamed = [name for name in explanatory_names if not isinstance(name, str)]
        if unnamed:
            raise MissingNamesError(
                f"input variables must be named with strings, but got {unnamed}"
            )

        if len(explanatory_names) < 2:
            raise InsufficientVariablesError(
                "Lek profiles require more than one input variable, but got "
                f"{explanatory_names}"
            )

        if len(set(explanatory_names)) < len(explanatory_names):
            raise ValueError(
                f"input variable names must be unique, but got {explanatory_names}"
            )

        if len(inputs) == 0:
            raise ValueError("arg inputs must contain at least one observation")

        non_numeric = [
            name
            for name, dtype in inputs.dtypes.items()
            if not pd.api.types.is_numeric_dtype(dtype)
            or pd.api.types.is_bool_dtype(dtype)
        ]
        if non_numeric:
            raise TypeError(
                f"input variables must be numeric and not boolean, but got {non_numeric}"
            )

        response_list: List[str] = to_list(
            response_names, element_type=str, arg_name="response_names"
        )

        if not response_list:
            raise MissingNamesError("at least one response name is required")

        if len(set(response_list)) < len(response_list):
            raise ValueError(f"response names must be unique, but got {response_list}")

        self._inputs = inputs
        self._explanatory_names: List[str] = explanatory_names
        self._response_names = response_list

    @property
    def inputs(self) -> pd.DataFrame:
        """
        The explanatory input matrix, with one column per explanatory variable.
        """
        return self._inputs

    @property
    def explanatory_names(self) -> List[str]:
        """
        The names of the explanatory variables, in the column order of
        :attr:`.inputs`.
        """
        return self._explanatory_names

    @property
    def response_names(self) -> List[str]:
        """
        The names of the responses predicted by the model, in output order.
        """
        return self._response_names

    def predict(self, x: pd.DataFrame) -> pd.DataFrame:
        """
        Predict the responses for the given input matrix, using the native
        prediction routine of the model.

        :param x: the input matrix, with the same columns as :attr:`.inputs`
        :return: a data frame with the same row index as ``x``, and one column per
            response name
        :raise PredictionFailure: if the native prediction routine fails, or
            returns output of the wrong shape
        """

        try:
            predictions = self._predict_native(x)
        except Exception as cause:
            raise PredictionFailure(
                f"prediction failed for {type(self).__name__}: {cause}"
            ) from cause

        return self._to_frame(predictions, index=x.index)

    @abstractmethod
    def _predict_native(self, x: pd.DataFrame) -> Any:
        # call the native prediction routine of the model; the result may be a
        # series, a data frame, or an array with 1 or 2 dimensions
        pass

    def _to_frame(self, predictions: Any, index: pd.Index) -> pd.DataFrame:
        # convert predictions to a data frame with one column per response
        response_names = self._response_names

        # data frames with named columns are matched to responses by name
        if isinstance(predictions, pd.DataFrame) and all(
            isinstance(label, str) for label in predictions.columns
        ):
            labels = predictions.columns.to_list()
            if len(labels) != len(response_names) or set(labels) != set(
                response_names
            ):
                raise PredictionFailure(
                    f"expected predictions for responses {response_names}, "
                    f"but got columns {labels}"
                )
            predictions = predictions.loc[:, response_names]

        try:
            if isinstance(predictions, (pd.Series, pd.DataFrame)):
                values = predictions.to_numpy(dtype=np.float64)
            else:
                values = np.asarray(predictions, dtype=np.float64)
        except (TypeError, ValueError) as cause:
            raise PredictionFailure(
                f"predictions must be numeric, but got a {type(predictions).__name__}"
            ) from cause

        if values.ndim == 1:
            values = values.reshape(-1, 1)

        expected_shape = (len(index), len(response_names))
        if values.shape != expected_shape:
            raise PredictionFailure(
                f"expected predictions with shape {expected_shape} "
                f"(observations, responses), but got shape {values.shape}"
            )

        return pd.DataFrame(
            data=values,
            index=index,
            columns=pd.Index(response_names, name=ModelAdapter.IDX_RESPONSE),
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(explanatory_names={self._explanatory_names!r}, "
            f"response_names={self._response_names!r})"
        )


__tracker.validate()
