"""
Adapters for native models fitted on explicit input and output tables.
"""

import logging
from typing import Any, List, Union

import numpy as np
import numpy.typing as npt
import pandas as pd

from pytools.api import AllTracker

from ..errors import MissingNamesError
from .base import ModelAdapter

log = logging.getLogger(__name__)

__all__ = [
    "ArrayAdapter",
    "TableAdapter",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class TableAdapter(ModelAdapter):
    """
    Adapter for a model fitted on explicit, named input and output tables.

    The explanatory names are the column names of the input table, and the
    response names are the column names of the output table, or the name of the
    output series.
    Both tables must be named: names are the keys of the resulting profiles, so
    unnamed tables are rejected rather than named by position.
    """

    #: The model to be profiled.
    model: Any

    def __init__(
        self,
        model: Any,
        *,
        inputs: pd.DataFrame,
        outputs: Union[pd.Series, pd.DataFrame],
    ) -> None:
        """
        :param model: a fitted model with a ``predict`` method, accepting a data
            frame of inputs
        :param inputs: the input table the model was fitted on
        :param outputs: the output table the model was fitted on
        :raise MissingNamesError: if the input or output table has no names
        """
        if not callable(getattr(model, "predict", None)):
            raise TypeError(
                f"arg model must have a predict method: {type(model).__qualname__}"
            )

        if not isinstance(inputs, pd.DataFrame) or not _has_string_names(
            inputs.columns
        ):
            raise MissingNamesError(
                "input variables must have names: arg inputs must be a data frame "
                "with string column names"
            )

        response_names: List[str]
        if isinstance(outputs, pd.Series):
            if not isinstance(outputs.name, str):
                raise MissingNamesError(
                    "response variables must have names: arg outputs is a series "
                    "without a name"
                )
            response_names = [outputs.name]
        elif isinstance(outputs, pd.DataFrame) and _has_string_names(outputs.columns):
            response_names = outputs.columns.to_list()
        else:
            raise MissingNamesError(
                "response variables must have names: arg outputs must be a named "
                "series, or a data frame with string column names"
            )

        super().__init__(inputs=inputs, response_names=response_names)

        self.model = model

    def _predict_native(self, x: pd.DataFrame) -> Any:
        return self.model.predict(x.loc[:, self.explanatory_names])


class ArrayAdapter(ModelAdapter):
    """
    Adapter for a model fitted on unnamed arrays, which only knows the number of
    its inputs and outputs.

    The input table used for fitting the model must be passed explicitly.
    The explanatory variables are named ``X1``, ``X2``, …, and the responses
    ``Y1``, ``Y2``, …, in input and output order.

    The number of outputs is taken from the model's ``n_outputs_`` attribute,
    as defined by :mod:`sklearn` estimators such as
    :class:`~sklearn.neural_network.MLPRegressor`. Linear models without this
    attribute have one row of coefficients per output in ``coef_``; all other
    models are assumed to have a single output.
    """

    #: Prefix of generated explanatory variable names.
    PREFIX_EXPLANATORY = "X"

    #: Prefix of generated response names.
    PREFIX_RESPONSE = "Y"

    #: The model to be profiled.
    model: Any

    def __init__(
        self,
        model: Any,
        *,
        inputs: Union[pd.DataFrame, npt.ArrayLike],
    ) -> None:
        """
        :param model: a fitted model with a ``predict`` method, accepting a
            2d array of inputs
        :param inputs: the input table the model was fitted on; any column names
            are replaced by generated names
        """
        if not callable(getattr(model, "predict", None)):
            raise TypeError(
                f"arg model must have a predict method: {type(model).__qualname__}"
            )

        values = np.asarray(inputs)
        if values.ndim != 2:
            raise ValueError(
                f"arg inputs must be a 2d table, but has {values.ndim} dimension(s)"
            )

        n_inputs = values.shape[1]

        n_features_in = getattr(model, "n_features_in_", None)
        if n_features_in is not None and n_features_in != n_inputs:
            raise ValueError(
                f"arg inputs has {n_inputs} columns, but the model was fitted with "
                f"{n_features_in} inputs"
            )

        n_outputs = _n_outputs(model)

        super().__init__(
            inputs=pd.DataFrame(
                data=values,
                columns=_generate_names(ArrayAdapter.PREFIX_EXPLANATORY, n_inputs),
            ),
            response_names=_generate_names(ArrayAdapter.PREFIX_RESPONSE, n_outputs),
        )

        self.model = model

    def _predict_native(self, x: pd.DataFrame) -> Any:
        return self.model.predict(x.loc[:, self.explanatory_names].to_numpy())


__tracker.validate()


#
# auxiliary functions
#


def _has_string_names(columns: pd.Index) -> bool:
    return len(columns) > 0 and all(isinstance(name, str) for name in columns)


def _generate_names(prefix: str, n: int) -> List[str]:
    return [f"{prefix}{i}" for i in range(1, n + 1)]


def _n_outputs(model: Any) -> int:
    n_outputs = getattr(model, "n_outputs_", None)
    if n_outputs is not None:
        return int(n_outputs)

    # linear models store one row of coefficients per output
    coef = getattr(model, "coef_", None)
    if coef is not None:
        coef = np.asarray(coef)
        n_outputs = coef.shape[0] if coef.ndim == 2 else 1
        log.debug(
            f"{type(model).__name__} does not define attribute n_outputs_; "
            f"inferred {n_outputs} output(s) from attribute coef_"
        )
        return n_outputs

    log.warning(
        f"{type(model).__name__} does not define attributes n_outputs_ or coef_; "
        "assuming a single output"
    )
    return 1
