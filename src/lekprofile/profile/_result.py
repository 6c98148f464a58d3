"""
Implementation of :class:`.LekProfile`.
"""

import logging
from typing import Iterable, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from pytools.api import AllTracker

from .._types import FloatArray

log = logging.getLogger(__name__)

__all__ = [
    "LekProfile",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class LekProfile:
    """
    The profile curves of a Lek profile, as a single table in long form.

    There is one curve for each combination of explanatory variable, split level,
    and response.
    Each curve comprises :attr:`.steps` points, pairing a value of the swept
    explanatory variable with the response predicted at that value.
    """

    #: The profile curves as a data frame with a :class:`~pandas.RangeIndex`
    #: and the following columns:
    #:
    #: - :attr:`.COL_EXPLANATORY`: the name of the swept explanatory variable
    #: - :attr:`.COL_SPLIT`: the quantile probability at which all other
    #:   explanatory variables were held constant
    #: - :attr:`.COL_RESPONSE`: the name of the predicted response
    #: - :attr:`.COL_SWEPT`: the value of the swept explanatory variable
    #: - :attr:`.COL_PREDICTED`: the predicted response
    #:
    #: Rows are ordered by explanatory variable, split level, and response, in the
    #: order given at construction, and then by sweep step.
    data: pd.DataFrame

    #: The number of points per curve.
    steps: int

    #: The split levels, in the order they were profiled.
    split_vals: List[float]

    #: The names of the profiled explanatory variables.
    explanatory_names: List[str]

    #: The names of the responses.
    response_names: List[str]

    #: The name of the column holding the explanatory variable name.
    COL_EXPLANATORY = "explanatory_name"

    #: The name of the column holding the split level.
    COL_SPLIT = "split_level"

    #: The name of the column holding the response name.
    COL_RESPONSE = "response_name"

    #: The name of the column holding the values of the swept variable.
    COL_SWEPT = "swept_value"

    #: The name of the column holding the predicted response.
    COL_PREDICTED = "predicted_response"

    def __init__(
        self,
        *,
        sweeps: Mapping[Tuple[str, float], Tuple[FloatArray, pd.DataFrame]],
        explanatory_names: Iterable[str],
        split_vals: Iterable[float],
        response_names: Iterable[str],
        steps: int,
    ) -> None:
        """
        :param sweeps: the results of all sweeps, indexed by explanatory variable
            name and split level; each result is a tuple of the swept values and a
            data frame of predictions, with one column per response
        :param explanatory_names: the names of the profiled explanatory variables
        :param split_vals: the profiled split levels
        :param response_names: the names of the responses
        :param steps: the number of points per curve
        """
        self.explanatory_names = list(explanatory_names)
        self.split_vals = list(split_vals)
        self.response_names = list(response_names)
        self.steps = steps

        explanatory_col: List[str] = []
        split_col: List[FloatArray] = []
        response_col: List[str] = []
        swept_col: List[FloatArray] = []
        predicted_col: List[FloatArray] = []

        for explanatory_name in self.explanatory_names:
            for split_val in self.split_vals:
                swept, predictions = sweeps[explanatory_name, split_val]
                if len(swept) != steps or len(predictions) != steps:
                    raise ValueError(
                        f"sweep of {explanatory_name} at split {split_val} has "
                        f"{len(predictions)} points, but {steps} are required"
                    )
                for response_name in self.response_names:
                    explanatory_col.extend([explanatory_name] * steps)
                    split_col.append(np.full(steps, split_val, dtype=np.float64))
                    response_col.extend([response_name] * steps)
                    swept_col.append(np.asarray(swept, dtype=np.float64))
                    predicted_col.append(
                        predictions.loc[:, response_name].to_numpy(dtype=np.float64)
                    )

        self.data = pd.DataFrame(
            {
                LekProfile.COL_EXPLANATORY: pd.Series(explanatory_col, dtype=object),
                LekProfile.COL_SPLIT: _concatenate(split_col),
                LekProfile.COL_RESPONSE: pd.Series(response_col, dtype=object),
                LekProfile.COL_SWEPT: _concatenate(swept_col),
                LekProfile.COL_PREDICTED: _concatenate(predicted_col),
            }
        )

    def curve(
        self, explanatory_name: str, split_level: float, response_name: str
    ) -> pd.Series:
        """
        Get a single profile curve.

        :param explanatory_name: the name of the swept explanatory variable
        :param split_level: the split level of the curve
        :param response_name: the name of the response
        :return: the predicted responses, indexed by the values of the swept
            variable
        """
        data = self.data
        mask = (
            (data.loc[:, LekProfile.COL_EXPLANATORY] == explanatory_name)
            & (data.loc[:, LekProfile.COL_SPLIT] == split_level)
            & (data.loc[:, LekProfile.COL_RESPONSE] == response_name)
        )
        if not mask.any():
            raise KeyError(
                f"no curve for explanatory_name={explanatory_name!r}, "
                f"split_level={split_level!r}, response_name={response_name!r}"
            )

        curve = data.loc[mask, :].iloc[: self.steps]
        return pd.Series(
            curve.loc[:, LekProfile.COL_PREDICTED].to_numpy(),
            index=pd.Index(
                curve.loc[:, LekProfile.COL_SWEPT].to_numpy(),
                name=explanatory_name,
            ),
            name=response_name,
        )

    def __len__(self) -> int:
        return len(self.data)


__tracker.validate()


#
# auxiliary functions
#


def _concatenate(arrays: Sequence[FloatArray]) -> FloatArray:
    if arrays:
        return np.concatenate(arrays)
    else:
        return np.empty(0, dtype=np.float64)
