"""
Implementation of :class:`.Sample`.
"""

import logging
from typing import Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from pytools.api import AllTracker, to_list

log = logging.getLogger(__name__)

__all__ = ["Sample"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class Sample:
    """
    The training record of a model: the observed explanatory variables and
    responses, kept aligned in a single data frame.

    Learner and network adapters take their explanatory names, response names,
    and input matrix from the sample a model was trained on.
    """

    __slots__ = ["_observations", "_feature_names", "_target_names"]

    _observations: pd.DataFrame
    _feature_names: List[str]
    _target_names: List[str]

    def __init__(
        self,
        observations: pd.DataFrame,
        *,
        target_names: Union[str, Iterable[str]],
        feature_names: Optional[Iterable[str]] = None,
    ) -> None:
        """
        :param observations: one row per observation, with string column names
        :param target_names: the name of the response column, or the names of
            multiple response columns in output order
        :param feature_names: the names of the explanatory columns, in input
            order (default: all columns that are not responses)
        :raise KeyError: if a named column does not exist, or is both a feature
            and a target
        """

        if not isinstance(observations, pd.DataFrame):
            raise ValueError(
                "arg observations must be a data frame, but is a "
                f"{type(observations).__qualname__}"
            )

        observations = _with_str_columns(observations)

        target_list: List[str] = to_list(
            target_names, element_type=str, arg_name="target_names"
        )
        if not target_list:
            raise ValueError("arg target_names must name at least one target")
        _check_columns(observations, kind="target", names=target_list)

        feature_list: List[str]
        if feature_names is None:
            feature_list = observations.columns.drop(labels=target_list).to_list()
        else:
            feature_list = to_list(
                feature_names, element_type=str, arg_name="feature_names"
            )
            _check_columns(observations, kind="feature", names=feature_list)

            shared = set(target_list).intersection(feature_list)
            if shared:
                raise KeyError(f"targets {shared} are also included in the features")

        self._observations = observations.loc[:, [*feature_list, *target_list]]
        self._feature_names = feature_list
        self._target_names = target_list

    @property
    def feature_names(self) -> List[str]:
        """
        The names of the explanatory columns, in input order.
        """
        return self._feature_names

    @property
    def target_names(self) -> List[str]:
        """
        The names of the response columns, in output order.
        """
        return self._target_names

    @property
    def features(self) -> pd.DataFrame:
        """
        The explanatory columns for all observations.
        """
        return self._observations.loc[:, self._feature_names]

    @property
    def target(self) -> Union[pd.Series, pd.DataFrame]:
        """
        The response column as a series, or a data frame if there are multiple
        responses.
        """
        if len(self._target_names) == 1:
            return self._observations.loc[:, self._target_names[0]]
        else:
            return self._observations.loc[:, self._target_names]


__tracker.validate()


#
# auxiliary functions
#


def _check_columns(observations: pd.DataFrame, kind: str, names: List[str]) -> None:
    missing = [name for name in names if name not in observations.columns]
    if missing:
        raise KeyError(f"observations table has no {kind} columns {missing}")


def _with_str_columns(observations: pd.DataFrame) -> pd.DataFrame:
    # numpy strings are accepted and converted to native strings
    non_str = [
        name
        for name in observations.columns
        if not isinstance(name, (str, np.str_))
    ]
    if non_str:
        raise TypeError(
            f"all column names in arg observations must be strings, but got {non_str}"
        )

    if any(type(name) is not str for name in observations.columns):
        observations = observations.set_axis(
            [str(name) for name in observations.columns], axis=1
        )

    return observations
