"""
Core implementation of :mod:`lekprofile.profile`
"""

import logging
import numbers
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union, cast

import numpy as np
import pandas as pd

from pytools.api import AllTracker
from pytools.parallelization import Job, JobRunner, ParallelizableMixin

from .._types import FloatArray
from ..errors import InvalidConfigurationError
from ..model.base import ModelAdapter
from ._result import LekProfile

log = logging.getLogger(__name__)

__all__ = [
    "LekProfiler",
    "lek_profile",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class LekProfiler(ParallelizableMixin):
    """
    Sensitivity analysis of a fitted model using Lek's profile method.

    For each explanatory variable `x[i]` of the model, and each split level `p`,
    the profiler constructs an input matrix of :attr:`.steps` rows, where

    - `x[i]` runs in equal steps from its observed minimum to its observed
      maximum, inclusive
    - every other explanatory variable `x[j]` is held constant at its empirical
      `p`-quantile, using linear interpolation between order statistics, i.e.,
      the minimum for `p = 0` and the maximum for `p = 1`

    The model predicts all responses for this matrix, yielding one profile curve
    per response: a set of response curves for one explanatory variable, with all
    other explanatory variables held at constant values.

    The number of steps must be at least 2, as a single point cannot span the
    range of an explanatory variable.

    See Lek et al. (1996), *Application of neural networks to modelling nonlinear
    relationships in ecology*, Ecological Modelling 90:39-52, and Gevrey et al.
    (2003), *Review and comparison of methods to study the contribution of
    variables in artificial neural network models*, Ecological Modelling
    160:249-264.
    """

    #: The default number of points per profile curve.
    DEFAULT_STEPS = 100

    #: The default split levels: every 20th percentile, from the minimum to the
    #: maximum.
    DEFAULT_SPLIT_VALS = (0.0, 0.2, 0.4, 0.6, 0.8, 1.0)

    #: The name of the row index of sweep matrices.
    IDX_STEP = "step"

    # defined in superclass, repeated here for Sphinx
    n_jobs: Optional[int]

    # defined in superclass, repeated here for Sphinx
    shared_memory: Optional[bool]

    # defined in superclass, repeated here for Sphinx
    pre_dispatch: Optional[Union[str, int]]

    # defined in superclass, repeated here for Sphinx
    verbose: Optional[int]

    #: The adapted model to be profiled.
    model: ModelAdapter

    #: The number of points per profile curve.
    steps: int

    #: The quantile probabilities at which non-swept variables are held constant.
    split_vals: Tuple[float, ...]

    #: The names of the explanatory variables to profile.
    explanatory_names: List[str]

    def __init__(
        self,
        model: ModelAdapter,
        *,
        steps: int = DEFAULT_STEPS,
        split_vals: Iterable[float] = DEFAULT_SPLIT_VALS,
        explanatory_names: Optional[Iterable[str]] = None,
        n_jobs: Optional[int] = None,
        shared_memory: Optional[bool] = None,
        pre_dispatch: Optional[Union[str, int]] = None,
        verbose: Optional[int] = None,
    ) -> None:
        """
        :param model: the adapted model to profile
        :param steps: the number of points per profile curve, at least 2
            (default: 100)
        :param split_vals: the quantile probabilities at which to hold the
            non-swept explanatory variables constant, each between 0.0 and 1.0
            (inclusive; default: 0.0, 0.2, 0.4, 0.6, 0.8, 1.0)
        :param explanatory_names: the names of the explanatory variables to
            profile (default: all explanatory variables of the model); variables
            not profiled are still held constant when profiling other variables
        :raise InvalidConfigurationError: if the steps, split values, or
            explanatory names are invalid
        """
        super().__init__(
            n_jobs=n_jobs,
            shared_memory=shared_memory,
            pre_dispatch=pre_dispatch,
            verbose=verbose,
        )

        if not isinstance(model, ModelAdapter):
            raise TypeError(
                "arg model must be a ModelAdapter, but is a "
                f"{type(model).__qualname__}"
            )

        self.model = model
        self.steps = _validate_steps(steps)
        self.split_vals = _validate_split_vals(split_vals)
        self.explanatory_names = (
            list(model.explanatory_names)
            if explanatory_names is None
            else self._validate_explanatory_names(explanatory_names)
        )

    # add parallelization parameters to __init__ docstring
    __init__.__doc__ = cast(str, __init__.__doc__) + cast(
        str, ParallelizableMixin.__init__.__doc__
    )

    def profile(self) -> LekProfile:
        """
        Profile all explanatory variables at all split levels.

        :return: the profile curves for all explanatory variables, split levels,
            and responses
        :raise PredictionFailure: if the model fails to predict
        """
        return self._profile(self.explanatory_names)

    def profile_variable(self, explanatory_name: str) -> LekProfile:
        """
        Profile a single explanatory variable at all split levels.

        :param explanatory_name: the name of the explanatory variable to profile
        :return: the profile curves for the given explanatory variable, for all
            split levels and responses
        :raise PredictionFailure: if the model fails to predict
        """
        self._validate_explanatory_name(explanatory_name)
        return self._profile([explanatory_name])

    def sweep_matrix(self, explanatory_name: str, split_val: float) -> pd.DataFrame:
        """
        Construct the input matrix for sweeping one explanatory variable, with all
        other explanatory variables held constant.

        :param explanatory_name: the name of the explanatory variable to sweep
        :param split_val: the quantile probability at which to hold all other
            explanatory variables constant
        :return: a data frame with :attr:`.steps` rows and one column per
            explanatory variable of the model
        """
        self._validate_explanatory_name(explanatory_name)
        (split_val,) = _validate_split_vals([split_val])

        inputs = self.model.inputs
        steps = self.steps

        swept_column = inputs.loc[:, explanatory_name]
        lower, upper = swept_column.min(), swept_column.max()
        if lower == upper:
            log.warning(
                f"explanatory variable {explanatory_name} is constant at {lower}; "
                "its profile curves will be a single point repeated"
            )

        swept: FloatArray = np.linspace(lower, upper, num=steps, dtype=np.float64)
        held: pd.Series = inputs.quantile(q=split_val)

        return pd.DataFrame(
            {
                name: (
                    swept
                    if name == explanatory_name
                    else np.full(steps, held.loc[name], dtype=np.float64)
                )
                for name in self.model.explanatory_names
            },
            index=pd.RangeIndex(steps, name=LekProfiler.IDX_STEP),
        )

    def _profile(self, explanatory_names: Sequence[str]) -> LekProfile:
        model = self.model
        split_vals = self.split_vals

        keys: List[Tuple[str, float]] = [
            (explanatory_name, split_val)
            for explanatory_name in explanatory_names
            for split_val in dict.fromkeys(split_vals)
        ]

        log.debug(
            f"profiling {len(explanatory_names)} explanatory variable(s) at "
            f"{len(split_vals)} split level(s) with {self.steps} steps"
        )

        matrices = [self.sweep_matrix(*key) for key in keys]

        predictions: List[pd.DataFrame] = JobRunner.from_parallelizable(
            self
        ).run_jobs(Job.delayed(model.predict)(x) for x in matrices)

        # merge the results by key, independently of the order of execution
        sweeps: Dict[Tuple[str, float], Tuple[FloatArray, pd.DataFrame]] = {
            key: (x.loc[:, key[0]].to_numpy(), y)
            for key, x, y in zip(keys, matrices, predictions)
        }

        return LekProfile(
            sweeps=sweeps,
            explanatory_names=explanatory_names,
            split_vals=split_vals,
            response_names=model.response_names,
            steps=self.steps,
        )

    def _validate_explanatory_name(self, explanatory_name: str) -> None:
        if explanatory_name not in self.model.explanatory_names:
            raise InvalidConfigurationError(
                f"{explanatory_name!r} is not an explanatory variable of the model; "
                f"expected one of {self.model.explanatory_names}"
            )

    def _validate_explanatory_names(self, explanatory_names: Iterable[str]) -> List[str]:
        if isinstance(explanatory_names, str):
            explanatory_names = [explanatory_names]

        names = list(explanatory_names)

        if not names:
            raise InvalidConfigurationError(
                "arg explanatory_names must name at least one explanatory variable"
            )

        if len(set(names)) < len(names):
            raise InvalidConfigurationError(
                f"arg explanatory_names must be unique, but got {names}"
            )

        for name in names:
            self._validate_explanatory_name(name)

        return names


#
# Functions
#


def lek_profile(
    model: ModelAdapter,
    *,
    steps: int = LekProfiler.DEFAULT_STEPS,
    split_vals: Iterable[float] = LekProfiler.DEFAULT_SPLIT_VALS,
    explanatory_names: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """
    Compute the Lek profile of a model, as a table in long form.

    See :class:`.LekProfiler` for details on the method, and :attr:`.LekProfile.data`
    for the columns of the resulting table.

    :param model: the adapted model to profile
    :param steps: the number of points per profile curve, at least 2
    :param split_vals: the quantile probabilities at which to hold the non-swept
        explanatory variables constant
    :param explanatory_names: the names of the explanatory variables to profile
        (default: all explanatory variables of the model)
    :return: the profile curves of all explanatory variables, split levels, and
        responses
    """
    return (
        LekProfiler(
            model,
            steps=steps,
            split_vals=split_vals,
            explanatory_names=explanatory_names,
        )
        .profile()
        .data
    )


__tracker.validate()


#
# auxiliary functions
#


def _validate_steps(steps: int) -> int:
    if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)):
        raise InvalidConfigurationError(
            f"arg steps must be an integer, but is a {type(steps).__qualname__}"
        )
    if steps < 2:
        raise InvalidConfigurationError(f"arg steps={steps} must be at least 2")
    return int(steps)


def _validate_split_vals(split_vals: Iterable[float]) -> Tuple[float, ...]:
    if isinstance(split_vals, str):
        raise InvalidConfigurationError(
            f"arg split_vals must be a sequence of numbers: {split_vals!r}"
        )

    try:
        split_list = list(split_vals)
    except TypeError as cause:
        raise InvalidConfigurationError(
            f"arg split_vals must be a sequence of numbers: {split_vals!r}"
        ) from cause

    not_numbers = [
        split_val
        for split_val in split_list
        if isinstance(split_val, bool) or not isinstance(split_val, numbers.Real)
    ]
    if not_numbers:
        raise InvalidConfigurationError(
            f"arg split_vals must be a sequence of numbers, but got {not_numbers}"
        )

    split_tuple = tuple(float(split_val) for split_val in split_list)

    if not split_tuple:
        raise InvalidConfigurationError("arg split_vals must not be empty")

    invalid = [p for p in split_tuple if not 0.0 <= p <= 1.0]
    if invalid:
        raise InvalidConfigurationError(
            f"arg split_vals must range between 0.0 and 1.0 (inclusive), but got "
            f"{invalid}"
        )

    return split_tuple
