"""
Adapters for learners that carry, or are given, a named record of their training
data.
"""

import logging
from typing import Any, Generic, List, TypeVar, Union

import pandas as pd

from pytools.api import AllTracker
from sklearndf import SupervisedLearnerDF

from ..data import Sample
from ..errors import MissingNamesError
from ._formula import Formula
from .base import ModelAdapter

log = logging.getLogger(__name__)

__all__ = [
    "FormulaAdapter",
    "LearnerAdapter",
]


#
# Type variables
#

T_SupervisedLearnerDF = TypeVar("T_SupervisedLearnerDF", bound=SupervisedLearnerDF)


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class LearnerAdapter(ModelAdapter, Generic[T_SupervisedLearnerDF]):
    """
    Adapter for a fitted :mod:`sklearndf` learner, together with the sample it
    was trained on.

    Learners are self-describing: the explanatory variables are the features the
    learner was fitted with, in the order of the learner's
    :attr:`~sklearndf.LearnerDF.feature_names_in_`, and the responses are the
    targets of the training sample.
    """

    #: The learner to be profiled.
    learner: T_SupervisedLearnerDF

    #: The sample the learner was trained on.
    sample: Sample

    def __init__(self, learner: T_SupervisedLearnerDF, *, sample: Sample) -> None:
        """
        :param learner: a fitted supervised learner
        :param sample: the sample the learner was trained on
        :raise MissingNamesError: if the sample does not include all features of
            the learner
        """
        if not isinstance(learner, SupervisedLearnerDF):
            raise TypeError(
                "arg learner must be a SupervisedLearnerDF, but is a "
                f"{type(learner).__qualname__}"
            )

        if not learner.is_fitted:
            raise ValueError("arg learner must be fitted")

        if not isinstance(sample, Sample):
            raise TypeError(
                f"arg sample must be a Sample, but is a {type(sample).__qualname__}"
            )

        feature_names: List[str] = learner.feature_names_in_.to_list()

        missing = [name for name in feature_names if name not in sample.feature_names]
        if missing:
            raise MissingNamesError(
                f"features of the learner are not features of the sample: {missing}"
            )

        super().__init__(
            inputs=sample.features.loc[:, feature_names],
            response_names=sample.target_names,
        )

        self.learner = learner
        self.sample = sample

    def _predict_native(self, x: pd.DataFrame) -> Union[pd.Series, pd.DataFrame]:
        return self.learner.predict(X=x.loc[:, self.explanatory_names])


class FormulaAdapter(ModelAdapter):
    """
    Adapter for a model fitted from a formula and a data table.

    The training call is passed explicitly as the formula and the data: the
    responses are named on the left-hand side of the formula, and the
    explanatory variables on its right-hand side, where ``.`` stands for all
    columns of the data that are not responses (see :class:`.Formula`).

    The model is expected to predict from a data frame with the explanatory
    columns, e.g., a :mod:`sklearn` estimator fitted on a data frame.
    """

    #: The model to be profiled.
    model: Any

    #: The formula the model was fitted with.
    formula: Formula

    def __init__(
        self, model: Any, *, formula: Union[str, Formula], data: pd.DataFrame
    ) -> None:
        """
        :param model: a fitted model with a ``predict`` method
        :param formula: the formula the model was fitted with, as a string or as
            a parsed :class:`.Formula`
        :param data: the data the model was fitted on
        :raise MissingNamesError: if a term of the formula is not a column of the
            data
        """
        if not callable(getattr(model, "predict", None)):
            raise TypeError(
                f"arg model must have a predict method: {type(model).__qualname__}"
            )

        if not isinstance(data, pd.DataFrame):
            raise TypeError(
                f"arg data must be a data frame, but is a {type(data).__qualname__}"
            )

        if not isinstance(formula, Formula):
            formula = Formula.parse(formula)

        explanatory_names, response_names = formula.resolve(data)

        super().__init__(
            inputs=data.loc[:, explanatory_names], response_names=response_names
        )

        self.model = model
        self.formula = formula

    def _predict_native(self, x: pd.DataFrame) -> Any:
        return self.model.predict(x.loc[:, self.explanatory_names])


__tracker.validate()
