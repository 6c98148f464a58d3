import logging

import numpy as np
import pandas as pd
import pytest

from sklearndf.regression import LinearRegressionDF

import lekprofile
from lekprofile.data import Sample
from lekprofile.model import LearnerAdapter

logging.basicConfig(level=logging.DEBUG)
log = logging.getLogger(__name__)

log.info(f"testing lekprofile {lekprofile.__version__}")

# configure pandas text output

# get display width from terminal
pd.set_option("display.width", None)
# 3 digits precision for easier readability
pd.set_option("display.precision", 3)

N_OBSERVATIONS = 200

FEATURE_NAMES = ["X1", "X2", "X3"]
TARGET_NAMES = ["Y1", "Y2"]


@pytest.fixture  # type: ignore
def neuraldat() -> pd.DataFrame:
    # simulated data set with three explanatory variables and two responses,
    # where the responses are linear combinations of the explanatory variables
    # plus noise
    rng = np.random.default_rng(42)

    x = rng.normal(size=(N_OBSERVATIONS, len(FEATURE_NAMES)))
    noise = rng.normal(scale=0.1, size=(N_OBSERVATIONS, len(TARGET_NAMES)))

    y1 = 0.5 * x[:, 0] - 1.0 * x[:, 1] + 0.2 * x[:, 2] + noise[:, 0]
    y2 = -0.3 * x[:, 0] + 0.8 * x[:, 2] + noise[:, 1]

    return pd.DataFrame(
        data=np.c_[y1, y2, x], columns=[*TARGET_NAMES, *FEATURE_NAMES]
    )


@pytest.fixture  # type: ignore
def sample(neuraldat: pd.DataFrame) -> Sample:
    return Sample(
        observations=neuraldat, target_names="Y1", feature_names=FEATURE_NAMES
    )


@pytest.fixture  # type: ignore
def sample_multi_target(neuraldat: pd.DataFrame) -> Sample:
    return Sample(
        observations=neuraldat, target_names=TARGET_NAMES, feature_names=FEATURE_NAMES
    )


@pytest.fixture  # type: ignore
def linear_learner(sample: Sample) -> LinearRegressionDF:
    return LinearRegressionDF().fit(X=sample.features, y=sample.target)


@pytest.fixture  # type: ignore
def linear_learner_multi_target(sample_multi_target: Sample) -> LinearRegressionDF:
    return LinearRegressionDF().fit(
        X=sample_multi_target.features, y=sample_multi_target.target
    )


@pytest.fixture  # type: ignore
def learner_adapter(
    linear_learner: LinearRegressionDF, sample: Sample
) -> LearnerAdapter[LinearRegressionDF]:
    return LearnerAdapter(linear_learner, sample=sample)


@pytest.fixture  # type: ignore
def learner_adapter_multi_target(
    linear_learner_multi_target: LinearRegressionDF, sample_multi_target: Sample
) -> LearnerAdapter[LinearRegressionDF]:
    return LearnerAdapter(linear_learner_multi_target, sample=sample_multi_target)


@pytest.fixture  # type: ignore
def square_inputs() -> pd.DataFrame:
    # two explanatory variables, each ranging from 0 to 10
    return pd.DataFrame(
        {"X1": [0.0, 2.5, 5.0, 10.0, 7.5], "X2": [10.0, 0.0, 4.0, 6.0, 2.0]}
    )

