import logging
from typing import List

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from pandas.testing import assert_frame_equal, assert_series_equal

from sklearndf.regression import LinearRegressionDF

from lekprofile.errors import InvalidConfigurationError, PredictionFailure
from lekprofile.model import FunctionAdapter, LearnerAdapter
from lekprofile.profile import LekProfile, LekProfiler, lek_profile


def weighted_sum(x: pd.DataFrame) -> pd.Series:
    return 2.0 * x.loc[:, "X1"] + x.loc[:, "X2"]


@pytest.fixture  # type: ignore
def weighted_sum_adapter(square_inputs: pd.DataFrame) -> FunctionAdapter:
    return FunctionAdapter(weighted_sum, inputs=square_inputs)


def test_profile_scenario(weighted_sum_adapter: FunctionAdapter) -> None:
    profile = LekProfiler(weighted_sum_adapter, steps=3, split_vals=[0, 1]).profile()

    assert isinstance(profile, LekProfile)
    assert profile.steps == 3
    assert profile.split_vals == [0.0, 1.0]
    assert profile.explanatory_names == ["X1", "X2"]
    assert profile.response_names == ["Y1"]

    data = profile.data
    assert data.columns.to_list() == [
        LekProfile.COL_EXPLANATORY,
        LekProfile.COL_SPLIT,
        LekProfile.COL_RESPONSE,
        LekProfile.COL_SWEPT,
        LekProfile.COL_PREDICTED,
    ]
    assert len(profile) == len(data) == 2 * 2 * 1 * 3

    # X1 swept with X2 held at its minimum, then at its maximum
    x1_at_0 = data.iloc[0:3]
    assert x1_at_0.loc[:, LekProfile.COL_EXPLANATORY].to_list() == ["X1"] * 3
    assert x1_at_0.loc[:, LekProfile.COL_SPLIT].to_list() == [0.0] * 3
    assert x1_at_0.loc[:, LekProfile.COL_RESPONSE].to_list() == ["Y1"] * 3
    assert x1_at_0.loc[:, LekProfile.COL_SWEPT].to_list() == [0.0, 5.0, 10.0]
    assert x1_at_0.loc[:, LekProfile.COL_PREDICTED].to_list() == [0.0, 10.0, 20.0]

    x1_at_1 = data.iloc[3:6]
    assert x1_at_1.loc[:, LekProfile.COL_SPLIT].to_list() == [1.0] * 3
    assert x1_at_1.loc[:, LekProfile.COL_SWEPT].to_list() == [0.0, 5.0, 10.0]
    assert x1_at_1.loc[:, LekProfile.COL_PREDICTED].to_list() == [10.0, 20.0, 30.0]

    # X2 swept with X1 held at its minimum, then at its maximum
    x2 = data.iloc[6:12]
    assert x2.loc[:, LekProfile.COL_EXPLANATORY].to_list() == ["X2"] * 6
    assert x2.loc[:, LekProfile.COL_PREDICTED].to_list() == [
        0.0,
        5.0,
        10.0,
        20.0,
        25.0,
        30.0,
    ]

    assert_series_equal(
        profile.curve("X1", 1.0, "Y1"),
        pd.Series(
            [10.0, 20.0, 30.0],
            index=pd.Index([0.0, 5.0, 10.0], name="X1"),
            name="Y1",
        ),
    )

    with pytest.raises(KeyError):
        profile.curve("X1", 0.5, "Y1")


def test_profile_row_count(
    learner_adapter: LearnerAdapter[LinearRegressionDF],
    learner_adapter_multi_target: LearnerAdapter[LinearRegressionDF],
) -> None:
    steps = 7

    profile_single = LekProfiler(learner_adapter, steps=steps).profile()
    n_splits = len(LekProfiler.DEFAULT_SPLIT_VALS)
    assert len(profile_single.data) == 3 * n_splits * 1 * steps

    # two responses yield twice the rows
    profile_multi = LekProfiler(learner_adapter_multi_target, steps=steps).profile()
    assert len(profile_multi.data) == 2 * len(profile_single.data)

    assert profile_multi.data.loc[:, LekProfile.COL_RESPONSE].unique().tolist() == [
        "Y1",
        "Y2",
    ]


def test_profile_defaults(learner_adapter: LearnerAdapter[LinearRegressionDF]) -> None:
    profiler = LekProfiler(learner_adapter)

    assert profiler.steps == LekProfiler.DEFAULT_STEPS == 100
    assert profiler.split_vals == (0.0, 0.2, 0.4, 0.6, 0.8, 1.0)
    assert profiler.explanatory_names == ["X1", "X2", "X3"]

    data = profiler.profile().data
    assert len(data) == 3 * 6 * 100
    assert data.loc[:, LekProfile.COL_SPLIT].unique().tolist() == [
        0.0,
        0.2,
        0.4,
        0.6,
        0.8,
        1.0,
    ]


def test_profile_row_order(
    learner_adapter_multi_target: LearnerAdapter[LinearRegressionDF],
) -> None:
    steps = 4
    split_vals = [0.6, 0.1]
    data = (
        LekProfiler(learner_adapter_multi_target, steps=steps, split_vals=split_vals)
        .profile()
        .data
    )

    expected_keys: List[tuple] = [
        (explanatory_name, split_val, response_name)
        for explanatory_name in ["X1", "X2", "X3"]
        for split_val in split_vals
        for response_name in ["Y1", "Y2"]
        for _ in range(steps)
    ]

    actual_keys = list(
        data.loc[
            :,
            [
                LekProfile.COL_EXPLANATORY,
                LekProfile.COL_SPLIT,
                LekProfile.COL_RESPONSE,
            ],
        ].itertuples(index=False, name=None)
    )

    assert actual_keys == expected_keys
    assert data.index.equals(pd.RangeIndex(len(expected_keys)))


def test_sweep_values(learner_adapter: LearnerAdapter[LinearRegressionDF]) -> None:
    steps = 11
    inputs = learner_adapter.inputs
    data = LekProfiler(learner_adapter, steps=steps).profile().data

    for (explanatory_name, _, _), curve in data.groupby(
        [
            LekProfile.COL_EXPLANATORY,
            LekProfile.COL_SPLIT,
            LekProfile.COL_RESPONSE,
        ],
        sort=False,
    ):
        swept = curve.loc[:, LekProfile.COL_SWEPT].to_numpy()
        lower = inputs.loc[:, explanatory_name].min()
        upper = inputs.loc[:, explanatory_name].max()

        assert len(swept) == steps
        assert swept[0] == lower
        assert swept[-1] == upper
        assert (np.diff(swept) > 0).all()
        assert_allclose(np.diff(swept), (upper - lower) / (steps - 1))


@pytest.mark.parametrize(  # type: ignore
    argnames="split_val", argvalues=[0.0, 0.25, 0.5, 0.9, 1.0]
)
def test_sweep_matrix(
    learner_adapter: LearnerAdapter[LinearRegressionDF], split_val: float
) -> None:
    steps = 5
    inputs = learner_adapter.inputs
    profiler = LekProfiler(learner_adapter, steps=steps)

    x = profiler.sweep_matrix("X2", split_val)

    assert x.shape == (steps, 3)
    assert x.columns.to_list() == ["X1", "X2", "X3"]
    assert x.index.name == LekProfiler.IDX_STEP

    assert_allclose(
        x.loc[:, "X2"].to_numpy(),
        np.linspace(inputs.loc[:, "X2"].min(), inputs.loc[:, "X2"].max(), steps),
    )

    # all other variables are held constant at their quantiles
    for name in ["X1", "X3"]:
        column = inputs.loc[:, name].to_numpy()
        held = x.loc[:, name].to_numpy()
        assert (held == held[0]).all()
        assert held[0] == pytest.approx(np.quantile(column, split_val))

        if split_val == 0.0:
            assert held[0] == column.min()
        elif split_val == 1.0:
            assert held[0] == column.max()


def test_quantile_interpolation(square_inputs: pd.DataFrame) -> None:
    # X2 values sorted are 0, 2, 4, 6, 10; the 0.875 quantile lies at position
    # 0.875 * 4 = 3.5, halfway between 6 and 10
    profiler = LekProfiler(
        FunctionAdapter(weighted_sum, inputs=square_inputs), steps=2
    )
    x = profiler.sweep_matrix("X1", 0.875)
    assert x.loc[:, "X2"].to_list() == [8.0, 8.0]
    assert x.loc[:, "X1"].to_list() == [0.0, 10.0]


def test_profile_variable(
    learner_adapter_multi_target: LearnerAdapter[LinearRegressionDF],
) -> None:
    profiler = LekProfiler(learner_adapter_multi_target, steps=5, split_vals=[0.5])

    profile_x3 = profiler.profile_variable("X3")
    assert profile_x3.explanatory_names == ["X3"]
    assert len(profile_x3.data) == 1 * 1 * 2 * 5

    # the same curves are part of the full profile
    full = profiler.profile().data
    assert_frame_equal(
        full.loc[full.loc[:, LekProfile.COL_EXPLANATORY] == "X3"].reset_index(
            drop=True
        ),
        profile_x3.data,
    )

    with pytest.raises(InvalidConfigurationError):
        profiler.profile_variable("X4")


def test_profile_explanatory_subset(
    learner_adapter: LearnerAdapter[LinearRegressionDF],
) -> None:
    profiler = LekProfiler(
        learner_adapter, steps=3, explanatory_names=["X3", "X1"]
    )
    data = profiler.profile().data

    assert data.loc[:, LekProfile.COL_EXPLANATORY].unique().tolist() == ["X3", "X1"]
    assert len(data) == 2 * 6 * 3

    # the variable not profiled is still held constant in every sweep
    assert profiler.sweep_matrix("X3", 0.0).columns.to_list() == ["X1", "X2", "X3"]


def test_profile_idempotent(
    learner_adapter_multi_target: LearnerAdapter[LinearRegressionDF],
) -> None:
    profiler = LekProfiler(learner_adapter_multi_target, steps=13)

    data_1 = profiler.profile().data
    data_2 = profiler.profile().data

    assert_frame_equal(data_1, data_2)
    assert_array_equal(
        data_1.loc[:, LekProfile.COL_PREDICTED].to_numpy(),
        data_2.loc[:, LekProfile.COL_PREDICTED].to_numpy(),
    )


def test_profile_parallel(weighted_sum_adapter: FunctionAdapter) -> None:
    sequential = LekProfiler(weighted_sum_adapter, steps=20).profile().data
    parallel = (
        LekProfiler(weighted_sum_adapter, steps=20, n_jobs=3, shared_memory=True)
        .profile()
        .data
    )

    assert_frame_equal(sequential, parallel)


def test_profile_duplicate_split_vals(weighted_sum_adapter: FunctionAdapter) -> None:
    data = LekProfiler(weighted_sum_adapter, steps=3, split_vals=[1, 1]).profile().data

    assert len(data) == 2 * 2 * 1 * 3
    assert_array_equal(
        data.iloc[0:3].loc[:, LekProfile.COL_PREDICTED].to_numpy(),
        data.iloc[3:6].loc[:, LekProfile.COL_PREDICTED].to_numpy(),
    )


def test_profile_constant_variable(caplog: pytest.LogCaptureFixture) -> None:
    inputs = pd.DataFrame({"X1": [1.0, 2.0, 3.0], "X2": [4.0, 4.0, 4.0]})
    profiler = LekProfiler(
        FunctionAdapter(weighted_sum, inputs=inputs), steps=3, split_vals=[0.5]
    )

    with caplog.at_level(logging.WARNING):
        data = profiler.profile().data

    assert "constant" in caplog.text
    x2 = data.loc[data.loc[:, LekProfile.COL_EXPLANATORY] == "X2"]
    assert x2.loc[:, LekProfile.COL_SWEPT].to_list() == [4.0, 4.0, 4.0]
    assert x2.loc[:, LekProfile.COL_PREDICTED].to_list() == [8.0, 8.0, 8.0]


@pytest.mark.parametrize(  # type: ignore
    argnames="steps", argvalues=[1, 0, -5, 2.5, "10", True, None]
)
def test_invalid_steps(weighted_sum_adapter: FunctionAdapter, steps: object) -> None:
    with pytest.raises(InvalidConfigurationError):
        # noinspection PyTypeChecker
        LekProfiler(weighted_sum_adapter, steps=steps)  # type: ignore


@pytest.mark.parametrize(  # type: ignore
    argnames="split_vals",
    argvalues=[
        [],
        [0.5, 1.1],
        [-0.1],
        [float("nan")],
        ["a"],
        ["0.5"],
        [True],
        [None],
        0.5,
        "0.5",
    ],
)
def test_invalid_split_vals(
    weighted_sum_adapter: FunctionAdapter, split_vals: list
) -> None:
    with pytest.raises(InvalidConfigurationError):
        LekProfiler(weighted_sum_adapter, split_vals=split_vals)


@pytest.mark.parametrize(  # type: ignore
    argnames="explanatory_names", argvalues=[[], ["X1", "X1"], ["X3"]]
)
def test_invalid_explanatory_names(
    weighted_sum_adapter: FunctionAdapter, explanatory_names: list
) -> None:
    with pytest.raises(InvalidConfigurationError):
        LekProfiler(weighted_sum_adapter, explanatory_names=explanatory_names)


def test_invalid_model() -> None:
    with pytest.raises(TypeError):
        # noinspection PyTypeChecker
        LekProfiler(weighted_sum)  # type: ignore


def test_sweep_matrix_invalid(weighted_sum_adapter: FunctionAdapter) -> None:
    profiler = LekProfiler(weighted_sum_adapter, steps=3)

    with pytest.raises(InvalidConfigurationError):
        profiler.sweep_matrix("X3", 0.5)

    with pytest.raises(InvalidConfigurationError):
        profiler.sweep_matrix("X1", 2.0)


def test_profile_prediction_failure(square_inputs: pd.DataFrame) -> None:
    calls: List[int] = []

    def _fail_on_second_call(x: pd.DataFrame) -> pd.Series:
        calls.append(len(x))
        if len(calls) > 1:
            raise RuntimeError("model defect")
        return weighted_sum(x)

    profiler = LekProfiler(
        FunctionAdapter(_fail_on_second_call, inputs=square_inputs),
        steps=3,
        split_vals=[0.0, 1.0],
    )

    # the failure propagates immediately, without retries or a partial result
    with pytest.raises(PredictionFailure, match="model defect"):
        profiler.profile()

    assert calls == [3, 3]


def test_lek_profile(weighted_sum_adapter: FunctionAdapter) -> None:
    data = lek_profile(weighted_sum_adapter, steps=3, split_vals=[0, 1])

    assert isinstance(data, pd.DataFrame)
    assert_frame_equal(
        data,
        LekProfiler(weighted_sum_adapter, steps=3, split_vals=[0, 1]).profile().data,
    )

    data = lek_profile(weighted_sum_adapter, steps=3, explanatory_names=["X2"])
    assert data.loc[:, LekProfile.COL_EXPLANATORY].unique().tolist() == ["X2"]
