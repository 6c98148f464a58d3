"""
Type aliases for common use in the ``lekprofile`` package
"""

from typing import Callable, Union

import numpy as np
import numpy.typing as npt
import pandas as pd
from typing_extensions import TypeAlias

# a float array, as used for weights and predictions
FloatArray: TypeAlias = npt.NDArray[np.float64]

# a function representing a model to be profiled
PredictFunction: TypeAlias = Callable[
    [pd.DataFrame],
    Union[pd.Series, pd.DataFrame, FloatArray],
]
