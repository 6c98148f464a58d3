"""
Adapter for feed-forward networks given only by their learned weights.

Some network representations store the learned weights, but offer no way to
predict from them. These networks are reconstructed as an equivalent
:class:`~sklearndf.regression.MLPRegressorDF`, whose coefficients are replaced
by the original weights so that its predictions reproduce the original network.
"""

import logging
import warnings
from typing import List, Sequence, Tuple

import numpy as np
import numpy.typing as npt
from sklearn.exceptions import ConvergenceWarning

from pytools.api import AllTracker
from sklearndf.regression import MLPRegressorDF

from .._types import FloatArray
from ..data import Sample
from ..errors import UnsupportedTopologyError
from ._learner import LearnerAdapter

log = logging.getLogger(__name__)

__all__ = [
    "NetworkAdapter",
    "NeuralNetwork",
    "reconstruct_predictable",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class NeuralNetwork:
    """
    A fitted feed-forward network with logistic hidden units, represented by its
    learned weights and the sample it was trained on.

    There is one weight matrix per layer transition. The matrix connecting a
    layer of `m` units to a layer of `n` units has shape `(m + 1, n)`, with the
    bias weights in the first row.
    """

    #: The weight matrices, one per layer transition.
    weights: List[FloatArray]

    #: The sample the network was trained on.
    sample: Sample

    #: If ``True``, the output units are linear; if ``False``, they are logistic.
    linear_output: bool

    def __init__(
        self,
        weights: Sequence[npt.ArrayLike],
        *,
        sample: Sample,
        linear_output: bool = True,
    ) -> None:
        """
        :param weights: the weight matrices, one per layer transition, ordered from
            the input layer to the output layer
        :param sample: the sample the network was trained on
        :param linear_output: ``True`` if the output units are linear, ``False`` if
            they are logistic
        :raise ValueError: if the weight matrices do not connect to each other, or
            do not match the features and targets of the sample
        """
        if not isinstance(sample, Sample):
            raise TypeError(
                f"arg sample must be a Sample, but is a {type(sample).__qualname__}"
            )

        weights_list = [np.array(w, dtype=np.float64) for w in weights]

        if not weights_list:
            raise ValueError("arg weights must include at least one weight matrix")

        for i, w in enumerate(weights_list):
            if w.ndim != 2:
                raise ValueError(
                    f"weight matrix {i} must have 2 dimensions, but has {w.ndim}"
                )

        for i, (w_in, w_out) in enumerate(zip(weights_list, weights_list[1:])):
            if w_in.shape[1] + 1 != w_out.shape[0]:
                raise ValueError(
                    f"weight matrix {i + 1} has {w_out.shape[0]} rows, but must have "
                    f"{w_in.shape[1] + 1} to connect to the {w_in.shape[1]} units of "
                    "the preceding layer plus a bias"
                )

        n_inputs = weights_list[0].shape[0] - 1
        n_outputs = weights_list[-1].shape[1]

        if n_inputs != len(sample.feature_names):
            raise ValueError(
                f"network has {n_inputs} inputs, but the sample has "
                f"{len(sample.feature_names)} features"
            )

        if n_outputs != len(sample.target_names):
            raise ValueError(
                f"network has {n_outputs} outputs, but the sample has "
                f"{len(sample.target_names)} targets"
            )

        self.weights = weights_list
        self.sample = sample
        self.linear_output = linear_output

    @property
    def topology(self) -> Tuple[int, ...]:
        """
        The number of units per layer, from the input layer to the output layer,
        not counting bias units.
        """
        return (
            self.weights[0].shape[0] - 1,
            *(w.shape[1] for w in self.weights),
        )


class NetworkAdapter(LearnerAdapter[MLPRegressorDF]):
    """
    Adapter for a :class:`.NeuralNetwork`.

    The network is reconstructed as a predictable learner using
    :func:`.reconstruct_predictable`, and then profiled like any other learner.
    Only networks with a single hidden layer are supported.
    """

    #: The network to be profiled.
    network: NeuralNetwork

    def __init__(self, network: NeuralNetwork) -> None:
        """
        :param network: the network to be profiled
        :raise UnsupportedTopologyError: if the network does not have exactly one
            hidden layer
        """
        if not isinstance(network, NeuralNetwork):
            raise TypeError(
                "arg network must be a NeuralNetwork, but is a "
                f"{type(network).__qualname__}"
            )

        super().__init__(
            reconstruct_predictable(
                network.weights,
                network.topology,
                sample=network.sample,
                linear_output=network.linear_output,
            ),
            sample=network.sample,
        )

        self.network = network


#
# Functions
#


def reconstruct_predictable(
    weights: Sequence[npt.ArrayLike],
    topology: Sequence[int],
    *,
    sample: Sample,
    linear_output: bool = True,
) -> MLPRegressorDF:
    """
    Reconstruct a network with one hidden layer as an equivalent, predictable
    multi-layer perceptron.

    The perceptron is fitted on the sample for a single iteration to initialize
    it, then all of its coefficients are replaced by the given weights.
    Hidden units are logistic; output units are linear or logistic as indicated.

    :param weights: the weight matrices of the network, one per layer transition,
        with the bias weights in the first row of each matrix
    :param topology: the number of units per layer, from the input layer to the
        output layer
    :param sample: the sample the network was trained on
    :param linear_output: ``True`` if the output units are linear, ``False`` if
        they are logistic
    :return: a fitted regressor reproducing the predictions of the network
    :raise UnsupportedTopologyError: if the topology does not have exactly one
        hidden layer
    """

    topology = tuple(int(n) for n in topology)

    if len(topology) != 3:
        raise UnsupportedTopologyError(
            "only networks with exactly one hidden layer can be reconstructed, "
            f"but got {len(topology) - 2} hidden layers in topology {topology}"
        )

    n_inputs, n_hidden, n_outputs = topology

    weights_in, weights_out = _validate_weights(weights, topology)

    if n_inputs != len(sample.feature_names) or n_outputs != len(sample.target_names):
        raise ValueError(
            f"topology {topology} does not match the {len(sample.feature_names)} "
            f"features and {len(sample.target_names)} targets of arg sample"
        )

    log.debug(f"reconstructing network with topology {topology}")

    regressor = MLPRegressorDF(
        hidden_layer_sizes=(n_hidden,),
        activation="logistic",
        solver="lbfgs",
        max_iter=1,
        random_state=0,
    )

    # the single iteration only serves to initialize the regressor
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=ConvergenceWarning)
        regressor.fit(X=sample.features, y=sample.target)

    native = regressor.native_estimator
    native.coefs_ = [weights_in[1:], weights_out[1:]]
    native.intercepts_ = [weights_in[0], weights_out[0]]
    native.out_activation_ = "identity" if linear_output else "logistic"

    return regressor


__tracker.validate()


#
# auxiliary functions
#


def _validate_weights(
    weights: Sequence[npt.ArrayLike], topology: Tuple[int, ...]
) -> List[FloatArray]:
    weights_list = [np.array(w, dtype=np.float64) for w in weights]

    if len(weights_list) != len(topology) - 1:
        raise ValueError(
            f"expected {len(topology) - 1} weight matrices for topology {topology}, "
            f"but got {len(weights_list)}"
        )

    for i, w in enumerate(weights_list):
        expected_shape = (topology[i] + 1, topology[i + 1])
        if w.shape != expected_shape:
            raise ValueError(
                f"expected weight matrix {i} to have shape {expected_shape}, "
                f"but got shape {w.shape}"
            )

    return weights_list
