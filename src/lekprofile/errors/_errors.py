"""
Core implementation of :mod:`lekprofile.errors`
"""

from pytools.api import AllTracker

__all__ = [
    "InsufficientVariablesError",
    "InvalidConfigurationError",
    "LekProfileError",
    "MissingNamesError",
    "PredictionFailure",
    "UnsupportedTopologyError",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class LekProfileError(Exception):
    """
    Base class of all errors raised by :mod:`lekprofile`.
    """


class MissingNamesError(LekProfileError, KeyError):
    """
    Raised when explanatory or response names are required but cannot be
    obtained from a model or its training data.
    """

    def __str__(self) -> str:
        # KeyError quotes its message, we don't want that
        return Exception.__str__(self)


class InsufficientVariablesError(LekProfileError, ValueError):
    """
    Raised when fewer than two explanatory variables are available; at least one
    variable must be held constant while another one is swept.
    """


class UnsupportedTopologyError(LekProfileError, ValueError):
    """
    Raised when a network with other than exactly one hidden layer is to be
    reconstructed as a predictable model.
    """


class InvalidConfigurationError(LekProfileError, ValueError):
    """
    Raised when the number of sweep steps, the split values, or the explanatory
    variables to profile are outside their valid domain.
    """


class PredictionFailure(LekProfileError, RuntimeError):
    """
    Raised when the prediction routine of a model fails, or returns output that
    does not match the expected shape.

    The exception raised by the underlying prediction routine, if any, is
    chained as the cause of this error.
    """


__tracker.validate()
