"""
Lek profiles of fitted models: response curves of each explanatory variable as
it sweeps its observed range, with all other explanatory variables held
constant at selected quantiles.

The :class:`.LekProfiler` computes the profile of a model given as a
:class:`.ModelAdapter`; the resulting :class:`.LekProfile` holds all profile
curves as a single table in long form, for further analysis or plotting.
"""

from ._profiler import *
from ._result import *
