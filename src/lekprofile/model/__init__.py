"""
Adapters providing a uniform view of fitted models, as required to compute Lek
profiles.

Each adapter resolves the explanatory input matrix, the explanatory and
response names, and a prediction function for one kind of fitted model:

- :class:`.LearnerAdapter` for :mod:`sklearndf` learners and their training
  :class:`.Sample`
- :class:`.FormulaAdapter` for models fitted from a formula and a data table
- :class:`.TableAdapter` for models fitted on named input and output tables
- :class:`.ArrayAdapter` for models fitted on unnamed arrays
- :class:`.NetworkAdapter` for networks given only by their learned weights
- :class:`.FunctionAdapter` for plain prediction functions
"""

from ._formula import *
from ._function import *
from ._learner import *
from ._native import *
from ._network import *
