"""
Lek profiles for fitted predictive models.

This is the class and function reference of *lekprofile*, which computes
sensitivity profiles showing how the predictions of a model respond as one
explanatory variable sweeps its observed range, while all other explanatory
variables are held constant at selected quantiles.
"""


__version__ = "1.0.0"
