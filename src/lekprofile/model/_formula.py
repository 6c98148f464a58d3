"""
Implementation of :class:`.Formula`.
"""

import logging
import re
from typing import Iterable, List, Tuple

import pandas as pd

from pytools.api import AllTracker

from ..errors import MissingNamesError

log = logging.getLogger(__name__)

__all__ = [
    "Formula",
]

#
# Constants
#

# characters denoting formula operators we do not support within a term
_RE_UNSUPPORTED = re.compile(r"[~*:^|()\-]")


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class Formula:
    """
    A model formula of the form ``"Y1 + Y2 ~ X1 + X2 + X3"``, naming the
    response variables on the left-hand side and the explanatory variables on
    the right-hand side.

    Terms are separated by ``+``. Names that are not valid as plain terms can
    be quoted with backticks, e.g. ``"`price (USD)` ~ X1 + X2"``.
    A single ``.`` on the right-hand side stands for all columns of the data
    that are not responses.
    """

    #: The right-hand side term expanding to all non-response columns.
    ALL_OTHER = "."

    def __init__(
        self, *, response_terms: Iterable[str], explanatory_terms: Iterable[str]
    ) -> None:
        """
        :param response_terms: the names of the response variables
        :param explanatory_terms: the names of the explanatory variables,
            optionally including :attr:`.ALL_OTHER`
        """
        self.response_terms: List[str] = list(response_terms)
        self.explanatory_terms: List[str] = list(explanatory_terms)

        if Formula.ALL_OTHER in self.response_terms:
            raise ValueError(
                f'"{Formula.ALL_OTHER}" is not permitted on the left-hand side '
                "of a formula"
            )

    @classmethod
    def parse(cls, formula: str) -> "Formula":
        """
        Parse a formula string.

        :param formula: the formula to parse
        :return: the parsed formula
        :raise ValueError: if the formula is malformed or uses unsupported
            operators
        """
        if not isinstance(formula, str):
            raise TypeError(
                f"arg formula must be a string, but is a {type(formula).__qualname__}"
            )

        sides = _split_outside_quotes(formula, "~")
        if len(sides) != 2:
            raise ValueError(
                f"formula must have exactly one '~' separating responses and "
                f"explanatory variables: {formula!r}"
            )

        lhs, rhs = sides
        return cls(
            response_terms=_parse_terms(lhs, formula),
            explanatory_terms=_parse_terms(rhs, formula),
        )

    def resolve(self, data: pd.DataFrame) -> Tuple[List[str], List[str]]:
        """
        Resolve the terms of this formula against the columns of a data table.

        :param data: the data the model was trained on
        :return: a tuple of the explanatory names and the response names
        :raise MissingNamesError: if a term does not name a column of the data
        """
        columns = data.columns.to_list()
        response_names = self.response_terms

        explanatory_names: List[str] = []
        for term in self.explanatory_terms:
            if term == Formula.ALL_OTHER:
                candidates = [name for name in columns if name not in response_names]
            else:
                candidates = [term]
            explanatory_names.extend(
                name for name in candidates if name not in explanatory_names
            )

        missing = [
            name
            for name in [*response_names, *explanatory_names]
            if name not in columns
        ]
        if missing:
            raise MissingNamesError(
                f"formula terms are not columns of the data: {missing}"
            )

        overlap = set(response_names).intersection(explanatory_names)
        if overlap:
            raise ValueError(
                f"formula terms are both responses and explanatory: {overlap}"
            )

        return explanatory_names, response_names

    def __str__(self) -> str:
        def _side(terms: List[str]) -> str:
            return " + ".join(
                term if term == Formula.ALL_OTHER or _is_plain(term) else f"`{term}`"
                for term in terms
            )

        return f"{_side(self.response_terms)} ~ {_side(self.explanatory_terms)}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


__tracker.validate()


#
# auxiliary functions
#


def _split_outside_quotes(text: str, separator: str) -> List[str]:
    # split at the separator, ignoring separators within backtick quotes
    parts: List[str] = []
    current: List[str] = []
    quoted = False
    for char in text:
        if char == "`":
            quoted = not quoted
        if char == separator and not quoted:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if quoted:
        raise ValueError(f"unbalanced backtick in formula: {text!r}")
    parts.append("".join(current))
    return parts


def _parse_terms(side: str, formula: str) -> List[str]:
    terms: List[str] = []
    for raw_term in _split_outside_quotes(side, "+"):
        term = raw_term.strip()
        if len(term) >= 2 and term[0] == term[-1] == "`":
            term = term[1:-1]
        elif not term:
            raise ValueError(f"empty term in formula: {formula!r}")
        elif "`" in term or _RE_UNSUPPORTED.search(term):
            raise ValueError(f"unsupported term {term!r} in formula: {formula!r}")
        if not term:
            raise ValueError(f"empty term in formula: {formula!r}")
        if term not in terms:
            terms.append(term)
    return terms


def _is_plain(term: str) -> bool:
    return term.strip() == term and not (
        "+" in term or "`" in term or _RE_UNSUPPORTED.search(term)
    )
