"""
stagehand.core.variables - Deployment Variable Store
======================================================

This module implements the VariableDictionary: the ordered, case-insensitive
store of deployment variables shared by every convention and script in one
deployment.

Lookup Rules:
    - Names are matched case-insensitively ("Foo" and "FOO" are one entry)
    - Matching is exact; there is no prefix or partial matching
    - Re-setting a name keeps its original position and spelling

Evaluation:
    ``get()`` returns the value after ``#{Name}`` substitution against the
    store itself. Substitution is repeated until the text stops changing,
    but never more than MAX_EVALUATION_PASSES times, so mutually referential
    variables terminate in their last-substituted form instead of recursing:

        A = "#{B}"      get("A") → "#{B}"   (ten passes: B, A, B, ... B)
        B = "#{A}"

    Unknown placeholders are left in the text untouched.

Sensitivity:
    Sensitive entries are masked (``********``) in every representation
    meant for logs and are rendered encrypted into bootstrap scripts.

Usage:
    >>> variables = VariableDictionary()
    >>> variables.set("Name", "world")
    >>> variables.set("Greeting", "Hello #{Name}")
    >>> variables.get("greeting")
    'Hello world'
"""

from __future__ import annotations

import re
from collections import OrderedDict
from typing import Iterator, Optional

from stagehand.core.models import Variable


# Cap on repeated substitution passes (cycle guard).
MAX_EVALUATION_PASSES = 10

# Placeholder shown instead of sensitive values.
MASK = "********"

_PLACEHOLDER = re.compile(r"#\{([^{}]+)\}")


class VariableDictionary:
    """Ordered, case-insensitive mapping of variable name to Variable.

    Owned by exactly one RunningDeployment. Mutated by conventions between
    script executions and by the service message parser while a script runs,
    never by both at once.
    """

    def __init__(self, initial: Optional[dict[str, Optional[str]]] = None) -> None:
        self._variables: OrderedDict[str, Variable] = OrderedDict()
        for name, value in (initial or {}).items():
            self.set(name, value)

    @staticmethod
    def _key(name: str) -> str:
        return name.casefold()

    # =========================================================================
    # Mutation
    # =========================================================================

    def set(self, name: str, value: Optional[str], sensitive: bool = False) -> None:
        """Insert or update a variable.

        Updating an existing entry keeps its position and original spelling.
        Sensitivity is sticky: once a name has been marked sensitive, later
        plain updates keep it sensitive.
        """
        if not name:
            raise ValueError("Variable name must not be empty")

        key = self._key(name)
        existing = self._variables.get(key)
        if existing is not None:
            self._variables[key] = existing.model_copy(update={
                "value": value,
                "sensitive": existing.sensitive or sensitive,
            })
        else:
            self._variables[key] = Variable(name=name, value=value, sensitive=sensitive)

    def set_sensitive(self, name: str, value: Optional[str]) -> None:
        """Shortcut for ``set(name, value, sensitive=True)``."""
        self.set(name, value, sensitive=True)

    def remove(self, name: str) -> bool:
        """Remove a variable. Returns False when it was not present."""
        return self._variables.pop(self._key(name), None) is not None

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_raw(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the stored value without ``#{...}`` substitution."""
        variable = self._variables.get(self._key(name))
        if variable is None or variable.value is None:
            return default
        return variable.value

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the evaluated value of a variable, or ``default``."""
        raw = self.get_raw(name)
        if raw is None:
            return default
        return self.evaluate(raw)

    def get_flag(self, name: str, default: bool = False) -> bool:
        """Interpret a variable as a boolean ("true"/"false", case-insensitive)."""
        value = self.get(name)
        if value is None or value.strip() == "":
            return default
        return value.strip().lower() == "true"

    def is_sensitive(self, name: str) -> bool:
        variable = self._variables.get(self._key(name))
        return variable is not None and variable.sensitive

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._variables

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[str]:
        return (variable.name for variable in self._variables.values())

    def all_raw(self) -> list[Variable]:
        """All variables in insertion order, un-evaluated (for rendering)."""
        return list(self._variables.values())

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate(self, text: str) -> str:
        """Substitute ``#{Name}`` placeholders, bounded by MAX_EVALUATION_PASSES."""
        for _ in range(MAX_EVALUATION_PASSES):
            substituted = _PLACEHOLDER.sub(self._substitute, text)
            if substituted == text:
                break
            text = substituted
        return text

    def _substitute(self, match: re.Match) -> str:
        value = self.get_raw(match.group(1).strip())
        return match.group(0) if value is None else value

    # =========================================================================
    # Masked views
    # =========================================================================

    def masked(self, name: str) -> Optional[str]:
        """Value safe for logs: sensitive values are replaced with the mask."""
        if self.is_sensitive(name):
            return MASK
        return self.get_raw(name)

    def describe(self) -> dict[str, Optional[str]]:
        """Name → loggable value for every variable."""
        return {
            variable.name: MASK if variable.sensitive else variable.value
            for variable in self._variables.values()
        }

    def __repr__(self) -> str:
        return f"VariableDictionary({self.describe()!r})"
