"""Statement text and bound parameters assembled side by side.

Every fragment appended to a :class:`StatementBuilder` carries the parameters
for the placeholders it contains, so the final parameter list always lines up
with the ``?`` placeholders in the text, left to right.
"""

from typing import Any, Iterable


class StatementBuilder:
    """Accumulates (fragment, params) pairs for a qmark-style SQL statement."""

    def __init__(self) -> None:
        self._fragments: list[str] = []
        self._params: list[Any] = []

    def append(self, fragment: str, params: Iterable[Any] = ()) -> "StatementBuilder":
        """Append a fragment together with the parameters it binds.

        Args:
            fragment: SQL text, possibly containing ``?`` placeholders.
            params: Values for the placeholders in ``fragment``, in order.

        Returns:
            The builder, to allow chaining.

        Raises:
            ValueError: If the number of params does not match the number of
                placeholders in ``fragment``.
        """
        params = list(params)
        placeholders = fragment.count("?")
        if placeholders != len(params):
            raise ValueError(
                f"Fragment has {placeholders} placeholders but "
                f"{len(params)} parameters were given"
            )
        self._fragments.append(fragment)
        self._params.extend(params)
        return self

    def extend(self, other: "StatementBuilder") -> "StatementBuilder":
        """Append everything collected by another builder."""
        self._fragments.append(other.text)
        self._params.extend(other.params)
        return self

    def join(
        self, separator: str, parts: Iterable["StatementBuilder"], wrap: bool = False
    ) -> "StatementBuilder":
        """Append ``parts`` separated by ``separator``.

        Args:
            separator: Text placed between parts, must not contain placeholders.
            parts: Builders to append in order. Empty parts are skipped.
            wrap: Whether to put each part in parentheses.
        """
        first = True
        for part in parts:
            if not part:
                continue
            if not first:
                self._fragments.append(separator)
            first = False
            self._fragments.append(f"({part.text})" if wrap else part.text)
            self._params.extend(part.params)
        return self

    @property
    def text(self) -> str:
        return "".join(self._fragments)

    @property
    def params(self) -> list[Any]:
        return list(self._params)

    def build(self) -> tuple[str, list[Any]]:
        """Return the statement text and its parameter list."""
        return self.text, self.params

    def __bool__(self) -> bool:
        return bool(self.text)
