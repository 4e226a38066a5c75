"""Collect several errors and combine them into one."""

from __future__ import annotations


class _CombinedError(Exception):
    """An error made of several others, one message per line."""

    def __init__(self, errors: list[BaseException]) -> None:
        self.errors = list(errors)
        super().__init__("".join(f"{error}\n" for error in self.errors))

    def __str__(self) -> str:
        return self.args[0]


class ErrorList(list):
    """A list of errors that skips ``None`` and merges into a single error."""

    def add(self, *args: BaseException | None) -> None:
        """Append every error given that is not ``None``."""
        self.extend(error for error in args if error is not None)

    def result(self) -> Exception | None:
        """Return one error holding all collected messages, or ``None``."""
        if not any(str(error) for error in self):
            return None
        return _CombinedError(self)