"""Errors raised at the provider boundary."""

from __future__ import annotations


class ProviderError(Exception):
    """Base error for number-rental provider calls."""


class ProviderUnavailable(ProviderError):
    """Network failure, timeout or non-2xx answer."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderDataInvalid(ProviderError):
    """The provider answered, but not with the JSON we expect.

    5sim reports refusals such as ``no free phones`` as a plain-text body; that text
    is kept in ``reason``.
    """

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
