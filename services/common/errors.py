"""Errors shared by more than one service package."""


class InvalidRequestError(ValueError):
    """The caller sent parameters we cannot serve. Maps to HTTP 400."""
    pass
