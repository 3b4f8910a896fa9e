# -*- coding: utf-8 -*-
"""
Errors raised by the access layer.
Route handlers let these propagate; the application maps them to JSON responses.
"""


class AccessError(Exception):
    """Base class for access-layer failures."""

    status_code = 500


class ValidationError(AccessError):
    """Invalid role, page, capability or payload; never retried."""

    status_code = 400


class NotFoundError(AccessError):
    """A referenced identity, user or post does not exist."""

    status_code = 404


class StoreUnavailable(AccessError):
    """The database could not be read or written."""

    status_code = 503
