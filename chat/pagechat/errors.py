from __future__ import annotations


class PagechatError(Exception):
    """Base class for errors the client recovers from locally."""


class DuplicateName(PagechatError):
    pass


class IndexOutOfRange(PagechatError):
    pass


class PermissionDenied(PagechatError):
    pass


class TransportUnavailable(PagechatError):
    """The outbound side of the connection is gone."""


class LoginFailed(PagechatError):
    pass
