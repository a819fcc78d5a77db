"""Exceptions raised by resources and representations"""

__all__ = ["Error", "ResponseError", "ConfigurationError"]


class Error(Exception):
    """Base class for all errors raised by this package"""


class ResponseError(Error):
    """A response reported a non-success status while
    fetching the value of a representation.

    Parameters
    ----------
    response: ~rested.wrapper.Reply
        The offending response, available for inspection.
    """

    def __init__(self, response):
        super().__init__(response)
        self.response = response

    @property
    def status_code(self):
        """The HTTP status code of the response"""
        return self.response.status_code

    def __str__(self):
        return "unexpected response: {!r}".format(self.response)


class ConfigurationError(Error):
    """A representation was used without a wrapper to encode
    and decode its requests."""
