"""Basic HTTP abstractions and functionality"""
from collections.abc import Mapping
from itertools import chain
from operator import attrgetter
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

__all__ = ["Request", "Response", "Reference", "get_header"]


class _FrozenDict(Mapping):
    __slots__ = "_inner"

    def __init__(self, inner=()):
        self._inner = dict(inner)

    __len__ = property(attrgetter("_inner.__len__"))
    __iter__ = property(attrgetter("_inner.__iter__"))
    __getitem__ = property(attrgetter("_inner.__getitem__"))
    __repr__ = property(attrgetter("_inner.__repr__"))


class _SlotsMixin(object):
    __slots__ = ()

    def _asdict(self):
        return {a: getattr(self, a) for a in self.__slots__}

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self._asdict() == other._asdict()
        return NotImplemented

    def __ne__(self, other):
        if isinstance(other, self.__class__):
            return self._asdict() != other._asdict()
        return NotImplemented

    def replace(self, **kwargs):
        """Create a copy with replaced fields

        Parameters
        ----------
        **kwargs
            fields and values to replace
        """
        return type(self)(**_merge_maps(self._asdict(), kwargs))


def _merge_maps(m1, m2):
    """merge two Mapping objects, keeping the type of the first mapping"""
    return type(m1)(chain(m1.items(), m2.items()))


def get_header(headers, name, default=None):
    """Look up a header case-insensitively

    Parameters
    ----------
    headers: Mapping
        the headers to search
    name: str
        the header name
    default
        returned if the header is absent
    """
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return default


class Reference(_SlotsMixin):
    """The address of a resource: a URL and its query parameters.

    Parameters
    ----------
    url: str
        The URL, without query string
    params: Mapping
        The query parameters.
    """

    __slots__ = "url", "params"
    __hash__ = None

    def __init__(self, url="", params=_FrozenDict()):
        self.url = url
        self.params = params

    @classmethod
    def parse(cls, url):
        """Create a reference from a URL, splitting off its query string

        Parameters
        ----------
        url: str
            the URL to parse
        """
        parts = urlsplit(url)
        return cls(
            urlunsplit(parts._replace(query="", fragment="")),
            _FrozenDict(parse_qsl(parts.query, keep_blank_values=True)),
        )

    def with_(self, path=None, params=None):
        """Create a new reference scoped to a path and extra parameters

        Parameters
        ----------
        path: str or None
            a path resolved relative to the current URL
        params: Mapping or None
            query parameters to add. These override existing ones.
        """
        return self.replace(
            url=self.url if path is None else urljoin(self.url, path),
            params=_merge_maps(self.params, params or {}),
        )

    def __str__(self):
        if not self.params:
            return self.url
        return self.url + "?" + urlencode(list(self.params.items()))

    def __repr__(self):
        return "<Reference: {}>".format(self)


class Request(_SlotsMixin):
    """A simple HTTP request.

    Parameters
    ----------
    method: str
        The http method
    url: str
        The requested url
    content: bytes or None
        The request content
    params: Mapping
        The query parameters.
    headers: Mapping
        Request headers.
    """

    __slots__ = "method", "url", "content", "params", "headers"
    __hash__ = None

    def __init__(
        self,
        method,
        url,
        content=None,
        params=_FrozenDict(),
        headers=_FrozenDict(),
    ):
        self.method = method
        self.url = url
        self.content = content
        self.params = params
        self.headers = headers

    def with_headers(self, headers):
        """Create a new request with added headers

        Parameters
        ----------
        headers: Mapping
            the headers to add
        """
        return self.replace(headers=_merge_maps(self.headers, headers))

    def __repr__(self):
        return (
            "<Request: {0.method} {0.url}, params={0.params!r}, "
            "headers={0.headers!r}>"
        ).format(self)


class Response(_SlotsMixin):
    """A simple HTTP response.

    Parameters
    ----------
    status_code: int
        The HTTP status code
    content: bytes or None
        The response content
    headers: Mapping
        The headers of the response.
    """

    __slots__ = "status_code", "content", "headers"
    __hash__ = None

    def __init__(self, status_code, content=None, headers=_FrozenDict()):
        self.status_code = status_code
        self.content = content
        self.headers = headers

    @property
    def success(self):
        """Whether the status code is in the 2xx range"""
        return 200 <= self.status_code < 300

    def read(self):
        """The raw response content"""
        return self.content

    def __repr__(self):
        return (
            "<Response: {0.status_code}, " "headers={0.headers!r}>"
        ).format(self)

