"""Resources: named, addressable entities of a RESTful API"""
import inspect
import logging
import urllib.request

from .http import Reference, Request, _FrozenDict, _merge_maps
from .middleware import AcceptEncoding, Middleware
from .representation import Representation

__all__ = ["Resource"]

logger = logging.getLogger(__name__)


class Resource(Middleware):
    """A resource: a reference and default headers,
    together with the client used to reach it.

    A resource is itself a client (see :class:`~rested.middleware.Middleware`)
    which forwards requests to its delegate.
    It is immutable: derived resources are new instances,
    sharing the delegate.

    Parameters
    ----------
    delegate
        the client which sends requests.
    reference: ~rested.http.Reference
        the URL and query parameters of the resource
    headers: ~typing.Mapping[str, str]
        default headers for requests to the resource
    owner: bool
        whether this resource is responsible for closing the delegate.

    Example
    -------

    >>> with Resource.open("https://example.test/items") as items:
    ...     item = items.get(id=42)
    ...     item.value
    {'name': 'widget'}
    """

    def __init__(
        self,
        delegate,
        reference=Reference(),
        headers=_FrozenDict(),
        owner=True,
    ):
        super().__init__(delegate)
        self.reference = reference
        self.headers = _FrozenDict(headers)
        self.owner = owner

    @staticmethod
    def connect(endpoint, client=None):
        """Create a client and a reference for an endpoint

        Parameters
        ----------
        endpoint: str
            the base URL
        client
            the HTTP client to use.
            Its type must have been registered
            with :func:`~rested.clients.send`.
            If not given, the built-in :mod:`urllib` module is used.

        Returns
        -------
        ~typing.Tuple[AcceptEncoding, ~rested.http.Reference]
            the delegate and reference for a resource
        """
        if client is None:
            client = urllib.request.build_opener()
        return AcceptEncoding(client), Reference.parse(endpoint)

    @classmethod
    def open(cls, endpoint, headers=_FrozenDict(), client=None, func=None):
        """Open a resource at an endpoint.

        Parameters
        ----------
        endpoint: str
            the base URL
        headers: ~typing.Mapping[str, str]
            default headers for requests
        client
            the HTTP client to use. See :meth:`connect`.
        func: ~typing.Callable[[Resource], T] or None
            if given, it is called with the resource,
            which is closed afterwards, whatever happens.
            If ``func`` is a coroutine function, a coroutine is returned
            instead, which closes the resource once ``func`` completes.

        Returns
        -------
        Resource or T or ~typing.Awaitable[T]
            the resource, or the result of ``func``
        """
        delegate, reference = cls.connect(endpoint, client)
        resource = cls(delegate, reference, headers)
        logger.debug("opened %s", resource)
        if func is None:
            return resource
        if inspect.iscoroutinefunction(func):
            return _run_async(resource, func)
        with resource:
            return func(resource)

    @classmethod
    def derive(cls, parent, headers=_FrozenDict(), **options):
        """Create a resource scoped within another.

        Parameters
        ----------
        parent: Resource
            the resource to derive from
        headers: ~typing.Mapping[str, str]
            headers to add. These override the parent's headers.
        **options
            passed to :meth:`Reference.with_ <rested.http.Reference.with_>`:
            a relative ``path`` and/or ``params``.
        """
        return cls(
            parent.delegate,
            parent.reference.with_(**options),
            _merge_maps(parent.headers, headers),
            owner=False,
        )

    def with_(self, **options):
        """Derive a resource from this one. See :meth:`derive`"""
        return type(self).derive(self, **options)

    def get(self, cls=Representation, **params):
        """Fetch a representation of this resource

        Parameters
        ----------
        cls: type
            the representation class
        **params
            query parameters

        Returns
        -------
        ~rested.representation.Representation
            the representation, with its value fetched
        """
        representation = cls(self.with_(params=params))
        representation.value
        return representation

    def prepare_request(self, method, payload=None, encode=None):
        """Create a request to this resource.

        Parameters
        ----------
        method: str
            the HTTP method
        payload
            the object to send as request body, if any
        encode: ~typing.Callable[[object, dict], bytes]
            encodes the payload. It receives a copy of the headers,
            to which it may add the content type.

        Returns
        -------
        ~rested.http.Request
            the request
        """
        if payload is None:
            headers, content = self.headers, None
        else:
            headers = dict(self.headers)
            content = encode(payload, headers)
        return Request(
            method,
            self.reference.url,
            content=content,
            params=self.reference.params,
            headers=headers,
        )

    def close(self):
        """Close the delegate, if this resource opened it"""
        if self.owner:
            super().close()

    async def close_async(self):
        if self.owner:
            await super().close_async()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close_async()

    def __repr__(self):
        return "<{}: {}, headers={!r}>".format(
            type(self).__name__, self.reference, self.headers
        )

    def __str__(self):
        return str(self.reference)


async def _run_async(resource, func):
    async with resource:
        return await func(resource)
