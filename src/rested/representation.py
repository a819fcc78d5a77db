"""Representations: the state of a resource at a point in time"""
import asyncio
import logging
import threading
from functools import partial

from .errors import ConfigurationError, ResponseError
from .http import _FrozenDict
from .wrapper import JSON

__all__ = ["Representation", "MutableRepresentation", "verb", "UNFETCHED"]

logger = logging.getLogger(__name__)


class _Unfetched:
    __slots__ = ()

    def __repr__(self):
        return "<unfetched>"


UNFETCHED = _Unfetched()
"""Marks a representation whose value has not been fetched yet.
Distinct from ``None``, which is a valid (fetched) value."""


class verb(object):
    """An HTTP method, exposed as a constructor on representation classes.

    Accessing it on a class (or an instance which does not override it)
    gives a callable ``(resource, payload=None, build=None)``,
    which sends the request and builds a representation from the response.

    Example
    -------

    >>> class Item(Representation):
    ...     put = verb("PUT")
    ...
    >>> item = Item.put(resource, {"name": "widget"})

    Parameters
    ----------
    method: str
        the HTTP method
    asynchronous: bool
        whether the constructor returns an awaitable
    """

    def __init__(self, method, asynchronous=False, instance_method=None):
        self.method = method
        self.asynchronous = asynchronous
        self._instance_method = instance_method

    def instance(self, func):
        """Give the verb a different meaning when accessed on an instance.
        Use as a decorator."""
        return type(self)(self.method, self.asynchronous, func)

    def __get__(self, obj, objtype=None):
        if obj is not None and self._instance_method is not None:
            return self._instance_method.__get__(obj, objtype)
        cls = type(obj) if objtype is None else objtype
        request = cls.request_async if self.asynchronous else cls.request
        return partial(request, self.method)


class Representation(object):
    """A representation of a resource: its value at the time
    the representation was created or fetched.

    The value is fetched lazily, on first access of :attr:`value`,
    and at most once.

    Parameters
    ----------
    resource: ~rested.resource.Resource
        the resource this is a representation of
    value
        the value, if already known. No request is made in that case.
    metadata: ~typing.Mapping
        the metadata (response headers) of the value
    wrapper: ~rested.wrapper.Wrapper or None
        a wrapper to use instead of the one bound to the class

    Note
    ----
    Subclasses bind a different wrapper by overriding :attr:`wrapper`,
    or with :meth:`bind`.
    """

    wrapper = JSON()

    get = verb("GET")
    post = verb("POST")
    put = verb("PUT")
    patch = verb("PATCH")
    delete = verb("DELETE")
    head = verb("HEAD")
    options = verb("OPTIONS")

    aget = verb("GET", asynchronous=True)
    apost = verb("POST", asynchronous=True)
    aput = verb("PUT", asynchronous=True)
    apatch = verb("PATCH", asynchronous=True)
    adelete = verb("DELETE", asynchronous=True)
    ahead = verb("HEAD", asynchronous=True)
    aoptions = verb("OPTIONS", asynchronous=True)

    def __init__(
        self, resource, value=UNFETCHED, metadata=_FrozenDict(), wrapper=None
    ):
        self.resource = resource
        self.metadata = metadata
        self._value = value
        if wrapper is not None:
            self.wrapper = wrapper
        self._lock = threading.Lock()
        self._async_lock = None

    @classmethod
    def bind(cls, wrapper):
        """Create a subclass bound to another wrapper

        Parameters
        ----------
        wrapper: ~rested.wrapper.Wrapper or type
            the wrapper, or a wrapper class to instantiate
        """
        if isinstance(wrapper, type):
            wrapper = wrapper()
        return type(cls.__name__, (cls,), {"wrapper": wrapper})

    @classmethod
    def _bound_wrapper(cls, wrapper):
        if wrapper is None:
            raise ConfigurationError(
                "no wrapper bound to {}".format(cls.__name__)
            )
        return wrapper

    @classmethod
    def request(cls, method, resource, payload=None, build=None):
        """Send a request to a resource, and create a representation
        from the response.

        Parameters
        ----------
        method: str
            the HTTP method
        resource: ~rested.resource.Resource
            the resource to send the request to
        payload
            the request body, to be encoded by the wrapper
        build: ~typing.Callable or None
            custom construction. See :meth:`from_response`.
        """
        reply = cls._bound_wrapper(cls.wrapper).call(resource, method, payload)
        return cls.from_response(resource, reply, build)

    @classmethod
    async def request_async(cls, method, resource, payload=None, build=None):
        """Asynchronous version of :meth:`request`"""
        wrapper = cls._bound_wrapper(cls.wrapper)
        reply = await wrapper.call_async(resource, method, payload)
        return cls.from_response(resource, reply, build)

    @classmethod
    def from_response(cls, resource, response, build=None):
        """Create a representation from a response

        Parameters
        ----------
        resource: ~rested.resource.Resource
            the resource the response came from
        response: ~rested.wrapper.Reply
            the response
        build: ~typing.Callable or None
            if given, it is called with ``(resource, response, cls)``,
            and its result is returned instead.
        """
        if build is not None:
            return build(resource, response, cls)
        return cls(resource, value=response.read(), metadata=response.headers)

    def with_(self, cls=None, **options):
        """Create a representation of a derived resource.
        Its value is not fetched.

        Parameters
        ----------
        cls: type or None
            the representation class to use.
            By default, the class of this representation.
        **options
            passed to :meth:`Resource.with_ <rested.resource.Resource.with_>`
        """
        resource = self.resource.with_(**options)
        if cls is not None:
            return cls(resource)
        if "wrapper" in vars(self):
            return type(self)(resource, wrapper=self.wrapper)
        return type(self)(resource)

    def __getitem__(self, params):
        return self.with_(params=params)

    @property
    def has_value(self):
        """Whether the value has been fetched (or given).
        Does not trigger a fetch."""
        return self._value is not UNFETCHED

    @property
    def value(self):
        """The value, fetched from the resource if not yet known

        Raises
        ------
        ~rested.errors.ResponseError
            if the response status is not a success
        """
        if self._value is UNFETCHED:
            with self._lock:
                if self._value is UNFETCHED:
                    self._store(
                        self._bound_wrapper(self.wrapper).call(
                            self.resource, "GET"
                        )
                    )
        return self._value

    async def fetch_async(self):
        """Fetch the value asynchronously, if not yet known.

        Returns
        -------
        object
            the value
        """
        if self._value is UNFETCHED:
            async with self._get_async_lock():
                if self._value is UNFETCHED:
                    wrapper = self._bound_wrapper(self.wrapper)
                    self._store(await wrapper.call_async(self.resource, "GET"))
        return self._value

    def _get_async_lock(self):
        if self._async_lock is None:
            self._async_lock = asyncio.Lock()
        return self._async_lock

    def _store(self, reply):
        if not reply.success:
            raise ResponseError(reply)
        value = reply.read()
        logger.debug("fetched %s (%s)", self.resource, reply.status_code)
        self.metadata = reply.headers
        self._value = value

    def close(self):
        """Close the underlying resource"""
        self.resource.close()

    def __repr__(self):
        return "<{}: {}, value={!r}>".format(
            type(self).__name__, self.resource.reference, self._value
        )


class MutableRepresentation(object):
    """Mixin for representations whose value can be replaced
    or deleted on the server.

    Example
    -------

    >>> class Item(MutableRepresentation, Representation):
    ...     pass
    """

    @verb("POST").instance
    def post(self, value):
        """Post a new value to the resource. The cached value
        is replaced by the value the server responds with.

        Returns
        -------
        MutableRepresentation
            this representation
        """
        reply = self._bound_wrapper(self.wrapper).call(
            self.resource, "POST", value
        )
        with self._lock:
            self._store(reply)
        return self

    @verb("DELETE").instance
    def delete(self):
        """Delete the resource. The cached value is discarded.

        Returns
        -------
        ~rested.wrapper.Reply
            the response
        """
        reply = self._bound_wrapper(self.wrapper).call(self.resource, "DELETE")
        with self._lock:
            self._value = UNFETCHED
            self.metadata = _FrozenDict()
        return reply

    def assign(self, value):
        """Post the value, or delete the resource if the value is ``None``"""
        if value is None:
            return self.delete()
        return self.post(value)

    @verb("POST", asynchronous=True).instance
    async def apost(self, value):
        """Post a new value asynchronously. See :meth:`post`"""
        wrapper = self._bound_wrapper(self.wrapper)
        reply = await wrapper.call_async(self.resource, "POST", value)
        async with self._get_async_lock():
            self._store(reply)
        return self

    @verb("DELETE", asynchronous=True).instance
    async def adelete(self):
        """Delete the resource asynchronously. See :meth:`delete`"""
        wrapper = self._bound_wrapper(self.wrapper)
        reply = await wrapper.call_async(self.resource, "DELETE")
        async with self._get_async_lock():
            self._value = UNFETCHED
            self.metadata = _FrozenDict()
        return reply

    async def aassign(self, value):
        """Assign a value asynchronously. See :meth:`assign`"""
        if value is None:
            return await self.adelete()
        return await self.apost(value)
