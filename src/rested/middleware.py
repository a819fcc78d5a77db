"""Clients which wrap other clients, forming a chain
through which requests are sent"""
import gzip
import zlib

from .clients import close, close_async, send, send_async
from .http import get_header

__all__ = ["Middleware", "AcceptEncoding"]


class Middleware:
    """A client which forwards requests to a delegate client.

    Middleware are registered with :func:`~rested.clients.send`
    and :func:`~rested.clients.send_async`,
    so they can be nested arbitrarily deep.

    Parameters
    ----------
    delegate
        the client to forward requests to
    """

    def __init__(self, delegate):
        self.delegate = delegate
        self._closed = False

    def call(self, request):
        """Send a request through the delegate

        Parameters
        ----------
        request: ~rested.http.Request
            the request to send

        Returns
        -------
        ~rested.http.Response
            the resulting response
        """
        return send(self.delegate, request)

    async def call_async(self, request):
        """Send a request through the delegate asynchronously"""
        return await send_async(self.delegate, request)

    @property
    def closed(self):
        return self._closed

    def close(self):
        """Close the delegate. Only the first call has any effect."""
        if not self._closed:
            self._closed = True
            close(self.delegate)

    async def close_async(self):
        if not self._closed:
            self._closed = True
            await close_async(self.delegate)


@send.register(Middleware)
def _middleware_send(middleware, request):
    return middleware.call(request)


@send_async.register(Middleware)
async def _middleware_send_async(middleware, request):
    return await middleware.call_async(request)


@close.register(Middleware)
def _middleware_close(middleware):
    middleware.close()


@close_async.register(Middleware)
async def _middleware_close_async(middleware):
    await middleware.close_async()


def _inflate(content):
    try:
        return zlib.decompress(content)
    except zlib.error:
        # raw deflate stream, without zlib header
        return zlib.decompress(content, -zlib.MAX_WBITS)


class AcceptEncoding(Middleware):
    """Advertise compressed response encodings,
    and decode response content accordingly.

    Parameters
    ----------
    delegate
        the client to forward requests to
    decoders: ~typing.Mapping[str, ~typing.Callable[[bytes], bytes]]
        the supported content codings and their decoders
    """

    DEFAULT_DECODERS = {"gzip": gzip.decompress, "deflate": _inflate}

    def __init__(self, delegate, decoders=None):
        super().__init__(delegate)
        self.decoders = dict(
            self.DEFAULT_DECODERS if decoders is None else decoders
        )

    def prepare(self, request):
        if get_header(request.headers, "Accept-Encoding") is not None:
            return request
        return request.with_headers(
            {"Accept-Encoding": ", ".join(self.decoders)}
        )

    def decode(self, response):
        coding = get_header(response.headers, "Content-Encoding", "")
        decoder = self.decoders.get(coding.strip().lower())
        if decoder is None or not response.content:
            return response
        return response.replace(
            content=decoder(response.content),
            headers={
                k: v
                for k, v in response.headers.items()
                if k.lower() not in ("content-encoding", "content-length")
            },
        )

    def call(self, request):
        return self.decode(send(self.delegate, self.prepare(request)))

    async def call_async(self, request):
        return self.decode(
            await send_async(self.delegate, self.prepare(request))
        )
