"""Wrappers translate between payloads and HTTP bodies
for one family of content types"""
import json
import logging
from urllib.parse import parse_qsl, urlencode

from urllib3.filepost import encode_multipart_formdata

from .clients import send, send_async
from .http import get_header

__all__ = ["Reply", "Wrapper", "JSON", "Form", "URLEncoded"]

logger = logging.getLogger(__name__)


class Reply:
    """A response, together with the decoder of the wrapper
    which requested it. The content is only decoded by :meth:`read`.

    Parameters
    ----------
    response: ~rested.http.Response
        the raw response
    decode: ~typing.Callable[[~rested.http.Response], object]
        the decoder for the response content
    """

    __slots__ = "response", "_decode"

    def __init__(self, response, decode):
        self.response = response
        self._decode = decode

    @property
    def status_code(self):
        return self.response.status_code

    @property
    def headers(self):
        return self.response.headers

    @property
    def content(self):
        return self.response.content

    @property
    def success(self):
        return self.response.success

    def read(self):
        """Decode the response content

        Returns
        -------
        object
            the decoded value
        """
        return self._decode(self.response)

    def __repr__(self):
        return "<Reply: {0.status_code}, headers={0.headers!r}>".format(self)


def _decode_json(content):
    return json.loads(content) if content else None


def _decode_urlencoded(content):
    if not content:
        return {}
    if isinstance(content, bytes):
        content = content.decode("utf-8")
    result = {}
    for key, value in parse_qsl(content, keep_blank_values=True):
        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]
    return result


def _media_type(headers):
    content_type = get_header(headers, "Content-Type", "")
    return content_type.split(";")[0].strip().lower()


class Wrapper:
    """Base class for wrappers.

    Subclasses implement :meth:`encode` and :meth:`decode`,
    and set :attr:`accept`.
    """

    accept = "*/*"

    def encode(self, payload, headers):
        """Encode a payload as request content.

        Parameters
        ----------
        payload
            the object to encode
        headers: dict
            the request headers. The content type is to be added here.

        Returns
        -------
        bytes
            the request content
        """
        raise NotImplementedError()

    def decode(self, response):
        """Decode the content of a response

        Parameters
        ----------
        response: ~rested.http.Response
            the response to decode
        """
        raise NotImplementedError()

    def prepare_request(self, resource, method, payload=None):
        request = resource.prepare_request(method, payload, self.encode)
        if get_header(request.headers, "Accept") is not None:
            return request
        return request.with_headers({"Accept": self.accept})

    def call(self, resource, method, payload=None):
        """Send a request to a resource.

        Parameters
        ----------
        resource: ~rested.resource.Resource
            the resource to send the request to
        method: str
            the HTTP method
        payload
            the object to send as request body, if any

        Returns
        -------
        Reply
            the response. Its content is not decoded until read.
        """
        request = self.prepare_request(resource, method, payload)
        logger.debug("%s %s", method, request.url)
        return Reply(send(resource, request), self.decode)

    async def call_async(self, resource, method, payload=None):
        """Send a request to a resource asynchronously.
        See :meth:`call`."""
        request = self.prepare_request(resource, method, payload)
        logger.debug("%s %s", method, request.url)
        return Reply(await send_async(resource, request), self.decode)


class JSON(Wrapper):
    """Encode and decode JSON documents.

    Parameters
    ----------
    content_type: str
        the content type to send and accept.
        Some servers use a non-standard one.
    """

    def __init__(self, content_type="application/json"):
        self.content_type = content_type

    @property
    def accept(self):
        return self.content_type

    def encode(self, payload, headers):
        headers["Content-Type"] = self.content_type
        return json.dumps(payload).encode("utf-8")

    def decode(self, response):
        """Parse JSON content. Content of other media types,
        such as an HTML error page, is returned as-is."""
        if not response.content:
            return None
        media_type = _media_type(response.headers)
        if (
            media_type == self.content_type.lower()
            or media_type == "application/json"
            or media_type.endswith("+json")
        ):
            return _decode_json(response.content)
        return response.content

    def __repr__(self):
        return "JSON({!r})".format(self.content_type)


class URLEncoded(Wrapper):
    """Encode and decode ``application/x-www-form-urlencoded`` data"""

    content_type = accept = "application/x-www-form-urlencoded"

    def encode(self, payload, headers):
        headers["Content-Type"] = self.content_type
        return urlencode(payload, doseq=True).encode("ascii")

    def decode(self, response):
        return _decode_urlencoded(response.content)


class Form(Wrapper):
    """Submit payloads as ``multipart/form-data``.
    Responses are decoded according to their content type:
    JSON and url-encoded data are supported,
    other content is returned as-is."""

    accept = "application/json, application/x-www-form-urlencoded"

    def encode(self, payload, headers):
        content, headers["Content-Type"] = encode_multipart_formdata(payload)
        return content

    def decode(self, response):
        media_type = _media_type(response.headers)
        if media_type == "application/json":
            return _decode_json(response.content)
        elif media_type == "application/x-www-form-urlencoded":
            return _decode_urlencoded(response.content)
        return response.content
