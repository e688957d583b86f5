"""Request execution: transport call, optional transcoding and parsing."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Optional

from .encoding import transcode
from .http.protocols import Transport
from .models.response import ParsedResponse, RawResponse
from .options import Option, OptionStore
from .parsing import parse_header_section, split_sections

logger = logging.getLogger(__name__)


class RequestExecutor:
    """
    Runs one request through a transport and builds the ParsedResponse.

    Example:
        executor = RequestExecutor(transport, store)
        response = executor.execute("http://site.ru/page/1", "windows-1251", "utf-8")
        if not response.ok:
            print(f"Transport error {response.errno}: {response.error}")
    """

    def __init__(self, transport: Transport, store: OptionStore):
        self._transport = transport
        self._store = store

    def execute(
        self,
        url: str,
        from_charset: Optional[str] = None,
        to_charset: Optional[str] = None,
    ) -> ParsedResponse:
        """
        Apply the URL, call the transport and parse its output.

        Args:
            url: Absolute URL to request
            from_charset: Charset of the response body (or ``"auto"``)
            to_charset: Charset to convert the body to

        Returns:
            ParsedResponse with diagnostics attached

        Raises:
            TranscodeError: If both charsets are given and conversion fails
            MalformedHeaderError: If a header line cannot be parsed
        """
        self._store.set(Option.URL, url)
        output = self._transport.perform()
        info = MappingProxyType(dict(self._transport.get_info()))

        if output.errno:
            logger.warning(f"Request to {url} failed with transport error {output.errno}: {output.error}")

        raw = RawResponse(
            data=output.data,
            errno=int(output.errno),
            error=output.error,
            header_size=int(info.get("header_size") or 0),
            info=info,
        )
        return self.parse(raw, from_charset, to_charset)

    def parse(
        self,
        raw: RawResponse,
        from_charset: Optional[str] = None,
        to_charset: Optional[str] = None,
    ) -> ParsedResponse:
        """
        Turn raw transport output into a ParsedResponse.

        Header blocks are only looked for when ``SHOW_HEADERS`` is exactly
        ``True``; otherwise the whole output is the body.
        """
        show_headers = self._store.get(Option.SHOW_HEADERS) is True
        section, body = split_sections(raw.data, raw.header_size, show_headers)

        charset = None
        if from_charset is not None and to_charset is not None:
            body = transcode(body, from_charset, to_charset)
            charset = to_charset

        headers = parse_header_section(section) if show_headers else ()

        return ParsedResponse(
            headers=headers,
            content=body,
            errno=raw.errno,
            error=raw.error,
            info=raw.info,
            charset=charset,
        )
