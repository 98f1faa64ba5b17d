"""JSON-lines server that exposes a MethodChannel over a pair of streams."""

import asyncio
import json
import logging
import sys
from typing import Any, BinaryIO, Optional, Set, TextIO, Union

from ..core.exceptions import EncodingError
from .channel import MethodChannel, MethodResponse


class StdioServer:
    """Reads one JSON request per line and writes one JSON response per line.

    Request:  ``{"id": <any>, "method": "getLists", "arguments": {...}}``
    Response: ``{"id", "result"}``, ``{"id", "error": {"code", "message"}}``
    or ``{"id", "notImplemented": true}``.

    Input is read as bytes and decoded per line, so a line that is not
    UTF-8 gets an error response instead of ending the loop. Text streams
    are accepted too.

    Requests are dispatched concurrently; the facade decides what may
    overlap. Responses therefore come back in completion order, matched to
    requests by ``id``.
    """

    def __init__(
        self,
        channel: MethodChannel,
        input_stream: Optional[Union[BinaryIO, TextIO]] = None,
        output_stream: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.channel = channel
        self.input = input_stream or getattr(sys.stdin, "buffer", sys.stdin)
        self.output = output_stream or sys.stdout
        self.logger = logger or logging.getLogger(__name__)
        self.handled = 0

    def _write(self, message: Any) -> None:
        # a single synchronous write per response keeps lines intact
        self.output.write(json.dumps(message, ensure_ascii=False) + "\n")
        self.output.flush()

    def _reject(self, error: EncodingError, call_id: Any = None) -> None:
        self.logger.warning(f"Rejected request line: {error.message}")
        self._write(MethodResponse.failure(error).to_message(call_id))

    async def handle_line(self, line: Union[bytes, str]) -> None:
        call_id = None
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as e:
                self._reject(EncodingError(f"invalid UTF-8: {e.reason} at byte {e.start}"))
                return

        try:
            request = json.loads(line)
        except json.JSONDecodeError as e:
            self._reject(EncodingError(f"invalid JSON: {e.msg}"))
            return

        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            if isinstance(request, dict):
                call_id = request.get("id")
            self._reject(EncodingError("request must be an object with a string 'method'"), call_id)
            return

        call_id = request.get("id")
        response = await self.channel.invoke(request["method"], request.get("arguments"))
        self.handled += 1
        self._write(response.to_message(call_id))

    async def serve(self) -> int:
        """Serve until EOF on the input stream; returns the number of calls handled."""
        loop = asyncio.get_running_loop()
        pending: Set[asyncio.Task] = set()
        self.logger.info("Method channel listening on stdio")

        while True:
            line = await loop.run_in_executor(None, self.input.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            task = asyncio.ensure_future(self.handle_line(line))
            pending.add(task)
            task.add_done_callback(pending.discard)

        if pending:
            await asyncio.gather(*pending)
        self.logger.info(f"Input closed after {self.handled} calls")
        return self.handled
