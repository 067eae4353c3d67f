"""
Reassemble streamed reply chunks into lines for the markdown renderer.

Chunks arrive at arbitrary boundaries (mid-line, even mid-character for byte
chunks). Complete lines are rendered and written to the sink right away; the
unterminated tail waits for the next chunk or for ``finish()``.
"""

import codecs
from typing import Callable, Iterable, List, Optional, Union

from .utils import write_stdout

Chunk = Union[str, bytes]


class StreamReassembler:
    """Bridge between a chunked text stream and a MarkdownRenderer."""

    def __init__(
        self,
        renderer=None,
        sink: Optional[Callable[[str], None]] = None,
        encoding: str = "utf-8",
    ):
        """
        Args:
            renderer: object with ``render_line``; None passes text through unrendered
            sink: callable receiving every output fragment (defaults to stdout)
            encoding: used for byte chunks
        """
        self.renderer = renderer
        self.sink = sink or write_stdout
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._raw_parts: List[str] = []
        self.pending = ""

    @property
    def raw_text(self) -> str:
        """Everything received so far, undecorated."""
        return "".join(self._raw_parts)

    def feed(self, chunk: Chunk) -> None:
        """Accept the next chunk and emit every line it completes."""
        if isinstance(chunk, bytes):
            text = self._decoder.decode(chunk)
        else:
            text = chunk or ""
        self._push(text)

    def finish(self) -> str:
        """Flush held bytes and the unterminated last line. Returns the raw text."""
        self._push(self._decoder.decode(b"", final=True))
        if self.renderer is not None and self.pending:
            self.sink(self.renderer.render_line(self.pending))
        self.pending = ""
        return self.raw_text

    def consume(self, chunks: Iterable[Chunk]) -> str:
        """Feed a whole stream and finish it."""
        for chunk in chunks:
            self.feed(chunk)
        return self.finish()

    def _push(self, text: str) -> None:
        if not text:
            return
        self._raw_parts.append(text)

        if self.renderer is None:
            self.sink(text)
            return

        self.pending += text
        *lines, self.pending = self.pending.split("\n")
        for line in lines:
            self.sink(f"{self.renderer.render_line(line)}\n")
