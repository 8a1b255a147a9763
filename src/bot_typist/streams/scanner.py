"""Buffered look-ahead over a streaming ``Reader``."""

from __future__ import annotations

import re

from bot_typist.streams.base import DONE, Reader, Writer

#: Emoji blocks accepted by ``Scanner.take_emoji``.
_EMOJI_RANGES = (
    (0x1F300, 0x1F5FF),  # symbols & pictographs
    (0x1F600, 0x1F64F),  # emoticons
    (0x1F680, 0x1F6FF),  # transport & map
    (0x1F900, 0x1F9FF),  # supplemental symbols & pictographs
    (0x1FA70, 0x1FAFF),  # symbols & pictographs extended-A
    (0x2600, 0x27BF),  # misc symbols, dingbats
)

_VARIATION_SELECTOR = "\ufe0f"

_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def _is_emoji(char: str) -> bool:
    code = ord(char)
    return any(lo <= code <= hi for lo, hi in _EMOJI_RANGES)


def _is_high_surrogate(char: str) -> bool:
    return 0xD800 <= ord(char) <= 0xDBFF


def _join_surrogates(text: str) -> str:
    """Combine UTF-16 surrogate pairs in *text* into single code points."""
    if not _SURROGATE_RE.search(text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


class Scanner:
    """A position in a stream of text plus a variable amount of lookahead.

    Input may arrive slowly, so each method looks ahead only as far as it
    must to make a decision.  ``buffer`` holds text that has been read
    from the source but not yet consumed.
    """

    def __init__(self, source: Reader) -> None:
        self._source = source
        self._source_done = False
        self._buffer = ""

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def at_end(self) -> bool:
        """True when the buffer is empty and the source is exhausted."""
        return not self._buffer and self._source_done

    async def pull(self) -> bool:
        """Read one more chunk into the buffer.

        Returns False when the source is exhausted.  A chunk that ends in
        half of a surrogate pair is joined with the next chunk first.
        """
        if self._source_done:
            return False
        pending = ""
        while True:
            chunk = await self._source.read()
            if chunk is DONE:
                self._source_done = True
                if pending:
                    self._buffer += _join_surrogates(pending)
                    return True
                return False
            if not chunk:
                continue
            pending += chunk
            if _is_high_surrogate(pending[-1]):
                continue
            self._buffer += _join_surrogates(pending)
            return True

    async def fill_to(self, n: int) -> bool:
        """Pull until the buffer holds at least *n* characters."""
        while len(self._buffer) < n:
            if not await self.pull():
                return False
        return True

    async def starts_with(self, prefix: str) -> bool:
        """Pull only as much input as needed to confirm or refute *prefix*."""
        while len(self._buffer) < len(prefix):
            if not prefix.startswith(self._buffer):
                return False
            if not await self.pull():
                return False
        return self._buffer.startswith(prefix)

    async def skip_token(self, token: str) -> bool:
        """Consume *token* if it comes next."""
        if not await self.starts_with(token):
            return False
        self._buffer = self._buffer[len(token) :]
        return True

    def take_buffer(self) -> str:
        """Empty the buffer and return what it held.  Never pulls."""
        result, self._buffer = self._buffer, ""
        return result

    def _take(self, n: int) -> str:
        result = self._buffer[:n]
        self._buffer = self._buffer[n:]
        return result

    async def take_chunk_within_line(self) -> str:
        """Take buffered text up to and including the next newline.

        Pulls once if the buffer is empty.  Returns "" only at the end.
        """
        if not await self.fill_to(1):
            return ""
        end = self._buffer.find("\n")
        if end == -1:
            return self.take_buffer()
        return self._take(end + 1)

    async def take_line(self) -> str:
        """Take the next line, including its newline if it has one."""
        while "\n" not in self._buffer:
            if not await self.pull():
                return self.take_buffer()
        return self._take(self._buffer.index("\n") + 1)

    async def take_blank_line(self) -> str:
        """Take the next line if it holds only whitespace.

        Returns "" when the next line is not blank, or at the end.
        """
        while True:
            end = self._buffer.find("\n")
            limit = len(self._buffer) if end == -1 else end
            if self._buffer[:limit].strip():
                return ""
            if end >= 0:
                return self._take(end + 1)
            if not await self.pull():
                # Partial blank line at the end of the input.
                return self.take_buffer()

    async def skip_line_matching(self, pattern: re.Pattern[str]) -> bool:
        """Consume the next line if its text (minus the newline) fully matches.

        Waits for the whole line, so callers should check a cheap prefix
        with ``starts_with`` first.
        """
        while "\n" not in self._buffer:
            if not await self.pull():
                break
        end = self._buffer.find("\n")
        line = self._buffer if end == -1 else self._buffer[:end]
        if not pattern.fullmatch(line):
            return False
        self._take(len(line) if end == -1 else end + 1)
        return True

    async def take_matching_char(self, allowed: str) -> str:
        if not await self.fill_to(1) or self._buffer[0] not in allowed:
            return ""
        return self._take(1)

    async def take_matching_prefix(self, allowed: str) -> str:
        """Take the longest run of characters drawn from *allowed*."""
        result = ""
        while char := await self.take_matching_char(allowed):
            result += char
        return result

    async def take_emoji(self) -> str:
        """Take one emoji, with its variation selector if one follows."""
        if not await self.fill_to(1) or not _is_emoji(self._buffer[0]):
            return ""
        emoji = self._take(1)
        if await self.skip_token(_VARIATION_SELECTOR):
            emoji += _VARIATION_SELECTOR
        return emoji

    async def copy_line_to(self, output: Writer) -> bool:
        """Stream the next line to *output* as it arrives.

        Does nothing at the end of input.  Returns False if *output*
        rejects a chunk.
        """
        while True:
            chunk = await self.take_chunk_within_line()
            if not chunk:
                return True
            if not await output.write(chunk):
                return False
            if chunk.endswith("\n"):
                return True
