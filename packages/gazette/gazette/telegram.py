from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.types import LinkPreviewOptions

from gazette.config import DeliveryOptions
from gazette.segmenter import Segment

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class DeliveryError(Exception):
    """Telegram rejected a message or could not be reached."""


class MessageTooLongError(DeliveryError):
    """Payload over the hard limit reached the sender without being segmented."""

    def __init__(self, length: int, limit: int):
        super().__init__(f"message is {length} chars, limit is {limit}")
        self.length = length
        self.limit = limit


_PARSE_MODES = {
    "plain": None,
    "markdown": ParseMode.MARKDOWN,
    "html": ParseMode.HTML,
}


class Sender(Protocol):
    async def send(self, text: str) -> None: ...


# ---------------------------------------------------------------------------
# Sender
# ---------------------------------------------------------------------------

class TelegramSender:
    """Sends text to one chat (optionally one forum thread) with fixed options."""

    def __init__(
        self,
        bot: Bot,
        chat_id: int | str,
        options: DeliveryOptions | None = None,
        hard_limit: int = 4096,
        thread_id: int | None = None,
    ):
        self.bot = bot
        self.chat_id = chat_id
        self.options = options or DeliveryOptions()
        self.hard_limit = hard_limit
        self.thread_id = thread_id

    async def send(self, text: str) -> None:
        if len(text) > self.hard_limit:
            raise MessageTooLongError(len(text), self.hard_limit)
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=text,
                message_thread_id=self.thread_id,
                parse_mode=_PARSE_MODES[self.options.parse_mode],
                link_preview_options=LinkPreviewOptions(
                    is_disabled=self.options.disable_link_preview
                ),
                disable_notification=self.options.disable_notification,
            )
        except TelegramAPIError as e:
            raise DeliveryError(f"Telegram rejected message to {self.chat_id}: {e.message}") from e


# ---------------------------------------------------------------------------
# Sequential delivery
# ---------------------------------------------------------------------------

async def deliver_segments(
    segments: list[Segment],
    sender: Sender,
    delay_s: float = 5.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Send *segments* one by one, pausing *delay_s* between sends.

    Stops at the first failure; later segments are never sent. Returns the
    number of segments delivered.
    """
    for i, segment in enumerate(segments):
        if i:
            await sleep(delay_s)
        try:
            await sender.send(segment.render())
        except DeliveryError as e:
            raise DeliveryError(f"part {segment.index}/{segment.total} failed: {e}") from e
        log.info(
            "delivered part %d/%d (%d chars)",
            segment.index, segment.total, len(segment.text),
        )
    return len(segments)
