"""
Doubts chat.

There is no chat backend yet: every question gets the same canned reply
after a short delay. The reply runs as an asyncio task owned by the chat,
and close() cancels it, so a closed screen never receives a late answer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set
from uuid import uuid4

from lecturehub.model import ChatMessage

log = logging.getLogger(__name__)

GREETING = "Hello! How can I help you today?"
CANNED_REPLY = "Radhe Radhe Baccho, abhi karya pragati pr hai"
REPLY_DELAY = 1.0


class DoubtsChat:
    def __init__(self, reply_delay: float = REPLY_DELAY, reply_text: str = CANNED_REPLY) -> None:
        self.reply_delay = reply_delay
        self.reply_text = reply_text
        self.messages: List[ChatMessage] = [ChatMessage(id="1", text=GREETING, sender="bot")]
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def busy(self) -> bool:
        """True while a reply is pending (the send button is disabled)."""
        return any(not t.done() for t in self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, text: str) -> Optional[ChatMessage]:
        """
        Post a user message and schedule the bot reply.

        Returns the posted message, or None if nothing was sent (blank text,
        reply still pending, or chat closed). Must be called from inside a
        running event loop.
        """
        if self._closed or self.busy or not (text or "").strip():
            return None

        message = ChatMessage(id=uuid4().hex, text=text, sender="user")
        self.messages.append(message)

        task = asyncio.get_running_loop().create_task(self._reply())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return message

    async def _reply(self) -> None:
        await asyncio.sleep(self.reply_delay)
        if self._closed:
            return
        self.messages.append(ChatMessage(id=uuid4().hex + "bot", text=self.reply_text, sender="bot"))

    async def wait_idle(self) -> None:
        """Wait until every pending reply has been posted (or cancelled)."""
        while True:
            pending = [t for t in self._pending if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        self._closed = True
        pending = [t for t in self._pending if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            log.debug("Cancelled %d pending chat replies", len(pending))
