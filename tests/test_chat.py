"""
Tests for the doubts chat.

Chat contract:
- starts with the bot greeting
- blank input is ignored, input while a reply is pending is ignored
- every question gets the canned reply after the delay
- close() cancels a pending reply
"""

import asyncio
import unittest

from lecturehub.chat import CANNED_REPLY, GREETING, DoubtsChat


class TestDoubtsChat(unittest.IsolatedAsyncioTestCase):
    async def test_starts_with_greeting(self) -> None:
        chat = DoubtsChat(reply_delay=0)
        self.assertEqual(len(chat.messages), 1)
        self.assertEqual(chat.messages[0].text, GREETING)
        self.assertEqual(chat.messages[0].sender, "bot")
        self.assertFalse(chat.busy)

    async def test_send_gets_canned_reply(self) -> None:
        chat = DoubtsChat(reply_delay=0.01)
        sent = chat.send("What is a quadratic equation?")
        self.assertIsNotNone(sent)
        self.assertTrue(chat.busy)

        await chat.wait_idle()

        self.assertFalse(chat.busy)
        self.assertEqual([m.sender for m in chat.messages], ["bot", "user", "bot"])
        self.assertEqual(chat.messages[1].text, "What is a quadratic equation?")
        self.assertEqual(chat.messages[2].text, CANNED_REPLY)

    async def test_blank_message_is_ignored(self) -> None:
        chat = DoubtsChat(reply_delay=0)
        self.assertIsNone(chat.send("   "))
        self.assertIsNone(chat.send(""))
        self.assertEqual(len(chat.messages), 1)
        self.assertFalse(chat.busy)

    async def test_send_while_busy_is_ignored(self) -> None:
        chat = DoubtsChat(reply_delay=0.05)
        chat.send("first")
        self.assertIsNone(chat.send("second"))
        await chat.wait_idle()
        self.assertEqual([m.text for m in chat.messages if m.is_user], ["first"])

    async def test_close_cancels_pending_reply(self) -> None:
        chat = DoubtsChat(reply_delay=0.05)
        chat.send("hello?")
        chat.close()
        await chat.wait_idle()
        await asyncio.sleep(0.1)

        self.assertEqual([m.sender for m in chat.messages], ["bot", "user"])
        self.assertFalse(chat.busy)
        self.assertIsNone(chat.send("anyone?"))

    async def test_message_ids_are_unique(self) -> None:
        chat = DoubtsChat(reply_delay=0)
        for text in ("a", "b", "c"):
            chat.send(text)
            await chat.wait_idle()
        ids = [m.id for m in chat.messages]
        self.assertEqual(len(ids), len(set(ids)))


if __name__ == "__main__":
    unittest.main()
