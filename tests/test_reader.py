"""
OBDReader tests against a mock adapter transport.
"""

import asyncio
import unittest

from serial_obd.codec import Reply
from serial_obd.config import ReaderSettings
from serial_obd.errors import OBDError, TransportError, UnknownPid
from serial_obd.pid_pack import compile_formula
from serial_obd.pids import PID_TABLE, PidDefinition
from serial_obd.reader import OBDReader

SETTINGS = ReaderSettings(port="/dev/null", poll_interval_ms=20)


class MockAdapter:
    """Stand-in for SerialTransport; script incoming text with feed()"""

    def __init__(self):
        self.written = []
        self.opened = False
        self.closed = False
        self._incoming = asyncio.Queue()

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True

    def write(self, text):
        self.written.append(text)

    def feed(self, item):
        self._incoming.put_nowait(item)

    async def chunks(self):
        while True:
            item = await self._incoming.get()
            if isinstance(item, Exception):
                raise item
            yield item


class TestReaderOutbound(unittest.TestCase):

    def setUp(self):
        self.written = []
        self.reader = OBDReader(self.written.append, settings=SETTINGS)

    def test_write_appends_cr(self):
        self.reader.write("ATZ")
        self.assertEqual(self.written, ["ATZ\r"])

    def test_write_without_sink(self):
        with self.assertRaises(OBDError):
            OBDReader(settings=SETTINGS).write("ATZ")

    def test_request_value_by_name(self):
        self.reader.request_value_by_name("vss")
        self.assertEqual(self.written, ["010D\r"])

    def test_request_unknown_name_writes_nothing(self):
        with self.assertRaises(UnknownPid):
            self.reader.request_value_by_name("not_a_real_pid")
        self.assertEqual(self.written, [])

    def test_write_pollers(self):
        self.reader.add_poller("vss")
        self.reader.add_poller("requestdtc")
        self.reader.write_pollers()
        self.assertEqual(self.written, ["010D\r", "03\r"])

    def test_pollers_per_instance(self):
        other = OBDReader(self.written.append, settings=SETTINGS)
        self.reader.add_poller("vss")
        self.assertEqual(self.reader.pollers, ("010D",))
        self.assertEqual(other.pollers, ())
        self.reader.remove_all_pollers()
        self.assertEqual(self.reader.pollers, ())

    def test_data_received_returns_replies(self):
        replies = self.reader.data_received("41 0D 32\r\n>")
        self.assertEqual(replies, [Reply(value=50, mode="41", pid="0D", name="vss")])


class TestReaderChannels(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.adapter = MockAdapter()
        self.reader = OBDReader(settings=SETTINGS)

    async def asyncTearDown(self):
        await self.reader.disconnect()

    async def _next_reply(self, replies):
        return await asyncio.wait_for(replies.__anext__(), timeout=1.0)

    async def test_replies_channel(self):
        replies = self.reader.replies()
        self.reader.data_received("41 0D 32\r\n>41 0C")
        self.reader.data_received(" 1A F8\r\n>")
        first = await self._next_reply(replies)
        second = await self._next_reply(replies)
        self.assertEqual(first.name, "vss")
        self.assertEqual(second.name, "rpm")

    async def test_connect_routes_both_directions(self):
        await self.reader.connect(self.adapter)
        self.assertTrue(self.reader.connected)
        self.assertTrue(self.adapter.opened)

        self.reader.request_value_by_name("vss")
        self.assertEqual(self.adapter.written, ["010D\r"])

        replies = self.reader.replies()
        self.adapter.feed("010D\r\n41 0D")
        self.adapter.feed(" 32\r\n\r\n>")
        reply = await self._next_reply(replies)
        self.assertEqual(reply, Reply(value=50, mode="41", pid="0D", name="vss"))

    async def test_polling_through_transport(self):
        await self.reader.connect(self.adapter)
        self.reader.add_poller("vss")
        self.reader.start_polling()
        await asyncio.sleep(0.07)
        self.reader.stop_polling()
        self.assertGreaterEqual(self.adapter.written.count("010D\r"), 2)

    async def test_disconnect(self):
        await self.reader.connect(self.adapter)
        self.reader.add_poller("vss")
        self.reader.start_polling()
        await self.reader.disconnect()
        self.assertFalse(self.reader.connected)
        self.assertFalse(self.reader.scheduler.polling)
        self.assertTrue(self.adapter.closed)
        with self.assertRaises(OBDError):
            self.reader.write("ATZ")

    async def test_disconnect_when_not_connected(self):
        await self.reader.disconnect()
        self.assertFalse(self.reader.connected)

    async def test_transport_failure_marks_disconnected(self):
        await self.reader.connect(self.adapter)
        with self.assertLogs("serial_obd.reader", level="ERROR"):
            self.adapter.feed(TransportError("Read failed: device reports readiness"))
            for _ in range(5):
                await asyncio.sleep(0)
        self.assertFalse(self.reader.connected)

    async def test_transport_failure_ends_replies(self):
        await self.reader.connect(self.adapter)

        async def collect():
            return [reply async for reply in self.reader.replies()]

        collector = asyncio.ensure_future(collect())
        self.adapter.feed("41 0D 32\r\n>")
        with self.assertLogs("serial_obd.reader", level="ERROR"):
            self.adapter.feed(TransportError("Read failed: device disconnected"))
            received = await asyncio.wait_for(collector, timeout=1.0)
        self.assertEqual([r.name for r in received], ["vss"])
        self.assertFalse(self.reader.connected)

    async def test_disconnect_ends_replies(self):
        await self.reader.connect(self.adapter)
        replies = self.reader.replies()
        pending = asyncio.ensure_future(self._next_reply(replies))
        await asyncio.sleep(0)
        await self.reader.disconnect()
        with self.assertRaises(StopAsyncIteration):
            await pending

    async def test_failing_rule_keeps_pump_running(self):
        table = PID_TABLE.extend([PidDefinition("ratio", "01", "70", 2, compile_formula("A/B", 2))])
        self.reader = OBDReader(table=table, settings=SETTINGS)
        await self.reader.connect(self.adapter)
        replies = self.reader.replies()
        with self.assertLogs("serial_obd.framer", level="WARNING"):
            self.adapter.feed("41 70 01 00\r\n>41 0D 32\r\n>")
            reply = await self._next_reply(replies)
        self.assertEqual(reply.name, "vss")
        self.assertTrue(self.reader.connected)
        await self.reader.disconnect()
        self.assertFalse(self.reader.connected)

    async def test_unexpected_pump_error_logged_on_disconnect(self):
        await self.reader.connect(self.adapter)
        replies = self.reader.replies()
        self.adapter.feed(RuntimeError("adapter driver bug"))
        with self.assertRaises(StopAsyncIteration):
            await asyncio.wait_for(replies.__anext__(), timeout=1.0)
        self.assertFalse(self.reader.connected)
        with self.assertLogs("serial_obd.reader", level="ERROR") as logs:
            await self.reader.disconnect()
        self.assertIn("Reader pump failed", logs.output[0])
        self.assertTrue(self.adapter.closed)

    async def test_reconnect_starts_fresh_stream(self):
        await self.reader.connect(self.adapter)
        await self.reader.disconnect()
        self.adapter = MockAdapter()
        await self.reader.connect(self.adapter)
        replies = self.reader.replies()
        self.adapter.feed("41 0D 32\r\n>")
        reply = await self._next_reply(replies)
        self.assertEqual(reply.name, "vss")


class TestReplyQueueBound(unittest.IsolatedAsyncioTestCase):

    async def test_oldest_replies_dropped_when_nobody_consumes(self):
        reader = OBDReader(settings=SETTINGS, queue_size=2)
        with self.assertLogs("serial_obd.reader", level="WARNING") as logs:
            for speed in ("0A", "14", "1E", "28"):
                self.assertEqual(len(reader.data_received(f"41 0D {speed}\r\n>")), 1)
        self.assertIn("Reply queue full", logs.output[0])
        replies = reader.replies()
        first = await asyncio.wait_for(replies.__anext__(), timeout=1.0)
        second = await asyncio.wait_for(replies.__anext__(), timeout=1.0)
        self.assertEqual([first.value, second.value], [0x1E, 0x28])

    def test_invalid_queue_size(self):
        with self.assertRaises(ValueError):
            OBDReader(settings=SETTINGS, queue_size=0)


if __name__ == "__main__":
    unittest.main()
