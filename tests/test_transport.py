"""
SerialTransport tests with pyserial mocked out.
"""

import unittest
from unittest.mock import patch

import serial

from serial_obd.errors import TransportError
from serial_obd.transport import SerialTransport


class TestSerialTransport(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        patcher = patch("serial_obd.transport.serial.Serial")
        self.serial_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.ser = self.serial_cls.return_value
        self.ser.is_open = True
        self.transport = SerialTransport("/dev/rfcomm0", 115200, idle_sleep_s=0)

    def test_open(self):
        self.transport.open()
        self.serial_cls.assert_called_once_with("/dev/rfcomm0", 115200, timeout=0, write_timeout=2.0)
        self.ser.reset_input_buffer.assert_called_once()
        self.assertTrue(self.transport.is_open)

    def test_open_twice_reuses_port(self):
        self.transport.open()
        self.transport.open()
        self.serial_cls.assert_called_once()

    def test_open_failure(self):
        self.serial_cls.side_effect = serial.SerialException("could not open port")
        with self.assertRaises(TransportError):
            self.transport.open()
        self.assertFalse(self.transport.is_open)

    def test_write_ascii(self):
        self.transport.open()
        self.transport.write("010D\r")
        self.ser.write.assert_called_once_with(b"010D\r")

    def test_write_when_closed(self):
        with self.assertRaises(TransportError):
            self.transport.write("010D\r")

    def test_write_failure(self):
        self.transport.open()
        self.ser.write.side_effect = serial.SerialTimeoutException("Write timeout")
        with self.assertRaises(TransportError):
            self.transport.write("010D\r")

    def test_close(self):
        self.transport.open()
        self.transport.close()
        self.ser.close.assert_called_once()
        self.assertFalse(self.transport.is_open)

    async def test_chunks_until_closed(self):
        reads = [b"41 0D", b"", b" 32\r\n>"]

        def read(size):
            if reads:
                return reads.pop(0)
            self.ser.is_open = False
            return b""

        self.ser.in_waiting = 0
        self.ser.read.side_effect = read
        self.transport.open()
        chunks = [chunk async for chunk in self.transport.chunks()]
        self.assertEqual(chunks, ["41 0D", " 32\r\n>"])

    async def test_chunks_read_failure(self):
        self.ser.in_waiting = 0
        self.ser.read.side_effect = serial.SerialException("device disconnected")
        self.transport.open()
        with self.assertRaises(TransportError):
            async for _ in self.transport.chunks():
                pass


if __name__ == "__main__":
    unittest.main()
