#!/usr/bin/env python3
"""
Basic usage example for the OSC display client.

This example demonstrates:
1. Text commands (/osc-test, /number, /display-text)
2. Labelled values and parameter bars
3. LFO meters and a waveform
4. A status line

Prerequisites:
- Display server running: osc-display-server --backend pygame

Usage:
    python examples/basic_usage.py [HOST]
"""

import math
import sys
import time

from osc_display import OscDisplayClient

HOST = sys.argv[1] if len(sys.argv) > 1 else "localhost"


def main():
    client = OscDisplayClient(HOST)
    print(f"Sending to {HOST}:{client.port}")

    print("osc-test")
    client.osc_test(1.5)
    time.sleep(1.0)

    print("number countdown")
    for n in range(5, 0, -1):
        client.number(n)
        time.sleep(0.3)

    print("text")
    client.display_text("hello", "from", "osc-display")
    time.sleep(1.0)

    client.display_strings_and_numbers([("freq", 440), ("gain", 0.75), ("q", 1.2)])
    time.sleep(1.0)

    print("parameter bars (2s)")
    start = time.time()
    while time.time() - start < 2.0:
        t = time.time() - start
        client.parameters(t / 2.0, 0.5 + 0.5 * math.sin(t * 3), 1.0 - t / 2.0)
        time.sleep(0.03)

    print("lfos (2s)")
    start = time.time()
    while time.time() - start < 2.0:
        t = time.time() - start
        client.lfos([math.sin(t * (i + 1)) for i in range(8)])
        time.sleep(0.03)

    print("waveform")
    client.waveform([0.5 + 0.5 * math.sin(i / 8.0) for i in range(256)])
    time.sleep(1.0)

    client.status("done", 1)
    print("Done.")


if __name__ == "__main__":
    main()
