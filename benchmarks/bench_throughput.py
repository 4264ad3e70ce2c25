"""Round-trip throughput benchmark: Set+Get pairs per second against the bundled server."""

import os
import subprocess
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from client import RespClient
from demo import run_bench


def free_port():
    import socket
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def main():
    port = free_port()
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT)
    proc = subprocess.Popen(
        [sys.executable, "-m", "server", "--host", "127.0.0.1", "--port", str(port)],
        cwd=str(ROOT),
        env=env,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
    )
    time.sleep(0.5)
    try:
        with RespClient(host="127.0.0.1", port=port, timeout=30.0) as client:
            for n in [1_000, 10_000, 100_000]:
                elapsed = run_bench(client, n)
                per_sec = n / elapsed
                print(f"{n:>7} Set+Get pairs -> {per_sec:>8.0f} pairs/sec ({elapsed:.2f}s)")
    finally:
        proc.terminate()
        proc.wait(timeout=3)
    print("Done.")


if __name__ == "__main__":
    main()
