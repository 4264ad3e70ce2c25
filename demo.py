"""Scripted walkthrough of every command followed by a Set+Get round-trip loop."""

import logging
import time

from client import RespClient


def run_script(client: RespClient) -> None:
    print("simple get/set")
    print(client.Ping())
    print(client.Set("keeey", "hellloooo world"))
    print(client.Get("keeey"))
    print()

    print("incr/get")
    print(client.Incr("myincr"))
    print(client.Get("myincr"))
    print()

    print("error")
    print(client.Incr("keeey"))
    print()

    print("simple list")
    print(client.Lpush("prettylist", "hellloooo world"))
    print(client.Lpush("prettylist", "world hello"))
    print(client.Lrange("prettylist", 0, -1))
    print()


def run_bench(client: RespClient, iterations: int = 100_000, key: str = "digit") -> float:
    """Run `iterations` Set+Get round trips; returns elapsed seconds."""
    start = time.perf_counter()
    for _ in range(iterations):
        client.Set(key, "10")
        client.Get(key)
    return time.perf_counter() - start


def main() -> None:
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=6379)
    parser.add_argument("--iterations", type=int, default=100_000)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    with RespClient(host=args.host, port=args.port) as client:
        run_script(client)
        print("bench")
        elapsed = run_bench(client, args.iterations)
        print(f"{elapsed:.3f}s")


if __name__ == "__main__":
    main()
