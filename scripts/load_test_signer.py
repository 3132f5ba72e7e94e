#!/usr/bin/env python3
"""Simple threaded load test for the signature generator."""

from __future__ import annotations

import argparse
import json
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hmacsign.common.settings import Settings
from hmacsign.signer.generator import SignatureGenerator
from hmacsign.signer.models import SigningRequest


def _run_one(
    generator: SignatureGenerator,
    request: SigningRequest,
) -> tuple[float, str | None]:
    start = time.perf_counter()
    outcome = generator.run(request)
    return time.perf_counter() - start, outcome.signature


def run_load_test(
    requests: int,
    concurrency: int,
    method: str,
    payload: str,
) -> tuple[float, float, float, float, int, int]:
    generator = SignatureGenerator(Settings())
    request = SigningRequest(
        key="load-test",
        secret="load-test-secret",
        method=method,
        payload=payload,
        timestamp=1000,
    )

    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        results = list(pool.map(lambda _: _run_one(generator, request), range(requests)))
    total = time.perf_counter() - start

    latencies_sorted = sorted(latency for latency, _ in results)
    signatures = {signature for _, signature in results}
    p50 = latencies_sorted[int(0.50 * len(latencies_sorted)) - 1]
    p95 = latencies_sorted[int(0.95 * len(latencies_sorted)) - 1]
    rps = requests / total if total > 0 else 0.0
    error_count = sum(1 for _, signature in results if not signature)
    return total, rps, p50, p95, error_count, len(signatures)


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--requests", type=int, default=10000)
    parser.add_argument("--concurrency", type=int, default=8)
    parser.add_argument("--method", default="POST")
    parser.add_argument("--payload", default='{"a":1}')
    args = parser.parse_args()

    total, rps, p50, p95, error_count, distinct = run_load_test(
        requests=args.requests,
        concurrency=args.concurrency,
        method=args.method,
        payload=args.payload,
    )

    summary = {
        "requests": args.requests,
        "concurrency": args.concurrency,
        "total_seconds": round(total, 3),
        "rps": round(rps, 2),
        "p50_us": round(p50 * 1_000_000, 2),
        "p95_us": round(p95 * 1_000_000, 2),
        "errors": error_count,
        "distinct_signatures": distinct,
    }

    print(json.dumps(summary, indent=2))
    if error_count or distinct != 1:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
