import argparse
import logging
import os

from cbchmac.backends import BACKENDS
from cbchmac.benchmark import DEFAULT_LOG_DIR, BenchmarkRunner


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark CBC-HMAC AEAD against AES-GCM")
    parser.add_argument("--message-size", type=int, default=1024, help="Size of each test message in bytes")
    parser.add_argument("--runs", type=int, default=8, help="Experiment runs per backend")
    parser.add_argument("--repetitions", type=int, default=100, help="Messages per run for throughput")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIR, help="Directory for benchmark.json/.csv")
    parser.add_argument("--backend", action="append", choices=sorted(BACKENDS),
                        help="Backend to run (repeatable, default: all)")
    parser.add_argument("--plot", action="store_true", help="Render benchmark_summary.png (needs the plot extra)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """
    App that runs the benchmark suite
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [cbchmac] %(message)s",
    )

    backends = None
    if args.backend:
        backends = {name: BACKENDS[name] for name in args.backend}

    runner = BenchmarkRunner(
        message_size=args.message_size,
        runs=args.runs,
        repetitions=args.repetitions,
        log_dir=args.log_dir,
        backends=backends,
    )
    results = runner.run()

    if args.plot:
        from cbchmac.plot import plot_results
        out_path = plot_results(os.path.join(args.log_dir, "benchmark.csv"))
        print(f"[+] Plot saved to {out_path}")
    return results
