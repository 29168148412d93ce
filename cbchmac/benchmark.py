import csv
import json
import logging
import os
import statistics
import time
import traceback

from cbchmac.backends import BACKENDS

log = logging.getLogger(__name__)

DEFAULT_LOG_DIR = os.path.join(os.getcwd(), "logs")

METRICS = (
    "Latency (ms)",
    "Shared Secret (ms)",
    "KDF (ms)",
    "Context Setup (ms)",
    "Enc (ms)",
    "Dec (ms)",
    "Throughput (msg/s)",
)
# setup_keys() timing key -> metric column
SETUP_METRICS = {
    "shared_secret_ms": "Shared Secret (ms)",
    "kdf_ms": "KDF (ms)",
    "context_setup_ms": "Context Setup (ms)",
}


def summarize(samples):
    """Collapse samples into 'mean +- std', or 'n/a' when nothing was measured."""
    if not samples:
        return "n/a"
    return f"{statistics.mean(samples):.4f} +- {statistics.pstdev(samples):.4f}"


def format_results(results):
    width = max(len(column) for column in METRICS + ("Failures",))
    lines = ["=== Benchmark Results ==="]
    for name, metrics in results.items():
        lines.append(f"\n{name}:")
        lines.extend(f"  {column:<{width}}  {value}" for column, value in metrics.items())
    return "\n".join(lines)


class BenchmarkRunner:
    def __init__(self, message_size=1024, runs=8, repetitions=100, log_dir=DEFAULT_LOG_DIR, backends=None):
        self.message_size = message_size
        self.runs = runs
        self.repetitions = repetitions
        self.backend_classes = dict(BACKENDS) if backends is None else dict(backends)
        self.log_dir = log_dir
        os.makedirs(log_dir, exist_ok=True)

    def _attempt(self, name, step, fn, *args):
        """Run one measurement step. Errors are reported and flagged, never raised."""
        try:
            return fn(*args), False
        except Exception as e:
            print(f"[!] {name} {step} failed: {e}")
            traceback.print_exc()
            return None, True

    def _round_trip(self, message, encrypt, decrypt):
        """Return (encrypt ms, decrypt ms) for one message."""
        start = time.perf_counter()
        ct = encrypt(message)
        mid = time.perf_counter()
        pt = decrypt(ct)
        end = time.perf_counter()
        if pt != message:
            raise ValueError("plaintext mismatch")
        return (mid - start) * 1000, (end - mid) * 1000

    def _throughput(self, backend, message):
        start = time.perf_counter()
        for _ in range(self.repetitions):
            self._round_trip(message, backend.encrypt, backend.decrypt)
        return self.repetitions / (time.perf_counter() - start)

    def _tamper_accepted(self, backend, message):
        """Flip the last bit of a sealed message. Any error from decrypt is a rejection."""
        blob = bytearray(backend.encrypt(message))
        blob[-1] ^= 0x01
        try:
            backend.decrypt(bytes(blob))
        except Exception as e:
            log.debug("tampered message rejected with %s", type(e).__name__)
            return False
        return True

    def _run_backend(self, name, backend_cls, message):
        samples = {metric: [] for metric in METRICS}
        failures = 0

        for i in range(self.runs):
            backend = backend_cls()  # fresh keys each run
            log.debug("%s run %d/%d", name, i + 1, self.runs)

            timings, failed = self._attempt(name, "key setup", backend.setup_keys)
            if failed:
                failures += 1
                continue
            for key, metric in SETUP_METRICS.items():
                samples[metric].append((timings or {}).get(key, 0.0))

            times, failed = self._attempt(name, "enc/dec", self._round_trip, message,
                                          backend.encrypt_symmetric, backend.decrypt_symmetric)
            if not failed:
                samples["Enc (ms)"].append(times[0])
                samples["Dec (ms)"].append(times[1])
            failures += failed

            times, failed = self._attempt(name, "latency", self._round_trip, message,
                                          backend.encrypt, backend.decrypt)
            if not failed:
                samples["Latency (ms)"].append(sum(times))
            failures += failed

            accepted, failed = self._attempt(name, "tamper check", self._tamper_accepted, backend, message)
            if accepted:
                print(f"[!] {name} accepted a tampered message")
            failures += failed or accepted

            tput, failed = self._attempt(name, "throughput", self._throughput, backend, message)
            if not failed:
                samples["Throughput (msg/s)"].append(tput)
            failures += failed

        metrics = {metric: summarize(samples[metric]) for metric in METRICS}
        metrics["Failures"] = failures
        return metrics

    def run(self):
        message = b"x" * self.message_size
        results = {}
        for name, backend_cls in self.backend_classes.items():
            print(f"\nBenchmarking {name} ...")
            results[name] = self._run_backend(name, backend_cls, message)

        print("\n" + format_results(results))
        json_path, csv_path = self._save_results(results)
        print(f"\n[+] Results saved to:\n  {json_path}\n  {csv_path}")
        return results

    def _save_results(self, results):
        json_path = os.path.join(self.log_dir, "benchmark.json")
        csv_path = os.path.join(self.log_dir, "benchmark.csv")

        with open(json_path, "w") as jf:
            json.dump(results, jf, indent=2)

        with open(csv_path, "w", newline="") as cf:
            writer = csv.DictWriter(cf, fieldnames=["Backend", *METRICS, "Failures"])
            writer.writeheader()
            for name, metrics in results.items():
                writer.writerow({"Backend": name, **metrics})

        return json_path, csv_path
