import csv
import json

import pytest

from cbchmac.app import main, parse_args
from cbchmac.backends import BACKENDS
from cbchmac.benchmark import BenchmarkRunner, format_results, summarize


class AcceptsEverything:
    """Broken backend that never authenticates."""

    def setup_keys(self):
        return {}

    def encrypt(self, message):
        return message

    def decrypt(self, blob):
        return blob

    encrypt_symmetric = encrypt
    decrypt_symmetric = decrypt


class RejectsWithValueError(AcceptsEverything):
    """Rejects tampered input with a plain ValueError instead of InvalidTag."""

    def encrypt(self, message):
        return message + b"\x00"

    def decrypt(self, blob):
        if blob[-1:] != b"\x00":
            raise ValueError("rejected")
        return blob[:-1]

    encrypt_symmetric = encrypt
    decrypt_symmetric = decrypt


class EncryptFails(AcceptsEverything):
    def encrypt(self, message):
        raise RuntimeError("no keys")

    encrypt_symmetric = encrypt


def test_runner_writes_results(tmp_path):
    backends = {name: BACKENDS[name] for name in ("A128CBC-HS256", "A128GCM")}
    runner = BenchmarkRunner(message_size=64, runs=2, repetitions=3, log_dir=str(tmp_path), backends=backends)
    results = runner.run()

    assert set(results) == {"A128CBC-HS256", "A128GCM"}
    for metrics in results.values():
        assert metrics["Failures"] == 0
        assert "+-" in metrics["Enc (ms)"]

    saved = json.loads((tmp_path / "benchmark.json").read_text())
    assert saved == results
    with open(tmp_path / "benchmark.csv", newline="") as cf:
        rows = list(csv.reader(cf))
    assert rows[0][0] == "Backend"
    assert [row[0] for row in rows[1:]] == ["A128CBC-HS256", "A128GCM"]


def test_runner_counts_accepted_tampering(tmp_path):
    runner = BenchmarkRunner(message_size=8, runs=2, repetitions=1, log_dir=str(tmp_path),
                             backends={"broken": AcceptsEverything})
    results = runner.run()
    assert results["broken"]["Failures"] == 2


def test_parse_args_defaults():
    args = parse_args([])
    assert args.message_size == 1024
    assert args.backend is None
    assert not args.plot


def test_parse_args_rejects_unknown_backend():
    with pytest.raises(SystemExit):
        parse_args(["--backend", "ROT13"])


def test_main_runs_selected_backend(tmp_path):
    results = main([
        "--message-size", "32", "--runs", "1", "--repetitions", "2",
        "--log-dir", str(tmp_path), "--backend", "A256CBC-HS512",
    ])
    assert list(results) == ["A256CBC-HS512"]
    assert (tmp_path / "benchmark.csv").exists()


def test_any_decrypt_error_counts_as_rejection(tmp_path):
    runner = BenchmarkRunner(message_size=8, runs=2, repetitions=2, log_dir=str(tmp_path),
                             backends={"strict": RejectsWithValueError})
    results = runner.run()
    assert results["strict"]["Failures"] == 0
    assert (tmp_path / "benchmark.json").exists()


def test_encrypt_errors_are_counted_not_raised(tmp_path):
    runner = BenchmarkRunner(message_size=8, runs=1, repetitions=1, log_dir=str(tmp_path),
                             backends={"broken": EncryptFails})
    results = runner.run()
    # enc/dec, latency, tamper check and throughput each fail once
    assert results["broken"]["Failures"] == 4
    assert results["broken"]["Enc (ms)"] == "n/a"
    assert (tmp_path / "benchmark.csv").exists()


def test_summarize():
    assert summarize([]) == "n/a"
    assert summarize([1.0, 3.0]) == "2.0000 +- 1.0000"


def test_format_results():
    text = format_results({"A128GCM": {"Enc (ms)": "n/a", "Failures": 0}})
    assert text.splitlines()[0] == "=== Benchmark Results ==="
    assert "A128GCM:" in text
    assert "Enc (ms)" in text
