import pytest

pytest.importorskip("pandas")
matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

from cbchmac.plot import load_results, parse_stat, plot_results  # noqa: E402

CSV = (
    "Backend,Latency (ms),Enc (ms),Dec (ms),Throughput (msg/s),Failures\n"
    "A128CBC-HS256,0.0500 +- 0.0010,0.0200 +- 0.0010,0.0300 +- 0.0020,9000.0 +- 10.0,0\n"
    "A128GCM,0.0200 +- 0.0010,0.0100 +- 0.0010,n/a,20000.0 +- 50.0,0\n"
)


def test_parse_stat():
    assert parse_stat("1.5000 +- 0.2500") == (1.5, 0.25)
    mean, std = parse_stat("n/a")
    assert mean != mean and std != std


def test_load_results(tmp_path):
    path = tmp_path / "benchmark.csv"
    path.write_text(CSV)
    df = load_results(path)
    assert len(df) == 8
    row = df[(df["backend"] == "A128GCM") & (df["metric"] == "Enc (ms)")].iloc[0]
    assert row["mean"] == 0.01


def test_plot_results(tmp_path):
    path = tmp_path / "benchmark.csv"
    path.write_text(CSV)
    out = plot_results(path)
    assert out == tmp_path / "benchmark_summary.png"
    assert out.stat().st_size > 0
