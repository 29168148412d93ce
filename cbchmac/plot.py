import os
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

plt.style.use('seaborn-v0_8')

PLOT_METRICS = ['Enc (ms)', 'Dec (ms)', 'Latency (ms)', 'Throughput (msg/s)']
COLORS = ['#35B4EA', '#E3321A', '#2CA02C', '#9467BD', '#FF7F0E', '#8C564B']


def parse_stat(cell):
    """Split a 'mean +- std' cell into floats; 'n/a' becomes NaN."""
    if not isinstance(cell, str) or '+-' not in cell:
        return np.nan, np.nan
    mean, std = cell.split('+-')
    return float(mean), float(std)


def load_results(csv_path):
    df = pd.read_csv(csv_path)
    rows = []
    for _, row in df.iterrows():
        for metric in PLOT_METRICS:
            if metric not in df.columns:
                continue
            mean, std = parse_stat(row[metric])
            rows.append({'backend': row['Backend'], 'metric': metric, 'mean': mean, 'std': std})
    return pd.DataFrame(rows, columns=['backend', 'metric', 'mean', 'std'])


def plot_results(csv_path, out_path=None):
    """Render one bar panel per metric, one bar per backend, with std error bars."""
    csv_path = Path(csv_path)
    if out_path is None:
        out_path = csv_path.with_name('benchmark_summary.png')
    out_path = Path(out_path)
    os.makedirs(out_path.parent, exist_ok=True)

    data = load_results(csv_path).dropna()
    metrics = [m for m in PLOT_METRICS if m in set(data['metric'])]
    if not metrics:
        raise ValueError(f"no plottable metrics in {csv_path}")

    fig, axes = plt.subplots(1, len(metrics), figsize=(5*len(metrics), 5))
    axes = np.atleast_1d(axes)

    for ax, metric in zip(axes, metrics):
        subset = data[data['metric'] == metric]
        x_pos = np.arange(len(subset))
        colors = [COLORS[i % len(COLORS)] for i in range(len(subset))]
        ax.bar(x_pos, subset['mean'], yerr=subset['std'], color=colors, alpha=0.8, capsize=5)
        ax.set_title(metric, fontweight='bold')
        ax.set_xticks(x_pos)
        ax.set_xticklabels(subset['backend'], rotation=30, ha='right')
        ax.grid(True, alpha=0.3)

    fig.suptitle('CBC-HMAC vs AES-GCM', fontsize=16, fontweight='bold')
    plt.tight_layout()
    plt.savefig(out_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return out_path
