# test_plotter.py

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt

from palette_kmeans.plotter import plot_metrics_over_k, plot_palette


@pytest.fixture
def sample_metrics_df():
    # matches compute_metrics_over_k output
    ks = np.arange(2, 7)
    return pd.DataFrame({
        'n_clusters': ks,
        'inertia': np.linspace(1000, 100, 5),
        'mse': np.linspace(50, 5, 5),
        'psnr': [20.0, 25.0, 30.0, 35.0, np.inf],
        'silhouette': np.linspace(0.1, 0.9, 5),
        'calinski_harabasz': np.linspace(50, 200, 5),
        'davies_bouldin': np.linspace(1.0, 0.5, 5),
        'unbalanced_factor': [np.nan, 1.5, 2.0, 2.5, 3.0],
    })


def test_plot_metrics_over_k_basic(sample_metrics_df):
    df = sample_metrics_df
    ks = df['n_clusters'].to_numpy()

    fig = plot_metrics_over_k(df, best_k=4)
    axes = fig.axes
    assert len(axes) == 6

    for ax in axes:
        xlim = ax.get_xlim()
        assert pytest.approx(xlim[0]) == ks.min()
        assert pytest.approx(xlim[1]) == ks.max()

    for ax in axes[3:]:
        labels = [t.get_text() for t in ax.get_xticklabels()]
        assert any(label != '' for label in labels)

    texts = [t for t in fig.texts if t.get_text()]
    assert any('Inertia' in t.get_text() for t in texts)
    assert any('PSNR' in t.get_text() for t in texts)

    plt.close(fig)


def test_plot_palette_one_swatch_per_color(tmp_path):
    palette = np.array([[255, 0, 0], [0, 255, 0], [0, 0, 255]])
    savepath = tmp_path / "palette.png"
    fig = plot_palette(palette, population={0: 5, 1: 0, 2: 15}, title="Palette", savepath=str(savepath))

    ax = fig.axes[0]
    assert len(ax.patches) == 3
    assert savepath.exists()
    plt.close(fig)
