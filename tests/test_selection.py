# tests/test_selection.py

import matplotlib.pyplot as plt
import pandas as pd
import pytest

from palette_kmeans.selection import find_elbow_k, plot_elbow
from palette_kmeans.synthetic_data import generate_block_image


def test_find_elbow_k_sharp_knee():
    df = pd.DataFrame({
        "n_clusters": [1, 2, 3, 4, 5, 6],
        "inertia": [1000.0, 100.0, 90.0, 80.0, 70.0, 60.0],
    })
    assert find_elbow_k(df) == 2


def test_find_elbow_k_falls_back_to_minimum():
    df = pd.DataFrame({"n_clusters": [2, 3], "inertia": [5.0, 1.0]})
    assert find_elbow_k(df) == 3


def test_find_elbow_k_unknown_metric():
    df = pd.DataFrame({"n_clusters": [2, 3], "inertia": [5.0, 1.0]})
    with pytest.raises(ValueError):
        find_elbow_k(df, metric="gap")


def test_plot_elbow_outputs_figure():
    X = generate_block_image(
        [(255, 0, 0), (0, 255, 0), (0, 0, 255)], block_size=3, noise=4.0, random_state=0
    )
    fig = plot_elbow(X, k_range=range(1, 6), random_state=0)

    assert hasattr(fig, "savefig")
    total_lines = sum(len(ax.get_lines()) for ax in fig.axes)
    assert total_lines >= 1

    plt.close(fig)
