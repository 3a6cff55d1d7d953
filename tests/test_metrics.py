# test_metrics.py

import numpy as np
import pytest

import palette_kmeans.metrics as metrics
from palette_kmeans.quantizer import KMeansQuantizer
from palette_kmeans.synthetic_data import generate_block_image


@pytest.fixture
def blocks():
    return generate_block_image(
        [(220, 20, 20), (20, 220, 20), (20, 20, 220)],
        block_size=6, noise=8.0, random_state=0,
    )


def test_perfect_separation_silhouette():
    X = np.array([[[0, 0, 0], [255, 255, 255]],
                  [[0, 0, 0], [255, 255, 255]]])
    labels = np.array([[0, 1], [0, 1]])
    assert metrics.compute_silhouette(X, labels) == pytest.approx(1.0)
    assert metrics.compute_davies_bouldin(X, labels) == pytest.approx(0.0)


def test_single_cluster_scores_are_nan():
    X = np.zeros((3, 3, 3), dtype=np.uint8)
    labels = np.zeros((3, 3), dtype=int)
    assert np.isnan(metrics.compute_silhouette(X, labels))
    assert np.isnan(metrics.compute_calinski_harabasz(X, labels))
    assert np.isnan(metrics.compute_davies_bouldin(X, labels))


def test_silhouette_sampling_is_seeded(blocks):
    q = KMeansQuantizer(n_clusters=3, random_state=0).fit(blocks)
    a = metrics.compute_silhouette(blocks, q.labels_, sample_size=20, random_state=1)
    b = metrics.compute_silhouette(blocks, q.labels_, sample_size=20, random_state=1)
    np.testing.assert_equal(a, b)


def test_population_includes_empty_clusters():
    labels = np.array([[0, 0], [2, 0]])
    pop = metrics.cluster_population_distribution(labels, 4)
    assert pop == {0: 3, 1: 0, 2: 1, 3: 0}


def test_wcss_and_avg_distance():
    X = np.array([[[0, 0, 0], [2, 0, 0], [10, 10, 10]]])
    labels = np.array([[0, 0, 1]])
    palette = np.array([[1, 0, 0], [10, 10, 10], [50, 50, 50]])

    wcss = metrics.compute_wcss_per_cluster(X, labels, palette)
    assert wcss[0] == pytest.approx(2.0)
    assert wcss[1] == pytest.approx(0.0)
    assert wcss[2] == 0.0

    dist = metrics.average_distance_to_centroids(X, labels, palette)
    assert dist[0] == pytest.approx(1.0)
    assert dist[1] == pytest.approx(0.0)
    assert np.isnan(dist[2])


def test_unbalanced_factor():
    assert metrics.compute_unbalanced_factor(np.array([0, 0, 1])) == pytest.approx(2.0)
    assert np.isnan(metrics.compute_unbalanced_factor(np.array([0, 0, 0])))


def test_mse_and_psnr():
    original = np.zeros((1, 1, 3), dtype=np.uint8)
    quantized = np.array([[[3, 4, 0]]])
    assert metrics.compute_mse(original, quantized) == pytest.approx(25.0 / 3)
    assert metrics.compute_psnr(original, quantized) == pytest.approx(
        10 * np.log10(255.0 ** 2 / (25.0 / 3))
    )
    assert metrics.compute_psnr(original, original) == float("inf")
    assert np.isnan(metrics.compute_mse(np.zeros((0, 3)), np.zeros((0, 3))))


def test_reconstruct_and_count_colors():
    palette = [[0, 0, 0], [255, 0, 0]]
    labels = np.array([[0, 1], [1, 1]])
    img = metrics.reconstruct(labels, palette)
    assert img.shape == (2, 2, 3)
    assert img[0, 1].tolist() == [255, 0, 0]
    assert metrics.count_colors(img) == 2
    assert metrics.count_colors(np.zeros((0, 0, 3))) == 0


def test_compute_all_metrics(blocks):
    q = KMeansQuantizer(n_clusters=3, random_state=0).fit(blocks)
    m = metrics.compute_all_metrics(blocks, q.labels_, q.palette_, random_state=0)
    assert set(m["population"]) == {0, 1, 2}
    assert m["mse"] >= 0
    assert m["psnr"] > 0
