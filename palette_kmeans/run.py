# run.py
import logging

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from palette_kmeans.config import QuantizerConfig, build_arg_parser
from palette_kmeans.metrics import count_colors
from palette_kmeans.quantize_utils import run_and_report, save_palette
from palette_kmeans.quantizer import KMeansQuantizer

logger = logging.getLogger("palette_kmeans")


def load_pixels(path):
    """
    Read an image into a (height, width, 3) uint8 buffer. Float images in
    [0, 1] are scaled, alpha is dropped and grayscale is expanded to RGB.
    """
    img = plt.imread(path)
    if img.ndim == 2:
        img = np.stack([img] * 3, axis=-1)
    img = img[..., :3]
    if np.issubdtype(img.dtype, np.floating):
        img = np.rint(np.clip(img, 0.0, 1.0) * 255)
    return np.ascontiguousarray(img, dtype=np.uint8)


def save_pixels(path, pixels):
    plt.imsave(path, np.asarray(pixels, dtype=np.uint8))


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    logger.setLevel(logging.DEBUG if args.verbose else logging.INFO)

    config = QuantizerConfig.from_args(args)
    pixels = load_pixels(args.input)
    logger.info("Loaded %s: %dx%d, %d colors",
                args.input, pixels.shape[1], pixels.shape[0], count_colors(pixels))

    if args.sweep:
        lo, hi = args.sweep
        best_k, _, _ = run_and_report(
            name=args.name,
            cls=KMeansQuantizer,
            X=pixels,
            k_range=range(lo, hi + 1),
            random_state=config.random_state,
            max_iter=config.max_iter,
            threshold=config.threshold,
        )
        config.n_clusters = best_k

    logger.info("--- Quantizing with %s ---", config)
    quantizer = KMeansQuantizer(**config.to_kwargs())
    quantizer.quantize(pixels)
    save_pixels(args.output, pixels)
    logger.info("Saved %s (%d colors)", args.output, count_colors(pixels))

    metrics = quantizer.get_metrics()
    if args.palette_csv:
        save_palette(quantizer.get_palette(), args.palette_csv, population=metrics["population"])
        logger.info("Saved palette to %s", args.palette_csv)
    if args.metrics_csv:
        row = {
            "n_clusters": config.n_clusters,
            "n_iter": quantizer.n_iter_,
            "converged": quantizer.converged_,
            "inertia": quantizer.inertia_,
            "empty_clusters": len(quantizer.empty_clusters_),
        }
        row.update({
            k: v for k, v in metrics.items()
            if k not in ("population", "avg_distance", "wcss")
        })
        pd.DataFrame([row]).to_csv(args.metrics_csv, index=False)
        logger.info("Saved metrics to %s", args.metrics_csv)

    return quantizer


if __name__ == "__main__":
    main()
