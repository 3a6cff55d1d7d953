import argparse

DEFAULT_N_CLUSTERS = 10
DEFAULT_MAX_ITER = 100
MOVEMENT_THRESHOLD = 1.0
DEFAULT_RANDOM_STATE = None

# silhouette is quadratic in the number of points; score a sample instead
SILHOUETTE_SAMPLE_SIZE = 5000


class QuantizerConfig:
    """Run settings shared by the estimators and the command line."""

    def __init__(
        self,
        n_clusters=DEFAULT_N_CLUSTERS,
        max_iter=DEFAULT_MAX_ITER,
        threshold=MOVEMENT_THRESHOLD,
        random_state=DEFAULT_RANDOM_STATE,
    ):
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.threshold = threshold
        self.random_state = random_state

    def __repr__(self):
        return (
            f"QuantizerConfig(n_clusters={self.n_clusters}, max_iter={self.max_iter}, "
            f"threshold={self.threshold}, random_state={self.random_state})"
        )

    def to_kwargs(self):
        return {
            "n_clusters": self.n_clusters,
            "max_iter": self.max_iter,
            "threshold": self.threshold,
            "random_state": self.random_state,
        }

    @classmethod
    def from_args(cls, args):
        return cls(
            n_clusters=args.n_clusters,
            max_iter=args.max_iter,
            threshold=args.threshold,
            random_state=args.seed,
        )


def build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Reduce the palette of an image with k-means in RGB space."
    )
    parser.add_argument("input", help="image to quantize (PNG or any format matplotlib reads)")
    parser.add_argument("output", help="where to write the repainted image")
    parser.add_argument("-k", "--n-clusters", type=int, default=DEFAULT_N_CLUSTERS,
                        help="number of colors in the output palette")
    parser.add_argument("--max-iter", type=int, default=DEFAULT_MAX_ITER,
                        help="hard cap on convergence checks")
    parser.add_argument("--threshold", type=float, default=MOVEMENT_THRESHOLD,
                        help="centroid movement below which a run counts as converged")
    parser.add_argument("--seed", type=int, default=DEFAULT_RANDOM_STATE,
                        help="random seed for centroid initialization")
    parser.add_argument("--palette-csv", default=None, help="write the final palette here")
    parser.add_argument("--metrics-csv", default=None, help="write run metrics here")
    parser.add_argument("--sweep", type=int, nargs=2, metavar=("LO", "HI"), default=None,
                        help="evaluate every k in [LO, HI] and pick k at the inertia elbow")
    parser.add_argument("--name", default="quantize",
                        help="file prefix for sweep outputs")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every iteration")
    return parser
