"""Small demonstration driver evaluating a 3x3 affine table."""

from gridinterp.factory import make_interpolator


def main() -> None:
    axes = [[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]]
    values = [0.0, 1.0, 2.0, 1.0, 2.0, 3.0, 2.0, 3.0, 4.0]
    points = [(0.5, 0.5), (1.5, 0.25), (2.5, 1.0)]
    for method in ("linear", "simplicial"):
        interp = make_interpolator(axes, values, method=method)
        for point, value in zip(points, interp.evaluate_batch(points)):
            print(f"{method:>10s} f{point} = {value:.6f}")


if __name__ == "__main__":
    main()
