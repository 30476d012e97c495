from pathlib import Path

import matplotlib.pyplot as plt


class BalanceChartRenderer:
    def render(self, points, output_path: Path) -> Path:
        if len(points) < 2:
            raise ValueError("Balance chart needs at least two dated points.")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        xs = [day for day, _ in points]
        ys = [float(balance or 0.0) for _, balance in points]

        fig, ax = plt.subplots(figsize=(9, 3))
        ax.step(xs, ys, where="post", label="Balance")
        ax.axhline(0.0, color="grey", linewidth=0.8)
        ax.fill_between(xs, ys, 0.0, step="post", alpha=0.15)
        ax.legend()
        ax.grid(True, axis="y", linestyle=":", linewidth=0.6)
        fig.autofmt_xdate()

        fig.tight_layout()
        fig.savefig(output_path, dpi=150)
        plt.close(fig)

        return output_path
