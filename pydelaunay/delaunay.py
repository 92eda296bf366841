from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from pydelaunay.utils import HEIGHT, WIDTH, Point, Triangle

# animation file suffix -> matplotlib writer
ANIMATION_WRITERS = {".gif": "pillow", ".mp4": "ffmpeg"}


@dataclass
class Triangulation:
    """
    State of a single triangulation run.

    The input points are never mutated. `triangles` starts with only the
    super-triangle and is rewritten in place by every point insertion.
    """

    points: list[Point]
    super_triangle: Triangle
    width: int = WIDTH
    height: int = HEIGHT
    triangles: list[Triangle] = field(default_factory=list)
    debug_plots: list[NDArray[np.uint8]] = field(default_factory=list)

    def touches_super_triangle(self, triangle: Triangle) -> bool:
        return triangle.shares_vertex_with(self.super_triangle)

    def triangles_without_super_triangle(self) -> list[Triangle]:
        """Triangles not sharing any vertex with the super-triangle (state untouched)."""
        return [t for t in self.triangles if not self.touches_super_triangle(t)]

    def plot(
        self,
        show: bool = False,
        title: str = "Triangulation",
        point_labels: bool = False,
        exclude_super_t: bool = True,
        fontsize: int = 7,
    ) -> None:
        """
        Plot the triangulation using matplotlib.

        The rendered figure is also kept as an RGB frame in `debug_plots`.

        :param show: Whether to call plt.show() after plotting
        :param title: Title of the plot
        :param point_labels: Whether to label input points with their indices
        :param exclude_super_t: Whether to skip triangles touching the super triangle
        :param fontsize: Font size for labels
        """
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots()

        offset = 0.01 * max(self.width, self.height)

        if exclude_super_t:
            triangles = self.triangles_without_super_triangle()
        else:
            triangles = self.triangles

        for triangle in triangles:
            pts = triangle.to_array()
            tri_closed = np.vstack([pts, pts[0]])  # Close the triangle
            ax.plot(tri_closed[:, 0], tri_closed[:, 1], "b-", linewidth=1.0, alpha=0.6)

        if self.points:
            points = np.array(self.points, dtype=float)
            ax.plot(points[:, 0], points[:, 1], "ko", markersize=3, zorder=11)

            if point_labels:
                for idx, (x, y) in enumerate(points):
                    ax.text(
                        x + offset,
                        y + offset,
                        str(idx),
                        fontsize=fontsize,
                        ha="left",
                        va="bottom",
                        color="darkgreen",
                    )

        ax.set_aspect("equal")
        ax.set_title(title)

        if show:
            plt.show()

        # Convert figure to RGB image in memory
        fig.canvas.draw()
        buf = fig.canvas.buffer_rgba()  # type: ignore[reportAttributeAccessIssue]
        img = np.asarray(buf)[:, :, :3].copy()  # Convert to RGB by discarding alpha
        plt.close(fig)
        self.debug_plots.append(img)

    def export_animation_matplotlib(self, filepath: str | Path, fps: int = 2) -> None:
        """
        Write the frames captured by `plot` as an animation, one frame per step.

        :param filepath: Output file, its suffix picks the writer (see ANIMATION_WRITERS)
        :param fps: Frames per second
        """
        import matplotlib.pyplot as plt
        from matplotlib.animation import ArtistAnimation

        filepath = Path(filepath)
        writer = ANIMATION_WRITERS.get(filepath.suffix)
        if writer is None:
            raise ValueError(
                f"Unsupported animation format {filepath.suffix!r}, use one of {sorted(ANIMATION_WRITERS)}"
            )
        if not self.debug_plots:
            raise ValueError("No debug plots to export, triangulate with debug=True first.")

        fig, ax = plt.subplots()
        ax.axis("off")

        n_frames = len(self.debug_plots)
        frames = [
            [
                ax.imshow(frame, animated=True),
                ax.text(
                    0.01,
                    0.99,
                    f"step {step}/{n_frames}",
                    transform=ax.transAxes,
                    va="top",
                    fontsize=8,
                    animated=True,
                ),
            ]
            for step, frame in enumerate(self.debug_plots, start=1)
        ]

        try:
            ArtistAnimation(fig, frames, interval=1000 / fps).save(
                filepath, fps=fps, writer=writer
            )
        finally:
            plt.close(fig)
