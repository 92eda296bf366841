"""Generate a 1920x1080 low-poly image from 100 random points and write it to out.png."""

from pydelaunay.render import generate


if __name__ == "__main__":
    generate(num_points=100, output="out.png")
