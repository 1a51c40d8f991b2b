"""Edge detection pipeline stage — full Canny run plus anchor summary."""

from scanlens.edges.canny import compute_canny_edges, detect_edges

__all__ = ["compute_canny_edges", "detect_edges"]
