"""
SVG output for fitted curves.

Builds SVG path data and documents as strings; writing them anywhere is up
to the caller.
"""

import svgwrite

from strokefit.tracer import get_tracer, trace


def curves_to_svg_path(curves, precision=2):
    """
    Convert a list of CubicBezier objects to SVG path d attribute.

    Assumes curves are connected (end of one = start of next).
    """
    if not curves:
        return ""

    def fmt(p):
        return f"{p[0]:.{precision}f} {p[1]:.{precision}f}"

    parts = [f"M {fmt(curves[0].p0)}"]
    for curve in curves:
        parts.append(f"C {fmt(curve.p1)} {fmt(curve.p2)} {fmt(curve.p3)}")

    return " ".join(parts)


def compute_curves_bbox(curves):
    """Bounding box [min_x, min_y, max_x, max_y] of all control points."""
    if not curves:
        return [0.0, 0.0, 0.0, 0.0]

    all_points = []
    for curve in curves:
        all_points.extend([curve.p0, curve.p1, curve.p2, curve.p3])

    xs = [p[0] for p in all_points]
    ys = [p[1] for p in all_points]

    return [min(xs), min(ys), max(xs), max(ys)]


@trace(label="emit_curves_svg")
def emit_curves_svg(strokes, width, height, stroke_width=1.5, stroke_color="black"):
    """
    Create an SVG document containing fitted strokes.

    Args:
        strokes: list of FittedStroke objects
        width: canvas width in pixels
        height: canvas height in pixels
        stroke_width: line width
        stroke_color: stroke color

    Returns:
        SVG document as a string
    """
    tracer = get_tracer()

    dwg = svgwrite.Drawing(size=(f"{width}px", f"{height}px"))
    dwg.viewbox(0, 0, width, height)

    stroke_group = dwg.g(id="strokes", fill="none", stroke=stroke_color,
                         stroke_width=stroke_width, stroke_linecap="round")

    for stroke in strokes:
        d = curves_to_svg_path(stroke.curves)
        if d:
            stroke_group.add(dwg.path(d=d, id=stroke.stroke_id))

    dwg.add(stroke_group)

    tracer.event(f"SVG emitted with {len(strokes)} strokes")

    return dwg.tostring()
