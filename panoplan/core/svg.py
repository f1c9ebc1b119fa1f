"""SVG serialisation of a floor-plan scene."""

from __future__ import annotations
from xml.sax.saxutils import escape

from panoplan.models import FloorPlanScene, PlanPoint


def _pts(points: list[PlanPoint]) -> str:
    return " ".join(f"{p.x:.1f},{p.y:.1f}" for p in points)


def render_svg(scene: FloorPlanScene) -> str:
    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{scene.width}" '
        f'height="{scene.height}" viewBox="0 0 {scene.width} {scene.height}">',
        f'<rect width="100%" height="100%" fill="{scene.background}"/>',
    ]

    for outline in scene.outlines:
        lines.append(
            f'<polygon points="{_pts(outline.points)}" fill="none" '
            f'stroke="{outline.stroke}" stroke-width="{outline.stroke_width}"/>'
        )

    for fill in scene.fills:
        lines.append(
            f'<polygon points="{_pts(fill.points)}" fill="{fill.fill}" '
            f'stroke="none" data-type="{fill.opening_type.value}"/>'
        )

    for label in scene.labels:
        weight = ' font-weight="bold"' if label.bold else ""
        lines.append(
            f'<text x="{label.anchor.x:.1f}" y="{label.anchor.y:.1f}" '
            f'font-family="Arial" font-size="{label.font_size}"{weight} '
            f'fill="{label.color}" text-anchor="middle">{escape(label.text)}</text>'
        )

    lines.append("</svg>")
    return "\n".join(lines)
