"""Floor-plan projector — top-down vector drawing of one image's annotations.

Pipeline:
  1. gather surface vertices and opening corners, bound them on X-Z
  2. one uniform pixels-per-unit scale fits the longer extent in the margin
  3. project with a vertical flip so increasing Z points up the page
  4. surface outlines, each edge labelled with its true 3D length
  5. opening fills coloured by type, labelled with name and size
"""

from __future__ import annotations
import logging
import os

from panoplan.models import (
    ImageAnnotationSet, Opening, OpeningType, Point3D, FloorPlanParams,
    FloorPlanScene, PlanPoint, PlanOutline, PlanFill, PlanLabel, LabelKind,
    SceneStatus, bounding_box_2d,
)
from panoplan.core.calibration import CalibrationEngine

logger = logging.getLogger(__name__)


class FloorPlanProjector:
    """Builds a FloorPlanScene; rasterisation is left to the caller."""

    def __init__(self, params: FloorPlanParams | None = None) -> None:
        self.params = params or FloorPlanParams()

    def project(
        self,
        annotations: ImageAnnotationSet,
        calibration: CalibrationEngine | None = None,
        title: str | None = None,
    ) -> FloorPlanScene:
        p = self.params
        scene = FloorPlanScene(width=p.canvas_size, height=p.canvas_size)
        scene.unit = calibration.unit if calibration else "u"

        if not annotations.surfaces:
            return self._nothing(scene, "No surfaces to draw")

        loops = self._surface_loops(annotations)
        surface_points = [pt for _, loop in loops for pt in loop]
        if len(surface_points) < 2:
            return self._nothing(scene, "Too few points to project")

        # 1. Extents over surfaces and openings together
        corner_points = [c for o in annotations.openings for c in o.points]
        box = bounding_box_2d(surface_points + corner_points, "x", "z")
        range_x = box.width or 1.0
        range_z = box.height or 1.0

        # 2. Uniform scale
        ppu = (p.canvas_size - 2 * p.margin) / max(range_x, range_z)
        scene.pixels_per_unit = ppu

        # 3. Projection
        def to_plan(pt: Point3D) -> PlanPoint:
            return PlanPoint(
                x=(pt.x - box.min_a) * ppu + p.margin,
                y=scene.height - ((pt.z - box.min_b) * ppu + p.margin),
            )

        if title:
            scene.labels.append(PlanLabel(
                text=os.path.splitext(title)[0],
                anchor=PlanPoint(x=scene.width / 2, y=p.margin / 2),
                kind=LabelKind.TITLE,
                font_size=p.title_size,
                bold=True,
            ))

        # 4. Surfaces
        for surface_id, loop in loops:
            scene.outlines.append(PlanOutline(
                surface_id=surface_id,
                points=[to_plan(pt) for pt in loop],
                stroke=p.outline_color,
                stroke_width=p.outline_width,
            ))
            for i, a in enumerate(loop):
                b = loop[(i + 1) % len(loop)]
                # Label with the 3D length; the projected length loses height
                length = a.distance_to(b)
                if calibration:
                    length = calibration.to_physical_units(length)
                mid = to_plan(a.lerp(b, 0.5))
                scene.labels.append(PlanLabel(
                    text=f"{length:.1f} {scene.unit}",
                    anchor=PlanPoint(x=mid.x, y=mid.y - p.edge_label_offset),
                    kind=LabelKind.EDGE,
                    color=p.edge_label_color,
                    font_size=p.edge_label_size,
                ))

        # 5. Openings
        for opening in annotations.openings:
            self._draw_opening(scene, opening, to_plan, calibration)

        logger.info(
            "Projected image %d: %d outline(s), %d opening(s), %.3f px/unit",
            annotations.image_index, len(scene.outlines), len(scene.fills), ppu,
        )
        return scene

    def _surface_loops(self, annotations: ImageAnnotationSet) -> list[tuple[int, list[Point3D]]]:
        """Vertex positions per surface; surfaces with a missing vertex are skipped."""
        loops: list[tuple[int, list[Point3D]]] = []
        for surface in annotations.surfaces:
            loop: list[Point3D] = []
            for pid in surface.point_ids:
                point = annotations.get_point(pid)
                if point is None:
                    break
                loop.append(point.position)
            else:
                loops.append((surface.id, loop))
                continue
            logger.warning(
                "Image %d: surface %d references a missing point, not drawn",
                annotations.image_index, surface.id,
            )
        return loops

    def _draw_opening(self, scene, opening: Opening, to_plan, calibration) -> None:
        p = self.params
        pts = opening.points
        if len(pts) < 2:
            return

        plan_pts = [to_plan(c) for c in pts]
        scene.fills.append(PlanFill(
            opening_id=opening.id,
            opening_type=opening.type,
            points=plan_pts,
            fill=self._fill_for(opening.type),
        ))

        cx = sum(pt.x for pt in plan_pts) / len(plan_pts)
        cy = sum(pt.y for pt in plan_pts) / len(plan_pts)

        scene.labels.append(PlanLabel(
            text=opening.properties.name or opening.type.value,
            anchor=PlanPoint(x=cx, y=cy - 12),
            kind=LabelKind.OPENING_NAME,
            font_size=p.opening_label_size,
        ))

        if opening.dimensions is not None:
            width, height = opening.dimensions.width, opening.dimensions.height
        else:
            # Estimate from the X-Z footprint
            box = bounding_box_2d(pts, "x", "z")
            width, height = box.width, box.height
        if calibration:
            width = calibration.to_physical_units(width)
            height = calibration.to_physical_units(height)

        scene.labels.append(PlanLabel(
            text=f"{width:.1f} × {height:.1f} {scene.unit}",
            anchor=PlanPoint(x=cx, y=cy + 6),
            kind=LabelKind.OPENING_SIZE,
            font_size=p.opening_label_size,
        ))

    def _fill_for(self, opening_type: OpeningType) -> str:
        if opening_type == OpeningType.DOOR:
            return self.params.door_fill
        if opening_type == OpeningType.WINDOW:
            return self.params.window_fill
        return self.params.other_fill

    def _nothing(self, scene: FloorPlanScene, message: str) -> FloorPlanScene:
        logger.warning(message)
        scene.status = SceneStatus.NOTHING_TO_DRAW
        scene.message = message
        return scene
