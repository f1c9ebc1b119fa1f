"""Annotation store — owns every point, line, surface and opening per image."""

from __future__ import annotations
import logging
import math
from enum import Enum
from pydantic import BaseModel

from panoplan.models import (
    AnnotationPoint, Line, Surface, Opening, OpeningType, OpeningProperties,
    ImageAnnotationSet, ImageStatistics, OpeningStatistics, Point3D,
    AnnotationParams,
)
from panoplan.core.errors import (
    InsufficientPointsError, MissingReferenceError, InvalidOpeningError,
)
from panoplan.core.openings import calculate_opening_dimensions, OPENING_CORNERS

logger = logging.getLogger(__name__)


DEFAULT_OPENING_NAMES = {
    OpeningType.DOOR: "Door",
    OpeningType.WINDOW: "Window",
    OpeningType.OTHER: "Opening",
}

DEFAULT_OPENING_MATERIALS = {
    OpeningType.DOOR: "wood",
    OpeningType.WINDOW: "PVC",
    OpeningType.OTHER: "other",
}


class ClearResult(str, Enum):
    CLEARED = "cleared"
    NOTHING_TO_CLEAR = "nothing_to_clear"


class PlacementResult(BaseModel):
    """Outcome of one drawing click."""
    point: AnnotationPoint | None = None
    line: Line | None = None
    surface: Surface | None = None
    closed_loop: bool = False


class AnnotationStore:
    """
    Per-image annotation collections with referential integrity.

    Every operation names its image explicitly. Other components read the
    sets freely but mutate them only through these methods.
    """

    def __init__(self, params: AnnotationParams | None = None) -> None:
        self.params = params or AnnotationParams()
        self._images: dict[int, ImageAnnotationSet] = {}

    # --- Access -----------------------------------------------------------

    def image(self, image_index: int) -> ImageAnnotationSet:
        """Annotation set for an image, created on first access."""
        if image_index not in self._images:
            self._images[image_index] = ImageAnnotationSet(image_index=image_index)
        return self._images[image_index]

    def peek(self, image_index: int) -> ImageAnnotationSet:
        """Annotation set for reading; an unknown image gets an unstored empty set."""
        if image_index in self._images:
            return self._images[image_index]
        return ImageAnnotationSet(image_index=image_index)

    def has_image(self, image_index: int) -> bool:
        return image_index in self._images

    def image_indices(self) -> list[int]:
        return sorted(self._images)

    def images(self) -> list[ImageAnnotationSet]:
        return [self._images[i] for i in self.image_indices()]

    def load(self, annotations: ImageAnnotationSet) -> None:
        """Install a complete set (used when importing an export)."""
        self._images[annotations.image_index] = annotations

    def get_point(self, image_index: int, point_id: int) -> AnnotationPoint:
        point = self.peek(image_index).get_point(point_id)
        if point is None:
            raise MissingReferenceError(
                f"Point {point_id} does not exist on image {image_index}"
            )
        return point

    def resolve_points(self, image_index: int, point_ids: list[int]) -> list[AnnotationPoint]:
        """Look up points by id, logging and skipping ids that are gone."""
        data = self.peek(image_index)
        resolved: list[AnnotationPoint] = []
        for pid in point_ids:
            point = data.get_point(pid)
            if point is None:
                logger.warning("Image %d: skipping missing point %d", image_index, pid)
                continue
            resolved.append(point)
        return resolved

    def line_endpoints(self, image_index: int, line: Line) -> tuple[Point3D, Point3D] | None:
        """Current endpoint positions of a line, or None if either is gone."""
        data = self.image(image_index)
        p1 = data.get_point(line.point_id1)
        p2 = data.get_point(line.point_id2)
        if p1 is None or p2 is None:
            logger.warning(
                "Image %d: line %d references a missing point", image_index, line.id,
            )
            return None
        return p1.position, p2.position

    # --- Points -----------------------------------------------------------

    def add_point(
        self,
        image_index: int,
        position: Point3D,
        is_calibration_marker: bool = False,
    ) -> AnnotationPoint:
        data = self.image(image_index)
        point = AnnotationPoint(
            id=data.next_point_id,
            position=position.model_copy(),
            image_index=image_index,
            is_calibration_marker=is_calibration_marker,
        )
        data.next_point_id += 1
        data.points.append(point)
        logger.debug("Image %d: added point %d at %s", image_index, point.id, position)
        return point

    def move_point(self, image_index: int, point_id: int, position: Point3D) -> AnnotationPoint:
        """Drag a point. Lines and surfaces hold ids, so they follow along."""
        point = self.get_point(image_index, point_id)
        point.position = position.model_copy()
        return point

    def remove_point_cascade(self, image_index: int, point_id: int) -> AnnotationPoint:
        """Remove a point together with every line and surface vertex using it."""
        data = self.image(image_index)
        point = self.get_point(image_index, point_id)

        data.points = [p for p in data.points if p.id != point_id]
        for other in data.points:
            other.disconnect(point_id)

        data.lines = [ln for ln in data.lines if not ln.touches(point_id)]

        kept: list[Surface] = []
        for surface in data.surfaces:
            if point_id in surface.point_ids:
                surface.point_ids = [pid for pid in surface.point_ids if pid != point_id]
                if len(surface.point_ids) < 3:
                    logger.info(
                        "Image %d: surface %d dropped below 3 points, deleted",
                        image_index, surface.id,
                    )
                    continue
            kept.append(surface)
        data.surfaces = kept

        return point

    # --- Lines ------------------------------------------------------------

    def add_line(
        self,
        image_index: int,
        point_id1: int,
        point_id2: int,
        is_calibration_line: bool = False,
    ) -> Line:
        data = self.image(image_index)
        for pid in (point_id1, point_id2):
            if data.get_point(pid) is None:
                raise MissingReferenceError(
                    f"Point {pid} does not exist on image {image_index}"
                )
        line = Line(
            id=data.next_line_id,
            point_id1=point_id1,
            point_id2=point_id2,
            image_index=image_index,
            is_calibration_line=is_calibration_line,
        )
        data.next_line_id += 1
        data.lines.append(line)
        return line

    def auto_connect(self, image_index: int, point_id1: int, point_id2: int) -> Line | None:
        """Join two points with a line and record the connection on both."""
        data = self.image(image_index)
        p1 = data.get_point(point_id1)
        p2 = data.get_point(point_id2)
        if p1 is None or p2 is None:
            logger.warning(
                "Image %d: cannot connect %d and %d, point missing",
                image_index, point_id1, point_id2,
            )
            return None

        p1.connect(point_id2)
        p2.connect(point_id1)
        line = self.add_line(image_index, point_id1, point_id2)
        logger.debug("Image %d: connected points %d and %d", image_index, point_id1, point_id2)
        return line

    # --- Drawing ----------------------------------------------------------

    def close_loop_if_near(
        self,
        image_index: int,
        candidate: Point3D,
        threshold: float | None = None,
    ) -> bool:
        """
        Close the outline instead of adding a point near point 0.

        Applies once three or more drawing points exist. Closing joins the
        last point to the first and builds a surface from all of them.
        """
        if threshold is None:
            threshold = self.params.close_loop_threshold

        drawing = self.image(image_index).drawing_points
        if len(drawing) < 3:
            return False

        first, last = drawing[0], drawing[-1]
        if candidate.distance_to(first.position) >= threshold:
            return False

        self.auto_connect(image_index, last.id, first.id)
        self.build_surface_from_all_points(image_index)
        logger.info("Image %d: closed outline of %d points", image_index, len(drawing))
        return True

    def place_point(
        self,
        image_index: int,
        position: Point3D,
        threshold: float | None = None,
    ) -> PlacementResult:
        """One click in point mode: close the loop or add a connected point."""
        data = self.image(image_index)
        surfaces_before = len(data.surfaces)

        if self.close_loop_if_near(image_index, position, threshold):
            return PlacementResult(
                line=data.lines[-1],
                surface=data.surfaces[-1] if len(data.surfaces) > surfaces_before else None,
                closed_loop=True,
            )

        drawing = data.drawing_points
        previous = drawing[-1] if drawing else None
        point = self.add_point(image_index, position)
        line = None
        if previous is not None:
            line = self.auto_connect(image_index, previous.id, point.id)
        return PlacementResult(point=point, line=line)

    # --- Surfaces ---------------------------------------------------------

    def build_surface(
        self,
        image_index: int,
        point_ids: list[int],
        color: int | None = None,
    ) -> Surface:
        data = self.image(image_index)
        if len(point_ids) < 3:
            raise InsufficientPointsError(
                f"A surface needs at least 3 points, got {len(point_ids)}"
            )
        for pid in point_ids:
            if data.get_point(pid) is None:
                raise MissingReferenceError(
                    f"Point {pid} does not exist on image {image_index}"
                )

        surface = Surface(
            id=data.next_surface_id,
            point_ids=list(point_ids),
            color=self.params.surface_color if color is None else color,
            image_index=image_index,
        )
        data.next_surface_id += 1
        data.surfaces.append(surface)
        logger.info(
            "Image %d: created surface %d from %d points",
            image_index, surface.id, len(point_ids),
        )
        return surface

    def build_surface_from_all_points(self, image_index: int) -> Surface:
        """Surface over every drawing point, in insertion order."""
        ids = [p.id for p in self.image(image_index).drawing_points]
        return self.build_surface(image_index, ids)

    def copy_surface_to_floor(
        self,
        image_index: int,
        surface_id: int | None = None,
    ) -> Surface:
        """
        Mirror a surface's outline onto the lower half of the panorama sphere.

        Each copied point keeps its horizontal direction and is dropped to
        the sphere's lower hemisphere, then joined to its original by a
        vertical line. Defaults to the most recent surface.
        """
        data = self.image(image_index)
        if not data.surfaces:
            raise InsufficientPointsError(f"Image {image_index} has no surface to copy")

        if surface_id is None:
            source = data.surfaces[-1]
        else:
            source = data.get_surface(surface_id)
            if source is None:
                raise MissingReferenceError(
                    f"Surface {surface_id} does not exist on image {image_index}"
                )

        originals = self.resolve_points(image_index, source.point_ids)
        if len(originals) < 3:
            raise InsufficientPointsError(
                f"Surface {source.id} has only {len(originals)} resolvable points"
            )

        radius = self.params.sphere_radius
        copies: list[AnnotationPoint] = []
        for original in originals:
            pos = original.position
            horizontal = min(math.sqrt(pos.x * pos.x + pos.z * pos.z), radius * 0.9)
            floor_y = -math.sqrt(radius * radius - horizontal * horizontal)
            floor_pos = Point3D(x=pos.x, y=floor_y, z=pos.z).normalized() * radius
            copies.append(self.add_point(image_index, floor_pos))

        for i, copy in enumerate(copies):
            self.auto_connect(image_index, copy.id, copies[(i + 1) % len(copies)].id)
        for original, copy in zip(originals, copies):
            self.auto_connect(image_index, original.id, copy.id)

        return self.build_surface(
            image_index,
            [p.id for p in copies],
            color=self.params.floor_surface_color,
        )

    # --- Openings ---------------------------------------------------------

    def add_opening(
        self,
        image_index: int,
        opening_type: OpeningType,
        corners: list[Point3D],
        properties: OpeningProperties | None = None,
    ) -> Opening:
        """Commit an opening from exactly four corners in click order."""
        if len(corners) != OPENING_CORNERS:
            raise InvalidOpeningError(
                f"An opening needs exactly {OPENING_CORNERS} corners, got {len(corners)}"
            )

        data = self.image(image_index)
        if properties is None:
            count = sum(1 for o in data.openings if o.type == opening_type) + 1
            properties = OpeningProperties(
                name=f"{DEFAULT_OPENING_NAMES[opening_type]} {count}",
                material=DEFAULT_OPENING_MATERIALS[opening_type],
            )

        snapshots = [Point3D(x=c.x, y=c.y, z=c.z) for c in corners]
        opening = Opening(
            id=data.next_opening_id,
            type=opening_type,
            points=snapshots,
            dimensions=calculate_opening_dimensions(snapshots),
            image_index=image_index,
            properties=properties,
        )
        data.next_opening_id += 1
        data.openings.append(opening)
        logger.info(
            "Image %d: created %s '%s'",
            image_index, opening.type.value, opening.properties.name,
        )
        return opening

    def update_opening_properties(
        self,
        image_index: int,
        opening_id: int,
        name: str | None = None,
        material: str | None = None,
        notes: str | None = None,
    ) -> Opening:
        opening = self.image(image_index).get_opening(opening_id)
        if opening is None:
            raise MissingReferenceError(
                f"Opening {opening_id} does not exist on image {image_index}"
            )
        if name is not None:
            opening.properties.name = name
        if material is not None:
            opening.properties.material = material
        if notes is not None:
            opening.properties.notes = notes
        return opening

    def remove_opening(self, image_index: int, opening_id: int) -> Opening:
        data = self.image(image_index)
        opening = data.get_opening(opening_id)
        if opening is None:
            raise MissingReferenceError(
                f"Opening {opening_id} does not exist on image {image_index}"
            )
        data.openings = [o for o in data.openings if o.id != opening_id]
        logger.info("Image %d: removed opening '%s'", image_index, opening.properties.name)
        return opening

    # --- Calibration support ----------------------------------------------

    def remove_calibration(self, image_index: int) -> int:
        """Drop calibration markers and lines; returns markers removed."""
        data = self.image(image_index)
        marker_ids = {p.id for p in data.calibration_markers}
        data.points = [p for p in data.points if p.id not in marker_ids]
        data.lines = [
            ln for ln in data.lines
            if not ln.is_calibration_line
            and ln.point_id1 not in marker_ids
            and ln.point_id2 not in marker_ids
        ]
        return len(marker_ids)

    # --- Bulk clears ------------------------------------------------------

    def clear_all(self, image_index: int) -> ClearResult:
        data = self.image(image_index)
        if data.is_empty:
            logger.warning("Image %d: nothing to clear", image_index)
            return ClearResult.NOTHING_TO_CLEAR
        data.points = []
        data.lines = []
        data.surfaces = []
        data.openings = []
        logger.info("Image %d: cleared all annotations", image_index)
        return ClearResult.CLEARED

    def clear_lines(self, image_index: int) -> ClearResult:
        data = self.image(image_index)
        if not data.lines:
            logger.warning("Image %d: no lines to clear", image_index)
            return ClearResult.NOTHING_TO_CLEAR
        data.lines = []
        for point in data.points:
            point.connections = []
        logger.info("Image %d: cleared lines", image_index)
        return ClearResult.CLEARED

    def clear_openings(self, image_index: int) -> ClearResult:
        data = self.image(image_index)
        if not data.openings:
            logger.warning("Image %d: no openings to clear", image_index)
            return ClearResult.NOTHING_TO_CLEAR
        data.openings = []
        logger.info("Image %d: cleared openings", image_index)
        return ClearResult.CLEARED

    # --- Integrity --------------------------------------------------------

    def prune_dangling(self, image_index: int) -> int:
        """Drop lines and surfaces whose points are gone; returns count removed."""
        data = self.image(image_index)
        ids = {p.id for p in data.points}
        removed = 0

        lines = [ln for ln in data.lines if ln.point_id1 in ids and ln.point_id2 in ids]
        removed += len(data.lines) - len(lines)
        data.lines = lines

        surfaces = [s for s in data.surfaces if all(pid in ids for pid in s.point_ids)]
        removed += len(data.surfaces) - len(surfaces)
        data.surfaces = surfaces

        if removed:
            logger.warning(
                "Image %d: pruned %d entities with missing point references",
                image_index, removed,
            )
        return removed

    # --- Statistics -------------------------------------------------------

    def statistics(self, image_index: int) -> ImageStatistics:
        return self.peek(image_index).statistics()

    def opening_statistics(self, image_index: int) -> OpeningStatistics:
        return OpeningStatistics.from_openings(self.peek(image_index).openings)
