"""Opening dimensions from four clicked corners, and the click-by-click draft."""

from __future__ import annotations
import logging

from panoplan.models import OpeningDimensions, OpeningType, Point3D, edge_lengths

logger = logging.getLogger(__name__)

OPENING_CORNERS = 4


def calculate_opening_dimensions(points: list[Point3D]) -> OpeningDimensions:
    """
    Width and height of a quad from its corners in click order.

    Corners are never reordered: edges 0 and 2 are averaged into the width,
    edges 1 and 3 into the height. A sequence clicked out of order gives
    wrong but finite numbers. Anything other than four corners yields zeros.
    """
    if len(points) != OPENING_CORNERS:
        return OpeningDimensions()

    sides = edge_lengths(points)
    width = (sides[0] + sides[2]) / 2
    height = (sides[1] + sides[3]) / 2

    logger.debug(
        "Opening: width %.2f (sides %.2f, %.2f), height %.2f (sides %.2f, %.2f)",
        width, sides[0], sides[2], height, sides[1], sides[3],
    )

    return OpeningDimensions(
        width=width,
        height=height,
        area=width * height,
        perimeter=2 * (width + height),
        side_lengths=sides,
    )


class OpeningDraft:
    """
    Corners collected so far for an opening that is not yet committed.

    Nothing here touches the annotation store: `add` hands back the four
    corners once complete, and `cancel` simply forgets them.
    """

    def __init__(self, opening_type: OpeningType = OpeningType.DOOR) -> None:
        self.opening_type = opening_type
        self.corners: list[Point3D] = []

    @property
    def is_active(self) -> bool:
        return len(self.corners) > 0

    def set_type(self, opening_type: OpeningType) -> None:
        self.opening_type = opening_type

    def add(self, position: Point3D) -> list[Point3D] | None:
        """Collect a corner; return all four when the quad is complete."""
        self.corners.append(position.model_copy())
        logger.debug("Opening corner %d/%d", len(self.corners), OPENING_CORNERS)

        if len(self.corners) < OPENING_CORNERS:
            return None

        corners = self.corners
        self.corners = []
        return corners

    def cancel(self) -> int:
        """Discard collected corners; returns how many were dropped."""
        dropped = len(self.corners)
        self.corners = []
        if dropped:
            logger.info("Cancelled opening draft with %d corner(s)", dropped)
        return dropped
