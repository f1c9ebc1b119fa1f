"""Engine parameters and configuration."""

from __future__ import annotations
from pydantic import BaseModel, Field


class ViewerSettings(BaseModel):
    """User-adjustable display settings carried in the export document."""
    show_helpers: bool = True
    point_size: float = 3.0
    line_width: float = 2.0
    calibration_value: float = 80     # Last entered reference length (cm)


class AnnotationParams(BaseModel):
    """Point drawing and surface creation."""
    close_loop_threshold: float = 50.0   # 3D units from point 0
    surface_color: int = 0x00FF00
    floor_surface_color: int = 0x0088FF
    sphere_radius: float = 500.0         # Radius of the panorama sphere


class ShapeParams(BaseModel):
    rectangle_tolerance: float = 0.10    # Relative difference of opposite sides


class FloorPlanParams(BaseModel):
    """Canvas layout and styling of the projected plan."""
    canvas_size: int = 800
    margin: int = 50
    outline_color: str = "#000000"
    outline_width: float = 2.0
    edge_label_color: str = "#d32f2f"
    edge_label_size: int = 14
    edge_label_offset: float = 6.0
    opening_label_size: int = 12
    title_size: int = 24
    door_fill: str = "rgba(139, 69, 19, 0.5)"
    window_fill: str = "rgba(0, 128, 255, 0.5)"
    other_fill: str = "rgba(255, 215, 0, 0.5)"


class DetectionParams(BaseModel):
    """Thresholds for importing external polygon candidates (pixel units)."""
    min_room_area: float = 1000.0
    min_opening_area: float = 200.0
    max_opening_area_ratio: float = 0.35  # Relative to the room outline
    door_ratio_low: float = 0.6           # width / height below this => door
    door_ratio_high: float = 1.7          # width / height above this => door
    fallback_inset: float = 10.0


class EngineConfig(BaseModel):
    """All engine parameters in one place."""
    annotation: AnnotationParams = Field(default_factory=AnnotationParams)
    shapes: ShapeParams = Field(default_factory=ShapeParams)
    floor_plan: FloorPlanParams = Field(default_factory=FloorPlanParams)
    detection: DetectionParams = Field(default_factory=DetectionParams)
