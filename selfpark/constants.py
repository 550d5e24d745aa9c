from __future__ import annotations

# Observation layout: target position in agent frame (3) + planar velocity (x, z).
OBS_DIM = 5

# Physics collaborator tags.
WALL_TAG = "Wall"
PARKING_SPOT_TAG = "ParkingSpot"

# Rendering surfaces.
SURFACE_CAR = "car"
SURFACE_FLOOR = "floor"

# Input axes for manual override.
AXIS_VERTICAL = "Vertical"
AXIS_HORIZONTAL = "Horizontal"

# RGBA colors, components in [0, 1].
Color = tuple[float, float, float, float]

RED: Color = (1.0, 0.0, 0.0, 1.0)
GREEN: Color = (0.0, 1.0, 0.0, 1.0)
WHITE: Color = (1.0, 1.0, 1.0, 1.0)

# Real-time seconds a floor flash stays visible.
FLASH_DELAY_S = 0.5
