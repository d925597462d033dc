"""Type definitions for polyfence operations.

This module defines the enums shared by the kernel, the resolution engine
and the feature store.
"""

from enum import Enum


class ShapeKind(Enum):
    """Kind of shape a user can place on the plane.

    Attributes:
        POLYGON: Freeform closed ring
        RECTANGLE: Axis-aligned ring built from two corners
        CIRCLE: Centre plus radius, discretized on demand
        LINESTRING: Open path, never part of overlap checks

    Examples:
        >>> from polyfence import ShapeKind
        >>> ShapeKind('circle').is_polygonal
        True
        >>> ShapeKind.LINESTRING.is_polygonal
        False
    """
    POLYGON = 'polygon'
    RECTANGLE = 'rectangle'
    CIRCLE = 'circle'
    LINESTRING = 'linestring'

    @property
    def is_polygonal(self) -> bool:
        return self is not ShapeKind.LINESTRING


class OutcomeKind(Enum):
    """Result of validating a candidate shape against accepted shapes.

    Attributes:
        ACCEPTED: Accepted after trimming away overlapping area
        ACCEPTED_UNCHANGED: Accepted with the proposed geometry
        REJECTED_ENCLOSES_EXISTING: Candidate covers an accepted shape
        REJECTED_ENCLOSED_BY_EXISTING: Candidate lies inside an accepted shape
        REJECTED_FULLY_CONSUMED: Nothing left after trimming (or the
            subtraction itself failed)
    """
    ACCEPTED = 'accepted'
    ACCEPTED_UNCHANGED = 'accepted_unchanged'
    REJECTED_ENCLOSES_EXISTING = 'rejected_encloses_existing'
    REJECTED_ENCLOSED_BY_EXISTING = 'rejected_enclosed_by_existing'
    REJECTED_FULLY_CONSUMED = 'rejected_fully_consumed'


class KernelStatus(Enum):
    """Three-way status of a kernel set operation.

    Attributes:
        OK: Operation produced a region with positive area
        EMPTY: Operation succeeded but nothing with positive area remains
        FAILED: The geometry library could not compute the result
    """
    OK = 'ok'
    EMPTY = 'empty'
    FAILED = 'failed'


class RejectionReason(Enum):
    """Why the feature store refused to commit a shape.

    Attributes:
        LIMIT_REACHED: Per-kind count limit already reached
        ENCLOSES_EXISTING: Candidate would cover an accepted shape
        ENCLOSED_BY_EXISTING: Candidate lies inside an accepted shape
        FULLY_CONSUMED: Trimming left nothing of the candidate
    """
    LIMIT_REACHED = 'limit_reached'
    ENCLOSES_EXISTING = 'encloses_existing'
    ENCLOSED_BY_EXISTING = 'enclosed_by_existing'
    FULLY_CONSUMED = 'fully_consumed'


__all__ = [
    'ShapeKind',
    'OutcomeKind',
    'KernelStatus',
    'RejectionReason',
]
