"""Overlap resolution engine.

Decides whether a candidate shape can join a set of accepted shapes, and if
so with which geometry. The candidate's region is threaded through the
polygonal accepted shapes in their stored order; at each overlapping
neighbour the engine either rejects the candidate (enclosure in either
direction, or nothing left) or subtracts the neighbour and moves on with the
trimmed region. Because each subtraction works on the already-trimmed
region, the final geometry depends on the stored order when neighbours
overlap each other.

The whole evaluation is side-effect free: a rejection discards any trimming
done so far.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .core.geometry_utils import Region, match_orientation
from .core.types import OutcomeKind
from .kernel import GeometryKernel
from .shapes import Shape

MESSAGES = {
    OutcomeKind.ACCEPTED: "Shape auto-trimmed to avoid overlap",
    OutcomeKind.ACCEPTED_UNCHANGED: "Shape accepted",
    OutcomeKind.REJECTED_ENCLOSES_EXISTING: "Cannot create a shape that fully encloses an existing shape",
    OutcomeKind.REJECTED_ENCLOSED_BY_EXISTING: "Cannot create a shape that is fully enclosed by an existing shape",
    OutcomeKind.REJECTED_FULLY_CONSUMED: "Shape would be completely consumed by overlap trimming",
}


@dataclass(frozen=True)
class Outcome:
    """Result of :func:`validate_and_trim`.

    Attributes:
        kind: Which of the five outcomes occurred
        region: Final trimmed region (only for ``OutcomeKind.ACCEPTED``)
        trimmed_by: Ids of the accepted shapes subtracted, in order
        conflict_id: Id of the accepted shape that caused a rejection
    """

    kind: OutcomeKind
    region: Optional[Region] = None
    trimmed_by: Tuple[str, ...] = ()
    conflict_id: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.kind in (OutcomeKind.ACCEPTED, OutcomeKind.ACCEPTED_UNCHANGED)

    @property
    def rejected(self) -> bool:
        return not self.accepted

    @property
    def message(self) -> str:
        return MESSAGES[self.kind]


@dataclass(frozen=True)
class _TrimState:
    region: Region
    trimmed_by: Tuple[str, ...] = ()


def validate_and_trim(
    candidate: Shape,
    existing: Iterable[Shape],
    kernel: Optional[GeometryKernel] = None,
    verbose: bool = False,
) -> Outcome:
    """Validate ``candidate`` against ``existing`` shapes, trimming overlaps.

    Rules, applied to each polygonal existing shape in stored order:

    1. No positive-area overlap with the trimmed-so-far region: skip.
    2. The trimmed-so-far region covers the existing shape: reject
       (``REJECTED_ENCLOSES_EXISTING``).
    3. The existing shape covers the trimmed-so-far region: reject
       (``REJECTED_ENCLOSED_BY_EXISTING``).
    4. Otherwise subtract the existing shape. An empty or failed
       subtraction rejects (``REJECTED_FULLY_CONSUMED``).

    Enclosure is tested before subtracting because subtracting an enclosing
    shape would also leave nothing, and the two cases need different
    messages. Line-string candidates and line-string neighbours never take
    part.

    Args:
        candidate: Proposed shape
        existing: Accepted shapes, in stored order
        kernel: Geometry kernel (default: planar ``GeometryKernel()``)
        verbose: Print each decision (default: False)

    Returns:
        Outcome; ``ACCEPTED`` carries the trimmed region with the candidate's
        winding direction

    Examples:
        >>> from datetime import datetime, timezone
        >>> from polyfence.shapes import build_geometry
        >>> from polyfence.core.types import ShapeKind
        >>> def square(x, y, size, sid):
        ...     ring = [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]
        ...     return Shape(sid, ShapeKind.POLYGON,
        ...                  build_geometry(ShapeKind.POLYGON, ring),
        ...                  datetime.now(timezone.utc))
        >>> outcome = validate_and_trim(square(5, 5, 10, 'b'), [square(0, 0, 10, 'a')])
        >>> outcome.kind, outcome.region.area
        (<OutcomeKind.ACCEPTED: 'accepted'>, 75.0)
    """
    kernel = kernel or GeometryKernel()

    if not candidate.is_polygonal:
        if verbose:
            print(f"{candidate.kind.value} is exempt from overlap checks")
        return Outcome(OutcomeKind.ACCEPTED_UNCHANGED)

    original = candidate.region(kernel)
    state = _TrimState(original)

    for shape in existing:
        if not shape.is_polygonal:
            continue
        step = _trim_step(state, shape, kernel, verbose)
        if isinstance(step, Outcome):
            return step
        state = step

    if not state.trimmed_by:
        if verbose:
            print("No overlaps; accepted unchanged")
        return Outcome(OutcomeKind.ACCEPTED_UNCHANGED)

    if verbose:
        print(f"Accepted after trimming by {len(state.trimmed_by)} shape(s)")
    return Outcome(
        OutcomeKind.ACCEPTED,
        region=match_orientation(state.region, original),
        trimmed_by=state.trimmed_by,
    )


def _trim_step(
    state: _TrimState,
    shape: Shape,
    kernel: GeometryKernel,
    verbose: bool,
) -> Union[_TrimState, Outcome]:
    """Apply one existing shape to the running state.

    Returns the next state, or a terminal rejection Outcome.
    """
    obstacle = shape.region(kernel)
    current = state.region

    if not kernel.overlaps(current, obstacle):
        return state

    if kernel.contains(current, obstacle):
        if verbose:
            print(f"  {shape.id}: enclosed by candidate")
        return Outcome(OutcomeKind.REJECTED_ENCLOSES_EXISTING, conflict_id=shape.id)

    if kernel.contains(obstacle, current):
        if verbose:
            print(f"  {shape.id}: encloses candidate")
        return Outcome(OutcomeKind.REJECTED_ENCLOSED_BY_EXISTING, conflict_id=shape.id)

    result = kernel.difference(current, obstacle)
    if not result.ok:
        if verbose:
            print(f"  {shape.id}: difference {result.status.value}")
        return Outcome(OutcomeKind.REJECTED_FULLY_CONSUMED, conflict_id=shape.id)

    if verbose:
        print(f"  {shape.id}: trimmed {current.area - result.region.area:.6g} of area")
    return _TrimState(result.region, state.trimmed_by + (shape.id,))


__all__ = [
    'MESSAGES',
    'Outcome',
    'validate_and_trim',
]
