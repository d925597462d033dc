"""Feature store: the ordered collection of accepted shapes.

The store assigns identity and creation time, enforces per-kind count limits
and runs every polygonal candidate through the resolution engine before
committing it. Rejections are returned as ordinary values and never leave
partial state behind.

Threading: all mutations hold a re-entrant lock, so the read-validate-append
sequence of :meth:`FeatureStore.add_shape` is a single critical section.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union
import threading
import uuid

from .config import ShapeLimits
from .core.errors import ShapeRejectedError, ValidationError
from .core.types import OutcomeKind, RejectionReason, ShapeKind
from .engine import Outcome, validate_and_trim
from .kernel import GeometryKernel
from .shapes import Shape, build_geometry, rectangle_ring

_REJECTION_REASONS = {
    OutcomeKind.REJECTED_ENCLOSES_EXISTING: RejectionReason.ENCLOSES_EXISTING,
    OutcomeKind.REJECTED_ENCLOSED_BY_EXISTING: RejectionReason.ENCLOSED_BY_EXISTING,
    OutcomeKind.REJECTED_FULLY_CONSUMED: RejectionReason.FULLY_CONSUMED,
}


@dataclass(frozen=True)
class AddResult:
    """Result of :meth:`FeatureStore.add_shape`.

    Attributes:
        shape: The committed shape (None on rejection)
        reason: Rejection reason (None on success)
        message: User-facing status text
        limit: The configured limit, for ``LIMIT_REACHED``
        outcome: Engine outcome, when the engine was consulted
    """

    shape: Optional[Shape] = None
    reason: Optional[RejectionReason] = None
    message: str = ""
    limit: Optional[int] = None
    outcome: Optional[Outcome] = None

    @property
    def ok(self) -> bool:
        return self.shape is not None

    @property
    def shape_id(self) -> Optional[str]:
        return self.shape.id if self.shape is not None else None

    @property
    def trimmed(self) -> bool:
        return self.shape is not None and self.shape.trimmed


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class FeatureStore:
    """Owns accepted shapes and enforces the non-overlap policy.

    Args:
        limits: Per-kind count limits (default: ``ShapeLimits()``)
        kernel: Geometry kernel used for validation (default: planar)
        clock: Callable returning the creation timestamp
        id_factory: Callable returning fresh shape ids

    Examples:
        >>> store = FeatureStore()
        >>> store.add_rectangle((0, 0), (10, 10)).ok
        True
        >>> result = store.add_rectangle((5, 5), (15, 15))
        >>> result.trimmed, result.shape.output_geometry.area
        (True, 75.0)
        >>> store.add_rectangle((2, 2), (4, 4)).reason
        <RejectionReason.ENCLOSED_BY_EXISTING: 'enclosed_by_existing'>
    """

    def __init__(
        self,
        limits: Optional[ShapeLimits] = None,
        kernel: Optional[GeometryKernel] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._limits = limits or ShapeLimits()
        self.kernel = kernel or GeometryKernel()
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_id
        self._shapes: List[Shape] = []
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        counts = ", ".join(f"{k.value}={n}" for k, n in self.shape_counts().items())
        return f"FeatureStore({counts})"

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_shape(
        self,
        kind: Union[ShapeKind, str],
        geometry: Any,
        name: Optional[str] = None,
        raise_on_reject: bool = False,
        verbose: bool = False,
    ) -> AddResult:
        """Validate and commit a new shape.

        Args:
            kind: Shape kind
            geometry: Kind-appropriate payload (see
                :func:`polyfence.shapes.build_geometry`)
            name: Optional user label
            raise_on_reject: Raise ``ShapeRejectedError`` instead of returning
                a rejected result
            verbose: Print the engine's decisions

        Returns:
            AddResult; ``ok`` is True when the shape was committed

        Raises:
            ValidationError: If the kind or payload is malformed
            ShapeRejectedError: On rejection when ``raise_on_reject`` is set
        """
        try:
            kind = ShapeKind(kind)
        except ValueError as e:
            raise ValidationError(f"Unknown shape kind: {kind!r}") from e

        with self._lock:
            limit = self._limits.limit_for(kind)
            if self._count(kind) >= limit:
                result = AddResult(
                    reason=RejectionReason.LIMIT_REACHED,
                    message=f"Maximum {limit} {kind.value}s reached",
                    limit=limit,
                )
                return self._reject(result, raise_on_reject)

            candidate = Shape(
                id=self._id_factory(),
                kind=kind,
                geometry=build_geometry(kind, geometry),
                created_at=self._clock(),
                name=name,
            )
            outcome = validate_and_trim(candidate, self._shapes, kernel=self.kernel, verbose=verbose)

            if outcome.rejected:
                result = AddResult(
                    reason=_REJECTION_REASONS[outcome.kind],
                    message=outcome.message,
                    outcome=outcome,
                )
                return self._reject(result, raise_on_reject)

            if outcome.kind is OutcomeKind.ACCEPTED:
                candidate = candidate.with_region(outcome.region)
                message = outcome.message
            else:
                message = f"{kind.value} added successfully"

            self._shapes.append(candidate)
            return AddResult(shape=candidate, message=message, outcome=outcome)

    def add_polygon(self, points: Sequence[Sequence[float]], name: Optional[str] = None, **kwargs) -> AddResult:
        return self.add_shape(ShapeKind.POLYGON, points, name=name, **kwargs)

    def add_rectangle(
        self,
        corner_a: Sequence[float],
        corner_b: Sequence[float],
        name: Optional[str] = None,
        **kwargs,
    ) -> AddResult:
        return self.add_shape(ShapeKind.RECTANGLE, rectangle_ring(corner_a, corner_b), name=name, **kwargs)

    def add_circle(self, center: Sequence[float], radius: float, name: Optional[str] = None, **kwargs) -> AddResult:
        return self.add_shape(ShapeKind.CIRCLE, (center, radius), name=name, **kwargs)

    def add_linestring(self, points: Sequence[Sequence[float]], name: Optional[str] = None, **kwargs) -> AddResult:
        return self.add_shape(ShapeKind.LINESTRING, points, name=name, **kwargs)

    def remove_shape(self, shape_id: str) -> bool:
        """Remove a shape by id.

        Neighbours that were trimmed against it keep their trimmed geometry.

        Returns:
            True if a shape was removed, False if the id was unknown
        """
        with self._lock:
            for index, shape in enumerate(self._shapes):
                if shape.id == shape_id:
                    del self._shapes[index]
                    return True
            return False

    def rename_shape(self, shape_id: str, name: Optional[str]) -> Shape:
        """Change a shape's label; geometry and position in the store are kept.

        Raises:
            KeyError: If no shape has ``shape_id``
        """
        with self._lock:
            for index, shape in enumerate(self._shapes):
                if shape.id == shape_id:
                    self._shapes[index] = shape.renamed(name)
                    return self._shapes[index]
            raise KeyError(shape_id)

    def clear(self) -> None:
        with self._lock:
            self._shapes.clear()

    # ------------------------------------------------------------------
    # Limits
    # ------------------------------------------------------------------

    @property
    def limits(self) -> ShapeLimits:
        return self._limits

    @limits.setter
    def limits(self, limits: ShapeLimits) -> None:
        with self._lock:
            self._limits = limits

    def update_limits(self, **limits: int) -> ShapeLimits:
        """Replace some per-kind limits. Shapes already over a lowered limit stay."""
        with self._lock:
            self._limits = self._limits.updated(**limits)
            return self._limits

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def shapes(self) -> Tuple[Shape, ...]:
        """Accepted shapes in insertion order."""
        return tuple(self._shapes)

    def get(self, shape_id: str) -> Optional[Shape]:
        for shape in self._shapes:
            if shape.id == shape_id:
                return shape
        return None

    def shape_counts(self) -> Dict[ShapeKind, int]:
        counts = {kind: 0 for kind in ShapeKind}
        for shape in self._shapes:
            counts[shape.kind] += 1
        return counts

    def is_limit_reached(self, kind: Union[ShapeKind, str]) -> bool:
        kind = ShapeKind(kind)
        return self._count(kind) >= self._limits.limit_for(kind)

    def remaining(self, kind: Union[ShapeKind, str]) -> int:
        kind = ShapeKind(kind)
        return max(0, self._limits.limit_for(kind) - self._count(kind))

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(tuple(self._shapes))

    def __contains__(self, shape_id: object) -> bool:
        return self.get(shape_id) is not None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _count(self, kind: ShapeKind) -> int:
        return sum(1 for shape in self._shapes if shape.kind is kind)

    @staticmethod
    def _reject(result: AddResult, raise_on_reject: bool) -> AddResult:
        if raise_on_reject:
            raise ShapeRejectedError(result)
        return result


__all__ = [
    'AddResult',
    'FeatureStore',
]
