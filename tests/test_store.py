"""Tests for the feature store."""

import itertools
import threading
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from shapely.geometry import box

from polyfence import (
    CircleGeometry,
    ConfigurationError,
    FeatureStore,
    KernelConfig,
    GeometryKernel,
    RejectionReason,
    ShapeKind,
    ShapeLimits,
    ShapeRejectedError,
    ValidationError,
    total_overlap_area,
)

_NOW = datetime(2024, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


def _store(**limits) -> FeatureStore:
    counter = itertools.count(1)
    return FeatureStore(
        limits=ShapeLimits().updated(**limits) if limits else None,
        clock=lambda: _NOW,
        id_factory=lambda: f"shape-{next(counter)}",
    )


class TestAddShape:
    """Tests for FeatureStore.add_shape() and its helpers."""

    def test_add_assigns_identity_and_timestamp(self):
        store = _store()
        result = store.add_polygon([(0, 0), (10, 0), (10, 10), (0, 10)])

        assert result.ok
        assert result.reason is None
        assert result.shape_id == "shape-1"
        assert result.shape.created_at == _NOW
        assert result.shape.kind is ShapeKind.POLYGON
        assert result.message == "polygon added successfully"
        assert len(store) == 1

    def test_default_ids_are_unique(self):
        store = FeatureStore()
        first = store.add_rectangle((0, 0), (1, 1))
        second = store.add_rectangle((2, 0), (3, 1))
        assert first.shape_id != second.shape_id
        assert first.shape.created_at.tzinfo is not None

    def test_open_ring_is_closed(self):
        store = _store()
        shape = store.add_polygon([(0, 0), (10, 0), (10, 10)]).shape
        coords = list(shape.output_geometry.exterior.coords)
        assert coords[0] == coords[-1]

    def test_kind_given_as_string(self):
        store = _store()
        result = store.add_shape("rectangle", [(0, 0), (5, 0), (5, 5), (0, 5), (0, 0)], name="plot")
        assert result.shape.kind is ShapeKind.RECTANGLE
        assert result.shape.name == "plot"

    def test_trimmed_geometry_is_stored(self):
        store = _store()
        store.add_rectangle((0, 0), (10, 10))
        result = store.add_rectangle((5, 5), (15, 15))

        assert result.ok
        assert result.trimmed
        assert result.message == "Shape auto-trimmed to avoid overlap"
        stored = store.get(result.shape_id)
        assert stored.output_geometry.area == pytest.approx(75.0)
        assert stored.output_geometry.equals(box(5, 5, 15, 15).difference(box(0, 0, 10, 10)))

    def test_trimmed_circle_keeps_original_parameters(self):
        store = _store()
        store.add_rectangle((0, -100), (100, 100))
        result = store.add_circle((0, 0), 50)

        assert result.trimmed
        geometry = result.shape.geometry
        assert isinstance(geometry, CircleGeometry)
        assert geometry.center == (0.0, 0.0)
        assert geometry.radius == 50.0
        assert geometry.trimmed is not None
        assert result.shape.output_geometry.geom_type == "Polygon"

    def test_later_checks_use_trimmed_circle(self):
        store = _store()
        square = store.add_rectangle((0, 0), (10, 10)).shape_id
        circle = store.add_circle((10, 5), 3)
        assert circle.trimmed

        store.remove_shape(square)
        # Lies inside the circle as drawn, but outside what was kept of it
        result = store.add_rectangle((7.5, 4.5), (9.5, 5.5))
        assert result.ok
        assert not result.trimmed

    def test_linestring_crosses_polygons(self):
        store = _store()
        store.add_rectangle((0, 0), (10, 10))
        result = store.add_linestring([(-5, 5), (15, 5)])
        assert result.ok
        assert result.message == "linestring added successfully"


class TestRejections:
    """Rejections leave the store untouched."""

    def test_enclosed_candidate_rejected(self):
        store = _store()
        store.add_rectangle((0, 0), (10, 10))
        before = store.shapes

        result = store.add_rectangle((2, 2), (4, 4))
        assert not result.ok
        assert result.shape is None
        assert result.reason is RejectionReason.ENCLOSED_BY_EXISTING
        assert store.shapes == before

    def test_enclosing_candidate_rejected(self):
        store = _store()
        store.add_circle((0, 0), 10)
        result = store.add_circle((0, 0), 20)
        assert result.reason is RejectionReason.ENCLOSES_EXISTING
        assert len(store) == 1

    def test_fully_consumed_rejected(self):
        store = FeatureStore(kernel=GeometryKernel(KernelConfig(strict_containment=True)))
        store.add_rectangle((0, 0), (10, 10))
        result = store.add_rectangle((0, 0), (10, 10))
        assert result.reason is RejectionReason.FULLY_CONSUMED
        assert len(store) == 1

    def test_raise_on_reject(self):
        store = _store()
        store.add_rectangle((0, 0), (10, 10))
        with pytest.raises(ShapeRejectedError, match="fully enclosed") as excinfo:
            store.add_rectangle((2, 2), (4, 4), raise_on_reject=True)
        assert excinfo.value.result.reason is RejectionReason.ENCLOSED_BY_EXISTING
        assert len(store) == 1

    def test_rejected_ids_are_not_reused_for_state(self):
        store = _store()
        store.add_rectangle((0, 0), (10, 10))
        store.add_rectangle((2, 2), (4, 4))
        assert [s.id for s in store] == ["shape-1"]


class TestLimits:
    """Per-kind count limits."""

    def test_limit_reached(self):
        store = _store(circle=1)
        assert store.add_circle((0, 0), 1).ok
        result = store.add_circle((10, 10), 1)

        assert result.reason is RejectionReason.LIMIT_REACHED
        assert result.limit == 1
        assert result.message == "Maximum 1 circles reached"
        assert store.is_limit_reached(ShapeKind.CIRCLE)
        assert store.remaining("circle") == 0

    def test_limit_checked_before_engine(self):
        store = _store(polygon=0)
        with patch("polyfence.store.validate_and_trim") as engine:
            result = store.add_polygon([(0, 0), (1, 0), (1, 1)])
        engine.assert_not_called()
        assert result.reason is RejectionReason.LIMIT_REACHED

    def test_limit_checked_before_payload(self):
        store = _store(linestring=0)
        result = store.add_linestring([(0, 0), (1, 1)])
        assert result.reason is RejectionReason.LIMIT_REACHED

    def test_limits_are_per_kind(self):
        store = _store(rectangle=1)
        store.add_rectangle((0, 0), (1, 1))
        assert store.add_polygon([(5, 5), (6, 5), (6, 6)]).ok
        assert not store.is_limit_reached(ShapeKind.POLYGON)

    def test_lowering_limit_does_not_evict(self):
        store = _store()
        for x in range(3):
            store.add_rectangle((x * 10, 0), (x * 10 + 5, 5))

        limits = store.update_limits(rectangle=1)
        assert limits.rectangle == 1
        assert len(store) == 3
        assert store.is_limit_reached(ShapeKind.RECTANGLE)
        assert store.add_rectangle((100, 100), (101, 101)).reason is RejectionReason.LIMIT_REACHED

    def test_raising_limit_allows_more(self):
        store = _store(circle=0)
        assert not store.add_circle((0, 0), 1).ok
        store.limits = ShapeLimits(circle=2)
        assert store.add_circle((0, 0), 1).ok

    def test_invalid_limit_update(self):
        store = _store()
        with pytest.raises(ConfigurationError):
            store.update_limits(polygon=-1)
        with pytest.raises(ConfigurationError, match="hexagon"):
            store.update_limits(hexagon=3)

    def test_shape_counts_zero_filled(self):
        store = _store()
        store.add_rectangle((0, 0), (1, 1))
        store.add_linestring([(0, 0), (5, 5)])
        counts = store.shape_counts()
        assert counts == {
            ShapeKind.POLYGON: 0,
            ShapeKind.RECTANGLE: 1,
            ShapeKind.CIRCLE: 0,
            ShapeKind.LINESTRING: 1,
        }


class TestRemoval:
    """Tests for remove_shape(), clear() and rename_shape()."""

    def test_remove_existing(self):
        store = _store()
        shape_id = store.add_rectangle((0, 0), (1, 1)).shape_id
        assert store.remove_shape(shape_id) is True
        assert shape_id not in store
        assert len(store) == 0

    def test_remove_unknown_is_noop(self):
        store = _store()
        store.add_rectangle((0, 0), (1, 1))
        assert store.remove_shape("missing") is False
        assert len(store) == 1

    def test_remove_does_not_reexpand_neighbours(self):
        store = _store()
        first = store.add_rectangle((0, 0), (10, 10)).shape_id
        second = store.add_rectangle((5, 5), (15, 15)).shape_id

        store.remove_shape(first)
        assert store.get(second).output_geometry.area == pytest.approx(75.0)
        assert store.get(second).trimmed

    def test_remove_frees_limit(self):
        store = _store(circle=1)
        shape_id = store.add_circle((0, 0), 1).shape_id
        store.remove_shape(shape_id)
        assert store.add_circle((0, 0), 1).ok

    def test_clear(self):
        store = _store()
        store.add_rectangle((0, 0), (1, 1))
        store.add_linestring([(0, 0), (1, 1)])
        store.clear()
        assert len(store) == 0
        assert store.shapes == ()

    def test_rename_keeps_geometry_and_order(self):
        store = _store()
        first = store.add_rectangle((0, 0), (1, 1)).shape
        store.add_rectangle((5, 5), (6, 6))

        renamed = store.rename_shape(first.id, "garden")
        assert renamed.name == "garden"
        assert renamed.output_geometry.equals(first.output_geometry)
        assert store.shapes[0].id == first.id

    def test_rename_unknown(self):
        with pytest.raises(KeyError):
            _store().rename_shape("missing", "x")


class TestPayloadValidation:
    """Malformed payloads raise before anything is committed."""

    def test_too_few_vertices(self):
        with pytest.raises(ValidationError, match="3 distinct"):
            _store().add_polygon([(0, 0), (1, 1)])

    def test_repeated_vertices_do_not_count(self):
        with pytest.raises(ValidationError):
            _store().add_polygon([(0, 0), (0, 0), (1, 1), (1, 1)])

    def test_degenerate_rectangle(self):
        with pytest.raises(ValidationError):
            _store().add_rectangle((0, 0), (0, 5))

    def test_non_positive_radius(self):
        with pytest.raises(ValidationError, match="positive"):
            _store().add_circle((0, 0), 0)

    def test_short_linestring(self):
        with pytest.raises(ValidationError):
            _store().add_linestring([(0, 0)])

    def test_unknown_kind(self):
        with pytest.raises(ValidationError, match="hexagon"):
            _store().add_shape("hexagon", [(0, 0), (1, 0), (1, 1)])

    def test_non_numeric_coordinates(self):
        with pytest.raises(ValidationError):
            _store().add_polygon([("a", 0), (1, 0), (1, 1)])

    def test_validation_error_leaves_store_unchanged(self):
        store = _store()
        store.add_rectangle((0, 0), (1, 1))
        with pytest.raises(ValidationError):
            store.add_circle((5, 5), -1)
        assert len(store) == 1


class TestInvariants:
    """The store never holds overlapping polygonal shapes."""

    def test_no_overlap_after_many_additions(self):
        store = FeatureStore(limits=ShapeLimits(polygon=50, rectangle=50, circle=50))
        for i in range(6):
            for j in range(6):
                store.add_rectangle((i * 7, j * 7), (i * 7 + 10, j * 7 + 10))
                store.add_circle((i * 7 + 3, j * 7 + 3), 4)

        assert len(store) > 0
        assert total_overlap_area(store) == pytest.approx(0.0, abs=1e-6)

    def test_geographic_store_trims_small_overlap(self):
        kernel = GeometryKernel(KernelConfig(geographic=True))
        store = FeatureStore(kernel=kernel)
        first = store.add_rectangle((0, 0), (0.01, 0.01)).shape
        result = store.add_rectangle((0.01 - 8e-6, 0.01 - 8e-6), (0.02, 0.02))

        assert result.ok
        assert result.trimmed
        shared = first.region(kernel).intersection(result.shape.region(kernel))
        assert kernel.area(shared) == pytest.approx(0.0, abs=1e-3)

    def test_insertion_order_preserved(self):
        store = _store()
        store.add_rectangle((0, 0), (1, 1))
        store.add_linestring([(0, 0), (1, 1)])
        store.add_circle((10, 10), 1)
        assert [s.kind for s in store] == [ShapeKind.RECTANGLE, ShapeKind.LINESTRING, ShapeKind.CIRCLE]

    def test_concurrent_additions_are_serialized(self):
        store = FeatureStore(limits=ShapeLimits(rectangle=100))
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(store.add_rectangle((0, 0), (10, 10)))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r.ok) == 1
        assert len(store) == 1
