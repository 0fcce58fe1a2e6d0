import logging

import pytest

from LWOLoader.LwoLoad import LwoData
from LWOLoader.LwoPolygons import (
    Lwo2Polygon,
    PolygonType,
    ShapeHolder,
    get_appropriate_shape,
    read_lwo2_polygons,
    read_lwob_polygons,
    skip_detail_polygons,
    )
from LWOLoader.LwoReader import LwoReader

from lwo_bytes import lwo2_polygon, lwob_polygon


def read_lwob(*polygons, data = None):
    payload = b"".join(lwob_polygon(*p) for p in polygons)
    data = data or LwoData()
    reader = LwoReader(payload)
    read_lwob_polygons(reader, len(payload), data)
    assert reader.offset == len(payload)
    return data.shapes


def facets(shape):
    return list(shape.iter_facets())


def test_single_triangle():
    shapes = read_lwob(([0, 1, 2], 0))

    assert len(shapes) == 1
    assert shapes[0].facetSizes == [3]
    assert shapes[0].facetIndices == [0, 1, 2]
    assert shapes[0].numSurf == 0
    assert shapes[0].currentNumIndices == 3


def test_triangles_and_quads_of_a_surface_share_a_shape():
    shapes = read_lwob(([0, 1, 2], 1), ([0, 1, 2, 3], 1), ([0, 1, 2, 3, 4], 1))

    assert len(shapes) == 1
    assert shapes[0].facetSizes == [3, 4, 5]
    assert shapes[0].numVerts == 5
    assert sum(shapes[0].facetSizes) == shapes[0].currentNumIndices


@pytest.mark.parametrize("first, second", [([0], [0, 1, 2]), ([0, 1], [0, 1, 2]), ([0, 1, 2], [0, 1])])
def test_points_and_lines_split_from_polygons(first, second):
    shapes = read_lwob((first, 1), (second, 1))

    assert [s.facetSizes for s in shapes] == [[len(first)], [len(second)]]


def test_interleaved_surfaces_are_merged_again():
    shapes = read_lwob(([0, 1, 2], 1), ([1, 2, 3], 2), ([2, 3, 4], 1))

    assert len(shapes) == 2
    assert (shapes[0].numSurf, facets(shapes[0])) == (1, [(0, 1, 2), (2, 3, 4)])
    assert (shapes[1].numSurf, facets(shapes[1])) == (2, [(1, 2, 3)])


def test_lookup_keeps_triangles_apart_from_quads():
    shapes = read_lwob(([0, 1, 2], 1), ([0, 1, 2], 2), ([0, 1, 2, 3], 1))

    assert [(s.numSurf, s.facetSizes) for s in shapes] == [(1, [3]), (2, [3]), (1, [4])]


def test_shapes_never_mix_surfaces():
    polygons = [([0, 1, 2], 1), ([3, 4], 1), ([5, 6, 7, 8], 2), ([9], 2),
                ([10, 11, 12, 13], 1), ([14, 15, 16], 2), ([17, 18], 1), ([19, 20, 21, 22, 23], 3)]
    surfaceOf = {tuple(indices): surf for indices, surf in polygons}

    shapes = read_lwob(*polygons)

    assert sum(len(s.facetSizes) for s in shapes) == len(polygons)
    for shape in shapes:
        assert len({surfaceOf[facet] for facet in facets(shape)}) == 1
        assert shape.numSurf == surfaceOf[facets(shape)[0]]


def test_detail_polygons_are_skipped():
    plain = read_lwob(([0, 1, 2], 1), ([1, 2, 3], 1))
    detailed = read_lwob(([0, 1, 2], -2, [[4, 5, 6], [7, 8, 9, 10]]), ([1, 2, 3], 1))

    assert [facets(s) for s in detailed] == [facets(s) for s in plain]
    assert detailed[0].numSurf == (~-2 & 0xFFFF)


def test_detail_polygon_surface_zero_becomes_one():
    shapes = read_lwob(([0, 1, 2], -1, []))

    assert shapes[0].numSurf == 1
    assert facets(shapes[0]) == [(0, 1, 2)]


def test_skip_detail_polygons_counts_bytes():
    payload = lwob_polygon([0, 1, 2], 1) + lwob_polygon([3], 1)
    reader = LwoReader(payload)

    assert skip_detail_polygons(reader, 2) == len(payload)
    assert reader.offset == len(payload)


def test_shapes_share_vertex_buffer():
    data = LwoData()
    data.verts = [(0.0, 0.0, 0.0)] * 4
    shapes = read_lwob(([0, 1, 2], 1), ([0, 1], 1), data = data)

    assert all(s.verts is data.verts for s in shapes)


def test_every_chunk_starts_a_fresh_shape():
    data = LwoData()
    read_lwob(([0, 1, 2], 1), data = data)
    shapes = read_lwob(([1, 2, 3], 1), data = data)

    assert len(shapes) == 2


def test_empty_chunk_still_opens_a_shape():
    shapes = read_lwob()

    assert len(shapes) == 1
    assert shapes[0].facetSizes == []
    assert facets(shapes[0]) == []


def test_get_appropriate_shape():
    tri = ShapeHolder([], 1, 3)
    quad = ShapeHolder([], 2, 4)
    shapes = [tri, quad]

    assert get_appropriate_shape(shapes, 1, 3) is tri
    assert get_appropriate_shape(shapes, 2, 6) is quad
    assert get_appropriate_shape(shapes, 1, 4) is None
    assert get_appropriate_shape(shapes, 3, 3) is None


def test_lwo2_polygons():
    payload = b"SURF" + lwo2_polygon([0, 1, 2]) + lwo2_polygon([0x10000, 3, 4, 5], flags = 1)
    data = LwoData()
    reader = LwoReader(payload)

    polygons = read_lwo2_polygons(reader, len(payload), data)

    assert reader.offset == len(payload)
    assert data.shapes == polygons
    assert [p.indices for p in polygons] == [[0, 1, 2], [0x10000, 3, 4, 5]]
    assert [p.numVerts for p in polygons] == [3, 4]
    assert polygons[1].flags == 1
    assert all(isinstance(p, Lwo2Polygon) and p.type is PolygonType.SURF for p in polygons)
    assert all(p.surfName == "" for p in polygons)


@pytest.mark.parametrize("token, type", [("SURF", PolygonType.SURF), ("PTCH", PolygonType.PTCH)])
def test_lwo2_polygon_types(token, type):
    payload = token.encode() + lwo2_polygon([0, 1, 2])
    data = LwoData()

    read_lwo2_polygons(LwoReader(payload), len(payload), data)

    assert data.shapes[0].type is type


@pytest.mark.parametrize("token", ["XXXX", "FACE"])
def test_lwo2_unknown_polygon_type(caplog, token):
    payload = token.encode() + lwo2_polygon([0, 1, 2])
    data = LwoData()

    with caplog.at_level(logging.WARNING, logger = "lwo_loader"):
        read_lwo2_polygons(LwoReader(payload), len(payload), data)

    assert data.shapes[0].type is PolygonType.UNKNOWN
    assert token in caplog.text
