import logging
from collections import namedtuple
from enum import Enum
from functools import reduce

_log = logging.getLogger("lwo_loader")


class ShapeHolder:
    """ Holds polygons that share a surface and a kind of geometry (point, line or polygon).
    facetIndices is the concatenation of the vertex indices of every facet, facetSizes
    says how many of them belong to each facet. """

    def __init__(self, verts, numSurf = 0, numVerts = 0):
        self.verts = verts
        self.numSurf = numSurf
        self.numVerts = numVerts
        self.facetSizes = []
        self.facetIndices = []

    @property
    def currentNumIndices(self):
        return len(self.facetIndices)

    def add_facet(self, indices):
        self.facetSizes.append(len(indices))
        self.facetIndices.extend(indices)

    def iter_facets(self):
        offset = 0
        for size in self.facetSizes:
            yield tuple(self.facetIndices[offset:offset + size])
            offset += size

    def __repr__(self):
        return f"{type(self).__name__}(numSurf={self.numSurf}, numVerts={self.numVerts}, facets={len(self.facetSizes)})"


class PolygonType(Enum):
    UNKNOWN = 0
    SURF = 1
    PTCH = 2


def polygon_type_from_token(token):
    try:
        return PolygonType[token]
    except KeyError:
        _log.warning("Unknown POLS type \"%s\"", token)
        return PolygonType.UNKNOWN


class Lwo2Polygon(ShapeHolder):
    """ A single LWO2 polygon. The surface is assigned later by a PTAG chunk """

    def __init__(self, verts, type, indices, flags = 0):
        super().__init__(verts, 0, len(indices))
        self.type = type
        self.flags = flags
        self.surfName = ""
        self.add_facet(indices)

    @property
    def indices(self):
        return self.facetIndices


""" LWOB """
RawPolygon = namedtuple("RawPolygon", ["numVerts", "indices", "numSurf"])


def skip_detail_polygons(reader, numPolys):
    """ Detail polygons are not supported, they are read past and dropped.
    Returns the number of bytes skipped. """
    lengthRead = 0
    for polyNum in range(numPolys):
        numVerts = reader.read_u16()
        reader.skip(numVerts * 2 + 2)   # indices plus surface
        lengthRead += numVerts * 2 + 4
    return lengthRead


def iter_lwob_polygons(reader, length):
    lengthRead = 0
    while lengthRead < length:
        numVerts = reader.read_u16()
        indices = reader.read_shorts(numVerts)
        numSurf = reader.read_i16()
        lengthRead += 4 + numVerts * 2

        if numSurf < 0:
            # Negative surface means detail polygons follow
            numPolys = reader.read_u16()
            lengthRead += 2 + skip_detail_polygons(reader, numPolys)

        yield RawPolygon(numVerts, indices, numSurf)


class PolygonAccumulator:

    def __init__(self, shapes, verts):
        self.shapes = shapes
        self.verts = verts
        """ Every POLS chunk starts out with a fresh shape, even an empty one """
        self.current = self.new_shape(0, 0)
        self.prevNumVerts = -1
        self.prevNumSurf = 0
        self.firstTime = True

    def new_shape(self, numSurf, numVerts):
        shape = ShapeHolder(self.verts, numSurf, numVerts)
        self.shapes.append(shape)
        return shape


def get_appropriate_shape(shapes, numSurf, numVerts):
    """ Returns the first shape with the same surface and the same geometry type """
    for shape in shapes:
        if shape.numSurf == numSurf:
            if shape.numVerts == numVerts or (shape.numVerts > 3 and numVerts > 3):
                return shape
    return None


def starts_new_shape(prevNumSurf, prevNumVerts, numSurf, numVerts):
    if numSurf != prevNumSurf:
        return True
    # Points and lines never share a shape with polygons
    return numVerts != prevNumVerts and (prevNumVerts < 3 or numVerts < 3)


def fold_polygon(acc, polygon):
    numSurf = polygon.numSurf
    numVerts = polygon.numVerts

    if not acc.firstTime and starts_new_shape(acc.prevNumSurf, acc.prevNumVerts, numSurf, numVerts):
        shape = get_appropriate_shape(acc.shapes, numSurf, numVerts)
        if shape is None:
            shape = acc.new_shape(numSurf, numVerts)
    else:
        shape = acc.current
        shape.numSurf = numSurf
        shape.numVerts = numVerts

    shape.add_facet(polygon.indices)

    if numSurf < 0:
        shape.numSurf = ~shape.numSurf & 0xFFFF
        if shape.numSurf == 0:
            shape.numSurf = 1   # Can't have surface 0

    acc.current = shape
    acc.prevNumVerts = numVerts
    acc.prevNumSurf = numSurf
    acc.firstTime = False
    return acc


def read_lwob_polygons(reader, length, data):
    acc = PolygonAccumulator(data.shapes, data.verts)
    return reduce(fold_polygon, iter_lwob_polygons(reader, length), acc)


""" LWO2 """
def read_lwo2_polygon(reader, verts, type):
    """ Returns the polygon and the number of bytes it took """
    raw = reader.read_u16()
    numVerts = raw & 0x03FF
    lengthRead = 2

    indices = []
    for x in range(numVerts):
        index, size = reader.read_vx()
        indices.append(index)
        lengthRead += size

    return Lwo2Polygon(verts, type, indices, raw >> 10), lengthRead


def read_lwo2_polygons(reader, length, data):
    token = reader.read_token()
    type = polygon_type_from_token(token)
    lengthRead = 4

    polygons = []
    while lengthRead < length:
        pol, size = read_lwo2_polygon(reader, data.verts, type)
        lengthRead += size
        polygons.append(pol)

    data.shapes.extend(polygons)
    return polygons
