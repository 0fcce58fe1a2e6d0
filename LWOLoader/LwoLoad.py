import logging
from contextlib import contextmanager

from .LwoChunks import ChunkTag, LwoFormat, read_chunk_header
from .LwoErrors import FormatError, ParsingError
from .LwoPolygons import read_lwo2_polygons, read_lwob_polygons
from .LwoReader import LwoReader
from .LwoSurface import read_lwo2_surface, read_lwob_surface

_log = logging.getLogger("lwo_loader")


class LwoData:

    def __init__(self):
        self.format = None
        self.surfNames = []
        self.tags = []
        self.surfs = {}
        self.verts = []
        """ ShapeHolders for LWOB, Lwo2Polygons in file order for LWO2 """
        self.shapes = []

    def surface_name(self, shape):
        if self.format is LwoFormat.LWO2:
            return shape.surfName
        # LWOB surface numbers start at 1
        if 1 <= shape.numSurf <= len(self.surfNames):
            return self.surfNames[shape.numSurf - 1]
        return ""

    def iter_faces(self):
        """ Yields the vertex indices of every facet together with its surface name """
        for shape in self.shapes:
            name = self.surface_name(shape)
            for facet in shape.iter_facets():
                yield facet, name


""" Map from chunk tag to parser function, one per grammar """
lwob_chunk_parsers = {}
lwo2_chunk_parsers = {}

grammars = {
    LwoFormat.LWOB: lwob_chunk_parsers,
    LwoFormat.LWO2: lwo2_chunk_parsers,
    }


def skip_chunk(data, reader, size):
    reader.skip(size)


def parse_chunks(data, reader, dataLength, parsers, pad_odd_chunks = False):
    lengthRead = 0
    while lengthRead < dataLength:
        chunkOffset = reader.offset
        chunk = None
        try:
            chunk = read_chunk_header(reader)

            parser = parsers.get(chunk.tag)
            if parser:
                parser(data, reader, chunk.length)
            else:
                _log.debug("No parser for chunk \"%s\" known, skipping %d bytes.", chunk.token, chunk.length)
                skip_chunk(data, reader, chunk.length)
        except IOError as e:
            name = f"{chunk.token} chunk" if chunk else "chunk header"
            raise ParsingError(f"Failed to read {name} at offset {chunkOffset}: {e}") from e

        consumed = reader.offset - chunk.offset
        if consumed != chunk.length:
            raise FormatError(f"chunk length mismatch: {chunk.token} at offset {chunkOffset} "
                              f"declares {chunk.length} bytes but {consumed} were read")
        lengthRead += 8 + chunk.length

        if pad_odd_chunks and chunk.length % 2 == 1 and lengthRead < dataLength:
            try:
                reader.skip(1)
            except IOError as e:
                raise ParsingError(f"Missing pad byte after {chunk.token} chunk: {e}") from e
            lengthRead += 1

        _log.debug("Done with %s (%d bytes)", chunk.token, chunk.length)

    if lengthRead > dataLength:
        _log.warning("Chunks end %d bytes after the declared FORM length", lengthRead - dataLength)

    return lengthRead


def parse_lwo(raw, pad_odd_chunks = False):

    data = LwoData()
    reader = LwoReader(raw)

    try:
        if reader.read_token() != "FORM":
            raise FormatError("missing FORM header")
        """ The format tag is part of the FORM length """
        dataLength = reader.read_u32() - 4
        token = reader.read_token()
    except IOError as e:
        raise ParsingError(f"File is too short: {e}") from e

    try:
        data.format = LwoFormat(token)
    except ValueError:
        raise FormatError("unrecognized FORM sub-type") from None

    _log.debug("Parsing %s with %d bytes of chunks", token, dataLength)
    parse_chunks(data, reader, dataLength, grammars[data.format], pad_odd_chunks)

    return data


@contextmanager
def verbose_logging(stream = None):
    """ Prints every debug message of the loader to stream (stderr by default) until the block ends """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    oldLevel = _log.level
    _log.addHandler(handler)
    _log.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        _log.removeHandler(handler)
        _log.setLevel(oldLevel)


def load_lwo(filepath, pad_odd_chunks = False):

    raw = None
    with open(filepath, "rb") as f:
        raw = f.read()

    return parse_lwo(raw, pad_odd_chunks = pad_odd_chunks)


""" Parser functions """
def parse_PNTS(data, reader, size):
    vecs = size // 12
    data.verts = reader.read_verts(vecs)

    rest = size % 12
    if rest:
        _log.warning("PNTS length %d is not a multiple of 12, ignoring the last %d bytes", size, rest)
        reader.skip(rest)

lwob_chunk_parsers[ChunkTag.PNTS] = parse_PNTS
lwo2_chunk_parsers[ChunkTag.PNTS] = parse_PNTS



def parse_POLS(data, reader, size):
    read_lwob_polygons(reader, size, data)

lwob_chunk_parsers[ChunkTag.POLS] = parse_POLS



def parse_POLS_lwo2(data, reader, size):
    read_lwo2_polygons(reader, size, data)

lwo2_chunk_parsers[ChunkTag.POLS] = parse_POLS_lwo2



def read_names(reader, size):
    names = []
    stopMarker = reader.offset + size
    while reader.offset < stopMarker:
        names.append(reader.read_string())
    return names


def parse_SRFS(data, reader, size):
    data.surfNames = read_names(reader, size)

lwob_chunk_parsers[ChunkTag.SRFS] = parse_SRFS



def parse_TAGS(data, reader, size):
    data.tags = read_names(reader, size)

lwo2_chunk_parsers[ChunkTag.TAGS] = parse_TAGS



def parse_PTAG(data, reader, size):
    type = reader.read_token()
    lengthRead = 4

    if type != "SURF":
        _log.debug("Unknown type of PTAG: %s", type)

    while lengthRead < size:
        polIndex, vxSize = reader.read_vx()
        tagIndex = reader.read_u16()
        lengthRead += vxSize + 2

        if polIndex >= len(data.shapes):
            raise FormatError(f"PTAG references polygon {polIndex}, only {len(data.shapes)} are known")
        if tagIndex >= len(data.tags):
            raise FormatError(f"PTAG references tag {tagIndex}, only {len(data.tags)} are known")

        if type == "SURF":
            data.shapes[polIndex].surfName = data.tags[tagIndex]

lwo2_chunk_parsers[ChunkTag.PTAG] = parse_PTAG



def parse_SURF(data, reader, size):
    surf = read_lwob_surface(reader, size)
    data.surfs[surf.name] = surf

lwob_chunk_parsers[ChunkTag.SURF] = parse_SURF



def parse_SURF_lwo2(data, reader, size):
    surf = read_lwo2_surface(reader, size)
    data.surfs[surf.name] = surf

lwo2_chunk_parsers[ChunkTag.SURF] = parse_SURF_lwo2



""" Curves and patches are not supported """
lwob_chunk_parsers[ChunkTag.CRVS] = skip_chunk
lwob_chunk_parsers[ChunkTag.PCHS] = skip_chunk



def print_lwo(data):
    if data:
        print("Object:")
        print(f"  Format: {data.format.value}")
        print(f"  Vertices: {len(data.verts)}")
        print("  Shapes:")
        for shape in data.shapes:
            print(f"    {shape!r} Surface: \"{data.surface_name(shape)}\"")
        print("  Surfaces:")
        for surf in data.surfs.values():
            print(f"    {surf!r}")
    else:
        print("Given \"None\"")

if __name__ == "__main__":
    import sys
    logging.basicConfig(level=logging.WARNING)
    data = load_lwo(*sys.argv[1:])
    print_lwo(data)
