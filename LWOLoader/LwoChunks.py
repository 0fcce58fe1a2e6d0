from enum import Enum


class LwoFormat(Enum):
    LWOB = "LWOB"
    LWO2 = "LWO2"


class ChunkTag(Enum):
    """ Every chunk ID either grammar knows about. Anything else is UNKNOWN """
    PNTS = "PNTS"
    POLS = "POLS"
    SRFS = "SRFS"
    SURF = "SURF"
    CRVS = "CRVS"
    PCHS = "PCHS"
    TAGS = "TAGS"
    PTAG = "PTAG"
    UNKNOWN = None

    @staticmethod
    def lookup(token):
        return _tags_by_token.get(token, ChunkTag.UNKNOWN)


_tags_by_token = {tag.value: tag for tag in ChunkTag if tag is not ChunkTag.UNKNOWN}


class Chunk:

    def __init__(self, token, length, offset):
        self.token = token
        self.tag = ChunkTag.lookup(token)
        self.length = length
        """ Offset of the first payload byte """
        self.offset = offset

    @property
    def end(self):
        return self.offset + self.length

    def __repr__(self):
        return f"Chunk({self.token!r}, length={self.length}, offset={self.offset})"


def read_chunk_header(reader):
    token = reader.read_token()
    length = reader.read_u32()
    return Chunk(token, length, reader.offset)
