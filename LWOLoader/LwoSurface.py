import logging

from .LwoErrors import FormatError

_log = logging.getLogger("lwo_loader")

PLANAR_IMAGE_MAP = "Planar Image Map"


class LwoTexture:

    def __init__(self, type = PLANAR_IMAGE_MAP):
        self.type = type
        self.filepath = None
        self.sequenced = False

        """ Only relevant settings have been included """
        self.interpolate = False
        self.projAxis = "X"
        self.size = (1, 1, 1)
        self.center = (0, 0, 0)

    @property
    def planar(self):
        return self.type == PLANAR_IMAGE_MAP


class LwoSurface:

    def __init__(self, name = ""):
        self.name = name
        self.source = ""

        """ doubleSided -> Backface Culling, additive -> additive color blending """
        self.doubleSided = False
        self.additive = False

        self.color = (1, 1, 1)
        self.diffuse = 1.0
        self.transparency = 0.0

        """ Only consider color maps """
        self.ctex = None
        self.lastTex = None

    def __repr__(self):
        return f"LwoSurface({self.name!r}, color={self.color}, doubleSided={self.doubleSided})"


def planar_project(tex, vec):

    xoff = 0
    yoff = 0
    if tex.projAxis == "X":
        xoff = 2
        yoff = 1
    elif tex.projAxis == "Y":
        xoff = 0
        yoff = 2
    else:
        xoff = 0
        yoff = 1

    x = 0.5 + ((vec[xoff] - tex.center[xoff]) / tex.size[xoff])
    y = 0.5 + ((vec[yoff] - tex.center[yoff]) / tex.size[yoff])

    return (x, y)


""" Map from name to parser function """
lwob_subchunk_parsers = {}
lwo2_subchunk_parsers = {}

def parse_subchunk(surf, reader, parsers):
    name = reader.read_token()
    size = reader.read_u16()
    end = reader.offset + size

    parser = parsers.get(name)
    if parser:
        parser(surf, reader, size)
    else:
        _log.debug("No parser for subchunk \"%s\" known.", name)

    if reader.offset > end:
        raise FormatError(f"{name} subchunk of surface \"{surf.name}\" is longer than its {size} bytes")
    """ Skip whatever the parser left """
    reader.skip(end - reader.offset)


def read_lwob_surface(reader, length):
    end = reader.offset + length

    surf = LwoSurface(reader.read_string())
    while reader.offset < end:
        parse_subchunk(surf, reader, lwob_subchunk_parsers)

    return surf


def read_lwo2_surface(reader, length):
    end = reader.offset + length

    surf = LwoSurface(reader.read_string())
    surf.source = reader.read_string()
    while reader.offset < end:
        parse_subchunk(surf, reader, lwo2_subchunk_parsers)

    return surf


def expect_size(name, size, expected):
    if size != expected:
        raise FormatError(f"{name} has the wrong length")


def last_texture(surf):
    if not surf.lastTex:
        raise FormatError("Missing TEX subchunk before this subchunk.")
    return surf.lastTex


""" LWOB subchunk parsers """
def parse_COLR(surf, reader, size):
    expect_size("COLR", size, 4)
    surf.color = tuple(reader.read_u8() / 255 for j in range(3))

lwob_subchunk_parsers["COLR"] = parse_COLR



def parse_FLAG(surf, reader, size):
    expect_size("FLAG", size, 2)
    flags = reader.read_u16()

    surf.doubleSided = (flags & (1 << 8)) != 0
    surf.additive = (flags & (1 << 9)) != 0

lwob_subchunk_parsers["FLAG"] = parse_FLAG



def parse_CTEX(surf, reader, size):
    surf.ctex = LwoTexture(reader.read_string())
    if not surf.ctex.planar:
        _log.debug("Color texture of \"%s\" uses unsupported mapping \"%s\"", surf.name, surf.ctex.type)
    surf.lastTex = surf.ctex

lwob_subchunk_parsers["CTEX"] = parse_CTEX



def parse_other_TEX(surf, reader, size):
    """ Only color textures are kept, the others still take the following T* subchunks """
    surf.lastTex = LwoTexture(reader.read_string())

for texName in ("DTEX", "STEX", "RTEX", "TTEX", "BTEX"):
    lwob_subchunk_parsers[texName] = parse_other_TEX



def parse_TIMG(surf, reader, size):
    tex = last_texture(surf)

    filename = reader.read_string()
    if filename.endswith(" (sequence)"):
        tex.filepath = filename[:-len(" (sequence)")]
        tex.sequenced = True
    else:
        tex.filepath = filename
        tex.sequenced = False

lwob_subchunk_parsers["TIMG"] = parse_TIMG



def parse_TFLG(surf, reader, size):
    tex = last_texture(surf)
    expect_size("TFLG", size, 2)

    flags = reader.read_u16()

    """ Parse axis """
    if flags & (1 << 0) != 0:
        tex.projAxis = "X"
    elif flags & (1 << 1) != 0:
        tex.projAxis = "Y"
    elif flags & (1 << 2) != 0:
        tex.projAxis = "Z"

    tex.interpolate = flags & (1 << 5) != 0

lwob_subchunk_parsers["TFLG"] = parse_TFLG



def parse_TSIZ(surf, reader, size):
    tex = last_texture(surf)
    expect_size("TSIZ", size, 12)

    tex.size = reader.read_vec(3)

lwob_subchunk_parsers["TSIZ"] = parse_TSIZ



def parse_TCTR(surf, reader, size):
    tex = last_texture(surf)
    expect_size("TCTR", size, 12)

    tex.center = reader.read_vec(3)

lwob_subchunk_parsers["TCTR"] = parse_TCTR



""" LWO2 subchunk parsers. Envelope references are read and ignored """
def parse_COLR_lwo2(surf, reader, size):
    surf.color = reader.read_vec(3)
    reader.read_vx()

lwo2_subchunk_parsers["COLR"] = parse_COLR_lwo2



def parse_DIFF_lwo2(surf, reader, size):
    surf.diffuse = reader.read_f32()
    reader.read_vx()

lwo2_subchunk_parsers["DIFF"] = parse_DIFF_lwo2



def parse_TRAN_lwo2(surf, reader, size):
    surf.transparency = reader.read_f32()
    reader.read_vx()

lwo2_subchunk_parsers["TRAN"] = parse_TRAN_lwo2



def parse_SIDE_lwo2(surf, reader, size):
    expect_size("SIDE", size, 2)
    surf.doubleSided = reader.read_u16() == 3

lwo2_subchunk_parsers["SIDE"] = parse_SIDE_lwo2
