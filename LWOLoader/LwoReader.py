import struct


class LwoReadError(IOError):
    pass


class LwoReader:
    """ Sequential big endian reader over the raw bytes of a LightWave file """

    def __init__(self, raw, offset = 0):
        self.raw = raw
        self.offset = offset

    @property
    def remaining(self):
        return len(self.raw) - self.offset

    def __ensure(self, size, what):
        if size < 0:
            raise LwoReadError(f"Negative read of {size} bytes for {what}")
        if self.offset + size > len(self.raw):
            raise LwoReadError(f"Unexpected end of data reading {what} at offset {self.offset} "
                               f"({size} bytes wanted, {self.remaining} left)")

    def __unpack(self, fmt, size, what):
        self.__ensure(size, what)
        value = struct.unpack_from(fmt, self.raw, self.offset)[0]
        self.offset += size
        return value

    def read_u8(self):
        return self.__unpack(">B", 1, "byte")

    def read_u16(self):
        return self.__unpack(">H", 2, "short")

    def read_i16(self):
        return self.__unpack(">h", 2, "short")

    def read_u32(self):
        return self.__unpack(">I", 4, "int")

    def read_f32(self):
        return self.__unpack(">f", 4, "float")

    def read_shorts(self, count):
        self.__ensure(count * 2, "shorts")
        shorts = struct.unpack_from(f">{count}H", self.raw, self.offset)
        self.offset += count * 2
        return shorts

    def read_vec(self, dimension = 3):
        self.__ensure(dimension * 4, "vector")
        vec = struct.unpack_from(f">{dimension}f", self.raw, self.offset)
        self.offset += dimension * 4
        return vec

    def read_verts(self, count):
        """ Reads count (x, y, z) float triples """
        self.__ensure(count * 12, "vertices")
        verts = [struct.unpack_from(">3f", self.raw, self.offset + x*12) for x in range(count)]
        self.offset += count * 12
        return verts

    def read_token(self):
        """ Reads a 4 character ID like "FORM" or "PNTS" """
        self.__ensure(4, "token")
        token = self.raw[self.offset:self.offset+4].decode("ASCII", errors="replace")
        self.offset += 4
        return token

    def read_string(self):
        """ Reads a null terminated string, including the padding to an even length """
        end = self.raw.find(b"\0", self.offset)
        if end < 0:
            raise LwoReadError(f"Missing null termination for string at offset {self.offset}")

        name = self.raw[self.offset:end].decode("latin-1")
        lname = end - self.offset

        """ Continue and ensure alignment """
        if lname % 2 == 0:
            size = lname + 2
        else:
            size = lname + 1
        self.__ensure(size, "string")
        self.offset += size
        return name

    def read_vx(self):
        """ Reads a variable length index. Returns the index and the number of bytes it took """
        first = self.read_u8()
        if first != 0xFF:
            return (first << 8) | self.read_u8(), 2

        self.__ensure(3, "index")
        index = int.from_bytes(self.raw[self.offset:self.offset+3], "big")
        self.offset += 3
        return index, 4

    def skip(self, size):
        self.__ensure(size, "skipped data")
        self.offset += size
