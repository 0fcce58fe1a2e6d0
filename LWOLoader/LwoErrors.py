
class LwoError(Exception):
    """ Base class for everything the loader raises on a bad file """


class FormatError(LwoError):
    """ The data is readable but does not follow the LWOB/LWO2 grammar """


class ParsingError(LwoError):
    """ The data could not be read, e.g. the file is truncated """
