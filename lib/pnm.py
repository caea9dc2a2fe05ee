#!/usr/bin/env python
# pnm.py - Netpbm codec in pure Python
# Copyright (C) 2006 Johann C. Rocholl <johann@browsershots.org>
#
# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
Netpbm codec in pure Python

This module reads and writes the six classic Netpbm formats:

    P1 / P4   bitmap (PBM), ASCII / packed binary
    P2 / P5   grayscale (PGM), ASCII / one byte per sample
    P3 / P6   color (PPM), ASCII / three bytes per sample

Every image is decoded completely into memory as a Bitmap, Grayscale
or ColorMap instance, which can be transformed, converted and drawn on
(see the pnmdraw module) before it is written back out.

This file can be used in two ways:

1. As a command-line utility to convert and transform PNM files. Try
   "python pnm.py --help" for usage information.

2. As a module that can be imported:
   >>> import pnm
   >>> image = pnm.load('picture.ppm')
   >>> image.to_grayscale().save('picture.pgm')
"""


__revision__ = '$Rev$'
__date__ = '$Date$'
__author__ = '$Author$'


import sys, copy, logging
from array import array
from collections import namedtuple


log = logging.getLogger(__name__)


BITMAP = 'bitmap'
GRAYSCALE = 'grayscale'
COLOR = 'color'

Format = namedtuple('Format', 'magic kind binary')

FORMATS = {
    'P1': Format('P1', BITMAP, False),
    'P2': Format('P2', GRAYSCALE, False),
    'P3': Format('P3', COLOR, False),
    'P4': Format('P4', BITMAP, True),
    'P5': Format('P5', GRAYSCALE, True),
    'P6': Format('P6', COLOR, True),
    }

Pixel = namedtuple('Pixel', 'r g b')


class Error(Exception):
    """Base class for all errors raised by this module."""


class FormatError(Error, ValueError):
    """Malformed PNM data."""


class InvalidFormat(FormatError):
    pass


class InvalidDimensions(FormatError):
    pass


class InvalidMaxValue(FormatError):
    pass


class InvalidSample(FormatError):
    pass


class TruncatedData(FormatError):
    """
    The pixel data ended before the header's promise was kept.

    The row attribute holds the index of the first incomplete row.
    """

    def __init__(self, row, message=None):
        if message is None:
            message = 'unexpected end of data at row %d' % row
        FormatError.__init__(self, message)
        self.row = row


class OutOfBounds(Error, IndexError):
    pass


def find_format(kind, binary):
    """
    Return the Format entry for an image kind and encoding.
    """
    for fmt in FORMATS.values():
        if fmt.kind == kind and fmt.binary == binary:
            return fmt
    raise InvalidFormat('no format for %s images' % kind)


def _decimal(token):
    """
    Parse a token of ASCII digits, return None if it is not one.
    """
    if not token.isdigit():
        return None
    return int(token)


def _text(token):
    return token.decode('ascii', 'replace')


def _is_int(value):
    # bool is an int subclass but not a sample or max value
    return isinstance(value, int) and not isinstance(value, bool)


def read_header(infile):
    """
    Read a PNM header, return format, width, height and maxval.

    The header is three lines: the magic number, the width and height,
    and (except for bitmaps) the maximum sample value. Bitmaps report
    a maxval of 1. The file is left positioned at the first byte of
    pixel data.
    """
    magic = _text(infile.readline().strip())
    fmt = FORMATS.get(magic)
    if fmt is None:
        raise InvalidFormat('file format %r not supported' % magic)

    tokens = infile.readline().split()
    if len(tokens) < 2:
        raise InvalidDimensions('missing width and height')
    width = _decimal(tokens[0])
    height = _decimal(tokens[1])
    if width is None or height is None:
        raise InvalidDimensions('invalid dimensions %s %s'
                                % (_text(tokens[0]), _text(tokens[1])))
    if width <= 0 or height <= 0:
        raise InvalidDimensions('width and height must be positive')

    if fmt.kind == BITMAP:
        return fmt, width, height, 1
    tokens = infile.readline().split()
    if not tokens:
        raise InvalidMaxValue('missing max value')
    maxval = _decimal(tokens[0])
    if maxval is None or maxval > 255:
        raise InvalidMaxValue('invalid max value %s' % _text(tokens[0]))
    return fmt, width, height, maxval


def write_header(outfile, fmt, width, height, maxval=None):
    """
    Write a PNM header, one record per line.

    The fmt argument is a Format entry or a magic number string.
    """
    if not isinstance(fmt, Format):
        fmt = FORMATS[fmt]
    lines = [fmt.magic, '%d %d' % (width, height)]
    if fmt.kind != BITMAP:
        lines.append('%d' % maxval)
    outfile.write(('\n'.join(lines) + '\n').encode('ascii'))


def _read_bytes(infile, row, count):
    data = infile.read(count)
    if len(data) < count:
        raise TruncatedData(row,
            'unexpected end of file at row %d, expected %d bytes, got %d'
            % (row, count, len(data)))
    return data


def _read_values(infile, row, count, per_sample=1):
    """
    Read one text line holding at least count decimal values.
    """
    tokens = infile.readline().split()
    if len(tokens) < count:
        raise TruncatedData(row, 'row %d has %d values, expected %d'
                            % (row, len(tokens), count))
    if len(tokens) > count:
        log.debug('ignoring %d extra values at row %d',
                  len(tokens) - count, row)
    values = []
    for index in range(count):
        value = _decimal(tokens[index])
        if value is None:
            raise InvalidSample('invalid value %r at row %d, column %d'
                                % (_text(tokens[index]), row,
                                   index // per_sample))
        values.append(value)
    return values


def read_rows(infile, fmt, width, height):
    """
    Read the pixel data that follows a PNM header, return a list of rows.

    Bitmap rows hold booleans for binary data and 0/1 integers for
    ASCII data, grayscale rows hold integers and color rows hold
    Pixel triples. Sample values are not checked against the max
    value here; the image constructors do that.
    """
    rows = []
    for y in range(height):
        if fmt.kind == BITMAP:
            if fmt.binary:
                data = _read_bytes(infile, y, (width + 7) // 8)
                row = [bool(data[x >> 3] >> (7 - (x & 7)) & 1)
                       for x in range(width)]
            else:
                row = _read_values(infile, y, width)
        elif fmt.kind == GRAYSCALE:
            if fmt.binary:
                row = list(_read_bytes(infile, y, width))
            else:
                row = _read_values(infile, y, width)
        else:
            if fmt.binary:
                data = _read_bytes(infile, y, 3 * width)
            else:
                data = _read_values(infile, y, 3 * width, 3)
            row = [Pixel(data[i], data[i+1], data[i+2])
                   for i in range(0, 3 * width, 3)]
        rows.append(row)
    return rows


def write_rows(outfile, fmt, rows):
    """
    Write pixel rows in the encoding selected by fmt.

    ASCII rows are written as values separated by single spaces, one
    line per row. Binary rows are written as raw bytes; bitmap rows are
    packed eight samples per byte, most significant bit first, with
    the unused bits of the last byte set to zero.
    """
    for row in rows:
        if fmt.kind == BITMAP:
            if fmt.binary:
                packed = array('B', bytes((len(row) + 7) // 8))
                for x, ink in enumerate(row):
                    if ink:
                        packed[x >> 3] |= 0x80 >> (x & 7)
                outfile.write(packed.tobytes())
                continue
            line = ' '.join(ink and '1' or '0' for ink in row)
        elif fmt.kind == GRAYSCALE:
            if fmt.binary:
                outfile.write(array('B', row).tobytes())
                continue
            line = ' '.join('%d' % value for value in row)
        else:
            if fmt.binary:
                data = array('B')
                for pixel in row:
                    data.extend(pixel)
                outfile.write(data.tobytes())
                continue
            line = ' '.join('%d %d %d' % tuple(pixel) for pixel in row)
        outfile.write((line + '\n').encode('ascii'))


class PixelBuffer:
    """
    A rectangular grid of samples, stored as a list of rows.

    There are two ways to store a sample. The get and set methods are
    bounds checked and raise OutOfBounds. The paint method silently
    ignores coordinates outside the grid, which lets drawing code clip
    shapes without checking every point.
    """

    def __init__(self, rows):
        rows = [list(row) for row in rows]
        if not rows or not rows[0]:
            raise InvalidDimensions("Width and height must be greater than zero")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise InvalidDimensions('row %d has %d samples, expected %d'
                                        % (y, len(row), width))
        self.rows = rows

    @classmethod
    def blank(cls, width, height, value):
        if width <= 0 or height <= 0:
            raise InvalidDimensions("Width and height must be greater than zero")
        return cls([[value] * width for y in range(height)])

    @property
    def width(self):
        return len(self.rows[0])

    @property
    def height(self):
        return len(self.rows)

    def _check(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds('pixel (%d, %d) outside %dx%d image'
                              % (x, y, self.width, self.height))

    def get(self, x, y):
        self._check(x, y)
        return self.rows[y][x]

    def set(self, x, y, value):
        self._check(x, y)
        self.rows[y][x] = value

    def paint(self, x, y, value):
        if 0 <= x < self.width and 0 <= y < self.height:
            self.rows[y][x] = value

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.rows == other.rows


class Image:
    """
    Base class of the three Netpbm image kinds.

    An image owns one PixelBuffer, its Format (which carries the magic
    number) and a maximum sample value.
    """

    kind = None
    blank_sample = None

    def __init__(self, width, height, maxval, rows, magic):
        fmt = FORMATS.get(magic)
        if fmt is None or fmt.kind != self.kind:
            raise InvalidFormat('magic number %r is not a %s format'
                                % (magic, self.kind))
        if not _is_int(maxval) or not (0 <= maxval <= 255):
            raise InvalidMaxValue('max value must be 0-255, not %r' % maxval)
        self.format = fmt
        self.maxval = maxval
        if rows is None:
            self.buffer = PixelBuffer.blank(width, height, self.blank_sample)
            return
        rows = [[self._sample(value, x, y) for x, value in enumerate(row)]
                for y, row in enumerate(rows)]
        self.buffer = PixelBuffer(rows)
        if (self.buffer.width, self.buffer.height) != (width, height):
            raise InvalidDimensions('rows are %dx%d, expected %dx%d'
                                    % (self.buffer.width, self.buffer.height,
                                       width, height))

    def _sample(self, value, x, y):
        """
        Validate one sample, return it in its stored form.
        """
        raise NotImplementedError

    def _bad_sample(self, value, x, y):
        return InvalidSample('invalid %s sample %r at row %d, column %d'
                             % (self.kind, value, y, x))

    @property
    def magic(self):
        return self.format.magic

    @property
    def width(self):
        return self.buffer.width

    @property
    def height(self):
        return self.buffer.height

    @property
    def rows(self):
        return self.buffer.rows

    def size(self):
        return self.width, self.height

    def get(self, x, y):
        return self.buffer.get(x, y)

    def set(self, x, y, value):
        self.buffer.set(x, y, self._sample(value, x, y))

    def paint(self, x, y, value):
        """
        Store a sample, ignoring points outside the image.

        The sample itself is validated even when the point is clipped,
        so a bad color fails on the first call.
        """
        self.buffer.paint(x, y, self._sample(value, x, y))

    def invert(self):
        raise NotImplementedError

    def flip(self):
        """
        Mirror the image horizontally.
        """
        for row in self.buffer.rows:
            row.reverse()

    def flop(self):
        """
        Mirror the image vertically.
        """
        self.buffer.rows.reverse()

    def rotate90cw(self):
        """
        Rotate the image 90 degrees clockwise.
        """
        rows = self.buffer.rows
        height = len(rows)
        self.buffer = PixelBuffer([[rows[height - 1 - c][r]
                                    for c in range(height)]
                                   for r in range(self.width)])

    def set_magic(self, magic):
        """
        Switch between the ASCII and binary encoding of this image kind.
        """
        fmt = FORMATS.get(magic)
        if fmt is None or fmt.kind != self.kind:
            raise InvalidFormat('cannot store a %s image as %r'
                                % (self.kind, magic))
        self.format = fmt

    def write(self, outfile):
        """
        Encode the image and write it to a binary file object.
        """
        write_header(outfile, self.format, self.width, self.height,
                     self.maxval)
        write_rows(outfile, self.format, self.buffer.rows)
        log.debug('wrote %s image %dx%d', self.format.magic,
                  self.width, self.height)

    def save(self, filename):
        with open(filename, 'wb') as outfile:
            self.write(outfile)

    def copy(self):
        clone = copy.copy(self)
        clone.buffer = PixelBuffer(self.buffer.rows)
        return clone

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return (self.format == other.format and
                self.maxval == other.maxval and
                self.buffer == other.buffer)

    def __repr__(self):
        return '<%s %s %dx%d maxval=%d>' % (
            type(self).__name__, self.format.magic,
            self.width, self.height, self.maxval)


class Bitmap(Image):
    """
    Black and white image (PBM). Samples are booleans, True is ink.
    """

    kind = BITMAP
    blank_sample = False

    def __init__(self, width, height, rows=None, magic='P1'):
        Image.__init__(self, width, height, 1, rows, magic)

    def _sample(self, value, x, y):
        if value not in (0, 1):
            raise self._bad_sample(value, x, y)
        return bool(value)

    def invert(self):
        self.buffer.rows = [[not ink for ink in row]
                            for row in self.buffer.rows]


class Anymap(Image):
    """
    Image with an explicit maximum sample value (PGM or PPM).
    """

    def _channels(self, function):
        """
        Apply function to every channel of every sample.
        """
        raise NotImplementedError

    def invert(self):
        maxval = self.maxval
        self._channels(lambda value: maxval - value)

    def set_maxval(self, maxval):
        """
        Change the maximum sample value and rescale every sample.

        Samples are scaled by maxval / old maxval and truncated, so
        reducing the max value loses precision.
        """
        if not _is_int(maxval) or not (1 <= maxval <= 255):
            raise InvalidMaxValue('max value must be 1-255, not %r' % maxval)
        old = self.maxval
        if old == 0:
            self._channels(lambda value: 0)
        else:
            self._channels(lambda value: int(value * maxval / old))
        self.maxval = maxval


class Grayscale(Anymap):
    """
    Grayscale image (PGM). Samples are integers from 0 to maxval.
    """

    kind = GRAYSCALE
    blank_sample = 0

    def __init__(self, width, height, maxval=255, rows=None, magic='P2'):
        Image.__init__(self, width, height, maxval, rows, magic)

    def _sample(self, value, x, y):
        if not _is_int(value) or not (0 <= value <= self.maxval):
            raise self._bad_sample(value, x, y)
        return value

    def _channels(self, function):
        self.buffer.rows = [[function(value) for value in row]
                            for row in self.buffer.rows]

    def to_bitmap(self):
        """
        Return a new Bitmap with ink where a sample is below half maxval.
        """
        threshold = self.maxval // 2
        rows = [[value < threshold for value in row]
                for row in self.buffer.rows]
        return Bitmap(self.width, self.height, rows)


class ColorMap(Anymap):
    """
    Color image (PPM). Samples are Pixel(r, g, b) triples.
    """

    kind = COLOR
    blank_sample = Pixel(0, 0, 0)

    def __init__(self, width, height, maxval=255, rows=None, magic='P3'):
        Image.__init__(self, width, height, maxval, rows, magic)

    def _sample(self, value, x, y):
        try:
            pixel = Pixel(*value)
        except TypeError:
            raise self._bad_sample(value, x, y) from None
        for channel in pixel:
            if not _is_int(channel) or not (0 <= channel <= self.maxval):
                raise self._bad_sample(value, x, y)
        return pixel

    def _channels(self, function):
        self.buffer.rows = [[Pixel(function(r), function(g), function(b))
                             for r, g, b in row]
                            for row in self.buffer.rows]

    def to_grayscale(self):
        """
        Return a new Grayscale image using the mean of the three channels.
        """
        rows = [[(r + g + b) // 3 for r, g, b in row]
                for row in self.buffer.rows]
        return Grayscale(self.width, self.height, self.maxval, rows)

    def to_grayscale_luminosity(self):
        """
        Return a new Grayscale image weighting the channels by luminosity.

        Gray = 0.299*R + 0.587*G + 0.114*B
        """
        maxval = self.maxval
        rows = [[min(maxval, int(0.299 * r + 0.587 * g + 0.114 * b))
                 for r, g, b in row]
                for row in self.buffer.rows]
        return Grayscale(self.width, self.height, maxval, rows)

    def to_bitmap(self):
        """
        Return a new Bitmap with ink where the channel mean is below
        half maxval.
        """
        threshold = self.maxval // 2
        rows = [[(r + g + b) // 3 < threshold for r, g, b in row]
                for row in self.buffer.rows]
        return Bitmap(self.width, self.height, rows)


def read(infile):
    """
    Read a PNM image from a binary file object.

    Return a Bitmap, Grayscale or ColorMap instance, depending on the
    magic number. Malformed data raises a FormatError subclass and no
    image is returned.
    """
    fmt, width, height, maxval = read_header(infile)
    rows = read_rows(infile, fmt, width, height)
    log.debug('read %s image %dx%d maxval=%d', fmt.magic,
              width, height, maxval)
    if fmt.kind == BITMAP:
        return Bitmap(width, height, rows, fmt.magic)
    elif fmt.kind == GRAYSCALE:
        return Grayscale(width, height, maxval, rows, fmt.magic)
    return ColorMap(width, height, maxval, rows, fmt.magic)


def load(filename):
    with open(filename, 'rb') as infile:
        return read(infile)


def _main(argv=None):
    """
    Run the PNM converter with options from the command line.
    """
    # Parse command line arguments
    from optparse import OptionParser
    version = '%prog ' + __revision__.strip('$').replace('Rev: ', 'r')
    parser = OptionParser(version=version)
    parser.set_usage("%prog [options] [pnmfile]")
    parser.add_option("-o", "--output",
                      action="store", type="string", metavar="file",
                      help="write the result to file instead of stdout")
    parser.add_option("-a", "--ascii",
                      default=False, action="store_true",
                      help="write the ASCII encoding (P1, P2, P3)")
    parser.add_option("-b", "--binary",
                      default=False, action="store_true",
                      help="write the binary encoding (P4, P5, P6)")
    parser.add_option("-i", "--invert",
                      default=False, action="store_true",
                      help="invert all samples")
    parser.add_option("-f", "--flip",
                      default=False, action="store_true",
                      help="mirror the image horizontally")
    parser.add_option("-F", "--flop",
                      default=False, action="store_true",
                      help="mirror the image vertically")
    parser.add_option("-r", "--rotate",
                      action="store", type="int", default=0, metavar="turns",
                      help="rotate by turns * 90 degrees clockwise")
    parser.add_option("-m", "--maxval",
                      action="store", type="int", metavar="value",
                      help="rescale samples to a new max value")
    parser.add_option("-g", "--greyscale",
                      default=False, action="store_true",
                      help="convert a color image to greyscale")
    parser.add_option("-l", "--luminosity",
                      default=False, action="store_true",
                      help="convert to greyscale weighted by luminosity")
    parser.add_option("-p", "--bitmap",
                      default=False, action="store_true",
                      help="convert to a black and white bitmap")
    parser.add_option("-v", "--verbose",
                      default=False, action="store_true",
                      help="log debugging information to stderr")
    (options, args) = parser.parse_args(argv)

    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    if options.ascii and options.binary:
        parser.error("--ascii and --binary are mutually exclusive")

    # Read the input image
    if len(args) > 1:
        parser.error("more than one input file")
    try:
        if len(args) == 0:
            image = read(sys.stdin.buffer)
        else:
            image = load(args[0])
    except ValueError as error:
        parser.error(str(error))

    # Convert between image kinds
    if options.greyscale or options.luminosity:
        if not isinstance(image, ColorMap):
            parser.error("only color images can be converted to greyscale")
        if options.luminosity:
            image = image.to_grayscale_luminosity()
        else:
            image = image.to_grayscale()
    if options.bitmap and not isinstance(image, Bitmap):
        image = image.to_bitmap()
    if options.maxval is not None:
        if not isinstance(image, Anymap):
            parser.error("bitmaps have no max value")
        try:
            image.set_maxval(options.maxval)
        except InvalidMaxValue as error:
            parser.error(str(error))

    # Transform
    if options.invert:
        image.invert()
    if options.flip:
        image.flip()
    if options.flop:
        image.flop()
    for turn in range(options.rotate % 4):
        image.rotate90cw()
    if options.ascii or options.binary:
        image.set_magic(find_format(image.kind, options.binary).magic)

    if options.output:
        image.save(options.output)
    else:
        image.write(sys.stdout.buffer)
    return 0


if __name__ == '__main__':
    sys.exit(_main())
