#!/usr/bin/env python
# pnmdraw.py - raster drawing on Netpbm images
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
Raster drawing primitives for Netpbm images

Every function takes the image as its first argument and draws through
its paint(x, y, color) method, so points outside the image are clipped
silently. Any object with such a method can be drawn on, including the
Bitmap, Grayscale and ColorMap classes of the pnm module, which check
the color like set() does: a boolean for bitmaps, an integer up to the
max value for grayscale and an (r, g, b) triple for color images.

Points are (x, y) pairs of integers.

>>> import pnm, pnmdraw
>>> image = pnm.Grayscale(16, 16)
>>> pnmdraw.draw_circle(image, (8, 8), 5, 255)
"""


__revision__ = '$Rev$'


import math
from collections import namedtuple


Point = namedtuple('Point', 'x y')


def _span(image, x1, x2, y, color):
    """
    Paint the horizontal run between x1 and x2 inclusive.
    """
    if x1 > x2:
        x1, x2 = x2, x1
    for x in range(x1, x2 + 1):
        image.paint(x, y, color)


def draw_line(image, p1, p2, color):
    """
    Draw a line from p1 to p2 with Bresenham's algorithm.

    Both end points are painted.
    """
    x1, y1 = p1
    x2, y2 = p2
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    if x1 < x2:
        sx = 1
    else:
        sx = -1
    if y1 < y2:
        sy = 1
    else:
        sy = -1
    err = dx - dy
    while True:
        image.paint(x1, y1, color)
        if x1 == x2 and y1 == y2:
            break
        e2 = 2 * err
        # Both steps may happen in one iteration (diagonal move)
        if e2 > -dy:
            err -= dy
            x1 += sx
        if e2 < dx:
            err += dx
            y1 += sy


def draw_rectangle(image, corner, width, height, color):
    """
    Draw the outline of a rectangle.

    The corners are (x, y), (x+width, y), (x+width, y+height) and
    (x, y+height), so the outline covers width+1 columns.
    """
    x, y = corner
    p1 = (x, y)
    p2 = (x + width, y)
    p3 = (x + width, y + height)
    p4 = (x, y + height)
    draw_line(image, p1, p2, color)
    draw_line(image, p2, p3, color)
    draw_line(image, p3, p4, color)
    draw_line(image, p4, p1, color)


def draw_filled_rectangle(image, corner, width, height, color):
    """
    Fill the width x height cells starting at corner.
    """
    if width <= 0 or height <= 0:
        return
    x, y = corner
    for row in range(y, y + height):
        _span(image, x, x + width - 1, row, color)


def _circle_points(center, radius):
    """
    Generate points on a circle by sampling the angle.

    The angle runs from -0.01 to 1.99 pi in steps of 1/radius radians,
    which leaves gaps and duplicates for small radii.
    """
    cx, cy = center
    if radius == 0:
        yield cx, cy
        return
    step = 1.0 / radius
    limit = 1.99 * math.pi
    theta = -0.01
    while theta <= limit:
        yield (cx + round(radius * math.cos(theta)),
               cy + round(radius * math.sin(theta)))
        theta += step


def draw_circle(image, center, radius, color):
    if radius < 0:
        return
    for x, y in _circle_points(center, radius):
        image.paint(x, y, color)


def draw_filled_circle(image, center, radius, color):
    """
    Fill a circle approximately.

    For each sampled edge point, the horizontal and vertical runs toward
    the center are painted together with their mirror images.
    """
    if radius < 0:
        return
    cx, cy = center
    image.paint(cx, cy, color)
    for x, y in _circle_points(center, radius):
        for xi in range(x, cx):
            image.paint(xi, y, color)
            image.paint(2 * cx - xi, y, color)
        for yi in range(y, cy):
            image.paint(x, yi, color)
            image.paint(x, 2 * cy - yi, color)


def draw_triangle(image, p1, p2, p3, color):
    draw_line(image, p1, p2, color)
    draw_line(image, p2, p3, color)
    draw_line(image, p3, p1, color)


def draw_filled_triangle(image, p1, p2, p3, color):
    """
    Fill a triangle one scanline at a time.

    The vertices are sorted top to bottom. One x position walks the long
    edge from the top to the bottom vertex; the other walks the edge from
    the top to the middle vertex, then restarts at the middle vertex and
    walks to the bottom one. X positions are rounded by adding 0.5 and
    truncating.
    """
    (x0, y0), (x1, y1), (x2, y2) = sorted([p1, p2, p3], key=lambda p: p[1])
    if y0 == y2:
        _span(image, min(x0, x1, x2), max(x0, x1, x2), y0, color)
        return
    long_slope = (x2 - x0) / (y2 - y0)
    xa = float(x0)
    if y1 > y0:
        slope = (x1 - x0) / (y1 - y0)
        xb = float(x0)
        for y in range(y0, y1 + 1):
            _span(image, int(xa + 0.5), int(xb + 0.5), y, color)
            xa += long_slope
            xb += slope
    else:
        # flat top
        _span(image, x0, x1, y0, color)
        xa += long_slope
    if y2 > y1:
        slope = (x2 - x1) / (y2 - y1)
        xb = float(x1)
        for y in range(y1 + 1, y2 + 1):
            _span(image, int(xa + 0.5), int(xb + 0.5), y, color)
            xa += long_slope
            xb += slope


def draw_polygon(image, points, color):
    """
    Draw lines through points, closing the shape from the last point
    back to the first.
    """
    if not points:
        return
    for i in range(len(points) - 1):
        draw_line(image, points[i], points[i + 1], color)
    draw_line(image, points[-1], points[0], color)


def draw_filled_polygon(image, points, color, strict=False):
    """
    Fill a polygon with an edge table and even-odd span pairing.

    Every edge is walked from its upper to its lower end point (both
    included), appending the rounded x intersection to the list of each
    scanline it crosses. Horizontal edges add their start point once.
    Consecutive pairs of intersections on a scanline are then joined.

    Intersections are kept in the order the edges produce them, not
    sorted by x, and a vertex shared by two edges is counted twice. For
    concave or self-intersecting polygons this can pair the wrong
    intersections and leave parts of a scanline unfilled.

    With strict=True the fill follows the even-odd rule: edges are
    half-open (the lower end point is left out), horizontal edges are
    skipped, each scanline is sorted by x before pairing, and the
    outline is drawn on top so the boundary is complete.
    """
    if not points:
        return
    min_y = min(y for x, y in points)
    max_y = max(y for x, y in points)
    table = [[] for y in range(min_y, max_y + 1)]
    count = len(points)
    for i in range(count):
        (x1, y1), (x2, y2) = points[i], points[(i + 1) % count]
        if y1 > y2:
            x1, y1, x2, y2 = x2, y2, x1, y1
        if y2 == y1:
            if strict:
                continue
            slope = 0.0
        else:
            slope = (x2 - x1) / (y2 - y1)
        if strict:
            stop = y2
        else:
            stop = y2 + 1
        x = float(x1)
        for y in range(y1, stop):
            table[y - min_y].append(int(x + 0.5))
            x += slope
    for offset, xs in enumerate(table):
        if strict:
            xs.sort()
        for j in range(0, len(xs) - 1, 2):
            _span(image, xs[j], xs[j + 1], min_y + offset, color)
    if strict:
        draw_polygon(image, points, color)
