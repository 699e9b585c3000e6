#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2022 Jan Sebastian Götte <gerbonara@jaseg.de>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

import copy
from dataclasses import dataclass, field, KW_ONLY

from .utils import LengthUnit


@dataclass(frozen=True, slots=True)
class ApertureTransform:
    """ Aperture transformation in effect when an object was created, as set by ``%LM``, ``%LR`` and ``%LS``. """
    #: ``'N'`` for no mirroring, ``'X'``, ``'Y'`` or ``'XY'``
    mirroring : str = 'N'
    #: Rotation in degrees counter-clockwise
    rotation : float = 0.0
    #: Scale factor
    scaling : float = 1.0

    @property
    def is_identity(self):
        return self.mirroring == 'N' and self.rotation == 0 and self.scaling == 1

    def __str__(self):
        return f'<transform mirror={self.mirroring} rotation={self.rotation:g} scale={self.scaling:g}>'

IDENTITY = ApertureTransform()


@dataclass
class GraphicObject:
    """ Base class for the graphic objects that make up a :py:class:`.GerberLayer`. """
    _ : KW_ONLY
    #: bool representing the *color* of this feature: whether this is a *dark* or *clear* feature. Clear and dark are
    #: meant in the sense that they are used in the Gerber spec and refer to whether the transparency film that this
    #: file describes ends up black or clear at this spot. Clear features erase dark features, they are not transparent
    #: in the colloquial meaning.
    polarity_dark : bool = True

    #: :py:class:`.LengthUnit` used for all coordinate fields of this object (such as ``x`` or ``y``).
    unit : LengthUnit = None

    #: `dict` containing the object attributes that were in effect when this object was created. Note that this does
    #: not include file attributes, which are stored in the :py:class:`.GerberLayer` object instead.
    attrs : dict = field(default_factory=dict)

    #: :py:class:`.ApertureTransform` in effect when this object was created.
    transform : ApertureTransform = IDENTITY

    def translated(self, dx, dy):
        """ Return a copy of this object moved by ``(dx, dy)`` in this object's unit, leaving this object alone. The
        copy gets its own :py:attr:`attrs` dict. """
        obj = copy.copy(self)
        obj.attrs = dict(self.attrs)
        obj._offset(dx, dy)
        return obj


@dataclass
class Flash(GraphicObject):
    """ A flash is what happens when you "stamp" a Gerber aperture at some location. The :py:attr:`polarity_dark`
    attribute that Flash inherits from :py:class:`.GraphicObject` is ``True`` for normal flashes. If you set a Flash's
    ``polarity_dark`` to ``False``, you invert the polarity of all of its features.
    """

    #: float with X coordinate of the center of this flash.
    x : float

    #: float with Y coordinate of the center of this flash.
    y : float

    #: Flashed Aperture. must be a subclass of :py:class:`.Aperture`.
    aperture : object

    #: For flashes of macro apertures, the evaluated macro primitives as a tuple of :py:class:`.ShapeInstance`. Empty
    #: for standard apertures.
    shapes : tuple = ()

    def _offset(self, dx, dy):
        self.x += dx
        self.y += dy

    def __str__(self):
        return f'<Flash {self.aperture} at ({self.x:g}, {self.y:g})>'


@dataclass
class Line(GraphicObject):
    """ A straight line drawn from ``(x1, y1)`` to ``(x2, y2)`` with the current aperture. """
    #: X coordinate of start point
    x1 : float
    #: Y coordinate of start point
    y1 : float
    #: X coordinate of end point
    x2 : float
    #: Y coordinate of end point
    y2 : float
    #: Aperture for this line. Should be a subclass of :py:class:`.CircleAperture`, whose diameter determines the line
    #: width.
    aperture : object

    @property
    def p1(self):
        """ Convenience alias for ``(self.x1, self.y1)`` returning start point of the line. """
        return self.x1, self.y1

    @property
    def p2(self):
        """ Convenience alias for ``(self.x2, self.y2)`` returning end point of the line. """
        return self.x2, self.y2

    def _offset(self, dx, dy):
        self.x1 += dx
        self.y1 += dy
        self.x2 += dx
        self.y2 += dy

    def __str__(self):
        return f'<Line {self.aperture} from ({self.x1:g}, {self.y1:g}) to ({self.x2:g}, {self.y2:g})>'


@dataclass
class Arc(GraphicObject):
    """ Like :py:class:`~.graphic_objects.Line`, but a circular arc. Has start ``(x1, y1)`` and end ``(x2, y2)``
    attributes like a :py:class:`~.graphic_objects.Line`, but additionally has a center ``(cx, cy)`` specified relative
    to the start point ``(x1, y1)``, as well as a ``clockwise`` attribute indicating the arc's direction.
    """
    #: X coordinate of start point
    x1 : float
    #: Y coordinate of start point
    y1 : float
    #: X coordinate of end point
    x2 : float
    #: Y coordinate of end point
    y2 : float
    #: X coordinate of arc center relative to ``x1``
    cx : float
    #: Y coordinate of arc center relative to ``y1``
    cy : float
    #: Direction of arc. ``True`` means clockwise.
    clockwise : bool
    #: Aperture for this arc.
    aperture : object

    @property
    def p1(self):
        return self.x1, self.y1

    @property
    def p2(self):
        return self.x2, self.y2

    @property
    def center(self):
        """ Absolute coordinates of the arc's center """
        return self.x1 + self.cx, self.y1 + self.cy

    def _offset(self, dx, dy):
        self.x1 += dx
        self.y1 += dy
        self.x2 += dx
        self.y2 += dy

    def __str__(self):
        direction = 'cw' if self.clockwise else 'ccw'
        return (f'<Arc {direction} {self.aperture} from ({self.x1:g}, {self.y1:g}) to ({self.x2:g}, {self.y2:g}) '
                f'around ({self.center[0]:g}, {self.center[1]:g})>')


@dataclass
class Contour:
    """ One closed boundary of a :py:class:`.Region`.

    ``outline`` lists the contour's points. ``arc_centers`` has one entry per outline segment, i.e. one less than there
    are points, with a ``None`` entry designating a straight line segment. An arc is defined by a
    ``(clockwise, (cx, cy))`` tuple, where ``clockwise`` can be ``True`` for a clockwise arc, or ``False`` for a
    counter-clockwise arc. ``cx`` and ``cy`` are the absolute coordinates of the arc's center.
    """
    outline : list = field(default_factory=list)
    arc_centers : list = field(default_factory=list)

    def __len__(self):
        return len(self.arc_centers)

    def append_line(self, x, y):
        self.outline.append((x, y))
        self.arc_centers.append(None)

    def append_arc(self, x, y, cx, cy, clockwise):
        self.outline.append((x, y))
        self.arc_centers.append((clockwise, (cx, cy)))

    @property
    def is_closed(self):
        return len(self.outline) > 1 and self.outline[-1] == self.outline[0]

    def close(self):
        """ Join the last point to the first with a straight segment, unless the contour already ends where it
        started. """
        if self.arc_centers and not self.is_closed:
            self.append_line(*self.outline[0])

    def _offset(self, dx, dy):
        return Contour(
                [ (x+dx, y+dy) for x, y in self.outline ],
                [ (arc[0], (arc[1][0]+dx, arc[1][1]+dy)) if arc else None for arc in self.arc_centers ])


@dataclass
class Region(GraphicObject):
    """ Gerber "region", roughly equivalent to what in computer graphics you would call a polygon. A region's polarity
    is its "fill". A region does not have a "stroke", and thus does not have an `aperture` field.

    A region consists of one or more :py:class:`.Contour` s. Each ``D02`` move inside a ``G36``/``G37`` region
    statement starts a new contour. All contours are closed, i.e. their last point equals their first.
    """
    contours : list = field(default_factory=list)

    def __len__(self):
        return len(self.contours)

    def __bool__(self):
        return bool(self.contours)

    def __str__(self):
        num_points = sum(len(contour.outline) for contour in self.contours)
        return f'<Region with {len(self.contours)} contours and {num_points} points>'

    def _offset(self, dx, dy):
        self.contours = [ contour._offset(dx, dy) for contour in self.contours ]


@dataclass
class BlockInstance(GraphicObject):
    """ A flash of an aperture block (``%AB``). The block's objects are positioned relative to ``(x, y)``. """
    #: float with X coordinate of the block's origin
    x : float
    #: float with Y coordinate of the block's origin
    y : float
    #: The flashed :py:class:`.BlockAperture`
    aperture : object

    @property
    def objects(self):
        return self.aperture.objects

    def _offset(self, dx, dy):
        self.x += dx
        self.y += dy

    def __str__(self):
        return f'<BlockInstance {self.aperture.number} with {len(self.objects)} objects at ({self.x:g}, {self.y:g})>'

