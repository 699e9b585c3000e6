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

from dataclasses import dataclass, field, fields, KW_ONLY

from .utils import LengthUnit


def _strip_right(*args):
    args = list(args)
    while args and args[-1] is None:
        args.pop()
    return tuple(args)


@dataclass(frozen=True, slots=True)
class Aperture:
    """ Base class for all apertures. """
    _ : KW_ONLY
    #: Unit of all lengths of this aperture, i.e. the file unit at the time it was defined.
    unit: LengthUnit = None
    #: Aperture attributes in effect when this aperture was defined, as a tuple of ``(name, values)`` pairs.
    attrs: tuple = ()
    #: The ``Dnn`` number this aperture was defined under.
    number: int = field(default=None, hash=False, compare=False)

    @property
    def attributes(self):
        return dict(self.attrs)

    def _params(self):
        return _strip_right(*(getattr(self, f.name) for f in fields(self) if not f.kw_only))

    def to_gerber(self):
        """ Return the Gerber aperture template and parameters of this aperture as found after the aperture number in
        an ``%AD`` statement, e.g. ``C,0.5``.

        :rtype: str
        """
        params = 'X'.join(f'{float(par):g}' for par in self._params())
        if params:
            return f'{self._gerber_shape_code},{params}'
        else:
            return self._gerber_shape_code

    def __str__(self):
        return f'<{self._human_readable_shape} aperture {self.to_gerber()} [{self.unit}]>'


@dataclass(frozen=True, slots=True)
class CircleAperture(Aperture):
    """ Besides flashing circles or rings, CircleApertures are used to set the width of a
    :py:class:`~.graphic_objects.Line` or :py:class:`~.graphic_objects.Arc`.
    """
    _gerber_shape_code = 'C'
    _human_readable_shape = 'circle'
    #: float with diameter of the circle in :py:attr:`unit` units.
    diameter : float
    #: float with the hole diameter of this aperture in :py:attr:`unit` units. ``None`` for no hole.
    hole_dia : float = None


@dataclass(frozen=True, slots=True)
class RectangleAperture(Aperture):
    """ Gerber rectangle aperture. Can only be used for flashes, since the line width of an interpolation of a rectangle
    aperture is not well-defined and there is no tool that implements it in a geometrically correct way. """
    _gerber_shape_code = 'R'
    _human_readable_shape = 'rect'
    #: float with the width of the rectangle in :py:attr:`unit` units.
    w : float
    #: float with the height of the rectangle in :py:attr:`unit` units.
    h : float
    #: float with the hole diameter of this aperture in :py:attr:`unit` units. ``None`` for no hole.
    hole_dia : float = None


@dataclass(frozen=True, slots=True)
class ObroundAperture(Aperture):
    """ Aperture whose shape is the convex hull of two circles of equal radii.

    More precisely, this is a rectangle whose shorter sides have been replaced with semicircles.
    """
    _gerber_shape_code = 'O'
    _human_readable_shape = 'obround'
    #: float with the width of the bounding box of this obround in :py:attr:`unit` units.
    w : float
    #: float with the height of the bounding box of this obround in :py:attr:`unit` units.
    h : float
    #: float with the hole diameter of this aperture in :py:attr:`unit` units. ``None`` for no hole.
    hole_dia : float = None


@dataclass(frozen=True, slots=True)
class PolygonAperture(Aperture):
    """ Aperture whose shape is a regular n-sided polygon (e.g. pentagon, hexagon etc.). Note that this only supports
    round holes.
    """
    _gerber_shape_code = 'P'
    _human_readable_shape = 'polygon'
    #: Diameter of circumscribing circle, i.e. the circle that all the polygon's corners lie on. In
    #: :py:attr:`unit` units.
    diameter : float
    #: Number of corners of this polygon. Three for a triangle, four for a square, five for a pentagon etc.
    n_vertices : int
    #: Rotation in degrees counter-clockwise, as given in the file.
    rotation : float = None
    #: float with the hole diameter of this aperture in :py:attr:`unit` units. ``None`` for no hole.
    hole_dia : float = None

    def __post_init__(self):
        object.__setattr__(self, 'n_vertices', int(self.n_vertices))


@dataclass(frozen=True, slots=True)
class ApertureMacroInstance(Aperture):
    """ One instance of an aperture macro. An aperture macro defined with an ``AM`` statement can be instantiated by
    multiple ``AD`` aperture definition statements using different parameters. An :py:class:`.ApertureMacroInstance` is
    one such binding of a macro to a particular set of parameters.
    """
    _human_readable_shape = 'macro'
    #: The :py:class:`.ApertureMacro` bound in this instance
    macro : object
    #: The parameters to the :py:class:`.ApertureMacro`. The first item in the tuple is parameter ``$1``, the second
    #: is ``$2`` etc.
    parameters : tuple = ()
    #: Evaluated shapes, filled in by the first call to :py:meth:`shapes`.
    _shapes : tuple = field(default=None, init=False, repr=False, hash=False, compare=False)

    @property
    def _gerber_shape_code(self):
        return self.macro.name

    def _params(self):
        return tuple(self.parameters)

    def shapes(self):
        """ Evaluate the macro with this instance's parameters. The result is computed on first use and then cached on
        this instance.

        :rtype: tuple of :py:class:`.ShapeInstance`
        """
        if self._shapes is None:
            object.__setattr__(self, '_shapes', tuple(self.macro.evaluate(self.parameters)))
        return self._shapes


@dataclass(frozen=True, slots=True)
class BlockAperture(Aperture):
    """ Aperture defined by an ``%AB`` aperture block. Flashing it stamps all of its :py:attr:`objects`. """
    _human_readable_shape = 'block'
    #: Graphic objects inside this block, with coordinates relative to the flash position.
    objects : tuple = field(default=(), hash=False)

    def _params(self):
        return ()

    def to_gerber(self):
        return f'AB{self.number}' if self.number is not None else 'AB'

    def __str__(self):
        return f'<block aperture {self.number} with {len(self.objects)} objects [{self.unit}]>'

