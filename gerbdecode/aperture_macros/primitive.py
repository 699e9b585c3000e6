#!/usr/bin/env python
# -*- coding: utf-8 -*-

# Copyright 2019 Hiroshi Murayama <opiopan@gmail.com>
# Copyright 2022 Jan Sebastian Götte <gerbonara@jaseg.de>

from dataclasses import dataclass, fields, MISSING

from .expression import Expression, expr
from ..utils import LexicalError, EvaluationError


@dataclass(frozen=True, slots=True)
class ShapeInstance:
    """ One primitive of an aperture macro after evaluation. :py:attr:`values` holds the evaluated numeric fields in the
    order they appear in the file, with omitted optional fields filled in with their defaults. """
    code: int
    values: tuple

    @property
    def primitive(self):
        return PRIMITIVE_CLASSES[self.code]

    @property
    def fields(self):
        """ ``{field name: value}`` dict, in file order. """
        return dict(zip(self.primitive.field_names(len(self.values)), self.values))

    def __str__(self):
        attrs = ', '.join(f'{name}={value:g}' for name, value in self.fields.items())
        return f'<{self.primitive.__name__} {attrs}>'


@dataclass(frozen=True, slots=True)
class Primitive:

    def __post_init__(self):
        for field in fields(self):
            if field.type == Expression:
                object.__setattr__(self, field.name, expr(getattr(self, field.name)))

    def to_gerber(self):
        return f'{self.code},' + ','.join(getattr(self, field.name).to_gerber() for field in fields(self))

    def __str__(self):
        attrs = ','.join(getattr(self, field.name).to_gerber() for field in fields(self))
        return f'<{type(self).__name__} {attrs}>'

    def __repr__(self):
        return str(self)

    @classmethod
    def from_arglist(kls, arglist):
        num_required = sum(1 for field in fields(kls) if field.default is MISSING)
        num_total = len(fields(kls))
        if not num_required <= len(arglist) <= num_total:
            expected = num_required if num_required == num_total else f'{num_required} to {num_total}'
            raise LexicalError(f'{kls.__name__} primitive (code {kls.code}) takes {expected} arguments, '
                               f'but {len(arglist)} were given')
        return kls(*arglist)

    @classmethod
    def field_names(kls, count=None):
        return [field.name for field in fields(kls)]

    def parameters(self):
        for field in fields(self):
            yield from getattr(self, field.name).parameters()

    def evaluate(self, variables):
        """ Calculate all fields given a ``{number: value}`` mapping of macro variables. """
        return ShapeInstance(self.code, tuple(getattr(self, field.name).calculate(variables) for field in fields(self)))


@dataclass(frozen=True, slots=True)
class Circle(Primitive):
    code = 1
    exposure : Expression
    diameter : Expression
    # center x/y
    x : Expression
    y : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class VectorLine(Primitive):
    code = 20
    exposure : Expression
    width : Expression
    start_x : Expression
    start_y : Expression
    end_x : Expression
    end_y : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class LegacyVectorLine(VectorLine):
    """ Deprecated code 2 spelling of :py:class:`VectorLine` """
    code = 2


@dataclass(frozen=True, slots=True)
class CenterLine(Primitive):
    code = 21
    exposure : Expression
    width : Expression
    height : Expression
    # center x/y
    x : Expression
    y : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class LowerLeftLine(Primitive):
    """ Deprecated rectangle primitive positioned by its lower left corner """
    code = 22
    exposure : Expression
    width : Expression
    height : Expression
    # lower left corner x/y
    x : Expression
    y : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class Polygon(Primitive):
    code = 5
    exposure : Expression
    n_vertices : Expression
    # center x/y
    x : Expression
    y : Expression
    diameter : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class Moire(Primitive):
    code = 6
    # center x/y
    x : Expression
    y : Expression
    outer_diameter : Expression
    ring_thickness : Expression
    ring_gap : Expression
    max_rings : Expression
    crosshair_thickness : Expression
    crosshair_length : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class Thermal(Primitive):
    code = 7
    # center x/y
    x : Expression
    y : Expression
    outer_diameter : Expression
    inner_diameter : Expression
    gap_width : Expression
    rotation : Expression = 0


@dataclass(frozen=True, slots=True)
class Outline(Primitive):
    code = 4
    exposure : Expression
    n_vertices : Expression
    coords : tuple
    rotation : Expression = 0

    def __post_init__(self):
        object.__setattr__(self, 'exposure', expr(self.exposure))
        object.__setattr__(self, 'n_vertices', expr(self.n_vertices))
        object.__setattr__(self, 'rotation', expr(self.rotation))
        object.__setattr__(self, 'coords', tuple(expr(coord) for coord in self.coords))

    @property
    def points(self):
        for x, y in zip(self.coords[0::2], self.coords[1::2]):
            yield x, y

    @classmethod
    def from_arglist(kls, arglist):
        if len(arglist) < 2:
            raise LexicalError(f'Outline primitive needs at least an exposure and a vertex count, got {len(arglist)} '
                               'arguments')

        exposure, n_vertices, *rest = arglist
        # The rotation comes last and is optional, which we can tell since coordinates come in pairs.
        if len(rest) % 2 == 0:
            coords, rotation = rest, 0
        else:
            *coords, rotation = rest

        if len(coords) < 4:
            raise LexicalError(f'Outline primitive needs at least two points, got {len(coords)//2}')

        n_vertices = expr(n_vertices).optimized()
        if n_vertices.is_constant and float(n_vertices) != len(coords)//2 - 1:
            raise LexicalError(f'Outline primitive declares {float(n_vertices):g} vertices, but lists '
                               f'{len(coords)//2} points. There must be exactly one more point than vertices.')

        return kls(exposure, n_vertices, tuple(coords), rotation)

    @classmethod
    def field_names(kls, count=None):
        num_points = (count - 3) // 2 if count is not None else 0
        return ['exposure', 'n_vertices',
                *(f'{axis}{i}' for i in range(num_points) for axis in 'xy'),
                'rotation']

    def to_gerber(self):
        coords = ','.join(coord.to_gerber() for coord in self.coords)
        return f'{self.code},{self.exposure.to_gerber()},{self.n_vertices.to_gerber()},{coords},{self.rotation.to_gerber()}'

    def __str__(self):
        return f'<Outline {len(self.coords)//2} points>'

    def parameters(self):
        yield from self.exposure.parameters()
        yield from self.n_vertices.parameters()
        for coord in self.coords:
            yield from coord.parameters()
        yield from self.rotation.parameters()

    def evaluate(self, variables):
        n_vertices = self.n_vertices.calculate(variables)
        if n_vertices != len(self.coords)//2 - 1:
            raise EvaluationError(f'Outline primitive declares {n_vertices:g} vertices, but lists {len(self.coords)//2} '
                                  'points. There must be exactly one more point than vertices.')

        return ShapeInstance(self.code, (
            self.exposure.calculate(variables),
            n_vertices,
            *(coord.calculate(variables) for coord in self.coords),
            self.rotation.calculate(variables)))


PRIMITIVE_CLASSES = {
    **{cls.code: cls for cls in [
        Circle,
        VectorLine,
        CenterLine,
        LowerLeftLine,
        Outline,
        Polygon,
        Moire,
        Thermal,
    ]},
    # alias
    2: LegacyVectorLine,
}

