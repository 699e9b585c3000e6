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

import warnings

import pytest

from ..rs274x import GerberLayer, GerberInterpreter, GraphicsState
from ..decoder import decode
from .. import commands as cmd
from .. import graphic_objects as go
from .. import apertures
from ..graphic_objects import ApertureTransform
from ..grammar import EscapedString
from ..utils import MM, Inch, UnknownAttributeWarning
from ..utils import LexicalError, StructuralError, UndefinedReferenceError, RedefinitionError, EvaluationError

from .utils import *

HEADER = '%MOMM*%\n%FSLAX26Y26*%\n'

def layer(body, header=HEADER, **options):
    return GerberLayer.from_string(header + body + '\nM02*', **options)

def strict_layer(body, **options):
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        return layer(body, **options)

def count_types(objects):
    counts = {}
    for obj in objects:
        counts[type(obj).__name__] = counts.get(type(obj).__name__, 0) + 1
    return counts


def test_every_command_has_a_handler():
    for kls in cmd.COMMANDS:
        assert callable(getattr(GerberInterpreter, f'_execute_{kls.kind}', None)), kls


def test_minimal_file():
    l = strict_layer('')
    assert l.objects == []
    assert l.unit == MM
    assert l.import_settings.x_format == (2, 6)
    assert l.import_settings.y_format == (2, 6)
    assert [type(c) for c in l.commands] == [cmd.Mode, cmd.FormatSpecification, cmd.EndOfFile]


@pytest.mark.parametrize('reference', ['example_two_square_boxes.gbr'], indirect=True)
def test_two_square_boxes(reference):
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        l = GerberLayer.open(reference)

    assert l.original_path == reference
    assert len(l) == 8
    assert all(isinstance(obj, go.Line) for obj in l.objects)
    assert l.objects[0].p1 == (0, 0)
    assert l.objects[0].p2 == (5, 0)
    assert l.objects[3].p2 == (0, 0)
    assert l.objects[4].p1 == (6, 0)
    assert l.objects[4].p2 == (11, 0)
    assert all(obj.unit == MM and obj.polarity_dark for obj in l.objects)
    assert all(obj.aperture is l.apertures[10] for obj in l.objects)

    assert l.apertures == {10: apertures.CircleAperture(0.01, unit=MM)}
    assert l.file_attrs == {'.Part': (EscapedString('Other'), EscapedString('example'))}
    assert l.comments == [EscapedString(' Ucamco ex. 1: Two square boxes')]
    assert str(l) == '<GerberLayer example_two_square_boxes.gbr with 1 apertures, 8 objects>'


@pytest.mark.parametrize('reference', ['example_polarities_and_apertures.gbr'], indirect=True)
def test_polarities_and_apertures(reference):
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        l = GerberLayer.open(reference)

    assert count_types(l.objects) == {'Line': 6, 'Flash': 14, 'Arc': 1, 'Region': 2}
    assert sorted(l.apertures) == [10, 11, 12, 13, 14, 15, 16, 19]
    assert l.apertures[13] == apertures.RectangleAperture(0.4, 1.0, unit=MM)
    assert l.apertures[15] == apertures.ObroundAperture(0.4, 1.0, unit=MM)
    assert l.apertures[16].n_vertices == 3
    assert list(l.macros) == ['THERMAL80']

    arc, = [obj for obj in l.objects if isinstance(obj, go.Arc)]
    assert arc.p1 == arc.p2 == (37.5, 10)
    assert arc.center == (40, 10)
    assert not arc.clockwise

    dark, clear = [obj for obj in l.objects if isinstance(obj, go.Region)]
    assert dark.polarity_dark
    assert not clear.polarity_dark
    assert len(dark.contours) == 1
    assert dark.contours[0].outline == [(5, 20), (5, 37.5), (37.5, 37.5), (37.5, 20), (5, 20)]

    contour, = clear.contours
    assert contour.outline[0] == contour.outline[-1] == (10, 25)
    assert contour.arc_centers == [None, (True, (12.5, 30)), None, (True, (30, 28.75)), None]

    thermal = l.objects[-1]
    assert isinstance(thermal, go.Flash)
    assert isinstance(thermal.aperture, apertures.ApertureMacroInstance)
    assert (thermal.x, thermal.y) == (28.75, 28.75)
    shape, = thermal.shapes
    assert shape.code == 7
    assert shape.fields['outer_diameter'] == 0.8
    assert shape.fields['rotation'] == 45


@pytest.mark.parametrize('reference', ['example_nested_blocks.gbr'], indirect=True)
def test_nested_blocks(reference):
    l = GerberLayer.open(reference)

    outer_a, outer_b = l.objects
    assert isinstance(outer_a, go.BlockInstance)
    assert (outer_a.x, outer_a.y) == (5, 5)
    assert outer_a.aperture is l.apertures[12]
    assert (outer_b.x, outer_b.y) == (10, 0)
    assert outer_b.aperture is l.apertures[13]

    block12 = l.apertures[12]
    assert isinstance(block12, apertures.BlockAperture)
    assert len(block12.objects) == 3
    assert [obj.polarity_dark for obj in block12.objects] == [True, False, True]
    assert block12.attributes == {'.AperFunction': (EscapedString('ComponentPad'),)}
    assert l.apertures[11].attributes == {'.AperFunction': (EscapedString('ComponentPad'),)}

    block13 = l.apertures[13]
    assert block13.attributes == {}
    assert [type(obj) for obj in block13.objects] == [go.BlockInstance, go.BlockInstance]
    assert all(obj.aperture is l.apertures[14] for obj in block13.objects)
    inner, = l.apertures[14].objects
    assert (inner.x, inner.y) == (0, 1)

    assert sorted(l.apertures) == [10, 11, 12, 13, 14]
    assert l.file_attrs['.GenerationSoftware'] == (
            EscapedString('gerbdecode'), EscapedString('tests'), EscapedString('0.9'))


@pytest.mark.parametrize('reference', ['example_block_with_different_orientations.gbr'], indirect=True)
def test_block_with_different_orientations(reference):
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        l = GerberLayer.open(reference)

    block = l.apertures[12]
    assert isinstance(block, apertures.BlockAperture)
    assert [type(obj) for obj in block.objects] == [go.Line, go.Line, go.Flash]
    assert block.objects[1].p1 == (5, 0)
    assert block.objects[1].p2 == (5, 3)
    assert all(obj.transform.is_identity for obj in block.objects)

    assert len(l) == 5
    assert all(isinstance(obj, go.BlockInstance) and obj.aperture is block for obj in l.objects)
    assert [(obj.x, obj.y) for obj in l.objects] == [(0, 0), (20, 0), (0, 20), (20, 20), (40, 0)]
    assert [obj.transform for obj in l.objects] == [
            ApertureTransform(),
            ApertureTransform(mirroring='X'),
            ApertureTransform(rotation=90),
            ApertureTransform(scaling=0.5),
            ApertureTransform('XY', 30, 2),
            ]
    assert len(l.objects[4].objects) == 3
    assert len(l.comments) == 3


@pytest.mark.parametrize('reference', ['example_drill_file.gbr'], indirect=True)
def test_drill_file(reference):
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        l = GerberLayer.open(reference)

    assert l.file_attrs['.FileFunction'] == (
            EscapedString('Plated'), EscapedString('1'), EscapedString('4'), EscapedString('PTH'))
    assert l.file_attrs['.FilePolarity'] == (EscapedString('Positive'),)

    assert l.apertures[10].attributes == {'.AperFunction': (EscapedString('ViaDrill'),)}
    tolerance = (EscapedString('0.05'), EscapedString('0.05'))
    assert l.apertures[11].attributes == {
            '.AperFunction': (EscapedString('ComponentDrill'),),
            '.DrillTolerance': tolerance}
    assert l.apertures[12].attributes == {
            '.AperFunction': (EscapedString('ComponentDrill'), EscapedString('PressFit')),
            '.DrillTolerance': tolerance}

    assert count_types(l.objects) == {'Flash': 5, 'Line': 1}
    holes, slot = l.objects[:5], l.objects[5]
    assert [hole.aperture.number for hole in holes] == [10, 10, 10, 11, 11]
    assert [hole.attrs for hole in holes] == [
            {'.N': (EscapedString('GND'),)},
            {'.N': (EscapedString('GND'),)},
            {'.N': (EscapedString('VCC'),)},
            {'.C': (EscapedString('J1'),)},
            {'.C': (EscapedString('J1'),)},
            ]
    assert holes[3].x == pytest.approx(2.54)
    assert holes[4].x == pytest.approx(5.08)

    assert slot.aperture is l.apertures[12]
    assert slot.p1 == (15, 10)
    assert slot.p2 == (18, 10)
    assert slot.attrs == {'.C': (EscapedString('J2'),)}


@pytest.mark.parametrize('reference', ['example_aperture_macro.gbr'], indirect=True)
def test_aperture_macro(reference):
    l = GerberLayer.open(reference)
    assert l.unit == Inch

    donut, triangle = l.objects
    assert (donut.x, donut.y) == (1, 1)
    assert donut.unit == Inch
    outer, inner = donut.shapes
    assert outer.fields['exposure'] == 1
    assert outer.fields['diameter'] == pytest.approx(0.1)
    assert inner.fields['exposure'] == 0
    assert inner.fields['diameter'] == pytest.approx(0.075)

    shape, = triangle.shapes
    assert shape.code == 4
    assert shape.fields['rotation'] == 30
    assert shape.fields['n_vertices'] == 3

    assert sorted(l.macros) == ['DONUTVAR', 'TRIANGLE_30']
    assert l.apertures[11].macro is l.macros['DONUTVAR']
    assert l.apertures[11].parameters == (0.1, 0, 0)


def test_macro_shapes_cached_per_aperture():
    l = layer('%AMBOX*21,1,$1,$1,0,0,0*%\n%ADD10BOX,1*%\nD10*\nX0Y0D03*\nX1000000Y0D03*')
    a, b = l.objects
    assert a.shapes is b.shapes
    assert a.shapes[0].fields['width'] == 1

    # independent decodes of the same data do not share evaluated shapes
    other = layer('%AMBOX*21,1,$1,$1,0,0,0*%\n%ADD10BOX,1*%\nD10*\nX0Y0D03*')
    assert other.apertures[10] == l.apertures[10]
    assert other.objects[0].shapes == a.shapes
    assert other.objects[0].shapes is not a.shapes


@pytest.mark.parametrize('reference', ['example_step_and_repeat.gbr'], indirect=True)
def test_step_and_repeat(reference):
    l = GerberLayer.open(reference)
    assert len(l) == 12
    flashes, lines = l.objects[0::2], l.objects[1::2]
    assert all(isinstance(obj, go.Flash) for obj in flashes)
    assert all(isinstance(obj, go.Line) for obj in lines)
    assert [(obj.x, obj.y) for obj in flashes] == [(0, 0), (0, 4), (5, 0), (5, 4), (10, 0), (10, 4)]
    assert [obj.p1 for obj in lines] == [(1, 0), (1, 4), (6, 0), (6, 4), (11, 0), (11, 4)]
    assert [obj.p2 for obj in lines] == [(2, 0), (2, 4), (7, 0), (7, 4), (12, 0), (12, 4)]
    assert flashes[0].attrs is not flashes[1].attrs


@pytest.mark.parametrize('reference', ['example_region_with_arcs.gbr'], indirect=True)
def test_region_with_arcs(reference):
    l = GerberLayer.open(reference)
    region, = l.objects
    assert isinstance(region, go.Region)
    assert region.attrs == {'.N': (EscapedString('GND'),)}
    contour, = region.contours
    assert contour.outline == [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)]
    assert contour.arc_centers == [None, (False, (10, 5)), None, None]
    assert contour.is_closed


def test_region_contours():
    l = strict_layer('''G36*
X0Y0D02*
X1000000Y0D01*
X1000000Y1000000D01*
X0Y0D01*
X5000000Y0D02*
X6000000Y0D01*
X6000000Y1000000D01*
G37*''')
    region, = l.objects
    first, second = region.contours
    assert first.outline == [(0, 0), (1, 0), (1, 1), (0, 0)]
    assert second.outline == [(5, 0), (6, 0), (6, 1), (5, 0)]


def test_region_without_contours():
    assert strict_layer('G36*\nG37*').objects == []
    assert strict_layer('G36*\nX0Y0D02*\nX1000000Y0D02*\nG37*').objects == []


def test_region_takes_state_at_end():
    l = strict_layer('G36*\nX0Y0D02*\nX1000000Y0D01*\nY1000000D01*\n%TO.N,VCC*%\n%LR30*%\nG37*')
    region, = l.objects
    assert region.attrs == {'.N': (EscapedString('VCC'),)}
    assert region.transform == ApertureTransform(rotation=30)
    assert region.unit == MM


def test_line_and_arc():
    l = strict_layer('''%ADD10C,0.1*%
D10*
X0Y0D02*
X1000000Y1000000D01*
G75*
G03*
X3000000Y1000000I1000000J0D01*
G02*
X1000000D01*''')
    line, ccw, cw = l.objects
    assert line == go.Line(0, 0, 1, 1, l.apertures[10], unit=MM)
    assert (ccw.x1, ccw.y1, ccw.x2, ccw.y2, ccw.cx, ccw.cy) == (1, 1, 3, 1, 1, 0)
    assert ccw.center == (2, 1)
    assert not ccw.clockwise
    # circular plot without I/J uses a zero offset
    assert (cw.cx, cw.cy) == (0, 0)
    assert cw.clockwise
    assert cw.p2 == (1, 1)


def test_missing_coordinates_use_current_point():
    l = strict_layer('%ADD10C,0.1*%\nD10*\nX1000000Y2000000D02*\nX3000000D01*\nY4000000D01*\nD03*')
    first, second, flash = l.objects
    assert first.p2 == (3, 2)
    assert second.p2 == (3, 4)
    assert (flash.x, flash.y) == (3, 4)


def test_missing_current_point():
    with pytest.warns(SyntaxWarning, match='No current point'):
        l = layer('%ADD10C,0.1*%\nD10*\nX1000000D03*')
    assert (l.objects[0].x, l.objects[0].y) == (1, 0)


def test_coordinate_format():
    l = strict_layer('%ADD10C,0.1*%\nD10*\nX-12345678Y5D03*', header='%MOIN*%\n%FSLAX44Y35*%\n')
    flash, = l.objects
    assert flash.x == pytest.approx(-1234.5678)
    assert flash.y == pytest.approx(0.00005)

    with pytest.raises(LexicalError):
        layer('%ADD10C,0.1*%\nD10*\nX100000000Y0D03*')


def test_transform_snapshots():
    l = strict_layer('''%ADD10C,0.1*%
D10*
X0Y0D03*
%LR45*%
X0Y0D03*
%LMXY*%
%LS2*%
X0Y0D03*
%LPC*%
X0Y0D03*''')
    a, b, c, d = l.objects
    assert a.transform.is_identity
    assert b.transform == ApertureTransform(rotation=45)
    assert c.transform == ApertureTransform('XY', 45, 2)
    assert c.polarity_dark
    assert not d.polarity_dark


def test_object_attributes():
    l = strict_layer('''%ADD10C,0.1*%
D10*
%TO.N,A*%
X0Y0D03*
%TO.N,B*%
%TOMyAttr,1*%
X0Y0D03*
%TD.N*%
X0Y0D03*
%TD*%
X0Y0D03*''')
    attrs = [obj.attrs for obj in l.objects]
    assert attrs == [
            {'.N': (EscapedString('A'),)},
            {'.N': (EscapedString('B'),), 'MyAttr': (EscapedString('1'),)},
            {'MyAttr': (EscapedString('1'),)},
            {}]


def test_aperture_attributes():
    l = strict_layer('%TA.AperFunction,ViaPad*%\n%ADD10C,0.1*%\n%TD.AperFunction*%\n%ADD11C,0.1*%')
    assert l.apertures[10].attributes == {'.AperFunction': (EscapedString('ViaPad'),)}
    assert l.apertures[11].attributes == {}


def test_delete_attributes():
    with pytest.raises(StructuralError):
        layer('%TF.Part,Single*%\n%TD.Part*%')

    with pytest.warns(SyntaxWarning, match='not defined'):
        layer('%TD.N*%')


def test_unknown_attributes():
    with pytest.warns(UnknownAttributeWarning, match=r'\.Foo'):
        l = layer('%TO.Foo,1*%\n%TF.Bar*%')
    assert l.file_attrs == {'.Bar': ()}

    l = strict_layer('%TO.Foo,1*%\n%ADD10C,1*%\nD10*\nX0Y0D03*', unknown_attributes='ignore')
    assert l.objects[0].attrs == {'.Foo': (EscapedString('1'),)}

    with pytest.raises(UndefinedReferenceError) as exc_info:
        layer('%TO.Foo,1*%', unknown_attributes='raise')
    assert exc_info.value.identifier == '.Foo'

    # standard names of another attribute family are unknown here
    with pytest.warns(UnknownAttributeWarning):
        layer('%TF.N,1*%')


def test_invalid_options():
    with pytest.raises(ValueError):
        layer('', unknown_attributes='explode')

    with pytest.raises(ValueError):
        layer('', max_nesting=0)


def test_format_redefinition():
    with pytest.warns(SyntaxWarning, match='Re-definition'):
        l = layer('%FSLAX34Y34*%')
    assert l.import_settings.x_format == (3, 4)

    with pytest.raises(RedefinitionError):
        layer('%ADD10C,1*%\nD10*\nX0Y0D03*\n%FSLAX34Y34*%')


def test_aperture_definitions():
    with pytest.warns(SyntaxWarning, match='between 3 and 12'):
        layer('%ADD10P,1X13*%')

    with pytest.warns(SyntaxWarning, match='only gives 1'):
        layer('%AMTWO*1,1,$1,$2,0*%\n%ADD10TWO,1*%')

    l = strict_layer('%ADD10C,1X0.5*%\n%ADD11P,2X6X15*%')
    assert l.apertures[10] == apertures.CircleAperture(1, 0.5, unit=MM)
    assert l.apertures[11] == apertures.PolygonAperture(2, 6, 15, unit=MM)
    assert l.apertures[10].number == 10


def test_scale_factor_warning():
    with pytest.warns(SyntaxWarning, match='Scale factor'):
        layer('%LS0*%')


def test_warning_location():
    with pytest.warns(SyntaxWarning, match=r'^x\.gbr:3 "%ADD10P,1X13\*%": Polygon aperture D10 has 13 vertices'):
        GerberLayer.from_string(HEADER + '%ADD10P,1X13*%\nM02*', filename='x.gbr')


@pytest.mark.parametrize('body,exc', [
    ('G37*', StructuralError),
    ('G36*\nG36*\nG37*', StructuralError),
    ('G36*', StructuralError),
    ('G36*\nX0Y0D02*\nX1000000Y0D01*', StructuralError),
    ('%ADD10C,1*%\nD10*\nG36*\nX0Y0D03*\nG37*', StructuralError),
    ('%ABD10*%', StructuralError),
    ('%AB*%', StructuralError),
    ('%SRX2Y2I1J1*%', StructuralError),
    ('%SR*%', StructuralError),
    ('%SRX2Y2I1J1*%\n%SRX2Y2I1J1*%\n%SR*%\n%SR*%', StructuralError),
    ('%ABD10*%\n%SRX2Y2I1J1*%\n%AB*%\n%SR*%', StructuralError),
    ('%SRX2Y2I1J1*%\n%ABD10*%\n%SR*%\n%AB*%', StructuralError),
    ('G36*\n%ABD10*%\n%AB*%\nG37*', StructuralError),
    ('G36*\n%SRX2Y2I1J1*%\n%SR*%\nG37*', StructuralError),
    ('%ADD10C,1*%\nD10*\nX0Y0D02*\nG02*\nX1000000Y0D01*', StructuralError),
    ('%ADD10C,1*%\nD10*\nX0Y0D02*\nX1000000Y0I5J5D01*', StructuralError),
    ('%ABD20*%\n%AB*%\nD20*\nX0Y0D02*\nX1000000Y0D01*', StructuralError),
    ('%MOIN*%', RedefinitionError),
    ('%ADD10C,1*%\n%ADD10C,2*%', RedefinitionError),
    ('%ADD10C,1*%\n%ABD10*%\n%AB*%', RedefinitionError),
    ('%ABD10*%\n%ADD10C,1*%\n%AB*%', RedefinitionError),
    ('%AMA*1,1,1,0,0*%\n%AMA*1,1,2,0,0*%', RedefinitionError),
    ('D10*', UndefinedReferenceError),
    ('%ADD10FOO,1*%', UndefinedReferenceError),
    ('X0Y0D03*', UndefinedReferenceError),
    ('X0Y0D02*\nX1000000Y0D01*', UndefinedReferenceError),
    ('%AMC1*1,1,$1,0,0*%\n%ADD10C1,1*%\nD10*\nX0Y0D03*\n%AMC2*1,1,1/0,0,0*%\n%ADD11C2*%\nD11*\nX0Y0D03*',
     EvaluationError),
    ])
def test_state_errors(body, exc):
    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        with pytest.raises(exc):
            layer(body)


@pytest.mark.parametrize('data', [
    '%MOMM*%\nX0Y0D02*\nM02*',
    '%MOMM*%\n%ADD10C,1*%\nD10*\nX0Y0D03*\nM02*',
    ])
def test_coordinates_before_format(data):
    with pytest.raises(StructuralError, match='%FS'):
        GerberLayer.from_string(data)


def test_objects_before_unit():
    with pytest.raises(StructuralError, match='%MO'):
        GerberLayer.from_string('%FSLAX26Y26*%\n%ADD10C,1*%\nD10*\nX0Y0D03*\nM02*')

    # moves do not create objects
    l = GerberLayer.from_string('%FSLAX26Y26*%\nX0Y0D02*\n%MOMM*%\nM02*')
    assert l.objects == []


def test_error_context():
    data = HEADER + '%ADD10C,1*%\nD11*\nM02*'
    with pytest.raises(UndefinedReferenceError) as exc_info:
        GerberLayer.from_string(data, filename='top.gbr')

    e = exc_info.value
    assert e.kind == 'reference'
    assert e.identifier == 11
    assert e.statement == 'D11*'
    assert e.byte_offset == data.index('D11*')
    assert e.filename == 'top.gbr'
    assert e.lineno == 4
    assert str(e).startswith(f'top.gbr:4 "D11*" (offset {data.index("D11*")}): ')


def test_macro_evaluation_error_context():
    data = HEADER + '%AMDIV*1,1,1/$1,0,0*%\n%ADD10DIV,0*%\nD10*\nX0Y0D03*\nM02*'
    with pytest.raises(EvaluationError) as exc_info:
        GerberLayer.from_string(data)

    e = exc_info.value
    assert e.kind == 'evaluation'
    assert e.statement_index == 0
    assert e.identifier == 'DIV'
    assert e.byte_offset == data.index('X0Y0D03*')


def test_max_nesting():
    body = '%ABD10*%\n%ABD11*%\n%ABD12*%\n%AB*%\n%AB*%\n%AB*%'
    assert sorted(strict_layer(body).apertures) == [10, 11, 12]
    assert sorted(strict_layer(body, max_nesting=3).apertures) == [10, 11, 12]

    with pytest.raises(StructuralError, match='nested'):
        layer(body, max_nesting=2)


def test_step_and_repeat_inside_block():
    l = strict_layer('%ADD10C,1*%\n%ABD20*%\n%SRX2Y1I1J1*%\nD10*\nX0Y0D03*\n%SR*%\n%AB*%')
    assert l.objects == []
    assert [(obj.x, obj.y) for obj in l.apertures[20].objects] == [(0, 0), (1, 0)]


def test_end_of_file_handling():
    commands = decode(HEADER + 'M02*')

    with pytest.raises(StructuralError, match='after M02'):
        GerberLayer.from_commands(commands + [cmd.Comment(EscapedString('late'))])

    with pytest.raises(StructuralError, match='without an M02'):
        GerberLayer.from_commands(commands[:-1])

    l = GerberLayer.from_commands(commands)
    assert l.commands == commands


def test_graphics_state_defaults():
    state = GraphicsState(warn=None)
    assert state.point is None
    assert state.aperture is None
    assert state.polarity_dark
    assert state.transform.is_identity
    assert state.region is None
    assert state.frames == []



def test_deeply_nested_macro_expression():
    data = HEADER + '%AMX*1,1,' + '('*3000 + '1' + ')'*3000 + ',0,0*%\nM02*'
    with pytest.raises(StructuralError) as exc_info:
        GerberLayer.from_string(data, filename='deep.gbr')

    e = exc_info.value
    assert e.kind == 'structural'
    assert e.identifier == 'X'
    assert e.byte_offset == len(HEADER)
    assert e.filename == 'deep.gbr'
    assert e.lineno == 3
