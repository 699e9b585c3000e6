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

from dataclasses import dataclass

from .utils import LengthUnit, MM, Inch, LexicalError


@dataclass
class FileSettings:
    ''' Unit and coordinate format of a Gerber file, as read from its ``%MO`` and ``%FS`` statements.

    .. note::
        Gerber only allows leading zero omission and absolute coordinates (``%FSLA...``), so unlike the unit and the
        number formats these two are not configurable.
    '''
    #: File unit. :py:attr:`~.utils.MM`, :py:attr:`~.utils.Inch` or ``None`` while no ``%MO`` has been seen.
    unit : LengthUnit = None
    #: X coordinate format. ``(integer, decimal)`` tuple of digit counts, or ``None`` while no ``%FS`` has been seen.
    x_format : tuple = None
    #: Y coordinate format, same as :py:attr:`x_format`.
    y_format : tuple = None

    # input validation
    def __setattr__(self, name, value):
        if name == 'unit' and value not in [None, MM, Inch]:
            raise ValueError(f'Unit must be either Inch, MM or None, not {value}')
        elif name in ('x_format', 'y_format') and value is not None:
            if len(value) != 2 or not all(isinstance(digits, int) for digits in value):
                raise ValueError(f'Number format must be a (integer, decimal) tuple of integers, not {value}')

            if not all(1 <= digits <= 6 for digits in value):
                raise ValueError(f'Number format {value} is out of range. Only 1 to 6 digits are supported.')

        super().__setattr__(name, value)

    @property
    def has_format(self):
        return self.x_format is not None and self.y_format is not None

    def __str__(self):
        fmt = lambda f: f'{f[0]}.{f[1]}' if f else 'unset'
        return f'<File settings: unit={self.unit} x_format={fmt(self.x_format)} y_format={fmt(self.y_format)}>'

    def parse_coordinate(self, value, axis='x'):
        """ Scale an integer coordinate as written in the file into file units using this file's format.

        :param int value: Coordinate as decoded, with leading zeros omitted and the decimal point implied.
        :param str axis: ``'x'`` or ``'y'``. ``I`` offsets use the X format, ``J`` offsets use the Y format.
        :rtype: float
        """
        if value is None:
            return None

        integer_digits, decimal_digits = self.x_format if axis == 'x' else self.y_format

        if abs(value) >= 10**(integer_digits + decimal_digits):
            raise LexicalError(f'{axis.upper()} coordinate {value} has more digits than allowed by the '
                               f'{integer_digits}.{decimal_digits} coordinate format')

        return value / 10**decimal_digits

