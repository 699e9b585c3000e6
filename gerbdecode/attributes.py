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
from enum import Enum

from .grammar import system_name, user_name

#: Standard names of file attributes (``%TF``)
FILE_ATTRIBUTES = frozenset({
    '.Part', '.FileFunction', '.FilePolarity', '.SameCoordinates', '.CreationDate', '.GenerationSoftware',
    '.ProjectId', '.MD5'})

#: Standard names of aperture attributes (``%TA``)
APERTURE_ATTRIBUTES = frozenset({'.AperFunction', '.DrillTolerance', '.FlashText'})

#: Standard names of object attributes (``%TO``)
OBJECT_ATTRIBUTES = frozenset({
    '.N', '.P', '.C', '.CRot', '.CMfr', '.CMPN', '.CVal', '.CMnt', '.CFtp', '.CPgN', '.CPgD', '.CHgt', '.CLbN',
    '.CLbD', '.CSup'})

#: Any standard name, as accepted by ``%TD``
ALL_ATTRIBUTES = FILE_ATTRIBUTES | APERTURE_ATTRIBUTES | OBJECT_ATTRIBUTES


class NameKind(Enum):
    """ Classification of an attribute name """
    #: One of the names defined by the Gerber standard for this kind of attribute
    STANDARD = 'standard'
    #: Starts with a ``.`` like a standard name, but is not one we know.
    UNKNOWN_STANDARD = 'unknown standard'
    #: Name chosen by the file's author, not starting with a ``.``
    USER_DEFINED = 'user-defined'


@dataclass(frozen=True, slots=True)
class AttributeName:
    """ Attribute name together with its :py:class:`NameKind`. Converts to the bare name with ``str()``. """
    name : str
    kind : NameKind = NameKind.USER_DEFINED

    @property
    def is_standard(self):
        return self.kind == NameKind.STANDARD

    @property
    def is_user_defined(self):
        return self.kind == NameKind.USER_DEFINED

    def __str__(self):
        return self.name


def classify(name, standard_names=ALL_ATTRIBUTES):
    """ Return the :py:class:`AttributeName` for a complete name string. """
    if not name.startswith('.'):
        return AttributeName(name, NameKind.USER_DEFINED)
    elif name in standard_names:
        return AttributeName(name, NameKind.STANDARD)
    else:
        return AttributeName(name, NameKind.UNKNOWN_STANDARD)


def attribute_name(data, pos=0, standard_names=ALL_ATTRIBUTES):
    """ Parse an attribute name at ``pos``. A ``.``-prefixed name is always matched in full and then looked up in
    ``standard_names``, so it is never mistaken for a user-defined name, and a shorter standard name like ``.C`` never
    matches only the prefix of a longer one like ``.CRot``.
    """
    if (res := system_name(data, pos) or user_name(data, pos)) is None:
        return None

    name, end = res
    return classify(name, standard_names), end


def file_attribute_name(data, pos=0):
    return attribute_name(data, pos, FILE_ATTRIBUTES)

def aperture_attribute_name(data, pos=0):
    return attribute_name(data, pos, APERTURE_ATTRIBUTES)

def object_attribute_name(data, pos=0):
    return attribute_name(data, pos, OBJECT_ATTRIBUTES)

