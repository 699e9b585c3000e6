#!/usr/bin/env python
# -*- coding: utf-8 -*-

# Copyright 2021 Jan Sebastian Götte <gerbonara@jaseg.de>

from dataclasses import dataclass
import operator
import math

from ..utils import EvaluationError, UnboundVariableError


def expr(obj):
    return obj if isinstance(obj, Expression) else ConstantExpression(float(obj))


@dataclass(frozen=True, slots=True)
class Expression:
    def optimized(self):
        return self

    def __str__(self):
        return f'<{self.to_gerber()}>'

    def __repr__(self):
        return f'<E {self.to_gerber()}>'

    def calculate(self, variables):
        """ Evaluate this expression given a ``{number: value}`` mapping of macro variables. """
        raise NotImplementedError()

    def to_gerber(self):
        raise NotImplementedError()

    def parameters(self):
        return tuple()

    @property
    def is_constant(self):
        return False


@dataclass(frozen=True, slots=True)
class ConstantExpression(Expression):
    value: float

    def __float__(self):
        return float(self.value)

    @property
    def is_constant(self):
        return True

    def calculate(self, variables):
        return self.value

    def to_gerber(self):
        if math.isclose(self.value, 0, abs_tol=1e-9): # Avoid producing "-0" for negative floating point zeros
            return '0'
        return f'{self.value:.6f}'.rstrip('0').rstrip('.')


@dataclass(frozen=True, slots=True)
class ParameterExpression(Expression):
    ''' An expression that refers to a macro variable or parameter '''
    number: int

    def calculate(self, variables):
        try:
            return variables[self.number]
        except KeyError:
            raise UnboundVariableError(f'Variable ${self.number} is not bound', identifier=f'${self.number}') from None

    def to_gerber(self):
        return f'${self.number}'

    def parameters(self):
        yield self


@dataclass(frozen=True, slots=True)
class NegatedExpression(Expression):
    value: Expression

    def optimized(self):
        match self.value.optimized():
            # -(-x) == x
            case NegatedExpression(inner_value):
                return inner_value
            # -(x) == -x
            case ConstantExpression(inner_value):
                return ConstantExpression(-inner_value)
            case x:
                return NegatedExpression(x)

    def calculate(self, variables):
        return -self.value.calculate(variables)

    def to_gerber(self):
        val_str = self.value.to_gerber()
        if isinstance(self.value, OperatorExpression):
            return f'-({val_str})'
        else:
            return f'-{val_str}'

    def parameters(self):
        return self.value.parameters()


OPERATOR_SYMBOLS = {
        operator.add: '+',
        operator.sub: '-',
        operator.mul: 'x',
        operator.truediv: '/'}


@dataclass(frozen=True, slots=True)
class OperatorExpression(Expression):
    op: object
    l: Expression
    r: Expression

    def optimized(self):
        l = self.l.optimized()
        r = self.r.optimized()

        # Division by a literal zero is left in place so it is reported when the macro is evaluated.
        if l.is_constant and r.is_constant and not (self.op is operator.truediv and float(r) == 0):
            return ConstantExpression(self.op(float(l), float(r)))
        return OperatorExpression(self.op, l, r)

    def calculate(self, variables):
        l = self.l.calculate(variables)
        r = self.r.calculate(variables)

        if self.op is operator.truediv and r == 0:
            raise EvaluationError(f'Division by zero in {self.to_gerber()}')
        return self.op(l, r)

    def to_gerber(self):
        lval = self.l.to_gerber()
        rval = self.r.to_gerber()

        if isinstance(self.l, OperatorExpression):
            lval = f'({lval})'
        if isinstance(self.r, OperatorExpression):
            rval = f'({rval})'

        return f'{lval}{OPERATOR_SYMBOLS[self.op]}{rval}'

    def parameters(self):
        yield from self.l.parameters()
        yield from self.r.parameters()

