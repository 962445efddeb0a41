"""
Unit tests for request number parsing.
"""

import pytest
from decimal import Decimal
from app.utils.number_format import parse_money, parse_int


class TestParseMoney:

    @pytest.mark.parametrize('value,expected', [
        ('12.5', Decimal('12.50')),
        (19.99, Decimal('19.99')),
        (7, Decimal('7.00')),
        (Decimal('0.005'), Decimal('0.01')),
    ])
    def test_valid_amounts(self, value, expected):
        assert parse_money(value) == expected

    @pytest.mark.parametrize('value', [None, True, 'abc', '-1', 'NaN'])
    def test_invalid_amounts(self, value):
        with pytest.raises(ValueError):
            parse_money(value, 'price')


class TestParseInt:

    def test_accepts_strings_and_integral_floats(self):
        assert parse_int('42') == 42
        assert parse_int(3.0) == 3

    @pytest.mark.parametrize('value', [None, False, 2.5, 'x'])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ValueError):
            parse_int(value, 'quantity')

    def test_minimum(self):
        assert parse_int(1, 'quantity', minimum=1) == 1
        with pytest.raises(ValueError, match='quantity must be >= 1'):
            parse_int(0, 'quantity', minimum=1)
