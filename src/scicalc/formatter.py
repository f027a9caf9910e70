'''
Display formatting of calculator numbers.
'''

import math

from .errors import ErrorKind


MAX_DISPLAY_LENGTH = 15
STRICT_MAX_LENGTH = 13
MAX_DECIMALS = 6
SCIENTIFIC_HIGH = 1e6
SCIENTIFIC_LOW = 1e-7
# Mantissa decimals in scientific notation: 3 significant digits.
SCIENTIFIC_DIGITS = 2

INVALID_RESULT = 'Invalid result'
STRICT_ERROR = 'Error'


def requires_scientific(value):
    magnitude = abs(value)
    return (magnitude >= SCIENTIFIC_HIGH or
            0 < magnitude < SCIENTIFIC_LOW)


def clean_result(text):
    '''
    Drop trailing decimal zeros and negative zero.
    '''
    if not text:
        return '0'
    if '.' in text and 'E' not in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', '-0.0', ''):
        return '0'
    return text


def format_fixed(value, decimals=MAX_DECIMALS):
    '''
    Fixed-point with at most decimals decimals, trailing zeros trimmed.
    '''
    return clean_result('{:.{}f}'.format(value, max(0, decimals)))


def format_scientific(value):
    '''
    Scientific notation like 1.23E+6: rounded mantissa, signed exponent.
    '''
    mantissa, exponent = '{:.{}E}'.format(value, SCIENTIFIC_DIGITS).split('E')
    if '.' in mantissa:
        mantissa = mantissa.rstrip('0').rstrip('.')
    return '{}E{:+d}'.format(mantissa, int(exponent))


def _integer_part(value):
    return str(int(math.trunc(value)))


def truncate_number(value, max_length):
    '''
    Fit value into max_length characters.

    Reduces decimal precision first; if the integer part alone doesn't fit,
    falls back to scientific notation. As a last resort the text is cut,
    never rounded.
    '''
    integer_part = _integer_part(value)
    if len(integer_part) >= max_length:
        return format_scientific(value)
    text = format_fixed(value, max_length - len(integer_part) - 1)
    if len(text) > max_length:
        text = text[:max_length]
    return text


def format_result(value, max_length=MAX_DISPLAY_LENGTH):
    '''
    Render a number for display.

    NaN and infinities render as their error texts.
    '''
    if math.isnan(value):
        return ErrorKind.MATH.message
    if math.isinf(value):
        return INVALID_RESULT
    # Decide on the rounded value too: 999999.9999999 shows as 1E+6.
    if (requires_scientific(value) or
            requires_scientific(round(value, MAX_DECIMALS))):
        return format_scientific(value)
    text = format_fixed(value)
    if len(text) > max_length:
        text = truncate_number(value, max_length)
    return text


def format_result_strict(value, max_length=STRICT_MAX_LENGTH):
    '''
    Render a number for the operation trail.

    Scientific results are parenthesized so they read as one operand.
    '''
    if not math.isfinite(value):
        return STRICT_ERROR
    if (requires_scientific(value) or
            requires_scientific(round(value, MAX_DECIMALS))):
        return '({})'.format(format_scientific(value))
    text = format_fixed(value)
    integer_part = _integer_part(value)
    if len(text) > max_length and len(integer_part) < max_length:
        text = format_fixed(value, max_length - len(integer_part) - 1)
    return text
