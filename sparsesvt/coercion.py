"""Element-wise coercion between vector types, with coercion warnings."""

from __future__ import annotations

import enum
import math
import re
import warnings
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .sparsevec import RType


class CoercionWarning(UserWarning):
    """Warning raised for lossy coercions."""


class CoercionError(TypeError):
    """Raised when a coercion between two types is not supported."""


class CoercionFlag(enum.IntFlag):
    """Kinds of loss that a coercion can report."""

    NONE = 0
    NA = 1
    INT_NA = 2
    IMAG = 4
    RAW = 8


_MESSAGES = (
    (CoercionFlag.NA, "NAs introduced by coercion"),
    (CoercionFlag.INT_NA, "NAs introduced by coercion to integer range"),
    (CoercionFlag.IMAG, "imaginary parts discarded in coercion"),
    (CoercionFlag.RAW, "out-of-range values treated as 0 in coercion to raw"),
)


def emit_coercion_warnings(warn) -> None:
    """Issue one CoercionWarning for each kind of loss set in *warn*."""
    warn = CoercionFlag(warn)
    for flag, message in _MESSAGES:
        if warn & flag:
            warnings.warn(message, CoercionWarning, stacklevel=2)


def _as_rtype(value) -> RType:
    try:
        return RType.from_name(value)
    except (ValueError, TypeError):
        raise ValueError("'from_type' and 'to_type' must be valid "
                         "vector types specified as single strings") from None


def coercion_can_introduce_zeros(from_type, to_type) -> bool:
    """True if coercing *from_type* to *to_type* can turn nonzeros into zeros."""
    src, dst = _as_rtype(from_type), _as_rtype(to_type)
    if src is dst:
        return False
    if dst is RType.RAW or src in (RType.CHARACTER, RType.LIST):
        return True
    if src is RType.DOUBLE:
        return dst is RType.INTEGER
    if src is RType.COMPLEX:
        return dst in (RType.INTEGER, RType.DOUBLE)
    return False


def coercion_can_introduce_nas(from_type, to_type) -> bool:
    """True if coercing *from_type* to *to_type* can produce new NAs."""
    src, dst = _as_rtype(from_type), _as_rtype(to_type)
    if src is dst:
        return False
    if src is RType.CHARACTER:
        return True
    if dst is RType.INTEGER:
        return src in (RType.DOUBLE, RType.COMPLEX)
    return False


# ---------------------------------------------------------------------------
# Number parsing

_INT_MAX = 2147483647
_INT_MIN = -2147483648
_SPACE = " \t\n\v\f\r"
_DEC_RE = re.compile(r"(\d+\.?\d*|\.\d+)(?:[eE]([+-]?)(\d*))?")
_HEX_RE = re.compile(r"0[xX]([0-9a-fA-F]+)(?:[pP]([+-]?\d+))?")

_F = CoercionFlag
_Result = Tuple[Any, CoercionFlag]


def _is_blank(s: str) -> bool:
    return s.strip(_SPACE) == ""


def _isnan(x: Optional[float]) -> bool:
    return x is None or math.isnan(x)


def _cplx_isna(z: Optional[complex]) -> bool:
    return z is None or math.isnan(z.real) or math.isnan(z.imag)


def _strtod(s: str, pos: int = 0) -> Tuple[Optional[float], int]:
    """Parse a number at the start of ``s[pos:]``.

    Returns ``(value, end)``; *value* is None for "NA" and *end* equals
    *pos* when no number could be read.
    """
    p = pos
    while p < len(s) and s[p] in _SPACE:
        p += 1
    if s.startswith("NA", p):
        return None, p + 2
    sign = 1.0
    if p < len(s) and s[p] in "+-":
        sign = -1.0 if s[p] == "-" else 1.0
        p += 1
    head = s[p:p + 3].lower()
    if head == "nan":
        return math.nan, p + 3
    if head == "inf":
        return sign * math.inf, p + 3
    m = _HEX_RE.match(s, p)
    if m:
        exponent = int(m.group(2)) if m.group(2) else 0
        try:
            value = math.ldexp(float(int(m.group(1), 16)), exponent)
        except OverflowError:
            value = math.inf
        return sign * value, m.end()
    m = _DEC_RE.match(s, p)
    if m:
        text = m.group(1)
        if m.group(3):
            text += "e" + m.group(2) + m.group(3)
        return sign * float(text), m.end()
    return 0.0, pos


# ---------------------------------------------------------------------------
# Number formatting

def _format_double(x: Optional[float]) -> Optional[str]:
    if x is None:
        return None
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Inf" if x > 0 else "-Inf"
    if x == 0:
        return "0"
    target = float(f"{x:.14e}")
    for digits in range(1, 16):
        sci = f"{x:.{digits - 1}e}"
        if float(sci) == target:
            break
    mantissa, exp_text = sci.split("e")
    exponent = int(exp_text)
    sci_str = f"{mantissa}e{'-' if exponent < 0 else '+'}{abs(exponent):02d}"
    decimals = max(0, digits - 1 - exponent)
    fixed = f"{x:.{decimals}f}"
    return fixed if len(fixed) <= len(sci_str) else sci_str


def _format_complex(z: Optional[complex]) -> Optional[str]:
    if z is None:
        return None
    real = _format_double(z.real)
    imag = _format_double(z.imag)
    if not imag.startswith("-"):
        imag = "+" + imag
    return f"{real}{imag}i"


# ---------------------------------------------------------------------------
# To logical

_STRING_TRUE = frozenset({"T", "True", "TRUE", "true"})
_STRING_FALSE = frozenset({"F", "False", "FALSE", "false"})


def _lgl_from_int(x) -> _Result:
    return (None if x is None else x != 0), _F.NONE


def _lgl_from_double(x) -> _Result:
    return (None if _isnan(x) else x != 0.0), _F.NONE


def _lgl_from_complex(z) -> _Result:
    return (None if _cplx_isna(z) else (z.real != 0 or z.imag != 0)), _F.NONE


def _lgl_from_string(x) -> _Result:
    if x in _STRING_TRUE:
        return True, _F.NONE
    if x in _STRING_FALSE:
        return False, _F.NONE
    return None, _F.NONE


def _lgl_from_raw(x) -> _Result:
    return x != 0, _F.NONE


# ---------------------------------------------------------------------------
# To integer

def _int_from_lgl(x) -> _Result:
    return (None if x is None else int(x)), _F.NONE


def _int_from_double(x) -> _Result:
    if _isnan(x):
        return None, _F.NONE
    if x >= _INT_MAX + 1.0 or x <= _INT_MIN:
        return None, _F.INT_NA
    return int(x), _F.NONE


def _int_from_complex(z) -> _Result:
    if _cplx_isna(z):
        return None, _F.NONE
    if z.real > _INT_MAX + 1.0 or z.real <= _INT_MIN:
        return None, _F.INT_NA
    flag = _F.IMAG if z.imag != 0.0 else _F.NONE
    return int(z.real), flag


def _int_from_string(x) -> _Result:
    if x is None or _is_blank(x):
        return None, _F.NONE
    value, end = _strtod(x)
    if not _is_blank(x[end:]):
        return None, _F.NA
    if _isnan(value):
        return None, _F.NONE
    if value >= _INT_MAX + 1.0 or value <= _INT_MIN:
        return None, _F.INT_NA
    return int(value), _F.NONE


def _int_from_raw(x) -> _Result:
    return int(x), _F.NONE


# ---------------------------------------------------------------------------
# To double

def _dbl_from_int(x) -> _Result:
    return (None if x is None else float(x)), _F.NONE


def _dbl_from_complex(z) -> _Result:
    if _cplx_isna(z):
        return None, _F.NONE
    flag = _F.IMAG if z.imag != 0.0 else _F.NONE
    return z.real, flag


def _dbl_from_string(x) -> _Result:
    if x is None or _is_blank(x):
        return None, _F.NONE
    value, end = _strtod(x)
    if _is_blank(x[end:]):
        return value, _F.NONE
    return None, _F.NA


def _dbl_from_raw(x) -> _Result:
    return float(x), _F.NONE


# ---------------------------------------------------------------------------
# To complex

def _cplx_from_int(x) -> _Result:
    return (None if x is None else complex(float(x), 0.0)), _F.NONE


def _cplx_from_double(x) -> _Result:
    return (None if x is None else complex(x, 0.0)), _F.NONE


def _cplx_from_string(x) -> _Result:
    if x is None or _is_blank(x):
        return None, _F.NONE
    real, end = _strtod(x)
    rest = x[end:]
    if _is_blank(rest):
        return (None if real is None else complex(real, 0.0)), _F.NONE
    if rest[0] in "+-":
        imag, end2 = _strtod(rest)
        tail = rest[end2:]
        if tail.startswith("i") and _is_blank(tail[1:]):
            if real is None or imag is None:
                return None, _F.NONE
            return complex(real, imag), _F.NONE
    return None, _F.NA


# ---------------------------------------------------------------------------
# To raw

def _raw_from_lgl(x) -> _Result:
    if x is None:
        return 0, _F.RAW
    return int(x), _F.NONE


def _raw_from_int(x) -> _Result:
    if x is None or x < 0 or x > 255:
        return 0, _F.RAW
    return x, _F.NONE


def _raw_from_double(x) -> _Result:
    if _isnan(x) or x <= -1.0 or x >= 256.0:
        return 0, _F.RAW
    return int(x), _F.NONE


def _raw_from_complex(z) -> _Result:
    if _cplx_isna(z) or z.real <= -1.0 or z.real >= 256.0:
        return 0, _F.RAW
    flag = _F.IMAG if z.imag != 0.0 else _F.NONE
    return int(z.real), flag


def _raw_from_string(x) -> _Result:
    if x is not None and not _is_blank(x):
        value, end = _strtod(x)
        if _is_blank(x[end:]) and not _isnan(value) and not math.isinf(value):
            tmp = int(value)
            if 0 <= tmp <= 255:
                return tmp, _F.NONE
    return 0, _F.RAW


# ---------------------------------------------------------------------------
# To character

def _chr_from_lgl(x) -> _Result:
    if x is None:
        return None, _F.NONE
    return ("TRUE" if x else "FALSE"), _F.NONE


def _chr_from_int(x) -> _Result:
    return (None if x is None else str(x)), _F.NONE


def _chr_from_double(x) -> _Result:
    return _format_double(x), _F.NONE


def _chr_from_complex(z) -> _Result:
    return _format_complex(z), _F.NONE


def _chr_from_raw(x) -> _Result:
    return f"{x:02x}", _F.NONE


def _identity(x) -> _Result:
    return x, _F.NONE


_L, _I, _D, _C, _R, _S = (RType.LOGICAL, RType.INTEGER, RType.DOUBLE,
                          RType.COMPLEX, RType.RAW, RType.CHARACTER)

_CONVERTERS: Dict[Tuple[RType, RType], Callable[[Any], _Result]] = {
    (_I, _L): _lgl_from_int,
    (_D, _L): _lgl_from_double,
    (_C, _L): _lgl_from_complex,
    (_S, _L): _lgl_from_string,
    (_R, _L): _lgl_from_raw,
    (_L, _I): _int_from_lgl,
    (_D, _I): _int_from_double,
    (_C, _I): _int_from_complex,
    (_S, _I): _int_from_string,
    (_R, _I): _int_from_raw,
    (_L, _D): _dbl_from_int,
    (_I, _D): _dbl_from_int,
    (_C, _D): _dbl_from_complex,
    (_S, _D): _dbl_from_string,
    (_R, _D): _dbl_from_raw,
    (_L, _C): _cplx_from_int,
    (_I, _C): _cplx_from_int,
    (_D, _C): _cplx_from_double,
    (_S, _C): _cplx_from_string,
    (_R, _C): _cplx_from_int,
    (_L, _R): _raw_from_lgl,
    (_I, _R): _raw_from_int,
    (_D, _R): _raw_from_double,
    (_C, _R): _raw_from_complex,
    (_S, _R): _raw_from_string,
    (_L, _S): _chr_from_lgl,
    (_I, _S): _chr_from_int,
    (_D, _S): _chr_from_double,
    (_C, _S): _chr_from_complex,
    (_R, _S): _chr_from_raw,
    (_S, _S): _identity,
}


def _unsupported(src: RType, dst: RType) -> CoercionError:
    return CoercionError(f'coercion from type "{src.value}" to type '
                         f'"{dst.value}" is not supported')


def _scalar_type(x) -> RType:
    if x is None or isinstance(x, bool):
        return RType.LOGICAL
    if isinstance(x, int):
        return RType.INTEGER
    if isinstance(x, float):
        return RType.DOUBLE
    if isinstance(x, complex):
        return RType.COMPLEX
    if isinstance(x, str):
        return RType.CHARACTER
    raise CoercionError(
        f"list element of type {type(x).__name__} cannot be coerced")


def _coerce_list_element(x, dst: RType) -> _Result:
    src = _scalar_type(x)
    if src is dst:
        return x, _F.NONE
    return _CONVERTERS[(src, dst)](x)


def coerce_vector(values: Iterable[Any], from_type,
                  to_type) -> Tuple[List[Any], CoercionFlag]:
    """Coerce *values* of type *from_type* to *to_type*.

    NA is represented by None. Returns the coerced values together with
    the kinds of loss that occurred; pass the latter to
    emit_coercion_warnings() to report them.
    """
    src, dst = RType.from_name(from_type), RType.from_name(to_type)
    if dst is RType.LIST:
        return list(values), _F.NONE
    if src is RType.LIST:
        def convert(x):
            return _coerce_list_element(x, dst)
    else:
        try:
            convert = _CONVERTERS[(src, dst)]
        except KeyError:
            raise _unsupported(src, dst) from None
    result: List[Any] = []
    warn = _F.NONE
    for x in values:
        value, flag = convert(x)
        result.append(value)
        warn |= flag
    return result, warn