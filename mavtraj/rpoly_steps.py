"""Elementary steps of the Jenkins-Traub real polynomial root finder.

Polynomials are given as sequences of coefficients in decreasing powers.
The routines here are the building blocks combined by the root finder:
solving a quadratic, dividing by a quadratic factor, computing the scalars
of the K-polynomial recurrence, advancing the K-polynomial and estimating a
new quadratic factor.
"""

import math
import sys
from dataclasses import dataclass
from enum import IntEnum

EPSILON = sys.float_info.epsilon


class Normalization(IntEnum):
    """How the recurrence scalars were normalized to avoid overflow."""

    DIVIDED_BY_C = 1
    DIVIDED_BY_D = 2
    ALMOST_FACTOR = 3


@dataclass(frozen=True)
class ShiftScalars:
    """Scalars used for the next K-polynomial and the next quadratic estimate.

    When the quadratic is almost a factor of K only ``c`` and ``d`` are
    meaningful; the remaining fields are left at zero.
    """

    a1: float = 0.0
    a3: float = 0.0
    a7: float = 0.0
    c: float = 0.0
    d: float = 0.0
    e: float = 0.0
    f: float = 0.0
    g: float = 0.0
    h: float = 0.0


def solve_quadratic(a, b1, c):
    """Return the zeros of a*z**2 + b1*z + c as (sr, si, lr, li).

    ``sr + i*si`` is the smaller zero and ``lr + i*li`` the larger one. The
    discriminant is computed in a way that avoids overflow. With ``a == 0``
    the single zero of the linear part is returned in ``sr``; with ``c == 0``
    the non-zero root is returned in ``lr``.
    """
    sr = si = lr = li = 0.0

    if a == 0:
        if b1 != 0:
            sr = -(c / b1)
        return sr, si, lr, li

    if c == 0:
        lr = -(b1 / a)
        return sr, si, lr, li

    b = b1 / 2.0
    if abs(b) < abs(c):
        e = a if c >= 0 else -a
        e = -e + b * (b / abs(c))
        d = math.sqrt(abs(e)) * math.sqrt(abs(c))
    else:
        e = -((a / b) * (c / b)) + 1.0
        d = math.sqrt(abs(e)) * abs(b)

    if e >= 0:
        # Real zeros.
        if b >= 0:
            d = -d
        lr = (-b + d) / a
        if lr != 0:
            sr = (c / lr) / a
    else:
        # Complex conjugate zeros.
        lr = sr = -(b / a)
        si = abs(d / a)
        li = -si

    return sr, si, lr, li


def quadratic_synthetic_division(p, u, v):
    """Divide p by the quadratic z**2 + u*z + v.

    Returns ``(q, a, b)``: ``q`` holds the quotient in its first
    ``len(p) - 2`` entries, and the remainder is ``b*(z + u) + a``.
    The last two entries of ``q`` equal ``b`` and ``a``.
    """
    coefficients = [float(x) for x in p]
    if len(coefficients) < 2:
        raise ValueError("synthetic division needs at least two coefficients")

    b = coefficients[0]
    a = -(b * u) + coefficients[1]
    q = [b, a]
    for coefficient in coefficients[2:]:
        value = -(a * u + b * v) + coefficient
        q.append(value)
        b, a = a, value
    return q, a, b


def calculate_scalars(k, a, b, u, v):
    """Compute the recurrence scalars for the K-polynomial k.

    ``a`` and ``b`` are the remainder of dividing the polynomial by the
    quadratic ``z**2 + u*z + v``. Returns ``(t_flag, scalars, qk)`` where
    ``qk`` is the quotient of k divided by the quadratic.
    """
    qk, c, d = quadratic_synthetic_division(k, u, v)
    n = len(qk)

    if abs(c) <= 10.0 * EPSILON * abs(k[n - 1]) and abs(d) <= 10.0 * EPSILON * abs(
        k[n - 2]
    ):
        return Normalization.ALMOST_FACTOR, ShiftScalars(c=c, d=d), qk

    h = v * b
    if abs(d) >= abs(c):
        e = a / d
        f = c / d
        g = u * b
        a3 = e * (g + a) + h * (b / d)
        a1 = -a + f * b
        a7 = h + (f + u) * a
        flag = Normalization.DIVIDED_BY_D
    else:
        e = a / c
        f = d / c
        g = e * u
        a3 = e * a + (g + h / c) * b
        a1 = -(a * (d / c)) + b
        a7 = g * d + h * f + a
        flag = Normalization.DIVIDED_BY_C

    scalars = ShiftScalars(a1=a1, a3=a3, a7=a7, c=c, d=d, e=e, f=f, g=g, h=h)
    return flag, scalars, qk


def next_k(k, t_flag, scalars, a, b, qk, qp):
    """Return the next K-polynomial, of the same length as k.

    ``qk`` is the quotient of k and ``qp`` the quotient of the polynomial,
    both from division by the current quadratic.
    """
    n = len(k)
    if n < 2:
        raise ValueError("the K-polynomial needs at least two coefficients")

    if t_flag == Normalization.ALMOST_FACTOR:
        # Unscaled form of the recurrence.
        return [0.0, 0.0] + [float(x) for x in qk[: n - 2]]

    temp = b if t_flag == Normalization.DIVIDED_BY_C else a
    tail = zip(qp[1 : n - 1], qk[: n - 2], qp[2:n])

    if abs(scalars.a1) > 10.0 * EPSILON * abs(temp):
        # Scaled form of the recurrence.
        a7 = scalars.a7 / scalars.a1
        a3 = scalars.a3 / scalars.a1
        result = [qp[0], -(a7 * qp[0]) + qp[1]]
        result.extend(
            -(a7 * qp_prev) + a3 * qk_prev + qp_here
            for qp_prev, qk_prev, qp_here in tail
        )
    else:
        # a1 is nearly zero: special form of the recurrence.
        a7 = scalars.a7
        a3 = scalars.a3
        result = [0.0, -a7 * qp[0]]
        result.extend(-(a7 * qp_prev) + a3 * qk_prev for qp_prev, qk_prev, _ in tail)
    return [float(x) for x in result]


def new_estimate(t_flag, scalars, a, b, u, v, k, p):
    """Return new quadratic coefficients ``(uu, vv)``.

    ``k`` is the current K-polynomial of length n and ``p`` the polynomial
    of length n + 1. Returns ``(0.0, 0.0)`` when no estimate can be made.
    """
    n = len(k)
    if n < 2:
        raise ValueError("the K-polynomial needs at least two coefficients")
    if len(p) <= n:
        raise ValueError("the polynomial must be one coefficient longer than K")

    if t_flag == Normalization.ALMOST_FACTOR:
        return 0.0, 0.0

    s = scalars
    if t_flag != Normalization.DIVIDED_BY_D:
        a4 = a + u * b + s.h * s.f
        a5 = s.c + (u + v * s.f) * s.d
    else:
        a4 = (a + s.g) * s.f + s.h
        a5 = (s.f + u) * s.c + v * s.d

    b1 = -k[n - 1] / p[n]
    b2 = -(k[n - 2] + b1 * p[n - 1]) / p[n]
    c1 = v * b2 * s.a1
    c2 = b1 * s.a7
    c3 = b1 * b1 * s.a3
    c4 = -(c2 + c3) + c1
    temp = -c4 + a5 + b1 * a4
    if temp == 0.0:
        return 0.0, 0.0

    uu = -((u * (c3 + c2) + v * (b1 * s.a1 + b2 * s.a7)) / temp) + u
    vv = v * (1.0 + c4 / temp)
    return uu, vv