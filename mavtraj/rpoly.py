"""Roots of real polynomials by the Jenkins-Traub three-stage algorithm."""

import math
import sys

import numpy as np

from mavtraj.rpoly_steps import (
    EPSILON,
    Normalization,
    calculate_scalars,
    new_estimate,
    next_k,
    quadratic_synthetic_division,
    solve_quadratic,
)

MAX_DEGREE = 100

_FLT_MIN = 1.1754943508222875e-38
_FLT_MAX = 3.4028234663852886e38
_LOWER_SCALE = _FLT_MIN / EPSILON
_LOG2 = math.log(2.0)
_COS_ROTATION = math.cos(math.radians(94.0))
_SIN_ROTATION = math.sin(math.radians(94.0))


def _log(x):
    return math.log(x) if x > 0 else -math.inf


def _horner(coefficients, s):
    """Evaluate at s; return the final value and all partial sums."""
    value = coefficients[0]
    partial = [value]
    for coefficient in coefficients[1:]:
        value = value * s + coefficient
        partial.append(value)
    return value, partial


def _real_iterate(s, k, p):
    """Variable-shift iteration for a single real zero.

    Returns ``(found, near_double, s, k, qp)``. ``found`` is the real zero or
    None; ``near_double`` signals a cluster of zeros near the real axis, in
    which case ``s`` is the last iterate.
    """
    n = len(k)
    nm1 = n - 1
    start = s
    t = omp = 0.0
    steps = 0
    k = list(k)
    qp = list(p)

    while True:
        pv, qp = _horner(p, s)
        mp = abs(pv)

        ms = abs(s)
        ee = 0.5 * abs(qp[0])
        for value in qp[1:]:
            ee = ee * ms + abs(value)

        if mp <= 20.0 * EPSILON * (2.0 * ee - mp):
            return s, False, start, k, qp

        steps += 1
        if steps > 10:
            return None, False, start, k, qp

        if steps >= 2 and abs(t) <= 0.001 * abs(-t + s) and mp > omp:
            return None, True, s, k, qp

        omp = mp

        kv, qk = _horner(k, s)
        if abs(kv) > abs(k[nm1]) * 10.0 * EPSILON:
            t = -(pv / kv)
            k = [qp[0]] + [t * qk[i - 1] + qp[i] for i in range(1, n)]
        else:
            k = [0.0] + qk[: n - 1]

        kv, _ = _horner(k, s)
        t = -(pv / kv) if abs(kv) > abs(k[nm1]) * 10.0 * EPSILON else 0.0
        s += t


def _quadratic_iterate(uu, vv, k, p):
    """Variable-shift iteration for a quadratic factor.

    Returns ``(zeros, qp)`` where ``zeros`` holds the two zeros found, or is
    empty when the iteration did not converge.
    """
    n = len(k)
    u, v = uu, vv
    k = list(k)
    steps = 0
    tried = False
    relstp = omp = 0.0
    qp = list(p)

    while True:
        sr, si, lr, li = solve_quadratic(1.0, u, v)

        # Give up if the zeros are real and not close to a multiple or
        # nearly equal pair of opposite sign.
        if abs(abs(sr) - abs(lr)) > 0.01 * abs(lr):
            return [], qp

        qp, a, b = quadratic_synthetic_division(p, u, v)
        mp = abs(-(sr * b) + a) + abs(si * b)

        # Rigorous bound on the rounding error in evaluating p.
        zm = math.sqrt(abs(v))
        ee = 2.0 * abs(qp[0])
        t = -(sr * b)
        for value in qp[1:n]:
            ee = ee * zm + abs(value)
        ee = ee * zm + abs(a + t)
        ee = (9.0 * ee + 2.0 * abs(t) - 7.0 * (abs(a + t) + zm * abs(b))) * EPSILON

        if mp <= 20.0 * ee:
            return [complex(sr, si), complex(lr, li)], qp

        steps += 1
        if steps > 20:
            return [], qp

        if steps >= 2 and relstp <= 0.01 and mp >= omp and not tried:
            # A cluster stalls convergence: take fixed shifts close to it.
            relstp = math.sqrt(EPSILON) if relstp < EPSILON else math.sqrt(relstp)
            u -= u * relstp
            v += v * relstp
            qp, a, b = quadratic_synthetic_division(p, u, v)
            for _ in range(5):
                t_flag, scalars, qk = calculate_scalars(k, a, b, u, v)
                k = next_k(k, t_flag, scalars, a, b, qk, qp)
            tried = True
            steps = 0

        omp = mp

        t_flag, scalars, qk = calculate_scalars(k, a, b, u, v)
        k = next_k(k, t_flag, scalars, a, b, qk, qp)
        t_flag, scalars, qk = calculate_scalars(k, a, b, u, v)
        ui, vi = new_estimate(t_flag, scalars, a, b, u, v, k, p)

        if vi == 0:
            return [], qp
        relstp = abs((-v + vi) / vi)
        u, v = ui, vi


def _fixed_shift(limit, sr, bound, k, p):
    """Second stage: up to ``limit`` fixed-shift steps.

    Starts a variable-shift iteration once a sequence converges. Returns
    ``(zeros, qp)`` with the zeros found (possibly none) and the quotient
    to deflate by.
    """
    n = len(k)
    k = list(k)
    betav = betas = 0.25
    u = -(2.0 * sr)
    oss = sr
    ovv = v = bound
    otv = ots = 0.0

    qp, a, b = quadratic_synthetic_division(p, u, v)
    t_flag, scalars, qk = calculate_scalars(k, a, b, u, v)

    for step in range(limit):
        k = next_k(k, t_flag, scalars, a, b, qk, qp)
        t_flag, scalars, qk = calculate_scalars(k, a, b, u, v)
        ui, vi = new_estimate(t_flag, scalars, a, b, u, v, k, p)
        vv = vi

        ss = -(p[n] / k[n - 1]) if k[n - 1] != 0.0 else 0.0
        ts = tv = 1.0

        if step != 0 and t_flag != Normalization.ALMOST_FACTOR:
            if vv != 0.0:
                tv = abs((vv - ovv) / vv)
            if ss != 0.0:
                ts = abs((ss - oss) / ss)

            tvv = tv * otv if tv < otv else 1.0
            tss = ts * ots if ts < ots else 1.0
            vpass = tvv < betav
            spass = tss < betas

            if spass or vpass:
                saved_k = list(k)
                s = ss
                s_tried = v_tried = False
                first = True

                while True:
                    try_linear = True
                    if first and spass and (not vpass or tss < tvv):
                        pass
                    else:
                        zeros, quotient = _quadratic_iterate(ui, vi, k, p)
                        if zeros:
                            return zeros, quotient
                        v_tried = True
                        betav *= 0.25
                        if s_tried or not spass:
                            try_linear = False
                        else:
                            k = list(saved_k)
                    first = False

                    if try_linear:
                        root, near_double, s, k, quotient = _real_iterate(s, k, p)
                        if root is not None:
                            return [complex(root, 0.0)], quotient
                        s_tried = True
                        betas *= 0.25
                        if near_double:
                            # Almost a double real zero: try a quadratic.
                            ui = -(s + s)
                            vi = s * s
                            if vpass and not v_tried:
                                continue
                            break

                    k = list(saved_k)
                    if not (vpass and not v_tried):
                        break

                qp, a, b = quadratic_synthetic_division(p, u, v)
                t_flag, scalars, qk = calculate_scalars(k, a, b, u, v)

        ovv = vv
        oss = ss
        otv = tv
        ots = ts

    return [], qp


def _lower_bound(p):
    """Lower bound on the moduli of the zeros of p (degree at least 3)."""
    n = len(p) - 1
    pt = [abs(x) for x in p]
    pt[n] = -pt[n]

    x = math.exp((_log(-pt[n]) - _log(pt[0])) / n)
    if pt[n - 1] != 0:
        # Newton step at the origin is better when it is smaller.
        x = min(x, -pt[n] / pt[n - 1])

    xm = x
    while True:
        x = xm
        xm = 0.1 * x
        ff, _ = _horner(pt, xm)
        if not ff > 0:
            break

    dx = x
    while x != 0 and abs(dx / x) > 0.005:
        df = ff = pt[0]
        for coefficient in pt[1:n]:
            ff = x * ff + coefficient
            df = x * df + ff
        ff = x * ff + pt[n]
        dx = ff / df
        x -= dx
    return x


def _scaled(p):
    """Scale p by a power of two when its coefficients are very large or small."""
    moduli = [abs(x) for x in p]
    moduli_max = max(moduli)
    moduli_min = min((m for m in moduli if m != 0), default=_FLT_MAX)
    moduli_min = min(moduli_min, _FLT_MAX)

    sc = _LOWER_SCALE / moduli_min
    if (sc <= 1.0 and moduli_max >= 10) or (sc > 1.0 and _FLT_MAX / sc >= moduli_max):
        if sc == 0:
            sc = _FLT_MIN
        exponent = int(math.log(sc) / _LOG2 + 0.5)
        factor = 2.0**exponent
        if factor != 1.0:
            return [x * factor for x in p]
    return p


def real_polynomial_roots(coefficients_decreasing):
    """Return the complex zeros of a real polynomial.

    Coefficients are given in decreasing powers. Zeros at the origin come
    first. If the iteration fails to converge, the zeros found so far are
    returned. Raises ValueError for an empty input, a degree above
    MAX_DEGREE or a zero leading coefficient.
    """
    op = [float(c) for c in coefficients_decreasing]
    if not op:
        raise ValueError("a polynomial needs at least one coefficient")
    degree = len(op) - 1
    if degree > MAX_DEGREE:
        raise ValueError(f"degree {degree} is greater than {MAX_DEGREE}")
    if op[0] == 0:
        raise ValueError("the leading coefficient is zero")

    roots = []
    n = degree
    while n > 0 and op[n] == 0:
        roots.append(complex(0.0, 0.0))
        n -= 1

    p = op[: n + 1]
    xx = math.sqrt(0.5)
    yy = -xx

    while n >= 1:
        if n == 1:
            roots.append(complex(-(p[1] / p[0]), 0.0))
            break
        if n == 2:
            sr, si, lr, li = solve_quadratic(p[0], p[1], p[2])
            roots.extend([complex(sr, si), complex(lr, li)])
            break

        p = _scaled(p)
        bound = _lower_bound(p)

        # Derivative as the initial K-polynomial, then five unshifted steps.
        k = [p[0]] + [(n - i) * p[i] / n for i in range(1, n)]
        aa = p[n]
        bb = p[n - 1]
        zerok = k[n - 1] == 0
        for _ in range(5):
            cc = k[n - 1]
            if zerok:
                k = [0.0] + k[:-1]
                zerok = k[n - 1] == 0
            else:
                t = -aa / cc
                k = [p[0]] + [t * k[j - 1] + p[j] for j in range(1, n)]
                zerok = abs(k[n - 1]) <= abs(bb) * EPSILON * 10.0

        saved_k = list(k)
        for shift in range(1, 21):
            # Rotate the shift point by 94 degrees on the circle of radius bound.
            xxx = -(_SIN_ROTATION * yy) + _COS_ROTATION * xx
            yy = _SIN_ROTATION * xx + _COS_ROTATION * yy
            xx = xxx
            sr = bound * xx

            zeros, qp = _fixed_shift(20 * shift, sr, bound, saved_k, p)
            if zeros:
                roots.extend(zeros)
                p = qp[: len(p) - len(zeros)]
                n = len(p) - 1
                break
        else:
            # No convergence after 20 shifts.
            break

    return roots


def find_last_nonzero_coefficient(coefficients):
    """Index of the last coefficient not below the smallest normal float, or -1."""
    values = np.asarray(coefficients, dtype=float).reshape(-1)
    nonzero = np.flatnonzero(np.abs(values) >= sys.float_info.min)
    return int(nonzero[-1]) if nonzero.size else -1


def find_roots_jenkins_traub(coefficients_increasing):
    """Return the complex roots of a polynomial given in increasing powers.

    Trailing zero coefficients are ignored; constant and all-zero
    polynomials have no roots.
    """
    values = np.asarray(coefficients_increasing, dtype=float).reshape(-1)
    last = find_last_nonzero_coefficient(values)
    if last == -1:
        return np.zeros(0, dtype=complex)
    decreasing = values[: last + 1][::-1]
    if decreasing.size < 2:
        return np.zeros(0, dtype=complex)
    return np.array(real_polynomial_roots(decreasing), dtype=complex)