"""
차수 정규화 (DegreeNormalizer)
================================

모든 제약이 합성 다항식에 같은 차수(max_degree)로 기여하도록,
잔차에 z^adjExp 를 곱해 차수를 끌어올린다. Fiat-Shamir 계수 쌍 (c0, c1)과
한 번에 결합한다:

    weighted = c0 + c1 · z^adjExp

**전이**: adjExp = max_degree - degree[i]
**경계**: adjExp = max_degree - (n - 1) + divisor_degree[j]
"""

from zkp.stark.errors import DegreeOverflow
from zkp.stark.exponentiation import exp_bounded


def _checked_exponent(params, exponent, what):
    """0 ≤ exponent < 2^max_degree_bits 가 아니면 DegreeOverflow."""
    if exponent < 0:
        raise DegreeOverflow(f"{what}: 차수 보정 지수가 음수입니다 ({exponent})")
    if exponent >> params.max_degree_bits:
        raise DegreeOverflow(
            f"{what}: 차수 보정 지수 {exponent}가 {params.max_degree_bits}비트 범위를 벗어납니다"
        )
    return exponent


def transition_adjustment_exponent(params, degree):
    """전이 제약 열의 차수 보정 지수."""
    if degree < 0:
        raise DegreeOverflow(f"transition: 제약 차수는 0 이상이어야 합니다 ({degree})")
    return _checked_exponent(params, params.max_degree - degree, "transition")


def boundary_adjustment_exponent(params, divisor_degree):
    """경계 단언의 차수 보정 지수.

    -(n - 1) 항은 단일 극점 제수와 전이 제수의 차수 차이를 보정한다.
    """
    if divisor_degree < 0:
        raise DegreeOverflow(f"boundary: 제수 차수는 0 이상이어야 합니다 ({divisor_degree})")
    exponent = params.max_degree - (params.trace_length - 1) + divisor_degree
    return _checked_exponent(params, exponent, "boundary")


def weight(coeffs, z, exponent, bits):
    """(c0 + c1 · z^exponent, z^exponent) 를 반환한다."""
    c0, c1 = coeffs
    adjustment = exp_bounded(z, exponent, bits)
    return c0 + c1 * adjustment, adjustment
