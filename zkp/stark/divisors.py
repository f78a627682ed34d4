"""
제수(Divisor) 평가
===================

**전이 제수** (TransitionDivisor):
    div(z) = (z^n - 1) / (z - g^(n-1))

  마지막 행을 제외한 모든 트레이스 도메인 점에서 0이 되는 소거 다항식의
  OOD 점 값이다.

**경계 제수** (단일 극점):
    div_j(z) = z - g^(step_j)

**나눗셈 = 곱셈 제약**:
  몫은 역원 곱셈으로 계산한 뒤 q · d == num 을 다시 확인한다.
  py_ecc는 0의 역원을 0으로 돌려주므로 분모가 0이면 먼저 DegenerateDivisor를 던진다.
"""

from abc import ABC, abstractmethod

from zkp.stark.errors import DegenerateDivisor
from zkp.stark.exponentiation import bit_width, exp_bounded, exp_fixed


def checked_divide(numerator, denominator, name):
    """numerator / denominator 를 계산하고 교차 곱셈으로 검증한다.

    Args:
        numerator: 피제수 (유한체 원소)
        denominator: 제수 (유한체 원소)
        name: 오류 메시지에 쓸 제수 이름

    Returns:
        몫 q (q · denominator == numerator)

    Raises:
        DegenerateDivisor: denominator == 0
    """
    if denominator == 0:
        raise DegenerateDivisor(name)
    field = type(denominator)
    quotient = numerator * (field(1) / denominator)
    if quotient * denominator != numerator:
        raise ArithmeticError(f"{name}: 몫 검증 실패")
    return quotient


def transition_divisor(z, g_trace, trace_length, bits=None):
    """전이 제수 (z^n - 1) / (z - g^(n-1)) 를 OOD 점에서 평가한다.

    Args:
        z: OOD 평가 점
        g_trace: 트레이스 도메인 생성자 g
        trace_length: 트레이스 길이 n
        bits: g^(n-1) 지수의 비트 폭 (기본값: n-1의 비트 폭)

    Raises:
        DegenerateDivisor: z가 트레이스 도메인 위의 점일 때
            (z = g^(n-1) 이면 분모가 0, 그 밖의 g^k 이면 z^n - 1 = 0)

    예시 (p=97, n=2, g=96, z=5):
        >>> transition_divisor(TinyField(5), TinyField(96), 2)  # (25-1)/(5-96) = 4
    """
    if bits is None:
        bits = bit_width(trace_length - 1)
    z_n = exp_fixed(z, trace_length)
    g_last = exp_bounded(g_trace, trace_length - 1, bits)
    numerator = z_n - 1
    div = checked_divide(numerator, z - g_last, "transition")
    if div == 0:
        raise DegenerateDivisor("transition")
    return div


# ─────────────────────────────────────────────────────────────────────
# 경계 제수
# ─────────────────────────────────────────────────────────────────────

class BoundaryDivisor(ABC):
    """경계 단언의 제수 인터페이스.

    현재는 단일 극점만 지원한다. 여러 행에 걸친 단언의 제수는
    같은 인터페이스 뒤에서 구현할 수 있다.
    """

    degree = None

    @abstractmethod
    def evaluate(self, z, g_trace, bits):
        """OOD 점 z에서 제수 값을 반환한다."""


class SinglePoleDivisor(BoundaryDivisor):
    """z - g^step."""

    degree = 1

    def __init__(self, step, name="boundary"):
        if step < 0:
            raise ValueError(f"step은 0 이상이어야 합니다: {step}")
        self.step = step
        self.name = name

    def evaluate(self, z, g_trace, bits):
        value = z - exp_bounded(g_trace, self.step, bits)
        if value == 0:
            raise DegenerateDivisor(self.name)
        return value

    def __repr__(self):
        return f"SinglePoleDivisor(z - g^{self.step})"
