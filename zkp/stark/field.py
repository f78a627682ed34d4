"""
STARK 기반 모듈: 유한체(Finite Field)
======================================

OOD(out-of-domain) 일관성 검사에서 사용되는 모든 값은 하나의 소수체 위의 원소다.
py_ecc의 FQ 클래스를 상속하여 모듈러 덧셈/뺄셈/곱셈/역원을 제공한다.

**제공되는 유한체**:
  - TinyField: p = 97. 손으로 검산 가능한 예제용 (p - 1 = 2^5 × 3)
  - StarkField: p = 3·2^30 + 1. STARK 예제용 (최대 2^30차 단위근)
  - FR: bn128 스칼라 필드 (최대 2^28차 단위근)

**주의**:
  py_ecc의 나눗셈은 0의 역원을 조용히 0으로 돌려준다.
  이 패키지는 나눗셈 전에 항상 분모를 직접 검사한다 (divisors.checked_divide).

사용 예시:
    >>> from zkp.stark.field import TinyField, get_root_of_unity
    >>> TinyField(5) * TinyField(20)      # TinyField(3)
    >>> get_root_of_unity(TinyField, 2)   # TinyField(96), 즉 -1
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체 클래스
# ─────────────────────────────────────────────────────────────────────

class TinyField(FQ):
    """p = 97 위의 유한체 원소.

    5는 F₉₇*의 원시 원소이며, p - 1 = 96 = 2^5 × 3 이므로
    최대 32차 단위근까지 지원한다.
    """
    field_modulus = 97
    MULTIPLICATIVE_GENERATOR = 5
    TWO_ADICITY = 5


class StarkField(FQ):
    """p = 3·2^30 + 1 = 3221225473 위의 유한체 원소.

    STARK 교재(stark101)에서 사용하는 소수. 생성자 g = 5.
    """
    field_modulus = 3 * 2 ** 30 + 1
    MULTIPLICATIVE_GENERATOR = 5
    TWO_ADICITY = 30


class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    p - 1 = 2^28 × m (m은 홀수), 생성자 g = 5.
    """
    field_modulus = bn128.curve_order
    MULTIPLICATIVE_GENERATOR = 5
    TWO_ADICITY = 28


FIELDS = {cls.field_modulus: cls for cls in (TinyField, StarkField, FR)}


def field_for_modulus(modulus):
    """모듈러스에 해당하는 유한체 클래스를 반환한다.

    Raises:
        ValueError: 등록되지 않은 모듈러스
    """
    try:
        return FIELDS[int(modulus)]
    except KeyError:
        raise ValueError(f"등록되지 않은 모듈러스입니다: {modulus}") from None


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(field, n):
    """n차 원시 단위근 ω를 반환한다.

    ω = g^((p-1)/n) 이면 ω^n = g^(p-1) = 1 (페르마 소정리).
    STARK에서는 이 값이 트레이스 도메인 생성자 g_trace 가 된다.

    Args:
        field: 유한체 클래스 (TinyField, StarkField, FR)
        n: 단위근의 차수 (2의 거듭제곱, ≤ 2^TWO_ADICITY)

    Returns:
        field: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 필드가 지원하지 않을 때

    예시:
        >>> omega = get_root_of_unity(StarkField, 8)
        >>> omega ** 8 == StarkField(1)  # True
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << field.TWO_ADICITY):
        raise ValueError(f"n은 2^{field.TWO_ADICITY} 이하여야 합니다: {n}")
    if n == 1:
        return field(1)
    g = field(field.MULTIPLICATIVE_GENERATOR)
    return g ** ((field.field_modulus - 1) // n)


def get_roots_of_unity(field, n):
    """트레이스 도메인 [1, ω, ω², ..., ω^(n-1)]을 반환한다."""
    omega = get_root_of_unity(field, n)
    roots = []
    current = field(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
