"""
유한체 거듭제곱 (FieldExponentiation)
======================================

OOD 검사에서 필요한 모든 x^n 계산은 이 모듈의 두 함수를 거친다.

  - exp_fixed: 미리 정해진(고정) 지수. 예: z^trace_length
  - exp_bounded: 실행 시점에 정해지는 지수. 비트 폭의 상한이 알려져 있다.
    예: z^adjExp, g^step

두 함수 모두 square-and-multiply 방식이다. exp_bounded는 지수 값과 상관없이
항상 정확히 `bits`개의 비트를 순회한다.
"""


def bit_width(n):
    """n을 표현하는 데 필요한 비트 수 (최소 1)."""
    if n < 0:
        raise ValueError(f"음수의 비트 폭은 정의되지 않습니다: {n}")
    return max(1, int(n).bit_length())


def exp_fixed(base, exponent):
    """고정 지수 거듭제곱 base^exponent.

    지수의 최상위 비트부터 제곱-곱셈을 수행한다.

    Args:
        base: 유한체 원소
        exponent: 0 이상의 정수

    Returns:
        base^exponent (base와 같은 유한체)

    예시:
        >>> exp_fixed(TinyField(5), 2)  # TinyField(25)
    """
    if exponent < 0:
        raise ValueError(f"지수는 0 이상이어야 합니다: {exponent}")
    result = type(base)(1)
    for bit in bin(exponent)[2:]:
        result = result * result
        if bit == "1":
            result = result * base
    return result


def exp_bounded(base, exponent, bits):
    """비트 폭이 제한된 가변 지수 거듭제곱 base^exponent.

    지수를 `bits`비트로 보고 최하위 비트부터 처리한다:
        acc ← 1, sq ← base
        for i in 0..bits-1:  if bit_i: acc ← acc·sq;  sq ← sq²

    Args:
        base: 유한체 원소
        exponent: 0 ≤ exponent < 2^bits
        bits: 지수의 비트 폭 상한

    Raises:
        ValueError: 지수가 음수이거나 비트 폭을 초과할 때
    """
    if bits < 1:
        raise ValueError(f"비트 폭은 1 이상이어야 합니다: {bits}")
    if exponent < 0 or exponent >> bits:
        raise ValueError(f"지수 {exponent}가 {bits}비트 범위를 벗어납니다")
    result = type(base)(1)
    square = base
    for i in range(bits):
        if (exponent >> i) & 1:
            result = result * square
        square = square * square
    return result
