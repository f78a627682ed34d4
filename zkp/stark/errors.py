"""
OOD 일관성 검사 예외
=====================

  - ConsistencyViolation: 두 접기(fold) 결과가 다르다 → 증명 거부
  - DegenerateDivisor: z가 트레이스 도메인 위의 점이라 제수가 0이 된다
  - ShapeMismatch: 입력 배열 길이가 파라미터와 맞지 않는다
  - DegreeOverflow: 제약 차수가 합성 다항식 차수 상한을 넘는다
"""


class OodCheckError(Exception):
    """OOD 일관성 검사에서 발생하는 모든 예외의 기반 클래스."""


class ConsistencyViolation(OodCheckError):
    """채널 평가값 결합 결과가 제약 누적 결과와 다르다."""

    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"OOD 일관성 검사 실패: 제약 누적값 {int(expected)} ≠ 채널 결합값 {int(actual)}"
        )


class DegenerateDivisor(OodCheckError, ZeroDivisionError):
    """제수(소거 다항식 또는 경계 극점)가 OOD 점에서 0이다."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"{name} 제수가 0입니다: OOD 점이 트레이스 도메인 위에 있습니다")


class ShapeMismatch(OodCheckError, ValueError):
    """입력 배열의 길이가 기대값과 다르다."""

    def __init__(self, name, expected, actual):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"{name}: 길이 {expected}이어야 하지만 {actual}입니다")


class DegreeOverflow(OodCheckError, ValueError):
    """차수 보정 지수가 음수가 된다 (제약 차수 > 합성 다항식 최대 차수)."""
