"""
OOD 검사 파라미터
==================

원래 회로 컴파일 시점에 고정되던 값들 (trace_length, trace_width,
num_assertions, ce_blowup_factor, num_public_inputs)을 실행 시점 설정으로
받아 생성 시 한 번 검증한다. 모든 배열 길이 검사도 여기서 수행한다.
"""

from zkp.stark.errors import ShapeMismatch
from zkp.stark.exponentiation import bit_width
from zkp.stark.field import field_for_modulus


def _is_power_of_2(n):
    return n >= 1 and (n & (n - 1)) == 0


class OodParameters:
    """OOD 검사의 고정 크기 파라미터.

    속성:
        trace_length: 트레이스 행 수 n (2의 거듭제곱, ≥ 2)
        trace_width: 트레이스 열 수 W (= 전이 제약 수 = 채널 평가값 수)
        num_assertions: 경계 단언 수 A
        ce_blowup_factor: 합성 다항식 blowup (2의 거듭제곱)
        num_public_inputs: 공개 입력 수 P
        field: 유한체 클래스

    예시:
        >>> params = OodParameters(2, 1, 1, 2, 0, TinyField)
        >>> params.max_degree  # 2·2 - 1 = 3
    """

    def __init__(self, trace_length, trace_width, num_assertions,
                 ce_blowup_factor, num_public_inputs, field):
        if trace_length < 2 or not _is_power_of_2(trace_length):
            raise ValueError(f"trace_length는 2 이상의 2의 거듭제곱이어야 합니다: {trace_length}")
        if trace_width < 1:
            raise ValueError(f"trace_width는 1 이상이어야 합니다: {trace_width}")
        if num_assertions < 0 or num_public_inputs < 0:
            raise ValueError("num_assertions, num_public_inputs는 0 이상이어야 합니다")
        if not _is_power_of_2(ce_blowup_factor):
            raise ValueError(f"ce_blowup_factor는 2의 거듭제곱이어야 합니다: {ce_blowup_factor}")
        self.trace_length = trace_length
        self.trace_width = trace_width
        self.num_assertions = num_assertions
        self.ce_blowup_factor = ce_blowup_factor
        self.num_public_inputs = num_public_inputs
        self.field = field

    @property
    def max_degree(self):
        """합성 다항식의 최대 허용 차수: trace_length × ce_blowup_factor - 1."""
        return self.trace_length * self.ce_blowup_factor - 1

    @property
    def trace_length_bits(self):
        """g^step 계산에 쓰는 비트 폭 (step < trace_length)."""
        return bit_width(self.trace_length - 1)

    @property
    def max_degree_bits(self):
        """z^adjExp 계산에 쓰는 비트 폭.

        경계 보정 지수는 최대 max_degree + 1 까지 커질 수 있다 (단일 극점).
        """
        return bit_width(self.max_degree + 1)

    # ── 배열 길이 검사 ──

    @staticmethod
    def check_length(name, values, expected):
        """len(values) == expected 가 아니면 ShapeMismatch."""
        if len(values) != expected:
            raise ShapeMismatch(name, expected, len(values))

    def check_pairs(self, name, pairs, expected):
        """(c0, c1) 쌍의 리스트인지 검사한다."""
        self.check_length(name, pairs, expected)
        for i, pair in enumerate(pairs):
            self.check_length(f"{name}[{i}]", pair, 2)

    def check_shapes(self, transition_coeffs, boundary_coeffs,
                     channel_ood_evaluations, frame=None, public_inputs=None):
        """OOD 검사 입력 배열의 길이를 진입 시 한 번에 검사한다."""
        w, a = self.trace_width, self.num_assertions
        self.check_pairs("transition_coeffs", transition_coeffs, w)
        self.check_pairs("boundary_coeffs", boundary_coeffs, a)
        self.check_length("channel_ood_evaluations", channel_ood_evaluations, w)
        if frame is not None:
            self.check_length("frame.current", frame.current, w)
            self.check_length("frame.next", frame.next, w)
        if public_inputs is not None:
            self.check_length("public_inputs", public_inputs, self.num_public_inputs)

    # ── TinyDB 저장용 ──

    def to_dict(self):
        return {
            "trace_length": self.trace_length,
            "trace_width": self.trace_width,
            "num_assertions": self.num_assertions,
            "ce_blowup_factor": self.ce_blowup_factor,
            "num_public_inputs": self.num_public_inputs,
            "modulus": str(self.field.field_modulus),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data["trace_length"],
            data["trace_width"],
            data["num_assertions"],
            data["ce_blowup_factor"],
            data["num_public_inputs"],
            field_for_modulus(int(data["modulus"])),
        )

    def __repr__(self):
        return (f"OodParameters(n={self.trace_length}, W={self.trace_width}, "
                f"A={self.num_assertions}, blowup={self.ce_blowup_factor}, "
                f"P={self.num_public_inputs}, p={self.field.field_modulus})")
