"""
AIR (Algebraic Intermediate Representation) 평가기
====================================================

OOD 검사가 사용하는 두 외부 협력자의 인터페이스와 구체적인 AIR 변형들.

**인터페이스**:
  - TransitionEvaluator.evaluate_transitions(frame)
        → (열별 전이 제약 잔차[W], 열별 제약 차수[W])
  - BoundaryEvaluator.evaluate_boundaries(frame, public_inputs, g_trace, z)
        → (단언별 잔차[A], 단언별 제수 차수[A], 단언별 고정 행 step[A])

**제약 작성 방식**:
  제약식은 +, -, * 만 사용하여 한 번만 작성한다. 같은 코드가
  검증자(유한체 원소 프레임)와 증명자(트레이스 다항식)에서 모두 동작한다.

**AIR 변형** (설정 시점에 AIRS 레지스트리에서 선택):
  - FibonacciAir: 폭 2, next₀ = cur₀ + cur₁, next₁ = cur₀ + 2·cur₁
  - SquareChainAir: 폭 1, next₀ = cur₀² + k  (2차 제약)

사용 예시:
    >>> air = get_air("fibonacci", 8, 2, StarkField)
    >>> residues, degrees = air.evaluate_transitions(frame)
"""

from abc import ABC, abstractmethod

from zkp.stark.divisors import SinglePoleDivisor
from zkp.stark.errors import ShapeMismatch
from zkp.stark.params import OodParameters


# ─────────────────────────────────────────────────────────────────────
# 평가 프레임
# ─────────────────────────────────────────────────────────────────────

class EvaluationFrame:
    """OOD 점에서 평가한 2×W 트레이스 프레임.

    current[i] = T_i(z), next[i] = T_i(g·z)
    """

    __slots__ = ("current", "next")

    def __init__(self, current, next):
        if len(current) != len(next):
            raise ShapeMismatch("frame.next", len(current), len(next))
        object.__setattr__(self, "current", tuple(current))
        object.__setattr__(self, "next", tuple(next))

    def __setattr__(self, name, value):
        raise AttributeError("EvaluationFrame은 변경할 수 없습니다")

    @classmethod
    def from_rows(cls, rows):
        """[[current...], [next...]] 형태의 2×W 행렬에서 생성한다."""
        if len(rows) != 2:
            raise ShapeMismatch("frame", 2, len(rows))
        return cls(rows[0], rows[1])

    @property
    def width(self):
        return len(self.current)

    def rows(self):
        return [list(self.current), list(self.next)]

    def __eq__(self, other):
        if not isinstance(other, EvaluationFrame):
            return False
        return self.current == other.current and self.next == other.next

    def __repr__(self):
        cur = [int(v) for v in self.current]
        nxt = [int(v) for v in self.next]
        return f"EvaluationFrame(current={cur}, next={nxt})"


class Assertion:
    """경계 단언: trace[column][step] == public_inputs[value_index]."""

    def __init__(self, column, step, value_index):
        self.column = column
        self.step = step
        self.value_index = value_index

    def __repr__(self):
        return f"Assertion(col={self.column}, step={self.step}, pub[{self.value_index}])"


# ─────────────────────────────────────────────────────────────────────
# 평가기 인터페이스
# ─────────────────────────────────────────────────────────────────────

class TransitionEvaluator(ABC):
    """프레임에서 열별 전이 제약 잔차와 차수를 계산한다."""

    @abstractmethod
    def evaluate_transitions(self, frame):
        """Returns: (residues[W], degrees[W])"""


class BoundaryEvaluator(ABC):
    """프레임과 공개 입력에서 경계 단언 잔차, 제수 차수, 고정 행을 계산한다."""

    @abstractmethod
    def evaluate_boundaries(self, frame, public_inputs, g_trace, z):
        """Returns: (residues[A], divisor_degrees[A], steps[A])"""


class Air(TransitionEvaluator, BoundaryEvaluator):
    """구체적인 제약 집합의 기반 클래스.

    서브클래스는 다음을 정의한다:
        name, width, constraint_degree, num_public_inputs
        transition_constraints(current, next)
        assertions()
        generate_trace(public_inputs)
    """

    name = None
    width = None
    constraint_degree = 1
    num_public_inputs = 0
    min_blowup = 1

    def __init__(self, trace_length, ce_blowup_factor, field):
        if ce_blowup_factor < self.min_blowup:
            raise ValueError(
                f"{self.name}: ce_blowup_factor는 {self.min_blowup} 이상이어야 합니다"
            )
        self.params = OodParameters(
            trace_length,
            self.width,
            len(self._assertions_for(trace_length)),
            ce_blowup_factor,
            self.num_public_inputs,
            field,
        )

    @property
    def field(self):
        return self.params.field

    @property
    def trace_length(self):
        return self.params.trace_length

    # ── 서브클래스 구현 ──

    def transition_constraints(self, current, next):
        raise NotImplementedError("서브클래스에서 구현하세요")

    def _assertions_for(self, trace_length):
        raise NotImplementedError("서브클래스에서 구현하세요")

    def generate_trace(self, public_inputs):
        """정직한 실행 트레이스를 열 단위로 반환한다: trace[column][step]."""
        raise NotImplementedError("서브클래스에서 구현하세요")

    # ── 공통 로직 ──

    def assertions(self):
        return self._assertions_for(self.trace_length)

    def transition_degrees(self):
        """전이 제약 잔차 다항식의 차수: constraint_degree × (n - 1)."""
        return [self.constraint_degree * (self.trace_length - 1)] * self.width

    def boundary_constraints(self, current, public_inputs):
        """단언별 잔차 current[column] - public_inputs[value_index]."""
        return [
            current[a.column] - self.field(int(public_inputs[a.value_index]))
            for a in self.assertions()
        ]

    def evaluate_transitions(self, frame):
        if frame is None:
            raise ShapeMismatch("frame", 2, 0)
        self.params.check_length("frame.current", frame.current, self.width)
        residues = self.transition_constraints(list(frame.current), list(frame.next))
        return residues, self.transition_degrees()

    def evaluate_boundaries(self, frame, public_inputs, g_trace, z):
        if frame is None:
            raise ShapeMismatch("frame", 2, 0)
        self.params.check_length("public_inputs", public_inputs, self.num_public_inputs)
        assertions = self.assertions()
        residues = self.boundary_constraints(list(frame.current), public_inputs)
        divisor_degrees = [SinglePoleDivisor.degree] * len(assertions)
        steps = [a.step for a in assertions]
        return residues, divisor_degrees, steps


# ─────────────────────────────────────────────────────────────────────
# AIR 변형
# ─────────────────────────────────────────────────────────────────────

class FibonacciAir(Air):
    """두 레지스터 피보나치 AIR.

    전이 (각 행 i < n-1):
        r₀[i+1] = r₀[i] + r₁[i]
        r₁[i+1] = r₀[i] + 2·r₁[i]
    한 행이 피보나치 수열의 두 항을 진행시킨다.

    공개 입력: [r₀[0], r₁[0], r₁[n-1]]
    """

    name = "fibonacci"
    width = 2
    constraint_degree = 1
    num_public_inputs = 3

    def transition_constraints(self, current, next):
        return [
            next[0] - (current[0] + current[1]),
            next[1] - (current[0] + current[1] * 2),
        ]

    def _assertions_for(self, trace_length):
        return [
            Assertion(0, 0, 0),
            Assertion(1, 0, 1),
            Assertion(1, trace_length - 1, 2),
        ]

    def generate_trace(self, public_inputs):
        r0 = [self.field(int(public_inputs[0]))]
        r1 = [self.field(int(public_inputs[1]))]
        for _ in range(self.trace_length - 1):
            a, b = r0[-1], r1[-1]
            r0.append(a + b)
            r1.append(a + b * 2)
        return [r0, r1]

    def public_inputs_for(self, first, second):
        """시작값 (first, second)에 대한 정직한 공개 입력."""
        trace = self.generate_trace([first, second, 0])
        return [self.field(first), self.field(second), trace[1][-1]]


class SquareChainAir(Air):
    """제곱 체인 AIR: x[i+1] = x[i]² + k.

    2차 제약이므로 ce_blowup_factor ≥ 2가 필요하다.
    공개 입력: [x[0], x[n-1]]
    """

    name = "square-chain"
    width = 1
    constraint_degree = 2
    num_public_inputs = 2
    min_blowup = 2

    def __init__(self, trace_length, ce_blowup_factor, field, k=1):
        super().__init__(trace_length, ce_blowup_factor, field)
        self.k = field(k)

    def transition_constraints(self, current, next):
        return [next[0] - (current[0] * current[0] + self.k)]

    def _assertions_for(self, trace_length):
        return [Assertion(0, 0, 0), Assertion(0, trace_length - 1, 1)]

    def generate_trace(self, public_inputs):
        xs = [self.field(int(public_inputs[0]))]
        for _ in range(self.trace_length - 1):
            xs.append(xs[-1] * xs[-1] + self.k)
        return [xs]

    def public_inputs_for(self, start):
        trace = self.generate_trace([start, 0])
        return [self.field(start), trace[0][-1]]


AIRS = {cls.name: cls for cls in (FibonacciAir, SquareChainAir)}


def get_air(name, trace_length, ce_blowup_factor, field):
    """이름으로 AIR 변형을 선택해 생성한다.

    Raises:
        ValueError: 등록되지 않은 AIR 이름
    """
    try:
        cls = AIRS[name]
    except KeyError:
        raise ValueError(f"알 수 없는 AIR입니다: {name} (가능: {sorted(AIRS)})") from None
    return cls(trace_length, ce_blowup_factor, field)


class RecordedEvaluator(TransitionEvaluator, BoundaryEvaluator):
    """이미 계산된 평가기 출력을 그대로 돌려주는 평가기.

    제약 집합 없이 잔차/차수/step 값만 주어진 경우 (손 계산 예제, 외부 도구가
    계산한 값 재검증)에 사용한다. 프레임은 사용하지 않는다.
    """

    def __init__(self, params, transition_residues, transition_degrees,
                 boundary_residues, divisor_degrees, steps):
        params.check_length("ood_frame_constraint_evaluation", transition_residues,
                            params.trace_width)
        params.check_length("transition_degrees", transition_degrees, params.trace_width)
        params.check_length("boundary_residues", boundary_residues, params.num_assertions)
        params.check_length("boundary_divisor_degrees", divisor_degrees, params.num_assertions)
        params.check_length("boundary_steps", steps, params.num_assertions)
        self.params = params
        self.transition_residues = list(transition_residues)
        self.transition_degrees = list(transition_degrees)
        self.boundary_residues = list(boundary_residues)
        self.divisor_degrees = list(divisor_degrees)
        self.steps = list(steps)

    def evaluate_transitions(self, frame):
        return list(self.transition_residues), list(self.transition_degrees)

    def evaluate_boundaries(self, frame, public_inputs, g_trace, z):
        return list(self.boundary_residues), list(self.divisor_degrees), list(self.steps)
