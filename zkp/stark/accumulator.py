"""
전이/경계 누적 (TransitionAccumulator, BoundaryAccumulator)
=============================================================

**전이 접기** (열 i = 0..W-1):
    adjExp_i   = max_degree - degree[i]
    weighted_i = c0[i] + c1[i] · z^adjExp_i
    product_i  = weighted_i · residue[i]
    acc        = Σ product_i
    transition = acc / div(z)                 (검증: transition · div == acc)

**경계 접기** (단언 j = 0..A-1, 시드 = transition):
    adjExp_j   = max_degree - (n - 1) + divisor_degree[j]
    weighted_j = b0[j] + b1[j] · z^adjExp_j
    product_j  = weighted_j · residue[j]
    acc_j      = acc_{j-1} + product_j / (z - g^step_j)
                                              (검증: (acc_j - acc_{j-1}) · div_j == product_j)

**축약 방식**:
  - "sequential": 왼쪽부터 차례로 더한다
  - "pairwise": 이웃한 쌍끼리 더하는 트리 축약 (병렬화 가능한 형태)
  유한체 덧셈은 결합/교환 법칙을 만족하므로 두 방식의 결과는 같다.
  나눗셈 검증은 두 방식 모두 항목마다 수행한다.
"""

from zkp.stark.degree import (
    boundary_adjustment_exponent,
    transition_adjustment_exponent,
    weight,
)
from zkp.stark.divisors import SinglePoleDivisor, checked_divide, transition_divisor

REDUCTIONS = ("sequential", "pairwise")


def _check_reduction(reduction):
    if reduction not in REDUCTIONS:
        raise ValueError(f"알 수 없는 축약 방식입니다: {reduction} (가능: {REDUCTIONS})")


def pairwise_sum(values, zero):
    """트리 형태로 값을 더한다: ((v0+v1)+(v2+v3)) + ..."""
    level = list(values)
    if not level:
        return zero
    while len(level) > 1:
        paired = [level[i] + level[i + 1] for i in range(0, len(level) - 1, 2)]
        if len(level) % 2:
            paired.append(level[-1])
        level = paired
    return level[0]


class RunningAccumulator:
    """전이 접기와 경계 접기가 공유하는 누적값.

    fold 할 때마다 (new - previous) · divisor == product 를 확인한다.

    속성:
        value: 현재 누적값
        history: 각 단계 이후의 누적값 리스트
    """

    def __init__(self, seed):
        self.value = seed
        self.history = []

    def add(self, product):
        """acc ← acc + product."""
        self.value = self.value + product
        self.history.append(self.value)
        return self.value

    def fold(self, product, divisor, name):
        """acc ← acc + product / divisor. 이번 단계의 몫을 반환한다."""
        previous = self.value
        quotient = checked_divide(product, divisor, name)
        self.value = previous + quotient
        if (self.value - previous) * divisor != product:
            raise ArithmeticError(f"{name}: 누적 단계 검증 실패")
        self.history.append(self.value)
        return quotient


# ─────────────────────────────────────────────────────────────────────
# 전이 접기
# ─────────────────────────────────────────────────────────────────────

class TransitionTerm:
    """전이 제약 한 열의 중간값."""

    def __init__(self, column, residue, degree, adj_exponent, adjustment, weighted, product):
        self.column = column
        self.residue = residue
        self.degree = degree
        self.adj_exponent = adj_exponent
        self.adjustment = adjustment
        self.weighted = weighted
        self.product = product


class TransitionFold:
    """전이 접기 결과: 항목들, 합, 제수, 몫."""

    def __init__(self, terms, total, divisor, result):
        self.terms = terms
        self.total = total
        self.divisor = divisor
        self.result = result


def accumulate_transitions(params, z, g_trace, coeffs, residues, degrees,
                           reduction="sequential"):
    """모든 열의 가중 잔차를 하나의 값으로 접고 전이 제수로 나눈다.

    Args:
        params: OodParameters
        z: OOD 평가 점
        g_trace: 트레이스 도메인 생성자
        coeffs: [(c0, c1)] × W
        residues: TransitionEvaluator가 계산한 잔차 × W
        degrees: 열별 제약 차수 × W
        reduction: "sequential" 또는 "pairwise"

    Returns:
        TransitionFold

    Raises:
        ShapeMismatch, DegreeOverflow, DegenerateDivisor
    """
    _check_reduction(reduction)
    w = params.trace_width
    params.check_pairs("transition_coeffs", coeffs, w)
    params.check_length("ood_frame_constraint_evaluation", residues, w)
    params.check_length("transition_degrees", degrees, w)

    divisor = transition_divisor(z, g_trace, params.trace_length, params.trace_length_bits)

    terms = []
    for i in range(w):
        adj_exp = transition_adjustment_exponent(params, degrees[i])
        weighted, adjustment = weight(coeffs[i], z, adj_exp, params.max_degree_bits)
        product = weighted * residues[i]
        terms.append(TransitionTerm(i, residues[i], degrees[i], adj_exp,
                                    adjustment, weighted, product))

    zero = params.field(0)
    if reduction == "sequential":
        acc = RunningAccumulator(zero)
        for term in terms:
            acc.add(term.product)
        total = acc.value
    else:
        total = pairwise_sum([t.product for t in terms], zero)

    result = checked_divide(total, divisor, "transition")
    return TransitionFold(terms, total, divisor, result)


# ─────────────────────────────────────────────────────────────────────
# 경계 접기
# ─────────────────────────────────────────────────────────────────────

class BoundaryTerm:
    """경계 단언 하나의 중간값."""

    def __init__(self, index, residue, divisor_degree, step, adj_exponent,
                 adjustment, weighted, product, divisor, quotient):
        self.index = index
        self.residue = residue
        self.divisor_degree = divisor_degree
        self.step = step
        self.adj_exponent = adj_exponent
        self.adjustment = adjustment
        self.weighted = weighted
        self.product = product
        self.divisor = divisor
        self.quotient = quotient


class BoundaryFold:
    """경계 접기 결과: 시드, 항목들, 최종 누적값."""

    def __init__(self, seed, terms, result, history):
        self.seed = seed
        self.terms = terms
        self.result = result
        self.history = history


def accumulate_boundaries(params, z, g_trace, seed, coeffs, residues,
                          divisor_degrees, steps, reduction="sequential"):
    """전이 접기 결과를 시드로 경계 단언들을 이어서 접는다.

    Args:
        params: OodParameters
        z: OOD 평가 점
        g_trace: 트레이스 도메인 생성자
        seed: 전이 접기 결과 (acc_{-1})
        coeffs: [(b0, b1)] × A
        residues: 단언별 잔차 × A
        divisor_degrees: 단언별 제수 차수 × A
        steps: 단언별 고정 행 × A (0 ≤ step < trace_length)
        reduction: "sequential" 또는 "pairwise"

    Returns:
        BoundaryFold

    Raises:
        ShapeMismatch, DegreeOverflow, DegenerateDivisor
        ValueError: step이 트레이스 범위를 벗어날 때
    """
    _check_reduction(reduction)
    a = params.num_assertions
    params.check_pairs("boundary_coeffs", coeffs, a)
    params.check_length("boundary_residues", residues, a)
    params.check_length("boundary_divisor_degrees", divisor_degrees, a)
    params.check_length("boundary_steps", steps, a)

    staged = []
    for j in range(a):
        if not 0 <= steps[j] < params.trace_length:
            raise ValueError(f"boundary[{j}]: step {steps[j]}이 트레이스 범위를 벗어납니다")
        adj_exp = boundary_adjustment_exponent(params, divisor_degrees[j])
        weighted, adjustment = weight(coeffs[j], z, adj_exp, params.max_degree_bits)
        product = weighted * residues[j]
        pole = SinglePoleDivisor(steps[j], name=f"boundary[{j}]")
        divisor = pole.evaluate(z, g_trace, params.trace_length_bits)
        staged.append((j, adj_exp, adjustment, weighted, product, divisor))

    acc = RunningAccumulator(seed)
    terms = []
    if reduction == "sequential":
        for j, adj_exp, adjustment, weighted, product, divisor in staged:
            quotient = acc.fold(product, divisor, f"boundary[{j}]")
            terms.append(BoundaryTerm(j, residues[j], divisor_degrees[j], steps[j], adj_exp,
                                      adjustment, weighted, product, divisor, quotient))
        result = acc.value
    else:
        for j, adj_exp, adjustment, weighted, product, divisor in staged:
            quotient = checked_divide(product, divisor, f"boundary[{j}]")
            terms.append(BoundaryTerm(j, residues[j], divisor_degrees[j], steps[j], adj_exp,
                                      adjustment, weighted, product, divisor, quotient))
        result = seed + pairwise_sum([t.quotient for t in terms], params.field(0))
        acc.add(result - seed)

    return BoundaryFold(seed, terms, result, acc.history)
