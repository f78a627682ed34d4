"""
정직한 OOD 증명 조각 생성
==========================

검증자의 OOD 검사와 똑같은 가중치/제수로 합성 다항식 H(x)를 실제로 만들고,
그 열 평가값을 채널 평가값으로 내보낸다.

**합성 다항식**:
  H(x) = Σᵢ Cᵢ(x)·(c0ᵢ + c1ᵢ·x^adjᵢ) / D(x)
       + Σⱼ Bⱼ(x)·(b0ⱼ + b1ⱼ·x^adjⱼ) / (x - g^stepⱼ)

  Cᵢ(x) = 전이 제약을 트레이스 다항식 T(x), T(g·x)에 적용한 결과
  Bⱼ(x) = T_col(x) - 공개 입력값
  D(x)  = (x^n - 1) / (x - g^(n-1))

  모든 나눗셈은 나누어 떨어져야 한다. 트레이스가 제약을 만족하지 않으면 ValueError.

**열 분할**:
  H(x) = Σᵢ x^i · Hᵢ(x^W)  (i = 0..W-1)
  channel_ood_evaluations[i] = Hᵢ(z^W) 이면 Σ channel[i]·z^i = H(z).

사용 예시:
    >>> air = FibonacciAir(8, 2, StarkField)
    >>> inputs = honest_fragment(air, air.public_inputs_for(1, 1), seed=7)
    >>> verify_ood(air, inputs)  # True
"""

import random

from zkp.stark.air import EvaluationFrame
from zkp.stark.degree import boundary_adjustment_exponent, transition_adjustment_exponent
from zkp.stark.divisors import SinglePoleDivisor
from zkp.stark.field import get_root_of_unity
from zkp.stark.ood import OodInputs
from zkp.stark.polynomial import Polynomial


def _weight_polynomial(field, coeffs, exponent):
    """c0 + c1 · x^exponent."""
    c0, c1 = coeffs
    return Polynomial.monomial(field, exponent, c1) + c0


def composition_polynomial(air, trace_polys, public_inputs, transition_coeffs, boundary_coeffs):
    """트레이스 다항식으로부터 합성 다항식 H(x)를 만든다."""
    params = air.params
    field = params.field
    n = params.trace_length
    g = get_root_of_unity(field, n)
    x = Polynomial.monomial(field, 1)

    next_polys = [p.scale_variable(g) for p in trace_polys]
    constraints = air.transition_constraints(trace_polys, next_polys)
    numerator = Polynomial.zero(field)
    for c_poly, coeffs, degree in zip(constraints, transition_coeffs, air.transition_degrees()):
        exponent = transition_adjustment_exponent(params, degree)
        numerator = numerator + c_poly * _weight_polynomial(field, coeffs, exponent)

    # numerator / D(x) = numerator · (x - g^(n-1)) / (x^n - 1)
    vanishing = Polynomial.monomial(field, n) - 1
    composition = (numerator * (x - g ** (n - 1))).divide_exact(vanishing)

    boundary = air.boundary_constraints(trace_polys, public_inputs)
    for b_poly, coeffs, assertion in zip(boundary, boundary_coeffs, air.assertions()):
        quotient = b_poly.divide_exact(x - g ** assertion.step)
        exponent = boundary_adjustment_exponent(params, SinglePoleDivisor.degree)
        composition = composition + quotient * _weight_polynomial(field, coeffs, exponent)

    if composition.degree > params.max_degree:
        raise ValueError(
            f"합성 다항식 차수 {composition.degree}가 최대 차수 {params.max_degree}를 넘습니다"
        )
    return composition


def split_composition(composition, width):
    """H(x) = Σᵢ x^i · Hᵢ(x^W) 가 되도록 W개의 열 다항식으로 나눈다."""
    field = composition.field
    return [Polynomial(composition.coeffs[i::width] or [field(0)], field) for i in range(width)]


def prove_ood(air, public_inputs, z, transition_coeffs, boundary_coeffs):
    """정직한 트레이스로부터 OOD 검사 입력 전체를 만든다.

    Args:
        air: Air 인스턴스
        public_inputs: 공개 입력 × P
        z: OOD 평가 점 (트레이스 도메인 밖)
        transition_coeffs: [(c0, c1)] × W
        boundary_coeffs: [(b0, b1)] × A

    Returns:
        OodInputs

    Raises:
        ValueError: 트레이스가 제약이나 단언을 만족하지 않을 때
    """
    params = air.params
    params.check_pairs("transition_coeffs", transition_coeffs, params.trace_width)
    params.check_pairs("boundary_coeffs", boundary_coeffs, params.num_assertions)
    params.check_length("public_inputs", public_inputs, params.num_public_inputs)

    field = params.field
    g = get_root_of_unity(field, params.trace_length)
    trace = air.generate_trace(public_inputs)
    trace_polys = [Polynomial.from_evaluations(column, g) for column in trace]

    composition = composition_polynomial(air, trace_polys, public_inputs,
                                         transition_coeffs, boundary_coeffs)
    z_w = z ** params.trace_width
    channel = [h.evaluate(z_w) for h in split_composition(composition, params.trace_width)]

    frame = EvaluationFrame(
        [p.evaluate(z) for p in trace_polys],
        [p.evaluate(g * z) for p in trace_polys],
    )
    residues, _ = air.evaluate_transitions(frame)
    return OodInputs(z, g, frame, public_inputs, transition_coeffs, boundary_coeffs,
                     channel, residues)


def sample_challenges(air, seed=None):
    """트레이스 도메인 밖의 z와 계수 쌍을 시드 고정 난수로 뽑는다.

    Fiat-Shamir 트랜스크립트 대신 쓰는 데모/테스트용 도우미.

    Returns:
        (z, transition_coeffs, boundary_coeffs)
    """
    params = air.params
    field = params.field
    rng = random.Random(seed)

    def draw():
        return field(rng.randrange(1, field.field_modulus))

    z = draw()
    while z ** params.trace_length == 1:
        z = draw()
    transition_coeffs = [(draw(), draw()) for _ in range(params.trace_width)]
    boundary_coeffs = [(draw(), draw()) for _ in range(params.num_assertions)]
    return z, transition_coeffs, boundary_coeffs


def honest_fragment(air, public_inputs, seed=None):
    """sample_challenges + prove_ood."""
    z, transition_coeffs, boundary_coeffs = sample_challenges(air, seed)
    return prove_ood(air, public_inputs, z, transition_coeffs, boundary_coeffs)
