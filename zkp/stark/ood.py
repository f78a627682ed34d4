"""
STARK OOD 일관성 검사
======================

증명자가 보낸 합성 다항식 평가값이 OOD 점 z에서 AIR 제약과 대수적으로
일치하는지 확인한다.

**검증 과정** (단방향 비순환 계산):
  1. 입력 배열 길이 검사 (ShapeMismatch)
  2. 전이 제수 div(z) = (z^n - 1) / (z - g^(n-1))
  3. 전이 접기: Σ (c0 + c1·z^adjExp)·residue / div(z)
  4. 경계 접기: 전이 결과에 이어 Σ (b0 + b1·z^adjExp)·residue / (z - g^step)
  5. 채널 결합: Σ channel[i]·z^i
  6. 동등성 검사: 채널 결합값 == 경계 접기 최종값

**결과**:
  - verify_ood: True / False
  - check_ood_consistency: 통과하면 OodEvaluation, 실패하면 ConsistencyViolation
  두 함수 모두 DegenerateDivisor / ShapeMismatch 는 그대로 전달한다.

사용 예시:
    >>> from zkp.stark.ood import OodInputs, verify_ood
    >>> result = verify_ood(air, inputs)
"""

from zkp.stark.accumulator import accumulate_boundaries, accumulate_transitions
from zkp.stark.air import EvaluationFrame
from zkp.stark.channel import combine_channel
from zkp.stark.errors import ConsistencyViolation


class OodInputs:
    """OOD 검사 입력 묶음.

    속성:
        z: OOD 평가 점
        g_trace: 트레이스 도메인 생성자
        frame: EvaluationFrame (T(z), T(g·z)). 기록된 평가값만 검사할 때는 None
        public_inputs: 공개 입력 × P
        transition_coeffs: [(c0, c1)] × W
        boundary_coeffs: [(b0, b1)] × A
        channel_ood_evaluations: 합성 다항식 열 평가값 × W
        ood_frame_constraint_evaluation: 전이 제약 잔차 × W (없으면 AIR로 계산)
    """

    def __init__(self, z, g_trace, frame, public_inputs, transition_coeffs,
                 boundary_coeffs, channel_ood_evaluations,
                 ood_frame_constraint_evaluation=None):
        if frame is not None and not isinstance(frame, EvaluationFrame):
            frame = EvaluationFrame.from_rows(frame)
        self.z = z
        self.g_trace = g_trace
        self.frame = frame
        self.public_inputs = list(public_inputs)
        self.transition_coeffs = [tuple(c) for c in transition_coeffs]
        self.boundary_coeffs = [tuple(c) for c in boundary_coeffs]
        self.channel_ood_evaluations = list(channel_ood_evaluations)
        self.ood_frame_constraint_evaluation = (
            None if ood_frame_constraint_evaluation is None
            else list(ood_frame_constraint_evaluation)
        )

    def replace(self, **changes):
        """일부 필드를 바꾼 사본을 반환한다 (변조 테스트용)."""
        fields = dict(self.__dict__)
        fields.update(changes)
        return OodInputs(**fields)


class OodEvaluation:
    """OOD 검사의 모든 중간값.

    속성:
        transition: TransitionFold
        boundary: BoundaryFold
        channel_result: 채널 결합값
    """

    def __init__(self, transition, boundary, channel_result):
        self.transition = transition
        self.boundary = boundary
        self.channel_result = channel_result

    @property
    def constraint_result(self):
        """경계 접기 최종 누적값."""
        return self.boundary.result

    @property
    def satisfied(self):
        return self.channel_result == self.constraint_result


def evaluate_ood(params, z, g_trace, transition_coeffs, transition_residues,
                 transition_degrees, boundary_coeffs, boundary_residues,
                 divisor_degrees, steps, channel_ood_evaluations,
                 reduction="sequential"):
    """이미 평가된 잔차로부터 OOD 계산 전체를 수행한다.

    Returns:
        OodEvaluation (동등성 여부는 검사하지 않는다)
    """
    params.check_shapes(transition_coeffs, boundary_coeffs, channel_ood_evaluations)
    transition = accumulate_transitions(
        params, z, g_trace, transition_coeffs, transition_residues,
        transition_degrees, reduction,
    )
    boundary = accumulate_boundaries(
        params, z, g_trace, transition.result, boundary_coeffs,
        boundary_residues, divisor_degrees, steps, reduction,
    )
    channel_result = combine_channel(channel_ood_evaluations, z)
    return OodEvaluation(transition, boundary, channel_result)


def evaluate_with_air(air, inputs, reduction="sequential"):
    """AIR 평가기를 호출해 잔차를 구한 뒤 evaluate_ood 를 수행한다.

    inputs.ood_frame_constraint_evaluation 이 주어지면 전이 평가기의 잔차 대신
    그 값을 사용한다 (차수는 평가기에서 가져온다).
    """
    params = air.params
    params.check_shapes(inputs.transition_coeffs, inputs.boundary_coeffs,
                        inputs.channel_ood_evaluations, inputs.frame,
                        inputs.public_inputs)
    residues, degrees = air.evaluate_transitions(inputs.frame)
    if inputs.ood_frame_constraint_evaluation is not None:
        residues = inputs.ood_frame_constraint_evaluation
    b_residues, divisor_degrees, steps = air.evaluate_boundaries(
        inputs.frame, inputs.public_inputs, inputs.g_trace, inputs.z,
    )
    return evaluate_ood(
        params, inputs.z, inputs.g_trace,
        inputs.transition_coeffs, residues, degrees,
        inputs.boundary_coeffs, b_residues, divisor_degrees, steps,
        inputs.channel_ood_evaluations, reduction,
    )


def ensure_consistent(evaluation):
    """채널 결합값과 제약 누적값이 다르면 ConsistencyViolation."""
    if not evaluation.satisfied:
        raise ConsistencyViolation(evaluation.constraint_result, evaluation.channel_result)
    return evaluation


def check_ood_consistency(air, inputs, reduction="sequential"):
    """OOD 일관성을 검사한다.

    Returns:
        OodEvaluation

    Raises:
        ConsistencyViolation: 채널 결합값 ≠ 제약 누적값
        DegenerateDivisor: z가 트레이스 도메인 위의 점
        ShapeMismatch: 입력 배열 길이 불일치
    """
    return ensure_consistent(evaluate_with_air(air, inputs, reduction))


def verify_ood(air, inputs, reduction="sequential"):
    """OOD 일관성 검사 결과를 bool로 반환한다.

    Returns:
        bool: 검증 성공 여부
    """
    try:
        check_ood_consistency(air, inputs, reduction)
    except ConsistencyViolation:
        return False
    return True
