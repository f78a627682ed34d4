"""
OOD 일관성 검사 테스트: ood.py

손 계산 예제, 정직한 증명 조각의 수락, 변조 민감도, 퇴화 제수, 배열 길이 검사.
"""
import pytest

from zkp.stark.air import EvaluationFrame, FibonacciAir, RecordedEvaluator, SquareChainAir
from zkp.stark.errors import (
    ConsistencyViolation, DegenerateDivisor, DegreeOverflow, OodCheckError, ShapeMismatch,
)
from zkp.stark.example import worked_example
from zkp.stark.field import StarkField, TinyField
from zkp.stark.ood import check_ood_consistency, evaluate_with_air, verify_ood
from zkp.stark.prover import honest_fragment


def _bump(values, index):
    values = list(values)
    values[index] = values[index] + 1
    return values


# =====================================================================
# 손 계산 예제 (p = 97)
# =====================================================================

class TestWorkedExample:
    def test_intermediate_values(self):
        evaluator, inputs = worked_example()
        evaluation = evaluate_with_air(evaluator, inputs)
        assert evaluation.transition.divisor == TinyField(4)
        assert evaluation.transition.result == TinyField(47)
        assert evaluation.boundary.terms[0].quotient == TinyField(81)
        assert evaluation.constraint_result == TinyField(31)
        assert evaluation.channel_result == TinyField(31)
        assert evaluation.satisfied

    def test_passes(self):
        evaluator, inputs = worked_example(31)
        assert verify_ood(evaluator, inputs) is True

    def test_violation(self):
        evaluator, inputs = worked_example(30)
        with pytest.raises(ConsistencyViolation) as exc_info:
            check_ood_consistency(evaluator, inputs)
        assert exc_info.value.expected == TinyField(31)
        assert exc_info.value.actual == TinyField(30)

    @pytest.mark.parametrize("channel_value", [0, 1, 30, 32, 96])
    def test_only_31_passes(self, channel_value):
        evaluator, inputs = worked_example(channel_value)
        assert verify_ood(evaluator, inputs) is False

    def test_pairwise_reduction(self):
        evaluator, inputs = worked_example()
        evaluation = evaluate_with_air(evaluator, inputs, reduction="pairwise")
        assert evaluation.constraint_result == TinyField(31)


def _recorded(**changes):
    """손 계산 예제의 평가기 출력을 일부 바꾼 RecordedEvaluator."""
    evaluator, _ = worked_example()
    outputs = {
        "transition_residues": evaluator.transition_residues,
        "transition_degrees": evaluator.transition_degrees,
        "boundary_residues": evaluator.boundary_residues,
        "divisor_degrees": evaluator.divisor_degrees,
        "steps": evaluator.steps,
    }
    outputs.update(changes)
    return RecordedEvaluator(evaluator.params, **outputs)


class TestRecordedOutputs:
    def test_unchanged_passes(self):
        _, inputs = worked_example()
        assert verify_ood(_recorded(), inputs)

    def test_boundary_residue(self):
        _, inputs = worked_example()
        assert not verify_ood(_recorded(boundary_residues=[TinyField(6)]), inputs)

    def test_transition_residue(self):
        _, inputs = worked_example()
        assert not verify_ood(_recorded(), inputs.replace(
            ood_frame_constraint_evaluation=[TinyField(11)]))

    def test_recorded_residue_used_without_override(self):
        _, inputs = worked_example()
        inputs = inputs.replace(ood_frame_constraint_evaluation=None)
        assert verify_ood(_recorded(), inputs)
        assert not verify_ood(_recorded(transition_residues=[TinyField(11)]), inputs)

    def test_divisor_degree_too_wide(self):
        """3 - 1 + 6 = 8 은 3비트에 들어가지 않는다."""
        _, inputs = worked_example()
        with pytest.raises(DegreeOverflow) as exc_info:
            check_ood_consistency(_recorded(divisor_degrees=[6]), inputs)
        assert isinstance(exc_info.value, OodCheckError)

    def test_negative_transition_degree(self):
        _, inputs = worked_example()
        with pytest.raises(DegreeOverflow):
            verify_ood(_recorded(transition_degrees=[-1]), inputs)


# =====================================================================
# 정직한 증명 조각 수락
# =====================================================================

class TestHonestAcceptance:
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_fibonacci(self, fib_air, seed):
        fragment = honest_fragment(fib_air, fib_air.public_inputs_for(1, 1), seed=seed)
        assert verify_ood(fib_air, fragment)

    @pytest.mark.parametrize("seed", [1, 2])
    def test_square_chain(self, seed):
        air = SquareChainAir(trace_length=8, ce_blowup_factor=2, field=StarkField)
        fragment = honest_fragment(air, air.public_inputs_for(3), seed=seed)
        assert verify_ood(air, fragment)

    def test_tiny_field(self):
        air = FibonacciAir(trace_length=4, ce_blowup_factor=2, field=TinyField)
        fragment = honest_fragment(air, air.public_inputs_for(2, 5), seed=11)
        assert verify_ood(air, fragment)

    def test_larger_blowup(self):
        air = SquareChainAir(trace_length=4, ce_blowup_factor=4, field=StarkField, k=7)
        fragment = honest_fragment(air, air.public_inputs_for(2), seed=5)
        assert verify_ood(air, fragment)

    def test_residues_from_frame(self, fib_air, fib_fragment):
        """잔차를 생략하면 프레임에서 다시 계산해도 같은 결과."""
        inputs = fib_fragment.replace(ood_frame_constraint_evaluation=None)
        assert verify_ood(fib_air, inputs)

    def test_reductions_agree(self, fib_air, fib_fragment):
        sequential = evaluate_with_air(fib_air, fib_fragment, "sequential")
        pairwise = evaluate_with_air(fib_air, fib_fragment, "pairwise")
        assert sequential.constraint_result == pairwise.constraint_result
        assert pairwise.satisfied

    def test_returns_evaluation(self, fib_air, fib_fragment):
        evaluation = check_ood_consistency(fib_air, fib_fragment)
        assert len(evaluation.transition.terms) == 2
        assert len(evaluation.boundary.terms) == 3
        assert evaluation.boundary.seed == evaluation.transition.result


# =====================================================================
# 변조 민감도
# =====================================================================

class TestTamperSensitivity:
    @pytest.mark.parametrize("index", [0, 1])
    def test_channel(self, fib_air, fib_fragment, index):
        channel = _bump(fib_fragment.channel_ood_evaluations, index)
        assert not verify_ood(fib_air, fib_fragment.replace(channel_ood_evaluations=channel))

    @pytest.mark.parametrize("index", [0, 1])
    def test_transition_residue(self, fib_air, fib_fragment, index):
        residues = _bump(fib_fragment.ood_frame_constraint_evaluation, index)
        inputs = fib_fragment.replace(ood_frame_constraint_evaluation=residues)
        assert not verify_ood(fib_air, inputs)

    @pytest.mark.parametrize("which", [0, 1])
    def test_transition_coeff(self, fib_air, fib_fragment, which):
        coeffs = list(fib_fragment.transition_coeffs)
        pair = list(coeffs[0])
        pair[which] = pair[which] + 1
        coeffs[0] = tuple(pair)
        assert not verify_ood(fib_air, fib_fragment.replace(transition_coeffs=coeffs))

    @pytest.mark.parametrize("which", [0, 1])
    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_boundary_coeff(self, fib_air, fib_fragment, index, which):
        coeffs = list(fib_fragment.boundary_coeffs)
        pair = list(coeffs[index])
        pair[which] = pair[which] + 1
        coeffs[index] = tuple(pair)
        assert not verify_ood(fib_air, fib_fragment.replace(boundary_coeffs=coeffs))

    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_public_input(self, fib_air, fib_fragment, index):
        public_inputs = _bump(fib_fragment.public_inputs, index)
        assert not verify_ood(fib_air, fib_fragment.replace(public_inputs=public_inputs))

    def test_frame_next(self, fib_air, fib_fragment):
        frame = fib_fragment.frame
        tampered = EvaluationFrame(frame.current, _bump(frame.next, 0))
        inputs = fib_fragment.replace(frame=tampered, ood_frame_constraint_evaluation=None)
        assert not verify_ood(fib_air, inputs)

    def test_z(self, fib_air, fib_fragment):
        assert not verify_ood(fib_air, fib_fragment.replace(z=fib_fragment.z + 1))

    def test_g_trace(self, fib_air, fib_fragment):
        g = fib_fragment.g_trace
        assert not verify_ood(fib_air, fib_fragment.replace(g_trace=g * g))


# =====================================================================
# 퇴화 제수
# =====================================================================

class TestDegenerateDivisor:
    @pytest.mark.parametrize("k", range(8))
    def test_z_on_trace_domain(self, fib_air, fib_fragment, k):
        z = fib_fragment.g_trace ** k
        with pytest.raises(DegenerateDivisor):
            check_ood_consistency(fib_air, fib_fragment.replace(z=z))

    def test_verify_does_not_swallow(self, fib_air, fib_fragment):
        with pytest.raises(DegenerateDivisor):
            verify_ood(fib_air, fib_fragment.replace(z=StarkField(1)))


# =====================================================================
# 배열 길이 검사
# =====================================================================

class TestShapeMismatch:
    def test_channel_length(self, fib_air, fib_fragment):
        channel = fib_fragment.channel_ood_evaluations + [StarkField(1)]
        with pytest.raises(ShapeMismatch) as exc_info:
            verify_ood(fib_air, fib_fragment.replace(channel_ood_evaluations=channel))
        assert exc_info.value.name == "channel_ood_evaluations"

    def test_transition_coeffs(self, fib_air, fib_fragment):
        coeffs = fib_fragment.transition_coeffs[:1]
        with pytest.raises(ShapeMismatch):
            verify_ood(fib_air, fib_fragment.replace(transition_coeffs=coeffs))

    def test_boundary_coeffs(self, fib_air, fib_fragment):
        coeffs = fib_fragment.boundary_coeffs + [(StarkField(1), StarkField(1))]
        with pytest.raises(ShapeMismatch):
            verify_ood(fib_air, fib_fragment.replace(boundary_coeffs=coeffs))

    def test_public_inputs(self, fib_air, fib_fragment):
        with pytest.raises(ShapeMismatch):
            verify_ood(fib_air, fib_fragment.replace(public_inputs=fib_fragment.public_inputs[:2]))

    def test_frame_width(self, fib_air, fib_fragment):
        one = StarkField(1)
        frame = EvaluationFrame([one, one, one], [one, one, one])
        with pytest.raises(ShapeMismatch):
            verify_ood(fib_air, fib_fragment.replace(frame=frame))

    def test_missing_frame(self, fib_air, fib_fragment):
        with pytest.raises(ShapeMismatch):
            verify_ood(fib_air, fib_fragment.replace(frame=None))

    def test_residue_length(self, fib_air, fib_fragment):
        residues = fib_fragment.ood_frame_constraint_evaluation[:1]
        with pytest.raises(ShapeMismatch):
            verify_ood(fib_air, fib_fragment.replace(ood_frame_constraint_evaluation=residues))


class TestEvaluationFrame:
    def test_rows(self):
        frame = EvaluationFrame.from_rows([[TinyField(1), TinyField(2)],
                                           [TinyField(3), TinyField(4)]])
        assert frame.width == 2
        assert frame.next == (TinyField(3), TinyField(4))

    def test_unequal_rows(self):
        with pytest.raises(ShapeMismatch):
            EvaluationFrame([TinyField(1)], [TinyField(1), TinyField(2)])

    def test_immutable(self):
        frame = EvaluationFrame([TinyField(1)], [TinyField(2)])
        with pytest.raises(AttributeError):
            frame.current = (TinyField(5),)
