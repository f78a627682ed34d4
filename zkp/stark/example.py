"""
STARK OOD 일관성 검사 데모
===========================

실행:
    python -m zkp.stark.example

흐름:
    1. 손으로 검산 가능한 예제 (p = 97, n = 2)
    2. 피보나치 AIR의 정직한 OOD 증명 조각 검증
    3. 채널 평가값을 변조한 증명 조각 검증 (실패해야 함)
"""

from zkp.stark.air import FibonacciAir, RecordedEvaluator
from zkp.stark.errors import ConsistencyViolation
from zkp.stark.field import StarkField, TinyField
from zkp.stark.ood import OodInputs, check_ood_consistency, evaluate_with_air, verify_ood
from zkp.stark.params import OodParameters
from zkp.stark.prover import honest_fragment


def worked_example(channel_value=31):
    """p = 97, n = 2, g = 96, z = 5 예제의 (평가기, 입력) 을 반환한다.

    div(z) = 24/6 = 4, 전이 결과 = 91/4 = 47, 경계 몫 = 33/4 = 81,
    최종 누적값 = 47 + 81 = 31 (mod 97).
    """
    F = TinyField
    params = OodParameters(trace_length=2, trace_width=1, num_assertions=1,
                           ce_blowup_factor=2, num_public_inputs=0, field=F)
    evaluator = RecordedEvaluator(
        params,
        transition_residues=[F(10)], transition_degrees=[1],
        boundary_residues=[F(5)], divisor_degrees=[0], steps=[0],
    )
    inputs = OodInputs(
        z=F(5), g_trace=F(96), frame=None, public_inputs=[],
        transition_coeffs=[(F(2), F(3))], boundary_coeffs=[(F(1), F(1))],
        channel_ood_evaluations=[F(channel_value)],
        ood_frame_constraint_evaluation=[F(10)],
    )
    return evaluator, inputs


def main():
    print("=" * 60)
    print("  STARK OOD Consistency Check Demo")
    print("=" * 60)

    # ── 1. 손 계산 예제 ──
    print("\n[1] 손 계산 예제 (p=97, n=2, g=96, z=5)")
    evaluator, inputs = worked_example()
    evaluation = evaluate_with_air(evaluator, inputs)
    t = evaluation.transition
    print(f"    전이 제수 div(z)       = {int(t.divisor)}")
    print(f"    전이 가중 잔차 합      = {int(t.total)}")
    print(f"    전이 결과              = {int(t.result)}")
    for term in evaluation.boundary.terms:
        print(f"    경계[{term.index}] 몫 (z-g^{term.step}) = {int(term.quotient)}")
    print(f"    제약 누적값            = {int(evaluation.constraint_result)}")
    print(f"    채널 결합값            = {int(evaluation.channel_result)}")
    print(f"    검사 결과: {'통과 ✓' if evaluation.satisfied else '실패 ✗'}")

    evaluator, wrong_inputs = worked_example(channel_value=30)
    try:
        check_ood_consistency(evaluator, wrong_inputs)
        print("    channel=30: 통과 (예상과 다름)")
    except ConsistencyViolation as exc:
        print(f"    channel=30: {exc}")

    # ── 2. 피보나치 AIR ──
    print("\n[2] 피보나치 AIR (n=8, blowup=2, p=3·2^30+1)")
    air = FibonacciAir(trace_length=8, ce_blowup_factor=2, field=StarkField)
    public_inputs = air.public_inputs_for(1, 1)
    print(f"    공개 입력: {[int(v) for v in public_inputs]}")
    fragment = honest_fragment(air, public_inputs, seed=12345)
    print(f"    z = {int(fragment.z)}")
    print(f"    채널 평가값: {[int(v) for v in fragment.channel_ood_evaluations]}")
    result = verify_ood(air, fragment)
    print(f"    검증 결과: {'성공 ✓' if result else '실패 ✗'}")

    # ── 3. 변조 ──
    print("\n[3] 채널 평가값 변조 (channel[0] + 1)")
    tampered = list(fragment.channel_ood_evaluations)
    tampered[0] = tampered[0] + 1
    wrong_result = verify_ood(air, fragment.replace(channel_ood_evaluations=tampered))
    print(f"    검증 결과: {'성공 ✓' if wrong_result else '실패 ✗ (예상대로 실패)'}")

    print("\n" + "=" * 60)
    if evaluation.satisfied and result and not wrong_result:
        print("  데모 완료: 모든 테스트 통과!")
    else:
        print("  데모 완료: 일부 테스트 실패")
    print("=" * 60)

    return result


if __name__ == "__main__":
    main()
