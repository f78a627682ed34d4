"""
STARK OOD Flask Blueprint
==========================

OOD 일관성 검사 페이지 1개와 POST 엔드포인트 5개.
  - 손 계산 예제 로드
  - AIR(피보나치/제곱 체인)의 정직한 증명 조각 생성
  - 증명 조각 변조
  - 검사 실행
  - 초기화
"""

from flask import Blueprint, current_app, redirect, render_template, request, url_for
from tinydb import Query

from zkp.stark.air import AIRS, RecordedEvaluator, get_air
from zkp.stark.errors import ConsistencyViolation, OodCheckError
from zkp.stark.example import worked_example
from zkp.stark.field import StarkField, field_for_modulus
from zkp.stark.ood import ensure_consistent, evaluate_with_air
from zkp.stark.params import OodParameters
from zkp.stark.prover import honest_fragment

from stark_serializers import (
    serialize_inputs, deserialize_inputs,
    serialize_fe_list, deserialize_fe_list,
    serialize_evaluation, fe_short,
)

stark_bp = Blueprint('stark', __name__, url_prefix='/stark')

DATA = Query()

# DB는 app.py에서 주입
DB = None

WORKED_EXAMPLE = "worked-example"
TAMPER_TARGETS = ("channel", "transition_coeff", "boundary_coeff", "residue", "z", "g_trace")


def init_stark_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


# ─── 증명 조각 저장/복원 ───

def save_fragment(source, params, inputs, recorded=None):
    """새 증명 조각을 저장하고 이전 검사 결과를 지운다."""
    db_remove_prefix("stark.")
    db_set("stark.fragment", {
        "source": source,
        "params": params.to_dict(),
        "inputs": serialize_inputs(inputs),
        "recorded": recorded,
    })


def load_fragment():
    """저장된 증명 조각에서 (평가기, 입력) 을 복원한다. 없으면 None."""
    data = db_get("stark.fragment")
    if data is None:
        return None
    params = OodParameters.from_dict(data["params"])
    field = params.field
    inputs = deserialize_inputs(field, data["inputs"])
    if data["source"] == WORKED_EXAMPLE:
        rec = data["recorded"]
        evaluator = RecordedEvaluator(
            params,
            deserialize_fe_list(field, rec["transition_residues"]),
            rec["transition_degrees"],
            deserialize_fe_list(field, rec["boundary_residues"]),
            rec["divisor_degrees"],
            rec["steps"],
        )
    else:
        evaluator = get_air(data["source"], params.trace_length,
                            params.ce_blowup_factor, field)
    return evaluator, inputs


def fragment_view(data):
    """화면 표시용 증명 조각 요약."""
    if data is None:
        return None
    inputs = data["inputs"]
    return {
        "source": data["source"],
        "params": data["params"],
        "z": fe_short(int(inputs["z"])),
        "g_trace": fe_short(int(inputs["g_trace"])),
        "frame": inputs["frame"],
        "public_inputs": inputs["public_inputs"],
        "transition_coeffs": inputs["transition_coeffs"],
        "boundary_coeffs": inputs["boundary_coeffs"],
        "channel": inputs["channel_ood_evaluations"],
        "residues": inputs["ood_frame_constraint_evaluation"],
    }


# ──────────────────────────────────────────────────────────────
# OOD 페이지
# ──────────────────────────────────────────────────────────────

@stark_bp.route("/ood")
def ood_page():
    """OOD 검사 페이지 렌더."""
    return render_template("stark/ood.html",
                           fragment=fragment_view(db_get("stark.fragment")),
                           evaluation=db_get("stark.evaluation"),
                           error=db_get("stark.error"),
                           airs=sorted(AIRS),
                           tamper_targets=TAMPER_TARGETS)


@stark_bp.route("/ood/load-example", methods=["POST"])
def ood_load_example():
    """p=97, n=2 손 계산 예제를 로드한다."""
    evaluator, inputs = worked_example()
    recorded = {
        "transition_residues": serialize_fe_list(evaluator.transition_residues),
        "transition_degrees": evaluator.transition_degrees,
        "boundary_residues": serialize_fe_list(evaluator.boundary_residues),
        "divisor_degrees": evaluator.divisor_degrees,
        "steps": evaluator.steps,
    }
    save_fragment(WORKED_EXAMPLE, evaluator.params, inputs, recorded)
    return redirect(url_for("stark.ood_page"))


@stark_bp.route("/ood/generate", methods=["POST"])
def ood_generate():
    """선택한 AIR의 정직한 증명 조각을 생성한다."""
    try:
        name = request.form.get("air", "fibonacci")
        trace_length = int(request.form.get("trace-length", "8"))
        blowup = int(request.form.get("blowup", "2"))
        seed = int(request.form.get("seed", "12345"))
        start = [int(s) for s in request.form.get("start", "1,1").split(",") if s.strip()]
        air = get_air(name, trace_length, blowup, _field_from_form())
        public_inputs = air.public_inputs_for(*start)
        inputs = honest_fragment(air, public_inputs, seed=seed)
    except (TypeError, ValueError) as exc:
        current_app.logger.warning("증명 조각 생성 실패: %s", exc)
        db_set("stark.error", str(exc))
        return redirect(url_for("stark.ood_page"))

    save_fragment(air.name, air.params, inputs)
    return redirect(url_for("stark.ood_page"))


def _field_from_form():
    modulus = request.form.get("modulus")
    return field_for_modulus(int(modulus)) if modulus else StarkField


@stark_bp.route("/ood/tamper", methods=["POST"])
def ood_tamper():
    """증명 조각의 값 하나에 1을 더하거나 지정한 값으로 바꾼다."""
    data = db_get("stark.fragment")
    if data is None:
        return redirect(url_for("stark.ood_page"))

    target = request.form.get("target", "channel")
    value = request.form.get("value")
    modulus = int(data["params"]["modulus"])

    def bump(s):
        new = int(value) if value else int(s) + 1
        return str(new % modulus)

    inputs = data["inputs"]
    try:
        index = int(request.form.get("index", "0") or 0)
        if index < 0:
            raise ValueError(f"index는 0 이상이어야 합니다: {index}")
        if target == "channel":
            inputs["channel_ood_evaluations"][index] = bump(inputs["channel_ood_evaluations"][index])
        elif target == "transition_coeff":
            inputs["transition_coeffs"][index][1] = bump(inputs["transition_coeffs"][index][1])
        elif target == "boundary_coeff":
            inputs["boundary_coeffs"][index][0] = bump(inputs["boundary_coeffs"][index][0])
        elif target == "residue":
            residues = inputs["ood_frame_constraint_evaluation"]
            residues[index] = bump(residues[index])
        elif target in ("z", "g_trace"):
            inputs[target] = bump(inputs[target])
        else:
            raise ValueError(f"알 수 없는 변조 대상입니다: {target}")
    except (IndexError, TypeError, ValueError) as exc:
        db_set("stark.error", f"변조 실패: {exc}")
        return redirect(url_for("stark.ood_page"))

    db_set("stark.fragment", data)
    db_remove_prefix("stark.evaluation")
    db_remove_prefix("stark.error")
    return redirect(url_for("stark.ood_page"))


@stark_bp.route("/ood/verify", methods=["POST"])
def ood_verify():
    """저장된 증명 조각에 OOD 일관성 검사를 실행한다."""
    loaded = load_fragment()
    if loaded is None:
        return redirect(url_for("stark.ood_page"))
    evaluator, inputs = loaded
    reduction = request.form.get("reduction", "sequential")

    try:
        evaluation = evaluate_with_air(evaluator, inputs, reduction)
    except (OodCheckError, ValueError) as exc:
        current_app.logger.warning("OOD 검사 오류: %s", exc)
        db_remove_prefix("stark.evaluation")
        db_set("stark.error", f"{type(exc).__name__}: {exc}")
        return redirect(url_for("stark.ood_page"))

    result = serialize_evaluation(evaluation)
    try:
        ensure_consistent(evaluation)
    except ConsistencyViolation as exc:
        current_app.logger.info("OOD 일관성 검사 실패: %s", exc)
        result["violation"] = f"{type(exc).__name__}: {exc}"
    db_remove_prefix("stark.error")
    db_set("stark.evaluation", result)
    return redirect(url_for("stark.ood_page"))


@stark_bp.route("/ood/clear", methods=["POST"])
def ood_clear():
    """모든 STARK 데이터를 클리어한다."""
    db_remove_prefix("stark.")
    return redirect(url_for("stark.ood_page"))
