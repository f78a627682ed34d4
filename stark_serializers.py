"""
STARK OOD 데이터 직렬화/역직렬화 헬퍼
=======================================

TinyDB에 저장 가능한 형태로 OOD 검사 객체를 변환한다.
유한체 원소, 계수 쌍, EvaluationFrame, OodParameters, OodInputs, OodEvaluation.
"""

from zkp.stark.air import EvaluationFrame
from zkp.stark.ood import OodInputs


# ─── 유한체 원소 ───

def serialize_fe(val):
    """유한체 원소 → str(int)"""
    return str(int(val))


def deserialize_fe(field, s):
    """str(int) → 유한체 원소"""
    return field(int(s))


def serialize_fe_list(lst):
    """list[원소] → list[str]"""
    return [str(int(v)) for v in lst]


def deserialize_fe_list(field, data):
    """list[str] → list[원소]"""
    return [field(int(s)) for s in data]


# ─── 계수 쌍 ───

def serialize_pairs(pairs):
    """[(c0, c1)] → [[str, str]]"""
    return [serialize_fe_list(pair) for pair in pairs]


def deserialize_pairs(field, data):
    """[[str, str]] → [(c0, c1)]"""
    return [tuple(deserialize_fe_list(field, pair)) for pair in data]


# ─── EvaluationFrame ───

def serialize_frame(frame):
    """EvaluationFrame → [[current...], [next...]]"""
    if frame is None:
        return None
    return [serialize_fe_list(row) for row in frame.rows()]


def deserialize_frame(field, data):
    """[[current...], [next...]] → EvaluationFrame"""
    if data is None:
        return None
    return EvaluationFrame.from_rows([deserialize_fe_list(field, row) for row in data])


# ─── OodInputs ───

def serialize_inputs(inputs):
    """OodInputs → dict"""
    residues = inputs.ood_frame_constraint_evaluation
    return {
        "z": serialize_fe(inputs.z),
        "g_trace": serialize_fe(inputs.g_trace),
        "frame": serialize_frame(inputs.frame),
        "public_inputs": serialize_fe_list(inputs.public_inputs),
        "transition_coeffs": serialize_pairs(inputs.transition_coeffs),
        "boundary_coeffs": serialize_pairs(inputs.boundary_coeffs),
        "channel_ood_evaluations": serialize_fe_list(inputs.channel_ood_evaluations),
        "ood_frame_constraint_evaluation": (
            None if residues is None else serialize_fe_list(residues)
        ),
    }


def deserialize_inputs(field, data):
    """dict → OodInputs"""
    residues = data.get("ood_frame_constraint_evaluation")
    return OodInputs(
        z=deserialize_fe(field, data["z"]),
        g_trace=deserialize_fe(field, data["g_trace"]),
        frame=deserialize_frame(field, data["frame"]),
        public_inputs=deserialize_fe_list(field, data["public_inputs"]),
        transition_coeffs=deserialize_pairs(field, data["transition_coeffs"]),
        boundary_coeffs=deserialize_pairs(field, data["boundary_coeffs"]),
        channel_ood_evaluations=deserialize_fe_list(field, data["channel_ood_evaluations"]),
        ood_frame_constraint_evaluation=(
            None if residues is None else deserialize_fe_list(field, residues)
        ),
    )


# ─── OodEvaluation (표시 전용) ───

def serialize_evaluation(evaluation):
    """OodEvaluation → 화면 표시용 dict (역직렬화하지 않는다)."""
    t = evaluation.transition
    b = evaluation.boundary
    return {
        "transition_divisor": fe_short(t.divisor),
        "transition_total": fe_short(t.total),
        "transition_result": fe_short(t.result),
        "transition_terms": [
            {
                "column": term.column,
                "residue": fe_short(term.residue),
                "degree": term.degree,
                "adj_exponent": term.adj_exponent,
                "adjustment": fe_short(term.adjustment),
                "weighted": fe_short(term.weighted),
                "product": fe_short(term.product),
            }
            for term in t.terms
        ],
        "boundary_terms": [
            {
                "index": term.index,
                "step": term.step,
                "residue": fe_short(term.residue),
                "divisor_degree": term.divisor_degree,
                "adj_exponent": term.adj_exponent,
                "weighted": fe_short(term.weighted),
                "product": fe_short(term.product),
                "divisor": fe_short(term.divisor),
                "quotient": fe_short(term.quotient),
            }
            for term in b.terms
        ],
        "history": [fe_short(v) for v in b.history],
        "constraint_result": fe_short(evaluation.constraint_result),
        "channel_result": fe_short(evaluation.channel_result),
        "satisfied": evaluation.satisfied,
    }


def fe_short(val):
    """유한체 원소 → 축약 문자열 (UI 표시용)"""
    if val is None:
        return "None"
    s = str(int(val))
    if len(s) <= 10:
        return s
    return s[:4] + "..." + s[-4:]
