import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkp.stark.air import FibonacciAir
from zkp.stark.field import StarkField
from zkp.stark.prover import honest_fragment


# ── 테스트 상수 ──
TRACE_LENGTH = 8
BLOWUP = 2
FRAGMENT_SEED = 7


@pytest.fixture(scope="module")
def fib_air():
    """n = 8, blowup = 2, p = 3·2^30+1 피보나치 AIR."""
    return FibonacciAir(trace_length=TRACE_LENGTH, ce_blowup_factor=BLOWUP, field=StarkField)


@pytest.fixture(scope="module")
def fib_fragment(fib_air):
    """피보나치 AIR의 정직한 OOD 증명 조각 (시작값 1, 1)."""
    return honest_fragment(fib_air, fib_air.public_inputs_for(1, 1), seed=FRAGMENT_SEED)
