"""
AIR 변형과 정직한 증명자 테스트: air.py, prover.py, example.py
"""
import pytest

from zkp.stark.air import AIRS, SquareChainAir, get_air
from zkp.stark.channel import combine_channel
from zkp.stark.example import main
from zkp.stark.field import StarkField, get_root_of_unity
from zkp.stark.polynomial import Polynomial
from zkp.stark.prover import (
    composition_polynomial, prove_ood, sample_challenges, split_composition,
)


F = StarkField


def _composition(air, public_inputs, seed):
    z, t_coeffs, b_coeffs = sample_challenges(air, seed)
    g = get_root_of_unity(air.field, air.trace_length)
    trace_polys = [Polynomial.from_evaluations(col, g)
                   for col in air.generate_trace(public_inputs)]
    return z, composition_polynomial(air, trace_polys, public_inputs, t_coeffs, b_coeffs)


# =====================================================================
# AIR 변형
# =====================================================================

class TestFibonacciAir:
    def test_params(self, fib_air):
        params = fib_air.params
        assert params.trace_width == 2
        assert params.num_assertions == 3
        assert params.num_public_inputs == 3
        assert params.max_degree == 15

    def test_trace(self, fib_air):
        r0, r1 = fib_air.generate_trace([1, 1, 0])
        assert [int(v) for v in r0] == [1, 2, 5, 13, 34, 89, 233, 610]
        assert [int(v) for v in r1] == [1, 3, 8, 21, 55, 144, 377, 987]

    def test_public_inputs(self, fib_air):
        assert [int(v) for v in fib_air.public_inputs_for(1, 1)] == [1, 1, 987]

    def test_trace_satisfies_transitions(self, fib_air):
        trace = fib_air.generate_trace([1, 1, 0])
        for k in range(fib_air.trace_length - 1):
            current = [col[k] for col in trace]
            nxt = [col[k + 1] for col in trace]
            assert all(r == 0 for r in fib_air.transition_constraints(current, nxt))

    def test_transition_degrees(self, fib_air):
        assert fib_air.transition_degrees() == [7, 7]

    def test_assertion_steps(self, fib_air):
        assert [a.step for a in fib_air.assertions()] == [0, 0, 7]


class TestSquareChainAir:
    def test_trace(self):
        air = SquareChainAir(trace_length=4, ce_blowup_factor=2, field=F)
        assert [int(v) for v in air.generate_trace([2, 0])[0]] == [2, 5, 26, 677]
        assert [int(v) for v in air.public_inputs_for(2)] == [2, 677]

    def test_transition_degrees(self):
        air = SquareChainAir(trace_length=8, ce_blowup_factor=2, field=F)
        assert air.transition_degrees() == [14]

    def test_requires_blowup(self):
        with pytest.raises(ValueError):
            SquareChainAir(trace_length=8, ce_blowup_factor=1, field=F)


class TestAirRegistry:
    def test_names(self):
        assert set(AIRS) == {"fibonacci", "square-chain"}

    def test_get_air(self):
        air = get_air("square-chain", 8, 2, F)
        assert isinstance(air, SquareChainAir)
        assert air.params.num_assertions == 2

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_air("rescue", 8, 2, F)


# =====================================================================
# 합성 다항식
# =====================================================================

class TestComposition:
    def test_degree_bound(self, fib_air):
        _, composition = _composition(fib_air, fib_air.public_inputs_for(1, 1), seed=3)
        assert composition.degree <= fib_air.params.max_degree

    def test_square_chain_degree_bound(self):
        air = SquareChainAir(trace_length=8, ce_blowup_factor=2, field=F)
        _, composition = _composition(air, air.public_inputs_for(3), seed=3)
        assert composition.degree <= air.params.max_degree

    def test_split_recombines(self, fib_air):
        z, composition = _composition(fib_air, fib_air.public_inputs_for(1, 1), seed=4)
        columns = split_composition(composition, 2)
        values = [h.evaluate(z ** 2) for h in columns]
        assert combine_channel(values, z) == composition.evaluate(z)

    def test_split_coefficients(self):
        h = Polynomial([1, 2, 3, 4, 5], F)
        even, odd = split_composition(h, 2)
        assert even == Polynomial([1, 3, 5], F)
        assert odd == Polynomial([2, 4], F)

    def test_split_wider_than_polynomial(self):
        columns = split_composition(Polynomial([7], F), 3)
        assert len(columns) == 3
        assert columns[2].is_zero()


# =====================================================================
# OOD 증명 조각
# =====================================================================

class TestProveOod:
    def test_wrong_public_input(self, fib_air):
        public_inputs = fib_air.public_inputs_for(1, 1)
        public_inputs[2] = public_inputs[2] + 1
        z, t_coeffs, b_coeffs = sample_challenges(fib_air, seed=1)
        with pytest.raises(ValueError):
            prove_ood(fib_air, public_inputs, z, t_coeffs, b_coeffs)

    def test_frame_matches_trace(self, fib_air):
        public_inputs = fib_air.public_inputs_for(1, 1)
        z, t_coeffs, b_coeffs = sample_challenges(fib_air, seed=2)
        fragment = prove_ood(fib_air, public_inputs, z, t_coeffs, b_coeffs)
        g = fragment.g_trace
        trace_poly = Polynomial.from_evaluations(fib_air.generate_trace(public_inputs)[0], g)
        assert fragment.frame.current[0] == trace_poly.evaluate(z)
        assert fragment.frame.next[0] == trace_poly.evaluate(g * z)

    def test_challenges_are_seeded(self, fib_air):
        first = sample_challenges(fib_air, seed=42)
        second = sample_challenges(fib_air, seed=42)
        assert first[0] == second[0]
        assert first[1] == second[1]

    @pytest.mark.parametrize("seed", range(5))
    def test_z_outside_domain(self, fib_air, seed):
        z, _, _ = sample_challenges(fib_air, seed)
        assert z ** fib_air.trace_length != 1


class TestDemo:
    def test_main(self, capsys):
        assert main() is True
        out = capsys.readouterr().out
        assert "STARK OOD Consistency Check Demo" in out
