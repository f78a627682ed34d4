"""
채널 평가값 결합 (ChannelCombiner)
===================================

증명자가 보낸 합성 다항식 열 평가값 W개를 z의 거듭제곱으로 접는다:

    channel = Σᵢ evaluations[i] · z^i

합성 다항식을 H(x) = Σᵢ x^i · Hᵢ(x^W) 로 나누고 evaluations[i] = Hᵢ(z^W) 이면
channel = H(z) 가 된다.
"""


def combine_channel(evaluations, z):
    """pow[0] = 1, pow[i] = z · pow[i-1] 로 Σ evaluations[i] · pow[i] 를 계산한다."""
    field = type(z)
    result = field(0)
    power = field(1)
    for value in evaluations:
        result = result + value * power
        power = power * z
    return result
