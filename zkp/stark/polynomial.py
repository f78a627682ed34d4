"""
STARK 증명자용 다항식(Polynomial) 및 NTT
=========================================

정직한 OOD 증명 조각을 만들 때 필요한 다항식 연산을 제공한다.
(검증자 쪽 OOD 검사는 다항식을 전혀 만들지 않는다.)

**Polynomial 클래스**:
  계수 표현 p(x) = c₀ + c₁·x + c₂·x² + ... 임의의 유한체 클래스 위에서 동작한다.
  +, -, * 연산자는 다항식/유한체 원소/정수 모두를 받는다. 그래서 AIR 제약식을
  트레이스 다항식에 그대로 적용할 수 있다.

**FFT/IFFT**:
  트레이스 도메인 {1, g, g², ...}에서의 값 ↔ 계수 변환 (재귀 radix-2).

사용 예시:
    >>> p = Polynomial([StarkField(1), StarkField(2)])  # 1 + 2x
    >>> p.evaluate(StarkField(3))                       # StarkField(7)
"""


class Polynomial:
    """유한체 위의 다항식.

    계수 리스트로 표현: coeffs = [c₀, c₁, c₂, ...]

    예시:
        >>> p = Polynomial([F(1), F(2)])  # 1 + 2x
        >>> q = Polynomial([F(3), F(4)])  # 3 + 4x
        >>> p * q                          # 3 + 10x + 8x²
    """

    def __init__(self, coeffs, field=None):
        """다항식 생성.

        Args:
            coeffs: 유한체 원소 또는 정수의 리스트 [c₀, c₁, ...]
            field: 유한체 클래스. None이면 첫 계수의 타입을 사용한다.
        """
        coeffs = list(coeffs)
        if field is None:
            if not coeffs or isinstance(coeffs[0], int):
                raise ValueError("정수 계수만으로는 유한체를 알 수 없습니다: field를 지정하세요")
            field = type(coeffs[0])
        self.field = field
        self.coeffs = [field(c) if isinstance(c, int) else c for c in coeffs] or [field(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거한다. 예: [1, 2, 0, 0] → [1, 2]"""
        while len(self.coeffs) > 1 and self.coeffs[-1] == 0:
            self.coeffs.pop()

    def _coerce(self, other):
        if isinstance(other, Polynomial):
            return other
        if isinstance(other, int):
            other = self.field(other)
        return Polynomial([other], self.field)

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == 0

    def evaluate(self, point):
        """Horner's method: p(x) = c₀ + x(c₁ + x(c₂ + ...))."""
        if isinstance(point, int):
            point = self.field(point)
        result = self.field(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __add__(self, other):
        other = self._coerce(other)
        zero = self.field(0)
        n = max(len(self.coeffs), len(other.coeffs))
        result = []
        for i in range(n):
            a = self.coeffs[i] if i < len(self.coeffs) else zero
            b = other.coeffs[i] if i < len(other.coeffs) else zero
            result.append(a + b)
        return Polynomial(result, self.field)

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        return Polynomial([-c for c in self.coeffs], self.field)

    def __sub__(self, other):
        return self + (-self._coerce(other))

    def __rsub__(self, other):
        return self._coerce(other) - self

    def __mul__(self, other):
        """다항식 곱셈 O(n²) 또는 스칼라곱."""
        if not isinstance(other, Polynomial):
            scalar = self.field(other) if isinstance(other, int) else other
            return Polynomial([c * scalar for c in self.coeffs], self.field)
        result = [self.field(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a == 0:
                continue
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result, self.field)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if not isinstance(other, Polynomial):
            other = self._coerce(other)
        return self.coeffs == other.coeffs

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == 0:
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def __len__(self):
        return len(self.coeffs)

    def scale_variable(self, factor):
        """p(factor · x). 전이 제약의 '다음 행' 다항식 T(g·x)를 만들 때 쓴다."""
        result = []
        power = self.field(1)
        for c in self.coeffs:
            result.append(c * power)
            power = power * factor
        return Polynomial(result, self.field)

    def divide_exact(self, divisor):
        """나머지 없이 나누어 떨어질 때의 몫.

        Raises:
            ValueError: 나머지가 0이 아닌 경우 (제약 불만족)
        """
        q, r = poly_div(self, divisor)
        if not r.is_zero():
            raise ValueError("나누어 떨어지지 않습니다 (제약 불만족)")
        return q

    @classmethod
    def zero(cls, field):
        return cls([field(0)], field)

    @classmethod
    def monomial(cls, field, degree, coeff=1):
        """coeff · x^degree."""
        coeffs = [field(0)] * (degree + 1)
        coeffs[degree] = field(coeff) if isinstance(coeff, int) else coeff
        return cls(coeffs, field)

    @classmethod
    def from_evaluations(cls, evals, omega):
        """도메인 {1, ω, ..., ω^(n-1)}에서의 값으로부터 (n-1)차 이하 다항식을 복원한다."""
        return cls(ifft(evals, omega), type(omega))


# ─────────────────────────────────────────────────────────────────────
# FFT / IFFT (Number Theoretic Transform)
# ─────────────────────────────────────────────────────────────────────

def fft(coeffs, omega):
    """계수 → 도메인 {1, ω, ω², ...}에서의 값. 입력 길이는 2의 거듭제곱."""
    n = len(coeffs)
    if n == 1:
        return [coeffs[0]]

    even_vals = fft(coeffs[0::2], omega * omega)
    odd_vals = fft(coeffs[1::2], omega * omega)

    field = type(omega)
    result = [field(0)] * n
    omega_k = field(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega
    return result


def ifft(evals, omega):
    """도메인 값 → 계수. ω^{-1}로 FFT 후 n으로 나눈다."""
    field = type(omega)
    n = len(evals)
    coeffs = fft(list(evals), field(1) / omega)
    n_inv = field(1) / field(n)
    return [c * n_inv for c in coeffs]


# ─────────────────────────────────────────────────────────────────────
# 다항식 나눗셈
# ─────────────────────────────────────────────────────────────────────

def poly_div(a, b):
    """a(x) = b(x) · q(x) + r(x) 의 (q, r) 를 긴 나눗셈으로 계산한다.

    Raises:
        ValueError: 제수가 영 다항식인 경우
    """
    if b.is_zero():
        raise ValueError("0으로 나눌 수 없습니다")

    field = a.field
    remainder = list(a.coeffs)
    divisor = b.coeffs
    deg_b = len(divisor) - 1
    deg_a = len(remainder) - 1

    if deg_a < deg_b:
        return Polynomial.zero(field), Polynomial(remainder, field)

    quotient = [field(0)] * (deg_a - deg_b + 1)
    lead_inv = field(1) / divisor[-1]
    for i in range(deg_a - deg_b, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv
        quotient[i] = coeff
        for j in range(deg_b + 1):
            remainder[i + j] = remainder[i + j] - coeff * divisor[j]

    return Polynomial(quotient, field), Polynomial(remainder[:deg_b] or [field(0)], field)
