"""
Vault 정수 연산

자산 ↔ 지분 환산과 수수료 계산. 모든 수량은 int.
반올림 방향은 호출자가 명시 (기본값 없음).

반올림 정책:
- 입금(deposit): 수수료 floor, 지분 floor → 입금자에게 적게
- 발행(mint): 필요 순자산 ceil, 총액 ceil → 수수료 수령자가 손해 보지 않음
- 출금(withdraw): 소각 지분 ceil
- 상환(redeem): 지급 자산 floor
"""

from core.constants import BasisPoints
from core.domain.errors import FeeRateBlocksMint, InvalidFeeRate, VaultInsolvent
from core.types import Rounding


def mul_div(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """x * y / denominator 를 지정한 방향으로 반올림

    Args:
        x, y: 0 이상의 정수
        denominator: 양의 정수
        rounding: FLOOR 또는 CEIL

    Raises:
        ZeroDivisionError: denominator가 0
        ValueError: 음수 입력
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    if x < 0 or y < 0 or denominator < 0:
        raise ValueError("mul_div operands must be non-negative")

    quotient, remainder = divmod(x * y, denominator)
    if rounding == Rounding.CEIL and remainder:
        quotient += 1
    return quotient


def validate_fee_rate(basis_points: int) -> int:
    """수수료율 검증 (0 ~ 10000 bp)

    Raises:
        InvalidFeeRate: 정수가 아니거나 범위를 벗어난 경우
    """
    if isinstance(basis_points, bool) or not isinstance(basis_points, int):
        raise InvalidFeeRate(basis_points)
    if not BasisPoints.MIN <= basis_points <= BasisPoints.MAX:
        raise InvalidFeeRate(basis_points)
    return basis_points


def fee_on_total(assets: int, basis_points: int) -> int:
    """총액에 포함된 수수료 (deposit): floor(assets * bp / 10000)"""
    return mul_div(assets, basis_points, BasisPoints.SCALE, Rounding.FLOOR)


def gross_for_net(net_assets: int, basis_points: int) -> int:
    """순자산을 만들기 위한 수수료 포함 총액 (mint)

    ceil(net * 10000 / (10000 - bp))

    Raises:
        FeeRateBlocksMint: bp == 10000
    """
    if basis_points >= BasisPoints.MAX:
        raise FeeRateBlocksMint(basis_points)
    return mul_div(
        net_assets,
        BasisPoints.SCALE,
        BasisPoints.SCALE - basis_points,
        Rounding.CEIL,
    )


def to_shares(assets: int, total_assets: int, total_supply: int, rounding: Rounding) -> int:
    """자산 → 지분 환산

    공급량이 0이면 1:1 (첫 입금자가 비율 결정).
    공급량이 있는데 보유 자산이 0이면 비율이 정의되지 않음.

    Raises:
        VaultInsolvent: total_supply > 0 이고 total_assets == 0
    """
    if assets == 0 or total_supply == 0:
        return assets
    if total_assets == 0:
        raise VaultInsolvent(total_supply)
    return mul_div(assets, total_supply, total_assets, rounding)


def to_assets(shares: int, total_assets: int, total_supply: int, rounding: Rounding) -> int:
    """지분 → 자산 환산 (공급량 0이면 1:1)"""
    if shares == 0 or total_supply == 0:
        return shares
    return mul_div(shares, total_assets, total_supply, rounding)
