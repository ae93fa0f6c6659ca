"""
타입 정의 모듈

Vault에서 사용하는 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class VaultOperation(str, Enum):
    """Vault 상태 변경 연산"""

    DEPOSIT = "DEPOSIT"
    MINT = "MINT"
    WITHDRAW = "WITHDRAW"
    REDEEM = "REDEEM"
    SET_FEE_CONFIG = "SET_FEE_CONFIG"


class Rounding(str, Enum):
    """정수 나눗셈 반올림 방향"""

    FLOOR = "FLOOR"  # 0 방향 절사
    CEIL = "CEIL"  # 올림
