"""
Vault 에러 정의

모든 Vault 실패는 VaultError를 상속.
외부 협력자(Asset Store / Share Registry)도 같은 클래스로 실패를 알리고,
Vault는 이를 변환 없이 그대로 전파함.
"""


class VaultError(Exception):
    """Vault 에러 기본 클래스"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ZeroAmount(VaultError):
    """수량이 0인 요청"""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation}: amount must be greater than zero")


class InvalidFeeRate(VaultError):
    """수수료율이 허용 범위(0~10000 bp)를 벗어남"""

    def __init__(self, basis_points: int):
        self.basis_points = basis_points
        super().__init__(f"Invalid entry fee rate: {basis_points} bp (allowed: 0..10000)")


class FeeRateBlocksMint(InvalidFeeRate):
    """100% 수수료에서는 mint에 필요한 총액이 정의되지 않음"""

    def __init__(self, basis_points: int):
        self.basis_points = basis_points
        VaultError.__init__(
            self,
            f"Mint is undefined at an entry fee of {basis_points} bp",
        )


class ZeroSharesMinted(VaultError):
    """입금 결과 발행 지분이 0"""

    def __init__(self, assets: int):
        self.assets = assets
        super().__init__(f"Deposit of {assets} would mint zero shares")


class VaultInsolvent(VaultError):
    """지분은 존재하지만 Vault 보유 자산이 0 (비율 정의 불가)"""

    def __init__(self, total_supply: int):
        self.total_supply = total_supply
        super().__init__(
            f"Vault holds no assets against {total_supply} outstanding shares"
        )


class InsufficientBalance(VaultError):
    """자산 잔고 부족 (Asset Store)"""

    def __init__(self, account: str, balance: int, required: int):
        self.account = account
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient balance for {account}: has {balance}, needs {required}"
        )


class InsufficientAllowance(VaultError):
    """자산 이동 승인 한도 부족 (Asset Store)"""

    def __init__(self, owner: str, spender: str, allowance: int, required: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.required = required
        super().__init__(
            f"Insufficient allowance {owner} -> {spender}: "
            f"has {allowance}, needs {required}"
        )


class InsufficientShares(VaultError):
    """소각할 지분 부족 (Share Registry)"""

    def __init__(self, owner: str, balance: int, required: int):
        self.owner = owner
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient shares for {owner}: has {balance}, needs {required}"
        )


class InsufficientVaultLiquidity(VaultError):
    """Vault 보유 자산이 출금 요청보다 적음"""

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient vault liquidity: holds {available}, requested {requested}"
        )


class Unauthorized(VaultError):
    """호출자에게 권한이 없음"""

    def __init__(self, caller: str, owner: str, action: str = "spend shares of"):
        self.caller = caller
        self.owner = owner
        super().__init__(f"{caller} is not authorized to {action} {owner}")
