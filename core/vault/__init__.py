"""
Vault 회계 코어

자산 ↔ 지분 환산, 진입 수수료, deposit / mint / withdraw / redeem.

사용 예시:
```python
from adapters.mock import InMemoryAssetStore, InMemoryShareRegistry
from core.vault import VaultLedger

assets = InMemoryAssetStore("USDC")
vault = VaultLedger("USDC", 100, "admin", assets, InMemoryShareRegistry())
```
"""

from core.vault.ledger import VaultLedger

__all__ = [
    "VaultLedger",
]
