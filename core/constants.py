"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → sharevault/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class BasisPoints:
    """수수료율 단위 (1 bp = 0.01%)"""

    SCALE: int = 10_000  # 100%
    MIN: int = 0
    MAX: int = 10_000


class Defaults:
    """기본값 상수"""

    ENTRY_FEE_BASIS_POINTS: int = 0
    HOLDING_ACCOUNT: str = "vault"

    LOG_LEVEL: str = "INFO"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    VAULT_CONFIG_FILE: Path = CONFIG_DIR / "vault.yaml"

    # 이벤트 저널 DB
    EVENTS_DB: Path = DATA_DIR / "vault_events.db"
