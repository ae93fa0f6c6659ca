"""
설정 로더

vault.yaml 로드 및 Vault 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import BasisPoints, Defaults, Paths


@dataclass(frozen=True)
class VaultSettings:
    """Vault 생성 설정 (vault.yaml의 vault 섹션)

    불변 데이터 구조로 설정 변경 방지
    """

    underlying_asset: str
    entry_fee_basis_points: int
    admin: str
    entry_fee_recipient: str
    holding_account: str = Defaults.HOLDING_ACCOUNT


@dataclass(frozen=True)
class StorageSettings:
    """이벤트 저널 저장 설정"""

    events_db: Path


@dataclass(frozen=True)
class VaultConfig:
    """vault.yaml 전체"""

    vault: VaultSettings
    storage: StorageSettings
    log_level: str = Defaults.LOG_LEVEL


class VaultConfigLoadError(Exception):
    """vault.yaml 로드 실패 예외"""

    pass


def _require(section: dict[str, Any], key: str, section_name: str) -> Any:
    value = section.get(key)
    if value is None or value == "":
        raise VaultConfigLoadError(
            f"vault.yaml의 {section_name} 섹션에 '{key}'가 없습니다"
        )
    return value


def load_vault_config(path: Path | None = None) -> VaultConfig:
    """vault.yaml 파일 로드

    Args:
        path: vault.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        VaultConfig 인스턴스

    Raises:
        VaultConfigLoadError: 파일이 없거나 형식/값이 잘못된 경우
    """
    if path is None:
        path = Paths.VAULT_CONFIG_FILE

    if not path.exists():
        raise VaultConfigLoadError(f"vault.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise VaultConfigLoadError(f"vault.yaml 파싱 실패: {e}") from e

    if data is None:
        raise VaultConfigLoadError("vault.yaml이 비어 있습니다")

    vault_section = data.get("vault")
    if not isinstance(vault_section, dict):
        raise VaultConfigLoadError("vault.yaml에 'vault' 섹션이 없습니다")

    underlying_asset = str(_require(vault_section, "underlying_asset", "vault"))
    admin = str(_require(vault_section, "admin", "vault"))

    # 수수료율 검증 (정수, 0~10000)
    fee_bps = vault_section.get("entry_fee_basis_points", Defaults.ENTRY_FEE_BASIS_POINTS)
    if isinstance(fee_bps, bool) or not isinstance(fee_bps, int):
        raise VaultConfigLoadError(
            f"entry_fee_basis_points는 정수여야 합니다: {fee_bps!r}"
        )
    if not BasisPoints.MIN <= fee_bps <= BasisPoints.MAX:
        raise VaultConfigLoadError(
            f"유효하지 않은 entry_fee_basis_points입니다: {fee_bps}. "
            f"유효 범위: {BasisPoints.MIN}..{BasisPoints.MAX}"
        )

    # 수수료 수령자 미지정 시 admin
    recipient = str(vault_section.get("entry_fee_recipient") or admin)
    holding_account = str(
        vault_section.get("holding_account") or Defaults.HOLDING_ACCOUNT
    )

    storage_section = data.get("storage") or {}
    events_db = storage_section.get("events_db")
    events_db_path = Path(events_db) if events_db else Paths.EVENTS_DB

    log_level = str(data.get("log_level", Defaults.LOG_LEVEL)).upper()

    return VaultConfig(
        vault=VaultSettings(
            underlying_asset=underlying_asset,
            entry_fee_basis_points=fee_bps,
            admin=admin,
            entry_fee_recipient=recipient,
            holding_account=holding_account,
        ),
        storage=StorageSettings(events_db=events_db_path),
        log_level=log_level,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    vault.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: VaultConfig | None = None

    def __new__(cls, config_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_vault_config(config_path)

    @property
    def vault(self) -> VaultSettings:
        """Vault 설정"""
        assert self._config is not None
        return self._config.vault

    @property
    def events_db(self) -> Path:
        """이벤트 저널 DB 경로"""
        assert self._config is not None
        return self._config.storage.events_db

    @property
    def log_level(self) -> str:
        """로그 레벨"""
        assert self._config is not None
        return self._config.log_level

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(config_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        config_path: vault.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(config_path)
