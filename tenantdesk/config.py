"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe TENANTDESK_,
et peut optionnellement être fournie via un fichier .env.

Le fournisseur de persistance par défaut est "memory" (données de démo) ; "sqlmodel"
utilise la base configurée par TENANTDESK_DATABASE_URL.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de tenantdesk/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe TENANTDESK_.
    Exemple : TENANTDESK_BUSINESS_TYPE=fitness_center

    Les permissions se fournissent en JSON :
    TENANTDESK_AUTHORIZATION_GRANTS='{"u-admin": ["*"], "u-coach": ["license:*"]}'
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTDESK_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Tenant
    business_type: str = Field(default="education")

    # Persistance
    database_provider: Literal["memory", "sqlmodel"] = Field(default="memory")
    database_url: str = Field(default="sqlite:///tenantdesk.db")
    seed_dir: Optional[Path] = Field(default=None)

    # Autorisation (désactivée par défaut)
    authorization_enabled: bool = Field(default=False)
    authorization_grants: dict[str, list[str]] = Field(default_factory=dict)

    # Listes
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)
    max_search_results: int = Field(default=1000, ge=0)

    # Messages traduits (défaut : tenantdesk/i18n)
    translations_dir: Optional[Path] = Field(default=None)

    # Serveur HTTP
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000, ge=1, le=65535)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = Field(default=Path("logs/tenantdesk.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("seed_dir", "translations_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Optional[str | Path]) -> Optional[Path]:
        """Étend ~ vers le répertoire home dans les chemins."""
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @property
    def uses_database(self) -> bool:
        """Vérifie si la persistance passe par une base SQL."""
        return self.database_provider == "sqlmodel"
