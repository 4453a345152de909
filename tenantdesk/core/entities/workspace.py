"""
Entités d'organisation : espaces de travail et roles.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Workspace:
    """Espace de travail d'un tenant."""

    id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    private: bool = False
    owner_id: Optional[str] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None


@dataclass
class Role:
    """Role défini dans un espace de travail (couleur au format #RRGGBB)."""

    id: Optional[str] = None
    workspace_id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    color: Optional[str] = None
    active: bool = True
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
