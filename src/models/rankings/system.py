"""ranking_systems table model."""

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import RankingSystemMixin


class RankingSystem(RankingSystemMixin, Base):
    """Named ranking configuration whose latest standings are stored."""

    __tablename__ = "ranking_systems"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
