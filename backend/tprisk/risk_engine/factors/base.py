from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from tprisk.risk_engine.types import FactorPredicate, RiskFactorDefinition


def risk_factor(
    *,
    id: str,
    category: str,
    title: str,
    description: str,
    severity: str,
    impact: int,
    recommendations: Iterable[str],
    predicate: FactorPredicate,
) -> RiskFactorDefinition:
    return RiskFactorDefinition(
        id=id,
        category=str(category),
        title=title,
        description=description,
        severity=str(severity),
        impact=max(0, min(100, int(impact))),
        recommendations=tuple(recommendations),
        predicate=predicate,
    )


def never_present(context) -> bool:
    return False


def as_date(value: date | datetime | str | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        try:
            return datetime.fromisoformat(candidate.replace('Z', '+00:00')).date()
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class RiskFactorCatalog:
    version: int
    definitions: tuple[RiskFactorDefinition, ...]

    def __post_init__(self):
        ids = [definition.id for definition in self.definitions]
        if len(ids) != len(set(ids)):
            raise ValueError('Risk factor ids must be unique within a catalog.')

    def __len__(self) -> int:
        return len(self.definitions)

    def __iter__(self):
        return iter(self.definitions)

    def get(self, factor_id: str) -> RiskFactorDefinition | None:
        for definition in self.definitions:
            if definition.id == factor_id:
                return definition
        return None

    def ids(self) -> list[str]:
        return [definition.id for definition in self.definitions]
