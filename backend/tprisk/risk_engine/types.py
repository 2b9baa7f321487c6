from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Callable

from tprisk.risk_engine.financial import FinancialData


MIN_RELIABLE_SAMPLE_SIZE = 6
MAX_COEFFICIENT_OF_VARIATION = 0.5


@dataclass(frozen=True)
class Entity:
    id: str
    name: str
    country_code: str
    entity_type: str = 'subsidiary'
    business_description: str = ''
    functional_analysis: dict[str, Any] = field(default_factory=dict)
    financial_data: FinancialData = field(default_factory=FinancialData)

    def __post_init__(self):
        if not isinstance(self.financial_data, FinancialData):
            object.__setattr__(self, 'financial_data', FinancialData(self.financial_data))


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float = 0.0
    transaction_type: str = 'other'
    description: str = ''
    pricing_method: str = ''
    documentation_status: str = 'pending'
    arm_length_range: dict[str, Any] = field(default_factory=dict)
    entity_id: str | None = None


@dataclass(frozen=True)
class Comparable:
    id: str
    comparable_name: str
    country: str
    industry: str = ''
    reliability_score: float = 50.0
    financial_data: FinancialData = field(default_factory=FinancialData)

    def __post_init__(self):
        if not isinstance(self.financial_data, FinancialData):
            object.__setattr__(self, 'financial_data', FinancialData(self.financial_data))


@dataclass(frozen=True)
class PriorAssessment:
    id: str
    assessment_date: datetime | date | None
    risk_level: str = 'low'
    entity_id: str | None = None
    transaction_id: str | None = None


@dataclass(frozen=True)
class StatisticalResult:
    count: int
    mean: float
    median: float
    min: float
    max: float
    q1: float
    q3: float
    iqr: float
    standard_deviation: float
    arm_length_range: dict[str, float]
    metric: str | None = None

    @property
    def coefficient_of_variation(self) -> float | None:
        if self.mean == 0:
            return None if self.standard_deviation == 0 else float('inf')
        return self.standard_deviation / abs(self.mean)

    @property
    def sample_size_warning(self) -> bool:
        return self.count < MIN_RELIABLE_SAMPLE_SIZE

    @property
    def high_variability_warning(self) -> bool:
        cv = self.coefficient_of_variation
        return cv is not None and cv > MAX_COEFFICIENT_OF_VARIATION

    @property
    def meets_reliability_standard(self) -> bool:
        return not self.sample_size_warning and not self.high_variability_warning


@dataclass(frozen=True)
class HistogramBin:
    lower: float
    upper: float
    midpoint: float
    count: int

    @property
    def label(self) -> str:
        return f'{self.lower:.1f}-{self.upper:.1f}'


FactorPredicate = Callable[['FactorContext'], bool]


@dataclass(frozen=True)
class FactorContext:
    entities: tuple[Entity, ...]
    transactions: tuple[Transaction, ...]
    assessments: tuple[PriorAssessment, ...]
    today: date


@dataclass(frozen=True)
class RiskFactorDefinition:
    id: str
    category: str
    title: str
    description: str
    severity: str
    impact: int
    recommendations: tuple[str, ...]
    predicate: FactorPredicate = field(compare=False, repr=False)


@dataclass(frozen=True)
class RiskFactorInstance:
    definition: RiskFactorDefinition
    computed: bool
    override: bool | None = None

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def category(self) -> str:
        return self.definition.category

    @property
    def present(self) -> bool:
        if self.override is None:
            return self.computed
        return self.override

    @property
    def overridden(self) -> bool:
        return self.override is not None

    def with_override(self, value: bool | None) -> RiskFactorInstance:
        return replace(self, override=value)


@dataclass(frozen=True)
class CategoryScore:
    category: str
    score: float
    weight: float
    factors: tuple[str, ...] = ()


@dataclass(frozen=True)
class OverallRiskAssessment:
    overall_score: float
    risk_level: str
    categories: tuple[CategoryScore, ...]
    recommendations: tuple[str, ...]


@dataclass
class JurisdictionRisk:
    country_code: str
    country_name: str
    entity_count: int
    transaction_value: float
    risk_score: float
    risk_level: str
    risk_factors: list[str] = field(default_factory=list)
    compliance_requirements: list[str] = field(default_factory=list)
    deadlines: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class MitigationAction:
    id: str
    title: str
    description: str
    priority: str = 'medium'
    category: str = 'documentation'
    status: str = 'pending'
    estimated_effort: str = ''
    expected_risk_reduction: float = 0.0
    resources_needed: list[str] = field(default_factory=list)
    progress: int = 0
    due_date: date | None = None
    assigned_to: str | None = None
    cost_estimate: str | None = None


@dataclass
class EngineResult:
    factors: list[RiskFactorInstance]
    categories: list[CategoryScore]
    overall: OverallRiskAssessment
    jurisdictions: list[JurisdictionRisk]
    factor_risk_score: float
    catalog_version: int
