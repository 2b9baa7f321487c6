import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class EntityType(models.TextChoices):
    PARENT = 'parent', 'Parent'
    SUBSIDIARY = 'subsidiary', 'Subsidiary'
    BRANCH = 'branch', 'Branch'
    PARTNERSHIP = 'partnership', 'Partnership'
    OTHER = 'other', 'Other'


class TransactionType(models.TextChoices):
    TANGIBLE_GOODS = 'tangible_goods', 'Tangible Goods'
    SERVICES = 'services', 'Services'
    INTANGIBLE_PROPERTY = 'intangible_property', 'Intangible Property'
    FINANCIAL_TRANSACTIONS = 'financial_transactions', 'Financial Transactions'
    OTHER = 'other', 'Other'


class DocumentationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_REVIEW = 'in_review', 'In Review'
    COMPLETE = 'complete', 'Complete'


class PricingMethod(models.TextChoices):
    CUP = 'CUP', 'Comparable Uncontrolled Price'
    TNMM = 'TNMM', 'Transactional Net Margin Method'
    CPM = 'CPM', 'Cost Plus Method'
    PSM = 'PSM', 'Profit Split Method'
    RPM = 'RPM', 'Resale Price Method'
    OTHER = 'OTHER', 'Other'


class RiskLevel(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


class Severity(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


class RiskCategory(models.TextChoices):
    DOCUMENTATION = 'documentation', 'Documentation'
    ECONOMIC = 'economic', 'Economic'
    COMPLIANCE = 'compliance', 'Compliance'
    OPERATIONAL = 'operational', 'Operational'
    REGULATORY = 'regulatory', 'Regulatory'


class ActionStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'


class Entity(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    entity_type = models.CharField(max_length=16, choices=EntityType.choices, default=EntityType.SUBSIDIARY)
    country_code = models.CharField(max_length=8, db_index=True)
    tax_id = models.CharField(max_length=64, blank=True, default='')
    business_description = models.TextField(blank=True, default='')
    functional_analysis = models.JSONField(default=dict, blank=True)
    financial_data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'entities'

    def __str__(self) -> str:
        return f'{self.name} ({self.country_code})'


class Transaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    entity = models.ForeignKey(
        Entity,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions',
    )
    transaction_type = models.CharField(max_length=32, choices=TransactionType.choices, default=TransactionType.OTHER)
    description = models.TextField(blank=True, default='')
    amount = models.DecimalField(
        max_digits=20,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )
    currency = models.CharField(max_length=3, default='USD')
    pricing_method = models.CharField(max_length=8, choices=PricingMethod.choices, blank=True, default='')
    documentation_status = models.CharField(
        max_length=16,
        choices=DocumentationStatus.choices,
        default=DocumentationStatus.PENDING,
    )
    arm_length_range = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['transaction_type']),
            models.Index(fields=['documentation_status']),
        ]

    def __str__(self) -> str:
        return f'{self.transaction_type}: {self.amount} {self.currency}'


class Comparable(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='comparables',
    )
    comparable_name = models.CharField(max_length=255)
    country = models.CharField(max_length=8, db_index=True)
    industry = models.CharField(max_length=128, blank=True, default='')
    financial_data = models.JSONField(default=dict, blank=True)
    search_criteria = models.JSONField(default=dict, blank=True)
    reliability_score = models.FloatField(
        default=50.0,
        validators=[MinValueValidator(0.0), MaxValueValidator(100.0)],
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['comparable_name']
        indexes = [
            models.Index(fields=['industry']),
        ]

    def __str__(self) -> str:
        return self.comparable_name


class RiskAssessment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    entity = models.ForeignKey(
        Entity,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='risk_assessments',
    )
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='risk_assessments',
    )
    assessment_date = models.DateTimeField(db_index=True)
    overall_score = models.FloatField(
        default=0.0,
        validators=[MinValueValidator(0.0), MaxValueValidator(100.0)],
    )
    risk_level = models.CharField(max_length=16, choices=RiskLevel.choices, default=RiskLevel.LOW)
    risk_factors = models.JSONField(default=dict, blank=True)
    recommendations = models.JSONField(default=list, blank=True)
    catalog_version = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ['-assessment_date']

    def __str__(self) -> str:
        return f'{self.risk_level} @ {self.assessment_date.isoformat()}'
