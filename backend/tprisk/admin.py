from django.contrib import admin

from tprisk.models import Comparable, Entity, RiskAssessment, Transaction


@admin.register(Entity)
class EntityAdmin(admin.ModelAdmin):
    list_display = ('name', 'entity_type', 'country_code', 'tax_id', 'updated_at')
    list_filter = ('entity_type', 'country_code')
    search_fields = ('name', 'tax_id')


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_type', 'entity', 'amount', 'currency', 'pricing_method', 'documentation_status')
    list_filter = ('transaction_type', 'documentation_status', 'pricing_method')
    search_fields = ('description', 'entity__name')


@admin.register(Comparable)
class ComparableAdmin(admin.ModelAdmin):
    list_display = ('comparable_name', 'country', 'industry', 'reliability_score')
    list_filter = ('country', 'industry')
    search_fields = ('comparable_name',)


@admin.register(RiskAssessment)
class RiskAssessmentAdmin(admin.ModelAdmin):
    list_display = ('assessment_date', 'entity', 'overall_score', 'risk_level', 'catalog_version')
    list_filter = ('risk_level', 'catalog_version')
    readonly_fields = (
        'entity',
        'transaction',
        'assessment_date',
        'overall_score',
        'risk_level',
        'risk_factors',
        'recommendations',
        'catalog_version',
    )
