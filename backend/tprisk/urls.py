from django.urls import path

from tprisk import views

urlpatterns = [
    path('health', views.HealthAPIView.as_view(), name='health-api'),
    path('statistics', views.StatisticsAPIView.as_view(), name='statistics-api'),
    path('assessment', views.AssessmentAPIView.as_view(), name='assessment-api'),
    path('jurisdictions', views.JurisdictionsAPIView.as_view(), name='jurisdictions-api'),
    path('mitigation-plan', views.MitigationPlanAPIView.as_view(), name='mitigation-plan-api'),
    path('mitigation-plan/seed', views.MitigationPlanSeedAPIView.as_view(), name='mitigation-plan-seed-api'),
    path('mitigation-plan/<str:action_id>', views.MitigationActionAPIView.as_view(), name='mitigation-action-api'),
]
