"""URL routes for NDAs and the Sadiq integration (mounted under /api/)."""

from django.urls import path

from . import views

urlpatterns = [
    path('projects/<int:project_id>/nda/', views.project_ndas, name='project_ndas'),
    path('projects/<int:project_id>/nda/initiate/', views.initiate_nda, name='nda_initiate'),
    path('nda/<int:nda_id>/', views.nda_detail, name='nda_detail'),
    path('nda/<int:nda_id>/complete/', views.complete_nda, name='nda_complete'),
    path('nda/<int:nda_id>/status/', views.nda_status, name='nda_status'),
    path('nda/<int:nda_id>/download/', views.nda_download, name='nda_download'),
    path('sadiq/webhook', views.sadiq_webhook, name='sadiq_webhook'),
    path('sadiq/authenticate', views.sadiq_authenticate, name='sadiq_authenticate'),
    path('sadiq/send-invitation', views.sadiq_send_invitation, name='sadiq_send_invitation'),
    path('sadiq/upload-document', views.sadiq_upload_document, name='sadiq_upload_document'),
]
