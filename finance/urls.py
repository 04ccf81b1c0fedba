"""URL routes for transactions and Moyasar payments (mounted under /api/)."""

from django.urls import path

from .views import create_offer_invoice, invoice_detail, refund_payment, transaction_list

urlpatterns = [
    path('transactions/', transaction_list, name='transaction_list'),
    path('payments/offers/<int:offer_id>/invoice/', create_offer_invoice, name='offer_invoice'),
    path('payments/invoices/<str:invoice_id>/', invoice_detail, name='moyasar_invoice_detail'),
    path('payments/<str:payment_id>/refund/', refund_payment, name='refund_payment'),
]
