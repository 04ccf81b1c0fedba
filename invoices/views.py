"""Invoice listing for project owners, companies and admins."""

from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import is_admin

from .models import Invoice
from .serializers import InvoiceSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_list(request):
    qs = Invoice.objects.select_related('offer__project', 'offer__company__user')
    if not is_admin(request.user):
        qs = qs.filter(Q(offer__project__owner=request.user) | Q(offer__company__user=request.user))
    return Response(InvoiceSerializer(qs, many=True).data)
