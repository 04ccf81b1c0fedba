"""Django admin configuration for invoices."""

from django.contrib import admin
from django.utils.html import format_html, format_html_join

from .models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """Admin configuration for invoices."""

    list_display = ('invoice_number', 'get_offer_id', 'get_project', 'get_company', 'get_total', 'issued_at')
    list_filter = ('issued_at',)
    search_fields = ('invoice_number', 'offer__id', 'offer__project__title', 'offer__company__user__name')

    # الحقول اللي هتظهر جوه صفحة الفاتورة نفسها
    readonly_fields = ('invoice_number', 'offer', 'amount', 'issued_at', 'get_offer_details')

    def get_offer_id(self, obj):
        return f"#{obj.offer_id}"
    get_offer_id.short_description = 'رقم العرض'

    def get_project(self, obj):
        return obj.offer.project.title
    get_project.short_description = 'المشروع'

    def get_company(self, obj):
        return obj.offer.company.user.name
    get_company.short_description = 'الشركة'

    def get_total(self, obj):
        return f"{obj.amount} ريال"
    get_total.short_description = 'العربون'

    # Render offer details safely (escape all dynamic values).
    def get_offer_details(self, obj):
        offer = obj.offer
        rows = format_html_join(
            '',
            '<tr>'
            '<th style="padding: 8px; border: 1px solid #ddd; text-align: right;">{}</th>'
            '<td style="padding: 8px; border: 1px solid #ddd;">{}</td>'
            '</tr>',
            (
                ('المشروع', offer.project.title),
                ('صاحب المشروع', offer.project.owner.name),
                ('الشركة', offer.company.user.name),
                ('قيمة العرض', offer.amount),
                ('المدة', offer.duration),
                ('العربون', obj.amount),
            ),
        )
        return format_html(
            '<table style="width:100%; border-collapse: collapse; border:1px solid #ccc;">'
            '<tbody>{}</tbody>'
            '</table>',
            rows,
        )
    get_offer_details.short_description = 'تفاصيل الفاتورة'
