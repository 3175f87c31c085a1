import json

from django.contrib import admin
from django.utils.html import format_html

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        'pg_order_id',
        'reservation_link',
        'branch',
        'amount_won',
        'payment_method',
        'status',
        'settlement_status',
        'paid_at',
        'is_terminal',
    )
    list_filter = ('status', 'payment_method', 'settlement_status', 'branch', 'created_at')
    search_fields = (
        'pg_order_id',
        'pg_transaction_id',
        'reservation__reservation_number',
        'reservation__customer_name',
        'virtual_account_number',
    )
    readonly_fields = (
        'created_at',
        'updated_at',
        'is_terminal',
        'reservation_link',
        'gateway_response_preview',
    )
    fieldsets = (
        ('Basic Information', {
            'fields': (
                'reservation_link',
                'branch',
                'payment_method',
                'status',
                'amount',
                'error_message',
            )
        }),
        ('Gateway', {
            'fields': (
                'pg_provider',
                'pg_order_id',
                'pg_transaction_id',
                'card_company',
                'card_number',
                'installment_months',
                'paid_at',
            )
        }),
        ('Virtual Account', {
            'fields': (
                'virtual_account_number',
                'virtual_account_bank',
                'virtual_account_holder',
                'virtual_account_due_date',
            ),
            'classes': ('collapse',)
        }),
        ('Refund', {
            'fields': ('refund_amount', 'refund_reason', 'refunded_at', 'cancelled_at'),
            'classes': ('collapse',)
        }),
        ('Settlement', {
            'fields': (
                'hq_fee_rate',
                'settlement_status',
                ('branch_submall_id', 'branch_settlement_amount', 'branch_settlement_status'),
                ('branch_settled_amount', 'branch_settled_at'),
                ('hq_submall_id', 'hq_settlement_amount', 'hq_settlement_status'),
                ('hq_settled_amount', 'hq_settled_at'),
                'settlement_error_message',
            )
        }),
        ('Gateway Response', {
            'fields': ('gateway_response_preview',),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'is_terminal'),
            'classes': ('collapse',)
        })
    )

    def reservation_link(self, obj):
        if obj.reservation_id:
            url = f"/admin/booking/reservation/{obj.reservation_id}/change/"
            return format_html('<a href="{}">{}</a>', url, obj.reservation.reservation_number)
        return "-"
    reservation_link.short_description = "Reservation"

    def amount_won(self, obj):
        return f"{obj.amount:,}원"
    amount_won.short_description = "Amount"
    amount_won.admin_order_field = 'amount'

    def gateway_response_preview(self, obj):
        if obj.gateway_response:
            formatted_json = json.dumps(obj.gateway_response, indent=2, ensure_ascii=False)
            return format_html('<pre style="max-height: 300px; overflow: auto;">{}</pre>', formatted_json)
        return "No gateway response"
    gateway_response_preview.short_description = "Gateway response"

    def is_terminal(self, obj):
        return obj.is_terminal
    is_terminal.boolean = True
    is_terminal.short_description = "Terminal Status"
