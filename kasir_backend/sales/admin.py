# sales/admin.py

from django.contrib import admin

from sales.models import CheckoutJournal, Transaction, TransactionItem


# ======================================================
# TRANSACTION ADMIN (READ-ONLY: append-only records)
# ======================================================


class TransactionItemInline(admin.TabularInline):
    model = TransactionItem
    extra = 0
    can_delete = False
    readonly_fields = ("product_id", "product_name", "quantity", "price")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer_name",
        "order_type",
        "payment_method",
        "total_amount",
        "timestamp",
    )
    list_filter = ("order_type", "payment_method", "timestamp")
    search_fields = ("customer_name",)
    inlines = [TransactionItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# CHECKOUT JOURNAL ADMIN
# ======================================================


@admin.register(CheckoutJournal)
class CheckoutJournalAdmin(admin.ModelAdmin):
    list_display = ("id", "status", "transaction_id", "created_at", "updated_at")
    list_filter = ("status",)
    search_fields = ("transaction_id",)
    readonly_fields = ("payload", "error", "created_at", "updated_at")
