# pos/serializers/checkout.py

"""
CHECKOUT SERIALIZERS

Input:
- customer_name may be blank here on purpose: a blank name is a checkout
  error (missing_customer), not a field-format error.
- items may be empty for the same reason (empty_cart).
- amount_paid omitted / null -> paid exactly (tendered = total).

Money is never accepted from the client: prices come from the catalog.
"""

from rest_framework import serializers

from pos.services.cart import OrderType, PaymentMethod


class CheckoutItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class CheckoutInputSerializer(serializers.Serializer):
    customer_name = serializers.CharField(allow_blank=True, trim_whitespace=True, max_length=255)
    order_type = serializers.ChoiceField(choices=OrderType.choices, default=OrderType.DINE_IN)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    amount_paid = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    items = CheckoutItemInputSerializer(many=True, allow_empty=True)


class StockWarningSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    reason = serializers.CharField()


class CheckoutResultSerializer(serializers.Serializer):
    transaction_id = serializers.IntegerField()
    total_amount = serializers.IntegerField()
    amount_paid = serializers.IntegerField()
    change_amount = serializers.IntegerField()
    warnings = StockWarningSerializer(many=True)
