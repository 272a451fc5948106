# pos/serializers/cart.py

"""
CART SESSION SERIALIZERS

Prices and stock ceilings are snapshotted server-side when a product is
added; the client only ever sends product ids and +/- deltas.
"""

from rest_framework import serializers

from pos.services.cart import OrderType, PaymentMethod


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    name = serializers.CharField()
    price = serializers.IntegerField()
    quantity = serializers.IntegerField()
    stock_ceiling = serializers.IntegerField()
    is_unlimited = serializers.BooleanField()
    line_total = serializers.IntegerField()


class CartSerializer(serializers.Serializer):
    handle = serializers.CharField()
    lines = CartLineSerializer(many=True)
    item_count = serializers.IntegerField()
    total = serializers.SerializerMethodField()

    def get_total(self, cart) -> int:
        return cart.total()


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)


class UpdateCartItemInputSerializer(serializers.Serializer):
    delta = serializers.IntegerField()


class CartCheckoutInputSerializer(serializers.Serializer):
    customer_name = serializers.CharField(allow_blank=True, trim_whitespace=True, max_length=255)
    order_type = serializers.ChoiceField(choices=OrderType.choices, default=OrderType.DINE_IN)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    amount_paid = serializers.IntegerField(min_value=0, required=False, allow_null=True)
