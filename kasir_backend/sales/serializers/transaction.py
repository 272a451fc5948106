# sales/serializers/transaction.py

"""
Read serializers for history / analytics.
Rows come from the record store as plain dicts, so these are plain
Serializers, not ModelSerializers.
"""

from rest_framework import serializers


class TransactionItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    transaction_id = serializers.IntegerField(read_only=True)
    product_id = serializers.IntegerField(read_only=True)
    product_name = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    price = serializers.IntegerField(read_only=True)


class TransactionSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    total_amount = serializers.IntegerField(read_only=True)
    customer_name = serializers.CharField(read_only=True)
    order_type = serializers.CharField(read_only=True)
    payment_method = serializers.CharField(read_only=True)
    amount_paid = serializers.IntegerField(read_only=True)
    change_amount = serializers.IntegerField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)
    items = TransactionItemSerializer(many=True, read_only=True)


class DailySalesSerializer(serializers.Serializer):
    date = serializers.CharField(read_only=True)
    total = serializers.IntegerField(read_only=True)


class TopProductSerializer(serializers.Serializer):
    name = serializers.CharField(read_only=True)
    total_quantity = serializers.IntegerField(read_only=True)


class AnalyticsSerializer(serializers.Serializer):
    daily_sales = DailySalesSerializer(many=True, read_only=True)
    top_products = TopProductSerializer(many=True, read_only=True)
