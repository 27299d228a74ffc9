from rest_framework import serializers


class ServiceSerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField()
    image = serializers.CharField()
    price_start = serializers.FloatField()
    features = serializers.ListField(child=serializers.CharField())


class ProductItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    service_id = serializers.CharField()
    name = serializers.CharField()
    image = serializers.CharField()
    images = serializers.ListField(child=serializers.CharField())
    price = serializers.FloatField()
    old_price = serializers.FloatField()
    discount_percent = serializers.IntegerField()
    discount_text = serializers.CharField()
    short_description = serializers.CharField()
    full_description = serializers.CharField()
    tags = serializers.ListField(child=serializers.CharField())
    rating = serializers.FloatField()
    reviews_count = serializers.IntegerField()
    stock_qty = serializers.IntegerField()
    availability = serializers.CharField()
    delivery_time_estimate = serializers.CharField()
    currency = serializers.CharField()


class TestimonialSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    rating = serializers.FloatField()
    comment = serializers.CharField()
    image = serializers.CharField()


class CapturedMomentSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    type = serializers.CharField()
    image_url = serializers.CharField()
    timestamp = serializers.DateTimeField(allow_null=True)


class CatalogSnapshotSerializer(serializers.Serializer):
    services = ServiceSerializer(many=True)
    products = ProductItemSerializer(many=True)
    testimonials = TestimonialSerializer(many=True)
    moments = CapturedMomentSerializer(many=True)
    loading = serializers.BooleanField()
