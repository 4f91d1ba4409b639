from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from velvet_routes.applications.inventory.models import InventoryItem
from velvet_routes.applications.reviews.models import Review


class ReviewSerializer(serializers.ModelSerializer):
    inventory_item = serializers.PrimaryKeyRelatedField(queryset=InventoryItem.objects.all())
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ["id", "inventory_item", "user_name", "rating", "title", "body", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]

    @extend_schema_field(str)
    def get_user_name(self, obj):
        return obj.user.name or obj.user.email.split("@")[0]

    def validate(self, attrs):
        # the reviewed item cannot be changed once the review exists
        if self.instance and "inventory_item" in attrs and attrs["inventory_item"] != self.instance.inventory_item:
            raise serializers.ValidationError({"inventory_item": "The reviewed item cannot be changed."})
        return attrs

    def create(self, validated_data):
        validated_data["user"] = self.context["request"].user
        return super().create(validated_data)
