from rest_framework import serializers

from velvet_routes.applications.trips.models import Trip


class ActivitySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    completed = serializers.BooleanField(default=False)


class TripSerializer(serializers.ModelSerializer):
    startDate = serializers.DateField(source="start_date")  # noqa: N815
    endDate = serializers.DateField(source="end_date")  # noqa: N815
    activities = serializers.ListField(child=ActivitySerializer(), required=False)
    location = serializers.JSONField(required=False, allow_null=True)

    class Meta:
        model = Trip
        fields = ["id", "title", "destination", "startDate", "endDate", "description", "activities", "location"]

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"endDate": "End date must not be before the start date."})
        return attrs

    def create(self, validated_data):
        validated_data["user"] = self.context["request"].user
        return super().create(validated_data)
