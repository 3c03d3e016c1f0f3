from rest_framework import serializers


class RevisionSerializer(serializers.Serializer):
    revision_id = serializers.IntegerField()
    timestamp = serializers.DateTimeField()
    actor = serializers.CharField()


class SnapshotSerializer(serializers.Serializer):
    entity_type = serializers.CharField()
    entity_id = serializers.ReadOnlyField()
    revision_id = serializers.IntegerField()
    change_kind = serializers.CharField()
    # raw field values; the JSON renderer handles dates and decimals
    field_state = serializers.ReadOnlyField()
    timestamp = serializers.DateTimeField()
    actor = serializers.CharField()
