"""
Serializers for conversion endpoints.
"""

from rest_framework import serializers


class ConvertRequestSerializer(serializers.Serializer):
    """
    Body of a convert call.

    ``post_id`` is accepted as an alias of ``article_id`` for embedded
    widgets that post the article's data attribute as-is.
    """
    article_id = serializers.IntegerField(min_value=1, required=False)
    post_id = serializers.IntegerField(min_value=1, required=False, write_only=True)
    format = serializers.CharField(max_length=32, trim_whitespace=True)

    def validate(self, attrs):
        article_id = attrs.get('article_id') or attrs.pop('post_id', None)
        if article_id is None:
            raise serializers.ValidationError({'article_id': ['This field is required.']})
        attrs['article_id'] = article_id
        attrs.pop('post_id', None)
        return attrs


class ConvertResponseSerializer(serializers.Serializer):
    content = serializers.CharField()
    format = serializers.CharField()


class ClearCacheResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    deleted = serializers.IntegerField()
