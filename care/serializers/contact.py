from rest_framework import serializers

from care.serializers.cleaning import clean_text


class ContactSerializer(serializers.Serializer):
    firstname = serializers.CharField(max_length=100)
    lastname = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    message = serializers.CharField(max_length=5000)

    def validate_message(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Nachricht darf nicht leer sein')
        return v
