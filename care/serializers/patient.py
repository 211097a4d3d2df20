from rest_framework import serializers

from care.serializers.cleaning import clean_text


class PatientCreateSerializer(serializers.Serializer):
    firstname = serializers.CharField(max_length=100)
    lastname = serializers.CharField(max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    birth_date = serializers.DateField(required=False, allow_null=True, default=None)
    care_level = serializers.IntegerField(min_value=1, max_value=5, default=1)
    pronoun = serializers.CharField(required=False, allow_blank=True, max_length=32, default='')
    active = serializers.BooleanField(default=True)
    active_since = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_firstname(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Vorname darf nicht leer sein')
        return v

    def validate_lastname(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Nachname darf nicht leer sein')
        return v

    def validate_pronoun(self, v):
        return clean_text(v)

    def validate_notes(self, v):
        return clean_text(v)


class PatientUpdateSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    photo = serializers.FileField(required=False)

    def validate_notes(self, v):
        return clean_text(v)


class PatientListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
