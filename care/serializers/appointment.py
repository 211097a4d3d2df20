from rest_framework import serializers

from care.serializers.cleaning import clean_text

DATE_INPUT_FORMATS = ['iso-8601', '%d.%m.%Y']


class AppointmentFormSerializer(serializers.Serializer):
    """Raw form fields; presence and format are checked by the engine."""
    date = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    startTime = serializers.CharField(required=False, allow_blank=True)
    endTime = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=4000)
    patient = serializers.CharField(required=False, allow_blank=True, max_length=255)
    category = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate_title(self, v):
        return clean_text(v)

    def validate_location(self, v):
        return clean_text(v)

    def validate_notes(self, v):
        return clean_text(v)

    def validate_patient(self, v):
        return clean_text(v)


class AppointmentQuerySerializer(serializers.Serializer):
    view = serializers.ChoiceField(choices=['week', 'month', 'all'], required=False, default='week')
    date = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    q = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
    category = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
    client = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
    startDate = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    endDate = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    timeRange = serializers.ChoiceField(choices=['', 'morning', 'afternoon'], required=False, default='')


class GridQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    columns = serializers.BooleanField(required=False, default=False)
    slotHeight = serializers.FloatField(required=False, min_value=1, max_value=1000)
    startHour = serializers.IntegerField(required=False, min_value=0, max_value=23)


class NavigateQuerySerializer(serializers.Serializer):
    view = serializers.ChoiceField(choices=['week', 'month', 'all'])
    date = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    step = serializers.IntegerField(min_value=-120, max_value=120, default=1)
