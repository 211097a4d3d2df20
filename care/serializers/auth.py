import re

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from care.serializers.cleaning import clean_text
from care.services.datetimes import parse_german_date

User = get_user_model()

# at least 8 characters, one digit, one special character
PASSWORD_RE = re.compile(r'^(?=.*\d)(?=.*[!@#$%^&*(),.?":{}|<>]).{8,}$')


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Benutzername darf nicht leer sein')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Passwort darf nicht leer sein')
        return v


class RegisterSerializer(serializers.Serializer):
    sex = serializers.ChoiceField(choices=[c for c, _ in User.SEX_CHOICES], required=False, default='Herr')
    username = serializers.CharField(max_length=150)
    firstname = serializers.CharField(max_length=150)
    lastname = serializers.CharField(max_length=150)
    birthdate = serializers.CharField(max_length=10)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    confirmPassword = serializers.CharField(write_only=True)

    def validate_username(self, v):
        v = clean_text(v)
        if User.objects.filter(username__iexact=v).exists():
            raise serializers.ValidationError('Benutzername ist bereits vergeben.')
        return v

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('Diese E-Mail-Adresse ist bereits registriert.')
        return v

    def validate_firstname(self, v):
        return clean_text(v)

    def validate_lastname(self, v):
        return clean_text(v)

    def validate_address(self, v):
        return clean_text(v)

    def validate_birthdate(self, v):
        parsed = parse_german_date(v)
        if parsed is None:
            raise serializers.ValidationError('Bitte gib dein Geburtsdatum im Format TT.MM.JJJJ ein.')
        return parsed

    def validate(self, attrs):
        password = attrs['password']
        if not PASSWORD_RE.match(password):
            raise serializers.ValidationError({'password': 'Passwort muss mindestens 8 Zeichen, eine Zahl und ein Sonderzeichen enthalten.'})
        if password != attrs['confirmPassword']:
            raise serializers.ValidationError({'confirmPassword': 'Passwörter stimmen nicht überein.'})
        candidate = User(
            username=attrs['username'],
            first_name=attrs['firstname'],
            last_name=attrs['lastname'],
            email=attrs['email'],
        )
        try:
            validate_password(password, user=candidate)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'password': e.messages})
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(
            username=validated_data['username'],
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=validated_data['firstname'],
            last_name=validated_data['lastname'],
            sex=validated_data['sex'],
            birth_date=validated_data['birthdate'],
            address=validated_data['address'],
        )
