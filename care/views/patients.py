"""
Patient views: list with name search, create, and the edit dialog that
saves notes and an optional photo.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.serializers.patient import PatientCreateSerializer, PatientListQuerySerializer, PatientUpdateSerializer
from care.services.audit import log_action
from care.services.patients import create_patient, list_patients, save_patient_changes
from care.services.storage import FileStorage
from care.services.store import DjangoDataStore


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patients(request):
    """GET: list, optionally narrowed by ``search`` on "firstname lastname". POST: create."""
    store = DjangoDataStore()
    if request.method == 'POST':
        s = PatientCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        row = create_patient(store, s.validated_data)
        log_action(user=request.user, action='patient_create', object_type='patient', object_id=row['id'])
        return Response({'ok': True, 'data': row}, status=status.HTTP_201_CREATED)

    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    rows = list_patients(store, q.validated_data['search'])
    return Response({'ok': True, 'total': len(rows), 'data': rows})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def update_patient(request, pk: int):
    s = PatientUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        row = save_patient_changes(
            DjangoDataStore(),
            FileStorage(),
            pk,
            notes=vd.get('notes'),
            photo=vd.get('photo'),
        )
    except ValueError as e:
        raise ValidationError({'photo': [str(e)]})
    log_action(user=request.user, action='patient_update', object_type='patient', object_id=pk,
               detail={'fields': sorted(k for k in ('notes', 'photo') if k in vd)})
    return Response({'ok': True, 'data': row})
