"""
Appointment calendar views.

Each request builds its own :class:`~care.services.engine.AppointmentEngine`
over the database-backed store, loads the collection once and answers
from memory.  Query dates accept ISO (``2024-05-15``) or German
(``15.05.2024``) notation; the reference date defaults to today in the
configured timezone.
"""
from __future__ import annotations

from dataclasses import asdict

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.serializers.appointment import (
    AppointmentFormSerializer,
    AppointmentQuerySerializer,
    GridQuerySerializer,
    NavigateQuerySerializer,
)
from care.services import layout
from care.services.audit import log_action
from care.services.datetimes import week_bounds
from care.services.engine import AppointmentEngine, AttributeFilter, navigate
from care.services.store import DjangoDataStore


def _engine(load: bool = True) -> AppointmentEngine:
    engine = AppointmentEngine(DjangoDataStore())
    if load:
        engine.load()
    return engine


def _block_payload(block: layout.Block) -> dict:
    data = asdict(block)
    data['showNotes'] = block.show_notes
    return data


def _grid_config(vd) -> layout.GridConfig:
    overrides = {}
    if vd.get('slotHeight') is not None:
        overrides['slot_height'] = vd['slotHeight']
    if vd.get('startHour') is not None:
        overrides['start_hour'] = vd['startHour']
    return layout.GridConfig(**overrides)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments(request):
    """List the visible appointments or create one.

    GET query params:
      - view: week | month | all (default week)
      - date: reference date
      - q, category, client, startDate, endDate, timeRange: filter panel
    POST body: date (TT.MM.JJJJ), title, startTime, endTime, location,
    optional notes, patient, category.
    """
    if request.method == 'POST':
        return _create_appointment(request)

    q = AppointmentQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    ref = vd.get('date') or timezone.localdate()
    flt = AttributeFilter(
        term=vd['q'].strip(),
        category=vd['category'].strip(),
        client=vd['client'].strip(),
        start_date=vd.get('startDate'),
        end_date=vd.get('endDate'),
        time_range=vd['timeRange'],
    )
    engine = _engine()
    items = engine.visible(vd['view'], ref, flt)
    return Response({
        'ok': True,
        'view': vd['view'],
        'date': ref.isoformat(),
        'total': len(items),
        'data': [a.to_record() for a in items],
    })


def _create_appointment(request):
    s = AppointmentFormSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    engine = _engine(load=False)
    appt = engine.add(s.validated_data)
    log_action(user=request.user, action='appointment_create', object_type='appointment',
               object_id=appt.id, detail={'start': appt.start.isoformat()})
    return Response({'ok': True, 'data': appt.to_record()}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointments_week(request):
    """Seven day columns (Monday first) with block geometry."""
    q = GridQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    ref = vd.get('date') or timezone.localdate()
    config = _grid_config(vd)
    engine = _engine()
    days = engine.week_layout(ref, config, columns=vd['columns'])
    lower, upper = week_bounds(ref, engine.tz)
    return Response({
        'ok': True,
        'from': lower.isoformat(),
        'to': upper.isoformat(),
        'slotHeight': config.slot_height,
        'startHour': config.start_hour,
        'days': [{'date': d.isoformat(), 'blocks': [_block_payload(b) for b in blocks]} for d, blocks in days],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointments_day(request):
    q = GridQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    day = vd.get('date') or timezone.localdate()
    blocks = _engine().day_layout(day, _grid_config(vd), columns=vd['columns'])
    return Response({'ok': True, 'date': day.isoformat(), 'blocks': [_block_payload(b) for b in blocks]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointments_navigate(request):
    """Reference date one page back or forward (``step`` pages)."""
    q = NavigateQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    ref = vd.get('date') or timezone.localdate()
    target = navigate(vd['view'], ref, vd['step'])
    return Response({'ok': True, 'view': vd['view'], 'date': target.isoformat()})
