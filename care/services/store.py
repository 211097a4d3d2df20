"""
Data store collaborator.

The engine and the CRUD views talk to tables through the small
``select`` / ``insert`` / ``update`` capability below instead of
importing the ORM directly.  :class:`DjangoDataStore` is the production
implementation; :class:`InMemoryDataStore` backs deterministic tests.

Records are plain dicts.  Timestamps cross the boundary as ISO-8601
strings and ids as strings.
"""
from __future__ import annotations

import copy
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, models, transaction
from django.utils.dateparse import parse_date, parse_datetime

from care.exceptions import RecordNotFound, StoreError
from care.models import Appointment, Category, Patient, Relative

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class DataStore(Protocol):
    def select(self, table: str) -> List[Record]: ...

    def get(self, table: str, record_id: str) -> Record: ...

    def insert(self, table: str, record: Mapping[str, Any]) -> Record: ...

    def update(self, table: str, record_id: str, changes: Mapping[str, Any]) -> Record: ...


def _to_wire(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class DjangoDataStore:
    """Tables backed by the ``care`` models."""

    TABLES: Dict[str, type[models.Model]] = {
        'appointments': Appointment,
        'patients': Patient,
        'categories': Category,
        'relatives': Relative,
    }

    def _model(self, table: str) -> type[models.Model]:
        try:
            return self.TABLES[table]
        except KeyError:
            raise StoreError(f"unknown table {table!r}") from None

    def _serialize(self, obj: models.Model) -> Record:
        data = {f.attname: _to_wire(getattr(obj, f.attname)) for f in obj._meta.concrete_fields}
        data['id'] = str(obj.pk)
        return data

    def _coerce(self, model: type[models.Model], record: Mapping[str, Any]) -> Record:
        fields = {f.attname: f for f in model._meta.concrete_fields}
        unknown = set(record) - set(fields)
        if unknown:
            raise StoreError(f"unknown fields for {model._meta.model_name}: {sorted(unknown)}")
        out: Record = {}
        for key, value in record.items():
            f = fields[key]
            if isinstance(value, str) and isinstance(f, models.DateTimeField):
                parsed = parse_datetime(value)
                if parsed is None:
                    raise StoreError(f"{key}: not a timestamp")
                value = parsed
            elif isinstance(value, str) and isinstance(f, models.DateField):
                parsed = parse_date(value)
                if parsed is None:
                    raise StoreError(f"{key}: not a date")
                value = parsed
            out[key] = value
        return out

    def select(self, table: str) -> List[Record]:
        model = self._model(table)
        try:
            return [self._serialize(obj) for obj in model.objects.all()]
        except DatabaseError as exc:
            raise StoreError(f"select {table} failed: {exc}") from exc

    def get(self, table: str, record_id: str) -> Record:
        model = self._model(table)
        try:
            obj = model.objects.filter(pk=record_id).first()
        except (ValueError, DatabaseError) as exc:
            raise StoreError(f"get {table}/{record_id} failed: {exc}") from exc
        if obj is None:
            raise RecordNotFound(f"{table}/{record_id} not found")
        return self._serialize(obj)

    def insert(self, table: str, record: Mapping[str, Any]) -> Record:
        model = self._model(table)
        values = self._coerce(model, record)
        try:
            with transaction.atomic():
                obj = model(**values)
                obj.full_clean(validate_unique=True)
                obj.save(force_insert=True)
        except DjangoValidationError as exc:
            raise StoreError(f"insert into {table} rejected: {exc.message_dict}") from exc
        except DatabaseError as exc:
            raise StoreError(f"insert into {table} failed: {exc}") from exc
        return self._serialize(obj)

    def update(self, table: str, record_id: str, changes: Mapping[str, Any]) -> Record:
        model = self._model(table)
        values = self._coerce(model, changes)
        values.pop('id', None)
        try:
            with transaction.atomic():
                obj = model.objects.select_for_update().filter(pk=record_id).first()
                if obj is None:
                    raise RecordNotFound(f"{table}/{record_id} not found")
                for key, value in values.items():
                    setattr(obj, key, value)
                obj.save(update_fields=list(values) or None)
        except (ValueError, DjangoValidationError) as exc:
            raise StoreError(f"update {table}/{record_id} rejected: {exc}") from exc
        except DatabaseError as exc:
            raise StoreError(f"update {table}/{record_id} failed: {exc}") from exc
        return self._serialize(obj)


class InMemoryDataStore:
    """Dict-of-lists store; set ``fail`` to a table name (or ``'*'``) to simulate outages."""

    def __init__(self, tables: Optional[Mapping[str, List[Record]]] = None):
        self.tables: Dict[str, List[Record]] = {k: [dict(r) for r in v] for k, v in (tables or {}).items()}
        self.fail: Optional[str] = None

    def _check(self, table: str) -> None:
        if self.fail in (table, '*'):
            raise StoreError(f"{table} unavailable")

    def select(self, table: str) -> List[Record]:
        self._check(table)
        return copy.deepcopy(self.tables.get(table, []))

    def get(self, table: str, record_id: str) -> Record:
        self._check(table)
        for row in self.tables.get(table, []):
            if str(row.get('id')) == str(record_id):
                return dict(row)
        raise RecordNotFound(f"{table}/{record_id} not found")

    def insert(self, table: str, record: Mapping[str, Any]) -> Record:
        self._check(table)
        rows = self.tables.setdefault(table, [])
        if any(str(r.get('id')) == str(record.get('id')) for r in rows):
            raise StoreError(f"duplicate id {record.get('id')!r} in {table}")
        rows.append(dict(record))
        return dict(record)

    def update(self, table: str, record_id: str, changes: Mapping[str, Any]) -> Record:
        self._check(table)
        for row in self.tables.get(table, []):
            if str(row.get('id')) == str(record_id):
                row.update(changes)
                return dict(row)
        raise RecordNotFound(f"{table}/{record_id} not found")
