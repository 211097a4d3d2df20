from typing import Optional, Any, Dict, List
from care.services.store import DataStore
from care.services.storage import FileStorage

PHOTO_BUCKET = 'photos'
PHOTO_FOLDER = 'patient-photos'


def list_patients(store: DataStore, search: Optional[str]=None) -> List[Dict[str, Any]]:
    rows = store.select('patients')
    needle = (search or '').strip().lower()
    if not needle:
        return rows
    return [r for r in rows if needle in f"{r.get('firstname', '')} {r.get('lastname', '')}".lower()]


def create_patient(store: DataStore, data: Dict[str, Any]) -> Dict[str, Any]:
    record = {k: v for k, v in data.items() if k != 'id'}
    return store.insert('patients', record)


def photo_path(patient_id, filename: str) -> str:
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'bin'
    return f"{PHOTO_FOLDER}/{patient_id}.{ext}"


def save_patient_changes(store: DataStore, storage: FileStorage, patient_id, *, notes: Optional[str]=None, photo=None) -> Dict[str, Any]:
    """Upload the photo (if any), then write notes and photo URL.

    An unknown patient raises before anything is uploaded; nothing is
    written to the patient row when the upload fails.
    """
    store.get('patients', str(patient_id))
    changes: Dict[str, Any] = {}
    if photo is not None:
        changes['photo_url'] = storage.upload(PHOTO_BUCKET, photo_path(patient_id, photo.name), photo)
    if notes is not None:
        changes['notes'] = notes
    return store.update('patients', str(patient_id), changes)
