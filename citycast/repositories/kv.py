import json
from typing import Any, Optional
from citycast.models import KeyValue, _utcnow


def get_value(session, key: str) -> Optional[Any]:
    """
    Returns the decoded JSON value stored under key, or None if absent.
    Raises ValueError if the stored text is not valid JSON.
    """
    row = session.get(KeyValue, key)
    if not row:
        return None
    return json.loads(row.value_json)

def put_value(session, key: str, value: Any) -> KeyValue:
    row = session.get(KeyValue, key)
    if row is None:
        row = KeyValue(key=key, value_json=json.dumps(value))
    else:
        row.value_json = json.dumps(value)
        row.updated_at = _utcnow()
    session.add(row)
    session.commit()
    session.refresh(row)
    return row

def delete_value(session, key: str) -> bool:
    row = session.get(KeyValue, key)
    if not row:
        return False
    session.delete(row)
    session.commit()
    return True
