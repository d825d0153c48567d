"""(De)serialization of the JSON-valued TEXT columns."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional


def safe_json_loads(v: Any) -> Any:
    if v is None or v == "":
        return None
    if isinstance(v, (dict, list)):
        return v
    try:
        return json.loads(str(v))
    except (TypeError, ValueError):
        return None


def loads_list(v: Any) -> List[Any]:
    parsed = safe_json_loads(v)
    return parsed if isinstance(parsed, list) else []


def loads_dict(v: Any) -> Dict[str, Any]:
    parsed = safe_json_loads(v)
    return parsed if isinstance(parsed, dict) else {}


def dumps(v: Any) -> Optional[str]:
    if v is None:
        return None
    return json.dumps(v, ensure_ascii=False)
