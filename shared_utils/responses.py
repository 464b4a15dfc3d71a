import math
from typing import Any, Dict, List, Optional


def envelope(data: Any = None, message: Optional[str] = None, pagination: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    """Success body shared by every endpoint"""
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body


def error_envelope(message: str, errors: Optional[List[Dict[str, Any]]] = None, data: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return body


def paginate(query, page: int, limit: int):
    """Apply offset/limit to a query and return (rows, pagination dict)"""
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def dump(schema, obj) -> Dict[str, Any]:
    """Shape an ORM row through a response schema into JSON-ready data"""
    return schema.model_validate(obj).model_dump(mode="json")


def dump_many(schema, rows) -> List[Dict[str, Any]]:
    return [dump(schema, row) for row in rows]
