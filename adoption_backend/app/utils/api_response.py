# app/utils/api_response.py
"""
The JSON envelope every endpoint answers with.

    success:   {"success": true,  "message": ..., "data": ...}
    paginated: {"success": true,  "message": ..., "data": [...], "pagination": {...}}
    error:     {"success": false, "message": ..., "errors": ...}
"""
import math
from typing import Any, Dict, List, Optional

from flask import jsonify


def build_pagination(page: int, limit: int, total: int, count: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
        "count": count,
    }


def success_response(message: str = 'Success', data: Any = None, status_code: int = 200):
    body: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status_code


def created_response(message: str = 'Resource created successfully', data: Any = None):
    return success_response(message, data, 201)


def paginated_response(message: str, data: List[Any], pagination: Dict[str, int], status_code: int = 200):
    return jsonify({
        "success": True,
        "message": message,
        "data": data,
        "pagination": pagination,
    }), status_code


def error_response(message: str, status_code: int, errors: Optional[Any] = None):
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status_code
