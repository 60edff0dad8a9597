# app/utils/pagination.py

import math
from typing import Any, List, Tuple
from sqlalchemy.orm import Query

from app.core.config import settings


def normalizar_pagina(page: int, limit: int) -> Tuple[int, int]:
    """Acota page >= 1 y 1 <= limit <= MAX_PAGE_SIZE."""
    page = max(page or 1, 1)
    limit = limit or settings.DEFAULT_PAGE_SIZE
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    return page, limit


def paginar(query: Query, page: int, limit: int) -> Tuple[List[Any], int, int, int, int]:
    """Devuelve (items, total, page, limit, pages) de una consulta ya ordenada."""
    page, limit = normalizar_pagina(page, limit)
    total = query.count()
    offset = (page - 1) * limit
    items = query.offset(offset).limit(limit).all()
    pages = math.ceil(total / limit) if total else 0
    return items, total, page, limit, pages
