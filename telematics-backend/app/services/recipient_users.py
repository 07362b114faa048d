"""
Recipient pickers: users that can receive alerts for a set of accounts.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..core.pagination import get_pagination, pagination_meta
from ..models.sql import icontains, json_array_contains
from ..models.user import User, UserRole
from .equipment_resolver import coerce_ids


logger = logging.getLogger("recipient_users")


def _recipient_search(term: str):
    return or_(
        icontains(User.first_name, term),
        icontains(User.last_name, term),
        icontains(User.email, term),
        icontains(User.phone_number, term),
        User.user_role_ref.has(icontains(UserRole.name, term)),
        User.user_role_ref.has(icontains(UserRole.description, term)),
    )


def fetch_users_by_accounts(
    db: Session,
    account_ids: Optional[Iterable[Any]],
    customer_id: Optional[int] = None,
    page: Any = None,
    per_page: Any = None,
    filters: Optional[Mapping[str, Any]] = None,
) -> tuple[list[dict[str, Any]], dict[str, int]]:
    """
    Users of ``customer_id`` when given, else users assigned to any of
    ``account_ids``. ``filters`` may carry ``user_role_id`` and a free-text
    ``recipients`` search over names, email, phone and role.
    """
    skip, take, page_val, per_page_val = get_pagination(page, per_page)
    q = db.query(User)
    if customer_id is not None:
        q = q.filter(User.customer_id == customer_id)
    else:
        ids = coerce_ids(account_ids)
        if ids:
            q = q.filter(or_(*[json_array_contains(User.assigned_account_ids, account_id) for account_id in ids]))

    filters = filters or {}
    role_ids = coerce_ids([filters.get("user_role_id")])
    if role_ids:
        q = q.filter(User.user_role_id == role_ids[0])
    if filters.get("recipients"):
        q = q.filter(_recipient_search(str(filters["recipients"])))

    total = q.count()
    rows = (
        q.options(joinedload(User.user_role_ref))
        .order_by(User.user_id.asc())
        .offset(skip)
        .limit(take)
        .all()
    )
    users = [
        {
            "user_id": row.user_id,
            "first_name": row.first_name,
            "last_name": row.last_name,
            "email": row.email,
            "phone_number": row.phone_number,
            "user_role_id": row.user_role_id,
            "role_name": row.user_role_ref.name if row.user_role_ref else "",
            "role_description": row.user_role_ref.description if row.user_role_ref else None,
        }
        for row in rows
    ]
    logger.info("Retrieved %s recipient users", len(users))
    return users, pagination_meta(total, page_val, per_page_val)
