"""
Builds the platform and user catalogs referenced across the four dumps.

Platforms and users have no dump of their own: they only exist embedded in
prods, groups, parties and boards. The normalizer collects them into maps
keyed by id so the loader can insert them before anything references them.
"""

import dataclasses

from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .domain import Platform, User


def _to_platform(platform_id: int, ref: Any) -> Platform:
    return Platform(id=platform_id, name=ref.name, icon=ref.icon, slug=ref.slug)


def _to_user(ref: Any) -> User:
    return User(
        id=ref.id,
        nickname=ref.nickname,
        level=ref.level,
        avatar=ref.avatar,
        glops=ref.glops,
        register_date=ref.register_date,
    )


def _merge_user(known: User, ref: Any) -> User:
    """Fills the fields still missing on a known user from another reference."""
    missing = {
        field.name: getattr(ref, field.name)
        for field in dataclasses.fields(User)
        if getattr(known, field.name) is None
        and getattr(ref, field.name) is not None
    }
    return dataclasses.replace(known, **missing) if missing else known


def _embedded_users(
    prods: Sequence[Any],
    groups: Sequence[Any],
    parties: Sequence[Any],
    boards: Sequence[Any],
) -> Iterable[Optional[Any]]:
    for prod in prods:
        yield prod.added_user
        for credit in prod.credits:
            yield credit.user
    for record in (*groups, *parties, *boards):
        yield record.added_user


def build_catalogs(
    prods: Sequence[Any],
    groups: Sequence[Any],
    parties: Sequence[Any],
    boards: Sequence[Any],
) -> Tuple[Dict[int, Platform], Dict[int, User]]:
    """
    Scans every record for embedded platform and user references.

    The first occurrence of a platform id wins. References to the same user
    are merged: fields still unset are filled from later references in scan
    order, and a field once set is never overwritten. Identical input always
    yields identical catalogs.

    Returns:
        The platform map and the user map, both keyed by integer id.
    """

    platforms: Dict[int, Platform] = {}
    for record in (*prods, *boards):
        for platform_id, ref in record.platforms.items():
            platforms.setdefault(platform_id, _to_platform(platform_id, ref))

    users: Dict[int, User] = {}
    for ref in _embedded_users(prods, groups, parties, boards):
        if ref is None:
            continue
        known = users.get(ref.id)
        users[ref.id] = _to_user(ref) if known is None else _merge_user(known, ref)

    return platforms, users
