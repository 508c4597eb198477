"""
Example dataset builder for demos and large-dataset tests.

Builds deterministic user records (same id -> same record) with a mix of
strings, numbers, booleans and a nested metadata mapping.
"""
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List

FIRST_NAMES = ["John", "Jane", "Alice", "Bob", "Carol", "Dave", "Eve", "Mallory", "Trent", "Peggy"]
LAST_NAMES = ["Smith", "Doe", "Brown", "O'Neil", "García", "Nguyen", "Müller", "Kowalski"]
ROLES = ["admin", "user", "moderator", "guest"]
THEMES = ["light", "dark"]

_EPOCH = datetime(2024, 1, 1)


def build_user(user_id: int) -> Dict[str, Any]:
    rng = random.Random(user_id)
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    created = _EPOCH + timedelta(minutes=rng.randint(0, 2 * 365 * 24 * 60))
    return {
        "id": user_id,
        "username": f"{first.lower()}.{last.lower()}{user_id}",
        "email": f"{first.lower()}{user_id}@example.com",
        "firstName": first,
        "lastName": last,
        "age": rng.randint(18, 82),
        "active": rng.random() < 0.66,
        "balance": round(rng.uniform(0, 9999.99), 2),
        "role": rng.choice(ROLES),
        "createdAt": created.isoformat(),
        "metadata": {
            "loginCount": rng.randint(0, 999),
            "preferences": {
                "theme": rng.choice(THEMES),
                "notifications": rng.random() < 0.5,
            },
        },
    }


def build_users(count: int = 100, start_id: int = 1) -> List[Dict[str, Any]]:
    return [build_user(i) for i in range(start_id, start_id + count)]


def flatten_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Flat copy of a user record (no nested mappings), suitable for CSV."""
    flat = {k: v for k, v in user.items() if k != "metadata"}
    flat["loginCount"] = user["metadata"]["loginCount"]
    flat["theme"] = user["metadata"]["preferences"]["theme"]
    return flat
