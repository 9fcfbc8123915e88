from werkzeug.security import generate_password_hash, check_password_hash


def hash_id_number(id_number: str) -> str:
    """Salted hash of a customer's ID number; the raw number is never stored."""
    return generate_password_hash(id_number.strip())


def check_id_number(id_number: str, hashed: str) -> bool:
    if not hashed:
        return False
    return check_password_hash(hashed, (id_number or "").strip())
