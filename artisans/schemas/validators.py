MIN_PASSWORD_LENGTH = 8


def normalize_email(value: str) -> str:
    """EmailStr checks the format; addresses are compared lowercased."""
    return value.strip().lower()


def check_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return value
