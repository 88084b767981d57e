from passlib.context import CryptContext

# Use Argon2 for password hashing (salted, fixed cost parameters)
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
