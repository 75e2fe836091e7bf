from datetime import datetime, timedelta, timezone
import jwt
import os
from dotenv import load_dotenv

load_dotenv(override=True)

def generate_token(email, user_id, days=0, minutes=0):
    utc_now = datetime.now(timezone.utc)
    payload = {
        "email": email,
        "user_id": str(user_id),
        "exp": (utc_now + timedelta(days=days, minutes=minutes)).timestamp(),
        "iat": utc_now.timestamp()
    }
    return jwt.encode(payload, get_secret_key(), algorithm="HS256")

def generate_auth_token(email, user_id):
    return generate_token(email, user_id, days=int(os.getenv("AUTH_TOKEN_DAYS", "30")))

def decode_token(token):
    return jwt.decode(token, get_secret_key(), algorithms=["HS256"])

def is_token_expired(token):
    return datetime.now(timezone.utc) > datetime.fromtimestamp(token["exp"], timezone.utc)

def get_secret_key():
    return os.getenv("SECRET_KEY")
