"""Identity claim handed over by the external auth layer.

The messaging routes consume an opaque user id and role as-is; only teachers
and students may use them.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Header, HTTPException
from models.messaging.message_models import Role


@dataclass(frozen=True)
class CurrentUser:
	user_id: str
	role: Role


def get_current_user(
	x_user_id: Optional[str] = Header(None),
	x_user_role: Optional[str] = Header(None),
) -> CurrentUser:
	if not x_user_id:
		raise HTTPException(status_code=401, detail="Missing user identity")
	try:
		role = Role(x_user_role)
	except ValueError:
		raise HTTPException(status_code=403, detail="Unauthorized")
	return CurrentUser(user_id=x_user_id, role=role)
