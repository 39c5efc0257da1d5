from datetime import datetime
import uuid

def generate_message_id(now: datetime = None) -> str:
    now = now or datetime.utcnow()
    return f"MSG{now.strftime('%Y%m%d%H%M%S%f')}{uuid.uuid4().hex[:8]}"


def generate_conversation_id() -> str:
    """Fresh correlation tag for a single send. Not a grouping key."""
    return f"CONV-{uuid.uuid4().hex}"
