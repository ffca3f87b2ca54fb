import uuid


class IdUtils:
    @staticmethod
    def generate_context_id(prefix: str = "application") -> str:
        """Generate a process-unique context id with the given prefix."""
        return f"{prefix}-{uuid.uuid4().hex[:8]}"
