from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class RequestContext:
    """Who is asking. Built once per request and passed to services explicitly."""

    viewer_id: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    client_key: str = "anonymous"
    cache: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return self.viewer_id is not None

    @property
    def session_key(self) -> str:
        """Key that groups one caller's requests (e.g. successive search keystrokes)."""
        if self.viewer_id:
            return f"user:{self.viewer_id}"
        return f"anon:{self.client_key}"
