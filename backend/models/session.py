from pydantic import BaseModel, ConfigDict


class SessionContext(BaseModel):
    """Who the engine is acting for. Passed in explicitly, never looked up globally."""

    model_config = ConfigDict(frozen=True)

    auth_token: str | None = None
    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.auth_token)

    def headers(self) -> dict[str, str]:
        if not self.auth_token:
            return {}
        return {"Authorization": f"Bearer {self.auth_token}"}
