from pydantic import BaseModel, ConfigDict, Field


class SSHBaseConfig(BaseModel):
    """Driver configuration; unknown keys such as ssh_key or forward_agent are kept as extras."""

    model_config = ConfigDict(extra="allow", frozen=True)

    sudo: bool = True
    port: int = Field(default=22, ge=1, le=65535)
    http_proxy: str | None = None
    https_proxy: str | None = None


class ProxyConfig(SSHBaseConfig):
    host: str = Field(min_length=1)
    username: str | None = None
    reset_command: str | None = None
    wait_for_ssh: bool = True
