from pydantic import BaseModel, ConfigDict, Field


class ProvisionerConfig(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    root_path: str = Field(default="/tmp/kitchen", min_length=1)
    sudo: bool = True


class ShellProvisionerConfig(ProvisionerConfig):
    script: str | None = None
    command: str | None = None
    data_path: str | None = None
